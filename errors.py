from typing import Optional


class ReviewBotError(Exception):
    """Base class for every error raised by the review bot."""


class ConfigurationError(ReviewBotError):
    pass


class DiffParseError(ReviewBotError):
    pass


class ResponseParseError(ReviewBotError):
    """The model answered, but the body was not JSON."""


class TransportError(ReviewBotError):
    pass


class GitHubAPIError(TransportError):
    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ModelCallError(TransportError):
    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts
