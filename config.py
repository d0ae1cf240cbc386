# config.py
import os
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, SecretStr

from errors import ConfigurationError
from utils.path_filter import parse_exclude_patterns

DEFAULT_MODEL = "gemini-2.0-flash"
GITHUB_API_BASE = "https://api.github.com"
GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"

_TRUTHY = {"1", "true", "yes", "on"}


def _read(env: Mapping[str, str], name: str, default: str = "") -> str:
    """
    GitHub Actions exposes `with:` inputs as INPUT_<NAME>; plain env vars
    (or a local .env) are the fallback.
    """
    value = env.get(f"INPUT_{name}")
    if value is None or value == "":
        value = env.get(name, default)
    return value.strip() if value else default


class ReviewSettings(BaseModel):
    github_token: Optional[SecretStr] = None
    gemini_api_key: Optional[SecretStr] = None
    model: str = DEFAULT_MODEL
    exclude: List[str] = []
    guidelines: str = ""
    include_file_content: bool = False
    github_api_url: str = GITHUB_API_BASE
    github_graphql_url: str = GITHUB_GRAPHQL_URL
    log_level: str = "INFO"

    # decoding
    temperature: float = 0.2
    top_p: float = 1.0
    max_output_tokens: int = 700

    # retry for the model call only
    max_attempts: int = 3
    retry_delay_seconds: float = 1.0

    batch_size: int = 50

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ReviewSettings":
        if env is None:
            load_dotenv()
            env = os.environ

        github_token = _read(env, "GITHUB_TOKEN")
        gemini_api_key = _read(env, "GEMINI_API_KEY")
        return cls(
            github_token=SecretStr(github_token) if github_token else None,
            gemini_api_key=SecretStr(gemini_api_key) if gemini_api_key else None,
            model=_read(env, "GEMINI_MODEL", DEFAULT_MODEL),
            exclude=parse_exclude_patterns(_read(env, "EXCLUDE")),
            # guidelines are free text, keep inner whitespace as written
            guidelines=env.get("INPUT_GUIDELINES") or env.get("GUIDELINES", ""),
            include_file_content=_read(env, "INCLUDE_FILE_CONTENT").lower() in _TRUTHY,
            github_api_url=_read(env, "GITHUB_API_URL", GITHUB_API_BASE).rstrip("/"),
            github_graphql_url=_read(env, "GITHUB_GRAPHQL_URL", GITHUB_GRAPHQL_URL),
            log_level=_read(env, "LOG_LEVEL", "INFO").upper(),
        )

    def require_github_token(self) -> str:
        if not self.github_token:
            raise ConfigurationError("GITHUB_TOKEN is missing")
        return self.github_token.get_secret_value()

    def require_gemini_api_key(self) -> str:
        if not self.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY is missing")
        return self.gemini_api_key.get_secret_value()
