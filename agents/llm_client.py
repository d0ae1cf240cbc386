# agents/llm_client.py
import json
import logging
from typing import Any, List, Optional

from google import genai
from google.genai import types
from pydantic import BaseModel, ValidationError

from config import ReviewSettings
from errors import ModelCallError, ResponseParseError
from utils.retry import RetryPolicy

logger = logging.getLogger(__name__)

REVIEWS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "reviews": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "lineNumber": types.Schema(type=types.Type.INTEGER),
                    "changeType": types.Schema(
                        type=types.Type.STRING,
                        enum=["+", "-"],
                        description="Either '+' for additions or '-' for deletions",
                    ),
                    "reviewComment": types.Schema(type=types.Type.STRING),
                },
                required=["lineNumber", "changeType", "reviewComment"],
            ),
        ),
    },
    required=["reviews"],
)


class ReviewEnvelope(BaseModel):
    # items are validated one by one in agents.comment_mapper
    reviews: List[Any]


def _extract_json(text: str) -> Any:
    """
    Decode the model body. Models sometimes wrap JSON in ```json fences
    even in JSON mode, so fall back to the outermost {...} span.
    """
    try:
        return json.loads(text)
    except ValueError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(text[start:end + 1])
        except ValueError:
            pass

    raise ResponseParseError(f"Model response is not JSON: {text[:200]!r}")


def parse_reviews(text: Optional[str]) -> List[Any]:
    """Raw `reviews` items from a model body; [] when there is nothing usable."""
    text = (text or "").strip()
    if not text:
        return []

    payload = _extract_json(text)
    try:
        envelope = ReviewEnvelope.model_validate(payload)
    except ValidationError as e:
        logger.warning("Model response does not match the reviews schema, ignoring it: %s", e)
        return []
    return envelope.reviews


class ReviewModelClient:
    """Gemini wrapper returning the `reviews` array of a schema-constrained completion."""

    def __init__(self, settings: ReviewSettings, client: Optional[genai.Client] = None,
                 retry_policy: Optional[RetryPolicy] = None, sleep=None):
        self.model = settings.model
        self.client = client or genai.Client(api_key=settings.require_gemini_api_key())
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.max_attempts,
            delay=settings.retry_delay_seconds,
        )
        self.sleep = sleep
        self.generation_config = types.GenerateContentConfig(
            temperature=settings.temperature,
            top_p=settings.top_p,
            max_output_tokens=settings.max_output_tokens,
            response_mime_type="application/json",
            response_schema=REVIEWS_SCHEMA,
        )

    async def _attempt(self, prompt: str) -> List[Any]:
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=self.generation_config,
        )
        text = response.text
        logger.debug("Model response: %s", text)
        return parse_reviews(text)

    async def review(self, prompt: str) -> List[Any]:
        kwargs = {"label": "Model call"}
        if self.sleep is not None:
            kwargs["sleep"] = self.sleep

        try:
            return await self.retry_policy.run(lambda: self._attempt(prompt), **kwargs)
        except Exception as e:
            raise ModelCallError(
                f"Model call failed after {self.retry_policy.max_attempts} attempts: {e}",
                attempts=self.retry_policy.max_attempts,
            ) from e
