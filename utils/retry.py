# utils/retry.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_fixed

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry: `max_attempts` tries, `delay` seconds apart, no backoff."""

    max_attempts: int = 3
    delay: float = 1.0

    async def run(
        self,
        fn: Callable[[], Awaitable[T]],
        *,
        label: str = "operation",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> T:
        """Await `fn` until it succeeds; re-raise its last exception once attempts run out."""

        def _log_failure(state: RetryCallState) -> None:
            logger.error(
                "%s failed (attempt %d of %d): %s",
                label,
                state.attempt_number,
                self.max_attempts,
                state.outcome.exception(),
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.delay),
            after=_log_failure,
            sleep=sleep,
            reraise=True,
        )
        return await retrying(fn)
