"""
Bounded retry for provider calls.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from opentelemetry import trace

from .config import InferenceSettings
from .errors import TransientNetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """How often and how long to wait between provider attempts."""
    max_retries: int = 3
    delay: float = 1.0
    backoff: str = "fixed"  # fixed, exponential
    jitter: bool = False
    max_delay: float = 30.0

    @classmethod
    def from_settings(cls, settings: InferenceSettings) -> "RetryPolicy":
        return cls(
            max_retries=max(0, int(settings.max_retries)),
            delay=max(0.0, float(settings.retry_delay)),
            backoff=settings.backoff,
            jitter=settings.jitter,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def compute_delay(self, attempt: int) -> float:
        """Delay before the attempt following ``attempt`` (1-based)."""
        if self.backoff == "exponential":
            delay = min(self.delay * (2 ** (attempt - 1)), self.max_delay)
        else:
            delay = self.delay
        if self.jitter and delay > 0:
            delay = random.uniform(0, delay)
        return delay


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    description: str = "provider request",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run ``operation`` until it succeeds or the attempts run out.

    Only ``TransientNetworkError`` is retried; anything else propagates
    on the first failure. The error raised after the last attempt
    carries the total attempt count, and the count is recorded as the
    ``attempts`` attribute of the current span either way.
    """
    span = trace.get_current_span()
    attempt = 0
    while True:
        attempt += 1
        try:
            result = await operation()
        except TransientNetworkError as e:
            e.attempts = attempt
            if attempt >= policy.max_attempts:
                span.set_attribute("attempts", attempt)
                logger.error(f"{description} failed after {attempt} attempts: {e.message}")
                raise
            remaining = policy.max_attempts - attempt
            logger.warning(
                f"{description} failed, retrying ({remaining} attempts left): {e.message}"
            )
            await sleep(policy.compute_delay(attempt))
        else:
            span.set_attribute("attempts", attempt)
            return result
