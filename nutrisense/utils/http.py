"""Retry/backoff helpers for clients calling the NutriSense API."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")

# Failures carrying these fragments are validation errors; retrying cannot help.
NON_RETRYABLE_MARKERS: tuple[str, ...] = (
    "exceeds",
    "required",
    "invalid",
    "cannot be empty",
)

logger = logging.getLogger(__name__)


class RetryConfig:
    def __init__(self, *, attempts: int = 3, backoff_seconds: float = 1.5) -> None:
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.attempts = attempts
        self.backoff_seconds = backoff_seconds


ANALYZE_RETRY = RetryConfig(attempts=3)
CHAT_RETRY = RetryConfig(attempts=2)
TRANSCRIBE_RETRY = RetryConfig(attempts=2)


def is_retryable(exc: BaseException) -> bool:
    message = str(exc).lower()
    return not any(marker in message for marker in NON_RETRYABLE_MARKERS)


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    retry_config: RetryConfig | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the attempt budget is spent.

    Non-retryable failures are re-raised immediately. Otherwise the wrapper
    sleeps ``backoff_seconds * attempt`` between attempts and finally raises
    the last error observed.
    """
    config = retry_config or RetryConfig()
    attempt = 0
    last_exception: Exception | None = None

    while attempt < config.attempts:
        attempt += 1
        try:
            return await operation()
        except Exception as exc:
            if not is_retryable(exc):
                raise
            last_exception = exc
            if attempt >= config.attempts:
                break
            delay = config.backoff_seconds * attempt
            logger.warning(
                "Attempt %d/%d failed (%s); retrying in %.1fs.",
                attempt,
                config.attempts,
                exc,
                delay,
            )
            await sleep(delay)

    if last_exception is not None:
        raise last_exception
    raise RuntimeError("Operation failed without raising an exception")


__all__ = [
    "ANALYZE_RETRY",
    "CHAT_RETRY",
    "NON_RETRYABLE_MARKERS",
    "RetryConfig",
    "TRANSCRIBE_RETRY",
    "call_with_retry",
    "is_retryable",
]
