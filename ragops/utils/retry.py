"""Retry policy with exponential backoff for rate-limited upstream APIs."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryPredicate = Callable[[BaseException], bool]
Sleeper = Callable[[float], Awaitable[None]]


def extract_status(error: BaseException) -> Optional[int]:
    """Return the HTTP status carried by an httpx or OpenAI SDK error, if any."""

    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return status
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status
    return None


def is_retryable(error: BaseException) -> bool:
    """429 and 5xx are transient; everything else fails fast."""

    status = extract_status(error)
    if status is None:
        return False
    return status == 429 or status >= 500


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    should_retry: Optional[RetryPredicate] = None,
    label: str = "operation",
    sleep: Sleeper = asyncio.sleep,
) -> T:
    """Await `fn` until it succeeds or the attempt ceiling is reached.

    The delay doubles after every failed attempt. When `should_retry` rejects
    an error, or the last attempt fails, the original exception propagates.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    delay = base_delay
    for attempt in range(1, max_attempts + 1):
        try:
            return await fn()
        except Exception as exc:
            if should_retry is not None and not should_retry(exc):
                raise
            if attempt == max_attempts:
                logger.warning("%s failed after %s attempts: %s", label, attempt, exc)
                raise
            logger.warning(
                "%s failed (attempt %s/%s), retrying in %.1fs: %s",
                label,
                attempt,
                max_attempts,
                delay,
                exc,
            )
            await sleep(delay)
            delay *= 2

    raise RuntimeError("unreachable")  # pragma: no cover


__all__ = ["extract_status", "is_retryable", "retry_with_backoff"]
