"""Exponential-backoff retry policy for fallible async operations.

Retry policy:
    Attempt `operation()` up to `max_retries` times. After a failed attempt
    with zero-based index `i` (that is not the last), sleep
    `base_delay * 2 ** i` seconds and try again. The last failure propagates
    unchanged. No jitter and no circuit breaker: every call starts from a
    clean slate.

Error classification:
    `should_retry` decides whether a given exception is worth another
    attempt. `retry_any` (default) retries everything. `retry_transient`
    retries transport errors and 408/429/5xx upstream statuses only, so
    permanent client errors surface after a single call.

Concurrency:
    Delays are `await`ed, so waiting on one call never blocks other tasks on
    the event loop.
"""

import asyncio
import logging

import httpx

from fusion_relay.core.errors import UpstreamError

logger = logging.getLogger(__name__)

RETRYABLE_CLIENT_STATUS_CODES = (408, 429)


def retry_any(exc: BaseException) -> bool:
    return True


def retry_transient(exc: BaseException) -> bool:
    """Return True for failures that may succeed on a later attempt."""
    if isinstance(exc, httpx.RequestError):
        return True
    if isinstance(exc, UpstreamError):
        return exc.status_code in RETRYABLE_CLIENT_STATUS_CODES or exc.status_code >= 500
    return False


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before the attempt following zero-based `attempt`."""
    return base_delay * (2 ** attempt)


async def with_retry(
    operation,
    max_retries: int = 3,
    base_delay: float = 1.0,
    should_retry=None,
    sleep=asyncio.sleep,
):
    """Run `operation()` under the retry policy and return its result.

    Args:
        operation: Zero-argument callable returning an awaitable.
        max_retries: Maximum number of attempts (values below 1 mean 1).
        base_delay: Delay in seconds after the first failed attempt.
        should_retry: Exception classifier; defaults to `retry_any`.
        sleep: Awaitable sleep function, injectable for tests.

    Raises:
        The exception from the final attempt, or the first exception the
        classifier rejects.
    """
    attempts = max(1, int(max_retries))
    classify = should_retry or retry_any

    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as exc:
            if attempt == attempts - 1 or not classify(exc):
                raise
            delay = backoff_delay(attempt, base_delay)
            logger.warning(
                "Attempt %d/%d failed (%s); retrying in %.2fs",
                attempt + 1,
                attempts,
                exc,
                delay,
            )
            await sleep(delay)
