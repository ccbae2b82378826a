"""ASO_Scores - Retry decorator for marketplace HTTP calls."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def is_transient(exc: BaseException) -> bool:
    """Connection problems, throttling and 5xx answers are worth retrying."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return False


def retry_with_backoff(
    max_attempts: int = 3,
    initial_delay: float = 0.5,
    backoff_factor: float = 2.0,
    max_delay: float = 8.0,
    retry_if: Optional[Callable[[BaseException], bool]] = None,
) -> Callable:
    """Retry an async call with exponential backoff.

    Args:
        max_attempts: Attempts in total, the first call included.
        initial_delay: Seconds to wait before the second attempt.
        backoff_factor: Multiplier applied to the delay after each attempt.
        max_delay: Upper bound for a single wait.
        retry_if: Predicate choosing which exceptions are retried; any
            other exception propagates at once. Defaults to
            :func:`is_transient`.
    """
    should_retry = retry_if or is_transient

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            attempt = 1
            while True:
                try:
                    return await fn(*args, **kwargs)
                except Exception as exc:
                    if not should_retry(exc):
                        raise
                    if attempt >= max_attempts:
                        logger.error(
                            "%s gave up after %d attempts: %s",
                            fn.__name__, attempt, exc,
                        )
                        raise
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        fn.__name__, attempt, max_attempts, exc, delay,
                    )
                await asyncio.sleep(delay)
                delay = min(delay * backoff_factor, max_delay)
                attempt += 1

        return wrapper

    return decorator
