"""Retry GET requests to z/OSMF that fail in transit.

Writes (creating a data set, submitting a job) are never wrapped: they are
issued exactly once and any failure propagates.

Usage:
    send = retry_with_exponential_backoff(max_attempts=3)(send_request)
"""

import functools
import logging
import random
import time
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

import requests

from zosctl.log_sanitizer import LogSanitizer

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.ChunkedEncodingError,
)

MAX_LOGGED_ERROR = 200


def is_retryable(exc: Exception) -> bool:
    """Whether another attempt may clear exc.

    Certificate failures are connection errors too, but never clear on their own.
    """
    return isinstance(exc, TRANSIENT_ERRORS) and not isinstance(exc, requests.exceptions.SSLError)


def backoff_delays(initial_delay: float, max_delay: float, jitter: bool) -> Iterator[float]:
    """Yield the pause before each retry: doubling, +/-25% jitter, capped at max_delay."""
    delay = initial_delay
    while True:
        pause = delay + random.uniform(-delay / 4, delay / 4) if jitter else delay
        yield min(pause, max_delay)
        delay *= 2


def retry_with_exponential_backoff(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    jitter: bool = True,
) -> Callable[[F], F]:
    """Retry the decorated call on transient transport errors.

    Args:
        max_attempts: Total attempts including the first; 1 disables retry
        initial_delay: Seconds before the first retry, doubled after each one
        max_delay: Upper bound for any single pause
        jitter: Spread each pause by up to 25% either way
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delays = backoff_delays(initial_delay, max_delay, jitter)
            attempt = 1
            while True:
                try:
                    result = func(*args, **kwargs)
                except TRANSIENT_ERRORS as e:
                    if attempt >= max_attempts or not is_retryable(e):
                        logger.error(
                            f"{func.__name__} gave up on attempt {attempt}/{max_attempts}: {_describe(e)}"
                        )
                        raise
                    pause = next(delays)
                    logger.warning(
                        f"{func.__name__} attempt {attempt}/{max_attempts} failed, "
                        f"retrying in {pause:.2f}s: {_describe(e)}"
                    )
                    time.sleep(pause)
                    attempt += 1
                    continue
                if attempt > 1:
                    logger.info(f"{func.__name__} succeeded on attempt {attempt}/{max_attempts}")
                return result

        return wrapper  # type: ignore[return-value]

    return decorator


def _describe(exc: Exception) -> str:
    text = LogSanitizer.sanitize(str(exc))
    if len(text) > MAX_LOGGED_ERROR:
        text = text[:MAX_LOGGED_ERROR] + "..."
    return text


__all__ = [
    "backoff_delays",
    "is_retryable",
    "retry_with_exponential_backoff",
]
