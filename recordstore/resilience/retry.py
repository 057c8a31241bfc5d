"""
Retry policy for transient record store failures.

Exponential backoff via tenacity. Only failures the backend classifies as
transient should be passed in ``exceptions``; everything else propagates on
the first attempt.
"""

import logging

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


def with_retry(
    max_attempts: int = 3,
    initial_wait: float = 0.5,
    max_wait: float = 10.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
):
    """
    Retry decorator with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts (1 disables retry)
        initial_wait: Wait before the second attempt in seconds, doubled after each retry
        max_wait: Upper bound on a single wait in seconds
        exceptions: Exception types to retry on

    Returns:
        Retry decorator (works on sync and async callables)

    Usage:
        @with_retry(max_attempts=3, exceptions=(ServiceUnavailableError,))
        async def fetch_page():
            return await client.post(...)
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=initial_wait, max=max_wait),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
