"""Retry logic with exponential backoff for storage calls.

Retries transient storage failures (HTTP 429, 502, 503, 504 and dropped
connections) with exponential backoff (1s, 2s, 4s) and fails fast for
everything else.
"""

import time
import logging
from typing import Callable, TypeVar

from .errors import StorageUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# HTTP status codes treated as transient
TRANSIENT_STATUS_CODES = {429, 502, 503, 504}

MAX_RETRIES = 3


def retry_on_transient(func: Callable[..., T], *args, **kwargs) -> T:
    """Retry function on transient storage errors with exponential backoff.

    Args:
        func: The function to execute with retry logic
        *args: Positional arguments to pass to the function
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        StorageUnavailableError: If the failure persists after 3 retries
        Other exceptions: Passed through immediately without retry

    Example:
        >>> data = retry_on_transient(store.get, "sites/abc/latest.json")
    """
    for retry_num in range(MAX_RETRIES + 1):  # 0, 1, 2, 3 = 4 attempts total
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not _is_transient_error(e):
                raise

            if retry_num >= MAX_RETRIES:
                logger.error(
                    f"Transient storage failure persisted after {MAX_RETRIES} retries, giving up"
                )
                raise StorageUnavailableError(
                    getattr(e, 'endpoint', 'storage'),
                    f"failure persisted after {MAX_RETRIES} retries: {e}",
                ) from e

            wait_time = 2 ** retry_num
            logger.info(
                f"Transient storage failure, retrying in {wait_time}s "
                f"(retry {retry_num + 1}/{MAX_RETRIES})"
            )
            time.sleep(wait_time)

    # Unreachable: the loop either returns or raises
    raise StorageUnavailableError('storage', 'retry loop exhausted')


def _is_transient_error(exception: Exception) -> bool:
    """Check if an exception represents a transient storage failure."""
    if isinstance(exception, StorageUnavailableError):
        return True

    status_code = getattr(exception, 'status_code', None)
    if status_code in TRANSIENT_STATUS_CODES:
        return True

    response = getattr(exception, 'response', None)
    if response is not None and getattr(response, 'status_code', None) in TRANSIENT_STATUS_CODES:
        return True

    return False
