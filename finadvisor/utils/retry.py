"""Retry decorator with exponential backoff."""
import time
import functools
from typing import Callable, Type, Tuple
from .exceptions import RetryableError
from .logger import get_logger

logger = get_logger()


def retry_with_backoff(
    max_attempts: int = 1,
    backoff_factor: float = 2.0,
    retryable_exceptions: Tuple[Type[Exception], ...] = (RetryableError,)
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_attempts: Total number of attempts, including the first call
        backoff_factor: Multiplier for wait time between attempts
        retryable_exceptions: Tuple of exception types that trigger retry
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    if attempt == max_attempts - 1:
                        if max_attempts > 1:
                            logger.error(f"Max attempts ({max_attempts}) exceeded for {func.__name__}: {e}")
                        raise

                    wait_time = backoff_factor ** attempt
                    logger.warning(
                        f"Retry {attempt + 1}/{max_attempts - 1} for {func.__name__} "
                        f"after {wait_time:.1f}s: {e}"
                    )
                    time.sleep(wait_time)

        return wrapper
    return decorator
