"""Exponential backoff retry decorator for provider HTTP calls."""

import functools
import time

from .log import get_logger


def with_retry(max_retries: int = 1, base_delay: float = 1.0, exceptions: tuple = (Exception,)):
    """Decorator: retry with exponential backoff when one of `exceptions` is raised.

    Delays: base_delay * 2^attempt (1s -> 2s -> 4s by default). Exceptions
    outside `exceptions` propagate immediately.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        logger.error(
                            "%s failed after %d attempts: %s",
                            func.__name__, max_retries + 1, e,
                        )
                        raise
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        "%s failed (attempt %d/%d): %s - retrying in %.1fs",
                        func.__name__, attempt + 1, max_retries + 1, e, delay,
                    )
                    time.sleep(delay)
        return wrapper
    return decorator
