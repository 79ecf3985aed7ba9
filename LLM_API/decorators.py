import functools
import logging
import time
from typing import Callable, TypeVar

T = TypeVar('T')

LOGGER = logging.getLogger("LLM_API")


def log_request(func: Callable[..., T]) -> Callable[..., T]:
    """Log provider calls, their duration and any error reported on the response"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> T:
        provider = args[0].__class__.__name__ if args else "Unknown"
        LOGGER.debug("[%s] Calling %s", provider, func.__name__)
        started = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            LOGGER.warning("[%s] %s raised: %s", provider, func.__name__, e)
            raise

        elapsed = time.perf_counter() - started
        error = getattr(result, "error", None)
        if error:
            LOGGER.warning(
                "[%s] %s failed after %.2fs: %s", provider, func.__name__, elapsed, error
            )
        else:
            LOGGER.info("[%s] %s succeeded in %.2fs", provider, func.__name__, elapsed)
        return result

    return wrapper
