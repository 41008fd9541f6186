import functools
from collections.abc import Callable
from typing import Any

from electrsd.logging_config import get_logger


def fail_gracefully[**P, R](logger: Any | None = None) -> Callable[[Callable[P, R]], Callable[P, R | None]]:
    """
    Log and swallow any exception raised by the wrapped function, returning None instead.
    Only for teardown paths where raising would mask the error that got us there.
    """
    if logger is None:
        logger = get_logger(__name__)

    def decorator(f: Callable[P, R]):
        @functools.wraps(f)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R | None:
            try:
                return f(*args, **kwargs)
            except Exception as e:
                logger.exception(f"An error occurred in {f.__name__}: {e}")
                return None

        return wrapper
    return decorator
