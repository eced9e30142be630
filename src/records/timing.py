"""Call timing for coroutine functions.

Wrap the specific calls that need timing explicitly:

    class ProductService:
        @timed("reserve stock")
        async def reserve_stock(self, product_id: int, quantity: int) -> Product: ...

Each call logs ``call_completed`` with its duration, or ``call_failed`` with
the duration and exception type before re-raising.
"""

import functools
import time
from collections.abc import Awaitable, Callable

from records.logging import get_logger

logger = get_logger(__name__)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)


def timed[**P, R](
    description: str | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorate a coroutine function so every call logs how long it took.

    Args:
        description: Label for the log line; defaults to the function's qualified name.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        label = description or func.__qualname__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                logger.warning(
                    "call_failed",
                    call=label,
                    duration_ms=_elapsed_ms(start),
                    error=type(exc).__name__,
                )
                raise
            logger.info("call_completed", call=label, duration_ms=_elapsed_ms(start))
            return result

        return wrapper

    return decorator
