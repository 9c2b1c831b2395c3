import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar, cast

from loggers import get_logger

logger = get_logger(__name__)


F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def with_retries(
    max_retries: int = 3,
    delay: float = 2,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
) -> Callable[[F], F]:
    """
    Retry an async callable on failure.

    The wrapped coroutine is retried up to ``max_retries`` times when it raises one
    of ``exceptions``. The delay between attempts grows linearly
    (``delay * attempt_number``). The last exception is re-raised once attempts run out.

    Lifecycle operations do not retry on their own; this is meant for startup
    checks such as pinging the flag store.

    Example:
        @with_retries(max_retries=5, delay=1)
        async def ping(): ...
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    def decorator(func: F) -> F:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    logger.warning(
                        "[RETRY] '%s' attempt %s/%s failed: %s",
                        func.__name__,
                        attempt,
                        max_retries,
                        e,
                    )
                    if attempt >= max_retries:
                        raise
                    await asyncio.sleep(delay * attempt)
            raise RuntimeError("Unreachable code")

        return cast(F, wrapper)

    return decorator
