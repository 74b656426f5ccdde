import asyncio
import functools
from typing import Any, Awaitable, Callable, Coroutine

import aiohttp

from utils.logger_utils import get_logger

logger = get_logger(__name__)


def async_retry(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    exceptions: tuple = (aiohttp.ClientError, asyncio.TimeoutError),
):
    """
    Retries an async function on network errors or timeouts with exponential backoff.
    The last error is re-raised once retries are exhausted.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            attempts = max_retries + 1
            for attempt in range(1, attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == attempts:
                        logger.error(f"Giving up on {func.__name__} after {attempts} attempts: {e!r}")
                        raise
                    logger.warning(
                        f"{func.__name__} attempt {attempt}/{attempts} failed ({e!r}), next try in {delay:.2f}s"
                    )
                    await asyncio.sleep(delay)
                    delay *= backoff_factor

        return wrapper

    return decorator


async def gather_with_concurrency(n: int, *tasks: Coroutine[Any, Any, Any]) -> list[Any]:
    """
    Awaits all coroutines, with at most n of them in flight at once.
    Results keep the order of the inputs.
    """
    semaphore = asyncio.Semaphore(n)

    async def sem_task(task: Coroutine[Any, Any, Any]) -> Any:
        async with semaphore:
            return await task

    return await asyncio.gather(*(sem_task(task) for task in tasks))
