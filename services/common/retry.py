"""
Retry helper with exponential backoff for async persistence calls.

Used uniformly by the import pipeline for existence checks, occupant
lookups and resident creation.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


async def with_retry(operation: Callable[[], Awaitable[T]],
                     max_retries: int = 3,
                     base_delay: float = 1.0,
                     should_retry: Optional[Callable[[T], bool]] = None,
                     description: str = "operation",
                     sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep) -> T:
    """
    Run ``operation`` and retry it on failure.

    The first attempt is followed by up to ``max_retries`` retries, waiting
    ``base_delay * 2 ** attempt`` seconds before each one (1s, 2s, 4s with
    the defaults).

    Args:
        operation: Zero-argument coroutine function to call
        max_retries: Number of retries after the first attempt
        base_delay: Delay before the first retry, doubled each time
        should_retry: Predicate on a returned value; True means the value is
            a negative result worth retrying (e.g. a failed Result)
        description: Label used in log entries
        sleep: Awaitable sleep, injectable for tests

    Returns:
        The first accepted value, or the last value if every attempt
        produced a negative result.

    Raises:
        The last exception, once retries are exhausted.
    """
    attempt = 0
    while True:
        try:
            value = await operation()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if attempt >= max_retries:
                logger.error("Retries exhausted",
                             operation=description,
                             attempts=attempt + 1,
                             error=str(e))
                raise
            logger.warning("Attempt failed, retrying",
                           operation=description,
                           attempt=attempt + 1,
                           error=str(e))
        else:
            if should_retry is None or not should_retry(value):
                return value
            if attempt >= max_retries:
                logger.warning("Retries exhausted with negative result",
                               operation=description,
                               attempts=attempt + 1)
                return value
            logger.warning("Negative result, retrying",
                           operation=description,
                           attempt=attempt + 1)

        await sleep(base_delay * (2 ** attempt))
        attempt += 1
