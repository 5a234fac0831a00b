"""Bounded retry with linearly growing delay for async operations."""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    retry_count: int = 3,
    delay_seconds: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "operation",
    on_retry: Optional[Callable[[], None]] = None,
) -> T:
    """Run ``operation``, retrying up to ``retry_count`` times on ``retry_on``.

    The wait before retry n (0-based) is ``delay_seconds * (n + 1)``. The last
    exception is re-raised once retries are exhausted.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        retry_count: Retries after the first attempt
        delay_seconds: Base delay
        retry_on: Exception types that trigger a retry
        sleep: Awaitable sleep, injectable for tests
        label: Name used in log messages
        on_retry: Called before each retry
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except retry_on as e:
            if attempt >= retry_count:
                logger.error(f"[Retry] {label} failed after {attempt + 1} attempts: {e}")
                raise
            delay = delay_seconds * (attempt + 1)
            logger.warning(
                f"[Retry] {label} attempt {attempt + 1} failed: {e}; retrying in {delay:.1f}s"
            )
            if on_retry is not None:
                on_retry()
            await sleep(delay)
            attempt += 1
