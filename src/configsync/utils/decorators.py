"""
ConfigSync Utility Decorators

Retry and latency decorators. The engine itself never retries; retry_async
is offered to callers who want to layer a retry policy around load() or a
source's resolve().
"""

import asyncio
import time
from collections.abc import Callable
from functools import wraps
from typing import Any

from configsync.utils.logging import get_logger

logger = get_logger(__name__)


def retry_async(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple = (Exception,),
) -> Callable:
    """Async retry decorator with exponential backoff."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            last_exception = None
            current_delay = delay

            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt == max_attempts - 1:
                        break

                    logger.warning(
                        f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: {e}"
                    )
                    await asyncio.sleep(current_delay)
                    current_delay *= backoff

            logger.error(f"All {max_attempts} attempts failed for {func.__name__}")
            raise last_exception

        return wrapper
    return decorator


def measure_latency(operation_name: str | None = None) -> Callable:
    """Decorator to measure and log coroutine execution latency."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            op_name = operation_name or func.__name__
            start_time = time.perf_counter()
            success = False

            try:
                result = await func(*args, **kwargs)
                success = True
                return result
            finally:
                latency_ms = (time.perf_counter() - start_time) * 1000
                logger.debug(
                    "latency_measurement",
                    operation=op_name,
                    latency_ms=round(latency_ms, 2),
                    success=success,
                )

        return wrapper

    return decorator
