"""
Async executor for blocking Stripe SDK calls.

The stripe library is synchronous; its calls run in a small thread pool so
they do not block the asyncio event loop while Stripe answers. The pool is
created by the app factory and lives on app.state; nothing here is global.
"""
import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_executor(max_workers: int) -> ThreadPoolExecutor:
    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="stripe_")
    logger.info(f"Thread pool executor initialized (max_workers={max_workers})")
    return executor


async def run_blocking(
    executor: Optional[ThreadPoolExecutor],
    func: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    Run a blocking (synchronous) function in the given thread pool.

    With executor=None the event loop's default pool is used.
    Use for: Checkout Session create / retrieve.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        executor,
        functools.partial(func, *args, **kwargs),
    )


def shutdown_executor(executor: Optional[ThreadPoolExecutor]) -> None:
    """Shutdown the thread pool on app lifecycle end."""
    if executor is not None:
        executor.shutdown(wait=True)
        logger.info("Thread pool executor shutdown")
