"""
grammarevo Asynchronous Utilities.

This module provides the small set of asyncio helpers the engine needs:
calling sync-or-async callables uniformly and gathering awaitables under a
concurrency limit.
"""

import asyncio
import inspect
from typing import (
    Any, Awaitable, Callable, Iterable, List, TypeVar, Union,
)

# Type variables
T = TypeVar('T')
SyncOrAsyncCallable = Union[Callable[..., T], Callable[..., Awaitable[T]]]


async def call_async_safe(func: SyncOrAsyncCallable[T], *args: Any, **kwargs: Any) -> T:
    """Call a function asynchronously, whether it's async or not.

    Args:
        func: Function to call
        *args: Positional arguments
        **kwargs: Keyword arguments

    Returns:
        Function result
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result


async def gather_bounded(
    awaitables: Iterable[Awaitable[T]],
    limit: int,
    return_exceptions: bool = False,
) -> List[Union[T, BaseException]]:
    """Await many awaitables with at most ``limit`` running at once.

    Results are returned in input order.

    Args:
        awaitables: Awaitables to run
        limit: Maximum concurrency (values below 1 are treated as 1)
        return_exceptions: Return raised exceptions in place of results
            instead of propagating the first one

    Returns:
        List of results (or exceptions)
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _run_with_semaphore(awaitable: Awaitable[T]) -> T:
        async with semaphore:
            return await awaitable

    return await asyncio.gather(
        *[_run_with_semaphore(awaitable) for awaitable in awaitables],
        return_exceptions=return_exceptions,
    )
