"""
Go-style deferred clean-up for async code.

Lets a handler register clean-up functions as it acquires resources instead
of nesting try/finally or async with blocks. Registered functions run in LIFO
order once the handler settles, before control returns to the caller.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, Concatenate, ParamSpec, TypeVar

from with_defer.concurrency.aggregate_error import DEFERRED_CLEANUP_ERROR_MESSAGE, AggregateError
from with_defer.config.logging_config import get_logger

log = get_logger(__name__)

T = TypeVar("T")
P = ParamSpec("P")

CleanupCallback = Callable[[], Any]
DeferFunction = Callable[[CleanupCallback], None]
FunctionWithCleanup = Callable[[DeferFunction], Any]


class DeferClosedError(RuntimeError):
    """Raised when defer() is called after its handler has completed."""

    pass


async def _run_deferred(callbacks: list[CleanupCallback]) -> list[Any]:
    """Run each callback in list order, awaiting results, and collect failures."""
    errors: list[Any] = []
    for callback in callbacks:
        try:
            result = callback()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            log.warning(
                f"Deferred clean-up function {callback!r} failed: {e!r}",
                exc_info=True,
            )
            errors.append(e)
    return errors


async def run_with_defer(func: Callable[[DeferFunction], Awaitable[T] | T]) -> T:
    """
    Run a handler such that callbacks registered with its ``defer`` argument
    are called in LIFO order when it completes.

    This is conceptually similar to the ``defer`` statement in Go: register
    resources for disposal as they are created. Each deferred callback is
    awaited in turn, never concurrently. Exceptions raised by callbacks are
    collected without preventing the remaining callbacks from running.

    Args:
        func: Handler called with a single ``defer`` argument. It may be a
              plain function or return an awaitable.

    Returns:
        The value produced by the handler, unchanged.

    Raises:
        AggregateError: If any deferred callback raised. Its ``errors`` hold
            the callback exceptions in execution order. This takes precedence
            over an exception raised by the handler itself, which is kept as
            the AggregateError's ``__context__``.
        Exception: Whatever the handler raised, unchanged, when every
            deferred callback succeeded.
        BaseException: A non-Exception raised by the handler, such as
            asyncio.CancelledError, is re-raised after the deferred callbacks
            run, even if some of them failed. Their failures are only logged,
            so cancellation and asyncio.timeout() keep working.

    Example:
        async def copy_file(src: str, dst: str) -> None:
            async def handler(defer: DeferFunction) -> None:
                source = await aiofiles.open(src, "rb")
                defer(source.close)

                target = await aiofiles.open(dst, "wb")
                defer(target.close)

                await target.write(await source.read())

            await run_with_defer(handler)
    """
    on_cleanup: list[CleanupCallback] = []
    closed = False

    def defer(deferred_fn: CleanupCallback) -> None:
        if closed:
            raise DeferClosedError("defer() called after the handler completed")
        on_cleanup.insert(0, deferred_fn)
        log.debug(f"Registered deferred clean-up function {deferred_fn!r}")

    async def cleanup() -> list[Any]:
        nonlocal closed
        closed = True
        log.debug(f"Running {len(on_cleanup)} deferred clean-up functions")
        errors = await _run_deferred(on_cleanup)
        if errors:
            log.error(
                f"{len(errors)} of {len(on_cleanup)} deferred clean-up functions failed",
                extra={"failed": len(errors), "total": len(on_cleanup)},
            )
        return errors

    try:
        result = func(defer)
        if inspect.isawaitable(result):
            result = await result
    except Exception:
        errors = await cleanup()
        if errors:
            raise AggregateError(errors, DEFERRED_CLEANUP_ERROR_MESSAGE)
        raise
    except BaseException:
        # Cancellation and interpreter exits stay visible to the caller.
        await cleanup()
        raise

    errors = await cleanup()
    if errors:
        raise AggregateError(errors, DEFERRED_CLEANUP_ERROR_MESSAGE)
    return result


def with_defer(
    func: Callable[Concatenate[DeferFunction, P], Awaitable[T] | T],
) -> Callable[P, Coroutine[Any, Any, T]]:
    """
    Decorator that runs a function through run_with_defer.

    The decorated function receives ``defer`` as its first argument; callers
    pass only the remaining arguments.

    Example:
        @with_defer
        async def sync_dirs(defer: DeferFunction, src: str, dst: str) -> int:
            lock = await acquire_lock(dst)
            defer(lock.release)
            return await copy_tree(src, dst)

        copied = await sync_dirs("/data/in", "/data/out")
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        return await run_with_defer(lambda defer: func(defer, *args, **kwargs))

    return wrapper


__all__ = [
    "CleanupCallback",
    "DeferClosedError",
    "DeferFunction",
    "FunctionWithCleanup",
    "run_with_defer",
    "with_defer",
]
