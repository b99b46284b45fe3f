import functools
import inspect
from typing import Any, Awaitable, Callable, ParamSpec

from .hook_result import HookResult

P = ParamSpec("P")


def hook(
    func: Callable[P, Awaitable[Any]] | None = None,
    *,
    name: str | None = None,
):
    """
    Mark an async build-pipeline operation as a hook. The wrapped callable
    always returns a HookResult; exceptions raised by the operation are
    captured in ``HookResult.error`` instead of propagating.
    """

    def wraps(func: Callable[P, Awaitable[Any]]) -> Callable[P, Awaitable[HookResult]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"Hook {func.__qualname__} must be an async function")

        hook_name = name or func.__name__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> HookResult:
            try:
                value = await func(*args, **kwargs)

            except Exception as hook_error:
                return HookResult(
                    name=hook_name,
                    ok=False,
                    error=hook_error,
                )

            return HookResult(
                name=hook_name,
                value=value,
            )

        wrapper.is_hook = True
        wrapper.hook_name = hook_name

        return wrapper

    if func is not None:
        return wraps(func)

    return wraps
