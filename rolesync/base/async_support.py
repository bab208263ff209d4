"""
Async support for Rolesync.

Async orchestrators can await a deploy or remove without blocking their
event loop. The sequential reconcile path is unchanged: it runs to
completion in a worker thread via :func:`asyncio.to_thread`.

Usage::

    component = RoleComponent(ctx)
    outputs = await component.adeploy(name="my-role")
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from typing import Any, Callable, Coroutine, TypeVar

T = TypeVar("T")


def async_wrap(
    fn: Callable[..., T],
) -> Callable[..., Coroutine[Any, Any, T]]:
    """Return an async version of *fn* that runs it in a thread.

    Args:
        fn: A synchronous callable to wrap.

    Returns:
        An async callable with the same parameters and return type.
    """

    @functools.wraps(fn)
    async def _wrapper(*args: Any, **kwargs: Any) -> T:
        return await asyncio.to_thread(fn, *args, **kwargs)

    return _wrapper


class AsyncMixin:
    """Mixin that adds an ``a<method>`` coroutine for each listed method.

    Subclasses name the methods to wrap in ``async_methods``; the wrappers
    are created once at class definition time and never replace a method
    the subclass defines itself.
    """

    async_methods: tuple[str, ...] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for name in cls.async_methods:
            attr = getattr(cls, name, None)
            if attr is None or inspect.iscoroutinefunction(attr):
                continue
            async_name = f"a{name}"
            if async_name not in vars(cls):
                setattr(cls, async_name, async_wrap(attr))
