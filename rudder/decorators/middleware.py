"""
Middleware and interceptor decorators.

Global middlewares are classes decorated with ``@Middleware``:

    @Middleware(type="before", priority=10)
    class Timing:
        async def use(self, ctx):
            ctx.state["started"] = time.monotonic()

Scoped ones are attached with ``@UseBefore`` / ``@UseAfter`` to a controller
or an action; plain callables are accepted as well as classes.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, Union

from ..metadata import (
    InterceptorMetadataArgs,
    MetadataKind,
    MiddlewareMetadataArgs,
    MiddlewarePhase,
    get_metadata_args_storage,
)
from .base import attach

T = TypeVar("T")


def Middleware(
    type: Union[str, MiddlewarePhase] = MiddlewarePhase.BEFORE,
    priority: int = 0,
    global_: bool = True,
) -> Callable[[T], T]:
    """Register a middleware class."""
    phase = MiddlewarePhase(type)

    def decorator(cls: T) -> T:
        get_metadata_args_storage().register(
            MetadataKind.MIDDLEWARE,
            MiddlewareMetadataArgs(target=cls, global_=global_, priority=priority, type=phase),
        )
        return cls

    return decorator


def Interceptor(priority: int = 0, global_: bool = True) -> Callable[[T], T]:
    """Register an interceptor class with ``intercept(ctx, result)``."""

    def decorator(cls: T) -> T:
        get_metadata_args_storage().register(
            MetadataKind.INTERCEPTOR,
            InterceptorMetadataArgs(target=cls, global_=global_, priority=priority),
        )
        return cls

    return decorator


def UseBefore(*middlewares: Any) -> Callable[[T], T]:
    """Run ``middlewares`` before the action, in the given order."""

    def decorator(target: T) -> T:
        return attach(target, MetadataKind.USE, *({"middleware": m, "after": False} for m in middlewares))

    return decorator


def UseAfter(*middlewares: Any) -> Callable[[T], T]:
    """Run ``middlewares`` after the response is resolved, in the given order."""

    def decorator(target: T) -> T:
        return attach(target, MetadataKind.USE, *({"middleware": m, "after": True} for m in middlewares))

    return decorator


def UseInterceptor(*interceptors: Any) -> Callable[[T], T]:
    """Transform the action's result with ``interceptors``, in the given order."""

    def decorator(target: T) -> T:
        return attach(target, MetadataKind.USE_INTERCEPTOR, *({"interceptor": i} for i in interceptors))

    return decorator
