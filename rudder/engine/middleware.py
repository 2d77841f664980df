"""
Middleware and interceptor chains.

Middlewares and interceptors may be classes (instantiated once per built
application), instances, or plain callables:

- before middleware: ``use(ctx)``; returning a Response short-circuits
- after middleware: ``use(ctx, response)``; returning a Response replaces it
- interceptor: ``intercept(ctx, result)``; the return value replaces the result

Each hook may be sync or async.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from ..response import Response
from .context import ActionContext
from .invoker import maybe_await

logger = logging.getLogger("rudder.engine.middleware")


@dataclass(frozen=True)
class ChainEntry:
    """One resolved middleware or interceptor hook."""

    name: str
    handler: Callable[..., Any]
    priority: int = 0


def _resolve_hook(obj: Any, method: str) -> Callable[..., Any]:
    if isinstance(obj, type):
        obj = obj()
    hook = getattr(obj, method, None)
    if hook is not None:
        return hook
    if callable(obj):
        return obj
    raise TypeError(f"{obj!r} has no '{method}' method and is not callable")


def _name_of(obj: Any) -> str:
    return getattr(obj, "__name__", None) or type(obj).__name__


def middleware_entry(obj: Any, priority: int = 0) -> ChainEntry:
    return ChainEntry(name=_name_of(obj), handler=_resolve_hook(obj, "use"), priority=priority)


def interceptor_entry(obj: Any, priority: int = 0) -> ChainEntry:
    return ChainEntry(name=_name_of(obj), handler=_resolve_hook(obj, "intercept"), priority=priority)


async def run_before(chain: Sequence[ChainEntry], ctx: ActionContext) -> Optional[Response]:
    """Run before-middlewares in order; return the first Response any of them produces."""
    for entry in chain:
        result = await maybe_await(entry.handler(ctx))
        if isinstance(result, Response):
            logger.debug(f"Middleware {entry.name} short-circuited {ctx.method} {ctx.path}")
            return result
    return None


async def run_after(chain: Sequence[ChainEntry], ctx: ActionContext, response: Response) -> Response:
    """Run after-middlewares in order; each may replace the response."""
    for entry in chain:
        result = await maybe_await(entry.handler(ctx, response))
        if isinstance(result, Response):
            response = result
    return response


async def run_interceptors(chain: Sequence[ChainEntry], ctx: ActionContext, result: Any) -> Any:
    for entry in chain:
        result = await maybe_await(entry.handler(ctx, result))
    return result
