"""
Action Invoker

Calls the bound controller method with the resolved positional arguments
and normalizes whatever happens into an ``Outcome``. A synchronous raise
and a failing coroutine produce the same failure outcome.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Sequence, TYPE_CHECKING

from .context import Outcome

if TYPE_CHECKING:
    from .builder import ExecutableAction

logger = logging.getLogger("rudder.engine.invoker")


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, else return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def invoke(action: "ExecutableAction", args: Sequence[Any]) -> Outcome:
    """
    Invoke ``action`` with ``args``.

    Returns:
        Outcome.success with the (awaited) result, or Outcome.failure with
        the raised exception
    """
    try:
        result = await maybe_await(action.handler(*args))
    except Exception as e:
        logger.debug(f"{action} failed: {type(e).__name__}: {e}")
        return Outcome.failure(e)
    return Outcome.success(result)
