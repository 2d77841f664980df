"""
Dispatcher - per-request execution of the action pipeline.

Stages, in order:

    route match -> before middlewares -> authorization -> parameters
    -> invocation -> interceptors -> response resolution -> after middlewares

A failure at any stage is handed to the error mapper; ``dispatch`` itself
never raises. After middlewares run for successful responses only.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from ..config import RoutingOptions
from ..faults import NotFoundError
from ..request import Request
from ..response import Response
from ..templates import TemplateRenderer
from .authorization import authorize
from .builder import ExecutableAction
from .context import ActionContext
from .errors import ErrorMapper
from .invoker import invoke
from .middleware import run_after, run_before, run_interceptors
from .params import ParamResolver
from .responses import ResponseResolver

logger = logging.getLogger("rudder.engine.dispatcher")


class Dispatcher:
    """
    Runs requests against a built action list.

    Args:
        actions: Executable actions in build order; the first match wins
        options: Routing options
        renderer: Template renderer for ``@Render`` actions
    """

    def __init__(
        self,
        actions: Sequence[ExecutableAction],
        options: RoutingOptions,
        renderer: Optional[TemplateRenderer] = None,
    ):
        self.actions: List[ExecutableAction] = list(actions)
        self.options = options
        self.params = ParamResolver(options)
        self.responses = ResponseResolver(options, renderer)
        self.errors = ErrorMapper(options)

    def match(self, method: str, path: str) -> Optional[Tuple[ExecutableAction, dict]]:
        """First action matching ``method`` and ``path`` with its path params."""
        for action in self.actions:
            params = action.matches(method, path)
            if params is not None:
                return action, params
        return None

    async def dispatch(self, request: Request) -> Response:
        ctx = ActionContext(request=request)

        matched = self.match(request.method, request.path)
        if matched is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return self.errors.map(
                NotFoundError(f"Route {request.method} {request.path} not found"), ctx,
            )

        action, path_params = matched
        ctx.action = action
        ctx.path_params = path_params

        try:
            response = await self._execute(ctx, action)
        except Exception as e:
            return self.errors.map(e, ctx, action)

        return response

    async def _execute(self, ctx: ActionContext, action: ExecutableAction) -> Response:
        short_circuit = await run_before(action.before, ctx)
        if short_circuit is not None:
            return short_circuit

        await authorize(ctx, action, self.options)
        args = await self.params.resolve_all(ctx, action)

        outcome = await invoke(action, args)
        if outcome.failed:
            raise outcome.error

        result = await run_interceptors(action.interceptors, ctx, outcome.value)
        response = await self.responses.resolve(ctx, action, result)
        return await run_after(action.after, ctx, response)
