"""
Response Resolver

Turns a successful action result into the final HTTP response.

Precedence:
1. A returned ``Response`` passes through (declared headers added)
2. ``@Redirect``: status 302 (or the declared one), ``Location`` header,
   empty body
3. ``UNDEFINED``: on-undefined rule, else ``defaults.undefined_result_code``
   or 204
4. ``None``: on-null rule, else ``defaults.null_result_code``, else 404 for
   JSON controllers and 204 for plain ones
5. Any other value: ``@HttpCode`` > action ``status_code`` > status set on
   the response draft > 200

Declared headers apply in declaration order (class-level first), then
``@Location``, then headers written to the response draft.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, TYPE_CHECKING

from ..config import RoutingOptions
from ..response import Response, dump_json
from ..templates import TemplateRenderer
from ..validation import TransformOptions, instance_to_plain
from .context import UNDEFINED, ActionContext
from .options import resolve_option

if TYPE_CHECKING:
    from .builder import ExecutableAction

logger = logging.getLogger("rudder.engine.responses")

_PLACEHOLDER_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")

JSON_MEDIA_TYPE = "application/json; charset=utf-8"
HTML_MEDIA_TYPE = "text/html; charset=utf-8"
BINARY_MEDIA_TYPE = "application/octet-stream"


def fill_placeholders(template: str, values: Any) -> str:
    """Replace ``:key`` placeholders with values from a mapping or object."""
    def lookup(match: "re.Match[str]") -> str:
        key = match.group(1)
        if isinstance(values, Mapping):
            value = values.get(key, match.group(0))
        else:
            value = getattr(values, key, match.group(0))
        return str(value)

    return _PLACEHOLDER_RE.sub(lookup, template)


class ResponseResolver:
    """
    Builds responses for successful outcomes.

    Raising is how the on-null and on-undefined error rules hand over to the
    error mapper: the resolver raises the configured error and the
    dispatcher maps it.
    """

    def __init__(self, options: RoutingOptions, renderer: Optional[TemplateRenderer] = None):
        self.options = options
        self.renderer = renderer
        if self.renderer is None and options.view_dir:
            self.renderer = TemplateRenderer(options.view_dir)

    async def resolve(self, ctx: ActionContext, action: "ExecutableAction", result: Any) -> Response:
        if isinstance(result, Response):
            for name, value in action.headers:
                result.set_header(name, value)
            return result

        redirect = action.redirect
        if redirect is not None:
            return self._finalize(ctx, action, self._redirect(redirect, result))

        if result is UNDEFINED:
            return self._finalize(ctx, action, self._undefined(ctx, action))

        if result is None:
            return self._finalize(ctx, action, self._null(ctx, action))

        status = resolve_option(
            action.success_code,
            action.metadata.status_code,
            ctx.response.status if ctx.response.status != 200 else None,
            200,
        )

        if action.template is not None:
            response = await self._render(ctx, action, result, status)
        else:
            response = self._content(action, result, status)
        return self._finalize(ctx, action, response)

    # ========================================================================
    # Result kinds
    # ========================================================================

    def _redirect(self, redirect, result: Any) -> Response:
        url, status = redirect
        if isinstance(result, str) and result:
            url = result
        elif result is not None and result is not UNDEFINED and not isinstance(result, (str, bytes)):
            url = fill_placeholders(url, result)
        response = Response(b"", status=status)
        response.set_header("location", url)
        return response

    def _undefined(self, ctx: ActionContext, action: "ExecutableAction") -> Response:
        rule = action.on_undefined
        if isinstance(rule, int) and not isinstance(rule, bool):
            return Response(b"", status=rule)
        if rule is not None:
            raise rule(ctx)
        code = self.options.defaults.undefined_result_code
        return Response(b"", status=code if code is not None else 204)

    def _null(self, ctx: ActionContext, action: "ExecutableAction") -> Response:
        rule = action.on_null
        if isinstance(rule, int) and not isinstance(rule, bool):
            return Response(b"", status=rule)
        if rule is not None:
            raise rule(ctx)
        code = self.options.defaults.null_result_code
        if code is None:
            code = 404 if action.is_json else 204
        return Response(b"", status=code)

    async def _render(self, ctx: ActionContext, action: "ExecutableAction", result: Any, status: int) -> Response:
        if self.renderer is None:
            raise RuntimeError(
                f"{action.name} uses @Render but no view_dir is configured"
            )
        context = result if isinstance(result, Mapping) else instance_to_plain(result, self._transform_options(action))
        if not isinstance(context, Mapping):
            context = {"value": context}
        html = await self.renderer.render(action.template, context, ctx.request)
        return Response(html, status=status, media_type=action.content_type or HTML_MEDIA_TYPE)

    def _content(self, action: "ExecutableAction", result: Any, status: int) -> Response:
        declared = action.content_type

        if isinstance(result, (bytes, bytearray)):
            return Response(bytes(result), status=status, media_type=declared or BINARY_MEDIA_TYPE)

        if isinstance(result, str) and not action.is_json:
            return Response(result, status=status, media_type=declared or HTML_MEDIA_TYPE)

        if self._transform_enabled(action):
            result = instance_to_plain(result, self._transform_options(action))
        return Response(dump_json(result), status=status, media_type=declared or JSON_MEDIA_TYPE)

    # ========================================================================
    # Helpers
    # ========================================================================

    def _transform_enabled(self, action: "ExecutableAction") -> bool:
        return bool(resolve_option(
            None,
            action.transform_response,
            self.options.class_transformer,
            True,
        ))

    def _transform_options(self, action: "ExecutableAction") -> TransformOptions:
        base = self.options.class_to_plain_options or TransformOptions()
        return base.merge(action.transform_options)

    def _finalize(self, ctx: ActionContext, action: "ExecutableAction", response: Response) -> Response:
        for name, value in action.headers:
            response.set_header(name, value)
        if action.location is not None:
            response.set_header("location", action.location)
        for name, value in ctx.response.headers.items():
            response.set_header(name, value)
        return response
