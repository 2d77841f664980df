"""
Error Mapper

Converts any failure of the pipeline into a response. Never raises.

- ``HttpError`` (or any exception with an integer ``http_code``): that
  status and the error's public body
- anything else: the action's ``@ErrorCode`` or 500; details only in
  development mode
- ``error_overriding_map[name]`` is merged into the body; a ``status`` key
  there replaces the status

JSON controllers and unmatched routes get a JSON body, plain controllers
get the message as text.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..config import RoutingOptions
from ..response import Response
from .context import ActionContext

if TYPE_CHECKING:
    from .builder import ExecutableAction

logger = logging.getLogger("rudder.engine.errors")

INTERNAL_ERROR_BODY = {"name": "InternalServerError", "message": "Internal Server Error"}


def _http_code(error: BaseException) -> Optional[int]:
    code = getattr(error, "http_code", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    return None


class ErrorMapper:
    """Maps exceptions to responses using the routing options."""

    def __init__(self, options: RoutingOptions):
        self.options = options

    def map(
        self,
        error: BaseException,
        ctx: Optional[ActionContext] = None,
        action: Optional["ExecutableAction"] = None,
    ) -> Response:
        status = _http_code(error)
        if status is not None:
            body = self._http_body(error)
            logger.debug(f"{body['name']} ({status}) on {self._where(ctx)}: {body.get('message')}")
        else:
            status = (action.error_code if action is not None else None) or 500
            body = self._unclassified_body(error)
            logger.error(
                f"Unhandled {type(error).__name__} on {self._where(ctx)}: {error}",
                exc_info=(type(error), error, error.__traceback__),
            )

        overrides = self.options.error_overriding_map.get(body["name"])
        if overrides:
            extra = dict(overrides)
            override_status = extra.pop("status", None)
            if isinstance(override_status, int) and not isinstance(override_status, bool):
                status = override_status
            body.update(extra)

        if action is None or action.is_json:
            return Response.json(body, status=status)
        return Response.text(str(body.get("message", "")), status=status)

    def _http_body(self, error: BaseException) -> Dict[str, Any]:
        to_body = getattr(error, "to_body", None)
        body = dict(to_body()) if callable(to_body) else {}
        body.setdefault("name", type(error).__name__)
        body.setdefault("message", getattr(error, "message", None) or str(error))
        return body

    def _unclassified_body(self, error: BaseException) -> Dict[str, Any]:
        if not self.options.development:
            return dict(INTERNAL_ERROR_BODY)
        return {
            "name": type(error).__name__,
            "message": str(error),
            "stack": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
        }

    @staticmethod
    def _where(ctx: Optional[ActionContext]) -> str:
        if ctx is None:
            return "<no request>"
        return f"{ctx.method} {ctx.path}"
