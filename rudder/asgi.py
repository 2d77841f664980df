"""
ASGI adapter - bridges the ASGI protocol to the rudder dispatcher.

Handles ``http`` and ``lifespan`` scopes. The request body is read in full
before dispatch; bodies above ``max_body_size`` are answered with 413
without running the pipeline.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from .request import PayloadTooLargeError, Request
from .response import Response

if TYPE_CHECKING:
    from .app import RudderApp


class ASGIAdapter:
    """
    ASGI application adapter.
    Converts ASGI events to rudder Request/Response.
    """

    __slots__ = ("app", "logger")

    def __init__(self, app: "RudderApp"):
        self.app = app
        self.logger = logging.getLogger("rudder.asgi")

    async def __call__(self, scope: dict, receive: Callable, send: Callable):
        scope_type = scope["type"]
        if scope_type == "http":
            await self.handle_http(scope, receive, send)
        elif scope_type == "lifespan":
            await self.handle_lifespan(scope, receive, send)
        else:
            self.logger.warning(f"Unsupported ASGI scope type: {scope_type}")

    async def handle_http(self, scope: dict, receive: Callable, send: Callable):
        try:
            request = await Request.from_asgi(
                scope, receive, max_body_size=self.app.options.max_body_size,
            )
        except PayloadTooLargeError as e:
            self.logger.info(f"Rejected {scope.get('method')} {scope.get('path')}: {e.message}")
            await Response.json(e.to_body(), status=e.http_code).send_asgi(send)
            return

        try:
            response = await self.app.handle(request)
        except Exception as e:
            self.logger.error(f"Critical error in request pipeline: {e}", exc_info=True)
            response = Response.json(
                {"name": "InternalServerError", "message": "Internal Server Error"},
                status=500,
            )

        await response.send_asgi(send)

    async def handle_lifespan(self, scope: dict, receive: Callable, send: Callable):
        """Handle ASGI lifespan events."""
        while True:
            message = await receive()

            if message["type"] == "lifespan.startup":
                self.logger.debug(f"Startup complete, {len(self.app.routes)} route(s)")
                await send({"type": "lifespan.startup.complete"})

            elif message["type"] == "lifespan.shutdown":
                self.logger.debug("Shutdown complete")
                await send({"type": "lifespan.shutdown.complete"})
                break
