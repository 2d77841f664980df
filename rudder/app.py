"""
RudderApp - the built application.

Snapshots the metadata registry into executable actions at construction
time and serves them through the dispatcher, in-process (``handle``) or as
an ASGI application (``__call__``).

Example:
    ```python
    from rudder import JsonController, Get, Param, RudderApp

    @JsonController("/photos")
    class PhotoController:
        @Get("/:id")
        def get_one(self, id: int):
            return {"id": id}

    app = RudderApp()          # serve with: uvicorn module:app
    ```
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Union

from .asgi import ASGIAdapter
from .config import RoutingOptions
from .engine import ActionBuilder, Dispatcher, ExecutableAction
from .metadata import MetadataArgsStorage, get_metadata_args_storage
from .request import Request
from .response import Response
from .templates import TemplateRenderer

logger = logging.getLogger("rudder.app")


class RudderApp:
    """
    Application built from registered controllers.

    Args:
        options: Routing options (a mapping is accepted)
        storage: Metadata storage; defaults to the process-wide one
    """

    def __init__(
        self,
        options: Union[RoutingOptions, Mapping[str, Any], None] = None,
        storage: Optional[MetadataArgsStorage] = None,
    ):
        if options is None:
            options = RoutingOptions()
        elif isinstance(options, Mapping):
            options = RoutingOptions.from_dict(options)
        self.options = options
        self.storage = storage or get_metadata_args_storage()

        self.renderer = TemplateRenderer(options.view_dir) if options.view_dir else None
        self.actions: List[ExecutableAction] = ActionBuilder(self.storage, options).build()
        self.dispatcher = Dispatcher(self.actions, options, self.renderer)
        self._adapter = ASGIAdapter(self)

    @property
    def routes(self) -> List[ExecutableAction]:
        """Executable actions in match order."""
        return list(self.actions)

    async def handle(self, request: Request) -> Response:
        """Dispatch ``request``; always returns a response."""
        response = await self.dispatcher.dispatch(request)
        logger.debug(f"{request.method} {request.path} -> {response.status}")
        return response

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        await self._adapter(scope, receive, send)


def create_app(
    options: Union[RoutingOptions, Mapping[str, Any], None] = None,
    storage: Optional[MetadataArgsStorage] = None,
) -> RudderApp:
    return RudderApp(options, storage)
