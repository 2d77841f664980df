"""
Action Decorators

HTTP verb decorators for controller methods. They only attach metadata;
``@Controller`` registers it.

Example:
    ```python
    @JsonController("/photos")
    class PhotoController:
        @Get("/:id")
        def get_one(self, id: int):
            ...

        @Post("/", status_code=201)
        def create(self, photo: Annotated[Photo, Body()]):
            ...
    ```
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar, Union

from ..metadata import ActionType
from ..metadata.args import Route
from .base import ACTION_ATTR

F = TypeVar("F", bound=Callable[..., Any])


class RouteDecorator:
    """
    Base route decorator.

    Args:
        route: Path template ("/photos/:id"), a compiled regex, or None
        status_code: Status for concrete results when no HttpCode is declared
        transform_request: Method default for parameter transformation
        transform_response: Method default for body transformation
        validate: Method default for parameter validation (bool or options)
        params_required: Method default for parameter requiredness
    """

    method: Optional[ActionType] = None

    def __init__(
        self,
        route: Route = None,
        *,
        status_code: Optional[int] = None,
        transform_request: Optional[bool] = None,
        transform_response: Optional[bool] = None,
        validate: Any = None,
        params_required: Optional[bool] = None,
    ):
        self.route = route
        self.options = {
            "status_code": status_code,
            "transform_request": transform_request,
            "transform_response": transform_response,
            "validate": validate,
            "params_required": params_required,
        }

    def __call__(self, func: F) -> F:
        if getattr(func, ACTION_ATTR, None) is not None:
            raise TypeError(
                f"{func.__name__} is already bound to a route; "
                f"declare one action per method"
            )
        setattr(func, ACTION_ATTR, {"type": self.method, "route": self.route, **self.options})
        return func


class Method(RouteDecorator):
    """Route decorator for an arbitrary verb: ``@Method("patch", "/x")``."""

    def __init__(self, method: Union[str, ActionType], route: Route = None, **kwargs):
        super().__init__(route, **kwargs)
        self.method = ActionType(method.lower() if isinstance(method, str) else method)


class Get(RouteDecorator):
    method = ActionType.GET


class Post(RouteDecorator):
    method = ActionType.POST


class Put(RouteDecorator):
    method = ActionType.PUT


class Patch(RouteDecorator):
    method = ActionType.PATCH


class Delete(RouteDecorator):
    method = ActionType.DELETE


class Head(RouteDecorator):
    method = ActionType.HEAD


class Options(RouteDecorator):
    method = ActionType.OPTIONS


class All(RouteDecorator):
    """Matches every verb."""

    method = ActionType.ALL
