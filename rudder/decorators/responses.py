"""
Response Handler Decorators

Declarative rules shaping the final response. Each may be stacked; order
of declaration (top to bottom) is preserved. ``Authorized`` and the header
rules may also decorate a controller class.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar, Union

from ..metadata import MetadataKind, ResponseHandlerType
from ..validation import TransformOptions
from .base import attach

T = TypeVar("T")


def _handler(kind: ResponseHandlerType, value: Any = None, secondary_value: Any = None) -> Callable[[T], T]:
    def decorator(target: T) -> T:
        return attach(
            target,
            MetadataKind.RESPONSE_HANDLER,
            {"type": kind, "value": value, "secondary_value": secondary_value},
        )
    return decorator


def HttpCode(code: int):
    """Status for concrete (non-None, non-UNDEFINED) results."""
    return _handler(ResponseHandlerType.SUCCESS_CODE, code)


def ErrorCode(code: int):
    """Status for unclassified errors raised by the action."""
    return _handler(ResponseHandlerType.ERROR_CODE, code)


def ContentType(content_type: str):
    return _handler(ResponseHandlerType.CONTENT_TYPE, content_type)


def Header(name: str, value: Any):
    """Set a response header. A later declaration of the same name wins."""
    return _handler(ResponseHandlerType.HEADER, name, str(value))


def Location(url: str):
    """Set ``Location`` without changing the status."""
    return _handler(ResponseHandlerType.LOCATION, url)


def Redirect(url: str, status: int = 302):
    """
    Redirect to ``url``.

    A returned string replaces the target; a returned mapping or object
    fills ``:key`` placeholders in it.
    """
    return _handler(ResponseHandlerType.REDIRECT, url, status)


def OnNull(code_or_error: Union[int, Callable[..., BaseException]]):
    """Status (or error class) used when the action returns None."""
    return _handler(ResponseHandlerType.ON_NULL, code_or_error)


def OnUndefined(code_or_error: Union[int, Callable[..., BaseException]]):
    """Status (or error class) used when the action returns UNDEFINED."""
    return _handler(ResponseHandlerType.ON_UNDEFINED, code_or_error)


def Render(template: str):
    """Render the result as the context of a Jinja2 template from ``view_dir``."""
    return _handler(ResponseHandlerType.RENDERED_TEMPLATE, template)


def ResponseClassTransformOptions(options: Union[TransformOptions, Mapping[str, Any], None] = None, **kwargs: Any):
    """Class-to-plain options for this action's response body."""
    if options is None:
        options = TransformOptions(**kwargs)
    return _handler(ResponseHandlerType.RESPONSE_CLASS_TRANSFORM_OPTIONS, TransformOptions.coerce(options))


def Authorized(roles: Union[str, Iterable[str], Callable[..., Any], None] = None):
    """
    Require authorization for an action or every action of a controller.

    Usable bare (``@Authorized``) or with roles (``@Authorized("admin")``,
    ``@Authorized(["admin", "editor"])``).
    """
    if callable(roles):
        return _handler(ResponseHandlerType.AUTHORIZED, ())(roles)

    if roles is None:
        normalized = ()
    elif isinstance(roles, str):
        normalized = (roles,)
    else:
        normalized = tuple(roles)
    return _handler(ResponseHandlerType.AUTHORIZED, normalized)
