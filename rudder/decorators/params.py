"""
Parameter markers.

Markers declare where an action argument comes from. Use them inside
``Annotated`` or as the default value:

    @Get("/photos")
    def list(
        self,
        limit: Annotated[int, QueryParam()] = 10,
        token: str = HeaderParam("x-token"),
        filter: Annotated[PhotoFilter, QueryParam(parse=True, validate=True)] = None,
    ):
        ...

The annotated type becomes the explicit target type used for
normalization and transformation.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from ..metadata import ParamType


class ParamMarker:
    """
    Base marker.

    Args:
        name: Name in the source (query key, header name, ...); defaults to
            the argument name
        required: Requiredness override; None inherits
        parse: Parse string values as JSON
        type: Explicit target type, overrides the annotation
        transform: Transformation override; None inherits
        validate: Validation override (bool or ValidatorOptions); None inherits
    """

    source: ParamType = ParamType.CUSTOM

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        required: Optional[bool] = None,
        parse: bool = False,
        type: Any = None,
        transform: Optional[bool] = None,
        validate: Any = None,
    ):
        self.name = name
        self.required = required
        self.parse = parse
        self.explicit_type = type
        self.transform = transform
        self.validate = validate
        self.resolver: Optional[Callable[..., Any]] = None

    def default_name(self, arg_name: str) -> Optional[str]:
        return arg_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class _Unnamed(ParamMarker):
    """Marker for sources that are not looked up by name."""

    def __init__(
        self,
        *,
        required: Optional[bool] = None,
        parse: bool = False,
        type: Any = None,
        transform: Optional[bool] = None,
        validate: Any = None,
    ):
        super().__init__(
            None,
            required=required,
            parse=parse,
            type=type,
            transform=transform,
            validate=validate,
        )

    def default_name(self, arg_name: str) -> Optional[str]:
        return None


class Param(ParamMarker):
    """Path segment captured by the route."""
    source = ParamType.PATH


class QueryParam(ParamMarker):
    """Single query parameter (first value)."""
    source = ParamType.QUERY


class QueryParams(_Unnamed):
    """Every query parameter as a mapping; repeated keys become lists."""
    source = ParamType.QUERIES


class Body(_Unnamed):
    """Whole decoded body."""
    source = ParamType.BODY


class BodyParam(ParamMarker):
    """One field of the decoded body."""
    source = ParamType.BODY_PARAM


class HeaderParam(ParamMarker):
    """Single header. The default name is the argument name with "_" as "-"."""
    source = ParamType.HEADER

    def default_name(self, arg_name: str) -> Optional[str]:
        return arg_name.replace("_", "-")


class HeaderParams(_Unnamed):
    source = ParamType.HEADERS


class CookieParam(ParamMarker):
    source = ParamType.COOKIE


class CookieParams(_Unnamed):
    source = ParamType.COOKIES


class Session(_Unnamed):
    """Session object. Required unless ``required=False``."""
    source = ParamType.SESSION


class SessionParam(ParamMarker):
    """One key of the session."""
    source = ParamType.SESSION_PARAM


class CurrentUser(_Unnamed):
    """User returned by the configured ``current_user_checker``. Required by default."""
    source = ParamType.CURRENT_USER


class Req(_Unnamed):
    """The Request itself."""
    source = ParamType.REQUEST


class Res(_Unnamed):
    """The response draft."""
    source = ParamType.RESPONSE


class Ctx(_Unnamed):
    """The ActionContext."""
    source = ParamType.CONTEXT


class Custom(_Unnamed):
    """Value computed by ``resolver(ctx)`` (sync or async)."""

    source = ParamType.CUSTOM

    def __init__(self, resolver: Callable[..., Any], **kwargs: Any):
        super().__init__(**kwargs)
        self.resolver = resolver


def create_param_decorator(
    resolver: Callable[..., Any],
    *,
    required: Optional[bool] = None,
    validate: Any = None,
) -> Callable[..., Custom]:
    """
    Build a reusable custom marker factory.

    Example:
        ```python
        UserAgent = create_param_decorator(lambda ctx: ctx.request.header("user-agent"))

        @Get("/")
        def index(self, agent: str = UserAgent()):
            ...
        ```
    """

    def factory(**overrides: Any) -> Custom:
        options = {"required": required, "validate": validate}
        options.update(overrides)
        return Custom(resolver, **options)

    return factory
