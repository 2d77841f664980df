"""Enumerations shared by the metadata args and the engine."""

from enum import Enum


class ActionType(str, Enum):
    """HTTP verb an action answers to. ``ALL`` matches every verb."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    ALL = "all"

    def matches(self, method: str) -> bool:
        return self is ActionType.ALL or self.value == method.lower()


class ParamType(str, Enum):
    """Part of the request a parameter value is extracted from."""

    PATH = "path"
    QUERY = "query"
    QUERIES = "query-all"
    BODY = "body"
    BODY_PARAM = "body-part"
    HEADER = "header"
    HEADERS = "headers"
    COOKIE = "cookie"
    COOKIES = "cookies"
    SESSION = "session"
    SESSION_PARAM = "session-param"
    REQUEST = "request"
    RESPONSE = "response"
    CONTEXT = "context"
    CURRENT_USER = "current-user"
    CUSTOM = "custom"


# Sources whose value is required unless the declaration says otherwise.
REQUIRED_BY_DEFAULT = frozenset({ParamType.SESSION, ParamType.CURRENT_USER})

# Sources that hand over framework objects untouched.
PASSTHROUGH_SOURCES = frozenset({ParamType.REQUEST, ParamType.RESPONSE, ParamType.CONTEXT})


class ResponseHandlerType(str, Enum):
    """Kind of a declarative response shaping rule."""

    SUCCESS_CODE = "success-code"
    ERROR_CODE = "error-code"
    CONTENT_TYPE = "content-type"
    HEADER = "header"
    LOCATION = "location"
    REDIRECT = "redirect"
    ON_NULL = "on-null"
    ON_UNDEFINED = "on-undefined"
    AUTHORIZED = "authorized"
    RENDERED_TEMPLATE = "rendered-template"
    RESPONSE_CLASS_TRANSFORM_OPTIONS = "response-class-transform-options"


class MiddlewarePhase(str, Enum):
    BEFORE = "before"
    AFTER = "after"


class MetadataKind(str, Enum):
    """Collections kept by the metadata args storage."""

    CONTROLLER = "controller"
    ACTION = "action"
    PARAM = "param"
    RESPONSE_HANDLER = "response-handler"
    MIDDLEWARE = "middleware"
    USE = "use"
    INTERCEPTOR = "interceptor"
    USE_INTERCEPTOR = "use-interceptor"
