"""
rudder - declarative controller dispatch for ASGI

Plain classes annotated with routing, parameter and response metadata are
turned into an executable request pipeline:

- Metadata registry: controllers, actions, params, response rules
- Declaration layer: @JsonController, @Get, QueryParam, @HttpCode, ...
- Engine: parameter resolution, authorization, invocation, response
  shaping and error mapping
- ASGI adapter, in-process test client and a click CLI
"""

__version__ = "0.1.0"

# ============================================================================
# Core
# ============================================================================

from .app import RudderApp, create_app
from .config import ConfigError, ConfigLoader, Defaults, ParamDefaults, RoutingOptions
from .request import PayloadTooLargeError, Request
from .response import Response
from ._datastructures import Headers, MultiDict

# ============================================================================
# Engine
# ============================================================================

from .engine import UNDEFINED, ActionContext, ActionBuilder, Dispatcher, ExecutableAction

# ============================================================================
# Metadata & declarations
# ============================================================================

from .metadata import (
    ActionType,
    ParamType,
    ResponseHandlerType,
    MetadataArgsStorage,
    get_metadata_args_storage,
)
from .decorators import (
    Controller,
    JsonController,
    Method,
    Get,
    Post,
    Put,
    Patch,
    Delete,
    Head,
    Options,
    All,
    Param,
    QueryParam,
    QueryParams,
    Body,
    BodyParam,
    HeaderParam,
    HeaderParams,
    CookieParam,
    CookieParams,
    Session,
    SessionParam,
    CurrentUser,
    Req,
    Res,
    Ctx,
    Custom,
    create_param_decorator,
    HttpCode,
    ErrorCode,
    ContentType,
    Header,
    Location,
    Redirect,
    OnNull,
    OnUndefined,
    Render,
    ResponseClassTransformOptions,
    Authorized,
    Middleware,
    Interceptor,
    UseBefore,
    UseAfter,
    UseInterceptor,
)

# ============================================================================
# Faults & validation
# ============================================================================

from .faults import (
    Fault,
    HttpError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    MethodNotAllowedError,
    InternalServerError,
    ParamRequiredError,
    ParameterParseJsonError,
    ParamNormalizationError,
    ParamValidationError,
    AuthorizationRequiredError,
    AccessDeniedError,
    AuthorizationCheckerNotDefinedError,
    CurrentUserCheckerNotDefinedError,
)
from .validation import TransformOptions, ValidatorOptions

__all__ = [
    "__version__",

    # Core
    "RudderApp",
    "create_app",
    "RoutingOptions",
    "Defaults",
    "ParamDefaults",
    "ConfigLoader",
    "ConfigError",
    "Request",
    "Response",
    "PayloadTooLargeError",
    "Headers",
    "MultiDict",

    # Engine
    "UNDEFINED",
    "ActionContext",
    "ActionBuilder",
    "Dispatcher",
    "ExecutableAction",

    # Metadata
    "ActionType",
    "ParamType",
    "ResponseHandlerType",
    "MetadataArgsStorage",
    "get_metadata_args_storage",

    # Declarations
    "Controller",
    "JsonController",
    "Method",
    "Get",
    "Post",
    "Put",
    "Patch",
    "Delete",
    "Head",
    "Options",
    "All",
    "Param",
    "QueryParam",
    "QueryParams",
    "Body",
    "BodyParam",
    "HeaderParam",
    "HeaderParams",
    "CookieParam",
    "CookieParams",
    "Session",
    "SessionParam",
    "CurrentUser",
    "Req",
    "Res",
    "Ctx",
    "Custom",
    "create_param_decorator",
    "HttpCode",
    "ErrorCode",
    "ContentType",
    "Header",
    "Location",
    "Redirect",
    "OnNull",
    "OnUndefined",
    "Render",
    "ResponseClassTransformOptions",
    "Authorized",
    "Middleware",
    "Interceptor",
    "UseBefore",
    "UseAfter",
    "UseInterceptor",

    # Faults
    "Fault",
    "HttpError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "MethodNotAllowedError",
    "InternalServerError",
    "ParamRequiredError",
    "ParameterParseJsonError",
    "ParamNormalizationError",
    "ParamValidationError",
    "AuthorizationRequiredError",
    "AccessDeniedError",
    "AuthorizationCheckerNotDefinedError",
    "CurrentUserCheckerNotDefinedError",

    # Validation
    "TransformOptions",
    "ValidatorOptions",
]
