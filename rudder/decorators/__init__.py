"""
rudder decorators - the declaration layer.

Exports:
- Controller, JsonController: class registration
- Get, Post, Put, Patch, Delete, Head, Options, All, Method: actions
- Param markers: Param, QueryParam, Body, HeaderParam, ...
- Response rules: HttpCode, Header, Redirect, OnNull, OnUndefined, ...
- Middleware, Interceptor, UseBefore, UseAfter, UseInterceptor
"""

from .controller import Controller, JsonController, extract_params
from .methods import (
    RouteDecorator,
    Method,
    Get,
    Post,
    Put,
    Patch,
    Delete,
    Head,
    Options,
    All,
)
from .params import (
    ParamMarker,
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
)
from .responses import (
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
)
from .middleware import (
    Middleware,
    Interceptor,
    UseBefore,
    UseAfter,
    UseInterceptor,
)

__all__ = [
    # Controllers
    "Controller",
    "JsonController",
    "extract_params",

    # Actions
    "RouteDecorator",
    "Method",
    "Get",
    "Post",
    "Put",
    "Patch",
    "Delete",
    "Head",
    "Options",
    "All",

    # Params
    "ParamMarker",
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

    # Response rules
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

    # Middlewares & interceptors
    "Middleware",
    "Interceptor",
    "UseBefore",
    "UseAfter",
    "UseInterceptor",
]
