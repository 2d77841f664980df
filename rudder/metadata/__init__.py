"""
Metadata Registry

Records declared controllers, actions, params, response handlers,
middlewares and interceptors. The declaration layer in
``rudder.decorators`` writes here; ``rudder.engine`` reads from here.
"""

from .types import (
    ActionType,
    ParamType,
    ResponseHandlerType,
    MiddlewarePhase,
    MetadataKind,
)
from .args import (
    ControllerMetadataArgs,
    ActionMetadataArgs,
    ParamMetadataArgs,
    ResponseHandlerMetadataArgs,
    MiddlewareMetadataArgs,
    UseMetadataArgs,
    InterceptorMetadataArgs,
    UseInterceptorMetadataArgs,
)
from .storage import MetadataArgsStorage, get_metadata_args_storage

__all__ = [
    # Types
    "ActionType",
    "ParamType",
    "ResponseHandlerType",
    "MiddlewarePhase",
    "MetadataKind",

    # Args
    "ControllerMetadataArgs",
    "ActionMetadataArgs",
    "ParamMetadataArgs",
    "ResponseHandlerMetadataArgs",
    "MiddlewareMetadataArgs",
    "UseMetadataArgs",
    "InterceptorMetadataArgs",
    "UseInterceptorMetadataArgs",

    # Storage
    "MetadataArgsStorage",
    "get_metadata_args_storage",
]
