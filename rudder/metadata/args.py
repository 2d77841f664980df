"""
Metadata Args

Plain records describing what was declared on controller classes.
Entries are immutable once created; the storage only appends or clears.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Pattern, Union

from .types import ActionType, MiddlewarePhase, ParamType, ResponseHandlerType

Route = Union[str, Pattern[str], None]


@dataclass(frozen=True)
class ControllerMetadataArgs:
    """
    A class that owns actions.

    Attributes:
        target: Controller class
        route: Route prefix shared by all actions
        json: Whether results are always emitted as JSON
        transform_request: Controller-wide default for request transformation
        transform_response: Controller-wide default for response transformation
    """
    target: type
    route: str = ""
    json: bool = False
    transform_request: Optional[bool] = None
    transform_response: Optional[bool] = None


@dataclass(frozen=True)
class ActionMetadataArgs:
    """
    One controller method bound to an HTTP verb and route pattern.

    Attributes:
        target: Class declaring the method
        method: Method name
        type: HTTP verb
        route: Path template ("/photos/:id"), compiled regex, or None
        status_code: Explicit verb convention status (e.g. 201 for creation)
        transform_request: Method-level default for param transformation
        transform_response: Method-level default for body transformation
        validate: Method-level default for param validation
        params_required: Method-level default for param requiredness
    """
    target: type
    method: str
    type: ActionType
    route: Route = None
    status_code: Optional[int] = None
    transform_request: Optional[bool] = None
    transform_response: Optional[bool] = None
    validate: Any = None
    params_required: Optional[bool] = None


@dataclass(frozen=True)
class ParamMetadataArgs:
    """
    One declared parameter of an action.

    Attributes:
        target: Class declaring the action
        method: Action method name
        index: Position of the argument (``self`` excluded)
        type: Source kind
        name: Name for named sources (query key, header name, ...)
        required: Requiredness override, None inherits
        parse: Parse string values as JSON
        explicit_type: Target type for normalization and transformation
        transform: Transformation override, None inherits
        validate: Validation override (bool or validator options), None inherits
        resolver: Value factory for custom sources
        default: Python default used when an optional value is missing
        arg_name: Python name of the argument
    """
    target: type
    method: str
    index: int
    type: ParamType
    name: Optional[str] = None
    required: Optional[bool] = None
    parse: bool = False
    explicit_type: Any = None
    transform: Optional[bool] = None
    validate: Any = None
    resolver: Optional[Callable[..., Any]] = None
    default: Any = inspect.Parameter.empty
    arg_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.arg_name or f"#{self.index}"

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


@dataclass(frozen=True)
class ResponseHandlerMetadataArgs:
    """
    A declarative response shaping rule.

    Attributes:
        target: Class the rule is declared on
        method: Method name, None for class-level rules
        type: Rule kind
        value: Primary value (status code, header name, template, ...)
        secondary_value: Secondary value (header value, redirect status, ...)
    """
    target: type
    type: ResponseHandlerType
    method: Optional[str] = None
    value: Any = None
    secondary_value: Any = None


@dataclass(frozen=True)
class MiddlewareMetadataArgs:
    """
    A globally registered middleware class.

    Higher priority runs first for "before"; order is reversed for "after".
    """
    target: type
    global_: bool = True
    priority: int = 0
    type: MiddlewarePhase = MiddlewarePhase.BEFORE


@dataclass(frozen=True)
class UseMetadataArgs:
    """A middleware attached to one controller (method None) or one action."""
    target: type
    middleware: Any
    method: Optional[str] = None
    after: bool = False


@dataclass(frozen=True)
class InterceptorMetadataArgs:
    """A globally registered interceptor class."""
    target: type
    global_: bool = True
    priority: int = 0


@dataclass(frozen=True)
class UseInterceptorMetadataArgs:
    """An interceptor attached to one controller (method None) or one action."""
    target: type
    interceptor: Any
    method: Optional[str] = None
