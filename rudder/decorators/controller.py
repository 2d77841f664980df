"""
Controller Decorators

``@Controller`` and ``@JsonController`` register a class and translate the
metadata attached to its methods into registry records.

Actions declared on base classes are inherited; a subclass method with the
same name replaces the inherited one (and removes the route when it carries
no verb decorator).
"""

from __future__ import annotations

import inspect
import logging
from typing import Annotated, Any, Callable, Dict, List, Optional, TypeVar, get_args, get_origin, get_type_hints

from ..engine.context import ActionContext
from ..engine.routing import route_param_names
from ..metadata import (
    ActionMetadataArgs,
    ControllerMetadataArgs,
    MetadataKind,
    ParamMetadataArgs,
    ParamType,
    get_metadata_args_storage,
)
from ..request import Request
from ..response import Response
from .base import ACTION_ATTR, build_args, pending_entries
from .params import ParamMarker

logger = logging.getLogger("rudder.decorators.controller")

T = TypeVar("T", bound=type)

_CONTEXT_NAMES = frozenset({"ctx", "context"})


def Controller(
    route: str = "",
    *,
    json: bool = False,
    transform_request: Optional[bool] = None,
    transform_response: Optional[bool] = None,
) -> Callable[[T], T]:
    """
    Register a controller class.

    Args:
        route: Prefix shared by every action of the class
        json: Emit every result as JSON (see ``JsonController``)
        transform_request: Controller default for parameter transformation
        transform_response: Controller default for body transformation
    """

    def decorator(cls: T) -> T:
        storage = get_metadata_args_storage()
        storage.register(
            MetadataKind.CONTROLLER,
            ControllerMetadataArgs(
                target=cls,
                route=route or "",
                json=json,
                transform_request=transform_request,
                transform_response=transform_response,
            ),
        )

        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for kind, entry in pending_entries(klass):
                storage.register(kind, build_args(kind, cls, None, entry))

        for name, func in _collect_actions(cls).items():
            _register_action(cls, name, func)

        logger.debug(f"Registered controller {cls.__name__} at '{route or '/'}'")
        return cls

    return decorator


def JsonController(route: str = "", **options: Any) -> Callable[[T], T]:
    """Controller whose results, errors and null policy are JSON-oriented."""
    return Controller(route, json=True, **options)


def _collect_actions(cls: type) -> Dict[str, Callable[..., Any]]:
    actions: Dict[str, Callable[..., Any]] = {}
    for klass in reversed(cls.__mro__):
        for name, member in vars(klass).items():
            if not inspect.isfunction(member):
                continue
            if getattr(member, ACTION_ATTR, None) is not None:
                actions[name] = member
            else:
                actions.pop(name, None)
    return actions


def _register_action(cls: type, name: str, func: Callable[..., Any]) -> None:
    storage = get_metadata_args_storage()
    action = dict(getattr(func, ACTION_ATTR))

    storage.register(MetadataKind.ACTION, ActionMetadataArgs(target=cls, method=name, **action))

    for param in extract_params(cls, name, func, action.get("route")):
        storage.register(MetadataKind.PARAM, param)

    for kind, entry in pending_entries(func):
        storage.register(kind, build_args(kind, cls, name, entry))


def extract_params(
    cls: type,
    method: str,
    func: Callable[..., Any],
    route: Any = None,
) -> List[ParamMetadataArgs]:
    """
    Build ParamMetadataArgs for every argument of ``func`` after ``self``.

    Unmarked arguments are inferred: ``ctx`` / ``ActionContext`` gives the
    context, ``Request`` / ``Response`` annotations give those objects,
    names captured by the route give path params, anything else is a query
    param.

    Raises:
        TypeError: For ``*args`` / ``**kwargs`` in an action signature
    """
    signature = inspect.signature(func)
    try:
        hints = get_type_hints(func, include_extras=True)
    except Exception:
        logger.debug(f"Could not resolve type hints for {cls.__name__}.{method}", exc_info=True)
        hints = {}

    path_names = set(route_param_names(route))
    params: List[ParamMetadataArgs] = []

    arguments = list(signature.parameters.values())[1:]
    for index, argument in enumerate(arguments):
        if argument.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise TypeError(
                f"{cls.__name__}.{method}: variadic argument '{argument.name}' "
                f"cannot be bound to a request value"
            )

        hint = hints.get(argument.name)
        if hint is None and argument.annotation is not inspect.Parameter.empty:
            hint = argument.annotation
        if isinstance(hint, str):
            hint = None

        marker: Optional[ParamMarker] = None
        explicit_type = hint
        if get_origin(hint) is Annotated:
            explicit_type, *extras = get_args(hint)
            marker = next((e for e in extras if isinstance(e, ParamMarker)), None)

        default = argument.default
        if isinstance(default, ParamMarker):
            marker = default
            default = inspect.Parameter.empty

        if marker is None:
            source = _infer_source(argument.name, explicit_type, path_names)
            name = argument.name if source in (ParamType.PATH, ParamType.QUERY) else None
            params.append(ParamMetadataArgs(
                target=cls,
                method=method,
                index=index,
                type=source,
                name=name,
                explicit_type=explicit_type,
                default=default,
                arg_name=argument.name,
            ))
            continue

        params.append(ParamMetadataArgs(
            target=cls,
            method=method,
            index=index,
            type=marker.source,
            name=marker.name or marker.default_name(argument.name),
            required=marker.required,
            parse=marker.parse,
            explicit_type=marker.explicit_type if marker.explicit_type is not None else explicit_type,
            transform=marker.transform,
            validate=marker.validate,
            resolver=marker.resolver,
            default=default,
            arg_name=argument.name,
        ))

    return params


def _infer_source(name: str, hint: Any, path_names: set) -> ParamType:
    if hint is ActionContext or (hint is None and name in _CONTEXT_NAMES):
        return ParamType.CONTEXT
    if hint is Request:
        return ParamType.REQUEST
    if hint is Response:
        return ParamType.RESPONSE
    if name in path_names:
        return ParamType.PATH
    return ParamType.QUERY
