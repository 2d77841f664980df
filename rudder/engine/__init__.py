"""
rudder engine - builds executable actions from registered metadata and
runs requests through them.
"""

from .context import UNDEFINED, ActionContext, Outcome, is_empty
from .options import resolve_option
from .routing import RoutePattern, join_paths, route_param_names
from .invoker import invoke, maybe_await
from .middleware import ChainEntry, run_after, run_before, run_interceptors
from .builder import ActionBuilder, ExecutableAction
from .params import ParamResolver, normalize_primitive
from .authorization import authorize
from .responses import ResponseResolver
from .errors import ErrorMapper
from .dispatcher import Dispatcher

__all__ = [
    # Context
    "UNDEFINED",
    "ActionContext",
    "Outcome",
    "is_empty",
    "resolve_option",

    # Routing
    "RoutePattern",
    "join_paths",
    "route_param_names",

    # Pipeline
    "ActionBuilder",
    "ExecutableAction",
    "ParamResolver",
    "normalize_primitive",
    "authorize",
    "invoke",
    "maybe_await",
    "ChainEntry",
    "run_before",
    "run_after",
    "run_interceptors",
    "ResponseResolver",
    "ErrorMapper",
    "Dispatcher",
]
