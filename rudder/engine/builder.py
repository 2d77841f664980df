"""
Action Builder

Turns the registry snapshot into one ``ExecutableAction`` per declared
route: compiled route, params in index order, merged response rules
(class-level first), middleware and interceptor chains, and a bound
handler on a controller instance created once per build.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..config import RoutingOptions
from ..metadata import (
    ActionMetadataArgs,
    ControllerMetadataArgs,
    MetadataArgsStorage,
    MiddlewarePhase,
    ParamMetadataArgs,
    ResponseHandlerMetadataArgs,
    ResponseHandlerType,
    UseInterceptorMetadataArgs,
    UseMetadataArgs,
)
from ..validation import TransformOptions
from .middleware import ChainEntry, interceptor_entry, middleware_entry
from .routing import RoutePattern, join_paths

logger = logging.getLogger("rudder.engine.builder")


def _last(handlers: Sequence[ResponseHandlerMetadataArgs], kind: ResponseHandlerType) -> Optional[ResponseHandlerMetadataArgs]:
    found = None
    for handler in handlers:
        if handler.type is kind:
            found = handler
    return found


def _use_chains(uses: Sequence[UseMetadataArgs]) -> Tuple[Tuple[ChainEntry, ...], Tuple[ChainEntry, ...]]:
    before = tuple(middleware_entry(u.middleware) for u in uses if not u.after)
    after = tuple(middleware_entry(u.middleware) for u in uses if u.after)
    return before, after


def _interceptor_chain(uses: Sequence[UseInterceptorMetadataArgs]) -> Tuple[ChainEntry, ...]:
    return tuple(interceptor_entry(u.interceptor) for u in uses)


@dataclass
class ExecutableAction:
    """
    A fully resolved action.

    Attributes:
        controller: Owning controller metadata
        metadata: Action metadata
        route: Compiled route (route prefix + controller route + action route)
        params: Param metadata sorted by index
        handlers: Response rules, class-level first, in declaration order
        before: Before-middleware chain
        after: After-middleware chain
        interceptors: Interceptor chain
        instance: Controller instance the handler is bound to
    """

    controller: ControllerMetadataArgs
    metadata: ActionMetadataArgs
    route: RoutePattern
    params: Tuple[ParamMetadataArgs, ...]
    handlers: Tuple[ResponseHandlerMetadataArgs, ...]
    before: Tuple[ChainEntry, ...] = ()
    after: Tuple[ChainEntry, ...] = ()
    interceptors: Tuple[ChainEntry, ...] = ()
    instance: Any = None
    handler: Callable[..., Any] = field(init=False, repr=False)

    def __post_init__(self):
        if self.instance is None:
            self.instance = self.controller.target()
        self.handler = getattr(self.instance, self.metadata.method)

    # ========================================================================
    # Derived rules
    # ========================================================================

    @property
    def is_json(self) -> bool:
        return self.controller.json

    @property
    def name(self) -> str:
        return f"{self.controller.target.__name__}.{self.metadata.method}"

    def matches(self, method: str, path: str) -> Optional[Dict[str, str]]:
        if not self.metadata.type.matches(method):
            return None
        return self.route.match(path)

    def _value(self, kind: ResponseHandlerType) -> Any:
        handler = _last(self.handlers, kind)
        return handler.value if handler is not None else None

    @property
    def success_code(self) -> Optional[int]:
        return self._value(ResponseHandlerType.SUCCESS_CODE)

    @property
    def error_code(self) -> Optional[int]:
        return self._value(ResponseHandlerType.ERROR_CODE)

    @property
    def content_type(self) -> Optional[str]:
        return self._value(ResponseHandlerType.CONTENT_TYPE)

    @property
    def location(self) -> Optional[str]:
        return self._value(ResponseHandlerType.LOCATION)

    @property
    def on_null(self) -> Any:
        return self._value(ResponseHandlerType.ON_NULL)

    @property
    def on_undefined(self) -> Any:
        return self._value(ResponseHandlerType.ON_UNDEFINED)

    @property
    def template(self) -> Optional[str]:
        return self._value(ResponseHandlerType.RENDERED_TEMPLATE)

    @property
    def redirect(self) -> Optional[Tuple[str, int]]:
        handler = _last(self.handlers, ResponseHandlerType.REDIRECT)
        if handler is None:
            return None
        return handler.value, handler.secondary_value or 302

    @property
    def headers(self) -> List[Tuple[str, str]]:
        """Declared headers in declaration order."""
        return [
            (h.value, h.secondary_value)
            for h in self.handlers
            if h.type is ResponseHandlerType.HEADER
        ]

    @property
    def authorized_roles(self) -> Optional[Tuple[str, ...]]:
        """Merged roles (class first), or None when no Authorized rule applies."""
        markers = [h for h in self.handlers if h.type is ResponseHandlerType.AUTHORIZED]
        if not markers:
            return None
        roles: List[str] = []
        for marker in markers:
            for role in marker.value or ():
                if role not in roles:
                    roles.append(role)
        return tuple(roles)

    @property
    def transform_options(self) -> Optional[TransformOptions]:
        return self._value(ResponseHandlerType.RESPONSE_CLASS_TRANSFORM_OPTIONS)

    @property
    def transform_request(self) -> Optional[bool]:
        if self.metadata.transform_request is not None:
            return self.metadata.transform_request
        return self.controller.transform_request

    @property
    def transform_response(self) -> Optional[bool]:
        if self.metadata.transform_response is not None:
            return self.metadata.transform_response
        return self.controller.transform_response

    def __str__(self) -> str:
        return f"{self.metadata.type.value.upper()} {self.route} -> {self.name}"


class ActionBuilder:
    """
    Builds executable actions from a metadata storage.

    The storage is read once; later registrations do not affect the result.
    """

    def __init__(self, storage: MetadataArgsStorage, options: RoutingOptions):
        self.storage = storage
        self.options = options

    def build(self) -> List[ExecutableAction]:
        actions: List[ExecutableAction] = []
        global_before, global_after = self._global_middlewares()
        global_interceptors = self._global_interceptors()

        for controller in self._controllers():
            target = controller.target
            instance = target()

            class_handlers = self.storage.response_handlers_for(target, None)
            class_before, class_after = _use_chains(self.storage.uses_for(target, None))
            class_interceptors = _interceptor_chain(self.storage.interceptor_uses_for(target, None))

            for action in self.storage.actions_for(target):
                method = action.method
                method_before, method_after = _use_chains(self.storage.uses_for(target, method))
                method_interceptors = _interceptor_chain(self.storage.interceptor_uses_for(target, method))

                executable = ExecutableAction(
                    controller=controller,
                    metadata=action,
                    route=RoutePattern.compile(
                        self._prefix(controller), action.route,
                    ),
                    params=tuple(sorted(self.storage.params_for(target, method), key=lambda p: p.index)),
                    handlers=class_handlers + self.storage.response_handlers_for(target, method),
                    before=global_before + class_before + method_before,
                    after=class_after + method_after + global_after,
                    interceptors=global_interceptors + class_interceptors + method_interceptors,
                    instance=instance,
                )
                actions.append(executable)
                logger.debug(f"Built action {executable}")

        logger.info(f"Built {len(actions)} action(s)")
        return actions

    def _prefix(self, controller: ControllerMetadataArgs) -> str:
        return join_paths(self.options.route_prefix, controller.route)

    def _controllers(self) -> List[ControllerMetadataArgs]:
        wanted = self.options.controllers
        controllers = list(self.storage.controllers)
        if wanted is None:
            return controllers
        return [c for c in controllers if c.target in wanted or c.target.__name__ in wanted]

    def _global_middlewares(self) -> Tuple[Tuple[ChainEntry, ...], Tuple[ChainEntry, ...]]:
        wanted = self.options.middlewares
        registered = [
            m for m in self.storage.global_middlewares()
            if wanted is None or m.target in wanted or m.target.__name__ in wanted
        ]
        before = sorted(
            (m for m in registered if m.type is MiddlewarePhase.BEFORE),
            key=lambda m: m.priority,
            reverse=True,
        )
        after = sorted(
            (m for m in registered if m.type is MiddlewarePhase.AFTER),
            key=lambda m: m.priority,
        )
        return (
            tuple(middleware_entry(m.target, m.priority) for m in before),
            tuple(middleware_entry(m.target, m.priority) for m in after),
        )

    def _global_interceptors(self) -> Tuple[ChainEntry, ...]:
        wanted = self.options.interceptors
        registered = [
            i for i in self.storage.global_interceptors()
            if wanted is None or i.target in wanted or i.target.__name__ in wanted
        ]
        registered.sort(key=lambda i: i.priority, reverse=True)
        return tuple(interceptor_entry(i.target, i.priority) for i in registered)
