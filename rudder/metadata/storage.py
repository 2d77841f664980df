"""
Metadata Args Storage

Process-wide store of everything declared on controllers. Filled while
classes are decorated, read when an application is built, cleared with
``reset()`` between tests.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from ..faults.core import RegistrationFault
from .args import (
    ActionMetadataArgs,
    ControllerMetadataArgs,
    InterceptorMetadataArgs,
    MiddlewareMetadataArgs,
    ParamMetadataArgs,
    ResponseHandlerMetadataArgs,
    UseInterceptorMetadataArgs,
    UseMetadataArgs,
)
from .types import MetadataKind

logger = logging.getLogger("rudder.metadata.storage")

_ENTRY_TYPES = {
    MetadataKind.CONTROLLER: ControllerMetadataArgs,
    MetadataKind.ACTION: ActionMetadataArgs,
    MetadataKind.PARAM: ParamMetadataArgs,
    MetadataKind.RESPONSE_HANDLER: ResponseHandlerMetadataArgs,
    MetadataKind.MIDDLEWARE: MiddlewareMetadataArgs,
    MetadataKind.USE: UseMetadataArgs,
    MetadataKind.INTERCEPTOR: InterceptorMetadataArgs,
    MetadataKind.USE_INTERCEPTOR: UseInterceptorMetadataArgs,
}


class MetadataArgsStorage:
    """
    Append-only collections of metadata args, one per kind.

    Views returned by the ``*_for`` helpers are tuples in insertion order.
    """

    def __init__(self):
        self._collections: Dict[MetadataKind, List[Any]] = {kind: [] for kind in MetadataKind}

    def register(self, kind: Union[MetadataKind, str], entry: Any) -> Any:
        """
        Append an entry to the collection for ``kind``.

        Raises:
            RegistrationFault: If the entry does not match the kind, or an
                action is declared twice for the same (target, method).
        """
        kind = MetadataKind(kind)
        expected = _ENTRY_TYPES[kind]
        if not isinstance(entry, expected):
            raise RegistrationFault(
                f"Cannot register {type(entry).__name__} as {kind.value}, "
                f"expected {expected.__name__}",
            )

        if kind is MetadataKind.ACTION and self.find_action(entry.target, entry.method):
            raise RegistrationFault(
                f"Action {entry.target.__name__}.{entry.method} is already registered",
                target=entry.target.__name__,
                method=entry.method,
            )
        if kind is MetadataKind.CONTROLLER and self.controller_for(entry.target):
            raise RegistrationFault(
                f"Controller {entry.target.__name__} is already registered",
                target=entry.target.__name__,
            )

        self._collections[kind].append(entry)
        logger.debug(f"Registered {kind.value}: {entry!r}")
        return entry

    def reset(self) -> None:
        """Clear every collection."""
        for collection in self._collections.values():
            collection.clear()

    # ========================================================================
    # Filtered views
    # ========================================================================

    @property
    def controllers(self) -> Tuple[ControllerMetadataArgs, ...]:
        return tuple(self._collections[MetadataKind.CONTROLLER])

    def controller_for(self, target: type) -> Optional[ControllerMetadataArgs]:
        for controller in self._collections[MetadataKind.CONTROLLER]:
            if controller.target is target:
                return controller
        return None

    def actions_for(self, target: type) -> Tuple[ActionMetadataArgs, ...]:
        return tuple(a for a in self._collections[MetadataKind.ACTION] if a.target is target)

    def find_action(self, target: type, method: str) -> Optional[ActionMetadataArgs]:
        for action in self._collections[MetadataKind.ACTION]:
            if action.target is target and action.method == method:
                return action
        return None

    def params_for(self, target: type, method: str) -> Tuple[ParamMetadataArgs, ...]:
        return tuple(
            p for p in self._collections[MetadataKind.PARAM]
            if p.target is target and p.method == method
        )

    def response_handlers_for(
        self,
        target: type,
        method: Optional[str] = None,
    ) -> Tuple[ResponseHandlerMetadataArgs, ...]:
        """Handlers declared on ``target.method``; class-level ones when method is None."""
        return tuple(
            h for h in self._collections[MetadataKind.RESPONSE_HANDLER]
            if h.target is target and h.method == method
        )

    def global_middlewares(self) -> Tuple[MiddlewareMetadataArgs, ...]:
        return tuple(m for m in self._collections[MetadataKind.MIDDLEWARE] if m.global_)

    def uses_for(self, target: type, method: Optional[str] = None) -> Tuple[UseMetadataArgs, ...]:
        return tuple(
            u for u in self._collections[MetadataKind.USE]
            if u.target is target and u.method == method
        )

    def global_interceptors(self) -> Tuple[InterceptorMetadataArgs, ...]:
        return tuple(i for i in self._collections[MetadataKind.INTERCEPTOR] if i.global_)

    def interceptor_uses_for(
        self,
        target: type,
        method: Optional[str] = None,
    ) -> Tuple[UseInterceptorMetadataArgs, ...]:
        return tuple(
            u for u in self._collections[MetadataKind.USE_INTERCEPTOR]
            if u.target is target and u.method == method
        )

    def __repr__(self) -> str:
        sizes = ", ".join(f"{k.value}={len(v)}" for k, v in self._collections.items())
        return f"MetadataArgsStorage({sizes})"


_storage: Optional[MetadataArgsStorage] = None


def get_metadata_args_storage() -> MetadataArgsStorage:
    """Return the process-wide storage, creating it on first use."""
    global _storage
    if _storage is None:
        _storage = MetadataArgsStorage()
    return _storage
