"""
Shared plumbing for the declaration layer.

Method decorators cannot know their owning class, so they attach pending
entries to the function. ``@Controller`` later turns those entries into
registry records. Entries are kept in source order: decorators apply
bottom-up, so each new block is prepended.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ..metadata import (
    MetadataKind,
    ResponseHandlerMetadataArgs,
    UseInterceptorMetadataArgs,
    UseMetadataArgs,
    get_metadata_args_storage,
)

ACTION_ATTR = "__rudder_action__"
METADATA_ATTR = "__rudder_metadata__"

PendingEntry = Tuple[MetadataKind, Dict[str, Any]]

_SCOPED_ARGS = {
    MetadataKind.RESPONSE_HANDLER: ResponseHandlerMetadataArgs,
    MetadataKind.USE: UseMetadataArgs,
    MetadataKind.USE_INTERCEPTOR: UseInterceptorMetadataArgs,
}


def build_args(kind: MetadataKind, target: type, method: Optional[str], entry: Dict[str, Any]) -> Any:
    return _SCOPED_ARGS[kind](target=target, method=method, **entry)


def pending_entries(obj: Any) -> List[PendingEntry]:
    """Entries attached to a function, or declared directly on a class."""
    if isinstance(obj, type):
        return list(obj.__dict__.get(METADATA_ATTR, ()))
    return list(getattr(obj, METADATA_ATTR, ()))


def attach(target: Any, kind: MetadataKind, *entries: Dict[str, Any]) -> Any:
    """
    Attach metadata entries to a function or class.

    A class that is already registered as a controller (decorator written
    above ``@Controller``) gets its entries registered immediately.
    """
    block = [(kind, entry) for entry in entries]

    if isinstance(target, type):
        storage = get_metadata_args_storage()
        if storage.controller_for(target) is not None:
            for entry_kind, entry in block:
                storage.register(entry_kind, build_args(entry_kind, target, None, entry))
            return target

    setattr(target, METADATA_ATTR, block + pending_entries(target))
    return target
