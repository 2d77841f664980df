"""
Plain <-> instance transformation.

``plain_to_instance`` maps a JSON-like value onto a class by structural
field mapping: every key becomes an attribute, including keys the class
does not declare, and fields annotated with another class are converted
recursively. ``instance_to_plain`` is the inverse used on response bodies.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import (
    Annotated, Any, Dict, Mapping, Optional, Sequence, Union,
    get_args, get_origin, get_type_hints,
)
from uuid import UUID

logger = logging.getLogger("rudder.validation.transformer")

EXPOSE_ALL = "expose_all"
EXCLUDE_EXTRANEOUS = "exclude_extraneous"

PRIMITIVES = (str, int, float, bool)


@dataclass
class TransformOptions:
    """
    Options for both transformation directions.

    Attributes:
        strategy: "expose_all" keeps every key; "exclude_extraneous" keeps
            only keys the class declares
        exclude: Field names never copied
        exclude_prefixes: Field name prefixes never copied
    """
    strategy: str = EXPOSE_ALL
    exclude: Sequence[str] = ()
    exclude_prefixes: Sequence[str] = ()

    @classmethod
    def coerce(cls, value: Union["TransformOptions", Mapping[str, Any], None]) -> "TransformOptions":
        if isinstance(value, TransformOptions):
            return value
        if isinstance(value, Mapping):
            return cls(**value)
        return cls()

    def merge(self, other: Union["TransformOptions", Mapping[str, Any], None]) -> "TransformOptions":
        """Return options where fields set in ``other`` override this one's."""
        if other is None:
            return self
        if isinstance(other, TransformOptions):
            other = {k: v for k, v in vars(other).items() if v != getattr(TransformOptions, k, None)}
        merged = dict(vars(self))
        merged.update(other)
        return TransformOptions(**merged)

    def excludes(self, name: str) -> bool:
        return name in self.exclude or any(name.startswith(p) for p in self.exclude_prefixes)


def unwrap_type(tp: Any) -> Any:
    """Strip ``Annotated`` and ``Optional`` wrappers."""
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    if get_origin(tp) is Union:
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return unwrap_type(args[0])
    return tp


def is_structured_type(tp: Any) -> bool:
    """True for classes, lists and mappings; False for primitives, enums and Any."""
    tp = unwrap_type(tp)
    if tp is None or tp is Any or tp in PRIMITIVES or tp in (bytes, object):
        return False
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return False
    origin = get_origin(tp)
    if origin is not None:
        return isinstance(origin, type)
    return isinstance(tp, type)


def is_list_type(tp: Any) -> bool:
    return get_origin(unwrap_type(tp)) in (list, tuple, set)


def list_item_type(tp: Any) -> Any:
    args = get_args(unwrap_type(tp))
    return args[0] if args else Any


def _declared_fields(cls: type) -> Dict[str, Any]:
    try:
        return get_type_hints(cls)
    except Exception:
        logger.debug(f"Could not resolve type hints for {cls!r}", exc_info=True)
        return dict(getattr(cls, "__annotations__", {}))


def plain_to_instance(plain: Any, target: Any, options: Optional[TransformOptions] = None) -> Any:
    """
    Convert a plain value into an instance of ``target``.

    Values that cannot be mapped (non-mapping plain for a class target,
    primitive targets) are returned unchanged.
    """
    options = options or TransformOptions()
    target = unwrap_type(target)

    if plain is None or target is None or target is Any:
        return plain

    if is_list_type(target):
        item_type = list_item_type(target)
        items = plain if isinstance(plain, (list, tuple)) else [plain]
        return [plain_to_instance(item, item_type, options) for item in items]

    origin = get_origin(target)
    if origin is not None or target in PRIMITIVES or not isinstance(target, type):
        return plain
    if issubclass(target, Mapping) or isinstance(plain, target):
        return plain
    if not isinstance(plain, Mapping):
        return plain

    declared = _declared_fields(target)
    instance = target.__new__(target)
    for key, value in plain.items():
        if options.excludes(key):
            continue
        if key not in declared and options.strategy == EXCLUDE_EXTRANEOUS:
            continue
        if key in declared and is_structured_type(declared[key]):
            value = plain_to_instance(value, declared[key], options)
        setattr(instance, key, value)
    return instance


def instance_to_plain(value: Any, options: Optional[TransformOptions] = None) -> Any:
    """Convert instances (recursively) into JSON-compatible plain values."""
    options = options or TransformOptions()

    if value is None or isinstance(value, PRIMITIVES):
        return value
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, Mapping):
        return {
            str(k): instance_to_plain(v, options)
            for k, v in value.items()
            if not options.excludes(str(k))
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        return [instance_to_plain(item, options) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return value

    attrs = getattr(value, "__dict__", None)
    if attrs is None:
        return value

    declared = _declared_fields(type(value))
    plain = {}
    for name, attr in attrs.items():
        if name.startswith("_") or options.excludes(name):
            continue
        if options.strategy == EXCLUDE_EXTRANEOUS and name not in declared:
            continue
        plain[name] = instance_to_plain(attr, options)
    return plain
