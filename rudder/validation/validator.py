"""
Class-level validation.

Constraints declared with ``Annotated`` on class fields are checked against
an instance; every failure becomes a ``ValidationViolation``. An empty
list means the value is valid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import (
    Annotated, Any, Dict, List, Mapping, Optional, Tuple, Union,
    get_args, get_origin, get_type_hints,
)

from .constraints import Constraint, IsOptional, ValidateNested

logger = logging.getLogger("rudder.validation")

_MISSING = object()


@dataclass
class ValidatorOptions:
    """
    Options passed to ``validate``.

    Attributes:
        skip_missing_properties: Skip constraints for fields that are None or absent
        whitelist: Strip fields that carry no constraint
        forbid_non_whitelisted: Report stripped fields as violations instead
    """
    skip_missing_properties: bool = False
    whitelist: bool = False
    forbid_non_whitelisted: bool = False

    @classmethod
    def coerce(cls, value: Union["ValidatorOptions", Mapping[str, Any], bool, None]) -> "ValidatorOptions":
        if isinstance(value, ValidatorOptions):
            return value
        if isinstance(value, Mapping):
            return cls(**value)
        return cls()


@dataclass
class ValidationViolation:
    """One failed field, with the message of every failed constraint."""

    property: str
    value: Any = None
    constraints: Dict[str, str] = field(default_factory=dict)
    children: List["ValidationViolation"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "property": self.property,
            "value": self.value,
            "constraints": dict(self.constraints),
            "children": [child.to_dict() for child in self.children],
        }

    def __str__(self) -> str:
        messages = "; ".join(self.constraints.values()) or "invalid nested value"
        return f"{self.property}: {messages}"


def field_constraints(cls: type) -> Dict[str, Tuple[Constraint, ...]]:
    """
    Collect ``Annotated`` constraints per field across the class hierarchy.

    Fields without constraints are omitted.
    """
    try:
        hints = get_type_hints(cls, include_extras=True)
    except Exception:
        logger.debug(f"Could not resolve type hints for {cls!r}", exc_info=True)
        hints = getattr(cls, "__annotations__", {})

    result: Dict[str, Tuple[Constraint, ...]] = {}
    for name, hint in hints.items():
        if get_origin(hint) is Annotated:
            found = tuple(m for m in get_args(hint)[1:] if isinstance(m, Constraint))
            if found:
                result[name] = found
    return result


def validate(value: Any, options: Optional[ValidatorOptions] = None) -> List[ValidationViolation]:
    """
    Validate an instance (or a list of instances) against its class constraints.

    Args:
        value: Object to validate
        options: Validator options

    Returns:
        List of violations, empty when valid
    """
    options = options or ValidatorOptions()

    if isinstance(value, (list, tuple)):
        violations = []
        for index, item in enumerate(value):
            children = validate(item, options)
            if children:
                violations.append(ValidationViolation(property=str(index), value=item, children=children))
        return violations

    if value is None or isinstance(value, (str, bytes, int, float, bool, dict)):
        return []

    return _validate_object(value, options)


def _validate_object(instance: Any, options: ValidatorOptions) -> List[ValidationViolation]:
    declared = field_constraints(type(instance))
    violations: List[ValidationViolation] = []

    if options.whitelist:
        violations.extend(_apply_whitelist(instance, declared, options))

    for prop, constraints in declared.items():
        value = getattr(instance, prop, _MISSING)
        missing = value is _MISSING or value is None

        if missing and (options.skip_missing_properties or any(isinstance(c, IsOptional) for c in constraints)):
            continue

        violation = ValidationViolation(property=prop, value=None if value is _MISSING else value)
        for constraint in constraints:
            if isinstance(constraint, (IsOptional, ValidateNested)):
                continue
            try:
                constraint(None if value is _MISSING else value)
            except ValueError as e:
                violation.constraints[constraint.name] = f"{prop} {e}"

        if not missing and any(isinstance(c, ValidateNested) for c in constraints):
            violation.children = validate(value, options)

        if violation.constraints or violation.children:
            violations.append(violation)

    return violations


def _apply_whitelist(
    instance: Any,
    declared: Mapping[str, Any],
    options: ValidatorOptions,
) -> List[ValidationViolation]:
    violations = []
    for prop in list(getattr(instance, "__dict__", {})):
        if prop in declared or prop.startswith("_"):
            continue
        if options.forbid_non_whitelisted:
            violations.append(ValidationViolation(
                property=prop,
                value=getattr(instance, prop),
                constraints={"whitelist_validation": f"property {prop} should not exist"},
            ))
        else:
            delattr(instance, prop)
    return violations
