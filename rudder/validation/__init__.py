"""
rudder validation - field constraints, class validation and plain/instance
transformation used by the parameter resolver and response resolver.
"""

from .constraints import (
    Constraint,
    IsOptional,
    ValidateNested,
    Length,
    MinLength,
    MaxLength,
    Min,
    Max,
    Matches,
    IsEmail,
    IsIn,
    IsInt,
    IsNotEmpty,
)
from .validator import (
    ValidatorOptions,
    ValidationViolation,
    field_constraints,
    validate,
)
from .transformer import (
    TransformOptions,
    EXPOSE_ALL,
    EXCLUDE_EXTRANEOUS,
    plain_to_instance,
    instance_to_plain,
)

__all__ = [
    # Constraints
    "Constraint",
    "IsOptional",
    "ValidateNested",
    "Length",
    "MinLength",
    "MaxLength",
    "Min",
    "Max",
    "Matches",
    "IsEmail",
    "IsIn",
    "IsInt",
    "IsNotEmpty",

    # Validator
    "ValidatorOptions",
    "ValidationViolation",
    "field_constraints",
    "validate",

    # Transformer
    "TransformOptions",
    "EXPOSE_ALL",
    "EXCLUDE_EXTRANEOUS",
    "plain_to_instance",
    "instance_to_plain",
]
