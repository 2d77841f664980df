"""
Field constraints - reusable validation callables.

Constraints are attached to class fields through ``typing.Annotated``:

    class PhotoFilter:
        keyword: Annotated[str, Length(5, 15)]
        limit: Annotated[int, IsOptional(), Max(100)] = 10

Every constraint is a callable ``(value) -> None`` that raises
``ValueError`` on failure, and carries a ``name`` used as the key in
violation reports.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Iterable, Optional


class Constraint:
    """Base class for field constraints."""

    name: str = "constraint"

    def __call__(self, value: Any) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ============================================================================
# Markers
# ============================================================================

class IsOptional(Constraint):
    """Skip the remaining constraints when the value is None or missing."""

    name = "is_optional"

    def __call__(self, value: Any) -> None:
        return None


class ValidateNested(Constraint):
    """Validate the value (or each element of a list) as a nested object."""

    name = "validate_nested"

    def __call__(self, value: Any) -> None:
        return None


# ============================================================================
# Value Constraints
# ============================================================================

class Length(Constraint):
    """Reject values whose ``len()`` is outside ``[min, max]``."""

    name = "length"
    __slots__ = ("min", "max", "message")

    def __init__(self, min: int, max: Optional[int] = None, message: str | None = None):
        self.min = min
        self.max = max
        if message is None:
            if max is None:
                message = f"must be longer than or equal to {min} characters"
            else:
                message = f"length must be between {min} and {max} characters"
        self.message = message

    def __call__(self, value: Any) -> None:
        if not isinstance(value, str):
            raise ValueError("must be a string")
        if len(value) < self.min or (self.max is not None and len(value) > self.max):
            raise ValueError(self.message)

    def __repr__(self) -> str:
        return f"Length({self.min}, {self.max})"


class MinLength(Constraint):
    name = "min_length"
    __slots__ = ("limit", "message")

    def __init__(self, limit: int, message: str | None = None):
        self.limit = limit
        self.message = message or f"must be longer than or equal to {limit} characters"

    def __call__(self, value: Any) -> None:
        if not hasattr(value, "__len__") or len(value) < self.limit:
            raise ValueError(self.message)

    def __repr__(self) -> str:
        return f"MinLength({self.limit})"


class MaxLength(Constraint):
    name = "max_length"
    __slots__ = ("limit", "message")

    def __init__(self, limit: int, message: str | None = None):
        self.limit = limit
        self.message = message or f"must be shorter than or equal to {limit} characters"

    def __call__(self, value: Any) -> None:
        if not hasattr(value, "__len__") or len(value) > self.limit:
            raise ValueError(self.message)

    def __repr__(self) -> str:
        return f"MaxLength({self.limit})"


class Min(Constraint):
    name = "min"
    __slots__ = ("limit", "message")

    def __init__(self, limit: float | int | Decimal, message: str | None = None):
        self.limit = limit
        self.message = message or f"must not be less than {limit}"

    def __call__(self, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)) or value < self.limit:
            raise ValueError(self.message)

    def __repr__(self) -> str:
        return f"Min({self.limit})"


class Max(Constraint):
    name = "max"
    __slots__ = ("limit", "message")

    def __init__(self, limit: float | int | Decimal, message: str | None = None):
        self.limit = limit
        self.message = message or f"must not be greater than {limit}"

    def __call__(self, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)) or value > self.limit:
            raise ValueError(self.message)

    def __repr__(self) -> str:
        return f"Max({self.limit})"


class Matches(Constraint):
    """Reject values that do not match ``pattern``."""

    name = "matches"
    __slots__ = ("regex", "message")

    def __init__(self, pattern: str, message: str | None = None, *, flags: int = 0):
        self.regex = re.compile(pattern, flags)
        self.message = message or f"must match {pattern} regular expression"

    def __call__(self, value: Any) -> None:
        if not isinstance(value, str) or not self.regex.search(value):
            raise ValueError(self.message)

    def __repr__(self) -> str:
        return f"Matches({self.regex.pattern!r})"


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class IsEmail(Constraint):
    name = "is_email"

    def __init__(self, message: str | None = None):
        self.message = message or "must be an email"

    def __call__(self, value: Any) -> None:
        if not isinstance(value, str) or not _EMAIL_RE.match(value):
            raise ValueError(self.message)


class IsIn(Constraint):
    name = "is_in"
    __slots__ = ("values", "message")

    def __init__(self, values: Iterable[Any], message: str | None = None):
        self.values = tuple(values)
        self.message = message or (
            "must be one of the following values: " + ", ".join(str(v) for v in self.values)
        )

    def __call__(self, value: Any) -> None:
        if value not in self.values:
            raise ValueError(self.message)

    def __repr__(self) -> str:
        return f"IsIn({self.values!r})"


class IsInt(Constraint):
    name = "is_int"

    def __init__(self, message: str | None = None):
        self.message = message or "must be an integer number"

    def __call__(self, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(self.message)


class IsNotEmpty(Constraint):
    name = "is_not_empty"

    def __init__(self, message: str | None = None):
        self.message = message or "should not be empty"

    def __call__(self, value: Any) -> None:
        if value is None or value == "" or value == [] or value == {}:
            raise ValueError(self.message)
