"""Option precedence shared by every per-parameter and per-action flag."""

from typing import Any, TypeVar

T = TypeVar("T")


def resolve_option(specific: Any, method_default: Any, global_default: Any, framework_default: T) -> T:
    """
    Return the first of the candidates that is set (not None).

    Precedence: parameter > method > global > framework.
    """
    for candidate in (specific, method_default, global_default):
        if candidate is not None:
            return candidate
    return framework_default
