"""
Action context and invocation outcome.

Provides the per-request ``ActionContext``, the ``UNDEFINED`` result
marker and the ``Outcome`` type the invoker normalizes results into.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..response import Response

if TYPE_CHECKING:
    from ..request import Request
    from .builder import ExecutableAction


class _Undefined:
    """
    Marker for "no result".

    An action returning ``UNDEFINED`` is handled by the on-undefined policy;
    an action returning ``None`` is handled by the on-null policy.
    """

    _instance: Optional["_Undefined"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()


def is_empty(value: Any) -> bool:
    """None, UNDEFINED and the empty string count as missing."""
    return value is None or value is UNDEFINED or value == ""


@dataclass
class ActionContext:
    """
    Request context shared by every stage of one dispatch.

    Attributes:
        request: The HTTP request
        response: Response draft; headers and status written here are kept
        path_params: Values captured by the route pattern
        state: Scratch space for middlewares and checkers
        action: The matched action (None until routing succeeds)
    """

    request: "Request"
    response: Response = field(default_factory=lambda: Response(b"", status=200))
    path_params: Dict[str, str] = field(default_factory=dict)
    state: Dict[str, Any] = field(default_factory=dict)
    action: Optional["ExecutableAction"] = None

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def headers(self):
        return self.request.headers

    @property
    def query_params(self):
        return self.request.query_params

    @property
    def session(self) -> Any:
        return self.request.session


@dataclass(frozen=True)
class Outcome:
    """
    Normalized result of invoking an action.

    Exactly one of ``value`` (success) or ``error`` (failure) is meaningful.
    """

    value: Any = UNDEFINED
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def success(cls, value: Any) -> "Outcome":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "Outcome":
        return cls(error=error)
