"""
HTTP error taxonomy.

``HttpError`` is the fault type user code raises to produce a specific
status code. The pipeline raises the subclasses below when parameter
resolution or authorization fails; the error mapper turns every one of
them into a response.
"""

from __future__ import annotations

import re
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from .core import Fault, FaultDomain, Severity

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _status_phrase(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return "HTTP Error"


class HttpError(Fault):
    """
    Fault carrying an explicit HTTP status.

    Example:
        ```python
        raise HttpError(409, "Photo already exists")
        ```
    """

    http_code: int = 500
    domain = FaultDomain.FLOW

    def __init__(
        self,
        http_code: Optional[int] = None,
        message: Optional[str] = None,
        *,
        severity: Optional[Severity] = None,
        **metadata: Any,
    ):
        if http_code is not None:
            self.http_code = http_code
        code = _CAMEL_BOUNDARY.sub("_", type(self).__name__).upper()
        super().__init__(
            code=code,
            message=message if message is not None else _status_phrase(self.http_code),
            severity=severity,
            public=True,
            metadata=metadata,
        )

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_body(self) -> Dict[str, Any]:
        """Public JSON body for this error."""
        return {"name": self.name, "message": self.message}


class BadRequestError(HttpError):
    http_code = 400
    domain = FaultDomain.PARAMS

    def __init__(self, message: Optional[str] = None, **metadata: Any):
        super().__init__(None, message, **metadata)


class UnauthorizedError(HttpError):
    http_code = 401
    domain = FaultDomain.SECURITY

    def __init__(self, message: Optional[str] = None, **metadata: Any):
        super().__init__(None, message, **metadata)


class ForbiddenError(HttpError):
    http_code = 403
    domain = FaultDomain.SECURITY

    def __init__(self, message: Optional[str] = None, **metadata: Any):
        super().__init__(None, message, **metadata)


class NotFoundError(HttpError):
    http_code = 404
    domain = FaultDomain.ROUTING

    def __init__(self, message: Optional[str] = None, **metadata: Any):
        super().__init__(None, message, **metadata)


class MethodNotAllowedError(HttpError):
    http_code = 405
    domain = FaultDomain.ROUTING

    def __init__(self, message: Optional[str] = None, **metadata: Any):
        super().__init__(None, message, **metadata)


class InternalServerError(HttpError):
    http_code = 500
    domain = FaultDomain.SYSTEM

    def __init__(self, message: Optional[str] = None, **metadata: Any):
        super().__init__(None, message, **metadata)


# ============================================================================
# Pipeline errors
# ============================================================================

class ParamError(BadRequestError):
    """Base class for errors that name the failing parameter."""

    def __init__(self, param_name: str, message: str, **metadata: Any):
        self.param_name = param_name
        super().__init__(message, param=param_name, **metadata)

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body["paramName"] = self.param_name
        return body


class ParamRequiredError(ParamError):
    def __init__(self, param_name: str, method: str = "", path: str = ""):
        where = f" for request on {method} {path}" if method else ""
        super().__init__(param_name, f'Parameter "{param_name}" is required{where}')


class ParameterParseJsonError(ParamError):
    def __init__(self, param_name: str, value: Any):
        super().__init__(
            param_name,
            f"Given parameter {param_name} is invalid. "
            f"Value ({value!r}) cannot be parsed into JSON.",
        )


class ParamNormalizationError(ParamError):
    def __init__(self, param_name: str, value: Any, target: str):
        super().__init__(
            param_name,
            f"Given parameter {param_name} is invalid. "
            f"Value ({value!r}) cannot be converted to {target}.",
        )


class ParamValidationError(ParamError):
    """Raised when a resolved parameter fails its class constraints."""

    def __init__(self, param_name: str, errors: List[Any]):
        self.errors = errors
        super().__init__(
            param_name,
            f"Invalid parameter {param_name}, check 'errors' property for more info.",
        )

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body["errors"] = [
            error.to_dict() if hasattr(error, "to_dict") else error
            for error in self.errors
        ]
        return body


class AuthorizationRequiredError(UnauthorizedError):
    def __init__(self, method: str = "", path: str = ""):
        where = f" on {method} {path}" if method else ""
        super().__init__(f"Authorization is required for request{where}")


class AccessDeniedError(ForbiddenError):
    def __init__(self, method: str = "", path: str = ""):
        where = f" on {method} {path}" if method else ""
        super().__init__(f"Access is denied for request{where}")


class AuthorizationCheckerNotDefinedError(InternalServerError):
    def __init__(self):
        super().__init__(
            "Cannot use @Authorized decorator. "
            "Please define authorization_checker in the routing options."
        )


class CurrentUserCheckerNotDefinedError(InternalServerError):
    def __init__(self):
        super().__init__(
            "Cannot use @CurrentUser decorator. "
            "Please define current_user_checker in the routing options."
        )
