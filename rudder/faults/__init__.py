"""
rudder faults - typed fault signals and the HTTP error taxonomy.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain enumeration
- Severity: Severity levels
- HttpError and its status-specific subclasses
- Pipeline errors raised while resolving parameters and authorization
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    RegistrationFault,
)

from .http import (
    HttpError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    MethodNotAllowedError,
    InternalServerError,
    ParamError,
    ParamRequiredError,
    ParameterParseJsonError,
    ParamNormalizationError,
    ParamValidationError,
    AuthorizationRequiredError,
    AccessDeniedError,
    AuthorizationCheckerNotDefinedError,
    CurrentUserCheckerNotDefinedError,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    "RegistrationFault",

    # HTTP errors
    "HttpError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "MethodNotAllowedError",
    "InternalServerError",

    # Pipeline errors
    "ParamError",
    "ParamRequiredError",
    "ParameterParseJsonError",
    "ParamNormalizationError",
    "ParamValidationError",
    "AuthorizationRequiredError",
    "AccessDeniedError",
    "AuthorizationCheckerNotDefinedError",
    "CurrentUserCheckerNotDefinedError",
]
