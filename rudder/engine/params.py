"""
Parameter Resolver

Resolves every declared parameter of an action, in ascending index order:

1. extract the raw value from its source
2. parse JSON strings (explicit ``parse`` or a structured target type)
3. normalize primitive targets (int, float, bool, str, enums, list items)
4. transform plain values into the target class
5. validate the result against its class constraints
6. enforce requiredness

The first failing parameter stops resolution.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, List, Mapping, TYPE_CHECKING

import orjson

from ..config import RoutingOptions
from ..faults import (
    AuthorizationRequiredError,
    CurrentUserCheckerNotDefinedError,
    ParameterParseJsonError,
    ParamNormalizationError,
    ParamRequiredError,
    ParamValidationError,
)
from ..metadata import ParamMetadataArgs, ParamType
from ..metadata.types import PASSTHROUGH_SOURCES, REQUIRED_BY_DEFAULT
from ..validation import ValidationViolation, ValidatorOptions, plain_to_instance, validate
from ..validation.transformer import (
    is_list_type,
    is_structured_type,
    list_item_type,
    unwrap_type,
)
from .context import UNDEFINED, ActionContext, is_empty
from .invoker import maybe_await
from .options import resolve_option

if TYPE_CHECKING:
    from .builder import ExecutableAction

logger = logging.getLogger("rudder.engine.params")

# Sources producing framework or user objects; no parsing or transformation.
_OBJECT_SOURCES = frozenset({ParamType.SESSION, ParamType.CURRENT_USER})

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def normalize_primitive(value: Any, target: Any) -> Any:
    """
    Convert ``value`` to a primitive ``target`` type.

    Raises:
        ValueError: If the value cannot be converted
    """
    target = unwrap_type(target)

    if is_list_type(target):
        item_type = list_item_type(target)
        items = value if isinstance(value, (list, tuple)) else [value]
        return [normalize_primitive(item, item_type) for item in items]

    if target is bool:
        if isinstance(value, bool):
            return value
        lowered = str(value).strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"{value!r} is not a boolean")

    if target is int:
        if isinstance(value, bool):
            raise ValueError(f"{value!r} is not an integer")
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"{value!r} is not an integer")
            return int(value)
        return int(value) if isinstance(value, int) else int(str(value).strip())

    if target is float:
        if isinstance(value, bool):
            raise ValueError(f"{value!r} is not a number")
        return float(value) if isinstance(value, (int, float)) else float(str(value).strip())

    if target is str:
        if isinstance(value, (int, float, bool)):
            return str(value).lower() if isinstance(value, bool) else str(value)
        return value

    if isinstance(target, type) and issubclass(target, enum.Enum):
        if isinstance(value, target):
            return value
        return target(value)

    return value


def _type_name(tp: Any) -> str:
    tp = unwrap_type(tp)
    return getattr(tp, "__name__", None) or str(tp)


def _is_model(tp: Any) -> bool:
    """User classes that parameters are transformed into."""
    return (
        isinstance(tp, type)
        and is_structured_type(tp)
        and not issubclass(tp, (Mapping, list, tuple, set, frozenset))
    )


def _type_violations(name: str, value: Any, target: Any) -> List[ValidationViolation]:
    """Violations for values the transformer could not turn into ``target``."""
    target = unwrap_type(target)

    if is_list_type(target):
        item_type = unwrap_type(list_item_type(target))
        if not _is_model(item_type):
            return []
        if not isinstance(value, list):
            return [_not_instance(name, value, f"list of {item_type.__name__}")]
        return [
            _not_instance(str(index), item, item_type.__name__)
            for index, item in enumerate(value)
            if not isinstance(item, item_type)
        ]

    if _is_model(target) and not isinstance(value, target):
        return [_not_instance(name, value, target.__name__)]
    return []


def _not_instance(prop: str, value: Any, expected: str) -> ValidationViolation:
    return ValidationViolation(
        property=prop,
        value=value,
        constraints={"is_instance": f"{prop} must be a {expected} object"},
    )


class ParamResolver:
    """Resolves the argument list of an action for one request."""

    def __init__(self, options: RoutingOptions):
        self.options = options

    async def resolve_all(self, ctx: ActionContext, action: "ExecutableAction") -> List[Any]:
        """Resolved values in ascending parameter index order."""
        return [await self.resolve(ctx, action, param) for param in action.params]

    async def resolve(self, ctx: ActionContext, action: "ExecutableAction", param: ParamMetadataArgs) -> Any:
        if param.type in PASSTHROUGH_SOURCES:
            return self._passthrough(ctx, param)

        raw = await self._extract(ctx, param)

        if is_empty(raw):
            if self._is_required(action, param):
                if param.type is ParamType.CURRENT_USER:
                    raise AuthorizationRequiredError(ctx.method, ctx.path)
                raise ParamRequiredError(param.display_name, ctx.method, ctx.path)
            return param.default if param.has_default else None

        if param.type in _OBJECT_SOURCES:
            return raw

        value = self._parse(param, raw)
        value = self._normalize(param, value)
        value = self._transform(action, param, value)
        self._validate(action, param, value)
        return value

    # ========================================================================
    # Extraction
    # ========================================================================

    def _passthrough(self, ctx: ActionContext, param: ParamMetadataArgs) -> Any:
        if param.type is ParamType.REQUEST:
            return ctx.request
        if param.type is ParamType.RESPONSE:
            return ctx.response
        return ctx

    async def _extract(self, ctx: ActionContext, param: ParamMetadataArgs) -> Any:
        request = ctx.request
        source = param.type
        name = param.name

        if source is ParamType.PATH:
            return ctx.path_params.get(name, UNDEFINED)

        if source is ParamType.QUERY:
            if is_list_type(param.explicit_type):
                values = request.query_params.get_all(name)
                return values if values else UNDEFINED
            return request.query_params.get(name, UNDEFINED)

        if source is ParamType.QUERIES:
            return request.query_params.to_dict()

        if source is ParamType.BODY:
            body = request.body
            return UNDEFINED if body is None else body

        if source is ParamType.BODY_PARAM:
            body = request.body
            if isinstance(body, Mapping):
                return body.get(name, UNDEFINED)
            return UNDEFINED

        if source is ParamType.HEADER:
            return request.headers.get(name, UNDEFINED)

        if source is ParamType.HEADERS:
            return request.headers.to_dict()

        if source is ParamType.COOKIE:
            return request.cookies.get(name, UNDEFINED)

        if source is ParamType.COOKIES:
            return dict(request.cookies)

        if source is ParamType.SESSION:
            return UNDEFINED if request.session is None else request.session

        if source is ParamType.SESSION_PARAM:
            session = request.session
            if session is None:
                return UNDEFINED
            if isinstance(session, Mapping):
                return session.get(name, UNDEFINED)
            return getattr(session, name, UNDEFINED)

        if source is ParamType.CURRENT_USER:
            checker = self.options.current_user_checker
            if checker is None:
                raise CurrentUserCheckerNotDefinedError()
            user = await maybe_await(checker(ctx))
            return UNDEFINED if user is None else user

        if source is ParamType.CUSTOM:
            if param.resolver is None:
                return UNDEFINED
            return await maybe_await(param.resolver(ctx))

        return UNDEFINED

    # ========================================================================
    # Parse / normalize / transform / validate
    # ========================================================================

    def _parse(self, param: ParamMetadataArgs, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        if not (param.parse or (is_structured_type(param.explicit_type) and not is_list_type(param.explicit_type))):
            return value
        try:
            return orjson.loads(value)
        except orjson.JSONDecodeError:
            raise ParameterParseJsonError(param.display_name, value)

    def _normalize(self, param: ParamMetadataArgs, value: Any) -> Any:
        if param.explicit_type is None:
            return value
        try:
            return normalize_primitive(value, param.explicit_type)
        except (TypeError, ValueError):
            raise ParamNormalizationError(param.display_name, value, _type_name(param.explicit_type))

    def _transform_enabled(self, action: "ExecutableAction", param: ParamMetadataArgs) -> bool:
        return bool(resolve_option(
            param.transform,
            action.transform_request,
            self.options.class_transformer,
            True,
        ))

    def _transform(self, action: "ExecutableAction", param: ParamMetadataArgs, value: Any) -> Any:
        if not is_structured_type(param.explicit_type):
            return value
        if not self._transform_enabled(action, param):
            return value
        return plain_to_instance(value, param.explicit_type, self.options.plain_to_class_options)

    def _validate(self, action: "ExecutableAction", param: ParamMetadataArgs, value: Any) -> None:
        setting = resolve_option(
            param.validate,
            action.metadata.validate,
            self.options.validation,
            False,
        )
        if setting is False:
            return

        if isinstance(setting, (ValidatorOptions, Mapping)):
            validator_options = ValidatorOptions.coerce(setting)
        else:
            validator_options = self.options.validator_options or ValidatorOptions()

        violations = []
        if self._transform_enabled(action, param):
            violations = _type_violations(param.display_name, value, param.explicit_type)
        if not violations:
            violations = validate(value, validator_options)
        if violations:
            logger.debug(f"Parameter {param.display_name} failed validation: {[str(v) for v in violations]}")
            raise ParamValidationError(param.display_name, violations)

    def _is_required(self, action: "ExecutableAction", param: ParamMetadataArgs) -> bool:
        return bool(resolve_option(
            param.required,
            action.metadata.params_required,
            self.options.defaults.param_options.required,
            param.type in REQUIRED_BY_DEFAULT,
        ))
