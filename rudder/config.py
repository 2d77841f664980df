"""
Config system - layered routing options.

``RoutingOptions`` holds every recognized option of the dispatch pipeline.
``ConfigLoader`` builds them from several sources with merge precedence:

    overrides > environment variables > .env file > JSON config file > defaults

Environment keys use a prefix and ``__`` for nesting:

    RUDDER_ROUTE_PREFIX=/api
    RUDDER_DEFAULTS__NULL_RESULT_CODE=404
    RUDDER_DEFAULTS__PARAM_OPTIONS__REQUIRED=true
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import orjson
from dotenv import dotenv_values

from .faults.core import Fault, FaultDomain
from .validation import TransformOptions, ValidatorOptions

logger = logging.getLogger("rudder.config")

# Options whose keys are error names, matched case-sensitively.
_CASE_SENSITIVE_MAPS = frozenset({"error_overriding_map"})


class ConfigError(Fault):
    """Raised when configuration validation fails."""

    domain = FaultDomain.CONFIG
    code = "CONFIG_INVALID"

    def __init__(self, message: str, **metadata: Any):
        super().__init__(message=message, metadata=metadata)


def _default_development() -> bool:
    return os.environ.get("RUDDER_ENV", "development").lower() != "production"


@dataclass
class ParamDefaults:
    """Global parameter defaults. ``required=None`` keeps the framework default."""
    required: Optional[bool] = None


@dataclass
class Defaults:
    """
    Result code defaults.

    Attributes:
        null_result_code: Status for a None result without an on-null handler
        undefined_result_code: Status for an UNDEFINED result without an
            on-undefined handler
        param_options: Global parameter defaults
    """
    null_result_code: Optional[int] = None
    undefined_result_code: Optional[int] = None
    param_options: ParamDefaults = field(default_factory=ParamDefaults)


@dataclass
class RoutingOptions:
    """
    Options for building and running the dispatch pipeline.

    Attributes:
        route_prefix: Prefix prepended to every controller route
        controllers: Controller classes (or class names) to mount; None mounts all
        middlewares: Global middleware classes to use; None uses all registered
        interceptors: Global interceptor classes to use; None uses all registered
        validation: Global validation switch, or ValidatorOptions (a dict is accepted)
        class_transformer: Global switch for plain <-> instance transformation
        class_to_plain_options: Options for response body transformation
        plain_to_class_options: Options for parameter transformation
        defaults: Result code and parameter defaults
        error_overriding_map: Error name -> fields merged into its response body
        development: Expose details of unclassified errors
        authorization_checker: ``(ctx, roles) -> bool`` (sync or async)
        current_user_checker: ``(ctx) -> user`` (sync or async)
        view_dir: Directory holding templates for Render
        max_body_size: Largest request body accepted by the ASGI adapter
    """
    route_prefix: str = ""
    controllers: Optional[List[Any]] = None
    middlewares: Optional[List[Any]] = None
    interceptors: Optional[List[Any]] = None
    validation: Union[bool, ValidatorOptions] = False
    class_transformer: bool = True
    class_to_plain_options: Optional[TransformOptions] = None
    plain_to_class_options: Optional[TransformOptions] = None
    defaults: Defaults = field(default_factory=Defaults)
    error_overriding_map: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    development: bool = field(default_factory=_default_development)
    authorization_checker: Optional[Callable[..., Any]] = None
    current_user_checker: Optional[Callable[..., Any]] = None
    view_dir: Optional[str] = None
    max_body_size: int = 10_485_760

    def __post_init__(self):
        if isinstance(self.validation, Mapping):
            self.validation = ValidatorOptions.coerce(self.validation)
        if isinstance(self.class_to_plain_options, Mapping):
            self.class_to_plain_options = TransformOptions.coerce(self.class_to_plain_options)
        if isinstance(self.plain_to_class_options, Mapping):
            self.plain_to_class_options = TransformOptions.coerce(self.plain_to_class_options)
        if isinstance(self.defaults, Mapping):
            self.defaults = _build_defaults(self.defaults)
        if self.route_prefix and not self.route_prefix.startswith("/"):
            self.route_prefix = "/" + self.route_prefix
        self.route_prefix = self.route_prefix.rstrip("/")

    @property
    def validation_enabled(self) -> bool:
        return self.validation is not False and self.validation is not None

    @property
    def validator_options(self) -> Optional[ValidatorOptions]:
        """Global ValidatorOptions, or None when validation is off."""
        if not self.validation_enabled:
            return None
        return ValidatorOptions.coerce(self.validation)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **callables: Any) -> "RoutingOptions":
        """
        Build options from a plain mapping.

        Unknown keys are ignored. ``callables`` supplies the options that
        cannot come from files or the environment (checkers, class lists).

        Raises:
            ConfigError: If a value has the wrong type
        """
        data = dict(data)
        known = {f.name for f in fields(cls)}

        if "development" not in data and "env" in data:
            data["development"] = str(data["env"]).lower() != "production"

        kwargs: Dict[str, Any] = {}
        for name, value in data.items():
            if name not in known:
                logger.debug(f"Ignoring unknown routing option '{name}'")
                continue
            kwargs[name] = value

        _expect(kwargs, "route_prefix", str)
        _expect(kwargs, "class_transformer", bool)
        _expect(kwargs, "development", bool)
        _expect(kwargs, "view_dir", str)
        _expect(kwargs, "max_body_size", int)
        _expect(kwargs, "error_overriding_map", Mapping)
        if "validation" in kwargs and not isinstance(kwargs["validation"], (bool, Mapping, ValidatorOptions)):
            raise ConfigError(
                f"Config field 'validation' expected bool or options, "
                f"got {type(kwargs['validation']).__name__}",
            )
        if "defaults" in kwargs:
            kwargs["defaults"] = _build_defaults(kwargs["defaults"])

        try:
            kwargs["class_to_plain_options"] = _transform_options(kwargs.get("class_to_plain_options"))
            kwargs["plain_to_class_options"] = _transform_options(kwargs.get("plain_to_class_options"))
            if isinstance(kwargs.get("validation"), Mapping):
                kwargs["validation"] = ValidatorOptions.coerce(kwargs["validation"])
        except TypeError as e:
            raise ConfigError(f"Invalid option: {e}")

        kwargs.update(callables)
        return cls(**kwargs)


def _expect(data: Mapping[str, Any], name: str, expected: type) -> None:
    if name not in data or data[name] is None:
        return
    value = data[name]
    if expected is int and isinstance(value, bool) or not isinstance(value, expected):
        raise ConfigError(
            f"Config field '{name}' expected {expected.__name__}, got {type(value).__name__}",
            field=name,
        )


def _transform_options(value: Any) -> Optional[TransformOptions]:
    if value is None:
        return None
    return TransformOptions.coerce(value)


def _build_defaults(value: Any) -> Defaults:
    if isinstance(value, Defaults):
        return value
    if not isinstance(value, Mapping):
        raise ConfigError(f"Config field 'defaults' expected a mapping, got {type(value).__name__}")

    for key in ("null_result_code", "undefined_result_code"):
        code = value.get(key)
        if code is not None and (isinstance(code, bool) or not isinstance(code, int)):
            raise ConfigError(f"Config field 'defaults.{key}' expected int, got {type(code).__name__}")

    param_options = value.get("param_options") or {}
    if isinstance(param_options, ParamDefaults):
        params = param_options
    else:
        required = param_options.get("required")
        if required is not None and not isinstance(required, bool):
            raise ConfigError(
                f"Config field 'defaults.param_options.required' expected bool, "
                f"got {type(required).__name__}",
            )
        params = ParamDefaults(required=required)

    return Defaults(
        null_result_code=value.get("null_result_code"),
        undefined_result_code=value.get("undefined_result_code"),
        param_options=params,
    )


class ConfigLoader:
    """
    Loads and merges routing configuration from multiple sources.

    Example:
        ```python
        options = ConfigLoader.load("rudder.json", env_file=".env").routing_options(
            authorization_checker=check,
        )
        ```
    """

    def __init__(self, env_prefix: str = "RUDDER_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        path: Optional[Union[str, Path]] = None,
        env_file: Optional[Union[str, Path]] = None,
        env_prefix: str = "RUDDER_",
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration with proper merge strategy.

        Merge order (later overrides earlier):
        1. JSON config file
        2. .env file (prefixed keys only)
        3. Environment variables (prefixed keys only)
        4. Manual overrides

        Args:
            path: JSON config file; missing files are skipped
            env_file: Path to .env file
            env_prefix: Prefix for environment variables
            overrides: Manual overrides (highest precedence)

        Raises:
            ConfigError: If the config file cannot be parsed
        """
        loader = cls(env_prefix=env_prefix)

        if path:
            loader._load_json_file(Path(path))
        if env_file:
            loader._load_env_file(Path(env_file))
        loader._load_from_env(os.environ)
        if overrides:
            loader._merge_dict(loader.config_data, dict(overrides))

        return loader

    def _load_json_file(self, path: Path):
        if not path.exists():
            logger.debug(f"Config file {path} not found, skipping")
            return
        try:
            data = orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}", path=str(path))
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain an object", path=str(path))
        self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: Path):
        if not path.exists():
            logger.debug(f".env file {path} not found, skipping")
            return
        self._load_from_env(dotenv_values(path))

    def _load_from_env(self, environ: Mapping[str, Optional[str]]):
        for key, value in environ.items():
            if key.startswith(self.env_prefix) and value is not None:
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """
        Convert RUDDER_DEFAULTS__NULL_RESULT_CODE to a nested dict entry.

        Option names are lowercased. Error names under
        ``ERROR_OVERRIDING_MAP`` keep their case
        (RUDDER_ERROR_OVERRIDING_MAP__NotFoundError__STATUS=410).
        """
        parts = key[len(self.env_prefix):].split("__")
        parts = [
            part if index == 1 and parts[0].lower() in _CASE_SENSITIVE_MAPS else part.lower()
            for index, part in enumerate(parts)
        ]

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        lowered = value.lower()
        if lowered in ("true", "yes", "on"):
            return True
        if lowered in ("false", "no", "off"):
            return False
        if lowered in ("null", "none"):
            return None

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return orjson.loads(value)
            except orjson.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: Mapping[str, Any]):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, Mapping):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current: Any = self.config_data
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def to_dict(self) -> dict:
        return self.config_data

    def routing_options(self, **callables: Any) -> RoutingOptions:
        """Build ``RoutingOptions`` from the merged data."""
        return RoutingOptions.from_dict(self.config_data, **callables)
