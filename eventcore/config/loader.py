"""Configuration loading & validation.

Precedence (last wins): base.yaml → overrides.local.yaml → ENV
(EVENTCORE__SECTION__KEY).

Files are read only from the directory named by EVENTCORE_CONFIG_DIR;
without it only schema defaults and ENV apply, so a host application's
own configs/ directory is never picked up.

Every section is optional; a missing section falls back to schema
defaults. Unknown top-level or section keys are rejected.
"""
from __future__ import annotations

import logging
import os
import pathlib
import threading
from functools import lru_cache
from typing import Any, Dict, Type

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from eventcore import metrics
from eventcore.errors import EventCoreError, validate_error_type

from .schemas.dispatch import DispatchConfig, HandlersConfig
from .schemas.observability import LoggingConfig, MetricsConfig

logger = logging.getLogger("eventcore.config")


class AggregatedConfig(BaseModel):
    dispatch: DispatchConfig = DispatchConfig()
    handlers: HandlersConfig = HandlersConfig()
    logging: LoggingConfig = LoggingConfig()
    metrics: MetricsConfig = MetricsConfig()

    model_config = ConfigDict(extra="forbid")


CONFIG_DIR_ENV = "EVENTCORE_CONFIG_DIR"
ENV_PREFIX = "EVENTCORE__"

SUB_SCHEMA_CLASSES: Dict[str, Type[BaseModel]] = {
    "dispatch": DispatchConfig,
    "handlers": HandlersConfig,
    "logging": LoggingConfig,
    "metrics": MetricsConfig,
}


class ConfigError(EventCoreError):
    error_type = "config-invalid"


def _load_yaml_if_exists(path: pathlib.Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping at top level")
    return data


def _merge_dict(
    base: Dict[str, Any], override: Dict[str, Any]
) -> Dict[str, Any]:
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            base[k] = _merge_dict(base[k], v)
        else:
            base[k] = v
    return base


def _cast_env_value(value: str) -> Any:
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"none", "null"}:
        return None
    if value.startswith("[") or value.startswith("{"):
        # allow YAML flow syntax for lists / mappings
        try:
            return yaml.safe_load(value)
        except yaml.YAMLError:
            return value
    try:
        return int(value)
    except ValueError:
        try:
            return float(value)
        except ValueError:
            return value


def _apply_env(cfg: Dict[str, Any]) -> None:
    prefix_len = len(ENV_PREFIX)
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        path_parts = env_key[prefix_len:].lower().split("__")
        target = cfg
        for part in path_parts[:-1]:
            if part not in target or not isinstance(target[part], dict):
                target[part] = {}
            target = target[part]
        target[path_parts[-1]] = _cast_env_value(value)
        dotted_path = ".".join(path_parts)
        metrics.inc("env_override_total", {"path": dotted_path})
        logger.info(
            "config-env-override path=%s value=*** source=env", dotted_path
        )


_lock = threading.Lock()


def _resolve_config_dir() -> pathlib.Path | None:
    """Resolve config directory each call honoring env var changes."""
    raw = os.getenv(CONFIG_DIR_ENV)
    return pathlib.Path(raw) if raw else None


def _normalize_and_validate(raw: Dict[str, Any]) -> None:
    """Cross-field bounds checks that the schemas do not express.

    Validations (error → raise):
      - dispatch.slow_handler_ms > 0 when set
    """
    errors: list[tuple[str, str, str]] = []  # (path, code, msg)
    dispatch = raw.get("dispatch")
    if isinstance(dispatch, dict):
        slow = dispatch.get("slow_handler_ms")
        if isinstance(slow, (int, float)) and slow <= 0:
            errors.append(
                (
                    "dispatch.slow_handler_ms",
                    "config-out-of-range",
                    ">0 required",
                )
            )

    if errors:
        for path, code, _ in errors:
            validate_error_type(code)
            metrics.inc(
                "config_validation_errors_total",
                {"path": path, "code": code},
            )
        details = ", ".join(f"{p}:{c}:{m}" for p, c, m in errors)
        raise ConfigError(f"config validation failed: {details}")


def _validate_sub_schemas(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Validate each known section via its schema class."""
    validated: Dict[str, Any] = {}
    for name, cls in SUB_SCHEMA_CLASSES.items():
        if name in raw:
            try:
                validated[name] = cls.model_validate(raw[name] or {})
            except ValidationError as e:
                raise ConfigError(
                    f"Validation failed for section '{name}': {e}"
                ) from e
    return validated


@lru_cache(maxsize=1)
def get_config() -> AggregatedConfig:  # noqa: D401
    with _lock:
        cfg_dir = _resolve_config_dir()
        merged: Dict[str, Any] = {}
        if cfg_dir is not None:
            base_cfg = _load_yaml_if_exists(cfg_dir / "base.yaml")
            overrides_cfg = _load_yaml_if_exists(
                cfg_dir / "overrides.local.yaml"
            )
            merged = _merge_dict(base_cfg, overrides_cfg)
        _apply_env(merged)
        unknown = sorted(set(merged) - set(SUB_SCHEMA_CLASSES))
        if unknown:
            raise ConfigError(f"Unknown config section(s): {unknown}")
        _normalize_and_validate(merged)
        validated = _validate_sub_schemas(merged)
        return AggregatedConfig(**validated)


def clear_config_cache() -> None:
    """Clear cached config (primarily for tests)."""
    get_config.cache_clear()


def as_dict() -> Dict[str, Any]:
    return get_config().model_dump()
