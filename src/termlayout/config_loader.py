"""Configuration loader that parses and validates user-provided TOML."""

from __future__ import annotations

import logging
import math
import tomllib
from dataclasses import fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union

from .datatypes import (
    AppConfig,
    BreakpointConfig,
    DiffConfig,
    StatusConfig,
    TerminalConfig,
    TruncationConfig,
)

logger = logging.getLogger(__name__)

_SECTIONS = {
    "breakpoints": BreakpointConfig,
    "diff": DiffConfig,
    "status": StatusConfig,
    "truncation": TruncationConfig,
    "terminal": TerminalConfig,
}

_PATH_ELLIPSIS_STYLES = {"middle", "end"}


class ConfigError(ValueError):
    """Raised when the configuration file is malformed or fails validation."""


def _coerce_bool(value: Any, dotted_key: str) -> bool:
    """Return a bool, coercing simple 0/1 representations when necessary."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"0", "1"}:
            return normalized == "1"
        if normalized in {"true", "false"}:
            return normalized == "true"
    raise ConfigError(f"{dotted_key} must be a boolean (use true/false).")


def _coerce_enum(value: Any, dotted_key: str, enum_type: type[Enum]) -> Enum:
    """Return an enum member, coercing string values case-insensitively."""

    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in enum_type:
            member_value = str(member.value).lower()
            if normalized == member_value:
                return member
    raise ConfigError(
        f"{dotted_key} must be one of: {', '.join(str(member.value) for member in enum_type)}"
    )


def _coerce_int(value: Any, dotted_key: str) -> int:
    """Return an integer, accepting integral floats and numeric strings."""

    if isinstance(value, bool):
        raise ConfigError(f"{dotted_key} must be an integer")
    if isinstance(value, int):
        return value
    try:
        numeric = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{dotted_key} must be an integer") from exc
    if not math.isfinite(numeric) or not numeric.is_integer():
        raise ConfigError(f"{dotted_key} must be an integer")
    return int(numeric)


def _sanitize_section(raw: dict[str, Any], name: str, cls):
    """
    Coerce a raw TOML table into an instance of ``cls`` with cleaned scalars.

    Parameters:
        raw (dict[str, Any]): Raw TOML section data.
        name (str): Section name used when reporting validation errors.
        cls: Dataclass type used to construct the section object.

    Returns:
        Any: Instantiated dataclass populated with values from ``raw``.

    Raises:
        ConfigError: If the section is not a table or contains invalid keys or values.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"[{name}] must be a table")
    cleaned: Dict[str, Any] = {}
    cls_fields = {field.name: field for field in fields(cls)}
    bool_fields = {name for name, field in cls_fields.items() if field.type is bool}
    int_fields = {name for name, field in cls_fields.items() if field.type is int}
    enum_fields = {
        field_name: field.type
        for field_name, field in cls_fields.items()
        if isinstance(field.type, type) and issubclass(field.type, Enum)
    }
    for key, value in raw.items():
        if key in bool_fields:
            cleaned[key] = _coerce_bool(value, f"{name}.{key}")
        elif key in int_fields:
            cleaned[key] = _coerce_int(value, f"{name}.{key}")
        elif key in enum_fields:
            cleaned[key] = _coerce_enum(value, f"{name}.{key}", enum_fields[key])
        else:
            cleaned[key] = value
    try:
        instance = cls(**cleaned)
    except TypeError as exc:
        raise ConfigError(f"Invalid keys in [{name}]: {exc}") from exc
    return instance


def _require_string(value: Any, dotted_key: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{dotted_key} must be a string")
    return value


def _validate(app: AppConfig) -> None:
    """Cross-field validation applied after every section has been coerced."""

    try:
        app.breakpoints.thresholds()
    except ValueError as exc:
        raise ConfigError(f"breakpoints: {exc}") from exc
    if app.breakpoints.narrow_max < 1:
        raise ConfigError("breakpoints.narrow_max must be >= 1")

    diff_cfg = app.diff
    if diff_cfg.split_min_width < 1:
        raise ConfigError("diff.split_min_width must be >= 1")
    if diff_cfg.separator_width < 0:
        raise ConfigError("diff.separator_width must be >= 0")
    if diff_cfg.min_pane_width < 1:
        raise ConfigError("diff.min_pane_width must be >= 1")

    app.status.separator = _require_string(app.status.separator, "status.separator")

    truncation_cfg = app.truncation
    truncation_cfg.ellipsis = _require_string(truncation_cfg.ellipsis, "truncation.ellipsis")
    path_style = _require_string(truncation_cfg.path_ellipsis, "truncation.path_ellipsis").strip().lower()
    if path_style not in _PATH_ELLIPSIS_STYLES:
        raise ConfigError("truncation.path_ellipsis must be 'middle' or 'end'")
    truncation_cfg.path_ellipsis = path_style
    if truncation_cfg.thought_limit_normal < 0:
        raise ConfigError("truncation.thought_limit_normal must be >= 0")
    if truncation_cfg.thought_limit_verbose < truncation_cfg.thought_limit_normal:
        raise ConfigError("truncation.thought_limit_verbose must be >= truncation.thought_limit_normal")

    if app.terminal.fallback_width < 1:
        raise ConfigError("terminal.fallback_width must be >= 1")
    if app.terminal.fallback_height < 1:
        raise ConfigError("terminal.fallback_height must be >= 1")


def load_config(path: Union[str, Path, None]) -> AppConfig:
    """
    Load and validate layout configuration from a TOML file.

    A missing file (or ``None``) yields the built-in defaults. The file is parsed as
    UTF-8 TOML (a BOM is accepted), each known section is coerced into its
    dataclass, and cross-field rules such as ordered breakpoint thresholds are
    checked.

    Returns:
        AppConfig: The validated configuration.

    Raises:
        ConfigError: If the file is not UTF-8, TOML parsing fails, a section is
        unknown or malformed, or any validation rule is violated.
    """
    if path is None:
        return AppConfig()
    config_path = Path(path)
    if not config_path.exists():
        logger.debug("Config file %s not found; using defaults", config_path)
        return AppConfig()

    raw_bytes = config_path.read_bytes()
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        raw_bytes = raw_bytes[3:]
    try:
        raw = tomllib.loads(raw_bytes.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ConfigError("Configuration file must be UTF-8 encoded") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse TOML: {exc}") from exc

    unknown = sorted(set(raw) - set(_SECTIONS))
    if unknown:
        raise ConfigError(f"Unknown configuration sections: {', '.join(unknown)}")

    sections = {
        name: _sanitize_section(raw.get(name, {}), name, cls) for name, cls in _SECTIONS.items()
    }
    app = AppConfig(**sections)
    _validate(app)
    logger.debug("Loaded configuration from %s", config_path)
    return app


__all__ = ["ConfigError", "load_config"]
