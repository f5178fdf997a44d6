"""Search configuration.

Settings are layered, later layers overriding earlier ones:

1. Built-in defaults (sqlsift.constants)
2. ``<root>/.sqlsift/config.json``
3. ``SQLSIFT_*`` environment variables

List values in the environment are comma separated, for example
``SQLSIFT_FILE_PATTERNS="migrations/**/*.sql,queries/*.sql"``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

from loguru import logger

from sqlsift.constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_IGNORE_DIRS,
    DEFAULT_SQL_PATTERNS,
    ENV_PREFIX,
    MAX_FILE_SIZE,
    PATTERN_CACHE_SIZE,
)
from sqlsift.types.errors import ConfigurationError, ErrorContext, RecoveryAction

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass
class SqlSiftConfig:
    """Settings for file discovery and pattern compilation."""

    # Glob patterns, relative to each searched directory
    file_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_SQL_PATTERNS))

    # Directory names never descended into
    ignore_dirs: set[str] = field(default_factory=lambda: set(DEFAULT_IGNORE_DIRS))

    # Files larger than this (bytes) are skipped during directory walks
    max_file_size: int = MAX_FILE_SIZE

    # Compiled patterns kept per service instance
    pattern_cache_size: int = PATTERN_CACHE_SIZE

    debug: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigurationError: If a value is out of range.
        """
        if not self.file_patterns:
            raise _invalid("file_patterns", self.file_patterns, "at least one glob is required")
        if self.max_file_size <= 0:
            raise _invalid("max_file_size", self.max_file_size, "must be positive")
        if self.pattern_cache_size < 0:
            raise _invalid("pattern_cache_size", self.pattern_cache_size, "must not be negative")

    @classmethod
    def load(
        cls,
        root: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> SqlSiftConfig:
        """Build a config from defaults, the project file and the environment.

        Args:
            root: Project directory holding ``.sqlsift/config.json``.
                Defaults to the current directory.
            environ: Environment mapping. Defaults to ``os.environ``.

        Raises:
            ConfigurationError: On unreadable JSON or invalid values.
        """
        values: dict[str, Any] = {}

        config_path = Path(root or ".") / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        values.update(_read_config_file(config_path))
        values.update(_read_environment(os.environ if environ is None else environ))

        return cls.from_dict(values)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SqlSiftConfig:
        """Create a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for name, value in data.items():
            if name in known:
                kwargs[name] = _coerce(name, value)
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_patterns": list(self.file_patterns),
            "ignore_dirs": sorted(self.ignore_dirs),
            "max_file_size": self.max_file_size,
            "pattern_cache_size": self.pattern_cache_size,
            "debug": self.debug,
        }


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigurationError(
            f"Failed to read {path}: {e}",
            user_message=f"Configuration file {path} could not be read.",
            context=ErrorContext(operation="load_config", file_path=str(path)),
            recovery_actions=[RecoveryAction(description="Fix or remove the configuration file")],
            original_error=e,
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{path} must contain a JSON object",
            user_message=f"Configuration file {path} must contain a JSON object.",
            context=ErrorContext(operation="load_config", file_path=str(path)),
        )
    logger.debug(f"Loaded configuration from {path}")
    return data


def _read_environment(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for f in fields(SqlSiftConfig):
        raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is not None:
            values[f.name] = raw
    return values


def _coerce(name: str, value: Any) -> Any:
    """Convert file or environment values to the field's type."""
    if name in ("file_patterns", "ignore_dirs"):
        if isinstance(value, str):
            items = [item.strip() for item in value.split(",") if item.strip()]
        elif isinstance(value, (list, tuple, set)) and all(isinstance(v, str) for v in value):
            items = list(value)
        else:
            raise _invalid(name, value, "expected a list of strings")
        return set(items) if name == "ignore_dirs" else items

    if name in ("max_file_size", "pattern_cache_size"):
        if isinstance(value, bool):
            raise _invalid(name, value, "expected an integer")
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise _invalid(name, value, "expected an integer") from e

    if name == "debug":
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise _invalid(name, value, "expected a boolean")

    return value


def _invalid(name: str, value: Any, reason: str) -> ConfigurationError:
    return ConfigurationError(
        f"Invalid value for {name}: {value!r} ({reason})",
        user_message=f"Invalid configuration value for '{name}': {reason}.",
        context=ErrorContext(
            operation="load_config",
            component="config",
            additional_info={"field": name, "value": repr(value)},
        ),
        recovery_actions=[
            RecoveryAction(
                description=f"Check the '{name}' setting or the {ENV_PREFIX}{name.upper()} variable"
            )
        ],
    )
