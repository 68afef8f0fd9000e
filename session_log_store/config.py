"""
Configuration for log stores.

A store can be configured in code, from environment variables, or from
a YAML settings file:

```yaml
log_store:
  base_dir: /var/lib/agent/sessions
  format: markdown          # jsonl (default) or markdown
  max_file_size: 10485760   # bytes; omit or 0 for no limit
  entry_wrapper: false
  log_level: INFO          # JSON logs for the store; omit to leave logging alone
```
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import StoreConfigurationError
from .formats import LogFormat

ENV_BASE_DIR = "SESSION_LOG_DIR"
ENV_FORMAT = "SESSION_LOG_FORMAT"
ENV_MAX_FILE_SIZE = "SESSION_LOG_MAX_FILE_SIZE"
ENV_ENTRY_WRAPPER = "SESSION_LOG_ENTRY_WRAPPER"
ENV_LOG_LEVEL = "SESSION_LOG_LEVEL"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


@dataclass
class LogStoreConfig:
    """Configuration for a LogStore."""

    base_dir: str | Path
    format: LogFormat | str | None = LogFormat.STRUCTURED
    max_file_size: int | None = None
    entry_wrapper: bool = False
    log_level: str | None = None

    def __post_init__(self) -> None:
        if self.base_dir is None or str(self.base_dir).strip() == "":
            raise StoreConfigurationError("base_dir", "base directory cannot be empty")
        if not isinstance(self.base_dir, str | os.PathLike):
            raise StoreConfigurationError(
                "base_dir", "expected a path", value=repr(self.base_dir)
            )
        self.base_dir = Path(self.base_dir).expanduser()
        self.format = LogFormat.parse(self.format)
        self.max_file_size = _parse_max_size(self.max_file_size)
        self.entry_wrapper = _parse_bool("entry_wrapper", self.entry_wrapper)
        self.log_level = _parse_log_level(self.log_level)

    @classmethod
    def from_env(cls) -> LogStoreConfig:
        """Create config from environment variables."""
        base_dir = os.environ.get(ENV_BASE_DIR, "")
        if not base_dir:
            raise StoreConfigurationError("base_dir", f"{ENV_BASE_DIR} is not set")

        return cls(
            base_dir=base_dir,
            format=os.environ.get(ENV_FORMAT),
            max_file_size=os.environ.get(ENV_MAX_FILE_SIZE),
            entry_wrapper=os.environ.get(ENV_ENTRY_WRAPPER, "false"),
            log_level=os.environ.get(ENV_LOG_LEVEL),
        )

    @classmethod
    def from_yaml(cls, path: str | Path, section: str = "log_store") -> LogStoreConfig:
        """Create config from the `log_store` section of a YAML file."""
        path = Path(path).expanduser()
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except FileNotFoundError as e:
            raise StoreConfigurationError("config_path", "file not found", value=str(path)) from e
        except (OSError, yaml.YAMLError) as e:
            raise StoreConfigurationError("config_path", str(e), value=str(path)) from e

        if not isinstance(data, dict):
            raise StoreConfigurationError(section, "settings file must contain a mapping")

        settings = data.get(section) or {}
        if not isinstance(settings, dict):
            raise StoreConfigurationError(section, "section must be a mapping")

        return cls.from_dict(settings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogStoreConfig:
        """Create config from a plain dictionary."""
        return cls(
            base_dir=data.get("base_dir", ""),
            format=data.get("format"),
            max_file_size=data.get("max_file_size"),
            entry_wrapper=data.get("entry_wrapper", False),
            log_level=data.get("log_level"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "base_dir": str(self.base_dir),
            "format": LogFormat.parse(self.format).value,
            "max_file_size": self.max_file_size,
            "entry_wrapper": self.entry_wrapper,
            "log_level": self.log_level,
        }


def _parse_max_size(value: int | str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        size = int(value)
    except (TypeError, ValueError) as e:
        raise StoreConfigurationError("max_file_size", "must be an integer", value=str(value)) from e
    if size < 0:
        raise StoreConfigurationError("max_file_size", "must be non-negative", value=str(value))
    # 0 disables the limit
    return size or None


def _parse_bool(field: str, value: bool | str) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise StoreConfigurationError(field, "expected a boolean", value=str(value))


def _parse_log_level(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str) or value.strip().upper() not in LOG_LEVELS:
        raise StoreConfigurationError(
            "log_level", f"expected one of: {', '.join(LOG_LEVELS)}", value=str(value)
        )
    return value.strip().upper()
