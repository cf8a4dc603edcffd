#!/usr/bin/env python3
"""
config.py
----------
Session configuration for temptrace.

A TraceConfig carries the construction options of a TraceDir session and
where diagnostic logs go. It can be built in code, from a mapping, or from
a YAML file:

    # temptrace.yaml
    temptrace:
      cleanup: false
      template: build-XXXXXXXX
      dir: /var/tmp
      log: true
      log_dir: logs

Usage:
    from temptrace.core.config import TraceConfig
    from temptrace.core.temporal_files import TraceDir

    config = TraceConfig.from_yaml("temptrace.yaml")
    with TraceDir.from_config(config) as tmp:
        ...
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

# --- Third party imports ---
import yaml

# --- Local imports ---
from temptrace.core.exceptions import AllocationError, ConfigError
from temptrace.utils.attribution import sanitize, template_prefix


DEFAULT_TEMPLATE = sanitize("temptrace")
CONFIG_SECTION = "temptrace"


@dataclass
class TraceConfig:
    """
    Construction options for a TraceDir session.

    Attributes:
        cleanup: Remove the session directory on release
        template: Directory name template ending in at least XXXX
        dir: Parent directory (system temp directory if None)
        log: Keep a creation trace log inside the session directory
        log_dir: Directory for diagnostic logs (no diagnostic logging if None)
    """

    cleanup: bool = True
    template: str = DEFAULT_TEMPLATE
    dir: Optional[Path] = None
    log: bool = False
    log_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        """Validate option types and the template."""
        for name in ("cleanup", "log"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ConfigError(f"{name} must be a boolean, got {value!r}")

        if not isinstance(self.template, str):
            raise ConfigError(f"template must be a string, got {self.template!r}")
        try:
            template_prefix(self.template)
        except AllocationError as e:
            raise ConfigError(str(e)) from e

        if self.dir is not None:
            self.dir = Path(self.dir)
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TraceConfig":
        """
        Build a config from a mapping of option names.

        Raises:
            ConfigError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "TraceConfig":
        """
        Load a config from a YAML file.

        Options may sit at the top level or under a ``temptrace:`` key.
        An empty file yields the defaults.

        Raises:
            ConfigError: If the file is missing, unparsable, or invalid
        """
        config_path = Path(path)
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {config_path}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {config_path}")
        if CONFIG_SECTION in data:
            data = data[CONFIG_SECTION] or {}
            if not isinstance(data, dict):
                raise ConfigError(f"'{CONFIG_SECTION}' section must be a mapping")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary with paths as strings (for logging)."""
        data = asdict(self)
        for key in ("dir", "log_dir"):
            if data[key] is not None:
                data[key] = str(data[key])
        return data
