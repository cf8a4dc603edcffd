"""
temptrace
=========

Traced temporary directories and files.

A TraceDir session owns one temporary directory. Files created through it
are named after the function that asked for them, and each creation can be
logged with a timestamped stack trace. Helper functions that only forward
file requests are marked with @skip_temp so the real requester is named.

Main Components:
    - core: Session management, configuration, exceptions, logging
    - utils: Caller attribution and trace log formatting

Example Usage:
    >>> from temptrace import TraceDir, skip_temp
    >>> @skip_temp
    ... def scratch(tmp):
    ...     return tmp.create_file(suffix=".txt")
    >>> def export(tmp):
    ...     return scratch(tmp)  # file named <module>-export-XXXXXXXX.txt
    >>> with TraceDir(log=True) as tmp:
    ...     fh = export(tmp)

License: MIT
"""

__version__ = "0.1.0"

from temptrace.core.config import DEFAULT_TEMPLATE, TraceConfig
from temptrace.core.exceptions import (
    AllocationError,
    CleanupWarning,
    ConfigError,
    PathError,
    RegistryError,
    TempTraceError,
)
from temptrace.core.logging_manager import NullLogger, TraceLogger, safe_logger, setup_logger
from temptrace.core.temporal_files import TraceDir
from temptrace.utils.attribution import (
    DEFAULT_REGISTRY,
    UNKNOWN,
    SkipRegistry,
    attribute_caller,
    current_stack,
    sanitize,
    skip_temp,
)
from temptrace.utils.trace_log import LogEntry, parse_log, read_log

__all__ = [
    "TraceDir",
    "TraceConfig",
    "DEFAULT_TEMPLATE",
    "TraceLogger",
    "NullLogger",
    "safe_logger",
    "setup_logger",
    "SkipRegistry",
    "DEFAULT_REGISTRY",
    "UNKNOWN",
    "skip_temp",
    "attribute_caller",
    "current_stack",
    "sanitize",
    "LogEntry",
    "parse_log",
    "read_log",
    "TempTraceError",
    "AllocationError",
    "PathError",
    "RegistryError",
    "ConfigError",
    "CleanupWarning",
]
