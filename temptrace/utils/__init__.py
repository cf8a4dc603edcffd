"""
Utilities for temptrace.

- attribution: Call stack capture, skip registry, name templates
- trace_log: Creation trace formatting and parsing

Import commonly-used utilities directly from this package:
    from temptrace.utils import skip_temp, sanitize, read_log
"""

from .attribution import (
    DEFAULT_REGISTRY,
    UNKNOWN,
    CallFrame,
    SkipRegistry,
    attribute_caller,
    code_names,
    current_stack,
    frame_name,
    qualified_name,
    sanitize,
    skip_temp,
    template_prefix,
)
from .trace_log import (
    LogEntry,
    format_entry,
    format_stack,
    parse_log,
    read_log,
    timestamp,
)
