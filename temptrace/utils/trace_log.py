#!/usr/bin/env python3
"""
trace_log.py
-------------------
Creation trace entries: formatting and reading back.

Each traced file creation produces one entry:

    [Sat Oct 17 09:03:11 2026] File /tmp/temptrace-ab12cd34/pkg-build-x1y2z3w4 created
    [Sat Oct 17 09:03:11 2026]   File "/src/pkg/app.py", line 12, in pkg.main
    [Sat Oct 17 09:03:11 2026]     build(tmp)
    [Sat Oct 17 09:03:11 2026]   File "/src/pkg/app.py", line 7, in pkg.build
    [Sat Oct 17 09:03:11 2026]     fh = tmp.create_file()

Every line carries the same bracketed UTC timestamp so the log stays
greppable by time.

Functions:
    timestamp: Bracketed UTC timestamp in asctime format
    format_stack: Render CallFrames as traceback-style lines
    format_entry: Compose one entry
    parse_log: Parse log text into LogEntry records
    read_log: Parse a log file
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import linecache
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Union

# --- Local imports ---
from temptrace.utils.attribution import CallFrame


_HEADER_RE = re.compile(r"^\[(?P<ts>[^\]]+)\] File (?P<path>.+) created$")
_ASCTIME_FORMAT = "%a %b %d %H:%M:%S %Y"


@dataclass
class LogEntry:
    """
    One traced file creation.

    Attributes:
        timestamp: UTC time in asctime format (without brackets)
        path: Absolute path of the created file
        stack: Stack trace lines, outermost call first
    """

    timestamp: str
    path: str
    stack: List[str] = field(default_factory=list)

    @property
    def created_at(self) -> datetime:
        """The timestamp as an aware UTC datetime."""
        return datetime.strptime(self.timestamp, _ASCTIME_FORMAT).replace(
            tzinfo=timezone.utc
        )


def timestamp(when: Optional[float] = None) -> str:
    """Return ``[<asctime>]`` for ``when`` (default: now) in UTC."""
    return f"[{time.asctime(time.gmtime(when))}]"


def format_stack(frames: Sequence[CallFrame]) -> List[str]:
    """
    Render frames as traceback-style lines.

    Args:
        frames: Frames in the order they should appear (outermost first)

    Returns:
        Lines without trailing newlines; source lines are included when
        the file is readable
    """
    lines: List[str] = []
    for frame in frames:
        lines.append(
            f'  File "{frame.filename}", line {frame.lineno}, in {frame.name or "<module>"}'
        )
        source = linecache.getline(frame.filename, frame.lineno).strip()
        if source:
            lines.append(f"    {source}")
    return lines


def format_entry(
    path: Union[str, Path], stack_lines: Sequence[str], ts: Optional[str] = None
) -> str:
    """
    Compose one trace entry, newline-terminated.

    Args:
        path: Created file path
        stack_lines: Lines from format_stack
        ts: Bracketed timestamp (default: now)
    """
    ts = ts or timestamp()
    lines = [f"{ts} File {path} created"]
    lines.extend(f"{ts} {line}" for line in stack_lines)
    return "\n".join(lines) + "\n"


def parse_log(text: str) -> List[LogEntry]:
    """
    Parse trace log text into entries, in file order.

    Raises:
        ValueError: If a line is neither an entry header nor a stack line
            tagged with the current entry's timestamp
    """
    entries: List[LogEntry] = []
    current: Optional[LogEntry] = None

    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line:
            continue

        match = _HEADER_RE.match(line)
        if match:
            current = LogEntry(timestamp=match.group("ts"), path=match.group("path"))
            entries.append(current)
            continue

        tag = f"[{current.timestamp}] " if current else None
        if tag is None or not line.startswith(tag):
            raise ValueError(f"Malformed trace log line {lineno}: {line!r}")
        current.stack.append(line[len(tag):])

    return entries


def read_log(path: Union[str, Path]) -> List[LogEntry]:
    """Read and parse a session log or a per-file sibling log."""
    return parse_log(Path(path).read_text(encoding="utf-8"))
