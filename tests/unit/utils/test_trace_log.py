"""
test_trace_log.py
-----------------
Unit tests for temptrace.utils.trace_log.

Tests timestamp formatting, entry composition and log parsing.
"""
import re
import pytest
from datetime import datetime, timezone

from temptrace.utils.attribution import CallFrame
from temptrace.utils.trace_log import (
    LogEntry,
    format_entry,
    format_stack,
    parse_log,
    read_log,
    timestamp,
)


TS = "[Fri Sep  9 01:46:40 2011]"


class TestTimestamp:
    """Test timestamp function."""

    def test_fixed_epoch(self):
        """asctime layout in UTC, space-padded day."""
        assert timestamp(1315532800) == TS

    def test_now_has_asctime_shape(self):
        assert re.fullmatch(
            r"\[\w{3} \w{3} [ \d]\d \d{2}:\d{2}:\d{2} \d{4}\]", timestamp()
        )


class TestFormatStack:
    """Test format_stack function."""

    def test_frame_lines(self):
        frames = [CallFrame("pkg.main", "/nonexistent/app.py", 12)]
        assert format_stack(frames) == [
            '  File "/nonexistent/app.py", line 12, in pkg.main'
        ]

    def test_source_line_included(self):
        """Readable source files contribute the executing line."""
        frames = [CallFrame("pkg.main", __file__, 1)]
        lines = format_stack(frames)
        assert len(lines) == 2
        assert lines[1] == '    """'

    def test_module_level_frame(self):
        frames = [CallFrame("", "/nonexistent/script.py", 3)]
        assert format_stack(frames)[0].endswith("in <module>")


class TestFormatEntry:
    """Test format_entry function."""

    def test_every_line_tagged(self):
        entry = format_entry("/tmp/x/pkg-main-abc", ["  File a", "    call()"], ts=TS)
        assert entry == (
            f"{TS} File /tmp/x/pkg-main-abc created\n"
            f"{TS}   File a\n"
            f"{TS}     call()\n"
        )

    def test_no_stack(self):
        assert format_entry("/tmp/f", [], ts=TS) == f"{TS} File /tmp/f created\n"

    def test_default_timestamp(self):
        entry = format_entry("/tmp/f", [])
        assert entry.startswith("[")
        assert entry.endswith("] File /tmp/f created\n")


class TestParseLog:
    """Test parse_log and read_log functions."""

    def test_entries_in_order(self):
        ts2 = "[Fri Sep  9 01:46:41 2011]"
        text = (
            format_entry("/tmp/a", ["  File x", "    y()"], ts=TS)
            + format_entry("/tmp/b created", ["  File z"], ts=ts2)
        )
        entries = parse_log(text)
        assert [e.path for e in entries] == ["/tmp/a", "/tmp/b created"]
        assert entries[0].stack == ["  File x", "    y()"]
        assert entries[1].stack == ["  File z"]
        assert entries[1].timestamp == ts2[1:-1]

    def test_empty_text(self):
        assert parse_log("") == []

    def test_line_before_header(self):
        with pytest.raises(ValueError, match="line 1"):
            parse_log(f"{TS}   File orphan\n")

    def test_mismatched_timestamp(self):
        text = f"{TS} File /tmp/a created\n[Sat Sep 10 00:00:00 2011]   File x\n"
        with pytest.raises(ValueError, match="line 2"):
            parse_log(text)

    def test_read_log(self, tmp_dir):
        log_file = tmp_dir / "session.log"
        log_file.write_text(format_entry("/tmp/a", [], ts=TS), encoding="utf-8")
        entries = read_log(log_file)
        assert len(entries) == 1
        assert entries[0].path == "/tmp/a"


class TestLogEntry:
    """Test LogEntry dataclass."""

    def test_created_at(self):
        entry = LogEntry(timestamp=TS[1:-1], path="/tmp/a")
        assert entry.created_at == datetime(2011, 9, 9, 1, 46, 40, tzinfo=timezone.utc)

    def test_default_stack(self):
        assert LogEntry(timestamp=TS[1:-1], path="/tmp/a").stack == []
