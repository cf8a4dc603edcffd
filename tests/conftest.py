"""
conftest.py
-----------
Shared pytest fixtures for temptrace tests.

Provides fixtures for:
- Scratch directories for parent dirs, configs and logs
- Isolated skip registries
- TraceDir sessions that are always torn down
"""
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

from temptrace.core.temporal_files import TraceDir
from temptrace.utils.attribution import SkipRegistry


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ----- Session Fixtures -----

@pytest.fixture
def registry():
    """Empty skip registry so tests never touch the process-wide one."""
    return SkipRegistry()


@pytest.fixture
def trace_dir(tmp_dir, registry):
    """Session without a trace log, rooted in tmp_dir."""
    session = TraceDir(dir=tmp_dir, registry=registry)
    yield session
    session.cleanup()


@pytest.fixture
def logged_trace_dir(tmp_dir, registry):
    """Session with a trace log, rooted in tmp_dir."""
    session = TraceDir(dir=tmp_dir, log=True, registry=registry)
    yield session
    session.cleanup()


