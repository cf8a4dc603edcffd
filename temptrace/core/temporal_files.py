#!/usr/bin/env python3
"""
temporal_files.py
--------------------
Traced temporary directory sessions.

A TraceDir owns one temporary directory. Every file it creates is named
after the function that requested it, and creations can be recorded in a
trace log (with a stack trace) inside the directory or next to each file.

Features:
    - Context manager pattern for scoped cleanup
    - Caller-attributed file names, with @skip_temp helpers stepped over
    - Optional session trace log and per-file sibling logs
    - On-demand subdirectories
    - Best-effort teardown reported as CleanupWarning

Classes:
    TraceDir: Session with context manager support

Usage:
    from temptrace.core.temporal_files import TraceDir

    with TraceDir(log=True) as tmp:
        fh = tmp.create_file(suffix=".csv")
        fh.write(b"a,b\\n")
    # Directory, files and trace log removed on exit

    # Keep everything around for post-mortem debugging
    tmp = TraceDir(cleanup=False, log=True)
    tmp.create_file(dir="inputs/raw")
    tmp.close()
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
import shutil
import tempfile
import threading
import warnings
from pathlib import Path, PurePath
from typing import IO, Any, Dict, List, Optional, Sequence, TextIO, Union

try:
    import fcntl
except ImportError:  # Windows: no flock
    fcntl = None  # type: ignore[assignment]

# --- Local imports ---
from temptrace.core.config import DEFAULT_TEMPLATE, TraceConfig
from temptrace.core.exceptions import AllocationError, CleanupWarning, PathError
from temptrace.core.logging_manager import TraceLogger, safe_logger, setup_logger
from temptrace.utils.attribution import (
    DEFAULT_REGISTRY,
    CallFrame,
    SkipRegistry,
    attribute_caller,
    current_stack,
    sanitize,
    template_prefix,
)
from temptrace.utils.trace_log import format_entry, format_stack


class TraceDir:
    """
    A temporary directory that names and traces the files created in it.

    The directory is created eagerly. It is removed, with everything in
    it, when the session is released (``close()``, ``cleanup()`` or the
    end of a ``with`` block) unless ``cleanup`` is False.

    ``str(tmp)`` and ``os.fspath(tmp)`` give the directory path.
    """

    def __init__(
        self,
        cleanup: bool = True,
        template: str = DEFAULT_TEMPLATE,
        dir: Optional[Union[str, Path]] = None,
        log: bool = False,
        logger: Optional[TraceLogger] = None,
        registry: Optional[SkipRegistry] = None,
    ) -> None:
        """
        Create the session directory (and trace log, if requested).

        Args:
            cleanup: Remove the directory and contents on release
            template: Directory name template, must end with at least XXXX
            dir: Parent directory. Uses the system temp directory if None
            log: Create a trace log of file creations in the directory
            logger: Diagnostic logger (no diagnostic logging if None)
            registry: Skip registry used for attribution
                (default: DEFAULT_REGISTRY)

        Raises:
            AllocationError: If the template is malformed or the directory
                or log file cannot be created
        """
        self.cleanup_on_exit = cleanup
        self.logger = logger
        self.registry = registry if registry is not None else DEFAULT_REGISTRY
        self._handles: List[IO[Any]] = []
        self._log_lock = threading.Lock()
        self._log_handle: Optional[TextIO] = None
        self._log_path: Optional[Path] = None
        self._closed = False
        self._owns_logger = False

        try:
            prefix = template_prefix(template)
        except AllocationError as e:
            safe_logger(self.logger).log_error(
                e, {"operation": "create_session", "template": template}
            )
            raise

        try:
            self._directory = Path(
                os.path.abspath(tempfile.mkdtemp(prefix=prefix, dir=dir))
            )
        except OSError as e:
            raise self._failure(
                AllocationError(f"Failed to create temporary directory: {e}"),
                "create_session",
                e,
                parent=dir,
                template=template,
            ) from e

        if log:
            self._open_log()

        safe_logger(self.logger).log_operation(
            "session_created",
            {
                "directory": self._directory,
                "cleanup": cleanup,
                "log": self._log_path,
            },
        )

    @classmethod
    def from_config(
        cls,
        config: TraceConfig,
        logger: Optional[TraceLogger] = None,
        registry: Optional[SkipRegistry] = None,
    ) -> "TraceDir":
        """
        Create a session from a TraceConfig.

        A diagnostic logger is set up under ``config.log_dir`` when no
        logger is passed and the config names one. That logger belongs to
        the session and is closed by ``cleanup()``.
        """
        owned = None
        if logger is None and config.log_dir is not None:
            owned = logger = setup_logger(config.log_dir)
        try:
            session = cls(
                cleanup=config.cleanup,
                template=config.template,
                dir=config.dir,
                log=config.log,
                logger=logger,
                registry=registry,
            )
        except AllocationError:
            if owned is not None:
                owned.close()
            raise
        session._owns_logger = owned is not None
        return session

    def _open_log(self) -> None:
        try:
            fd, log_path = tempfile.mkstemp(
                prefix=template_prefix(DEFAULT_TEMPLATE),
                suffix=".log",
                dir=self._directory,
            )
            self._log_handle = os.fdopen(fd, "a", encoding="utf-8")
        except OSError as e:
            shutil.rmtree(self._directory, ignore_errors=True)
            raise self._failure(
                AllocationError(f"Failed to create trace log: {e}"),
                "open_trace_log",
                e,
                directory=self._directory,
            ) from e
        self._log_path = Path(log_path)
        safe_logger(self.logger).log_debug("trace log opened", {"path": self._log_path})

    def _failure(
        self,
        error: Exception,
        operation: str,
        cause: Optional[BaseException] = None,
        **context: Any,
    ) -> Exception:
        """Record ``error`` in the diagnostic log and hand it back for raising."""
        if cause is not None:
            error.__cause__ = cause
        safe_logger(self.logger).log_error(error, {"operation": operation, **context})
        return error

    # ----- Accessors -----

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def log_handle(self) -> Optional[TextIO]:
        """Session trace log stream, or None if logging is disabled."""
        return self._log_handle

    @property
    def log_path(self) -> Optional[Path]:
        return self._log_path

    # Short aliases
    tmpdir = directory
    tmplog = log_handle

    @property
    def closed(self) -> bool:
        return self._closed

    def __str__(self) -> str:
        return str(self._directory)

    def __fspath__(self) -> str:
        return str(self._directory)

    def __repr__(self) -> str:
        return f"TraceDir({str(self._directory)!r}, cleanup={self.cleanup_on_exit})"

    # ----- File creation -----

    def create_file(
        self,
        unlink: bool = False,
        suffix: str = "",
        exlock: bool = True,
        log: bool = False,
        dir: Optional[Union[str, PurePath]] = None,
        mode: str = "w+b",
        encoding: Optional[str] = None,
        caller: Optional[str] = None,
    ) -> IO[Any]:
        """
        Create a temporary file named after the requesting function.

        The name is ``<label>-<random><suffix>`` where the label is the
        fully-qualified name of the first caller not registered with
        @skip_temp, with dots turned into dashes.

        Args:
            unlink: Delete the file when the handle is closed. Off by
                default since the session directory is removed anyway
            suffix: File suffix/extension
            exlock: Take an exclusive lock on the new file (POSIX only)
            log: Also write the trace entry to ``<file>.log``
            dir: Subdirectory of the session directory, created if missing
            mode: File mode passed to NamedTemporaryFile
            encoding: Text encoding for text modes
            caller: Explicit label, bypassing stack attribution

        Returns:
            Open file object; its ``name`` attribute is the absolute path

        Raises:
            AllocationError: If the session is closed or the file cannot be
                created or locked
            PathError: If the subdirectory cannot be created
        """
        if self._closed:
            raise self._failure(
                AllocationError(f"Session is closed: {self._directory}"), "create_file"
            )

        frames = current_stack(skip=1)
        if caller is None:
            caller = attribute_caller((f.name for f in frames), self.registry)

        target_dir = self._resolve_subdir(dir) if dir is not None else self._directory

        try:
            handle = tempfile.NamedTemporaryFile(
                mode=mode,
                encoding=encoding,
                prefix=template_prefix(sanitize(caller)),
                suffix=suffix,
                dir=target_dir,
                delete=unlink,
            )
        except OSError as e:
            raise self._failure(
                AllocationError(f"Failed to create temporary file: {e}"),
                "create_file",
                e,
                directory=target_dir,
                caller=caller,
            ) from e

        if exlock:
            self._lock(handle, unlink)
        self._handles.append(handle)

        if self._log_handle is not None or log:
            self._trace(handle.name, frames, sibling=log)

        safe_logger(self.logger).log_operation(
            "file_created",
            {"path": handle.name, "caller": caller, "unlink": unlink},
        )
        return handle

    tmpfile = create_file

    def _resolve_subdir(self, subdir: Union[str, PurePath]) -> Path:
        relative = PurePath(subdir)
        if relative.is_absolute() or ".." in relative.parts:
            raise self._failure(
                PathError(f"Subdirectory must be relative and inside the session: {subdir}"),
                "resolve_subdir",
                subdir=subdir,
            )

        target = self._directory.joinpath(*relative.parts)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise self._failure(
                PathError(f"Failed to create subdirectory {subdir}: {e}"),
                "resolve_subdir",
                e,
                subdir=subdir,
            ) from e
        safe_logger(self.logger).log_debug("subdirectory ready", {"path": target})
        return target

    def _lock(self, handle: IO[Any], unlink: bool) -> None:
        if fcntl is None:
            return
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            handle.close()
            if not unlink:
                # delete=False: closing left the file behind
                try:
                    os.unlink(handle.name)
                except FileNotFoundError:
                    pass
            raise self._failure(
                AllocationError(f"Failed to lock {handle.name}: {e}"),
                "lock_file",
                e,
                path=handle.name,
            ) from e

    def _trace(self, path: str, frames: Sequence[CallFrame], sibling: bool) -> None:
        """Write the creation entry to the session log and/or ``<path>.log``."""
        entry = format_entry(path, format_stack(list(reversed(frames))))

        if self._log_handle is not None:
            with self._log_lock:
                self._log_handle.write(entry)
                self._log_handle.flush()

        if sibling:
            try:
                Path(f"{path}.log").write_text(entry, encoding="utf-8")
            except OSError as e:
                raise self._failure(
                    AllocationError(f"Failed to write {path}.log: {e}"),
                    "write_sibling_log",
                    e,
                    path=path,
                ) from e

    # ----- Teardown -----

    def cleanup(self) -> Dict[str, int]:
        """
        Release the session.

        Closes every handle created by the session and the trace log, then
        removes the directory if cleanup is enabled. Failures are reported
        as CleanupWarning and counted, never raised. Safe to call twice.

        Returns:
            Dictionary with cleanup statistics
        """
        stats = {"files_closed": 0, "dirs_removed": 0, "errors": 0}
        if self._closed:
            return stats
        self._closed = True

        for handle in self._handles:
            if handle.closed:
                continue
            try:
                handle.close()
                stats["files_closed"] += 1
            except OSError as e:
                stats["errors"] += 1
                self._warn(f"Failed to close {handle.name}", e)
        self._handles.clear()

        if self._log_handle is not None:
            try:
                self._log_handle.close()
            except OSError as e:
                stats["errors"] += 1
                self._warn(f"Failed to close trace log {self._log_path}", e)

        if self.cleanup_on_exit and self._directory.exists():
            try:
                shutil.rmtree(self._directory)
                stats["dirs_removed"] += 1
            except OSError as e:
                stats["errors"] += 1
                self._warn(f"Failed to remove {self._directory}", e)

        safe_logger(self.logger).log_operation(
            "session_closed", {"directory": self._directory, **stats}
        )
        if self._owns_logger:
            self.logger.close()
        return stats

    def close(self) -> None:
        self.cleanup()

    def _warn(self, message: str, error: Exception) -> None:
        warnings.warn(f"{message}: {error}", CleanupWarning, stacklevel=3)
        safe_logger(self.logger).log_warning(message, {"error": str(error)})

    def __enter__(self) -> "TraceDir":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        """Context manager exit with cleanup."""
        del exc_type, exc_val, exc_tb
        self.cleanup()
