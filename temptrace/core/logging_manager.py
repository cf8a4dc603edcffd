#!/usr/bin/env python3
"""
logging_manager.py
--------------------
Diagnostic logging for temptrace sessions.

This is the operational log (what a session did and what went wrong),
separate from the creation trace a session writes into its own directory.
Diagnostic log files live outside the session directory, so they survive
session cleanup and rotate instead of growing without bound.

Files written under the log directory:
    <component>.log   every session event (DEBUG and above)
    errors.log        allocation and path failures, with tracebacks

Classes:
    TraceLogger: Rotating file + console logger for one component
    NullLogger: No-op stand-in used when no logger is configured

Functions:
    setup_logger: Build a TraceLogger under <log_dir>/operations
    safe_logger: Return the given logger or the shared NullLogger
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional


FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(funcName)s:%(lineno)d] %(message)s"
CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _reset_handlers(logger: logging.Logger) -> None:
    """Close and detach handlers left on a named logger by an earlier instance."""
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()


class TraceLogger:
    """
    Rotating diagnostic logger for temptrace sessions.

    Named loggers are process-wide, so building a second TraceLogger for
    the same component closes the first one's handlers.

    Attributes:
        log_dir: Directory for log files
        component_name: Logger namespace and main log file name
        events: Logger for session events
        failures: Logger for errors only
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "temptrace",
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ) -> None:
        """
        Args:
            log_dir: Directory for log files (created if missing)
            component_name: Logger namespace and main log file name
            max_bytes: Log file size that triggers rotation (default: 5MB)
            backup_count: Rotated files to keep (default: 3)
        """
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.max_bytes = max_bytes
        self.backup_count = backup_count

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.events = self._build(
            "events", f"{component_name}.log", logging.DEBUG, console=True
        )
        self.failures = self._build("errors", "errors.log", logging.ERROR)

    def _build(
        self, suffix: str, filename: str, level: int, console: bool = False
    ) -> logging.Logger:
        logger = logging.getLogger(f"{self.component_name}.{suffix}")
        logger.setLevel(level)
        _reset_handlers(logger)

        file_handler = RotatingFileHandler(
            self.log_dir / filename,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.WARNING)
            console_handler.setFormatter(
                logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S")
            )
            logger.addHandler(console_handler)
        return logger

    @property
    def handlers(self) -> list:
        return self.events.handlers + self.failures.handlers

    def close(self) -> None:
        """Close every handler; later calls to log methods are dropped."""
        _reset_handlers(self.events)
        _reset_handlers(self.failures)

    @staticmethod
    def _with_details(message: str, details: Optional[Dict[str, Any]]) -> str:
        if not details:
            return message
        return f"{message} {json.dumps(details, default=str, sort_keys=True)}"

    def log_operation(
        self, operation: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Record a session event such as ``file_created``."""
        self.events.info(self._with_details(f"[{operation}]", details))

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.events.debug(self._with_details(message, details))

    def log_warning(
        self, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.events.warning(self._with_details(message, details))

    def log_error(
        self, error: BaseException, context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Record a failure about to be raised to the caller.

        The summary goes to the events log; the traceback of ``error``
        (including its chained cause) goes to errors.log.

        Args:
            error: Exception being raised
            context: What the session was doing (operation, path, ...)
        """
        summary = self._with_details(f"{type(error).__name__}: {error}", context)
        self.events.error(summary)
        self.failures.error(summary, exc_info=(type(error), error, error.__traceback__))


class NullLogger:
    """
    Null Object logger with the TraceLogger interface.

    Lets sessions call logger methods unconditionally when the host
    program did not configure diagnostic logging.
    """

    def close(self) -> None:
        pass

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_error(self, error: BaseException, context: Optional[Dict[str, Any]] = None) -> None:
        pass


_null_logger = NullLogger()


def safe_logger(logger: Optional[TraceLogger]) -> TraceLogger:
    """
    Return the provided logger or the shared NullLogger if None.

    Usage:
        safe_logger(self.logger).log_debug("message")
    """
    return logger if logger is not None else _null_logger  # type: ignore[return-value]


def setup_logger(log_dir: Path, component_name: str = "temptrace") -> TraceLogger:
    """
    Build a TraceLogger writing under ``<log_dir>/operations``.

    Args:
        log_dir: Base log directory
        component_name: Component identifier for the log file name

    Returns:
        Configured TraceLogger instance
    """
    return TraceLogger(Path(log_dir) / "operations", component_name=component_name)
