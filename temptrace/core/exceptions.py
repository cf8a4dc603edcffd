#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the temptrace package.

This module defines the hierarchy of exceptions raised when temporary
directories and files cannot be created, and the warning category used
when a session cannot be torn down cleanly.

Exception Hierarchy:
    Exception (built-in)
    └── TempTraceError - Base for all temptrace errors
        ├── AllocationError - Directory/file allocation failures
        ├── PathError - Requested subdirectory cannot be created
        ├── RegistryError - Skip registry misuse
        └── ConfigError - Invalid session configuration

    UserWarning (built-in)
    └── CleanupWarning - Best-effort teardown failures

Usage:
    from temptrace.core.exceptions import AllocationError, PathError

    try:
        fh = tmp.create_file(dir="sub/inner")
    except PathError as e:
        logger.error(f"Cannot create subdirectory: {e}")
    except AllocationError as e:
        logger.error(f"Cannot allocate temp file: {e}")
"""


class TempTraceError(Exception):
    """
    Base exception for temptrace errors.

    Catch this to handle any error raised by the package, or catch
    specific subclasses for more granular error handling.

    See Also:
        AllocationError, PathError, RegistryError, ConfigError
    """

    pass


class AllocationError(TempTraceError):
    """
    Exception for temporary directory and file allocation failures.

    Raised when:
    - The session directory cannot be created
    - A temporary file cannot be created
    - The name template is malformed (no trailing XXXX run)
    - An exclusive lock cannot be taken on a new file
    - Permission or disk space issues

    Examples:
        >>> raise AllocationError("Cannot create temp directory: /tmp not writable")
        >>> raise AllocationError("Template must end with at least XXXX: 'foo-XX'")
    """

    pass


class PathError(TempTraceError):
    """
    Exception for subdirectory creation failures.

    Raised when the ``dir`` option of a file request names a subdirectory
    that cannot be created inside the session directory, or that would
    escape it (absolute paths, ``..`` segments).

    Examples:
        >>> raise PathError("Cannot create subdirectory 'sub/inner': permission denied")
        >>> raise PathError("Subdirectory must be relative: '/etc'")
    """

    pass


class RegistryError(TempTraceError):
    """
    Exception for skip registry misuse.

    Raised when a function is registered into a registry that has
    already been frozen.

    Examples:
        >>> raise RegistryError("Registry is frozen: cannot register 'pkg.helper'")
    """

    pass


class ConfigError(TempTraceError):
    """
    Exception for invalid session configuration.

    Raised when a configuration mapping or YAML file cannot be turned
    into a valid TraceConfig.

    Examples:
        >>> raise ConfigError("Unknown configuration key: 'clean'")
        >>> raise ConfigError("Config file not found: temptrace.yaml")
    """

    pass


class CleanupWarning(UserWarning):
    """
    Warning for best-effort teardown failures.

    Emitted (never raised) when a session directory, log file or tracked
    file handle cannot be removed or closed during cleanup.
    """

    pass
