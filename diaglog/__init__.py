"""diaglog -- process-wide diagnostic logging.

Usage:
    import logging
    import diaglog

    diaglog.initialize("/path/to/settings", diaglog.Severity.INFO)
    logging.getLogger("audio").warning("buffer underflow")
    ...
    diaglog.shutdown()
"""

from __future__ import annotations

__version__ = "0.1.0"

from pathlib import Path

from diaglog.config.loader import LogSettings, load_settings
from diaglog.context import LogContext
from diaglog.errors import ConsistencyError, DiagLogError
from diaglog.severity import DEFAULT_FLUSH_LEVEL, DEFAULT_LEVEL, FATAL_LEVEL, LogPolicy, Severity
from diaglog.sink import WriteTarget

__all__ = [
    "ConsistencyError",
    "DiagLogError",
    "FATAL_LEVEL",
    "LogContext",
    "LogPolicy",
    "LogSettings",
    "Severity",
    "WriteTarget",
    "flush_log_file",
    "initialize",
    "initialize_from_settings",
    "load_settings",
    "shutdown",
]


def initialize(
    log_dir: str | Path,
    level: Severity = DEFAULT_LEVEL,
    flush_level: Severity = DEFAULT_FLUSH_LEVEL,
    debug_assert_break: bool = False,
    *,
    app_name: str = "app",
    settings: LogSettings | None = None,
) -> LogContext:
    """Initialize process-wide logging and return the context.

    ``settings`` supplies everything beyond the four main arguments;
    ``app_name`` is used only when no settings are given.
    """
    if settings is None:
        settings = LogSettings(app_name=app_name)
    context = LogContext.get()
    context.initialize(log_dir, level, flush_level, debug_assert_break, settings=settings)
    return context


def initialize_from_settings(settings: LogSettings | None = None) -> LogContext:
    """Initialize from settings, loading them from defaults and env if omitted."""
    if settings is None:
        settings = load_settings()
    context = LogContext.get()
    context.initialize_from_settings(settings)
    return context


def shutdown() -> None:
    LogContext.get().shutdown()


def flush_log_file() -> None:
    LogContext.get().flush_log_file()
