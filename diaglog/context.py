"""Logger context -- lifecycle and message dispatch.

LogContext owns everything that is process-wide: the emit/flush policy,
the sink writer, the debug-assert escalation flags and the installed
root handler. Every message, whether it comes from the stdlib logging
module or from a direct dispatch() call, passes through dispatch():

    severity -> write targets -> format -> (debug-assert escalation) -> sink

Lifecycle:
    initialize()  rotate old logs, open <app>.log, install the handler
    shutdown()    uninstall the handler, then close the file under its lock
"""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

from diaglog.breaker import Breaker, SignalBreaker
from diaglog.config.loader import LogSettings
from diaglog.errors import verify
from diaglog.formatter import default_encoding, format_record
from diaglog.handler import DiagHandler
from diaglog.log import logger
from diaglog.rotation import rotate_logs
from diaglog.severity import DEFAULT_FLUSH_LEVEL, DEFAULT_LEVEL, LogPolicy, Severity
from diaglog.sink import SinkWriter, WriteTarget


class LogContext:
    """Singleton holding the process-wide logging state."""

    _instance: LogContext | None = None
    _lock = threading.Lock()

    def __init__(self, breaker: Breaker | None = None) -> None:
        self._settings = LogSettings()
        self._policy = LogPolicy()
        self._sink = SinkWriter(default_encoding())
        self._breaker: Breaker = breaker if breaker is not None else SignalBreaker()
        self._encoding = default_encoding()
        self._debug_assert_break = False
        self._lifecycle_lock = threading.Lock()
        self._handler: DiagHandler | None = None
        self._saved_root_level: int | None = None
        self._saved_root_handlers: list[logging.Handler] = []
        self._captured_warnings = False

    @classmethod
    def get(cls) -> "LogContext":
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Shut down and discard the singleton. Mainly for testing."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance.shutdown()
            cls._instance = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def policy(self) -> LogPolicy:
        return self._policy

    @property
    def sink(self) -> SinkWriter:
        return self._sink

    @property
    def settings(self) -> LogSettings:
        return self._settings

    @property
    def breaker(self) -> Breaker:
        return self._breaker

    @breaker.setter
    def breaker(self, breaker: Breaker) -> None:
        self._breaker = breaker

    @property
    def debug_assert_break(self) -> bool:
        return self._debug_assert_break

    @property
    def is_installed(self) -> bool:
        return self._handler is not None

    @property
    def log_path(self) -> Path | None:
        return self._sink.path

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(
        self,
        log_dir: str | Path,
        level: Severity = DEFAULT_LEVEL,
        flush_level: Severity = DEFAULT_FLUSH_LEVEL,
        debug_assert_break: bool = False,
        *,
        settings: LogSettings | None = None,
    ) -> bool:
        """Rotate logs, open the log file and install the root handler.

        A second call while initialized is a no-op and returns False. A
        log file that cannot be opened leaves the context console-only.
        """
        settings = settings if settings is not None else LogSettings()
        with self._lifecycle_lock:
            if not verify(
                self._handler is None and not self._sink.is_open,
                "LogContext.initialize() called twice",
            ):
                return False

            self._settings = settings
            self._policy.set_level(level)
            self._policy.set_flush_level(flush_level)
            self._debug_assert_break = bool(debug_assert_break)
            self._encoding = settings.encoding or default_encoding()
            self._sink = SinkWriter(self._encoding)

            # Nothing can write yet, so rotation cannot race a writer.
            log_path = rotate_logs(log_dir, settings.log_file_name, settings.max_backups)
            opened = self._sink.open(log_path)
            self._install_handler(settings.capture_warnings)

        if opened:
            logger.debug("Logging to %s (level %s, flush level %s)",
                         log_path, self._policy.level.label, self._policy.flush_level.label)
        else:
            logger.debug("Log file %s unavailable, logging to console only", log_path)
        return True

    def initialize_from_settings(self, settings: LogSettings) -> bool:
        return self.initialize(
            settings.resolved_log_dir(),
            settings.level,
            settings.flush_level,
            settings.debug_assert_break,
            settings=settings,
        )

    def shutdown(self) -> None:
        """Uninstall the handler, then close the log file.

        Threads already inside the handler finish their write first; the
        close waits for the file lock.
        """
        with self._lifecycle_lock:
            if self._handler is not None:
                logger.debug("Shutting down logging")
                self._uninstall_handler()
            self._sink.close()

    def flush_log_file(self) -> None:
        self._sink.flush()

    def _install_handler(self, capture_warnings: bool) -> None:
        root = logging.getLogger()
        handler = DiagHandler(self)
        self._saved_root_level = root.level
        # Sole root handler: any host handlers would bypass the emit threshold.
        self._saved_root_handlers = list(root.handlers)
        for existing in self._saved_root_handlers:
            root.removeHandler(existing)
        root.addHandler(handler)
        # Gating happens in dispatch(), so the root lets everything through.
        root.setLevel(logging.DEBUG)
        if capture_warnings:
            logging.captureWarnings(True)
            self._captured_warnings = True
        if sys.platform.startswith("linux"):
            # Packaged environments sometimes ship with logging.disable()
            # set, which hides debug output from user reports.
            logging.disable(logging.NOTSET)
        self._handler = handler

    def _uninstall_handler(self) -> None:
        root = logging.getLogger()
        root.removeHandler(self._handler)
        for saved in self._saved_root_handlers:
            root.addHandler(saved)
        self._saved_root_handlers = []
        if self._saved_root_level is not None:
            root.setLevel(self._saved_root_level)
        if self._captured_warnings:
            logging.captureWarnings(False)
            self._captured_warnings = False
        self._handler = None
        self._saved_root_level = None

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def targets_for(self, severity: Severity) -> WriteTarget:
        """Write targets for a severity, before sub-channel and assert handling."""
        if severity >= Severity.CRITICAL:
            return WriteTarget.ALL
        targets = WriteTarget.NONE
        if self._policy.is_enabled(severity):
            targets |= WriteTarget.CONSOLE | WriteTarget.FILE
        elif self._settings.capture_all_to_file:
            targets |= WriteTarget.FILE
        if self._policy.should_flush(severity):
            targets |= WriteTarget.FLUSH
        return targets

    def is_debug_assert(self, severity: Severity, text: str) -> bool:
        return severity == Severity.CRITICAL and text.startswith(self._settings.debug_assert_prefix)

    def dispatch(
        self,
        severity: Severity | int,
        text: str,
        *,
        category: str | None = None,
        thread_name: str | None = None,
    ) -> None:
        """Route one message to the console and/or the log file."""
        try:
            severity = Severity(severity)
        except ValueError:
            verify(False, f"unknown severity {severity!r}")
            return

        if thread_name is None:
            thread_name = threading.current_thread().name

        targets = self.targets_for(severity)
        record = format_record(
            severity,
            thread_name,
            category,
            text,
            encoding=self._encoding,
            sub_channel_prefix=self._settings.sub_channel_prefix,
        )
        if record.sub_channel:
            targets |= WriteTarget.CONSOLE | WriteTarget.FILE

        if self.is_debug_assert(severity, text):
            if self._debug_assert_break:
                self._sink.write(record.data, WriteTarget.ALL)
                self._breaker.halt()
                # Resumed from the debugger: the message is already written.
                return
            if self._settings.debug_assertions_fatal:
                self.dispatch(Severity.FATAL, text, category=category, thread_name=thread_name)
                return

        if targets & (WriteTarget.CONSOLE | WriteTarget.FILE):
            self._sink.write(record.data, targets)

    def debug(self, text: str, *, category: str | None = None) -> None:
        self.dispatch(Severity.DEBUG, text, category=category)

    def info(self, text: str, *, category: str | None = None) -> None:
        self.dispatch(Severity.INFO, text, category=category)

    def warning(self, text: str, *, category: str | None = None) -> None:
        self.dispatch(Severity.WARNING, text, category=category)

    def critical(self, text: str, *, category: str | None = None) -> None:
        self.dispatch(Severity.CRITICAL, text, category=category)

    def fatal(self, text: str, *, category: str | None = None) -> None:
        """Write a FATAL message to every sink. Terminating is up to the caller."""
        self.dispatch(Severity.FATAL, text, category=category)

    def debug_assert(self, text: str, *, category: str | None = None) -> None:
        """Report a failed internal consistency check as a debug-assertion event."""
        self.dispatch(
            Severity.CRITICAL,
            f"{self._settings.debug_assert_prefix}: {text}",
            category=category,
        )
