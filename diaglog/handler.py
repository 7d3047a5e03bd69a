"""Bridge from the stdlib logging module into the logging core.

DiagHandler is installed on the root logger by LogContext.initialize(),
which makes it the process-wide message handler: every record that
reaches the root logger is converted to (severity, thread, category,
text) and handed to LogContext.dispatch().
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from diaglog.severity import Severity

if TYPE_CHECKING:
    from diaglog.context import LogContext


class DiagHandler(logging.Handler):
    """Root handler that forwards records to a LogContext."""

    def __init__(self, context: "LogContext") -> None:
        super().__init__(logging.NOTSET)
        self._context = context
        self._local = threading.local()
        self._exc_formatter = logging.Formatter()

    def handle(self, record: logging.LogRecord) -> bool:
        # No handler-wide lock: the sink writer serializes file access
        # itself, and a debug-assert break must not block other threads.
        rv = self.filter(record)
        if isinstance(rv, logging.LogRecord):
            record = rv
        if rv:
            self.emit(record)
        return bool(rv)

    def emit(self, record: logging.LogRecord) -> None:
        # A record raised while this thread is already dispatching would recurse.
        if getattr(self._local, "active", False):
            return
        self._local.active = True
        try:
            self._context.dispatch(
                Severity.from_python_level(record.levelno),
                self._message_text(record),
                category=record.name,
                thread_name=record.threadName or threading.current_thread().name,
            )
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)
        finally:
            self._local.active = False

    def _message_text(self, record: logging.LogRecord) -> str:
        text = record.getMessage()
        if record.exc_info:
            if not record.exc_text:
                record.exc_text = self._exc_formatter.formatException(record.exc_info)
        if record.exc_text:
            text = f"{text}\n{record.exc_text}"
        if record.stack_info:
            text = f"{text}\n{self._exc_formatter.formatStack(record.stack_info)}"
        return text
