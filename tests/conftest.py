"""Shared fixtures for the diaglog test suite."""

import logging

import pytest

from diaglog import errors
from diaglog.config.loader import LogSettings
from diaglog.context import LogContext


class RecordingBreaker:
    """Breaker stub: counts halts and runs an optional callback instead of stopping."""

    def __init__(self, on_halt=None):
        self.calls = 0
        self._on_halt = on_halt

    def halt(self):
        self.calls += 1
        if self._on_halt is not None:
            self._on_halt()


class FlushSpy:
    """Wraps the sink's open file and records where flushes happened."""

    def __init__(self, raw):
        self.raw = raw
        self.written = []
        self.flushed_after = []

    def write(self, data):
        self.written.append(data)
        return self.raw.write(data)

    def flush(self):
        self.flushed_after.append(len(self.written))
        self.raw.flush()

    def close(self):
        self.raw.close()


# ---------------------------------------------------------------------------
# Global state isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_logging_state():
    """Reset the LogContext singleton, root logger and development checks."""
    root = logging.getLogger()
    saved_level = root.level
    saved_handlers = list(root.handlers)
    saved_checks = errors.debug_checks_enabled()
    errors.set_debug_checks(True)
    LogContext.reset()
    yield
    LogContext.reset()
    errors.set_debug_checks(saved_checks)
    logging.disable(logging.NOTSET)
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)


@pytest.fixture
def settings():
    return LogSettings(app_name="test", encoding="utf-8", capture_warnings=False)


@pytest.fixture
def breaker():
    return RecordingBreaker()


@pytest.fixture
def context(breaker):
    ctx = LogContext(breaker=breaker)
    yield ctx
    ctx.shutdown()


def read_lines(path):
    return path.read_bytes().decode("utf-8").splitlines(keepends=True)
