"""Severity levels and the emit/flush policy.

Two independent thresholds decide what happens to a message:
the emit threshold gates console/file output of the non-critical
levels, the flush threshold decides whether a write is forced to disk.
Both are plain attributes set once during initialize() and only read
afterwards.
"""

from __future__ import annotations

import logging
from enum import IntEnum

# stdlib has no level above CRITICAL; FATAL records use this one.
FATAL_LEVEL = 60
logging.addLevelName(FATAL_LEVEL, "FATAL")


class Severity(IntEnum):
    """Ordered message severity, least to most severe."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    CRITICAL = 3
    FATAL = 4

    @property
    def label(self) -> str:
        """Display label used as the first token of every log line."""
        return _LABELS[self]

    def to_python_level(self) -> int:
        return _TO_PYTHON[self]

    @classmethod
    def from_python_level(cls, levelno: int) -> "Severity":
        """Map a stdlib logging level number onto a severity.

        ERROR and CRITICAL both map to CRITICAL; anything above
        CRITICAL is FATAL.
        """
        if levelno > logging.CRITICAL:
            return cls.FATAL
        if levelno >= logging.ERROR:
            return cls.CRITICAL
        if levelno >= logging.WARNING:
            return cls.WARNING
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG

    @classmethod
    def from_name(cls, name: str) -> "Severity":
        normalized = name.strip().upper()
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc


_LABELS = {
    Severity.DEBUG: "Debug",
    Severity.INFO: "Info",
    Severity.WARNING: "Warning",
    Severity.CRITICAL: "Critical",
    Severity.FATAL: "Fatal",
}

_TO_PYTHON = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.CRITICAL: logging.CRITICAL,
    Severity.FATAL: FATAL_LEVEL,
}

_ALIASES = {
    "WARN": "WARNING",
    "ERROR": "CRITICAL",
}

DEFAULT_LEVEL = Severity.WARNING
DEFAULT_FLUSH_LEVEL = Severity.CRITICAL


class LogPolicy:
    """Emit and flush thresholds.

    No lock: both thresholds are written before any concurrent reader
    exists, and a single attribute read is atomic.
    """

    def __init__(
        self,
        level: Severity = DEFAULT_LEVEL,
        flush_level: Severity = DEFAULT_FLUSH_LEVEL,
    ) -> None:
        self._level = Severity(level)
        self._flush_level = Severity(flush_level)

    @property
    def level(self) -> Severity:
        return self._level

    @property
    def flush_level(self) -> Severity:
        return self._flush_level

    def set_level(self, threshold: Severity) -> None:
        """Set the emit threshold. CRITICAL and FATAL are never gated by it."""
        self._level = Severity(threshold)

    def set_flush_level(self, threshold: Severity) -> None:
        self._flush_level = Severity(threshold)

    def is_enabled(self, severity: Severity) -> bool:
        return severity >= self._level or severity >= Severity.CRITICAL

    def should_flush(self, severity: Severity) -> bool:
        return severity >= self._flush_level
