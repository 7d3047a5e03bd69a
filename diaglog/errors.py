"""Exceptions and development-only consistency checks.

The logging path must never fail loudly and must never log about its
own failures (that would recurse). Internal invariants are therefore
checked with verify(): in a normal run it just returns the condition so
the caller can bail out, with development checks enabled it raises.

Enable development checks with DIAGLOG_DEBUG_CHECKS=1 or
set_debug_checks(True).
"""

from __future__ import annotations

import os

_TRUTHY = {"1", "true", "yes", "on"}

_debug_checks = os.environ.get("DIAGLOG_DEBUG_CHECKS", "").strip().lower() in _TRUTHY


class DiagLogError(Exception):
    """Base class for diaglog errors."""


class ConsistencyError(DiagLogError, AssertionError):
    """An internal invariant of the logging core was violated."""


def set_debug_checks(enabled: bool) -> None:
    global _debug_checks
    _debug_checks = bool(enabled)


def debug_checks_enabled() -> bool:
    return _debug_checks


def verify(condition: bool, message: str) -> bool:
    """Check an internal invariant.

    Returns the condition. Raises ConsistencyError instead of returning
    False when development checks are enabled.
    """
    if not condition and _debug_checks:
        raise ConsistencyError(message)
    return bool(condition)
