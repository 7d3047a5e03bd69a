"""Interactive break on debug assertions.

A breaker halts the calling thread until something external (a debugger,
an operator) resumes it. Tests swap in a recording stub.
"""

from __future__ import annotations

import signal
from typing import Protocol


class Breaker(Protocol):
    def halt(self) -> None:
        """Suspend execution until resumed externally."""


class SignalBreaker:
    """Raise SIGINT in the current process.

    Under a debugger this stops execution at the raising frame. Without
    one, Python's default SIGINT handler turns it into KeyboardInterrupt
    in the main thread.
    """

    def __init__(self, signum: int = signal.SIGINT) -> None:
        self._signum = signum

    def halt(self) -> None:
        signal.raise_signal(self._signum)
