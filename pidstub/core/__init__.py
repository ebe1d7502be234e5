from .config import (
    DEFAULT_TIMEOUT_SECS,
    EXIT_SIGNALED,
    EXIT_TIMED_OUT,
    TERMINATION_SIGNALS,
    StubConfig,
)
from .signals import SignalWaiter, WaitOutcome
from .stub import Stub, StubState, announce, run

__all__ = [
    "DEFAULT_TIMEOUT_SECS",
    "EXIT_SIGNALED",
    "EXIT_TIMED_OUT",
    "TERMINATION_SIGNALS",
    "SignalWaiter",
    "Stub",
    "StubConfig",
    "StubState",
    "WaitOutcome",
    "announce",
    "run",
]
