"""
The process harness stub.

Announces its pid and argument vector on stdout, then waits for SIGINT or
SIGTERM (exit 0) or, when a timeout is configured, for the timeout to
elapse (exit 1).
"""

from __future__ import annotations

import enum
import os
import sys
from collections.abc import Sequence
from typing import TextIO

from ..log import LogConfig, Logger, LoggerFactory
from .config import EXIT_SIGNALED, EXIT_TIMED_OUT, StubConfig
from .signals import SignalWaiter, WaitOutcome


class StubState(enum.Enum):
    """Lifecycle of a stub run."""

    STARTING = "starting"
    ANNOUNCED = "announced"
    WAITING = "waiting"
    EXITED_OK = "exited_ok"
    EXITED_TIMEOUT = "exited_timeout"


def announce(pid: int, argv: Sequence[str], out: TextIO) -> None:
    """
    Write the pid and then each argument on its own line, and flush.

    A stream backed by a binary buffer, such as sys.stdout, gets each
    argument as the bytes the operating system passed in (os.fsencode), so
    arguments that do not decode in the locale still come out unchanged.

    Args:
        pid: Process identifier to report
        argv: Arguments, echoed verbatim in order
        out: Stream to write to
    """
    buffer = getattr(out, "buffer", None)
    if buffer is None:
        out.write(f"{pid}\n")
        for arg in argv:
            out.write(f"{arg}\n")
        out.flush()
        return

    out.flush()
    buffer.write(b"%d\n" % pid)
    for arg in argv:
        buffer.write(os.fsencode(arg) + b"\n")
    buffer.flush()


class Stub:
    """
    A single stub run.

    Usage:
        stub = Stub(StubConfig.with_timeout())
        sys.exit(stub.run(sys.argv))

    Args:
        config: Variant and logging settings
        out: Stream for the announcement (defaults to sys.stdout)
        lg: Logger for diagnostics (defaults to a stderr logger at config.log_level)
        release: Whether to restore signal handlers after the wait. The process
            entry points pass False since they exit immediately afterwards.
    """

    def __init__(
        self,
        config: StubConfig | None = None,
        out: TextIO | None = None,
        lg: Logger | None = None,
        release: bool = True,
    ) -> None:
        self._config = config or StubConfig()
        self._out = out
        self._lg = lg or LoggerFactory.create(
            "/pidstub", LogConfig.from_params(self._config.log_level)
        )
        self._release = release
        self._state = StubState.STARTING
        self._waiter: SignalWaiter | None = None

    @property
    def config(self) -> StubConfig:
        return self._config

    @property
    def state(self) -> StubState:
        return self._state

    @property
    def lg(self) -> Logger:
        return self._lg

    @property
    def waiter(self) -> SignalWaiter | None:
        """Signal waiter of the current or last run."""
        return self._waiter

    def run(self, argv: Sequence[str] | None = None) -> int:
        """
        Announce, wait, and return the exit status.

        Args:
            argv: Arguments to echo (defaults to sys.argv)

        Returns:
            EXIT_SIGNALED (0) when a signal ended the wait,
            EXIT_TIMED_OUT (1) when the timeout elapsed
        """
        if argv is None:
            argv = sys.argv
        out = self._out if self._out is not None else sys.stdout

        self._waiter = SignalWaiter(
            self._config.signals, lg=self._lg, release=self._release
        )
        with self._waiter:
            announce(os.getpid(), argv, out)
            self._transition(StubState.ANNOUNCED)

            self._transition(StubState.WAITING)
            outcome = self._waiter.wait(self._config.timeout)

        if outcome is WaitOutcome.SIGNALED:
            self._transition(StubState.EXITED_OK)
            return EXIT_SIGNALED

        self._transition(StubState.EXITED_TIMEOUT)
        return EXIT_TIMED_OUT

    def _transition(self, state: StubState) -> None:
        self._lg.trace(
            "stub state", extra={"from": self._state.value, "to": state.value}
        )
        self._state = state


def run(argv: Sequence[str] | None = None, config: StubConfig | None = None) -> int:
    """Run a stub in this process and return its exit status."""
    return Stub(config, release=False).run(argv)
