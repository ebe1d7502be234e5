"""
Signal waiter: scoped registration of termination signals and a blocking
wait that races signal delivery against an optional timer.

Delivery is routed through ``signal.set_wakeup_fd`` into a socket pair, and
the wait is a selector on the read end. A signal that arrives before
``wait()`` is called leaves a byte in the socket, so it is still observed.
"""

from __future__ import annotations

import enum
import selectors
import signal
import socket
import threading
import time
from collections.abc import Iterable
from types import FrameType, TracebackType
from typing import Any

from ..exceptions import SignalSetupError
from ..log import Logger
from .config import TERMINATION_SIGNALS


class WaitOutcome(enum.Enum):
    """Which event source won the wait."""

    SIGNALED = "signaled"
    TIMED_OUT = "timed_out"


class SignalWaiter:
    """
    Context manager that turns termination signals into a waitable event.

    While entered, SIGINT and SIGTERM (or the configured set) no longer kill
    the process; they are queued and returned by ``wait()``.

    Usage:
        with SignalWaiter(lg=lg) as waiter:
            announce(os.getpid(), sys.argv, sys.stdout)
            if waiter.wait(timeout=10.0) is WaitOutcome.SIGNALED:
                return 0
            return 1

    Args:
        signals: Signals to intercept
        lg: Logger for lifecycle diagnostics
        release: Whether leaving the context restores the previous handlers.
            Pass False when the process exits right after the wait, so a
            late second signal is still absorbed instead of killing it.
    """

    def __init__(
        self,
        signals: Iterable[signal.Signals] = TERMINATION_SIGNALS,
        lg: Logger | None = None,
        release: bool = True,
    ) -> None:
        self._signals = tuple(signal.Signals(s) for s in signals)
        self._lg = lg
        self._release = release
        self._original_handlers: dict[signal.Signals, Any] = {}
        self._previous_wakeup_fd = -1
        self._rsock: socket.socket | None = None
        self._wsock: socket.socket | None = None
        self._selector: selectors.BaseSelector | None = None
        self._received: signal.Signals | None = None

    @property
    def signals(self) -> tuple[signal.Signals, ...]:
        return self._signals

    @property
    def received(self) -> signal.Signals | None:
        """The signal that ended the wait, or None."""
        return self._received

    @property
    def active(self) -> bool:
        """True while handlers are installed."""
        return self._selector is not None

    def __enter__(self) -> SignalWaiter:
        """Install handlers and the wakeup socket."""
        if threading.current_thread() is not threading.main_thread():
            raise SignalSetupError(
                "signal handlers can only be installed from the main thread",
                thread=threading.current_thread().name,
            )

        self._rsock, self._wsock = socket.socketpair()
        self._rsock.setblocking(False)
        self._wsock.setblocking(False)

        # Wakeup fd goes in first so no delivery can slip between the two steps
        self._previous_wakeup_fd = signal.set_wakeup_fd(
            self._wsock.fileno(), warn_on_full_buffer=False
        )
        for sig in self._signals:
            self._original_handlers[sig] = signal.signal(sig, self._handle_signal)

        self._selector = selectors.DefaultSelector()
        self._selector.register(self._rsock, selectors.EVENT_READ)

        self._debug(
            "signal handlers registered",
            extra={"signals": [s.name for s in self._signals]},
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Restore previous handlers unless created with release=False."""
        if not self._release:
            return
        self.close()

    def close(self) -> None:
        """Restore previous handlers and wakeup fd, and close the sockets."""
        if self._selector is None:
            return

        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()
        signal.set_wakeup_fd(self._previous_wakeup_fd)

        self._selector.close()
        self._selector = None
        for sock in (self._rsock, self._wsock):
            if sock is not None:
                sock.close()
        self._rsock = self._wsock = None
        self._debug("signal handlers released")

    def wait(self, timeout: float | None = None) -> WaitOutcome:
        """
        Block until one of the signals arrives or the timeout elapses.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            WaitOutcome.SIGNALED or WaitOutcome.TIMED_OUT, whichever came first

        Raises:
            SignalSetupError: If called outside the context
        """
        if self._selector is None:
            raise SignalSetupError("wait() called before handlers were installed")
        if self._received is not None:
            return WaitOutcome.SIGNALED

        deadline = None if timeout is None else time.monotonic() + timeout
        self._debug("waiting for signal", extra={"timeout": timeout})

        while True:
            remaining = None
            if deadline is not None:
                remaining = max(0.0, deadline - time.monotonic())

            if self._selector.select(remaining):
                signum = self._drain()
                if signum is not None:
                    self._received = signum
                    self._debug("received signal", extra={"signal": signum.name})
                    return WaitOutcome.SIGNALED
            elif deadline is not None and time.monotonic() >= deadline:
                self._debug("wait timed out", extra={"timeout": timeout})
                return WaitOutcome.TIMED_OUT

    def _drain(self) -> signal.Signals | None:
        """Empty the wakeup socket and return the first of our signals in it."""
        assert self._rsock is not None

        found = None
        while True:
            try:
                data = self._rsock.recv(64)
            except (BlockingIOError, InterruptedError):
                break
            if not data:
                break
            for signum in data:
                if signum not in self._signals:
                    if self._lg is not None:
                        self._lg.trace(
                            "ignoring other signal", extra={"signum": signum}
                        )
                elif found is None:
                    found = signal.Signals(signum)
        return found

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        """
        Python-level handler for the intercepted signals.

        The wakeup socket already carries the signal number; installing this
        handler is what keeps the default action from terminating the process.
        """

    def _debug(self, msg: str, **kwargs: Any) -> None:
        if self._lg is not None:
            self._lg.debug(msg, **kwargs)
