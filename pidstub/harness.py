"""
Harness side of the stub: spawn a stub process, read back what it
announced, signal it and collect its exit status.

Example:
    >>> from pidstub.harness import StubProcess
    >>>
    >>> with StubProcess(["--flag", "value"]) as proc:
    ...     ann = proc.read_announcement()
    ...     assert ann.pid == proc.pid
    ...     assert ann.args == ("--flag", "value")
    ...     proc.interrupt()
    ...     assert proc.wait(timeout=5.0) == 0
"""

from __future__ import annotations

import os
import queue
import signal
import subprocess
import sys
import threading
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import IO

from .core import StubConfig
from .exceptions import AnnouncementError, HarnessError, HarnessTimeoutError
from .log import LogConfig, Logger, LoggerFactory

DEFAULT_READ_TIMEOUT = 5.0

# Module run by ``python -m`` for each variant
_VARIANT_MODULES = {
    "timeout": "pidstub",
    "wait": "pidstub.cli.wait",
}

_EOF = None


@dataclass(frozen=True)
class Announcement:
    """What a stub printed before it started waiting."""

    pid: int
    argv: tuple[str, ...]

    @property
    def args(self) -> tuple[str, ...]:
        """Arguments after the invocation name."""
        return self.argv[1:]


def parse_announcement(lines: Sequence[str]) -> Announcement:
    """
    Parse a stub's stdout lines.

    Args:
        lines: Output lines without line terminators

    Returns:
        Announcement with the pid from the first line and the rest as argv

    Raises:
        AnnouncementError: If there is no first line or it is not a decimal pid
    """
    if not lines:
        raise AnnouncementError("stub printed nothing")

    first = lines[0]
    if not first.isdecimal():
        raise AnnouncementError("first line is not a pid", line=repr(first))
    return Announcement(pid=int(first), argv=tuple(lines[1:]))


def stub_command(variant: str = "timeout", python: str | None = None) -> list[str]:
    """
    Command line that starts a stub of the given variant.

    Args:
        variant: Any name accepted by StubConfig.from_variant
        python: Interpreter to use (defaults to sys.executable)

    Raises:
        ConfigError: If the variant is unknown
    """
    module = _VARIANT_MODULES[StubConfig.from_variant(variant).variant]
    return [python or sys.executable, "-m", module]


def _child_env(env: dict[str, str] | None) -> dict[str, str]:
    """Environment in which the child imports the same pidstub as this process."""
    result = dict(os.environ if env is None else env)
    source_root = str(Path(__file__).resolve().parent.parent)
    paths = [source_root]
    if result.get("PYTHONPATH"):
        paths.append(result["PYTHONPATH"])
    result["PYTHONPATH"] = os.pathsep.join(paths)
    return result


def _pump(stream: IO[bytes], lines: queue.Queue[str | None]) -> None:
    """Reader thread body: forward stdout lines to the queue, then EOF."""
    # Decoded like sys.argv so undecodable bytes survive the round trip
    try:
        for line in stream:
            lines.put(os.fsdecode(line.removesuffix(b"\n")))
    finally:
        lines.put(_EOF)


class StubProcess:
    """
    A stub running as a child process.

    Leaving the context kills the child if it is still running, which is the
    only way a "wait" variant stub ends without a signal.

    Args:
        args: Arguments to pass after the invocation name
            (no newlines, since the announcement is line-oriented)
        variant: "timeout" (exits 1 after 10s) or "wait" (never exits on its own)
        lg: Logger for harness diagnostics
        python: Interpreter to run the stub with
        env: Base environment for the child (defaults to os.environ)
    """

    def __init__(
        self,
        args: Iterable[str] = (),
        variant: str = "timeout",
        lg: Logger | None = None,
        python: str | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self._args = list(args)
        for index, arg in enumerate(self._args):
            if "\n" in arg:
                raise HarnessError(
                    "argument contains a newline and cannot be read back",
                    index=index,
                )
        self._command = stub_command(variant, python) + self._args
        self._variant = StubConfig.from_variant(variant).variant
        self._env = env
        self._lg = lg or LoggerFactory.create(
            "/pidstub/harness", LogConfig.from_params("warning")
        )
        self._proc: subprocess.Popen[bytes] | None = None
        self._lines: queue.Queue[str | None] = queue.Queue()
        self._collected: list[str] = []
        self._eof = False
        self._reader: threading.Thread | None = None
        self._started_at: float | None = None
        self._announced_at: float | None = None
        self._announcement: Announcement | None = None

    @property
    def command(self) -> list[str]:
        return list(self._command)

    @property
    def variant(self) -> str:
        return self._variant

    @property
    def args(self) -> list[str]:
        return list(self._args)

    @property
    def pid(self) -> int:
        """Pid of the child as reported by the operating system."""
        return self._require_proc().pid

    @property
    def returncode(self) -> int | None:
        return None if self._proc is None else self._proc.poll()

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    @property
    def started_at(self) -> float | None:
        """time.monotonic() value taken just before the child was spawned."""
        return self._started_at

    @property
    def announced_at(self) -> float | None:
        """time.monotonic() value taken once the announcement was read."""
        return self._announced_at

    @property
    def announcement(self) -> Announcement | None:
        return self._announcement

    def __enter__(self) -> StubProcess:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def start(self) -> StubProcess:
        """Spawn the child with stdout piped."""
        if self._proc is not None:
            raise HarnessError("stub already started", pid=self._proc.pid)

        self._started_at = time.monotonic()
        self._proc = subprocess.Popen(
            self._command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            env=_child_env(self._env),
        )
        assert self._proc.stdout is not None
        self._reader = threading.Thread(
            target=_pump,
            args=(self._proc.stdout, self._lines),
            name=f"stub-reader-{self._proc.pid}",
            daemon=True,
        )
        self._reader.start()
        self._lg.debug(
            "stub started",
            extra={"pid": self._proc.pid, "variant": self._variant},
        )
        return self

    def read_line(self, timeout: float | None = DEFAULT_READ_TIMEOUT) -> str | None:
        """
        Read the next stdout line.

        Returns:
            The line without its terminator, or None at end of output

        Raises:
            HarnessTimeoutError: If no line arrives within timeout
        """
        self._require_proc()
        if self._eof:
            return None
        try:
            line = self._lines.get(timeout=timeout)
        except queue.Empty as e:
            raise HarnessTimeoutError(
                "no output from stub", pid=self.pid, timeout=timeout
            ) from e
        if line is _EOF:
            self._eof = True
            return None
        self._collected.append(line)
        return line

    def read_announcement(
        self, timeout: float = DEFAULT_READ_TIMEOUT
    ) -> Announcement:
        """
        Read the pid line and one line per argv entry.

        The stub prints its invocation name before the arguments, so this
        reads 2 + len(args) lines. Arguments never contain a newline (the
        constructor rejects them), so line count and argv agree.

        Raises:
            HarnessTimeoutError: If the lines do not arrive within timeout
            AnnouncementError: If the output ends early or has no pid line
        """
        if self._announcement is not None:
            return self._announcement

        deadline = time.monotonic() + timeout
        expected = 2 + len(self._args)
        lines: list[str] = []
        while len(lines) < expected:
            remaining = max(0.0, deadline - time.monotonic())
            line = self.read_line(timeout=remaining)
            if line is None:
                raise AnnouncementError(
                    "stub output ended before announcement was complete",
                    expected=expected,
                    received=len(lines),
                    returncode=self.returncode,
                )
            lines.append(line)

        self._announcement = parse_announcement(lines)
        self._announced_at = time.monotonic()
        self._lg.debug(
            "stub announced",
            extra={"pid": self._announcement.pid, "argc": len(lines) - 1},
        )
        return self._announcement

    def interrupt(self) -> None:
        """Send SIGINT."""
        self.send_signal(signal.SIGINT)

    def terminate(self) -> None:
        """Send SIGTERM."""
        self.send_signal(signal.SIGTERM)

    def send_signal(self, sig: signal.Signals) -> None:
        proc = self._require_proc()
        self._lg.debug("sending signal", extra={"pid": proc.pid, "signal": sig.name})
        proc.send_signal(sig)

    def kill(self) -> None:
        """Kill the child outright (SIGKILL on POSIX)."""
        proc = self._require_proc()
        if proc.poll() is None:
            self._lg.debug("killing stub", extra={"pid": proc.pid})
            proc.kill()

    def wait(self, timeout: float | None = None) -> int:
        """
        Wait for the child to exit.

        Returns:
            The exit status (negative signal number if killed on POSIX)

        Raises:
            HarnessTimeoutError: If the child is still running after timeout
        """
        proc = self._require_proc()
        try:
            code = proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise HarnessTimeoutError(
                "stub did not exit", pid=proc.pid, timeout=timeout
            ) from e

        if self._reader is not None:
            self._reader.join(timeout=DEFAULT_READ_TIMEOUT)
        self._lg.debug("stub exited", extra={"pid": proc.pid, "code": code})
        return code

    def output(self) -> list[str]:
        """Every stdout line seen so far, including the announcement."""
        while not self._eof:
            try:
                line = self._lines.get_nowait()
            except queue.Empty:
                break
            if line is _EOF:
                self._eof = True
            else:
                self._collected.append(line)
        return list(self._collected)

    def close(self) -> None:
        """Kill the child if needed and release the pipe."""
        if self._proc is None:
            return
        if self._proc.poll() is None:
            self.kill()
            self._proc.wait()
        if self._reader is not None:
            self._reader.join(timeout=DEFAULT_READ_TIMEOUT)
        if self._proc.stdout is not None:
            self._proc.stdout.close()

    def _require_proc(self) -> subprocess.Popen[bytes]:
        if self._proc is None:
            raise HarnessError("stub not started")
        return self._proc
