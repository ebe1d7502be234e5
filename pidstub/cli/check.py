#!/usr/bin/env python3
"""
Self-check for an installed stub.

Spawns stubs through the harness and verifies the observable contract:
announcement shape, pid agreement, argument echo, exit 0 on SIGINT and
SIGTERM, and for the timeout variant, exit 1 after the timeout.

Usage:
    pidstub-check
    pidstub-check --variant wait
    pidstub-check --skip-timeout --json
"""

from __future__ import annotations

import argparse
import json
import signal
import sys
import time
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass
from typing import Any

from rich.console import Console
from rich.table import Table

from pidstub.core import (
    DEFAULT_TIMEOUT_SECS,
    EXIT_SIGNALED,
    EXIT_TIMED_OUT,
    StubConfig,
)
from pidstub.exceptions import StubError
from pidstub.harness import StubProcess
from pidstub.log import LogError, Logger, create_logger

from .output import ConsoleOutput, OutputWriter

SAMPLE_ARGS = ("--flag", "value")

# Allowed lag between the signal (or timer) and the observed exit
EXIT_MARGIN_SECS = 5.0

# How far reading the announcement may trail the stub starting its timer
ANNOUNCE_LAG_SECS = 0.25

# How long a "wait" stub must stay alive with no signal to pass
STAYS_ALIVE_SECS = 1.0


@dataclass
class CheckResult:
    """Result of a single check."""

    name: str
    passed: bool
    message: str
    suggestion: str | None = None


StubFactory = Callable[..., StubProcess]


class StubChecker:
    """
    Runs the contract checks against freshly spawned stubs.

    Args:
        variant: Stub variant to check ("timeout" or "wait")
        skip_timeout: Skip the slow timeout-expiry check
        lg: Logger for progress diagnostics
        factory: Callable building a StubProcess (args, variant=..., lg=...)
    """

    def __init__(
        self,
        variant: str = "timeout",
        skip_timeout: bool = False,
        lg: Logger | None = None,
        factory: StubFactory = StubProcess,
    ) -> None:
        self._variant = StubConfig.from_variant(variant).variant
        self._skip_timeout = skip_timeout
        self._lg = lg or create_logger("/pidstub/check")
        self._factory = factory

    def run(self) -> list[CheckResult]:
        """Run all checks and return their results in order."""
        results: list[CheckResult] = []
        results.extend(self._check_announce_and_interrupt())
        results.append(self._check_signal_exit(signal.SIGTERM))

        if self._variant == "wait":
            results.append(self._check_stays_alive())
        elif not self._skip_timeout:
            results.append(self._check_timeout_exit())
        return results

    def _spawn(self, args: Sequence[str]) -> StubProcess:
        return self._factory(args, variant=self._variant, lg=self._lg)

    def _check_announce_and_interrupt(self) -> list[CheckResult]:
        """Announcement, pid, argv echo and SIGINT exit on one stub."""
        results = []
        with self._spawn(SAMPLE_ARGS) as proc:
            try:
                ann = proc.read_announcement()
            except StubError as e:
                return [
                    CheckResult(
                        name="announcement",
                        passed=False,
                        message=str(e),
                        suggestion="run the stub by hand and inspect its stdout",
                    )
                ]

            results.append(
                CheckResult(
                    name="pid",
                    passed=ann.pid == proc.pid,
                    message=f"announced {ann.pid}, spawned {proc.pid}",
                )
            )
            results.append(
                CheckResult(
                    name="argument echo",
                    passed=ann.args == SAMPLE_ARGS,
                    message=" ".join(ann.args) or "(none)",
                )
            )
            results.append(self._signal_result(signal.SIGINT, proc))

            lines = proc.output()
            expected = 2 + len(SAMPLE_ARGS)
            results.append(
                CheckResult(
                    name="line count",
                    passed=len(lines) == expected,
                    message=f"{len(lines)} lines (expected {expected})",
                )
            )
        return results

    def _check_signal_exit(self, sig: signal.Signals) -> CheckResult:
        with self._spawn(()) as proc:
            try:
                proc.read_announcement()
            except StubError as e:
                return CheckResult(
                    name=f"{sig.name} exit", passed=False, message=str(e)
                )
            return self._signal_result(sig, proc)

    def _signal_result(self, sig: signal.Signals, proc: StubProcess) -> CheckResult:
        """Send a signal to an announced stub and check for a prompt exit 0."""
        name = f"{sig.name} exit"
        start = time.monotonic()
        proc.send_signal(sig)
        try:
            code = proc.wait(timeout=EXIT_MARGIN_SECS)
        except StubError as e:
            return CheckResult(
                name=name,
                passed=False,
                message=str(e),
                suggestion=f"stub ignores {sig.name}",
            )
        elapsed = time.monotonic() - start
        return CheckResult(
            name=name,
            passed=code == EXIT_SIGNALED,
            message=f"exit {code} after {elapsed:.2f}s",
        )

    def _check_timeout_exit(self) -> CheckResult:
        """Unsignaled timeout stub exits 1, not before the timeout."""
        name = "timeout exit"
        with self._spawn(()) as proc:
            try:
                proc.read_announcement()
                code = proc.wait(timeout=DEFAULT_TIMEOUT_SECS + EXIT_MARGIN_SECS)
            except StubError as e:
                return CheckResult(name=name, passed=False, message=str(e))

            announced_at = proc.announced_at or 0.0
            elapsed = time.monotonic() - announced_at
            passed = (
                code == EXIT_TIMED_OUT
                and elapsed >= DEFAULT_TIMEOUT_SECS - ANNOUNCE_LAG_SECS
            )
            return CheckResult(
                name=name,
                passed=passed,
                message=f"exit {code} after {elapsed:.2f}s",
            )

    def _check_stays_alive(self) -> CheckResult:
        """An unsignaled wait stub is still running after a while."""
        name = "no timeout"
        with self._spawn(()) as proc:
            try:
                proc.read_announcement()
            except StubError as e:
                return CheckResult(name=name, passed=False, message=str(e))

            time.sleep(STAYS_ALIVE_SECS)
            running = proc.running
            return CheckResult(
                name=name,
                passed=running,
                message=(
                    f"still running after {STAYS_ALIVE_SECS:.1f}s"
                    if running
                    else f"exited with {proc.returncode}"
                ),
            )


def render_table(results: Sequence[CheckResult], console: Console) -> None:
    """Render results as a rich table."""
    table = Table(title="pidstub check")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Detail")

    for result in results:
        status = "[green]ok[/green]" if result.passed else "[red]FAIL[/red]"
        detail = result.message
        if result.suggestion:
            detail += f"\n-> {result.suggestion}"
        table.add_row(result.name, status, detail)

    console.print(table)


def render_json(results: Sequence[CheckResult], out: OutputWriter) -> None:
    """Render results as a JSON document."""
    output: dict[str, Any] = {
        "passed": all(r.passed for r in results),
        "checks": [asdict(r) for r in results],
    }
    out.write(json.dumps(output, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pidstub-check",
        description="Verify that the stub announces, signals and exits as expected.",
    )
    parser.add_argument(
        "--variant",
        default="timeout",
        help="stub variant to check: timeout (default) or wait",
    )
    parser.add_argument(
        "--skip-timeout",
        action="store_true",
        help="skip the timeout-expiry check (it takes about 10 seconds)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="output results as JSON",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        help="stderr log level (default: warning)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for pidstub-check."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        lg = create_logger("/pidstub/check", args.log_level)
    except LogError as e:
        parser.error(str(e))

    try:
        results = StubChecker(
            variant=args.variant, skip_timeout=args.skip_timeout, lg=lg
        ).run()
    except StubError as e:
        lg.error(f"check failed: {e}")
        return 2

    if args.json:
        render_json(results, ConsoleOutput())
    else:
        render_table(results, Console())
    return 0 if all(r.passed for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
