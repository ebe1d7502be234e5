"""
Stub configuration.

Two variants exist and both are first-class: "with timeout" gives up after
a fixed wait and exits 1, "without timeout" waits for a signal forever.
"""

from __future__ import annotations

import math
import signal
from dataclasses import dataclass, field

from ..exceptions import ConfigError

DEFAULT_TIMEOUT_SECS = 10.0

# Exit statuses
EXIT_SIGNALED = 0
EXIT_TIMED_OUT = 1

TERMINATION_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)

_TIMEOUT_VARIANTS = ("timeout", "with-timeout", "a")
_WAIT_VARIANTS = ("wait", "without-timeout", "b")


@dataclass(frozen=True)
class StubConfig:
    """
    Immutable configuration for a stub run.

    Attributes:
        timeout: Seconds to wait for a signal, or None to wait indefinitely
        signals: Signals that stop the stub with EXIT_SIGNALED
        log_level: Level for stderr diagnostics (name, number, or False)
    """

    timeout: float | None = DEFAULT_TIMEOUT_SECS
    signals: tuple[signal.Signals, ...] = field(default=TERMINATION_SIGNALS)
    log_level: str | int | bool = "warning"

    def __post_init__(self) -> None:
        if self.timeout is not None:
            if not math.isfinite(self.timeout) or self.timeout <= 0:
                raise ConfigError(
                    "timeout must be a positive number", timeout=self.timeout
                )
        if not self.signals:
            raise ConfigError("at least one termination signal is required")

    @property
    def variant(self) -> str:
        """Variant name: "timeout" or "wait"."""
        return "wait" if self.timeout is None else "timeout"

    @classmethod
    def with_timeout(cls, secs: float = DEFAULT_TIMEOUT_SECS) -> StubConfig:
        """Variant A: stop on signal (exit 0) or after ``secs`` (exit 1)."""
        return cls(timeout=secs)

    @classmethod
    def without_timeout(cls) -> StubConfig:
        """Variant B: stop on signal only."""
        return cls(timeout=None)

    @classmethod
    def from_variant(cls, name: str) -> StubConfig:
        """
        Build a config from a variant name.

        Args:
            name: "timeout", "with-timeout" or "a" for variant A;
                "wait", "without-timeout" or "b" for variant B

        Raises:
            ConfigError: If the name is not a known variant
        """
        key = name.strip().lower()
        if key in _TIMEOUT_VARIANTS:
            return cls.with_timeout()
        if key in _WAIT_VARIANTS:
            return cls.without_timeout()
        raise ConfigError(
            "unknown stub variant",
            variant=name,
            choices="|".join(_TIMEOUT_VARIANTS + _WAIT_VARIANTS),
        )
