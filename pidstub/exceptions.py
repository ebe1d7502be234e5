"""
Exception hierarchy for pidstub.

The stub process itself never raises these on its normal paths; they are
raised by configuration validation, signal registration and the harness
helpers that drive a stub from a test suite.
"""

from typing import Any


class StubError(Exception):
    """
    Base exception for all pidstub errors.

    Carries optional keyword context that is rendered alongside the message,
    so a harness failure can report which pid or which line it choked on.

    Example:
        try:
            proc.read_announcement()
        except StubError as e:
            lg.error(f"stub failed: {e}")
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(StubError):
    """
    Invalid stub configuration.

    Examples:
        - Unknown variant name
        - Non-positive or non-finite timeout
        - Empty signal set
    """

    pass


class SignalSetupError(StubError):
    """Raised when termination signals cannot be routed to the waiter."""

    pass


class HarnessError(StubError):
    """
    Errors raised while driving a stub process from a test harness.

    Examples:
        - Process not started yet
        - Announcement malformed
        - Process did not exit in time
    """

    pass


class AnnouncementError(HarnessError):
    """Raised when the stub's stdout does not start with a decimal pid."""

    pass


class HarnessTimeoutError(HarnessError):
    """Raised when the stub does not produce output or exit in time."""

    pass
