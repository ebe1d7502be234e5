from importlib.metadata import PackageNotFoundError, version

from .core import (
    DEFAULT_TIMEOUT_SECS,
    EXIT_SIGNALED,
    EXIT_TIMED_OUT,
    SignalWaiter,
    Stub,
    StubConfig,
    StubState,
    WaitOutcome,
    announce,
    run,
)
from .exceptions import (
    AnnouncementError,
    ConfigError,
    HarnessError,
    HarnessTimeoutError,
    SignalSetupError,
    StubError,
)

# Version is read from package metadata (pyproject.toml)
try:
    __version__ = version("pidstub")
except PackageNotFoundError:
    # Package not installed, use fallback (development mode)
    __version__ = "0.1.0-dev"

# Explicit public API
__all__ = [
    # Version
    "__version__",
    # Stub
    "Stub",
    "StubConfig",
    "StubState",
    "SignalWaiter",
    "WaitOutcome",
    "announce",
    "run",
    "DEFAULT_TIMEOUT_SECS",
    "EXIT_SIGNALED",
    "EXIT_TIMED_OUT",
    # Exceptions
    "StubError",
    "ConfigError",
    "SignalSetupError",
    "HarnessError",
    "AnnouncementError",
    "HarnessTimeoutError",
]
