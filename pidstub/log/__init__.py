"""
Logging for pidstub: stdlib logging with a TRACE level, bracketed extra
fields and stderr-only handlers.

Log Level Control:
- Use standard levels: debug, info, warning, error, critical
- Use the custom level: trace
- Disable logging completely: False or "false"
"""

import logging

from .config import LogConfig
from .constants import LogConstants
from .exceptions import InvalidLogLevelError, LogError
from .factory import LoggerFactory
from .formatters import LogFormatter
from .logger import Logger

# Define custom log level for lifecycle tracing
logging.TRACE = LogConstants.CUSTOM_LEVELS["TRACE"]  # type: ignore[attr-defined]
logging.addLevelName(logging.TRACE, "TRACE")  # type: ignore[attr-defined]

LogConstants.LEVEL_NAMES["trace"] = logging.TRACE  # type: ignore[attr-defined]


def create_logger(name: str = "/", level: str | int | bool = "warning") -> Logger:
    """
    Create a stderr logger with the given level.

    Args:
        name: Logger name
        level: Level name, numeric level, or False to disable logging

    Returns:
        Configured Logger instance
    """
    return LoggerFactory.create(name, LogConfig.from_params(level))


__all__ = [
    "InvalidLogLevelError",
    "LogConfig",
    "LogConstants",
    "LogError",
    "LogFormatter",
    "Logger",
    "LoggerFactory",
    "create_logger",
]
