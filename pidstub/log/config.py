"""
Configuration class for the logging system.

LogConfig is immutable so that a logger's settings cannot drift after the
stub has started writing diagnostics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable configuration for pidstub loggers.

    Attributes:
        level: Numeric level, or False to disable logging entirely
    """

    level: int | bool = logging.WARNING

    @staticmethod
    def _resolve_level(level: str | int | bool) -> int | bool:
        """Resolve level parameter to int or False."""
        from .constants import LogConstants
        from .exceptions import InvalidLogLevelError

        if isinstance(level, bool):
            return False if not level else logging.INFO
        elif isinstance(level, str):
            name = level.lower()
            if name.isnumeric():
                return int(name)
            elif name in LogConstants.LEVEL_NAMES:
                return LogConstants.LEVEL_NAMES[name]
            else:
                raise InvalidLogLevelError(level)
        return level

    @classmethod
    def from_params(cls, level: str | int | bool) -> LogConfig:
        """
        Create LogConfig from a level parameter.

        Args:
            level: Log level (string name, numeric value, or False to disable logging)

        Returns:
            LogConfig instance

        Raises:
            InvalidLogLevelError: If level is a string that names no known level
        """
        return cls(level=cls._resolve_level(level))
