"""
Log formatter for pidstub diagnostics.

Records render as:

    [12:34:56,789] [D] received signal [signal:SIGINT] [1234] [/pidstub]

with the extra fields passed through ``extra=`` sorted by key, followed by
the process id and the logger name.
"""

import logging
from typing import Any

from .constants import LogConstants


def _format_value(value: Any) -> str:
    if isinstance(value, BaseException):
        return value.__class__.__name__
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


class PreFormatter(logging.Formatter):
    """
    Formatter with a short clock time and milliseconds.
    """

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        s = super().formatTime(record, LogConstants.DATE_FORMAT)
        return s + f",{int(record.msecs):03d}"


class LogFormatter(logging.Formatter):
    """
    Formatter with bracketed extra fields.

    Percent signs in extra values are escaped before the format string is
    handed to the stdlib formatter, so arbitrary argv strings are safe to
    log as fields.
    """

    def __init__(self) -> None:
        super().__init__()
        self._pre_formatter = PreFormatter(LogConstants.DEFAULT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record.

        Args:
            record: Log record to format

        Returns:
            Formatted log message
        """
        fmt = LogConstants.DEFAULT_FORMAT + self._format_fields(record)
        fmt += " [%(process)d] [%(name)s]"

        self._pre_formatter._fmt = fmt
        self._pre_formatter._style._fmt = fmt
        return self._pre_formatter.format(record)

    def _format_fields(self, record: logging.LogRecord) -> str:
        """Render extra fields attached by Logger as ``[key:value]`` pairs."""
        extra = getattr(record, "__stub__extra", None)
        if not extra:
            return ""

        parts = []
        for key in sorted(extra):
            value = _format_value(extra[key]).replace("%", "%%")
            parts.append(f"[{key}:{value}]")
        return " " + " ".join(parts)
