"""
Factory for creating and configuring loggers.

Every handler created here writes to stderr: stdout belongs to the stub's
announcement and must carry nothing else.
"""

import logging
import sys
from typing import TextIO, cast

from .config import LogConfig
from .formatters import LogFormatter
from .logger import Logger


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        stream: TextIO | None = None,
    ) -> Logger:
        """
        Create a logger with the specified configuration.

        An existing logger with the same name is returned as is.

        Args:
            name: Logger name
            config: Logger configuration
            stream: Output stream (defaults to sys.stderr)

        Returns:
            Configured logger instance

        Example:
            >>> from pidstub.log import LoggerFactory, LogConfig
            >>>
            >>> lg = LoggerFactory.create("/pidstub", LogConfig.from_params("debug"))
            >>> lg.debug("waiting", extra={"timeout": 10.0})
            [12:34:56,789] [D] waiting [timeout:10.0] [1234] [/pidstub]
        """
        existing = LoggerFactory._check_existing_logger(name)
        if existing:
            return existing

        return LoggerFactory._create_new_logger(name, config, stream)

    @staticmethod
    def _check_existing_logger(name: str) -> Logger | None:
        """Check if logger exists and return it."""
        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger):
            existing.trace("logger already exists", extra={"logger": name})
            return existing
        return None

    @staticmethod
    def _setup_handler(config: LogConfig, stream: TextIO | None) -> logging.Handler:
        """Set up and return a stream handler with the pidstub formatter."""
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        if config.level is not False:
            handler.setLevel(cast(int, config.level))
        handler.setFormatter(LogFormatter())
        return handler

    @staticmethod
    def _create_new_logger(
        name: str, config: LogConfig, stream: TextIO | None
    ) -> Logger:
        """Create a new logger with its handler."""
        lg = Logger(name, config)
        lg.addHandler(LoggerFactory._setup_handler(config, stream))
        lg.propagate = False
        lg.parent = logging.root

        logging.root.manager.loggerDict[name] = lg

        lg.trace("created logger", extra={"level": logging.getLevelName(lg.level)})
        return lg
