"""
Tests for the logger, formatter and factory.

Tests key logging behavior including:
- Record layout and extra field rendering
- TRACE level and disabled logging
- Factory stream selection and logger reuse
"""

import io
import logging
import os
import re
import sys

import pytest

from pidstub.log import LogConfig, Logger, LoggerFactory, create_logger

LINE_RE = re.compile(r"^\[\d\d:\d\d:\d\d,\d{3}\] \[(?P<level>\w)\] (?P<rest>.*)$")


def _make_logger(stream, level="trace"):
    return LoggerFactory.create("/test", LogConfig.from_params(level), stream=stream)


@pytest.mark.unit
class TestFormatting:
    """Test rendered log lines."""

    def test_line_layout(self):
        stream = io.StringIO()
        lg = _make_logger(stream)

        lg.info("hello")

        line = stream.getvalue().rstrip("\n")
        match = LINE_RE.match(line)
        assert match is not None
        assert match["level"] == "I"
        assert match["rest"] == f"hello [{os.getpid()}] [/test]"

    def test_extra_fields_sorted(self):
        stream = io.StringIO()
        lg = _make_logger(stream)

        lg.debug("waiting", extra={"timeout": 10.0, "pid": 12})

        assert "waiting [pid:12] [timeout:10.0]" in stream.getvalue()

    def test_percent_in_extra_is_literal(self):
        stream = io.StringIO()
        lg = _make_logger(stream)

        lg.info("arg", extra={"value": "100%s done"})

        assert "[value:100%s done]" in stream.getvalue()

    def test_exception_rendered_as_class_name(self):
        stream = io.StringIO()
        lg = _make_logger(stream)

        lg.error("failed", extra={"error": ValueError("bad")})

        assert "[error:ValueError]" in stream.getvalue()

    def test_list_values_joined(self):
        stream = io.StringIO()
        lg = _make_logger(stream)

        lg.info("sigs", extra={"signals": ["SIGINT", "SIGTERM"]})

        assert "[signals:SIGINT,SIGTERM]" in stream.getvalue()

    def test_extra_keys_do_not_clash_with_record(self):
        stream = io.StringIO()
        lg = _make_logger(stream)

        lg.info("clash", extra={"name": "x", "args": "y"})

        assert "[args:y] [name:x]" in stream.getvalue()


@pytest.mark.unit
class TestLevels:
    """Test level filtering."""

    def test_trace_level(self):
        stream = io.StringIO()
        lg = _make_logger(stream)

        lg.trace("fine detail")

        assert "[T] fine detail" in stream.getvalue()

    def test_below_level_not_written(self):
        stream = io.StringIO()
        lg = _make_logger(stream, level="warning")

        lg.info("hidden")
        lg.trace("hidden too")

        assert stream.getvalue() == ""
        assert lg.isEnabledFor(logging.WARNING) is True
        assert lg.isEnabledFor(logging.INFO) is False

    def test_disabled(self):
        stream = io.StringIO()
        lg = _make_logger(stream, level=False)

        lg.critical("nothing")

        assert stream.getvalue() == ""
        assert lg.disabled is True

    def test_disabled_by_name(self):
        stream = io.StringIO()
        lg = _make_logger(stream, level="false")

        lg.error("nothing")
        lg.trace("nothing")

        assert stream.getvalue() == ""


@pytest.mark.unit
class TestFactory:
    """Test LoggerFactory."""

    def test_defaults_to_stderr(self, capsys):
        lg = LoggerFactory.create("/stderr", LogConfig.from_params("info"))

        lg.info("to stderr")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "to stderr" in captured.err

    def test_handler_setup(self):
        lg = LoggerFactory.create("/handler", LogConfig(), stream=io.StringIO())
        assert isinstance(lg, Logger)
        assert lg.propagate is False
        assert len(lg.handlers) == 1

    def test_existing_logger_reused(self):
        first = LoggerFactory.create("/same", LogConfig(), stream=io.StringIO())
        second = LoggerFactory.create("/same", LogConfig.from_params("debug"))
        assert first is second

    def test_create_logger_helper(self):
        lg = create_logger("/helper", "debug")
        assert lg.level == logging.DEBUG
        assert lg.handlers[0].stream is sys.stderr

    def test_trace_level_registered(self):
        assert logging.getLevelName(5) == "TRACE"
