"""
Output abstraction for CLI tools.

Provides a testable interface for CLI output, allowing tools to be tested
without capturing stdout.
"""

import sys
from typing import Protocol, TextIO


class OutputWriter(Protocol):
    """Protocol for CLI output writing."""

    def write(self, text: str = "") -> None:
        """Write text with trailing newline."""
        ...


class ConsoleOutput:
    """
    Default output writer that writes to a stream (stdout by default).

    Example:
        import io
        buffer = io.StringIO()
        out = ConsoleOutput(buffer)
        out.write("Hello")
        assert buffer.getvalue() == "Hello\\n"
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout

    @property
    def stream(self) -> TextIO:
        return self._stream

    def write(self, text: str = "") -> None:
        """Write text with trailing newline."""
        print(text, file=self._stream)


class BufferedOutput:
    """
    Output writer that captures output to a list.

    Example:
        out = BufferedOutput()
        out.write("Line 1")
        assert out.lines == ["Line 1"]
    """

    def __init__(self) -> None:
        self._lines: list[str] = []

    def write(self, text: str = "") -> None:
        """Write text with trailing newline."""
        self._lines.append(text)

    @property
    def lines(self) -> list[str]:
        """Get all output lines."""
        return self._lines.copy()

    @property
    def text(self) -> str:
        """Get all output as a single string with newlines."""
        return "\n".join(self._lines) + ("\n" if self._lines else "")
