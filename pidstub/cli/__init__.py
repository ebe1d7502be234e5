"""
Command-line entry points for pidstub.

The stub entry points take no options; the check tool is a regular
argparse CLI.
"""

from pidstub.cli.output import BufferedOutput, ConsoleOutput

__all__ = [
    "BufferedOutput",
    "ConsoleOutput",
]
