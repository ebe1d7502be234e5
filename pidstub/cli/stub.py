#!/usr/bin/env python3
"""
Stub process entry points.

    pidstub [ARGS...]        print pid and argv, exit 0 on SIGINT/SIGTERM, 1 after 10s
    pidstub-wait [ARGS...]   same, but wait for a signal indefinitely

Arguments are never parsed: every entry of sys.argv is echoed verbatim.
"""

import sys

from pidstub.core import StubConfig, run


def main() -> int:
    """Variant with the 10-second timeout."""
    return run(sys.argv, StubConfig.with_timeout())


def main_wait() -> int:
    """Variant without a timeout."""
    return run(sys.argv, StubConfig.without_timeout())


if __name__ == "__main__":
    sys.exit(main())
