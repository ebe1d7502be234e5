"""
Pytest configuration and shared fixtures.

This module provides central pytest configuration, custom markers,
and shared fixtures for the pidstub test suite.
"""

import signal
import sys
from collections.abc import Generator

import pytest

# =============================================================================
# Plugin Registration
# =============================================================================

pytest_plugins = [
    "tests.fixtures.logging",
]


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, isolated, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (signals delivered in-process)"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests (spawn real stub processes)"
    )
    config.addinivalue_line("markers", "property: Property-based tests (hypothesis)")
    config.addinivalue_line("markers", "slow: Tests that take >1 second to run")


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def preserve_signal_state() -> Generator[None, None, None]:
    """
    Restore SIGINT/SIGTERM handlers and the wakeup fd after a test.

    Guards the rest of the session against a test that leaves stub
    handlers installed.
    """
    original = {
        sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    original_fd = signal.set_wakeup_fd(-1)
    signal.set_wakeup_fd(original_fd)

    yield

    for sig, handler in original.items():
        signal.signal(sig, handler)
    signal.set_wakeup_fd(original_fd)


# =============================================================================
# Test Collection Hooks
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """
    Add the 'unit' marker to unmarked tests and skip process tests on Windows.

    Args:
        config: Pytest config object
        items: List of collected test items
    """
    skip_windows = pytest.mark.skip(reason="POSIX signal delivery required")
    for item in items:
        if not any(
            mark.name in ["integration", "e2e"] for mark in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)
        elif sys.platform == "win32":
            item.add_marker(skip_windows)
