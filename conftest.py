"""
Pytest configuration for the avrlibc-build test suite.

Integration tests need a real avr-gcc toolchain, bindgen and an avr-libc
checkout; they only run when the --full flag is given.
"""

import pytest


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Run full test suite including integration tests (slow)",
    )


def pytest_configure(config):
    """Register markers."""
    config.addinivalue_line(
        "markers", "integration: needs the AVR toolchain and bindgen (run with --full)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --full is given."""
    if config.getoption("--full"):
        return

    skip_integration = pytest.mark.skip(reason="integration test, use --full to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)
