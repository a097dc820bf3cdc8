"""Shared fixtures for avrlibc-build unit tests."""

from pathlib import Path

import pytest

ROOT_HEADERS = ["stdio.h", "stdlib.h", "string.h", "inttypes.h", "stdfix.h", "stdfix-avrlibc.h"]
UTIL_HEADERS = ["atomic.h", "crc16.h", "delay.h", "delay_basic.h", "parity.h", "setbaud.h"]
SYS_HEADERS = ["types.h"]
AVR_HEADERS = [
    "boot.h",
    "crc16.h",
    "delay.h",
    "interrupt.h",
    "io.h",
    "iom328p.h",
    "parity.h",
    "pgmspace.h",
    "signal.h",
    "sleep.h",
    "version.h",
    "wdt.h",
]


def _touch_all(directory: Path, names):
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_text(f"/* {name} */\n")


@pytest.fixture
def libc_tree(tmp_path):
    """Create a minimal avr-libc source tree.

    Returns:
        Path to the avr-libc source root
    """
    libc_dir = tmp_path / "avr-libc"
    include = libc_dir / "include"

    _touch_all(include, ROOT_HEADERS)
    _touch_all(include / "util", UTIL_HEADERS)
    _touch_all(include / "sys", SYS_HEADERS)
    _touch_all(include / "avr", AVR_HEADERS)

    # Entries the scanner must ignore
    (include / "Makefile.am").write_text("")
    (include / "avr" / "notes.txt").write_text("")
    (include / "util" / "helper.hpp").write_text("")
    _touch_all(include / "avr" / "nested", ["deep.h"])

    (libc_dir / "bootstrap").write_text("#!/bin/sh\n")
    return libc_dir


@pytest.fixture
def include_root(libc_tree):
    return libc_tree / "include"
