"""Header eligibility policy for binding generation.

Not every avr-libc header can be fed to bindgen. This module holds the two
static policy tables and the predicate that applies them. The tables are
plain data so they can be tested without touching the filesystem.

A header is excluded when any of these hold:
1. Its file stem starts with 'io' (per-chip register headers, selected
   through avr/io.h's own machinery rather than included directly)
2. It is in DENY_LIST
3. It is in DEVICE_SPECIFIC_LIST and no MCU is selected
"""

from pathlib import Path, PurePosixPath
from typing import Iterable

from ..config.target import TargetContext

IO_HEADER_PREFIX = "io"

# Headers which can't be used from Rust.
DENY_LIST = (
    "avr/crc16.h", "avr/parity.h", "avr/delay.h",  # Deprecated, moved to 'util'
    "avr/signal.h",  # Deprecated, moved to 'avr/interrupt.h'
    "avr/wdt.h",  # Requires MCU-specific constants
    "stdfix-avrlibc.h",  # Deprecated, use 'stdfix.h' instead
    "util/delay.h", "util/delay_basic.h",  # Relies on AVR-GCC specific optimisations
    "util/setbaud.h",  # Mostly made of preprocessor magic
)

# Headers that only make sense once a specific MCU is selected.
DEVICE_SPECIFIC_LIST = (
    "avr/boot.h",
    "avr/sleep.h",
    "util/crc16.h",
)


def relative_header_name(header: Path, include_root: Path) -> str:
    """Get the include-relative name of a header (e.g. 'util/delay.h').

    Headers outside include_root are returned by file name only.
    """
    try:
        relative = Path(header).relative_to(include_root)
    except ValueError:
        return Path(header).name
    return PurePosixPath(*relative.parts).as_posix()


def is_io_header(header: Path) -> bool:
    return Path(header).stem.startswith(IO_HEADER_PREFIX)


def is_header_in_list(header: Path, include_root: Path, header_list: Iterable[str]) -> bool:
    return relative_header_name(header, include_root) in header_list


def is_header_denied(header: Path, include_root: Path) -> bool:
    return is_header_in_list(header, include_root, DENY_LIST)


def is_header_device_specific(header: Path, include_root: Path) -> bool:
    return is_header_in_list(header, include_root, DEVICE_SPECIFIC_LIST)


def is_eligible(header: Path, include_root: Path, ctx: TargetContext) -> bool:
    """
    Decide whether a header may be passed to the binding generator.

    Args:
        header: Path to the header file
        include_root: avr-libc include directory the header lives under
        ctx: Resolved target context

    Returns:
        True if the header survives all three exclusion rules
    """
    if is_io_header(header):
        return False

    if is_header_denied(header, include_root):
        return False

    if ctx.mcu_name is None and is_header_device_specific(header, include_root):
        return False

    return True
