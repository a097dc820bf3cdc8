"""
MCU specifications for AVR microcontrollers.

This module centralizes the mapping from canonical microcontroller names
(as reported by the target specification) to the preprocessor macro that
avr-libc's headers test for, e.g. ``atmega328`` -> ``__AVR_ATmega328__``.
"""

from dataclasses import dataclass
from typing import Optional

from ..errors import UnsupportedMcuError


@dataclass(frozen=True)
class MCUSpec:
    """Toolchain details for a microcontroller."""

    mcu_id: str
    define: str  # Macro avr-gcc defines for -mmcu=<mcu_id>

    @property
    def clang_arg(self) -> str:
        """Get the -D argument that selects this MCU in avr-libc headers."""
        return f"-D{self.define}"


# AVR MCU specifications
AVR_SPECS = {
    "atmega328": MCUSpec(mcu_id="atmega328", define="__AVR_ATmega328__"),
    "atmega328p": MCUSpec(mcu_id="atmega328p", define="__AVR_ATmega328P__"),
    "atmega2560": MCUSpec(mcu_id="atmega2560", define="__AVR_ATmega2560__"),
    "atmega32u4": MCUSpec(mcu_id="atmega32u4", define="__AVR_ATmega32U4__"),
    "attiny85": MCUSpec(mcu_id="attiny85", define="__AVR_ATtiny85__"),
}


def get_mcu_spec(mcu_id: str) -> Optional[MCUSpec]:
    """
    Get MCU specifications by ID.

    Args:
        mcu_id: MCU identifier (e.g., 'atmega328p')

    Returns:
        MCUSpec if found, None otherwise
    """
    return AVR_SPECS.get(mcu_id.lower())


def mcu_define_name(mcu_id: str) -> str:
    """
    Get the preprocessor define for an MCU.

    Args:
        mcu_id: MCU identifier

    Returns:
        Macro name, e.g. '__AVR_ATmega328P__'

    Raises:
        UnsupportedMcuError: If the MCU has no known mapping
    """
    spec = get_mcu_spec(mcu_id)
    if spec is None:
        raise UnsupportedMcuError(mcu_id)
    return spec.define
