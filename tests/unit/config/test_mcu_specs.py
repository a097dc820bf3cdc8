"""Tests for the MCU define table."""

import pytest

from avrlibc.config.mcu_specs import AVR_SPECS, get_mcu_spec, mcu_define_name
from avrlibc.errors import UnsupportedMcuError


@pytest.mark.parametrize(
    "mcu,define",
    [
        ("atmega328", "__AVR_ATmega328__"),
        ("atmega328p", "__AVR_ATmega328P__"),
        ("atmega2560", "__AVR_ATmega2560__"),
        ("atmega32u4", "__AVR_ATmega32U4__"),
        ("attiny85", "__AVR_ATtiny85__"),
    ],
)
def test_define_for_known_mcu(mcu, define):
    assert mcu_define_name(mcu) == define


def test_lookup_is_case_insensitive():
    assert mcu_define_name("ATmega328") == "__AVR_ATmega328__"


def test_clang_arg():
    assert get_mcu_spec("atmega328").clang_arg == "-D__AVR_ATmega328__"


def test_unknown_mcu_spec():
    assert get_mcu_spec("atmega9999") is None


def test_unknown_mcu_define():
    with pytest.raises(UnsupportedMcuError) as exc_info:
        mcu_define_name("atmega9999")

    assert exc_info.value.mcu_name == "atmega9999"
    assert "atmega9999" in str(exc_info.value)


def test_table_keys_match_ids():
    for key, spec in AVR_SPECS.items():
        assert key == spec.mcu_id
        assert spec.define.startswith("__AVR_") and spec.define.endswith("__")
