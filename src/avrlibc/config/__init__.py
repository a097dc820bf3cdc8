"""Configuration and target detection modules for avrlibc-build."""

from .ini_parser import AvrLibcConfig, BuildConfig
from .mcu_specs import MCUSpec, get_mcu_spec, mcu_define_name
from .target import BuildTarget, McuLookup, TargetContext, TargetResolver

__all__ = [
    "AvrLibcConfig",
    "BuildConfig",
    "MCUSpec",
    "get_mcu_spec",
    "mcu_define_name",
    "BuildTarget",
    "McuLookup",
    "TargetContext",
    "TargetResolver",
]
