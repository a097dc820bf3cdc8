"""
avrlibc.ini configuration parser.

This module reads the optional project file that tells avrlibc-build where
the avr-libc source tree lives and how to drive the toolchain.

Example avrlibc.ini:
    [avr-libc]
    source_dir = avr-libc
    arch = avr6
    bindings_dest = src/bindings.rs
    mcu = atmega328p

Every key is optional; a project without avrlibc.ini builds with defaults.
"""

import configparser
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import ConfigError

CONFIG_FILENAME = "avrlibc.ini"
SECTION = "avr-libc"


@dataclass(frozen=True)
class BuildConfig:
    """Resolved build settings for one project."""

    project_dir: Path
    source_dir: Path
    arch: str = "avr6"
    bindings_dest: Path = Path("src/bindings.rs")
    ctypes_prefix: str = "::rust_ctypes"
    cc: str = "avr-gcc"
    bindgen: str = "bindgen"
    mcu: Optional[str] = None
    documentation: bool = False
    source_url: Optional[str] = None
    source_sha256: Optional[str] = None

    @property
    def include_dir(self) -> Path:
        return self.source_dir / "include"

    @property
    def bindings_path(self) -> Path:
        """Absolute path of the generated bindings file."""
        if self.bindings_dest.is_absolute():
            return self.bindings_dest
        return self.project_dir / self.bindings_dest

    def with_overrides(self, **overrides: Any) -> "BuildConfig":
        """Return a copy with non-None overrides applied (CLI flags win)."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


class AvrLibcConfig:
    """
    Parser for avrlibc.ini configuration files.

    Usage:
        config = AvrLibcConfig.load(Path("."))
        print(config.source_dir, config.arch)
    """

    PATH_KEYS = {"source_dir", "bindings_dest"}
    BOOL_KEYS = {"documentation"}

    def __init__(self, ini_path: Path):
        """
        Initialize the parser with an avrlibc.ini file.

        Args:
            ini_path: Path to the avrlibc.ini file

        Raises:
            ConfigError: If the file doesn't exist or cannot be parsed
        """
        self.ini_path = ini_path

        if not ini_path.exists():
            raise ConfigError(f"Configuration file not found: {ini_path}")

        self.config = configparser.ConfigParser(
            allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
        )

        try:
            self.config.read(ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigError(f"Failed to parse {ini_path}: {e}") from e

    def get_values(self) -> Dict[str, Any]:
        """
        Get the typed values of the [avr-libc] section.

        Unknown keys are ignored.

        Returns:
            Dictionary of BuildConfig field names to values

        Raises:
            ConfigError: If a value cannot be converted
        """
        if SECTION not in self.config:
            return {}

        known = {f.name for f in fields(BuildConfig)} - {"project_dir"}
        section = self.config[SECTION]
        values: Dict[str, Any] = {}

        for key in section:
            if key not in known:
                continue

            # Values are interpolated on read, so substitution errors surface here
            try:
                raw = section.get(key)
                if raw is None or not raw.strip():
                    continue
                if key in self.BOOL_KEYS:
                    values[key] = section.getboolean(key)
                elif key in self.PATH_KEYS:
                    values[key] = Path(raw.strip())
                else:
                    values[key] = raw.strip()
            except (ValueError, configparser.Error) as e:
                raise ConfigError(f"Invalid value for '{key}' in {self.ini_path}: {e}") from e

        return values

    @classmethod
    def load(cls, project_dir: Path) -> BuildConfig:
        """
        Load the build configuration for a project.

        Args:
            project_dir: Project root directory

        Returns:
            BuildConfig with values from avrlibc.ini (or defaults if absent)
        """
        project_dir = Path(project_dir).resolve()
        ini_path = project_dir / CONFIG_FILENAME

        values: Dict[str, Any] = {}
        if ini_path.exists():
            values = cls(ini_path).get_values()

        source_dir = values.pop("source_dir", Path("avr-libc"))
        if not source_dir.is_absolute():
            source_dir = project_dir / source_dir

        return BuildConfig(project_dir=project_dir, source_dir=source_dir, **values)
