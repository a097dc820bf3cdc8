"""
Build target detection.

This module turns an explicit description of the compilation target into
the TargetContext the rest of the build works from:
- Is the target the AVR architecture?
- Which microcontroller is selected (AVR only)?
- Is this a documentation/host build (native build skipped)?

The descriptor is read from the Cargo build-script environment by default,
but every decision is a pure function of the BuildTarget value so tests can
pass synthetic targets.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from ..errors import CannotDetermineMcuError

logger = logging.getLogger(__name__)

EMBEDDED_ARCH = "avr"

NO_MCU_WARNING = (
    "not targeting a specific microcontroller, create a custom target "
    "specification to enable mcu-specific functionality"
)


def arch_from_triple(triple: str) -> str:
    """Get the architecture component of a target triple or JSON spec path.

    'avr-unknown-gnu-atmega328' and 'specs/avr-atmega328p.json' both give 'avr'.
    """
    return Path(triple).name.split("-", 1)[0] if triple else ""


@dataclass(frozen=True)
class BuildTarget:
    """Description of the active compilation target.

    Attributes:
        arch: Target architecture (e.g., 'avr', 'x86_64')
        triple: Target triple, or path to a custom JSON target specification
        host: Host triple, passed to configure as --build
        cpu: Target CPU if known (e.g., 'atmega328p')
    """

    arch: str
    triple: str
    host: str
    cpu: Optional[str] = None

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "BuildTarget":
        """Read the target from the Cargo build-script environment.

        Args:
            environ: Environment mapping (defaults to os.environ)

        Returns:
            BuildTarget for the current build
        """
        env = os.environ if environ is None else environ
        triple = env.get("TARGET", "")
        arch = env.get("CARGO_CFG_TARGET_ARCH") or arch_from_triple(triple)
        return cls(
            arch=arch,
            triple=triple,
            host=env.get("HOST", ""),
            cpu=env.get("CARGO_CFG_TARGET_CPU") or None,
        )

    @property
    def is_embedded_arch(self) -> bool:
        return self.arch == EMBEDDED_ARCH


@dataclass(frozen=True)
class TargetContext:
    """Resolved target facts, computed once per run."""

    is_embedded_arch: bool
    mcu_name: Optional[str]
    is_documentation_build: bool

    def __post_init__(self):
        if self.mcu_name is not None and not self.is_embedded_arch:
            raise ValueError(
                f"MCU '{self.mcu_name}' given for a non-AVR target"
            )

    @property
    def skips_native_build(self) -> bool:
        """Whether the native library must not be built for this context."""
        return self.is_documentation_build or not self.is_embedded_arch


class McuLookup:
    """Finds the canonical microcontroller name for an AVR target.

    Sources are tried in order:
    1. An explicit override (CLI --mcu or the 'mcu' config key)
    2. The target CPU reported by the build system
    3. The 'cpu' field of a custom JSON target specification
    """

    def __init__(self, override: Optional[str] = None):
        self.override = override

    def mcu_name(self, target: BuildTarget) -> Optional[str]:
        """Look up the MCU name.

        Args:
            target: Build target to inspect

        Returns:
            Lower-case MCU name, or None if no source provides one
        """
        if self.override:
            return self.override.lower()

        if target.cpu:
            return target.cpu.lower()

        spec_cpu = self._cpu_from_target_spec(target.triple)
        if spec_cpu:
            return spec_cpu.lower()

        return None

    @staticmethod
    def _cpu_from_target_spec(triple: str) -> Optional[str]:
        if not triple.endswith(".json"):
            return None

        spec_path = Path(triple)
        if not spec_path.is_file():
            return None

        try:
            spec = json.loads(spec_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.debug(f"Could not read target specification {spec_path}: {e}")
            return None

        cpu = spec.get("cpu")
        return cpu if isinstance(cpu, str) and cpu else None


class TargetResolver:
    """Resolves a BuildTarget into a TargetContext."""

    def __init__(self, lookup: Optional[McuLookup] = None, force_documentation: bool = False):
        """
        Initialize target resolver.

        Args:
            lookup: MCU lookup to query on AVR targets
            force_documentation: Treat the build as a documentation build even on AVR
        """
        self.lookup = lookup or McuLookup()
        self.force_documentation = force_documentation

    def resolve(self, target: BuildTarget) -> TargetContext:
        """
        Resolve the target context.

        Args:
            target: Build target descriptor

        Returns:
            TargetContext for this run

        Raises:
            CannotDetermineMcuError: If the target is AVR and no MCU name is found
        """
        if target.is_embedded_arch:
            mcu_name = self.lookup.mcu_name(target)
            if mcu_name is None:
                raise CannotDetermineMcuError(
                    f"Could not get MCU name for AVR target '{target.triple}'. "
                    + "Set CARGO_CFG_TARGET_CPU, use a JSON target specification "
                    + "with a 'cpu' field, or pass --mcu."
                )
            context = TargetContext(
                is_embedded_arch=True,
                mcu_name=mcu_name,
                is_documentation_build=self.force_documentation,
            )
        else:
            # Off-architecture builds are assumed to be documentation builds
            context = TargetContext(
                is_embedded_arch=False,
                mcu_name=None,
                is_documentation_build=True,
            )

        if context.mcu_name is None:
            logger.warning(NO_MCU_WARNING)

        return context
