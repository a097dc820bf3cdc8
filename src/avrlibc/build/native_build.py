"""Native avr-libc build driver.

This module bootstraps, configures and compiles avr-libc for one
architecture so that <libc>/avr/lib/<arch>/libc.a exists.

The build is a small state machine:

    NOT_BUILT -> BOOTSTRAPPED -> CONFIGURED -> COMPILED

Each transition is one external command (two `make` runs for the last one).
A stage only starts after the previous one exited 0. When the archive is
already present, or when the build is a documentation/host build, the driver
runs nothing and goes straight to COMPILED.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Type

from ..config.target import TargetContext
from ..errors import (
    BootstrapFailedError,
    CompileFailedError,
    ConfigureFailedError,
    NativeBuildError,
)
from .process_runner import CommandResult, ProcessRunner

logger = logging.getLogger(__name__)


class BuildStage(Enum):
    NOT_BUILT = "not_built"
    BOOTSTRAPPED = "bootstrapped"
    CONFIGURED = "configured"
    COMPILED = "compiled"


@dataclass(frozen=True)
class BuildArtifacts:
    """Expected location of the compiled archive for one architecture."""

    arch_lib_dir: Path
    static_lib_path: Path

    @classmethod
    def for_arch(cls, libc_dir: Path, arch: str) -> "BuildArtifacts":
        arch_lib_dir = Path(libc_dir) / "avr" / "lib" / arch
        return cls(arch_lib_dir=arch_lib_dir, static_lib_path=arch_lib_dir / "libc.a")

    @property
    def is_built(self) -> bool:
        return self.static_lib_path.exists()


class NativeBuildDriver:
    """
    Drives avr-libc's own build scripts.

    Example usage:
        driver = NativeBuildDriver(libc_dir, arch="avr6", host="x86_64-unknown-linux-gnu")
        ran = driver.ensure_built(ctx)
    """

    def __init__(
        self,
        libc_dir: Path,
        arch: str,
        host: str,
        cc: str = "avr-gcc",
        runner: Optional[ProcessRunner] = None,
    ):
        """
        Initialize native build driver.

        Args:
            libc_dir: avr-libc source root
            arch: avr-libc architecture directory (e.g., 'avr6')
            host: Host triple passed to configure as --build
            cc: Cross compiler passed to configure through CC
            runner: Process runner (defaults to ProcessRunner())
        """
        self.libc_dir = Path(libc_dir)
        self.arch = arch
        self.host = host
        self.cc = cc
        self.runner = runner or ProcessRunner()
        self.artifacts = BuildArtifacts.for_arch(self.libc_dir, arch)
        self.stage = BuildStage.NOT_BUILT

    @property
    def include_dir(self) -> Path:
        return self.libc_dir / "include"

    def needs_build(self, ctx: TargetContext) -> Tuple[bool, str]:
        """Check if avr-libc has to be built.

        Args:
            ctx: Resolved target context

        Returns:
            Tuple of (needs_build, reason)
        """
        if ctx.skips_native_build:
            return False, "documentation/host build"

        if self.artifacts.is_built:
            return False, f"{self.artifacts.static_lib_path} already exists"

        return True, f"avr-libc not yet built for '{self.arch}'"

    def ensure_built(self, ctx: TargetContext) -> bool:
        """
        Build avr-libc unless the guard says it is not needed.

        Args:
            ctx: Resolved target context

        Returns:
            True if the build stages ran, False if they were skipped

        Raises:
            BootstrapFailedError: If bootstrap fails
            ConfigureFailedError: If configure fails
            CompileFailedError: If make fails
        """
        needed, reason = self.needs_build(ctx)
        if not needed:
            logger.info(f"Skipping avr-libc build: {reason}")
            self.stage = BuildStage.COMPILED
            return False

        logger.info(f"{reason}, building now")
        self.bootstrap()
        self.configure()
        self.compile()
        return True

    def bootstrap(self) -> None:
        """Run `sh bootstrap` in the source root."""
        self._require_stage(BuildStage.NOT_BUILT)
        logger.info("Bootstrapping avr-libc")

        result = self.runner.run(["sh", "bootstrap"], cwd=self.libc_dir)
        self._check(result, BootstrapFailedError)
        self.stage = BuildStage.BOOTSTRAPPED

    def configure(self) -> None:
        """Run `sh configure` in the source root, cross-compiling for AVR."""
        self._require_stage(BuildStage.BOOTSTRAPPED)
        logger.info("Configuring avr-libc")

        command = ["sh", "configure", f"--build={self.host}", "--host=avr"]
        result = self.runner.run(command, cwd=self.libc_dir, env={"CC": self.cc})
        self._check(result, ConfigureFailedError)
        self.stage = BuildStage.CONFIGURED

    def compile(self) -> None:
        """Run `make` for the shared include tree, then for the arch library."""
        self._require_stage(BuildStage.CONFIGURED)

        for directory in self.make_dirs():
            logger.info(f"Making avr-libc in {directory}")
            result = self.runner.run(["make"], cwd=directory)
            self._check(result, CompileFailedError)

        self.stage = BuildStage.COMPILED

    def make_dirs(self) -> List[Path]:
        return [self.include_dir, self.artifacts.arch_lib_dir]

    def _require_stage(self, expected: BuildStage) -> None:
        if self.stage is not expected:
            raise RuntimeError(
                f"avr-libc build is in stage '{self.stage.value}', expected '{expected.value}'"
            )

    @staticmethod
    def _check(result: CommandResult, error_type: Type[NativeBuildError]) -> None:
        if not result.success:
            raise error_type(
                command=result.command,
                cwd=result.cwd,
                returncode=result.returncode,
                detail=result.error,
            )
