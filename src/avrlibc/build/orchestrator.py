"""
Build orchestration for avrlibc-build.

This module coordinates one build-script run, from target detection to the
link directives Cargo reads from stdout:
- Target detection (architecture, MCU, documentation build)
- avr-libc source tree
- Native build (bootstrap, configure, make)
- Header collection
- Binding generation (bindgen)
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from ..config.ini_parser import BuildConfig
from ..config.target import NO_MCU_WARNING, BuildTarget, McuLookup, TargetContext, TargetResolver
from ..errors import AvrLibcError, ConfigError
from ..packages.libc_source import LibcSource
from .bindings import BindingGenerator
from .header_scanner import HeaderScanner
from .native_build import NativeBuildDriver
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)

CACHE_DIR = Path(".avrlibc") / "cache"


@dataclass
class BuildResult:
    """Result of a build operation."""

    success: bool
    bindings_path: Optional[Path]
    link_search_dir: Optional[Path]
    native_build_ran: bool
    build_time: float
    message: str
    headers: List[Path] = field(default_factory=list)
    context: Optional[TargetContext] = None


class BuildDirectives:
    """Writes Cargo build-script directives."""

    def __init__(self, emit: Callable[[str], None] = print):
        self.emit = emit

    def warning(self, message: str) -> None:
        self.emit(f"cargo:warning={message}")

    def link_search(self, directory: Path) -> None:
        self.emit(f"cargo:rustc-link-search={directory}")

    def link_static(self, name: str) -> None:
        self.emit(f"cargo:rustc-link-lib=static={name}")


class LibcBuildOrchestrator:
    """
    Orchestrates the avr-libc build and binding generation.

    This class coordinates all phases of the build:
    1. Resolve the target context (architecture, MCU)
    2. Ensure the avr-libc source tree exists
    3. Build avr-libc unless already built or building documentation
    4. Collect eligible headers
    5. Generate bindings and emit link directives

    Example usage:
        config = AvrLibcConfig.load(Path("."))
        orchestrator = LibcBuildOrchestrator(config)
        result = orchestrator.build(BuildTarget.from_environment())
        if result.success:
            print(f"Bindings: {result.bindings_path}")
    """

    def __init__(
        self,
        config: BuildConfig,
        runner: Optional[ProcessRunner] = None,
        directives: Optional[BuildDirectives] = None,
        source: Optional[LibcSource] = None,
    ):
        """
        Initialize build orchestrator.

        Args:
            config: Resolved build configuration
            runner: Process runner shared by all external steps
            directives: Directive writer (defaults to stdout)
            source: avr-libc source manager (defaults to one built from config)
        """
        self.config = config
        self.runner = runner or ProcessRunner()
        self.directives = directives or BuildDirectives()
        self.source = source or LibcSource(
            source_dir=config.source_dir,
            cache_dir=config.project_dir / CACHE_DIR,
            url=config.source_url,
            checksum=config.source_sha256,
        )

    def resolve_target(self, target: BuildTarget) -> TargetContext:
        resolver = TargetResolver(
            lookup=McuLookup(override=self.config.mcu),
            force_documentation=self.config.documentation,
        )
        return resolver.resolve(target)

    def collect_headers(self, ctx: TargetContext) -> List[Path]:
        return HeaderScanner(self.config.include_dir).collect(ctx)

    def build(self, target: Optional[BuildTarget] = None) -> BuildResult:
        """
        Execute the complete build.

        Args:
            target: Build target (defaults to the Cargo build-script environment)

        Returns:
            BuildResult with build status and output paths
        """
        start_time = time.time()
        target = target or BuildTarget.from_environment()
        ctx: Optional[TargetContext] = None
        native_build_ran = False

        try:
            # Phase 1: Resolve target
            logger.info("[1/5] Resolving build target...")
            ctx = self.resolve_target(target)
            logger.info(f"      Architecture: {target.arch or 'unknown'}")
            logger.info(f"      MCU: {ctx.mcu_name or 'none'}")

            if ctx.mcu_name is None:
                self.directives.warning(NO_MCU_WARNING)

            # Phase 2: Ensure source tree
            logger.info("[2/5] Ensuring avr-libc source...")
            libc_dir = self.source.ensure_source()

            # Phase 3: Native build
            logger.info("[3/5] Building avr-libc...")
            driver = NativeBuildDriver(
                libc_dir,
                arch=self.config.arch,
                host=target.host,
                cc=self.config.cc,
                runner=self.runner,
            )
            needed, _ = driver.needs_build(ctx)
            if needed and not target.host:
                raise ConfigError(
                    "Host triple is unknown; set HOST or pass --host to configure avr-libc"
                )
            native_build_ran = driver.ensure_built(ctx)

            # Phase 4: Collect headers
            logger.info("[4/5] Collecting headers...")
            headers = self.collect_headers(ctx)
            logger.info(f"      {len(headers)} headers eligible")

            # Phase 5: Generate bindings
            logger.info("[5/5] Generating bindings...")
            generator = BindingGenerator(
                include_root=self.config.include_dir,
                bindings_path=self.config.bindings_path,
                ctypes_prefix=self.config.ctypes_prefix,
                executable=self.config.bindgen,
                runner=self.runner,
            )
            bindings_path = generator.write(generator.generate(headers, ctx))

            arch_lib_dir = driver.artifacts.arch_lib_dir
            self.directives.link_search(arch_lib_dir)
            self.directives.link_static("c")

            return BuildResult(
                success=True,
                bindings_path=bindings_path,
                link_search_dir=arch_lib_dir,
                native_build_ran=native_build_ran,
                build_time=time.time() - start_time,
                message="Build successful",
                headers=headers,
                context=ctx,
            )

        except AvrLibcError as e:
            return BuildResult(
                success=False,
                bindings_path=None,
                link_search_dir=None,
                native_build_ran=native_build_ran,
                build_time=time.time() - start_time,
                message=str(e),
                context=ctx,
            )
