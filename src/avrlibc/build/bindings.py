"""Rust binding generation with bindgen.

This module configures and runs the `bindgen` command-line tool over the
eligible avr-libc headers and writes the resulting Rust source.

Design:
    - BindgenBuilder mirrors bindgen's builder API (use_core, ctypes_prefix,
      clang_arg, header) and turns it into one bindgen invocation
    - bindgen accepts a single input header, so the builder writes an
      umbrella header that includes every registered header in order
    - BindingGenerator applies the avr-libc specific configuration:
      freestanding mode, include root, ctypes prefix and the MCU define
"""

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..config.mcu_specs import mcu_define_name
from ..config.target import TargetContext
from ..errors import BindingGenerationError, OutputWriteError
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)

UMBRELLA_HEADER = "avrlibc_bindings.h"


@dataclass
class BindingRequest:
    """Fully resolved input for one binding generation run."""

    headers: List[Path]
    mcu_define: Optional[str]
    include_root: Path


@dataclass
class GeneratedBindings:
    """Rust source produced by bindgen."""

    source: str

    def write_to_file(self, path: Path) -> Path:
        """Write the bindings, replacing any previous content.

        Raises:
            OutputWriteError: If the file cannot be written
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.source, encoding="utf-8")
        except OSError as e:
            raise OutputWriteError(f"Could not write bindings to {path}: {e}") from e
        return path


class BindgenBuilder:
    """Builder-style configuration for one bindgen run."""

    def __init__(self, executable: str = "bindgen", runner: Optional[ProcessRunner] = None):
        self.executable = executable
        self.runner = runner or ProcessRunner()
        self.headers: List[Path] = []
        self.clang_args: List[str] = []
        self._use_core = False
        self._ctypes_prefix: Optional[str] = None

    def use_core(self) -> "BindgenBuilder":
        self._use_core = True
        return self

    def ctypes_prefix(self, prefix: str) -> "BindgenBuilder":
        self._ctypes_prefix = prefix
        return self

    def clang_arg(self, arg: str) -> "BindgenBuilder":
        self.clang_args.append(arg)
        return self

    def header(self, path: Path) -> "BindgenBuilder":
        self.headers.append(Path(path))
        return self

    def umbrella_source(self) -> str:
        """Get the C source of the umbrella header, one #include per header."""
        lines = [f'#include "{header.as_posix()}"' for header in self.headers]
        return "\n".join(lines) + "\n"

    def command(self, input_header: Path, output_path: Path) -> List[str]:
        """Build the bindgen command line."""
        cmd = [self.executable, str(input_header), "-o", str(output_path)]
        if self._use_core:
            cmd.append("--use-core")
        if self._ctypes_prefix:
            cmd.extend(["--ctypes-prefix", self._ctypes_prefix])
        cmd.append("--")
        cmd.extend(self.clang_args)
        return cmd

    def generate(self) -> GeneratedBindings:
        """
        Run bindgen.

        Returns:
            GeneratedBindings with the Rust source

        Raises:
            BindingGenerationError: If no header is registered or bindgen fails
        """
        if not self.headers:
            raise BindingGenerationError("No headers registered for binding generation")

        with tempfile.TemporaryDirectory(prefix="avrlibc-bindgen-") as temp_dir:
            work_dir = Path(temp_dir)
            input_header = work_dir / UMBRELLA_HEADER
            output_path = work_dir / "bindings.rs"
            input_header.write_text(self.umbrella_source(), encoding="utf-8")

            cmd = self.command(input_header, output_path)
            result = self.runner.run(cmd, cwd=work_dir, capture_output=True)

            if not result.success:
                error_msg = "failed to create bindings\n"
                error_msg += f"command: {' '.join(cmd)}\n"
                if result.error:
                    error_msg += f"error: {result.error}\n"
                error_msg += f"stderr: {result.stderr}\n"
                error_msg += f"stdout: {result.stdout}"
                raise BindingGenerationError(error_msg)

            if result.stderr:
                logger.info(result.stderr.rstrip())

            try:
                source = output_path.read_text(encoding="utf-8")
            except OSError as e:
                raise BindingGenerationError(f"bindgen produced no output: {e}") from e

        return GeneratedBindings(source=source)


class BindingGenerator:
    """
    Generates Rust bindings for avr-libc.

    Example usage:
        generator = BindingGenerator(include_root, Path("src/bindings.rs"))
        bindings = generator.generate(headers, ctx)
        generator.write(bindings)
    """

    def __init__(
        self,
        include_root: Path,
        bindings_path: Path,
        ctypes_prefix: str = "::rust_ctypes",
        executable: str = "bindgen",
        runner: Optional[ProcessRunner] = None,
    ):
        """
        Initialize binding generator.

        Args:
            include_root: avr-libc include directory
            bindings_path: Destination of the generated Rust source
            ctypes_prefix: Path of the module providing C primitive types
            executable: bindgen executable
            runner: Process runner (defaults to ProcessRunner())
        """
        self.include_root = Path(include_root)
        self.bindings_path = Path(bindings_path)
        self.ctypes_prefix = ctypes_prefix
        self.executable = executable
        self.runner = runner or ProcessRunner()

    def request(self, headers: List[Path], ctx: TargetContext) -> BindingRequest:
        """
        Resolve the generation input.

        Raises:
            UnsupportedMcuError: If the MCU has no preprocessor define mapping
        """
        mcu_define = mcu_define_name(ctx.mcu_name) if ctx.mcu_name else None
        return BindingRequest(
            headers=list(headers),
            mcu_define=mcu_define,
            include_root=self.include_root,
        )

    def builder(self, request: BindingRequest) -> BindgenBuilder:
        """Configure a BindgenBuilder for a request."""
        builder = (
            BindgenBuilder(self.executable, self.runner)
            .use_core()
            .ctypes_prefix(self.ctypes_prefix)
            .clang_arg(f"-I{self.include_root.as_posix()}")
            .clang_arg("-ffreestanding")
        )

        if request.mcu_define:
            builder.clang_arg(f"-D{request.mcu_define}")

        for header in request.headers:
            builder.header(header)

        return builder

    def generate(self, headers: List[Path], ctx: TargetContext) -> GeneratedBindings:
        """
        Generate bindings for the given headers.

        Args:
            headers: Eligible headers, in collection order
            ctx: Resolved target context

        Returns:
            GeneratedBindings

        Raises:
            UnsupportedMcuError: If the MCU has no preprocessor define mapping
            BindingGenerationError: If bindgen fails
        """
        request = self.request(headers, ctx)
        logger.info(f"Generating bindings for {len(request.headers)} headers")
        return self.builder(request).generate()

    def write(self, bindings: GeneratedBindings) -> Path:
        """Write bindings to the configured destination."""
        path = bindings.write_to_file(self.bindings_path)
        logger.info(f"Bindings written to {path}")
        return path
