"""Error types for avrlibc-build.

Every failure in this tool is fatal: the orchestrator stops at the first
error and reports it. The hierarchy exists so callers can tell a toolchain
problem (a native build stage exited nonzero) apart from a configuration
problem (unknown MCU, missing header directory).
"""

from pathlib import Path
from typing import List, Optional


class AvrLibcError(Exception):
    """Base class for all avrlibc-build errors."""

    pass


class ConfigError(AvrLibcError):
    """Raised when avrlibc.ini cannot be read or holds invalid values."""

    pass


class CannotDetermineMcuError(AvrLibcError):
    """Raised when targeting AVR but no microcontroller name can be found."""

    pass


class UnsupportedMcuError(AvrLibcError):
    """Raised when an MCU has no known preprocessor define mapping."""

    def __init__(self, mcu_name: str):
        self.mcu_name = mcu_name
        super().__init__(
            f"Unsupported MCU '{mcu_name}': no preprocessor define mapping is known. "
            + "Add an entry for it to avrlibc.config.mcu_specs.AVR_SPECS."
        )


class HeaderScanError(AvrLibcError):
    """Raised when the avr-libc include tree is malformed."""

    pass


class SourceFetchError(AvrLibcError):
    """Raised when the avr-libc source tree cannot be obtained."""

    pass


class NativeBuildError(AvrLibcError):
    """Raised when an external avr-libc build stage fails.

    Attributes:
        stage: Name of the failing stage (bootstrap, configure, make)
        command: Full command line that was executed
        cwd: Working directory of the command
        returncode: Exit status, or None if the process could not be started
    """

    stage = "build"

    def __init__(
        self,
        command: List[str],
        cwd: Path,
        returncode: Optional[int],
        detail: Optional[str] = None,
    ):
        self.command = list(command)
        self.cwd = Path(cwd)
        self.returncode = returncode

        message = f"Failed to {self.stage} avr-libc\n"
        message += f"  command: {' '.join(self.command)}\n"
        message += f"  cwd:     {self.cwd}"
        if returncode is not None:
            message += f"\n  exit:    {returncode}"
        if detail:
            message += f"\n  error:   {detail}"
        super().__init__(message)


class BootstrapFailedError(NativeBuildError):
    """Raised when `sh bootstrap` fails."""

    stage = "bootstrap"


class ConfigureFailedError(NativeBuildError):
    """Raised when `sh configure` fails."""

    stage = "configure"


class CompileFailedError(NativeBuildError):
    """Raised when `make` fails."""

    stage = "make"


class BindingGenerationError(AvrLibcError):
    """Raised when bindgen rejects the header set or crashes."""

    pass


class OutputWriteError(AvrLibcError):
    """Raised when the generated bindings cannot be written."""

    pass
