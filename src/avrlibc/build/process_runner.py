"""Process Runner.

This module runs the external tools avr-libc's build needs (sh, make,
bindgen) as blocking subprocesses.

Design:
    - Wraps subprocess.run with an explicit working directory and environment
    - Detaches stdin so child tools never read from the terminal
    - Leaves stdout/stderr attached to the terminal by default so tool output
      reaches the operator unmodified
    - Never raises on a nonzero exit; callers map failures to their own errors
"""

import logging
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one external command."""

    command: List[str]
    cwd: Path
    returncode: Optional[int]  # None if the process could not be started
    stdout: str = ""
    stderr: str = ""
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.returncode == 0


def get_subprocess_creation_flags() -> int:
    """Get platform-specific subprocess creation flags.

    Returns:
        - Windows: subprocess.CREATE_NO_WINDOW (prevents console window)
        - Other platforms: 0 (no special flags)
    """
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


class ProcessRunner:
    """Runs external commands to completion."""

    def run(
        self,
        command: List[str],
        cwd: Path,
        env: Optional[Dict[str, str]] = None,
        capture_output: bool = False,
    ) -> CommandResult:
        """Run a command and wait for it to exit.

        Args:
            command: Command and arguments
            cwd: Working directory
            env: Variables added to the inherited environment
            capture_output: Capture stdout/stderr instead of inheriting them

        Returns:
            CommandResult describing the exit status
        """
        cwd = Path(cwd)
        process_env = None
        if env:
            process_env = dict(os.environ)
            process_env.update(env)
            env_prefix = " ".join(f"{key}={value}" for key, value in env.items())
            logger.info(f"Running (cwd={cwd}): {env_prefix} {' '.join(command)}")
        else:
            logger.info(f"Running (cwd={cwd}): {' '.join(command)}")

        kwargs = {}
        flags = get_subprocess_creation_flags()
        if flags:
            kwargs["creationflags"] = flags

        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                env=process_env,
                stdin=subprocess.DEVNULL,
                capture_output=capture_output,
                text=True,
                **kwargs,
            )
        except OSError as e:
            # Missing executable or unusable working directory
            return CommandResult(command=list(command), cwd=cwd, returncode=None, error=str(e))

        return CommandResult(
            command=list(command),
            cwd=cwd,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
