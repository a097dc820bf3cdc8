"""
Header discovery for binding generation.

This module handles:
- Walking the avr-libc include tree (root, util, sys, avr)
- Keeping only direct .h entries of each directory
- Applying the header eligibility policy
- Producing a deterministic, ordered header list
"""

import logging
from pathlib import Path
from typing import List

from ..config.target import TargetContext
from ..errors import HeaderScanError
from .header_policy import is_eligible

logger = logging.getLogger(__name__)

# Scanned in this order; '' is the include root itself.
HEADER_SUBDIRS = ("", "util", "sys", "avr")


class HeaderScanner:
    """
    Collects the avr-libc headers eligible for binding generation.

    The scanner:
    1. Visits the include root, then util/, sys/ and avr/
    2. Lists direct file entries only (no recursion)
    3. Keeps files whose extension is exactly .h
    4. Drops headers rejected by the eligibility policy
    """

    def __init__(self, include_root: Path):
        """
        Initialize header scanner.

        Args:
            include_root: avr-libc include directory
        """
        self.include_root = Path(include_root)

    def collect(self, ctx: TargetContext) -> List[Path]:
        """
        Collect eligible headers.

        Args:
            ctx: Resolved target context

        Returns:
            Header paths in directory-then-name order

        Raises:
            HeaderScanError: If one of the scanned directories does not exist
        """
        headers: List[Path] = []
        for subdir in HEADER_SUBDIRS:
            directory = self.include_root / subdir if subdir else self.include_root
            headers.extend(self._headers_inside(directory, ctx))

        logger.debug(f"Collected {len(headers)} headers from {self.include_root}")
        return headers

    def _headers_inside(self, directory: Path, ctx: TargetContext) -> List[Path]:
        if not directory.is_dir():
            raise HeaderScanError(
                f"Header directory not found: {directory}\n"
                + "Make sure the avr-libc source tree is complete."
            )

        headers = []
        for path in sorted(directory.iterdir(), key=lambda p: p.name):
            if not path.is_file() or path.suffix != ".h":
                continue
            if is_eligible(path, self.include_root, ctx):
                headers.append(path)
            else:
                logger.debug(f"Skipping header {path.name}")

        return headers
