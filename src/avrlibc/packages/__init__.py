"""Package management for avrlibc-build.

This module handles downloading and unpacking the avr-libc source tree
when the project does not already carry it.
"""

from .downloader import ChecksumError, DownloadError, ExtractionError, PackageDownloader
from .libc_source import LibcSource

__all__ = [
    "PackageDownloader",
    "DownloadError",
    "ChecksumError",
    "ExtractionError",
    "LibcSource",
]
