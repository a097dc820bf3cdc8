"""avr-libc source tree management.

The source tree normally ships with the project (for example as a git
submodule). When it is missing and a source URL is configured, the archive
is downloaded into the project cache and unpacked in place.

Cache Structure:
    .avrlibc/
    └── cache/
        └── <archive name>     # Downloaded source archive
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from ..errors import SourceFetchError
from .downloader import ChecksumError, DownloadError, ExtractionError, PackageDownloader

logger = logging.getLogger(__name__)

# Files that mark a usable avr-libc source root
REQUIRED_ENTRIES = ("bootstrap", "include")


def _is_empty_dir(path: Path) -> bool:
    return path.is_dir() and next(path.iterdir(), None) is None


class LibcSource:
    """Makes sure the avr-libc source tree exists."""

    def __init__(
        self,
        source_dir: Path,
        cache_dir: Path,
        url: Optional[str] = None,
        checksum: Optional[str] = None,
        downloader: Optional[PackageDownloader] = None,
    ):
        """
        Initialize source manager.

        Args:
            source_dir: Expected avr-libc source root
            cache_dir: Directory for downloaded archives
            url: Archive URL used when the tree is missing
            checksum: Optional SHA256 of the archive
            downloader: Downloader instance (created on demand)
        """
        self.source_dir = Path(source_dir)
        self.cache_dir = Path(cache_dir)
        self.url = url
        self.checksum = checksum
        self._downloader = downloader

    @property
    def archive_path(self) -> Path:
        return self.cache_dir / Path(urlparse(self.url or "").path).name

    def is_present(self) -> bool:
        return all((self.source_dir / entry).exists() for entry in REQUIRED_ENTRIES)

    def ensure_source(self) -> Path:
        """
        Ensure the source tree exists, downloading it if needed.

        Returns:
            The avr-libc source root

        Raises:
            SourceFetchError: If the tree is missing and cannot be fetched
        """
        if self.is_present():
            return self.source_dir

        if not self.url:
            raise SourceFetchError(
                f"avr-libc source not found at {self.source_dir}\n"
                + "Check out the avr-libc sources there, or set 'source_url' in avrlibc.ini."
            )

        if self.source_dir.exists() and not _is_empty_dir(self.source_dir):
            raise SourceFetchError(
                f"{self.source_dir} exists but is not a complete avr-libc tree "
                + f"(needs {', '.join(REQUIRED_ENTRIES)}). Remove it to download the sources."
            )

        downloader = self._downloader or PackageDownloader()

        try:
            archive = self._cached_archive(downloader)
            with tempfile.TemporaryDirectory(dir=self.cache_dir) as temp_dir:
                downloader.unpack(archive, Path(temp_dir))
                self._install_tree(Path(temp_dir))
        except (DownloadError, ChecksumError, ExtractionError) as e:
            raise SourceFetchError(str(e)) from e
        except OSError as e:
            raise SourceFetchError(f"Could not install avr-libc sources into {self.source_dir}: {e}") from e

        if not self.is_present():
            raise SourceFetchError(
                f"Archive {self.archive_path.name} does not contain an avr-libc source tree"
            )

        return self.source_dir

    def _cached_archive(self, downloader: PackageDownloader) -> Path:
        # A cached archive that no longer matches the checksum is fetched again
        archive = self.archive_path
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        if archive.exists():
            try:
                self._verify(downloader, archive)
                logger.info(f"Using cached {archive.name}")
                return archive
            except ChecksumError as e:
                logger.warning(f"Discarding cached archive: {e}")
                archive.unlink()

        downloader.fetch(self.url, archive)
        try:
            self._verify(downloader, archive)
        except ChecksumError:
            archive.unlink()
            raise
        return archive

    def _verify(self, downloader: PackageDownloader, archive: Path) -> None:
        if self.checksum:
            downloader.verify(archive, self.checksum)

    def _install_tree(self, extract_dir: Path) -> None:
        # Archives usually wrap the tree in a single top-level directory
        entries = list(extract_dir.iterdir())
        root = entries[0] if len(entries) == 1 and entries[0].is_dir() else extract_dir

        # Only an empty placeholder directory can be here at this point
        if self.source_dir.exists():
            self.source_dir.rmdir()
        self.source_dir.parent.mkdir(parents=True, exist_ok=True)
        if root == extract_dir:
            shutil.copytree(root, self.source_dir)
        else:
            shutil.move(str(root), str(self.source_dir))
        logger.info(f"avr-libc source installed at {self.source_dir}")
