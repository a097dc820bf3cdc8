"""avr-libc source archive transfer.

Three steps, each usable on its own so a cached archive goes through the
same verification as a fresh download:
- fetch(): stream the archive into the cache with a progress bar
- verify(): compare its SHA256 with the configured checksum
- unpack(): extract it, detecting tar or zip from the file contents
"""

import hashlib
import logging
import tarfile
import zipfile
from pathlib import Path

import requests
from tqdm import tqdm

logger = logging.getLogger(__name__)


class DownloadError(Exception):
    """Raised when the archive cannot be fetched."""

    pass


class ChecksumError(Exception):
    """Raised when the archive does not match the configured SHA256."""

    def __init__(self, archive_path: Path, expected: str, actual: str):
        self.archive_path = archive_path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {archive_path.name}\n"
            + f"  expected: {expected}\n"
            + f"  actual:   {actual}"
        )


class ExtractionError(Exception):
    """Raised when the archive cannot be unpacked."""

    pass


def file_sha256(path: Path, block_size: int = 64 * 1024) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as stream:
        for block in iter(lambda: stream.read(block_size), b""):
            digest.update(block)
    return digest.hexdigest()


class PackageDownloader:
    """Fetches, verifies and unpacks the avr-libc source archive."""

    def __init__(self, timeout: int = 30, chunk_size: int = 64 * 1024):
        """Initialize downloader.

        Args:
            timeout: Connection timeout in seconds
            chunk_size: Bytes read from the response per iteration
        """
        self.timeout = timeout
        self.chunk_size = chunk_size

    def fetch(self, url: str, archive_path: Path) -> Path:
        """Download url to archive_path.

        The body is written to '<name>.part' first and renamed once complete,
        so an interrupted transfer never leaves a truncated archive in the cache.

        Raises:
            DownloadError: If the request fails
        """
        archive_path = Path(archive_path)
        partial = archive_path.with_name(archive_path.name + ".part")
        logger.info(f"Downloading {url}")

        try:
            with requests.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                total = int(response.headers.get("content-length", 0)) or None
                with open(partial, "wb") as out, tqdm(
                    total=total,
                    unit="B",
                    unit_scale=True,
                    unit_divisor=1024,
                    desc=archive_path.name,
                    disable=total is None,
                ) as progress:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        out.write(chunk)
                        progress.update(len(chunk))
        except requests.RequestException as e:
            partial.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {url}: {e}") from e
        except OSError:
            partial.unlink(missing_ok=True)
            raise

        partial.replace(archive_path)
        return archive_path

    @staticmethod
    def verify(archive_path: Path, expected_sha256: str) -> None:
        """Check the archive's SHA256 (case-insensitive).

        Raises:
            ChecksumError: On mismatch
        """
        actual = file_sha256(archive_path)
        if actual.lower() != expected_sha256.strip().lower():
            raise ChecksumError(Path(archive_path), expected_sha256, actual)

    def unpack(self, archive_path: Path, dest_dir: Path) -> Path:
        """Extract a tar (any compression) or zip archive into dest_dir.

        Raises:
            ExtractionError: If the file is missing, not an archive, or corrupt
        """
        archive_path = Path(archive_path)
        if not archive_path.is_file():
            raise ExtractionError(f"Archive not found: {archive_path}")

        logger.info(f"Unpacking {archive_path.name}")
        dest_dir = Path(dest_dir)
        dest_dir.mkdir(parents=True, exist_ok=True)

        try:
            if zipfile.is_zipfile(archive_path):
                with zipfile.ZipFile(archive_path) as archive:
                    archive.extractall(dest_dir)
            elif tarfile.is_tarfile(archive_path):
                with tarfile.open(archive_path) as archive:
                    # 'data' rejects absolute paths and links leaving dest_dir
                    if hasattr(tarfile, "data_filter"):
                        archive.extractall(dest_dir, filter="data")
                    else:
                        archive.extractall(dest_dir)
            else:
                raise ExtractionError(f"{archive_path.name} is not a tar or zip archive")
        except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
            raise ExtractionError(f"Failed to unpack {archive_path.name}: {e}") from e

        return dest_dir
