"""Archive Fetcher Module - Download and stage the tldr page bundle.

Philosophy:
- One HTTP request per update, no retries
- Extraction is all-or-nothing: a failure discards the staging directory
- Only page files are written; everything else in the archive is skipped

Public API (the "studs"):
    ArchiveFetcher: Fetch the archive and extract it into a staging directory
    STAGING_PREFIX: Name prefix of staging directories

Archive layout:
    <wrapper>/pages/<platform>/<command>.md   -> <staged>/<platform>/<command>.md
    <wrapper>/pages.<lang>/...                -> skipped (translations)
    <wrapper>/<anything else>                 -> skipped
"""

import gzip
import logging
import shutil
import tarfile
import tempfile
import zlib
from pathlib import Path, PurePosixPath
from typing import IO

import requests

from quickref.errors import ArchiveError, FilesystemError, NetworkError

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".staging-"
PAGES_DIR = "pages"


class ArchiveFetcher:
    """Fetch a gzip-compressed tar archive and extract its pages.

    Example:
        >>> fetcher = ArchiveFetcher(timeout=10)
        >>> with fetcher.fetch(url) as stream:
        ...     staged = fetcher.extract(stream, cache_dir)
    """

    DEFAULT_TIMEOUT = 30
    CHUNK_SIZE = 64 * 1024
    # Spool small archives in memory, larger ones on disk
    SPOOL_MAX_SIZE = 16 * 1024 * 1024

    def __init__(self, timeout: float | None = None):
        """Initialize archive fetcher.

        Args:
            timeout: Connect/read timeout in seconds (default: 30)
        """
        self.timeout = timeout or self.DEFAULT_TIMEOUT

    def fetch(self, url: str) -> IO[bytes]:
        """Download the archive into a rewound temporary stream.

        Args:
            url: Archive URL (HTTP GET)

        Returns:
            Binary stream positioned at the start of the archive. The caller
            owns it and must close it.

        Raises:
            NetworkError: On DNS, transport, timeout or HTTP status failure
            FilesystemError: If the download cannot be buffered locally
        """
        spool = tempfile.SpooledTemporaryFile(max_size=self.SPOOL_MAX_SIZE)
        try:
            logger.debug(f"Downloading archive from {url}")
            response = requests.get(url, stream=True, timeout=self.timeout)
            try:
                response.raise_for_status()
                size = 0
                for chunk in response.iter_content(chunk_size=self.CHUNK_SIZE):
                    spool.write(chunk)
                    size += len(chunk)
            finally:
                response.close()
        except requests.RequestException as e:
            spool.close()
            raise NetworkError(f"Failed to download {url}: {e}") from e
        except OSError as e:
            spool.close()
            raise FilesystemError("Failed to buffer downloaded archive", e) from e

        logger.debug(f"Downloaded {size} bytes")
        spool.seek(0)
        return spool

    def extract(self, stream: IO[bytes], staging_parent: Path) -> Path:
        """Extract the pages of an archive into a fresh staging directory.

        Args:
            stream: gzip-compressed tar stream
            staging_parent: Directory to create the staging directory in. Must
                be on the same filesystem as the cache root.

        Returns:
            Path to the staged directory, one subdirectory per platform

        Raises:
            ArchiveError: If the archive is corrupt, truncated, unsafe or empty
            FilesystemError: If writing the staged pages fails
        """
        try:
            staging_parent.mkdir(parents=True, exist_ok=True)
            staged = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=staging_parent))
        except OSError as e:
            raise FilesystemError("Failed to create staging directory", e) from e

        try:
            count = self._extract_pages(stream, staged)
            if count == 0:
                raise ArchiveError("Archive does not contain any pages")
        except BaseException:
            shutil.rmtree(staged, ignore_errors=True)
            raise

        logger.debug(f"Extracted {count} pages into {staged}")
        return staged

    def _extract_pages(self, stream: IO[bytes], staged: Path) -> int:
        """Stream archive members into the staged directory.

        Returns:
            Number of page files written
        """
        count = 0
        try:
            # gzip.GzipFile raises EOFError on a truncated stream, tarfile's own
            # stream reader would treat it as a short archive
            with gzip.GzipFile(fileobj=stream, mode="rb") as decompressed:
                with tarfile.open(fileobj=decompressed, mode="r|") as archive:
                    for member in archive:
                        target = self._page_target(member)
                        if target is None:
                            continue
                        source = archive.extractfile(member)
                        if source is None:
                            continue
                        platform_dir = staged / target[0]
                        platform_dir.mkdir(exist_ok=True)
                        with source, open(platform_dir / target[1], "wb") as dest:
                            shutil.copyfileobj(source, dest)
                        count += 1
        except (tarfile.TarError, EOFError, zlib.error, gzip.BadGzipFile) as e:
            raise ArchiveError(f"Failed to extract archive: {e}") from e
        except OSError as e:
            raise FilesystemError("Failed to write extracted page", e) from e
        return count

    @staticmethod
    def _page_target(member: tarfile.TarInfo) -> tuple[str, str] | None:
        """Map an archive member to (platform, filename), or None to skip it.

        Raises:
            ArchiveError: If the member path is absolute or escapes the archive
        """
        parts = PurePosixPath(member.name).parts
        if member.name.startswith("/") or ".." in parts:
            raise ArchiveError(f"Unsafe path in archive: {member.name}")

        if not member.isfile() or len(parts) not in (3, 4) or parts[-3] != PAGES_DIR:
            return None
        if parts[-1].startswith("."):
            return None
        return parts[-2], parts[-1]
