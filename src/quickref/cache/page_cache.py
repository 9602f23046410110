"""Page Cache Module - On-disk store of extracted tldr pages.

Philosophy:
- The cache root is either absent or fully populated by the last update
- Replacement is a directory-level swap, never an in-place overwrite
- Staleness comes from the root's modification time, no metadata file
- No locking: concurrent mutation from several processes is not supported

Public API (the "studs"):
    PageCache: Update, clear, list and look up cached pages
    CacheMetadata: Cache root and last successful update time
    DEFAULT_ARCHIVE_URL: Location of the tldr page bundle

Layout:
    <cache_dir>/pages/common/tar.md
    <cache_dir>/pages/linux/apt.md
    <cache_dir>/.staging-*   (transient, during update)
    <cache_dir>/.retired-*   (transient, during swap)
"""

import logging
import os
import shutil
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

from quickref.cache.archive_fetcher import STAGING_PREFIX, ArchiveFetcher
from quickref.errors import FilesystemError
from quickref.platforms import PlatformKind, search_order

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_URL = "https://github.com/tldr-pages/tldr/archive/main.tar.gz"
RETIRED_PREFIX = ".retired-"


@dataclass(frozen=True)
class CacheMetadata:
    """Cache root and the time of its last successful update.

    Attributes:
        root: Cache root directory
        updated_at: Time the root was last replaced, None if it does not exist
    """

    root: Path
    updated_at: datetime | None


class PageCache:
    """Local cache of tldr pages.

    Example:
        >>> cache = PageCache(Path("~/.quickref/cache").expanduser())
        >>> cache.update()
        >>> cache.find_page("tar", PlatformKind.LINUX)
        PosixPath('.../pages/common/tar.md')
    """

    ROOT_NAME = "pages"

    def __init__(
        self,
        cache_dir: Path,
        archive_url: str = DEFAULT_ARCHIVE_URL,
        fetcher: ArchiveFetcher | None = None,
    ):
        """Initialize page cache.

        Args:
            cache_dir: Directory holding the cache root and staging directories
            archive_url: URL of the gzip-compressed tar page bundle
            fetcher: Archive fetcher (default: ArchiveFetcher())
        """
        self.cache_dir = cache_dir
        self.root = cache_dir / self.ROOT_NAME
        self.archive_url = archive_url
        self.fetcher = fetcher or ArchiveFetcher()

    def metadata(self) -> CacheMetadata:
        """Describe the cache root and when it was last updated."""
        mtime = self._root_mtime()
        updated_at = datetime.fromtimestamp(mtime) if mtime is not None else None
        return CacheMetadata(root=self.root, updated_at=updated_at)

    def last_update(self) -> timedelta | None:
        """Time elapsed since the last successful update.

        Returns:
            Elapsed time, None if the cache root does not exist

        Raises:
            FilesystemError: If the cache root cannot be inspected
        """
        mtime = self._root_mtime()
        if mtime is None:
            return None
        return timedelta(seconds=max(0.0, time.time() - mtime))

    def clear(self) -> None:
        """Delete the cache root and any leftover staging directories.

        Raises:
            FilesystemError: If anything cannot be deleted
        """
        if self.root.exists():
            try:
                shutil.rmtree(self.root)
            except OSError as e:
                raise FilesystemError(f"Failed to delete cache {self.root}", e) from e
            logger.debug(f"Deleted cache root {self.root}")
        else:
            logger.debug(f"Cache root {self.root} does not exist, nothing to delete")

        for leftover in self._leftovers():
            try:
                shutil.rmtree(leftover)
            except OSError as e:
                raise FilesystemError(f"Failed to delete {leftover}", e) from e
            logger.debug(f"Deleted leftover directory {leftover}")

    def update(self) -> None:
        """Download the page bundle and atomically replace the cache root.

        A failed update leaves the previous cache exactly as it was.

        Raises:
            NetworkError: If the download fails
            ArchiveError: If the archive cannot be extracted
            FilesystemError: If staging or replacing the cache fails
        """
        with self.fetcher.fetch(self.archive_url) as stream:
            staged = self.fetcher.extract(stream, self.cache_dir)
        self._replace_root(staged)
        logger.debug(f"Cache updated from {self.archive_url}")

    def list_pages(self) -> list[str]:
        """All cached command names, sorted and deduplicated across platforms.

        Raises:
            FilesystemError: If the cache root is missing or unreadable
        """
        names: set[str] = set()
        try:
            for platform_dir in self.root.iterdir():
                if not platform_dir.is_dir():
                    continue
                names.update(entry.stem for entry in platform_dir.iterdir() if entry.is_file())
        except OSError as e:
            raise FilesystemError(f"Failed to list pages in {self.root}", e) from e
        return sorted(names)

    def find_page(self, command: str, platform: PlatformKind) -> Path | None:
        """Find the page file for a command.

        Subdirectories are searched in the platform's precedence order; the
        first match wins.

        Args:
            command: Command name, compared case-sensitively without extension
            platform: Platform whose subdirectory is searched before "common"

        Returns:
            Path to the page, None if no subdirectory has it

        Raises:
            FilesystemError: If a subdirectory exists but cannot be read
        """
        for subdir in search_order(platform):
            path = self._find_in(self.root / subdir, command)
            if path is not None:
                logger.debug(f"Cache hit: '{command}' -> {path}")
                return path
        logger.debug(f"Cache miss: '{command}' ({platform})")
        return None

    def _find_in(self, directory: Path, command: str) -> Path | None:
        if not directory.is_dir():
            return None
        try:
            # Exact stem comparison keeps lookups case-sensitive on
            # case-insensitive filesystems
            matches = sorted(
                entry
                for entry in directory.iterdir()
                if entry.is_file() and entry.stem == command
            )
        except OSError as e:
            raise FilesystemError(f"Failed to read {directory}", e) from e
        return matches[0] if matches else None

    def _root_mtime(self) -> float | None:
        try:
            return self.root.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as e:
            raise FilesystemError(f"Failed to inspect cache {self.root}", e) from e

    def _leftovers(self) -> list[Path]:
        if not self.cache_dir.is_dir():
            return []
        return sorted(
            entry
            for entry in self.cache_dir.iterdir()
            if entry.is_dir() and entry.name.startswith((STAGING_PREFIX, RETIRED_PREFIX))
        )

    def _replace_root(self, staged: Path) -> None:
        """Swap the staged directory into place of the cache root.

        Raises:
            FilesystemError: If the swap fails; the previous root is restored
        """
        retired: Path | None = None
        try:
            # Stamp the update time; last_update() reads it back from the root
            os.utime(staged)
            if self.root.exists():
                retired = self.cache_dir / f"{RETIRED_PREFIX}{os.getpid()}-{time.time_ns()}"
                self.root.rename(retired)
            staged.rename(self.root)
        except OSError as e:
            try:
                if retired is not None and not self.root.exists():
                    retired.rename(self.root)
            except OSError as restore_error:
                logger.error(f"Failed to restore previous cache from {retired}: {restore_error}")
            shutil.rmtree(staged, ignore_errors=True)
            raise FilesystemError(f"Failed to replace cache {self.root}", e) from e

        if retired is not None:
            try:
                shutil.rmtree(retired)
            except OSError as e:
                # New cache is in place; the leftover is removed by clear()
                logger.warning(f"Failed to delete previous cache {retired}: {e}")
