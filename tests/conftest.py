"""
Shared test fixtures and configuration for quickref tests.

This module provides common fixtures used across all test types:
- Sample tldr pages
- In-memory page archives (tar.gz)
- Temporary cache directories and fake archive fetchers
"""

import io
import tarfile
from pathlib import Path

import pytest

from quickref.cache import ArchiveFetcher, PageCache

# ============================================================================
# SAMPLE PAGES
# ============================================================================

TAR_PAGE = """\
# tar

> Archiving utility.
> Often combined with a compression method, such as gzip or bzip2.

- Create an archive from files:

`tar cf {{target.tar}} {{file1}} {{file2}}`

- Extract an archive in a target directory:

`tar xf {{source.tar}} -C {{directory}}`
"""

LINUX_LS_PAGE = """\
# ls

> List directory contents (GNU coreutils).

- List files one per line:

`ls -1`
"""

COMMON_LS_PAGE = """\
# ls

> List directory contents.

- List all files, including hidden files:

`ls -a`
"""

DEFAULT_PAGES = {
    "common/tar.md": TAR_PAGE,
    "common/ls.md": COMMON_LS_PAGE,
    "linux/ls.md": LINUX_LS_PAGE,
    "osx/pbcopy.md": "# pbcopy\n\n> Copy to clipboard.\n\n- Copy a file:\n\n`pbcopy < {{file}}`\n",
}


# ============================================================================
# ARCHIVE HELPERS
# ============================================================================


def build_archive(pages: dict[str, str], wrapper: str = "tldr-main", extra: dict[str, str] | None = None) -> bytes:
    """Build a gzip-compressed tar archive laid out like the tldr repository.

    Args:
        pages: Mapping of "<platform>/<file>" to page text, stored under pages/
        wrapper: Top-level directory name
        extra: Mapping of other archive paths (relative to wrapper) to contents
    """
    members = {f"{wrapper}/pages/{name}": text for name, text in pages.items()}
    for name, text in (extra or {}).items():
        members[f"{wrapper}/{name}"] = text

    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, text in members.items():
            data = text.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


class StaticFetcher(ArchiveFetcher):
    """Archive fetcher serving fixed bytes instead of downloading."""

    def __init__(self, payload: bytes):
        super().__init__()
        self.payload = payload
        self.fetched_urls: list[str] = []

    def fetch(self, url: str):
        self.fetched_urls.append(url)
        return io.BytesIO(self.payload)


def snapshot(directory: Path) -> dict[str, bytes]:
    """Map every file below a directory to its contents."""
    return {
        str(path.relative_to(directory)): path.read_bytes()
        for path in sorted(directory.rglob("*"))
        if path.is_file()
    }


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def archive_bytes():
    """Archive containing DEFAULT_PAGES plus non-page repository files."""
    return build_archive(
        DEFAULT_PAGES,
        extra={
            "README.md": "# tldr-pages\n",
            "pages.de/common/tar.md": "# tar\n\n> Archivierungsprogramm.\n",
        },
    )


@pytest.fixture
def cache_dir(tmp_path):
    """Temporary cache directory (not yet created)."""
    return tmp_path / "cache"


@pytest.fixture
def page_cache(cache_dir, archive_bytes):
    """PageCache backed by a StaticFetcher serving archive_bytes."""
    return PageCache(cache_dir, fetcher=StaticFetcher(archive_bytes))


@pytest.fixture
def populated_cache(page_cache):
    """PageCache after one successful update."""
    page_cache.update()
    return page_cache


@pytest.fixture
def tar_page_file(tmp_path):
    """The sample tar page written to a file."""
    path = tmp_path / "tar.md"
    path.write_text(TAR_PAGE, encoding="utf-8")
    return path
