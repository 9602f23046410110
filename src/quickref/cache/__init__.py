"""Cache Module - Local storage of the tldr page bundle.

Public API (the "studs"):
    From archive_fetcher:
        ArchiveFetcher: Download the archive and extract it into a staging area

    From page_cache:
        PageCache: Update, clear, list and look up cached pages
        CacheMetadata: Cache root and last successful update time
        DEFAULT_ARCHIVE_URL: Location of the tldr page bundle
"""

from quickref.cache.archive_fetcher import ArchiveFetcher
from quickref.cache.page_cache import DEFAULT_ARCHIVE_URL, CacheMetadata, PageCache

__all__ = [
    "DEFAULT_ARCHIVE_URL",
    "ArchiveFetcher",
    "CacheMetadata",
    "PageCache",
]
