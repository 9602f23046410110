"""Resolve a command name to a cached page file."""

from dataclasses import dataclass
from pathlib import Path

from quickref.cache.page_cache import PageCache
from quickref.platforms import PlatformKind


@dataclass(frozen=True)
class PageLocation:
    """Where a command's page was found.

    Attributes:
        subdirectory: Platform subdirectory holding the page ("linux", "common", ...)
        command: Command name that was looked up
        path: Page file path
    """

    subdirectory: str
    command: str
    path: Path


def join_command(words: list[str] | tuple[str, ...]) -> str:
    """Join a multi-word command the way page files are named.

    Example:
        >>> join_command(["git", "commit"])
        'git-commit'
    """
    return "-".join(words)


def resolve_page(cache: PageCache, command: str, platform: PlatformKind) -> PageLocation | None:
    """Resolve a command to its page for a platform.

    A missing page is an expected outcome and yields None.
    """
    path = cache.find_page(command, platform)
    if path is None:
        return None
    return PageLocation(subdirectory=path.parent.name, command=command, path=path)
