"""Platform detection and page subdirectory mapping.

The tldr bundle keeps platform-specific pages in their own subdirectory and
shared pages under "common". Which subdirectories are searched, and in what
order, depends only on the platform passed in.

Public API (the "studs"):
    PlatformKind: Closed set of supported platforms
    detect_platform: Resolve the running platform (call once at startup)
    parse_platform: Case-insensitive parsing of user input
    search_order: Subdirectories to search for a platform, in precedence order
"""

import logging
import platform
from enum import StrEnum

logger = logging.getLogger(__name__)

COMMON_DIR = "common"


class PlatformKind(StrEnum):
    """Platforms with their own page subdirectory (plus Other)."""

    LINUX = "linux"
    OSX = "osx"
    SUNOS = "sunos"
    WINDOWS = "windows"
    OTHER = "other"


# BSDs share the osx pages, same as upstream tldr clients
_SYSTEM_MAP = {
    "linux": PlatformKind.LINUX,
    "darwin": PlatformKind.OSX,
    "freebsd": PlatformKind.OSX,
    "netbsd": PlatformKind.OSX,
    "openbsd": PlatformKind.OSX,
    "dragonfly": PlatformKind.OSX,
    "sunos": PlatformKind.SUNOS,
    "windows": PlatformKind.WINDOWS,
}

_ALIASES = {
    "macos": PlatformKind.OSX,
}


def detect_platform() -> PlatformKind:
    """Detect the platform quickref is running on.

    Returns:
        PlatformKind for the current system, OTHER if unrecognised

    Security: Uses platform.system() (safe)
    """
    system = platform.system().lower()
    kind = _SYSTEM_MAP.get(system, PlatformKind.OTHER)
    logger.debug(f"Detected platform '{system}' -> {kind}")
    return kind


def parse_platform(value: str) -> PlatformKind:
    """Parse a platform name case-insensitively.

    Args:
        value: Platform name such as "linux" or "OSX"

    Returns:
        Matching PlatformKind

    Raises:
        ValueError: If the name is not a known platform

    Example:
        >>> parse_platform("LiNuX")
        <PlatformKind.LINUX: 'linux'>
    """
    name = value.strip().lower()
    if name in _ALIASES:
        return _ALIASES[name]
    try:
        return PlatformKind(name)
    except ValueError:
        valid = ", ".join(kind.value for kind in PlatformKind if kind != PlatformKind.OTHER)
        raise ValueError(f"Unknown platform '{value}' (expected one of: {valid})") from None


def search_order(kind: PlatformKind) -> list[str]:
    """Subdirectories searched for a page, highest precedence first."""
    if kind == PlatformKind.OTHER:
        return [COMMON_DIR]
    return [kind.value, COMMON_DIR]
