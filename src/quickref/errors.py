"""Error taxonomy for quickref.

Every fallible core operation raises one of these. The CLI is the only place
that turns them into messages and exit codes.

Public API (the "studs"):
    QuickrefError: Base class for all quickref errors
    NetworkError: Archive download failed
    ArchiveError: Archive is corrupt, truncated, unsafe or empty
    FilesystemError: Local file operation failed (carries the OS cause)
    FormatError: Page does not follow the tldr dialect
    ConfigError: Config file is unreadable or invalid
"""


class QuickrefError(Exception):
    """Base class for all quickref errors."""

    pass


class NetworkError(QuickrefError):
    """Raised when the page archive cannot be downloaded."""

    pass


class ArchiveError(QuickrefError):
    """Raised when the page archive cannot be extracted."""

    pass


class FilesystemError(QuickrefError):
    """Raised when a local file operation fails.

    Attributes:
        cause: The underlying OS-level error
    """

    def __init__(self, message: str, cause: OSError):
        super().__init__(f"{message}: {cause}")
        self.cause = cause


class FormatError(QuickrefError):
    """Raised when a page violates the tldr page dialect.

    Attributes:
        line_number: 1-based line of the offending input, if known
    """

    def __init__(self, message: str, line_number: int | None = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class ConfigError(QuickrefError):
    """Raised when configuration operations fail."""

    pass
