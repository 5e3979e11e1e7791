"""Exception hierarchy for upload-relay."""


class RelayError(Exception):
    """Base exception for all relay errors."""


class UnsafeFilenameError(RelayError, ValueError):
    """Client-supplied filename cannot be turned into a safe local path."""

    def __init__(self, filename: str) -> None:
        super().__init__(f"Unsafe filename: {filename!r}")
        self.filename = filename


class LoggerError(RelayError):
    """Exception for logger related issues."""
