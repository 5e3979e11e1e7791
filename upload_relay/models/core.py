"""Core models for request/response handling."""


class UploadFile:
    """Container for uploaded files from multipart/form-data requests, keyed by client filename."""

    __slots__ = ("files",)

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files = files or {}

    def __bool__(self) -> bool:
        return bool(self.files)

    def __iter__(self):
        return iter(self.files.items())

    def keys(self) -> list[str]:
        """Get all filenames."""
        return list(self.files.keys())
