"""Models for files in flight through the relay and the responses it produces."""

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel

FORWARD_FIELD = "files"
FORWARD_CONTENT_TYPE = "application/json"


@dataclass(slots=True)
class UploadedFile:
    """One client file while it lives on local disk."""

    original_name: str
    staged_path: Path
    path: Path = field(init=False)
    content: bytes | None = None

    def __post_init__(self) -> None:
        self.path = self.staged_path


@dataclass(frozen=True, slots=True)
class ForwardingPayload:
    """Bytes plus the metadata the remote endpoint receives for one file."""

    content: bytes
    filename: str
    content_type: str = FORWARD_CONTENT_TYPE

    def as_multipart(self) -> dict[str, tuple[str, bytes, str]]:
        """Return the httpx ``files=`` mapping for this payload."""
        return {FORWARD_FIELD: (self.filename, self.content, self.content_type)}


@dataclass(frozen=True, slots=True)
class ForwardOutcome:
    filename: str
    forwarded: bool
    error: str | None = None


@dataclass(slots=True)
class RelayReport:
    """Outcomes of every file of a single request."""

    outcomes: list[ForwardOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(outcome.forwarded for outcome in self.outcomes)

    @property
    def failed(self) -> list[ForwardOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.forwarded]


class FileStatus(BaseModel):
    filename: str
    forwarded: bool


class UploadSuccessResponse(BaseModel):
    message: str = "Files uploaded successfully"


class UploadErrorResponse(BaseModel):
    error: str = "Internal Server Error"
    files: list[FileStatus] = []
