"""Local disk staging for uploaded files: write, relocate, read back, remove."""

import asyncio
import os
import re
import tempfile
from collections.abc import Iterable
from pathlib import Path

from upload_relay.core.exceptions import UnsafeFilenameError
from upload_relay.core.logger import LogIcon, logger
from upload_relay.models.relay import UploadedFile

_UNSAFE_CHARS = re.compile(r"[^\w.\-]")
STAGING_PREFIX = ".staged-"


def sanitize_filename(filename: str) -> str:
    """Reduce an untrusted client filename to a single safe path component.

    Directory parts (``/`` or ``\\``) are dropped, characters outside
    ``[\\w.-]`` become ``_`` and leading dots are stripped so the result can
    never name a parent directory or a hidden file.
    """
    name = re.split(r"[\\/]", filename)[-1].strip()
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".")
    if not name:
        raise UnsafeFilenameError(filename)
    return name


def assign_local_names(filenames: Iterable[str]) -> dict[str, str | None]:
    """Map each client filename to a distinct safe local name for one request.

    Names that sanitise to the same result get ``-1``, ``-2`` ... before the
    suffix. Unusable names map to None.
    """
    taken: set[str] = set()
    names: dict[str, str | None] = {}
    for filename in filenames:
        try:
            base = sanitize_filename(filename)
        except UnsafeFilenameError:
            names[filename] = None
            continue
        stem, suffix = Path(base).stem, Path(base).suffix
        candidate, counter = base, 0
        while candidate.casefold() in taken:
            counter += 1
            candidate = f"{stem}-{counter}{suffix}"
        taken.add(candidate.casefold())
        names[filename] = candidate
    return names


def resolve_destination(upload_dir: Path, filename: str) -> Path:
    """Path inside ``upload_dir`` for ``filename``, refusing anything that escapes it."""
    root = upload_dir.resolve()
    destination = (root / sanitize_filename(filename)).resolve()
    if destination.parent != root:
        raise UnsafeFilenameError(filename)
    return destination


def _write_staged(upload_dir: Path, content: bytes) -> Path:
    upload_dir.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix=STAGING_PREFIX, dir=upload_dir)
    try:
        with os.fdopen(fd, "wb") as file_handle:
            file_handle.write(content)
    except BaseException:
        os.unlink(name)
        raise
    return Path(name)


async def stage(upload_dir: Path, filename: str, content: bytes) -> UploadedFile:
    """Write received bytes to a uniquely named temporary file in ``upload_dir``."""
    staged_path = await asyncio.to_thread(_write_staged, upload_dir, content)
    logger.info("File staged", icon=LogIcon.FILE, filename=filename, path=str(staged_path))
    return UploadedFile(original_name=filename, staged_path=staged_path)


async def relocate(uploaded: UploadedFile, upload_dir: Path, local_name: str | None = None) -> Path:
    """Move the staged file to ``local_name`` (or its sanitised filename) inside ``upload_dir``."""
    destination = resolve_destination(upload_dir, local_name or uploaded.original_name)
    await asyncio.to_thread(os.replace, uploaded.path, destination)
    uploaded.path = destination
    return destination


async def read(uploaded: UploadedFile) -> bytes:
    """Load the file at its current location fully into memory."""
    uploaded.content = await asyncio.to_thread(uploaded.path.read_bytes)
    return uploaded.content


async def remove(uploaded: UploadedFile) -> bool:
    """Delete the file at its current location. Returns False when it was already gone."""
    try:
        await asyncio.to_thread(uploaded.path.unlink)
    except FileNotFoundError:
        return False
    return True
