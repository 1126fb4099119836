import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from submission_portal.core.config import (
    ALLOWED_UPLOAD_TYPES,
    MAX_FILES_PER_SUBMISSION,
    MAX_UPLOAD_BYTES,
    UPLOAD_DIR,
)
from submission_portal.core.errors import InvalidInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    stored_name: str
    original_name: str
    path: str
    size: int
    media_type: str


def _unique_name(field: str, original_name: str) -> str:
    ext = os.path.splitext(original_name)[1].lower()
    return f"{field}-{uuid.uuid4().hex}{ext}"


def save_uploads(
    files: list[UploadFile],
    folder: str = "submissions",
    upload_dir: Path | None = None,
    max_files: int = MAX_FILES_PER_SUBMISSION,
    field: str = "files",
) -> list[StoredFile]:
    """Validate and write uploads to disk, keeping the caller's order.

    Nothing is written unless every file passes validation. If a write fails
    midway, files already written are removed before the error propagates.
    """
    if len(files) > max_files:
        raise InvalidInput(f"At most {max_files} files are allowed")

    for f in files:
        if f.content_type not in ALLOWED_UPLOAD_TYPES:
            raise InvalidInput(f"File type not allowed: {f.content_type}")
        if f.size is not None and f.size > MAX_UPLOAD_BYTES:
            raise InvalidInput(f"File too large: {f.filename}")

    target = (upload_dir or UPLOAD_DIR) / folder
    target.mkdir(parents=True, exist_ok=True)

    stored: list[StoredFile] = []
    try:
        for f in files:
            original_name = f.filename or "upload"
            name = _unique_name(field, original_name)
            full_path = target / name

            content = f.file.read()
            if len(content) > MAX_UPLOAD_BYTES:
                raise InvalidInput(f"File too large: {original_name}")
            with open(full_path, "wb") as buffer:
                buffer.write(content)

            stored.append(
                StoredFile(
                    stored_name=name,
                    original_name=original_name,
                    path=str(full_path),
                    size=len(content),
                    media_type=f.content_type,
                )
            )
    except Exception:
        discard(stored)
        raise

    return stored


def discard(files: list[StoredFile]) -> None:
    """Best-effort removal of blobs whose submission never got recorded."""
    for f in files:
        try:
            os.remove(f.path)
        except FileNotFoundError:
            logger.warning("stored file already gone: %s", f.path)
        except OSError:
            logger.exception("could not remove stored file %s", f.path)
