"""Report file storage.

Routes depend on the FileStorage protocol through ``get_file_storage`` so
tests can substitute a storage rooted in a temporary directory.
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from reportdesk_api.config import settings
from reportdesk_api.exceptions import NotFoundError, ValidationError
from reportdesk_api.models import FileType

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {f".{file_type.value}": file_type for file_type in FileType}


@dataclass
class StoredFile:
    """A file written to storage."""

    filename: str
    path: str
    url: str
    size: int
    file_type: FileType


class FileStorage(Protocol):
    def save(self, original_name: str, content: bytes) -> StoredFile: ...

    def resolve(self, path: str) -> Path: ...


def detect_file_type(original_name: str) -> FileType:
    """Map a filename's extension (case-insensitive) to a report file type."""
    file_type = ALLOWED_EXTENSIONS.get(Path(original_name).suffix.lower())
    if file_type is None:
        allowed = ", ".join(sorted(ALLOWED_EXTENSIONS))
        raise ValidationError(f"Invalid file type. Allowed types: {allowed}")
    return file_type


class LocalFileStorage:
    """Stores files flat under ``root`` with random names."""

    def __init__(self, root: str | Path, max_bytes: int):
        self.root = Path(root)
        self.max_bytes = max_bytes

    def save(self, original_name: str, content: bytes) -> StoredFile:
        file_type = detect_file_type(original_name)
        if len(content) > self.max_bytes:
            raise ValidationError(
                f"File too large. Maximum size is {self.max_bytes} bytes"
            )

        self.root.mkdir(parents=True, exist_ok=True)
        filename = f"{uuid.uuid4().hex}.{file_type.value}"
        target = self.root / filename
        target.write_bytes(content)
        logger.debug("Stored %d bytes at %s", len(content), target)

        return StoredFile(
            filename=filename,
            path=str(target),
            url=f"/uploads/{filename}",
            size=len(content),
            file_type=file_type,
        )

    def resolve(self, path: str) -> Path:
        """Resolve a stored path or url to a file under the storage root.

        Only the final path component is used, so ``..`` segments cannot
        escape the root.
        """
        name = Path(path).name
        candidate = self.root / name
        if not name or name in (".", "..") or not candidate.is_file():
            raise NotFoundError("File not found")
        return candidate


def get_file_storage() -> FileStorage:
    return LocalFileStorage(settings.upload_dir, settings.max_upload_bytes)
