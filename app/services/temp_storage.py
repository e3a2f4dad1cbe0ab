"""
Temporary holding area for client uploads awaiting S3 placement.

Browsers upload a document here while the surrounding form is still being
filled in; once the business record is saved the staged file is pushed to S3
under its pattern-derived virtual path and removed from the holding area.

Key features:
- Size, content type, extension and magic bytes validated BEFORE writing
- Staged names are single safe path segments; lookups cannot escape base_dir
- Cleanup is best-effort and never raises
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from app.config import settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = frozenset({"application/pdf", "image/jpeg", "image/jpg"})
ALLOWED_EXTENSIONS = frozenset({".pdf", ".jpg", ".jpeg"})
ALLOWED_FILE_TYPES_DISPLAY = "JPG, JPEG, and PDF"

MAGIC_BYTES: dict[str, list[bytes]] = {
    ".pdf": [b"%PDF"],
    ".jpg": [b"\xff\xd8\xff"],
    ".jpeg": [b"\xff\xd8\xff"],
}

SAFE_STAGED_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,199}$")


class TempStorageError(Exception):
    """Base exception for holding-area failures."""


class InvalidContentTypeError(TempStorageError):
    pass


class InvalidExtensionError(TempStorageError):
    pass


class FileTooLargeError(TempStorageError):
    pass


class InvalidMagicBytesError(TempStorageError):
    pass


class PathTraversalError(TempStorageError):
    pass


class StagedFileNotFoundError(TempStorageError):
    pass


@dataclass
class StagedDocument:
    file_name: str
    url: str
    file_size: int
    content_type: str | None


class TempDocumentStorage:
    def __init__(
        self,
        base_dir: str | Path,
        max_size_bytes: int = 1 * 1024 * 1024,
        url_prefix: str = "/uploaded-document",
    ) -> None:
        self.base_dir = Path(base_dir)
        self.max_size_bytes = max_size_bytes
        self.url_prefix = url_prefix.rstrip("/")

    @property
    def base_path(self) -> Path:
        return self.base_dir.resolve()

    def validate(self, filename: str | None, content_type: str | None, data: bytes) -> str:
        """Return the normalized extension; raise TempStorageError on rejection."""
        if content_type and content_type not in ALLOWED_CONTENT_TYPES:
            raise InvalidContentTypeError(
                f"Invalid file type. Only {ALLOWED_FILE_TYPES_DISPLAY} files are allowed."
            )
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise InvalidExtensionError(
                f"Invalid file type. Only {ALLOWED_FILE_TYPES_DISPLAY} files are allowed."
            )
        if len(data) > self.max_size_bytes:
            max_mb = self.max_size_bytes / (1024 * 1024)
            raise FileTooLargeError(
                f"File size exceeds {max_mb:g}MB limit. Maximum allowed size is {max_mb:g}MB."
            )
        if not any(data[: len(sig)] == sig for sig in MAGIC_BYTES[ext]):
            raise InvalidMagicBytesError("File content does not match the expected format")
        return ext

    def path_for(self, file_name: str) -> Path:
        if not file_name or not SAFE_STAGED_NAME_RE.fullmatch(file_name) or ".." in file_name:
            raise PathTraversalError("Invalid staged file name")
        base = self.base_path
        path = (base / file_name).resolve()
        if path.parent != base:
            raise PathTraversalError("Path traversal detected: target is outside upload directory")
        return path

    def url_for(self, file_name: str) -> str:
        return f"{self.url_prefix}/{file_name}"

    def save(self, filename: str | None, content_type: str | None, data: bytes) -> StagedDocument:
        ext = self.validate(filename, content_type, data)
        self.base_path.mkdir(parents=True, exist_ok=True)
        staged_name = f"document_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}{ext}"
        self.path_for(staged_name).write_bytes(data)
        logger.info("temp_upload_saved file=%s size=%s", staged_name, len(data))
        return StagedDocument(
            file_name=staged_name,
            url=self.url_for(staged_name),
            file_size=len(data),
            content_type=content_type,
        )

    def exists(self, file_name: str) -> bool:
        try:
            return self.path_for(file_name).is_file()
        except PathTraversalError:
            return False

    def read(self, file_name: str) -> bytes:
        path = self.path_for(file_name)
        if not path.is_file():
            raise StagedFileNotFoundError(file_name)
        return path.read_bytes()

    def remove(self, file_name: str) -> bool:
        """Delete one staged file; returns False when it could not be removed."""
        try:
            path = self.path_for(file_name)
            if not path.exists():
                return False
            path.unlink()
        except (OSError, TempStorageError) as exc:
            logger.warning("temp_upload_cleanup_failed file=%s error=%s", file_name, exc)
            return False
        return True

    def clear(self) -> int:
        """Delete every staged file; returns the number removed."""
        base = self.base_path
        if not base.is_dir():
            return 0
        removed = 0
        for entry in base.iterdir():
            if entry.is_file() and self.remove(entry.name):
                removed += 1
        return removed


def get_temp_storage() -> TempDocumentStorage:
    return TempDocumentStorage(
        settings.temp_upload_dir,
        max_size_bytes=settings.temp_upload_max_bytes,
        url_prefix=settings.temp_upload_url_prefix,
    )
