"""Helpers for record-saving code that stores a staged document in S3.

Business records keep a "document URL" field. While a form is open it points
at the holding area (``/uploaded-document/...``); on save it is replaced by
the S3 virtual path, or by a placeholder document when storage is unavailable
so the record can still be saved.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from app.services.file_patterns import (
    FilePatternError,
    Pattern1Metadata,
    Pattern4Metadata,
)
from app.services.object_storage import S3StorageService, UploadResult
from app.services.temp_storage import TempDocumentStorage, TempStorageError

logger = logging.getLogger(__name__)

DUMMY_DOCUMENT_URL = "http://localhost:3000/assets/dummy_document.pdf"
TEMP_URL_PREFIX = "/uploaded-document/"
VIRTUAL_PATH_PREFIX = "upload/"

_TEMP_FILE_RE = re.compile(r"/uploaded-document/([^/]+)$")

_DEPARTMENT_FOLDERS = {"visitors dept", "visitors other"}


@dataclass
class BatchUploadOutcome:
    success: bool
    virtual_path: str | None = None
    error: str | None = None


def is_temp_local_path(path: str | None) -> bool:
    return bool(path) and path.startswith(TEMP_URL_PREFIX)


def is_virtual_s3_path(path: str | None) -> bool:
    return bool(path) and path.startswith(VIRTUAL_PATH_PREFIX)


def extract_file_name_from_url(url: str) -> str | None:
    """``/uploaded-document/1_1234567890.pdf`` -> ``1_1234567890.pdf``."""
    match = _TEMP_FILE_RE.search(url or "")
    return match.group(1) if match else None


def get_file_extension(file_name: str) -> str:
    parts = file_name.split(".")
    return f".{parts[-1]}" if len(parts) > 1 else ".pdf"


def is_department_folder(folder_name: str) -> bool:
    """Department-level folders are keyed by record id alone (pattern 4)."""
    lowered = folder_name.lower()
    return "dept " in lowered or lowered in _DEPARTMENT_FOLDERS


def _upload_staged(
    storage: S3StorageService,
    temp_storage: TempDocumentStorage,
    staged_name: str,
    user_id: int,
    record_id: int,
    folder_name: str,
) -> UploadResult:
    extension = get_file_extension(staged_name)
    if is_department_folder(folder_name):
        metadata = Pattern4Metadata(
            record_id=record_id, folder_name=folder_name, file_extension=extension
        )
    else:
        metadata = Pattern1Metadata(
            user_id=user_id,
            record_id=record_id,
            folder_name=folder_name,
            file_extension=extension,
        )
    data = temp_storage.read(staged_name)
    try:
        return storage.upload(data, metadata)
    finally:
        temp_storage.remove(staged_name)


def upload_document_to_s3(
    storage: S3StorageService,
    temp_storage: TempDocumentStorage,
    document_url: str | None,
    user_id: int,
    record_id: int,
    folder_name: str,
) -> str:
    """Resolve the value to persist in a record's document URL field.

    Returns the virtual path on success, ``DUMMY_DOCUMENT_URL`` when there is
    nothing to upload or the upload fails, and any other URL unchanged.
    """
    if not document_url:
        return DUMMY_DOCUMENT_URL
    if not is_temp_local_path(document_url):
        return document_url

    staged_name = extract_file_name_from_url(document_url)
    if not staged_name:
        logger.error("document_url_invalid url=%s", document_url)
        return DUMMY_DOCUMENT_URL

    try:
        result = _upload_staged(
            storage, temp_storage, staged_name, user_id, record_id, folder_name
        )
    except (FilePatternError, TempStorageError, OSError) as exc:
        logger.error("document_upload_failed file=%s error=%s", staged_name, exc)
        return DUMMY_DOCUMENT_URL

    if not result.success or not result.virtual_path:
        logger.warning("document_upload_fallback file=%s reason=%s", staged_name, result.message)
        return DUMMY_DOCUMENT_URL
    return result.virtual_path


def upload_multiple_documents(
    storage: S3StorageService,
    temp_storage: TempDocumentStorage,
    uploads: list[dict],
) -> list[BatchUploadOutcome]:
    """Pattern 1 uploads of several staged files; each item settles independently.

    Items carry ``file_name``, ``user_id``, ``record_id`` and ``folder_name``.
    """
    outcomes: list[BatchUploadOutcome] = []
    for item in uploads:
        try:
            metadata = Pattern1Metadata(
                user_id=item.get("user_id"),
                record_id=item.get("record_id"),
                folder_name=item.get("folder_name"),
                file_extension=get_file_extension(item.get("file_name") or ""),
            )
            staged_name = item.get("file_name") or ""
            data = temp_storage.read(staged_name)
            try:
                result = storage.upload(data, metadata)
            finally:
                temp_storage.remove(staged_name)
        except (FilePatternError, TempStorageError, OSError) as exc:
            outcomes.append(BatchUploadOutcome(success=False, error=str(exc) or "Upload failed"))
            continue
        outcomes.append(
            BatchUploadOutcome(
                success=result.success,
                virtual_path=result.virtual_path or None,
                error=None if result.success else result.message,
            )
        )
    return outcomes
