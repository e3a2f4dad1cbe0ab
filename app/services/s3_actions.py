"""Adapts ``/api/s3/{action}`` request bodies to the object store."""

from __future__ import annotations

import base64
import binascii
import logging

from app.schemas.s3 import S3PathRequest, S3SignedUrlRequest, S3UploadRequest
from app.services.file_patterns import FilePatternError, build_pattern_metadata
from app.services.object_storage import (
    NOT_CONFIGURED_MESSAGE,
    DeleteResult,
    DownloadResult,
    S3StorageService,
    SignedUrlResult,
    UploadResult,
)
from app.services.temp_storage import TempDocumentStorage, TempStorageError

logger = logging.getLogger(__name__)

VALID_ACTIONS = ("upload", "download", "delete", "get-signed-url")


def invalid_action_message(action: str) -> str:
    return f"Invalid action: {action}. Valid actions: {', '.join(VALID_ACTIONS)}"


def _decode_base64(value: str) -> bytes:
    # Data URLs arrive from browsers as "data:application/pdf;base64,...."
    if value.startswith("data:") and "," in value:
        value = value.split(",", 1)[1]
    return base64.b64decode(value, validate=True)


def handle_upload(
    storage: S3StorageService,
    payload: S3UploadRequest,
    temp_storage: TempDocumentStorage,
) -> UploadResult:
    """Upload inline base64 or a staged file under its pattern-derived path.

    A staged file is removed from the holding area once the upload has been
    attempted, whatever its outcome; the caller falls back to a placeholder
    document on failure and would never reuse it.
    """
    if not storage.configured:
        return UploadResult(False, "", NOT_CONFIGURED_MESSAGE)

    staged_name: str | None = None
    if payload.file_base64:
        try:
            buffer = _decode_base64(payload.file_base64)
        except (binascii.Error, ValueError):
            return UploadResult(False, "", "fileBase64 is not valid base64 content")
    elif payload.file_name:
        staged_name = payload.file_name
        if not temp_storage.exists(staged_name):
            return UploadResult(False, "", f"Temporary file not found: {staged_name}")
        try:
            buffer = temp_storage.read(staged_name)
        except (OSError, TempStorageError) as exc:
            logger.warning("temp_upload_read_failed file=%s error=%s", staged_name, exc)
            return UploadResult(False, "", f"Temporary file not found: {staged_name}")
    else:
        return UploadResult(False, "", "Either fileBase64 or fileName must be provided")

    try:
        metadata = build_pattern_metadata(
            payload.pattern_type,
            folder_name=payload.folder_name,
            file_extension=payload.file_extension,
            user_id=payload.user_id,
            record_id=payload.record_id,
            email=payload.email,
            metric_name=payload.metric_name,
            file_num=payload.file_num,
        )
    except FilePatternError as exc:
        return UploadResult(False, "", str(exc))

    try:
        return storage.upload(buffer, metadata)
    finally:
        if staged_name:
            temp_storage.remove(staged_name)


def handle_download(storage: S3StorageService, payload: S3PathRequest) -> DownloadResult:
    return storage.download(payload.virtual_path)


def handle_delete(storage: S3StorageService, payload: S3PathRequest) -> DeleteResult:
    return storage.delete(payload.virtual_path)


def handle_signed_url(storage: S3StorageService, payload: S3SignedUrlRequest) -> SignedUrlResult:
    return storage.get_signed_url(payload.virtual_path, payload.expires_in)
