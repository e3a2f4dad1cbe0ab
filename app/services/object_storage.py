"""S3 object storage addressed by ``upload/{folder}/{file}`` virtual paths.

Folders are provisioned out-of-band, so every read or write first confirms the
target folder exists. An absent folder points at a misconfigured folder name;
an absent object inside an existing folder is an ordinary "never uploaded"
state. The two are reported separately.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import lru_cache
from typing import Any

from app.config import is_s3_configured, settings
from app.services.file_patterns import (
    FilePatternError,
    FilePatternMetadata,
    generate_virtual_path,
)
from app.services.virtual_path import (
    extension_of,
    folder_key,
    folder_prefix,
    mime_type_for_extension,
    validate_virtual_path,
)

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "S3 is not properly configured. Please check environment variables."
INVALID_PATH_MESSAGE = "Invalid virtual path"
OBJECT_NOT_FOUND_MESSAGE = "Object not found in S3"

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class ObjectStorageError(Exception):
    """Generic object storage failure."""


@dataclass
class UploadResult:
    success: bool
    virtual_path: str
    message: str


@dataclass
class DownloadResult:
    success: bool
    buffer: bytes | None
    message: str
    content_type: str | None = None


@dataclass
class DeleteResult:
    success: bool
    message: str


@dataclass
class SignedUrlResult:
    success: bool
    url: str
    message: str


@dataclass
class ExistsResult:
    """Outcome of an existence probe.

    ``error`` is set when the store could not answer (permissions, network),
    as opposed to answering "not there".
    """

    exists: bool
    message: str
    error: bool = False


class S3StorageService:
    """S3-backed store for virtual-path documents."""

    def __init__(
        self,
        bucket_name: str | None,
        access_key: str | None,
        secret_key: str | None,
        region: str | None,
        endpoint_url: str | None = None,
        default_expiry: int = 3600,
        client: Any | None = None,
    ) -> None:
        self.bucket_name = bucket_name
        self.region = region
        self.default_expiry = default_expiry
        self.configured = all([bucket_name, access_key, secret_key, region])
        if client is not None:
            self.client = client
            return
        try:
            import boto3
            from botocore.config import Config
        except ImportError as exc:
            raise ObjectStorageError("boto3 is required for S3 storage") from exc
        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=Config(signature_version="s3v4"),
        )

    @staticmethod
    def _error_code(exc: Exception) -> str:
        response = getattr(exc, "response", None)
        if isinstance(response, dict):
            err = response.get("Error", {})
            if isinstance(err, dict):
                return str(err.get("Code", ""))
        return ""

    @staticmethod
    def _http_status(exc: Exception) -> int | None:
        response = getattr(exc, "response", None)
        if isinstance(response, dict):
            meta = response.get("ResponseMetadata", {})
            if isinstance(meta, dict) and meta.get("HTTPStatusCode") is not None:
                return int(meta["HTTPStatusCode"])
        return None

    def _is_not_found(self, exc: Exception) -> bool:
        return self._error_code(exc) in _NOT_FOUND_CODES or self._http_status(exc) == 404

    # -- probes ---------------------------------------------------------

    def check_folder_exists(self, folder_path: str) -> ExistsResult:
        """List at most one key under the folder; zero keys means no folder."""
        if not self.configured:
            return ExistsResult(False, NOT_CONFIGURED_MESSAGE, error=True)
        prefix = folder_key(folder_path)
        try:
            response = self.client.list_objects_v2(
                Bucket=self.bucket_name, Prefix=prefix, MaxKeys=1
            )
        except Exception as exc:
            logger.warning("s3_folder_check_failed prefix=%s error=%s", prefix, exc)
            return ExistsResult(False, f"Error checking folder existence: {exc}", error=True)
        count = response.get("KeyCount")
        if count is None:
            count = len(response.get("Contents") or [])
        if count > 0:
            return ExistsResult(True, f"Folder exists in S3: {prefix}")
        return ExistsResult(False, f"Folder does not exist in S3: {prefix}")

    def check_object_exists(self, virtual_path: str) -> ExistsResult:
        if not self.configured:
            return ExistsResult(False, NOT_CONFIGURED_MESSAGE, error=True)
        try:
            self.client.head_object(Bucket=self.bucket_name, Key=virtual_path)
        except Exception as exc:
            if self._is_not_found(exc):
                return ExistsResult(False, OBJECT_NOT_FOUND_MESSAGE)
            logger.warning("s3_object_check_failed key=%s error=%s", virtual_path, exc)
            return ExistsResult(False, f"Error checking object existence: {exc}", error=True)
        return ExistsResult(True, "Object exists in S3")

    def ensure_folder(self, folder_name: str) -> bool:
        """Create the folder marker if missing (safe to call repeatedly).

        Returns True when a marker was written. Used by ops tooling only; request
        handlers never create folders.
        """
        if not self.configured:
            raise ObjectStorageError(NOT_CONFIGURED_MESSAGE)
        probe = self.check_folder_exists(folder_name)
        if probe.error:
            raise ObjectStorageError(probe.message)
        if probe.exists:
            return False
        prefix = folder_key(folder_name)
        try:
            self.client.put_object(Bucket=self.bucket_name, Key=prefix, Body=b"")
        except Exception as exc:
            raise ObjectStorageError(f"Failed to create folder {prefix}") from exc
        logger.info("s3_folder_created prefix=%s", prefix)
        return True

    def _folder_precondition(self, virtual_path: str) -> str | None:
        """Return a failure message when the path's folder is absent."""
        result = self.check_folder_exists(folder_prefix(virtual_path))
        if result.exists:
            return None
        return result.message

    # -- operations -----------------------------------------------------

    def upload(
        self,
        buffer: bytes,
        metadata: FilePatternMetadata,
        content_type: str | None = None,
    ) -> UploadResult:
        if not self.configured:
            return UploadResult(False, "", NOT_CONFIGURED_MESSAGE)
        try:
            virtual_path = generate_virtual_path(metadata)
        except FilePatternError as exc:
            return UploadResult(False, "", str(exc))
        if not validate_virtual_path(virtual_path):
            return UploadResult(False, "", "Invalid virtual path generated")

        failure = self._folder_precondition(virtual_path)
        if failure:
            return UploadResult(False, "", failure)

        mime_type = content_type or mime_type_for_extension(extension_of(virtual_path))
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=virtual_path,
                Body=buffer,
                ContentType=mime_type,
                Metadata={
                    "patternType": str(metadata.pattern_type),
                    "uploadedAt": datetime.now(UTC).isoformat(),
                },
            )
        except Exception as exc:
            logger.exception("s3_upload_failed key=%s", virtual_path)
            return UploadResult(False, "", f"Failed to upload file to S3: {exc}")

        logger.info(
            "s3_upload_success key=%s pattern=%s size=%s",
            virtual_path,
            metadata.pattern_type,
            len(buffer),
        )
        return UploadResult(True, virtual_path, "File uploaded successfully to S3")

    def download(self, virtual_path: str) -> DownloadResult:
        if not self.configured:
            return DownloadResult(False, None, NOT_CONFIGURED_MESSAGE)
        if not validate_virtual_path(virtual_path):
            return DownloadResult(False, None, INVALID_PATH_MESSAGE)
        failure = self._folder_precondition(virtual_path)
        if failure:
            return DownloadResult(False, None, failure)

        try:
            obj = self.client.get_object(Bucket=self.bucket_name, Key=virtual_path)
            body = obj["Body"]
            chunks = iter(lambda: body.read(1024 * 1024), b"")
            buffer = b"".join(chunks)
        except Exception as exc:
            if self._is_not_found(exc):
                return DownloadResult(False, None, OBJECT_NOT_FOUND_MESSAGE)
            logger.exception("s3_download_failed key=%s", virtual_path)
            return DownloadResult(False, None, f"Failed to download file from S3: {exc}")

        return DownloadResult(
            True,
            buffer,
            "File downloaded successfully",
            content_type=obj.get("ContentType"),
        )

    def delete(self, virtual_path: str) -> DeleteResult:
        if not self.configured:
            return DeleteResult(False, NOT_CONFIGURED_MESSAGE)
        if not validate_virtual_path(virtual_path):
            return DeleteResult(False, INVALID_PATH_MESSAGE)
        failure = self._folder_precondition(virtual_path)
        if failure:
            return DeleteResult(False, failure)

        # S3 delete is idempotent; a missing object in an existing folder succeeds.
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=virtual_path)
        except Exception as exc:
            logger.exception("s3_delete_failed key=%s", virtual_path)
            return DeleteResult(False, f"Failed to delete file from S3: {exc}")
        logger.info("s3_delete_success key=%s", virtual_path)
        return DeleteResult(True, "File deleted successfully from S3")

    def get_signed_url(self, virtual_path: str, expires_in: int | None = None) -> SignedUrlResult:
        if not self.configured:
            return SignedUrlResult(False, "", NOT_CONFIGURED_MESSAGE)
        if not validate_virtual_path(virtual_path):
            return SignedUrlResult(False, "", INVALID_PATH_MESSAGE)
        failure = self._folder_precondition(virtual_path)
        if failure:
            return SignedUrlResult(False, "", failure)

        probe = self.check_object_exists(virtual_path)
        if not probe.exists:
            return SignedUrlResult(False, "", probe.message)

        expiry = expires_in if expires_in and expires_in > 0 else self.default_expiry
        try:
            url = self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": virtual_path},
                ExpiresIn=expiry,
            )
        except Exception as exc:
            logger.exception("s3_signed_url_failed key=%s", virtual_path)
            return SignedUrlResult(False, "", f"Failed to generate signed URL: {exc}")
        return SignedUrlResult(True, url, "Signed URL generated successfully")


@lru_cache(maxsize=1)
def get_s3_storage() -> S3StorageService:
    return S3StorageService(
        bucket_name=settings.aws_bucket_name,
        access_key=settings.aws_access_key,
        secret_key=settings.aws_secret_key,
        region=settings.aws_region,
        endpoint_url=settings.s3_endpoint_url,
        default_expiry=settings.s3_presigned_url_expiry,
    )


def s3_available() -> bool:
    return is_s3_configured(settings)


def upload_to_s3(
    buffer: bytes, metadata: FilePatternMetadata, content_type: str | None = None
) -> UploadResult:
    return get_s3_storage().upload(buffer, metadata, content_type)


def download_from_s3(virtual_path: str) -> DownloadResult:
    return get_s3_storage().download(virtual_path)


def delete_from_s3(virtual_path: str) -> DeleteResult:
    return get_s3_storage().delete(virtual_path)


def get_signed_url(virtual_path: str, expires_in: int | None = None) -> SignedUrlResult:
    return get_s3_storage().get_signed_url(virtual_path, expires_in)


def check_s3_folder_exists(folder_path: str) -> ExistsResult:
    return get_s3_storage().check_folder_exists(folder_path)


def check_s3_object_exists(virtual_path: str) -> ExistsResult:
    return get_s3_storage().check_object_exists(virtual_path)
