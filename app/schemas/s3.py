"""Request and response bodies for ``POST /api/s3/{action}``.

Field names on the wire are camelCase; Python attributes are snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field


class _S3Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class S3UploadRequest(_S3Body):
    file_base64: str | None = Field(default=None, alias="fileBase64")
    file_name: str | None = Field(default=None, alias="fileName")
    # Left optional so an unknown/missing pattern is reported as a pattern error.
    pattern_type: int | None = Field(default=None, alias="patternType")
    user_id: int | None = Field(default=None, alias="userId")
    record_id: int | None = Field(default=None, alias="recordId")
    email: str | None = None
    folder_name: str | None = Field(default=None, alias="folderName")
    metric_name: str | None = Field(default=None, alias="metricName")
    file_num: int | None = Field(default=None, alias="fileNum")
    file_extension: str | None = Field(default=None, alias="fileExtension")


class S3PathRequest(_S3Body):
    virtual_path: str = Field(alias="virtualPath")


class S3SignedUrlRequest(S3PathRequest):
    # Zero or negative falls back to the configured default expiry.
    expires_in: int | None = Field(default=None, alias="expiresIn")


class S3Response(_S3Body):
    success: bool
    message: str


class S3UploadResponse(S3Response):
    virtual_path: str | None = Field(default=None, serialization_alias="virtualPath")


class S3DownloadResponse(S3Response):
    file_base64: str | None = Field(default=None, serialization_alias="fileBase64")
    content_type: str | None = Field(default=None, serialization_alias="contentType")


class S3SignedUrlResponse(S3Response):
    url: str | None = None


class StagedDocumentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    url: str
    file_name: str = Field(serialization_alias="fileName")
    file_size: int = Field(serialization_alias="fileSize")
    file_type: str | None = Field(default=None, serialization_alias="fileType")
