"""Virtual-path document storage endpoints."""

from __future__ import annotations

import base64
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from app.api.deps import get_activity_session_factory, get_holding_area, get_storage
from app.models.activity_log import ActivityActionType
from app.schemas.s3 import (
    S3DownloadResponse,
    S3PathRequest,
    S3Response,
    S3SignedUrlRequest,
    S3SignedUrlResponse,
    S3UploadRequest,
    S3UploadResponse,
)
from app.services import activity_log as activity_log_service
from app.services import s3_actions
from app.services.object_storage import S3StorageService
from app.services.temp_storage import TempDocumentStorage

router = APIRouter(prefix="/s3", tags=["s3"])


def _respond(body: BaseModel, ok_status: int, fail_status: int) -> JSONResponse:
    status_code = ok_status if getattr(body, "success", False) else fail_status
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "message": message})


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    detail = first.get("msg", "invalid value")
    return f"Invalid request body: {location} {detail}".strip()


@router.post("/{action}")
def s3_action(
    action: str,
    request: Request,
    background_tasks: BackgroundTasks,
    payload: Any = Body(default=None),
    storage: S3StorageService = Depends(get_storage),
    holding_area: TempDocumentStorage = Depends(get_holding_area),
    session_factory=Depends(get_activity_session_factory),
):
    if action not in s3_actions.VALID_ACTIONS:
        return _bad_request(s3_actions.invalid_action_message(action))
    if not isinstance(payload, dict):
        return _bad_request("Request body must be a JSON object")

    try:
        if action == "upload":
            upload_request = S3UploadRequest.model_validate(payload)
            result = s3_actions.handle_upload(storage, upload_request, holding_area)
            if result.success:
                activity_log_service.queue_storage_activity(
                    background_tasks,
                    request,
                    action=ActivityActionType.upload,
                    virtual_path=result.virtual_path,
                    body_user_id=upload_request.user_id,
                    session_factory=session_factory,
                )
            return _respond(
                S3UploadResponse(
                    success=result.success,
                    message=result.message,
                    virtual_path=result.virtual_path or None,
                ),
                200,
                400,
            )

        if action == "download":
            download = s3_actions.handle_download(storage, S3PathRequest.model_validate(payload))
            encoded = None
            if download.success and download.buffer is not None:
                encoded = base64.b64encode(download.buffer).decode("ascii")
            return _respond(
                S3DownloadResponse(
                    success=download.success and encoded is not None,
                    message=download.message,
                    file_base64=encoded,
                    content_type=download.content_type if encoded is not None else None,
                ),
                200,
                404,
            )

        if action == "delete":
            delete_request = S3PathRequest.model_validate(payload)
            deleted = s3_actions.handle_delete(storage, delete_request)
            if deleted.success:
                activity_log_service.queue_storage_activity(
                    background_tasks,
                    request,
                    action=ActivityActionType.delete,
                    virtual_path=delete_request.virtual_path,
                    session_factory=session_factory,
                )
            return _respond(S3Response(success=deleted.success, message=deleted.message), 200, 400)

        signed = s3_actions.handle_signed_url(storage, S3SignedUrlRequest.model_validate(payload))
        return _respond(
            S3SignedUrlResponse(
                success=signed.success,
                message=signed.message,
                url=signed.url or None,
            ),
            200,
            400,
        )
    except ValidationError as exc:
        return _bad_request(_validation_message(exc))
