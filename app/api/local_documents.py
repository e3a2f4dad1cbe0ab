"""Staging endpoints for documents awaiting S3 placement."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from app.api.deps import get_holding_area
from app.schemas.s3 import S3Response, StagedDocumentResponse
from app.services.temp_storage import (
    PathTraversalError,
    StagedFileNotFoundError,
    TempDocumentStorage,
    TempStorageError,
)
from app.services.virtual_path import extension_of, mime_type_for_extension

router = APIRouter(prefix="/shared/local-document-upload", tags=["local-documents"])


@router.post("", response_model=StagedDocumentResponse, response_model_by_alias=True)
def stage_document(
    file: UploadFile = File(...),
    holding_area: TempDocumentStorage = Depends(get_holding_area),
):
    data = file.file.read()
    try:
        staged = holding_area.save(file.filename, file.content_type, data)
    except TempStorageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return StagedDocumentResponse(
        url=staged.url,
        file_name=staged.file_name,
        file_size=staged.file_size,
        file_type=staged.content_type,
    )


@router.get("")
def read_staged_document(
    file_name: str = Query(alias="fileName"),
    holding_area: TempDocumentStorage = Depends(get_holding_area),
):
    try:
        data = holding_area.read(file_name)
    except (PathTraversalError, StagedFileNotFoundError) as exc:
        raise HTTPException(status_code=404, detail="File not found") from exc
    return Response(
        content=data,
        media_type=mime_type_for_extension(extension_of(file_name)),
        headers={"Content-Disposition": f'inline; filename="{file_name}"'},
    )


@router.delete("", response_model=S3Response)
def discard_staged_documents(
    file_name: str | None = Query(default=None, alias="fileName"),
    holding_area: TempDocumentStorage = Depends(get_holding_area),
):
    if file_name:
        removed = holding_area.remove(file_name)
        message = "File deleted successfully" if removed else "No files to delete"
        return S3Response(success=True, message=message)
    count = holding_area.clear()
    message = "All files deleted successfully" if count else "No files to delete"
    return S3Response(success=True, message=message)
