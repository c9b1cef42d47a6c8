"""Company file attachment API routes."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.orm import Session

from app.api.deps import get_blob_store, require_auth
from app.api.errors import to_http_exception
from app.config import get_settings
from app.db.session import get_db
from app.models.user import User
from app.schemas.company_file import CompanyFileList, CompanyFileRead
from app.services.company_file import (
    delete_company_file,
    get_company_file,
    list_company_files,
    read_company_file,
    upload_company_file,
)
from app.services.errors import PipelineError
from app.storage.blob_store import BlobStore

router = APIRouter()


@router.get("/{company_id}/files", response_model=CompanyFileList)
def api_list_company_files(
    company_id: int,
    db: Session = Depends(get_db),
    _auth: User = Depends(require_auth),
) -> CompanyFileList:
    try:
        return CompanyFileList(items=list_company_files(db, company_id))
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{company_id}/files", response_model=CompanyFileRead, status_code=201)
def api_upload_company_file(
    company_id: int,
    file: UploadFile = File(...),
    description: str | None = Form(None),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    user: User = Depends(require_auth),
) -> CompanyFileRead:
    """Attach a PDF, Word or Excel document to a company."""
    # One byte past the limit is enough to reject oversized uploads.
    content = file.file.read(get_settings().max_upload_bytes + 1)
    try:
        return upload_company_file(
            db,
            store,
            company_id,
            content=content,
            original_filename=file.filename,
            mime_type=file.content_type,
            description=description,
            actor_id=user.id,
        )
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{company_id}/files/{file_id}", response_model=CompanyFileRead)
def api_get_company_file(
    company_id: int,
    file_id: int,
    db: Session = Depends(get_db),
    _auth: User = Depends(require_auth),
) -> CompanyFileRead:
    try:
        return get_company_file(db, company_id, file_id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{company_id}/files/{file_id}/download")
def api_download_company_file(
    company_id: int,
    file_id: int,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    _auth: User = Depends(require_auth),
) -> Response:
    """Return the file bytes as an attachment under the original file name."""
    try:
        meta, data = read_company_file(db, store, company_id, file_id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc
    return Response(
        content=data,
        media_type=meta.file_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(meta.original_filename)}"
        },
    )


@router.delete("/{company_id}/files/{file_id}", status_code=204)
def api_delete_company_file(
    company_id: int,
    file_id: int,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    user: User = Depends(require_auth),
) -> Response:
    try:
        delete_company_file(db, store, company_id, file_id, actor_id=user.id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=204)
