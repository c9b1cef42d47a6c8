"""Company CRUD, move and history API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.api.deps import require_auth
from app.api.errors import to_http_exception
from app.db.session import get_db
from app.models.user import User
from app.schemas.company import (
    CompanyCreate,
    CompanyList,
    CompanyMoveRequest,
    CompanyRead,
    CompanyUpdate,
    DeletedCompanyList,
)
from app.schemas.company_log import CompanyLogList
from app.services.company import (
    advance_company,
    create_company,
    get_company,
    list_companies,
    move_company,
    restore_company,
    soft_delete_company,
    toggle_company_status,
    update_company,
)
from app.services.company_log import list_company_logs
from app.services.errors import PipelineError

router = APIRouter()


@router.get("", response_model=CompanyList)
def api_list_companies(
    stage: str | None = Query(None, description="Filter by stage id"),
    status: str | None = Query(None, description="Filter by sub-status (active | withdrawn)"),
    include_deleted: bool = Query(False),
    db: Session = Depends(get_db),
    _auth: User = Depends(require_auth),
) -> CompanyList:
    """List companies, newest first."""
    try:
        items = list_companies(db, stage=stage, status=status, include_deleted=include_deleted)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc
    return CompanyList(items=items, total=len(items))


@router.get("/deleted", response_model=DeletedCompanyList)
def api_list_deleted_companies(
    stage: str | None = Query(None, description="Filter by stage id"),
    status: str | None = Query(None, description="Filter by sub-status (active | withdrawn)"),
    db: Session = Depends(get_db),
    _auth: User = Depends(require_auth),
) -> DeletedCompanyList:
    """Soft-deleted companies, most recently deleted first."""
    try:
        items = list_companies(db, stage=stage, status=status, only_deleted=True)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc
    return DeletedCompanyList(items=items, count=len(items))


@router.post("", response_model=CompanyRead, status_code=201)
def api_create_company(
    data: CompanyCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> CompanyRead:
    try:
        return create_company(db, data, actor_id=user.id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{company_id}", response_model=CompanyRead)
def api_get_company(
    company_id: int,
    db: Session = Depends(get_db),
    _auth: User = Depends(require_auth),
) -> CompanyRead:
    try:
        return get_company(db, company_id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.put("/{company_id}", response_model=CompanyRead)
def api_update_company(
    company_id: int,
    data: CompanyUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> CompanyRead:
    """Update a company. Changing stage or status is recorded as a move.

    Send from_stage/from_status to fail with 409 if someone else moved the
    company in the meantime.
    """
    try:
        return update_company(db, company_id, data, actor_id=user.id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{company_id}/move", response_model=CompanyRead)
def api_move_company(
    company_id: int,
    body: CompanyMoveRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> CompanyRead:
    """Move a company to a stage and sub-status."""
    try:
        return move_company(
            db,
            company_id,
            to_stage=body.to_stage,
            to_status=body.to_status,
            from_stage=body.from_stage,
            from_status=body.from_status,
            comment=body.comment,
            actor_id=user.id,
        )
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{company_id}/advance", response_model=CompanyRead)
def api_advance_company(
    company_id: int,
    next_stage: str | None = Query(None, description="Required when the stage branches"),
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> CompanyRead:
    """Move a company to its next stage as active."""
    try:
        return advance_company(db, company_id, next_stage=next_stage, actor_id=user.id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{company_id}/toggle-status", response_model=CompanyRead)
def api_toggle_company_status(
    company_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> CompanyRead:
    """Flip a company between active and withdrawn."""
    try:
        return toggle_company_status(db, company_id, actor_id=user.id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{company_id}", status_code=204)
def api_delete_company(
    company_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> Response:
    """Soft-delete a company."""
    try:
        soft_delete_company(db, company_id, actor_id=user.id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=204)


@router.post("/{company_id}/restore", response_model=CompanyRead)
def api_restore_company(
    company_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> CompanyRead:
    """Restore a soft-deleted company. 404 if it is not deleted."""
    try:
        return restore_company(db, company_id, actor_id=user.id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{company_id}/logs", response_model=CompanyLogList)
def api_company_logs(
    company_id: int,
    db: Session = Depends(get_db),
    _auth: User = Depends(require_auth),
) -> CompanyLogList:
    """Audit history for a company, newest first. Includes soft-deleted companies."""
    return CompanyLogList(items=list_company_logs(db, company_id))
