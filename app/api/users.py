"""User administration API routes (admin only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.api.errors import to_http_exception
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import UserAdminRead, UserCreate, UserList, UserUpdate
from app.services.auth import create_user
from app.services.errors import PipelineError
from app.services.user import deactivate_user, get_user, list_users, update_user

router = APIRouter()


@router.get("", response_model=UserList)
def api_list_users(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserList:
    return UserList(items=[UserAdminRead.model_validate(u) for u in list_users(db)])


@router.post("", response_model=UserAdminRead, status_code=201)
def api_create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserAdminRead:
    """Create a user. 409 if the username is taken."""
    try:
        user = create_user(
            db,
            data.username.strip(),
            data.password,
            full_name=data.full_name,
            email=data.email,
            role=data.role,
        )
    except PipelineError as exc:
        raise to_http_exception(exc) from exc
    return UserAdminRead.model_validate(user)


@router.get("/{user_id}", response_model=UserAdminRead)
def api_get_user(
    user_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserAdminRead:
    try:
        return UserAdminRead.model_validate(get_user(db, user_id))
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.put("/{user_id}", response_model=UserAdminRead)
def api_update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserAdminRead:
    """Update profile fields, role, active flag or password."""
    try:
        return UserAdminRead.model_validate(update_user(db, user_id, data))
    except PipelineError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{user_id}", status_code=204)
def api_deactivate_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Response:
    """Deactivate a user. Accounts are kept for the audit trail."""
    try:
        deactivate_user(db, user_id, actor_id=admin.id)
    except PipelineError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=204)
