"""Shared FastAPI dependencies for API routes."""

from __future__ import annotations

from fastapi import Cookie, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db  # re-export
from app.models.user import User
from app.services.auth import get_user_from_token
from app.storage.blob_store import get_blob_store  # re-export

__all__ = [
    "get_blob_store",
    "get_db",
    "get_current_user",
    "require_admin",
    "require_auth",
]


# Cookie name for browser sessions
AUTH_COOKIE = "access_token"


def get_current_user(
    db: Session = Depends(get_db),
    authorization: str | None = Header(None),
    access_token: str | None = Cookie(None),
) -> User | None:
    """Return the authenticated user or None.

    Checks (in order):
    1. Authorization: Bearer <token> header
    2. access_token cookie
    """
    token: str | None = None

    if authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer ") :]

    if token is None and access_token:
        token = access_token

    if token is None:
        return None

    return get_user_from_token(db, token)


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """Dependency that requires authentication; 401 otherwise."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """Dependency that requires an authenticated admin; 403 for other roles."""
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return user
