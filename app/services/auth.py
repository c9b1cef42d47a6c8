"""Authentication service: user management and JWT tokens."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.transaction import unit_of_work
from app.models.user import USER_ROLES, User
from app.services.errors import UsernameTakenError, ValidationError

logger = logging.getLogger(__name__)

# JWT configuration
ALGORITHM = "HS256"


def create_user(
    db: Session,
    username: str,
    password: str,
    *,
    full_name: str | None = None,
    email: str | None = None,
    role: str = "manager",
) -> User:
    """Create a new user with hashed password. Raises UsernameTakenError on a duplicate username."""
    if role not in USER_ROLES:
        raise ValidationError(f"Unknown role: {role!r}")
    if db.query(User).filter(User.username == username).first() is not None:
        raise UsernameTakenError(username)
    user = User(username=username, full_name=full_name, email=email, role=role)
    user.set_password(password)
    with unit_of_work(db, "create_user"):
        db.add(user)
    db.refresh(user)
    logger.info("User %s created with role %s", username, role)
    return user


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    """Validate credentials and return user, or None if invalid or deactivated.

    A successful login updates last_login.
    """
    user = db.query(User).filter(User.username == username).first()
    if user is None or not user.is_active:
        return None
    if not user.verify_password(password):
        return None
    with unit_of_work(db, "authenticate_user"):
        user.last_login = datetime.now(timezone.utc)
    db.refresh(user)
    return user


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.access_token_expire_hours)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def create_user_token(user: User) -> str:
    """Access token for a user: sub is the username, plus id and role claims."""
    return create_access_token(data={"sub": user.username, "user_id": user.id, "role": user.role})


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT token. Returns payload or None."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None


def get_user_from_token(db: Session, token: str) -> Optional[User]:
    """Extract an active user from a JWT token. Returns None if token invalid or user not found."""
    payload = decode_access_token(token)
    if payload is None:
        return None
    username: Optional[str] = payload.get("sub")
    if username is None:
        return None
    user = db.query(User).filter(User.username == username).first()
    if user is None or not user.is_active:
        return None
    return user
