"""User administration: list, update and deactivate accounts.

Creation lives in app.services.auth.create_user. Users are never hard-deleted
because audit log entries reference them.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.db.transaction import unit_of_work
from app.models.user import User
from app.schemas.user import UserUpdate
from app.services.errors import UserNotFoundError, ValidationError

logger = logging.getLogger(__name__)


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id.asc()).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def update_user(db: Session, user_id: int, data: UserUpdate) -> User:
    """Apply the fields set on data. A new password is hashed before storing."""
    fields = data.model_dump(exclude_unset=True)
    password = fields.pop("password", None)
    with unit_of_work(db, "update_user"):
        user = get_user(db, user_id)
        for key, value in fields.items():
            if key in ("role", "is_active") and value is None:
                continue
            setattr(user, key, value)
        if password:
            user.set_password(password)
    db.refresh(user)
    logger.info(
        "User %s updated (%s%s)",
        user_id,
        ", ".join(sorted(fields)) or "no fields",
        ", password" if password else "",
    )
    return user


def deactivate_user(db: Session, user_id: int, *, actor_id: int | None = None) -> None:
    """Deactivate an account. An admin cannot deactivate themselves."""
    if actor_id is not None and user_id == actor_id:
        raise ValidationError("Cannot deactivate the current user")
    with unit_of_work(db, "deactivate_user"):
        user = get_user(db, user_id)
        user.is_active = False
    logger.info("User %s deactivated by %s", user_id, actor_id)
