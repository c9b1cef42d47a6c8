"""Company audit log: append entries inside the caller's transaction, read them back."""

from __future__ import annotations

import logging
from enum import Enum

from sqlalchemy.orm import Session

from app.models.company_log import CompanyLog
from app.models.user import User
from app.schemas.company_log import CompanyAction, CompanyLogRead

logger = logging.getLogger(__name__)


def _normalize(value: Enum | str | None) -> str | None:
    """Store enums by value; blank strings persist as NULL."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    value = str(value).strip()
    return value or None


def record_company_action(
    db: Session,
    *,
    company_id: int,
    action: CompanyAction,
    from_stage: Enum | str | None = None,
    to_stage: Enum | str | None = None,
    from_status: Enum | str | None = None,
    to_status: Enum | str | None = None,
    comment: str | None = None,
    actor_id: int | None = None,
) -> CompanyLog:
    """Add one log entry to the session and flush it.

    Does not commit: the entry belongs to the caller's transaction so the
    record change and its log entry land (or roll back) together.
    Database errors propagate.
    """
    entry = CompanyLog(
        company_id=company_id,
        user_id=actor_id,
        action=CompanyAction(action).value,
        from_stage=_normalize(from_stage),
        to_stage=_normalize(to_stage),
        from_status=_normalize(from_status),
        to_status=_normalize(to_status),
        comment=comment,
    )
    db.add(entry)
    db.flush()
    logger.debug(
        "company_log: company=%s action=%s %s/%s -> %s/%s actor=%s",
        company_id,
        entry.action,
        entry.from_stage,
        entry.from_status,
        entry.to_stage,
        entry.to_status,
        actor_id,
    )
    return entry


def list_company_logs(db: Session, company_id: int) -> list[CompanyLogRead]:
    """Return log entries for a company, newest first, with actor names joined in."""
    rows = (
        db.query(CompanyLog, User.username, User.full_name)
        .outerjoin(User, CompanyLog.user_id == User.id)
        .filter(CompanyLog.company_id == company_id)
        .order_by(CompanyLog.created_at.desc(), CompanyLog.id.desc())
        .all()
    )
    return [
        CompanyLogRead(
            id=entry.id,
            company_id=entry.company_id,
            user_id=entry.user_id,
            username=username,
            user_full_name=full_name,
            action=entry.action,
            from_stage=entry.from_stage,
            to_stage=entry.to_stage,
            from_status=entry.from_status,
            to_status=entry.to_status,
            comment=entry.comment,
            created_at=entry.created_at,
        )
        for entry, username, full_name in rows
    ]
