"""Company record store: CRUD, soft delete/restore and stage moves.

Every mutation locks the company row, applies the change, appends exactly one
audit log entry and commits both together.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.transaction import unit_of_work
from app.models.company import Company
from app.pipeline.stages import (
    StageId,
    SubStatus,
    is_forward_transition,
    next_stages,
    parse_stage,
    parse_sub_status,
    sorted_stages,
    stage_display_name,
)
from app.schemas.company import CompanyCreate, CompanyRead, CompanyUpdate
from app.schemas.company_log import CompanyAction
from app.services.company_log import record_company_action
from app.services.errors import (
    CompanyNotFoundError,
    CompanyValidationError,
    StaleCompanyStateError,
)

logger = logging.getLogger(__name__)


# ── Mapping helpers ──────────────────────────────────────────────────


def _model_to_read(company: Company) -> CompanyRead:
    """Map a Company ORM instance to a CompanyRead schema."""
    return CompanyRead(
        id=company.id,
        name=company.name,
        stage=company.stage,
        stage_name=stage_display_name(company.stage),
        status=parse_sub_status(company.status),
        comment=company.comment or "",
        doc_link=company.doc_link,
        tender_link=company.tender_link,
        proposal_link=company.proposal_link,
        deadline_date=company.deadline_date,
        created_by=company.created_by,
        created_at=company.created_at,
        updated_at=company.updated_at,
        deleted_at=company.deleted_at,
    )


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise CompanyValidationError("name is required")
    return cleaned


def _current_state(company: Company) -> tuple[StageId, SubStatus]:
    return parse_stage(company.stage), parse_sub_status(company.status)


def _locked_company(db: Session, company_id: int, *, deleted: bool) -> Company:
    """Load and row-lock a company that is (deleted=True) or is not soft-deleted."""
    query = db.query(Company).filter(Company.id == company_id)
    if deleted:
        query = query.filter(Company.deleted_at.is_not(None))
    else:
        query = query.filter(Company.deleted_at.is_(None))
    company = query.with_for_update().first()
    if company is None:
        detail = "Company not found or not deleted" if deleted else "Company not found"
        raise CompanyNotFoundError(company_id, detail)
    return company


# ── Reads ────────────────────────────────────────────────────────────


def list_companies(
    db: Session,
    *,
    stage: StageId | str | None = None,
    status: SubStatus | str | None = None,
    include_deleted: bool = False,
    only_deleted: bool = False,
) -> list[CompanyRead]:
    """Return companies filtered by stage and/or sub-status.

    Active companies are ordered newest-created first. With only_deleted,
    soft-deleted companies are returned newest-deleted first. With
    include_deleted, both sets are returned newest-created first.
    """
    query = db.query(Company)
    if stage is not None:
        query = query.filter(Company.stage == parse_stage(stage).value)
    if status is not None:
        query = query.filter(Company.status == parse_sub_status(status).value)

    if only_deleted:
        query = query.filter(Company.deleted_at.is_not(None)).order_by(
            Company.deleted_at.desc(), Company.id.desc()
        )
    else:
        if not include_deleted:
            query = query.filter(Company.deleted_at.is_(None))
        query = query.order_by(Company.created_at.desc(), Company.id.desc())

    return [_model_to_read(c) for c in query.all()]


def get_company(db: Session, company_id: int) -> CompanyRead:
    """Return a non-deleted company. Raises CompanyNotFoundError otherwise."""
    company = (
        db.query(Company)
        .filter(Company.id == company_id, Company.deleted_at.is_(None))
        .first()
    )
    if company is None:
        raise CompanyNotFoundError(company_id)
    return _model_to_read(company)


# ── Mutations ────────────────────────────────────────────────────────


def create_company(
    db: Session, data: CompanyCreate, actor_id: int | None = None
) -> CompanyRead:
    """Create a company and its `create` log entry in one transaction."""
    stage = parse_stage(data.stage)
    status = parse_sub_status(data.status)
    company = Company(
        name=_clean_name(data.name),
        stage=stage.value,
        status=status.value,
        comment=data.comment or "",
        doc_link=data.doc_link,
        tender_link=data.tender_link,
        proposal_link=data.proposal_link,
        deadline_date=data.deadline_date,
        created_by=actor_id,
    )
    with unit_of_work(db, "create_company"):
        db.add(company)
        db.flush()
        record_company_action(
            db,
            company_id=company.id,
            action=CompanyAction.create,
            to_stage=stage,
            to_status=status,
            comment=company.comment,
            actor_id=actor_id,
        )
    db.refresh(company)
    logger.info(
        "Company %s created at %s/%s by %s", company.id, stage.value, status.value, actor_id
    )
    return _model_to_read(company)


def update_company(
    db: Session,
    company_id: int,
    data: CompanyUpdate,
    actor_id: int | None = None,
    *,
    note: str | None = None,
) -> CompanyRead:
    """Update a non-deleted company and log it as `move` or `update`.

    The "from" state is read from the locked row, not trusted from the caller.
    If the caller supplies from_stage/from_status they act as a precondition:
    a mismatch raises StaleCompanyStateError and nothing is written.
    note, when given, is logged instead of the company comment.
    """
    settings = get_settings()
    fields = data.model_dump(exclude_unset=True)
    expected_stage = fields.pop("from_stage", None)
    expected_status = fields.pop("from_status", None)

    with unit_of_work(db, "update_company"):
        company = _locked_company(db, company_id, deleted=False)
        from_stage, from_status = _current_state(company)

        if (expected_stage is not None and expected_stage != from_stage) or (
            expected_status is not None and expected_status != from_status
        ):
            raise StaleCompanyStateError(
                company_id,
                expected=(expected_stage or from_stage, expected_status or from_status),
                actual=(from_stage, from_status),
            )

        to_stage = fields.pop("stage", None) or from_stage
        to_status = fields.pop("status", None) or from_status

        if (
            settings.enforce_stage_graph
            and to_stage != from_stage
            and not is_forward_transition(from_stage, to_stage)
        ):
            allowed = ", ".join(s.value for s in sorted_stages(next_stages(from_stage))) or "none"
            raise CompanyValidationError(
                f"Cannot move from {from_stage.value} to {to_stage.value} (allowed: {allowed})"
            )

        if "name" in fields:
            name = fields.pop("name")
            if name is not None:
                company.name = _clean_name(name)
        if "comment" in fields:
            company.comment = fields.pop("comment") or ""
        for key, value in fields.items():
            setattr(company, key, value)
        company.stage = to_stage.value
        company.status = to_status.value

        moved = from_stage != to_stage or from_status != to_status
        action = CompanyAction.move if moved else CompanyAction.update
        record_company_action(
            db,
            company_id=company.id,
            action=action,
            from_stage=from_stage,
            to_stage=to_stage,
            from_status=from_status,
            to_status=to_status,
            comment=note if note is not None else company.comment,
            actor_id=actor_id,
        )

    db.refresh(company)
    logger.info(
        "Company %s %s: %s/%s -> %s/%s by %s",
        company_id,
        action.value,
        from_stage.value,
        from_status.value,
        to_stage.value,
        to_status.value,
        actor_id,
    )
    return _model_to_read(company)


def move_company(
    db: Session,
    company_id: int,
    *,
    to_stage: StageId | str,
    to_status: SubStatus | str = SubStatus.ACTIVE,
    from_stage: StageId | str | None = None,
    from_status: SubStatus | str | None = None,
    comment: str | None = None,
    actor_id: int | None = None,
) -> CompanyRead:
    """Move a company to another stage and/or sub-status.

    Covers both toggling active/withdrawn in place and changing stage.
    Goes through update_company so the move/update classification has one path.
    """
    payload: dict = {"stage": parse_stage(to_stage), "status": parse_sub_status(to_status)}
    if from_stage is not None:
        payload["from_stage"] = parse_stage(from_stage)
    if from_status is not None:
        payload["from_status"] = parse_sub_status(from_status)
    return update_company(
        db, company_id, CompanyUpdate(**payload), actor_id=actor_id, note=comment
    )


def advance_company(
    db: Session,
    company_id: int,
    *,
    next_stage: StageId | str | None = None,
    actor_id: int | None = None,
) -> CompanyRead:
    """Move a company to a successor stage with sub-status ACTIVE.

    next_stage may be omitted when the current stage has exactly one successor.
    """
    current = get_company(db, company_id)
    candidates = next_stages(current.stage)
    if not candidates:
        raise CompanyValidationError(f"Stage {current.stage.value} is the last stage")
    if next_stage is None:
        if len(candidates) > 1:
            options = ", ".join(s.value for s in sorted_stages(candidates))
            raise CompanyValidationError(f"Choose the next stage: {options}")
        (target,) = candidates
    else:
        target = parse_stage(next_stage)
        if target not in candidates:
            raise CompanyValidationError(
                f"{target.value} does not follow {current.stage.value}"
            )
    return move_company(
        db,
        company_id,
        to_stage=target,
        to_status=SubStatus.ACTIVE,
        from_stage=current.stage,
        from_status=current.status,
        actor_id=actor_id,
    )


def toggle_company_status(
    db: Session, company_id: int, actor_id: int | None = None
) -> CompanyRead:
    """Flip a company between ACTIVE and WITHDRAWN at its current stage."""
    current = get_company(db, company_id)
    flipped = SubStatus.WITHDRAWN if current.status == SubStatus.ACTIVE else SubStatus.ACTIVE
    return move_company(
        db,
        company_id,
        to_stage=current.stage,
        to_status=flipped,
        from_stage=current.stage,
        from_status=current.status,
        actor_id=actor_id,
    )


def soft_delete_company(db: Session, company_id: int, actor_id: int | None = None) -> None:
    """Mark a company deleted. Raises CompanyNotFoundError if unknown or already deleted."""
    with unit_of_work(db, "soft_delete_company"):
        company = _locked_company(db, company_id, deleted=False)
        stage, status = _current_state(company)
        company.deleted_at = datetime.now(timezone.utc)
        record_company_action(
            db,
            company_id=company.id,
            action=CompanyAction.delete,
            from_stage=stage,
            from_status=status,
            actor_id=actor_id,
        )
    logger.info("Company %s soft-deleted by %s", company_id, actor_id)


def restore_company(db: Session, company_id: int, actor_id: int | None = None) -> CompanyRead:
    """Clear the soft-delete marker. Raises CompanyNotFoundError unless the company is deleted."""
    with unit_of_work(db, "restore_company"):
        company = _locked_company(db, company_id, deleted=True)
        stage, status = _current_state(company)
        company.deleted_at = None
        record_company_action(
            db,
            company_id=company.id,
            action=CompanyAction.restore,
            to_stage=stage,
            to_status=status,
            actor_id=actor_id,
        )
    db.refresh(company)
    logger.info("Company %s restored by %s", company_id, actor_id)
    return _model_to_read(company)
