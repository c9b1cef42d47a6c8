"""Per-stage company counts for the pipeline overview."""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.company import Company
from app.pipeline.stages import (
    STAGE_ORDER,
    SubStatus,
    next_stages,
    parse_sub_status,
    sorted_stages,
    stage_display_name,
)
from app.schemas.pipeline import PipelineStageSummary, PipelineSummary


def get_pipeline_summary(db: Session) -> PipelineSummary:
    """Every stage in order with its next stages and active/withdrawn counts.

    Soft-deleted companies are not counted. Rows with an unknown stage are ignored.
    """
    rows = (
        db.query(Company.stage, Company.status, func.count(Company.id))
        .filter(Company.deleted_at.is_(None))
        .group_by(Company.stage, Company.status)
        .all()
    )
    counts: dict[tuple[str, SubStatus], int] = {}
    for stage, status, n in rows:
        key = (stage, parse_sub_status(status))
        counts[key] = counts.get(key, 0) + n

    stages = [
        PipelineStageSummary(
            stage=stage,
            name=stage_display_name(stage),
            next_stages=sorted_stages(next_stages(stage)),
            active=counts.get((stage.value, SubStatus.ACTIVE), 0),
            withdrawn=counts.get((stage.value, SubStatus.WITHDRAWN), 0),
        )
        for stage in STAGE_ORDER
    ]
    total = sum(s.active + s.withdrawn for s in stages)
    return PipelineSummary(stages=stages, total=total)
