"""Pipeline overview API route."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_auth
from app.db.session import get_db
from app.models.user import User
from app.schemas.pipeline import PipelineSummary
from app.services.pipeline_summary import get_pipeline_summary

router = APIRouter()


@router.get("", response_model=PipelineSummary)
def api_pipeline_summary(
    db: Session = Depends(get_db),
    _auth: User = Depends(require_auth),
) -> PipelineSummary:
    """Stages in order with their next stages and active/withdrawn counts."""
    return get_pipeline_summary(db)
