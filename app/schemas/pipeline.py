"""Pipeline overview schemas."""

from __future__ import annotations

from pydantic import BaseModel

from app.pipeline.stages import StageId


class PipelineStageSummary(BaseModel):
    """One stage of the pipeline with its outgoing edges and company counts."""

    stage: StageId
    name: str
    next_stages: list[StageId]
    active: int = 0
    withdrawn: int = 0


class PipelineSummary(BaseModel):
    """All stages in pipeline order."""

    stages: list[PipelineStageSummary]
    total: int
