"""Pipeline package: stage ids, sub-statuses and the stage graph."""

from app.pipeline.stages import (
    STAGE_DISPLAY_NAMES,
    STAGE_GRAPH,
    StageId,
    SubStatus,
    next_stages,
)

__all__ = ["STAGE_DISPLAY_NAMES", "STAGE_GRAPH", "StageId", "SubStatus", "next_stages"]
