"""Pipeline stages, sub-statuses and the stage graph.

A company sits at exactly one stage and carries a sub-status at that stage:
ACTIVE (still pending) or WITHDRAWN (dropped). The stage named ``waiting``
("awaiting feedback") is unrelated to the sub-status; the two live in
separate enums and the sub-status never uses that spelling.
"""

from __future__ import annotations

from enum import Enum

from app.services.errors import ValidationError


class StageId(str, Enum):
    """Pipeline stages in display order."""

    selected = "selected"
    collecting = "collecting"
    submitted = "submitted"
    won = "won"
    waiting = "waiting"
    preparation = "preparation"
    mvp = "mvp"
    delivery = "delivery"
    support = "support"


class SubStatus(str, Enum):
    """Whether a company is still pending at its stage or has dropped out."""

    ACTIVE = "active"
    WITHDRAWN = "withdrawn"


# Older clients send the sub-status as waiting/dropped.
_LEGACY_SUB_STATUS = {
    "waiting": SubStatus.ACTIVE,
    "dropped": SubStatus.WITHDRAWN,
}

STAGE_ORDER: tuple[StageId, ...] = tuple(StageId)

STAGE_DISPLAY_NAMES: dict[StageId, str] = {
    StageId.selected: "Selected",
    StageId.collecting: "Collecting proposal",
    StageId.submitted: "Proposal submitted",
    StageId.won: "Proposal won",
    StageId.waiting: "Awaiting feedback",
    StageId.preparation: "Preparing to start",
    StageId.mvp: "Building MVP",
    StageId.delivery: "MVP delivery",
    StageId.support: "Support",
}

STAGE_GRAPH: dict[StageId, frozenset[StageId]] = {
    StageId.selected: frozenset({StageId.collecting}),
    StageId.collecting: frozenset({StageId.submitted}),
    StageId.submitted: frozenset({StageId.won, StageId.waiting}),
    StageId.won: frozenset({StageId.preparation}),
    StageId.waiting: frozenset({StageId.preparation}),
    StageId.preparation: frozenset({StageId.mvp}),
    StageId.mvp: frozenset({StageId.delivery}),
    StageId.delivery: frozenset({StageId.support}),
    StageId.support: frozenset(),
}


def parse_stage(value: StageId | str | None) -> StageId:
    """Coerce a stage id; raises ValidationError for missing or unknown values."""
    if isinstance(value, StageId):
        return value
    if not value:
        raise ValidationError("stage is required")
    try:
        return StageId(value.strip())
    except ValueError:
        raise ValidationError(f"Unknown stage: {value!r}") from None


def parse_sub_status(value: SubStatus | str | None) -> SubStatus:
    """Coerce a sub-status, accepting the legacy waiting/dropped spellings."""
    if isinstance(value, SubStatus):
        return value
    if not value:
        raise ValidationError("status is required")
    normalized = value.strip().lower()
    if normalized in _LEGACY_SUB_STATUS:
        return _LEGACY_SUB_STATUS[normalized]
    try:
        return SubStatus(normalized)
    except ValueError:
        raise ValidationError(f"Unknown status: {value!r}") from None


def next_stages(stage: StageId | str | None) -> frozenset[StageId]:
    """Stages reachable in one step. Empty for the terminal stage or unknown input."""
    try:
        key = StageId(stage) if stage is not None else None
    except ValueError:
        return frozenset()
    return STAGE_GRAPH.get(key, frozenset())


def is_forward_transition(from_stage: StageId | str, to_stage: StageId | str) -> bool:
    """True when to_stage is a direct successor of from_stage."""
    try:
        target = StageId(to_stage)
    except ValueError:
        return False
    return target in next_stages(from_stage)


def stage_display_name(stage: StageId | str) -> str:
    """Human-readable stage label; falls back to the raw value."""
    try:
        return STAGE_DISPLAY_NAMES[StageId(stage)]
    except ValueError:
        return str(stage)


def sorted_stages(stages: frozenset[StageId] | set[StageId]) -> list[StageId]:
    """Return stages in pipeline order."""
    return [s for s in STAGE_ORDER if s in stages]
