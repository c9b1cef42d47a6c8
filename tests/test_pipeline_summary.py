"""Tests for the pipeline overview counts."""

from __future__ import annotations

from app.pipeline.stages import STAGE_ORDER, StageId
from app.schemas.company import CompanyCreate
from app.services.company import create_company, soft_delete_company
from app.services.pipeline_summary import get_pipeline_summary


def _add(db, name, stage, status="active"):
    return create_company(db, CompanyCreate(name=name, stage=stage, status=status))


def test_empty_pipeline_lists_all_stages(db):
    summary = get_pipeline_summary(db)
    assert [s.stage for s in summary.stages] == list(STAGE_ORDER)
    assert summary.total == 0
    submitted = summary.stages[STAGE_ORDER.index(StageId.submitted)]
    assert submitted.next_stages == [StageId.won, StageId.waiting]
    assert submitted.name == "Proposal submitted"


def test_counts_exclude_deleted(db):
    _add(db, "A", "selected")
    _add(db, "B", "selected", "withdrawn")
    _add(db, "C", "mvp")
    gone = _add(db, "D", "selected")
    soft_delete_company(db, gone.id)

    summary = get_pipeline_summary(db)
    by_stage = {s.stage: s for s in summary.stages}
    assert (by_stage[StageId.selected].active, by_stage[StageId.selected].withdrawn) == (1, 1)
    assert by_stage[StageId.mvp].active == 1
    assert summary.total == 3


def test_pipeline_endpoint(api_client, db):
    _add(db, "A", "won")
    resp = api_client.get("/api/pipeline")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    won = next(s for s in body["stages"] if s["stage"] == "won")
    assert won["active"] == 1
    assert won["next_stages"] == ["preparation"]
