"""Tests for pipeline stages, sub-statuses and the stage graph."""

from __future__ import annotations

import pytest

from app.pipeline.stages import (
    STAGE_DISPLAY_NAMES,
    STAGE_GRAPH,
    STAGE_ORDER,
    StageId,
    SubStatus,
    is_forward_transition,
    next_stages,
    parse_stage,
    parse_sub_status,
    sorted_stages,
    stage_display_name,
)
from app.services.errors import ValidationError


class TestStageGraph:
    def test_every_stage_has_display_name_and_edges(self):
        assert set(STAGE_DISPLAY_NAMES) == set(StageId)
        assert set(STAGE_GRAPH) == set(StageId)

    def test_submitted_branches_to_won_and_waiting(self):
        assert next_stages(StageId.submitted) == {StageId.won, StageId.waiting}

    def test_both_branches_rejoin_at_preparation(self):
        assert next_stages("won") == {StageId.preparation}
        assert next_stages("waiting") == {StageId.preparation}

    def test_support_is_terminal(self):
        assert next_stages(StageId.support) == frozenset()

    def test_unknown_stage_has_no_successors(self):
        assert next_stages("nonexistent") == frozenset()
        assert next_stages(None) == frozenset()

    def test_graph_is_acyclic_and_reaches_support(self):
        seen: set[StageId] = set()
        frontier = {StageId.selected}
        while frontier:
            stage = frontier.pop()
            assert stage not in seen
            seen.add(stage)
            frontier |= set(next_stages(stage))
        assert seen == set(StageId)

    def test_forward_transition(self):
        assert is_forward_transition("selected", "collecting") is True
        assert is_forward_transition("selected", "submitted") is False
        assert is_forward_transition("collecting", "selected") is False
        assert is_forward_transition("selected", "bogus") is False

    def test_sorted_stages_follows_pipeline_order(self):
        assert sorted_stages({StageId.waiting, StageId.won}) == [StageId.won, StageId.waiting]
        assert STAGE_ORDER[0] is StageId.selected
        assert STAGE_ORDER[-1] is StageId.support


class TestParsing:
    def test_parse_stage(self):
        assert parse_stage("mvp") is StageId.mvp
        assert parse_stage(StageId.won) is StageId.won

    @pytest.mark.parametrize("value", [None, "", "unknown"])
    def test_parse_stage_rejects(self, value):
        with pytest.raises(ValidationError):
            parse_stage(value)

    def test_parse_sub_status(self):
        assert parse_sub_status("active") is SubStatus.ACTIVE
        assert parse_sub_status("WITHDRAWN") is SubStatus.WITHDRAWN

    def test_legacy_sub_status_spellings(self):
        assert parse_sub_status("waiting") is SubStatus.ACTIVE
        assert parse_sub_status("dropped") is SubStatus.WITHDRAWN

    def test_parse_sub_status_rejects_unknown(self):
        with pytest.raises(ValidationError):
            parse_sub_status("paused")

    def test_stage_name_and_sub_status_do_not_collide(self):
        assert "waiting" in {s.value for s in StageId}
        assert "waiting" not in {s.value for s in SubStatus}

    def test_display_name(self):
        assert stage_display_name("waiting") == "Awaiting feedback"
        assert stage_display_name("bogus") == "bogus"
