# tests/unit/pipeline/test_unit_state.py — v2
"""Tests for pipeline/state.py — SessionState construction and views."""

from __future__ import annotations

from datetime import datetime, timezone

from sermonflow.core.models import PipelineInput
from sermonflow.pipeline.hitl import HitlStage
from sermonflow.pipeline.registry import StepRegistry
from sermonflow.pipeline.state import SessionState


class TestFromRegistry:
    def test_fresh_state(self):
        state = SessionState.from_registry(StepRegistry())
        assert len(state.steps) == 15
        assert all(s.status == "pending" and s.result is None for s in state.steps)
        assert state.cursor == 0
        assert state.hitl_stage is None
        assert state.hitl_feedback == ""
        assert state.logs == []
        assert state.is_processing is False
        assert state.quality_score == 0.0
        assert state.pipeline_input == PipelineInput()

    def test_unique_run_ids(self):
        reg = StepRegistry()
        assert SessionState.from_registry(reg).run_id != SessionState.from_registry(reg).run_id


class TestRunStatus:
    def test_idle(self):
        assert SessionState.from_registry(StepRegistry()).run_status == "idle"

    def test_gates(self):
        state = SessionState.from_registry(StepRegistry())
        state.hitl_stage = HitlStage.INITIAL_APPROVAL
        assert state.run_status == "awaiting-initial-approval"
        state.hitl_stage = HitlStage.FINAL_REVIEW
        assert state.run_status == "awaiting-review"

    def test_running_failed_completed(self):
        state = SessionState.from_registry(StepRegistry())
        state.is_processing = True
        assert state.run_status == "running"
        state.steps[3].status = "failed"
        state.is_processing = False
        assert state.run_status == "failed"
        state.steps[3].status = "completed"
        state.finished_at = datetime.now(timezone.utc)
        assert state.run_status == "completed"


class TestViews:
    def test_current_step_and_progress(self):
        state = SessionState.from_registry(StepRegistry())
        assert state.current_step.id == "original-text"
        state.steps[0].result = "x"
        state.steps[0].status = "completed"
        state.steps[1].result = "y"
        state.steps[1].status = "waiting"
        assert state.completed_count == 1
        assert state.progress == 2 / 15
        state.cursor = 15
        assert state.current_step is None

    def test_step_by_id(self):
        state = SessionState.from_registry(StepRegistry())
        assert state.step_by_id("sermon-writer").agent_name == "Sermon Script Writer"
        assert state.step_by_id("nope") is None
