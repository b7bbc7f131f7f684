# src/pipeline/state.py — v2
"""Session state of one pipeline run.

Owned and mutated only by the orchestrator (and the gate controller it
drives). Everyone else sees deep-copied snapshots.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from sermonflow.core.models import LogEntry, PipelineInput, StepRuntime
from sermonflow.pipeline.hitl import HitlStage
from sermonflow.pipeline.registry import StepRegistry

RunStatus = Literal[
    "idle",
    "awaiting-initial-approval",
    "running",
    "awaiting-review",
    "completed",
    "failed",
]


class SessionState(BaseModel):
    """Mutable run-time record: per-step status, cursor, gate and event log."""

    # === IDENTITY ===
    run_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    pipeline_input: PipelineInput = Field(default_factory=PipelineInput)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    # === STEPS ===
    steps: list[StepRuntime] = Field(default_factory=list)
    cursor: int = 0

    # === GATES ===
    hitl_stage: HitlStage | None = None
    hitl_feedback: str = ""
    initial_approval_granted: bool = False

    # === OUTCOME ===
    logs: list[LogEntry] = Field(default_factory=list)
    is_processing: bool = False
    quality_score: float = 0.0

    @classmethod
    def from_registry(
        cls,
        registry: StepRegistry,
        pipeline_input: PipelineInput | None = None,
    ) -> SessionState:
        """Fresh state: every step pending, no results, empty log, zero score."""
        return cls(
            pipeline_input=pipeline_input or PipelineInput(),
            steps=[StepRuntime(definition=step) for step in registry],
        )

    # --- Derived views ---

    @property
    def run_status(self) -> RunStatus:
        if self.hitl_stage is HitlStage.INITIAL_APPROVAL:
            return "awaiting-initial-approval"
        if self.hitl_stage is not None:
            return "awaiting-review"
        if any(s.status == "failed" for s in self.steps):
            return "failed"
        if self.is_processing:
            return "running"
        if self.finished_at is not None:
            return "completed"
        return "idle"

    @property
    def current_step(self) -> StepRuntime | None:
        if 0 <= self.cursor < len(self.steps):
            return self.steps[self.cursor]
        return None

    @property
    def completed_count(self) -> int:
        return sum(1 for s in self.steps if s.status == "completed")

    @property
    def progress(self) -> float:
        """Fraction of steps holding a result, in [0, 1]."""
        if not self.steps:
            return 0.0
        return sum(1 for s in self.steps if s.result is not None) / len(self.steps)

    def step_by_id(self, step_id: str) -> StepRuntime | None:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None
