# src/pipeline/hitl.py — v2
"""Human-in-the-loop gates: stage enumeration and resolution rules.

A gate opens either before step 0 (initial approval) or right after a
gated step completes. It stays open until a human approves or asks for
a revision; the controller translates that decision into the index (and
feedback) the run loop resumes with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from sermonflow.pipeline.errors import GateNotOpenError, UnmappedGateError

if TYPE_CHECKING:
    from sermonflow.core.models import StepDefinition
    from sermonflow.pipeline.state import SessionState

logger = logging.getLogger(__name__)


class HitlStage(str, Enum):
    """Closed set of review stages."""

    INITIAL_APPROVAL = "HITL-1"
    RHETORIC_REVIEW = "HITL-2"
    MESSAGE_REVIEW = "HITL-3"
    OUTLINE_REVIEW = "HITL-4"
    FINAL_REVIEW = "HITL-5"


# Gated step id -> review stage opened when that step completes.
GATE_STAGE_MAP: dict[str, HitlStage] = {
    "rhetoric-analyst": HitlStage.RHETORIC_REVIEW,
    "message-synth": HitlStage.MESSAGE_REVIEW,
    "outline-architect": HitlStage.OUTLINE_REVIEW,
    "sermon-reviewer": HitlStage.FINAL_REVIEW,
}


def stage_for(step: StepDefinition, stage_map: dict[str, HitlStage] | None = None) -> HitlStage | None:
    """Return the review stage of a gated step, None for ungated or unmapped steps."""
    if not step.requires_hitl:
        return None
    return (stage_map if stage_map is not None else GATE_STAGE_MAP).get(step.id)


@dataclass(frozen=True)
class GateResolution:
    """Outcome of resolving the open gate: where and how the run resumes."""

    stage: HitlStage
    approved: bool
    resume_index: int
    feedback: str | None = None


class HitlGateController:
    """Opens and resolves gates on a SessionState.

    Holds no state of its own; every decision reads the session it is given.
    """

    def __init__(self, stage_map: dict[str, HitlStage] | None = None) -> None:
        self._stage_map = dict(stage_map) if stage_map is not None else dict(GATE_STAGE_MAP)

    @property
    def stage_map(self) -> dict[str, HitlStage]:
        return dict(self._stage_map)

    def needs_initial_approval(self, state: SessionState, index: int, feedback: str | None) -> bool:
        return (
            index == 0
            and not feedback
            and state.hitl_stage is None
            and not state.initial_approval_granted
        )

    def open_initial(self, state: SessionState) -> HitlStage:
        state.hitl_stage = HitlStage.INITIAL_APPROVAL
        state.cursor = 0
        return HitlStage.INITIAL_APPROVAL

    def open_review(self, state: SessionState, index: int) -> HitlStage:
        """Open the review gate of the gated step at ``index``."""
        runtime = state.steps[index]
        stage = stage_for(runtime.definition, self._stage_map)
        if stage is None:
            raise UnmappedGateError(f"No review stage mapped for step {runtime.id!r}")
        state.hitl_stage = stage
        state.cursor = index
        runtime.status = "waiting"
        return stage

    def resolve(self, state: SessionState, approved: bool, feedback: str | None = None) -> GateResolution:
        """Close the open gate and compute where the run resumes.

        Approval resumes at the next step, except for the initial gate,
        which resumes at step 0 itself. A revision re-runs the step at
        the cursor with the reviewer's feedback.

        Raises:
            GateNotOpenError: If no gate is open.
        """
        stage = state.hitl_stage
        if stage is None:
            raise GateNotOpenError("No review gate is open")

        state.hitl_stage = None
        state.hitl_feedback = ""

        if approved:
            if stage is HitlStage.INITIAL_APPROVAL:
                state.initial_approval_granted = True
                resume = 0
            else:
                state.steps[state.cursor].status = "completed"
                resume = state.cursor + 1
            logger.debug("Gate %s approved, resuming at %d", stage.value, resume)
            return GateResolution(stage=stage, approved=True, resume_index=resume)

        if stage is HitlStage.INITIAL_APPROVAL:
            # Revising before anything ran still authorizes step 0
            state.initial_approval_granted = True
        logger.debug("Gate %s revision requested at %d", stage.value, state.cursor)
        return GateResolution(
            stage=stage,
            approved=False,
            resume_index=state.cursor,
            feedback=feedback or "",
        )
