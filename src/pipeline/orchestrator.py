# src/pipeline/orchestrator.py — v3
"""Pipeline orchestrator: the run loop and its gate-driven suspensions.

Executes steps strictly in registry order, one at a time:

  start ─► initial approval gate ─► step 0 ─► step 1 ─► ... ─► completed
                                      │          ▲
                                      ▼          │ approve / revise
                                 gated step ─► review gate

A run suspends whenever a gate opens and resumes only through
``approve`` or ``request_revision``. Any agent failure ends the run.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from datetime import datetime, timezone
from typing import Callable

from sermonflow.config.settings import Settings
from sermonflow.core.models import PipelineInput, StepRuntime
from sermonflow.logging.context import set_run_context, set_step_context
from sermonflow.pipeline.agent import AgentInvocationError, AgentRequest, BaseStepAgent
from sermonflow.pipeline.context import build_accumulated_context
from sermonflow.pipeline.errors import (
    GateNotOpenError,
    GateOpenError,
    InvalidStepIndexError,
    PipelineBusyError,
)
from sermonflow.pipeline.event_log import ORCHESTRATOR, SYSTEM, USER, EventLog
from sermonflow.pipeline.hitl import HitlGateController
from sermonflow.pipeline.registry import StepRegistry
from sermonflow.pipeline.scoring import placeholder_quality_score
from sermonflow.pipeline.state import SessionState
from sermonflow.storage import report
from sermonflow.storage.base_output_writer import BaseOutputWriter
from sermonflow.storage.local_writer import LocalWriter

logger = logging.getLogger(__name__)

Listener = Callable[[SessionState], None]

THINKING_PLACEHOLDER = "calculating..."


class PipelineOrchestrator:
    """Owns the session state of one pipeline and drives its run loop.

    Args:
        agent: Produces each step's text.
        registry: Steps to run; defaults to the full sermon catalog.
        settings: Pacing delays, timeout, score bounds, output directory.
        rng: Random source for the completion score.
    """

    def __init__(
        self,
        agent: BaseStepAgent,
        registry: StepRegistry | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._agent = agent
        self._registry = registry or StepRegistry()
        self._settings = settings or Settings()
        self._rng = rng or random.Random()
        self._hitl = HitlGateController(self._registry.stage_map)
        self._lock = asyncio.Lock()
        self._listeners: list[Listener] = []
        self._state = SessionState.from_registry(self._registry)
        self._events = EventLog(self._state.logs)

    # --- Read side ---

    @property
    def registry(self) -> StepRegistry:
        return self._registry

    @property
    def is_busy(self) -> bool:
        """True while a step (or the start sequence) is in flight."""
        return self._lock.locked()

    def snapshot(self) -> SessionState:
        """Deep copy of the current session state."""
        return self._state.model_copy(deep=True)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every state change.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.snapshot())
            except Exception:
                logger.exception("State listener %r failed", listener)

    # --- Driver operations ---

    async def start(self, pipeline_input: PipelineInput | None = None) -> None:
        """Reset the session and run until the first gate opens.

        Raises:
            PipelineBusyError: If a step is in flight.
        """
        self._ensure_idle()
        async with self._lock:
            self._state = SessionState.from_registry(
                self._registry, pipeline_input or self._state.pipeline_input
            )
            self._events = EventLog(self._state.logs)
            self._state.is_processing = True
            self._state.started_at = datetime.now(timezone.utc)
            set_run_context(self._state.run_id)
            logger.info("Starting run %s with %d steps", self._state.run_id, len(self._registry))

            self._events.append("Workflow starting. Initializing session...", SYSTEM, "info")
            self._notify()

            await asyncio.sleep(self._settings.start_delay_s)
            await self._run(0, None)

    async def advance(self, index: int, feedback: str | None = None) -> None:
        """Run from ``index`` until a gate opens, the run fails or completes.

        Raises:
            PipelineBusyError: If a step is in flight.
            GateOpenError: If a gate is open; resolve it instead.
            InvalidStepIndexError: If ``index`` lies outside ``0..len(steps)``.
        """
        self._ensure_idle()
        if not 0 <= index <= len(self._registry):
            raise InvalidStepIndexError(
                f"Step index {index} is outside 0..{len(self._registry)}"
            )
        if self._state.hitl_stage is not None:
            raise GateOpenError(
                f"Gate {self._state.hitl_stage.value} is open; approve or request a revision"
            )
        async with self._lock:
            await self._run(index, feedback)

    def set_feedback(self, text: str) -> None:
        """Stage reviewer text for the next ``request_revision``."""
        self._state.hitl_feedback = text
        self._notify()

    async def approve(self) -> None:
        """Approve the open gate and continue with the next step.

        Raises:
            PipelineBusyError: If a step is in flight.
            GateNotOpenError: If no gate is open.
        """
        self._ensure_idle()
        self._ensure_gate_open()
        async with self._lock:
            resolution = self._hitl.resolve(self._state, approved=True)
            self._events.append("User approved. Proceeding to next step.", USER, "info")
            self._notify()
            await self._run(resolution.resume_index, None)

    async def request_revision(self, feedback: str | None = None) -> None:
        """Re-run the step under review with ``feedback``.

        Without an argument the text staged by ``set_feedback`` is used.

        Raises:
            PipelineBusyError: If a step is in flight.
            GateNotOpenError: If no gate is open.
        """
        self._ensure_idle()
        self._ensure_gate_open()
        text = self._state.hitl_feedback if feedback is None else feedback
        async with self._lock:
            resolution = self._hitl.resolve(self._state, approved=False, feedback=text)
            self._events.append(f"Revision requested: {text}", USER, "warning")
            self._notify()
            await self._run(resolution.resume_index, resolution.feedback)

    def _ensure_idle(self) -> None:
        if self._lock.locked():
            raise PipelineBusyError("A step is already in flight")

    def _ensure_gate_open(self) -> None:
        if self._state.hitl_stage is None:
            raise GateNotOpenError("No review gate is open")

    # --- Run loop ---

    async def _run(self, index: int, feedback: str | None) -> None:
        state = self._state
        state.is_processing = True
        while True:
            if index >= len(state.steps):
                self._complete()
                return

            if self._hitl.needs_initial_approval(state, index, feedback):
                self._hitl.open_initial(state)
                self._events.append(
                    "User approval required before the analysis phase.", SYSTEM, "warning"
                )
                self._notify()
                return

            if not await self._execute(index, feedback):
                return

            if state.steps[index].requires_hitl:
                stage = self._hitl.open_review(state, index)
                self._events.append(f"Review checkpoint ({stage.value}) reached.", SYSTEM, "warning")
                self._notify()
                return

            index += 1
            feedback = None
            state.cursor = index
            self._notify()
            await asyncio.sleep(self._settings.advance_delay_s)

    async def _execute(self, index: int, feedback: str | None) -> bool:
        """Invoke the agent for one step. Returns False when the run failed."""
        state = self._state
        runtime = state.steps[index]
        state.cursor = index
        set_step_context(runtime.agent_name, runtime.id)

        self._events.append(f"{runtime.agent_name} running...", ORCHESTRATOR, "thinking")
        runtime.status = "running"
        runtime.thinking_time = THINKING_PLACEHOLDER
        self._notify()

        request = AgentRequest(
            step=runtime.definition,
            pipeline_input=state.pipeline_input,
            accumulated_context=build_accumulated_context(state.steps, index),
            feedback=feedback or None,
        )
        started = time.monotonic()
        try:
            result = await self._invoke(request)
        except Exception as exc:
            self._fail(runtime, exc, time.monotonic() - started)
            return False
        finally:
            set_step_context(None)

        runtime.result = result
        runtime.status = "completed"
        runtime.thinking_time = _format_elapsed(time.monotonic() - started)
        self._events.append(f"{runtime.agent_name} finished.", ORCHESTRATOR, "success")
        self._notify()
        return True

    async def _invoke(self, request: AgentRequest) -> str:
        timeout = self._settings.agent_timeout_s
        if timeout is None:
            return await self._agent.invoke(request)
        try:
            return await asyncio.wait_for(self._agent.invoke(request), timeout)
        except asyncio.TimeoutError as exc:
            raise AgentInvocationError(
                f"Agent {request.step.agent_name} timed out after {timeout:g}s"
            ) from exc

    def _fail(self, runtime: StepRuntime, exc: Exception, elapsed: float) -> None:
        if isinstance(exc, AgentInvocationError):
            reason = exc.reason
        else:
            reason = str(exc) or type(exc).__name__
        logger.debug("Step %s failed", runtime.id, exc_info=exc)

        runtime.status = "failed"
        runtime.thinking_time = _format_elapsed(elapsed)
        self._state.is_processing = False
        self._state.finished_at = datetime.now(timezone.utc)
        self._events.append(reason, runtime.agent_name, "error")
        self._notify()

    def _complete(self) -> None:
        state = self._state
        self._events.append("Pipeline completed successfully.", ORCHESTRATOR, "success")
        state.cursor = len(state.steps)
        state.is_processing = False
        state.quality_score = placeholder_quality_score(
            self._rng,
            self._settings.quality_score_min,
            self._settings.quality_score_max,
        )
        state.finished_at = datetime.now(timezone.utc)
        logger.info("Run %s completed, quality score %.1f", state.run_id, state.quality_score)
        self._notify()

    # --- Export ---

    def _writer(self, writer: BaseOutputWriter | None) -> BaseOutputWriter:
        return writer or LocalWriter(self._settings.output_dir)

    def _saved(self, filename: str) -> str:
        self._events.append(f"File saved: {filename}", SYSTEM, "success")
        self._notify()
        return filename

    async def export_full_report(self, writer: BaseOutputWriter | None = None) -> str:
        """Write the full research report and return its file name."""
        filename = await report.export_full_report(
            self._writer(writer), self._state.steps, self._state.pipeline_input
        )
        return self._saved(filename)

    async def export_step(self, step_id: str, writer: BaseOutputWriter | None = None) -> str:
        """Write one step's result and return its file name.

        Raises:
            RegistryError: If ``step_id`` is unknown.
            ExportError: If the step has no result yet.
        """
        runtime = self._state.steps[self._registry.index_of(step_id)]
        filename = await report.export_step(
            self._writer(writer), runtime, self._state.pipeline_input
        )
        return self._saved(filename)

    async def export_manuscript(self, writer: BaseOutputWriter | None = None) -> str:
        filename = await report.export_manuscript(
            self._writer(writer), self._state.steps, self._state.pipeline_input
        )
        return self._saved(filename)


def _format_elapsed(seconds: float) -> str:
    return f"{seconds:.1f}s"
