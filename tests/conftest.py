# tests/conftest.py — v2
"""Shared test fixtures for all unit tests.

Provides zero-delay settings, a scripted step agent, mock LLM clients and
custom step catalogs. No network: every LLM call is mocked.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock

import pytest

from sermonflow.config.settings import Settings
from sermonflow.core.models import PipelineInput, StepDefinition
from sermonflow.llm.models import LLMResponse
from sermonflow.pipeline.agent import AgentInvocationError, AgentRequest, BaseStepAgent
from sermonflow.pipeline.hitl import HitlStage


class ScriptedAgent(BaseStepAgent):
    """Step agent returning canned text and recording every request."""

    def __init__(
        self,
        results: dict[str, str] | None = None,
        fail_on: set[str] | None = None,
    ) -> None:
        self.results = results or {}
        self.fail_on = set(fail_on or ())
        self.requests: list[AgentRequest] = []

    async def invoke(self, request: AgentRequest) -> str:
        self.requests.append(request)
        step_id = request.step.id
        if step_id in self.fail_on:
            raise AgentInvocationError(f"Agent {request.step.agent_name} execution failed: boom")
        text = self.results.get(step_id, f"result of {step_id}")
        if request.feedback:
            text += f" (revised: {request.feedback})"
        return text

    @property
    def invoked_ids(self) -> list[str]:
        return [r.step.id for r in self.requests]


# === FIXTURES: Settings / input ===


@pytest.fixture
def fast_settings(tmp_path: Path) -> Settings:
    """Settings with no pacing delays and output under tmp_path."""
    return Settings(
        _env_file=None,
        advance_delay_s=0,
        start_delay_s=0,
        output_dir=tmp_path / "output",
    )


@pytest.fixture
def sample_input() -> PipelineInput:
    return PipelineInput(
        passage="John 3:16",
        theme="God's love for the world",
        audience="Youth",
        length="20 minutes",
        analysis_level="standard",
        sermon_type="Topical sermon",
    )


# === FIXTURES: Agents / LLM ===


@pytest.fixture
def scripted_agent() -> ScriptedAgent:
    return ScriptedAgent()


@pytest.fixture
def agent_factory() -> Callable[..., ScriptedAgent]:
    """Build a ScriptedAgent with custom results or failures."""
    return ScriptedAgent


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Standard mock LLM response."""
    return LLMResponse(
        content="## Analysis\nThe passage opens with an assurance.",
        input_tokens=120,
        output_tokens=80,
        model="gemini-3-flash-preview",
        provider="google",
        latency_ms=400,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.provider_name = "google"
    client.model = "gemini-3-flash-preview"
    return client


# === FIXTURES: Custom catalogs ===


@pytest.fixture
def make_steps() -> Callable[..., list[StepDefinition]]:
    """Build ``count`` generic steps, gating the given indices."""

    def _make(count: int, gated: set[int] | frozenset[int] = frozenset()) -> list[StepDefinition]:
        return [
            StepDefinition(
                id=f"step-{i}",
                phase="Research" if i < count // 2 else "Planning",
                agent_name=f"Agent {i}",
                description=f"Generic step {i}",
                requires_hitl=i in gated,
            )
            for i in range(count)
        ]

    return _make


@pytest.fixture
def make_stage_map() -> Callable[..., dict[str, HitlStage]]:
    """Map gated generic steps onto the review stages, in order."""
    review_stages = [
        HitlStage.RHETORIC_REVIEW,
        HitlStage.MESSAGE_REVIEW,
        HitlStage.OUTLINE_REVIEW,
        HitlStage.FINAL_REVIEW,
    ]

    def _make(steps: list[StepDefinition]) -> dict[str, HitlStage]:
        gated = [s.id for s in steps if s.requires_hitl]
        return dict(zip(gated, review_stages))

    return _make


# === FIXTURES: Temp dirs ===


@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    """Temporary output directory."""
    out = tmp_path / "output"
    out.mkdir()
    return out
