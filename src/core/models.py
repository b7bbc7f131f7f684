# src/core/models.py — v1
"""Core domain models: step definitions, runtime step records, log entries,
and the pipeline input collected from the user.

Shared by the registry, the orchestrator, the agent layer and exporters.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Phase = Literal["Research", "Planning", "Implementation"]
StepStatus = Literal["pending", "running", "waiting", "completed", "failed"]
LogType = Literal["info", "success", "warning", "error", "thinking", "tool", "agent"]
AnalysisLevel = Literal["standard", "deep"]


class StepDefinition(BaseModel):
    """Immutable description of one pipeline step."""

    model_config = ConfigDict(frozen=True)

    id: str
    phase: Phase
    wave: int | None = Field(default=None, ge=1)
    agent_name: str
    description: str
    requires_hitl: bool = False


class StepRuntime(BaseModel):
    """Mutable per-run record of a step: definition plus execution status."""

    definition: StepDefinition
    status: StepStatus = "pending"
    result: str | None = None
    thinking_time: str | None = None

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def agent_name(self) -> str:
        return self.definition.agent_name

    @property
    def phase(self) -> str:
        return self.definition.phase

    @property
    def requires_hitl(self) -> bool:
        return self.definition.requires_hitl


class LogEntry(BaseModel):
    """Single event in the user-facing orchestration log."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    agent: str
    message: str
    type: LogType = "info"


class PipelineInput(BaseModel):
    """Sermon settings passed unmodified to every agent invocation."""

    passage: str = "Romans 8:28-30"
    theme: str = "God's grand plan and the believer's assurance"
    audience: str = "General congregation"
    length: str = "30 minutes (approx. 4,500 characters)"
    analysis_level: AnalysisLevel = "deep"
    sermon_type: str = "Expository sermon"
