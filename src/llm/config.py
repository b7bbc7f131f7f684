# src/llm/config.py — v2
"""Per-step LLM routing with cascade resolution.

Resolution order:
  1. Per-step assignment (LLM_STEP_ASSIGNMENTS={"sermon-writer": "openai:gpt-4o"})
  2. Per-phase env var (LLM_PHASE_PLANNING=anthropic:claude-sonnet-4-20250514)
  3. Default provider + model (LLM_DEFAULT_PROVIDER + LLM_DEFAULT_MODEL)
  4. Hardcoded fallback (google:gemini-3-flash-preview)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from sermonflow.config.settings import Settings
from sermonflow.core.models import StepDefinition

_FALLBACK_PROVIDER = "google"
_FALLBACK_MODEL = "gemini-3-flash-preview"


@dataclass(frozen=True)
class LLMAssignment:
    """Resolved LLM provider:model for a step."""

    provider: str
    model: str
    source: str  # "step", "phase", "default", or "fallback"

    @property
    def key(self) -> str:
        """Return 'provider:model' string."""
        return f"{self.provider}:{self.model}"


def _parse_assignment(value: str) -> tuple[str, str] | None:
    """Parse 'provider:model' string. Returns None if empty."""
    if not value or ":" not in value:
        return None
    provider, model = value.split(":", 1)
    return (provider.strip(), model.strip())


def resolve_llm(step: StepDefinition, settings: Settings) -> LLMAssignment:
    """Resolve the LLM assignment for one step.

    Args:
        step: Step definition (its id and phase drive the lookup).
        settings: Application settings.

    Returns:
        Resolved LLMAssignment with provider, model, and resolution source.
    """
    # Level 1: Per-step override
    parsed = _parse_assignment(settings.llm_step_assignments.get(step.id, ""))
    if parsed:
        return LLMAssignment(provider=parsed[0], model=parsed[1], source="step")

    # Level 2: Per-phase override
    per_phase = getattr(settings, f"llm_phase_{step.phase.lower()}", "")
    parsed = _parse_assignment(per_phase)
    if parsed:
        return LLMAssignment(provider=parsed[0], model=parsed[1], source="phase")

    # Level 3: Default
    if settings.llm_default_provider and settings.llm_default_model:
        return LLMAssignment(
            provider=settings.llm_default_provider,
            model=settings.llm_default_model,
            source="default",
        )

    # Level 4: Hardcoded fallback
    return LLMAssignment(
        provider=_FALLBACK_PROVIDER,
        model=_FALLBACK_MODEL,
        source="fallback",
    )


def resolve_all(
    steps: Iterable[StepDefinition], settings: Settings
) -> dict[str, LLMAssignment]:
    """Resolve LLM assignments for every step, keyed by step id."""
    return {step.id: resolve_llm(step, settings) for step in steps}
