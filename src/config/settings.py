# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for LLM routing, orchestration pacing, output
location and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDERS ===
    llm_default_provider: str = "google"
    llm_default_model: str = "gemini-3-flash-preview"
    llm_default_temperature: float = 0.7
    llm_max_tokens: int = 8192

    # Provider API keys
    google_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Per-phase LLM assignment ("provider:model")
    llm_phase_research: str = ""
    llm_phase_planning: str = ""
    llm_phase_implementation: str = ""

    # Per-step LLM assignment (highest priority), step id -> "provider:model".
    # From the environment as JSON: LLM_STEP_ASSIGNMENTS='{"sermon-writer": "openai:gpt-4o"}'
    llm_step_assignments: dict[str, str] = Field(default_factory=dict)

    # === Orchestration ===
    advance_delay_s: float = 0.6
    start_delay_s: float = 1.0
    agent_timeout_s: float | None = None
    quality_score_min: float = 4.5
    quality_score_max: float = 5.0

    # === Output ===
    output_dir: Path = Path("./output")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("advance_delay_s", "start_delay_s")
    @classmethod
    def validate_delay(cls, v: float) -> float:  # noqa: N805
        """Pacing delays must be non-negative."""
        if v < 0:
            raise ValueError("delays must be >= 0")
        return v

    @field_validator("agent_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:  # noqa: N805
        """Timeout is either unset or strictly positive."""
        if v is not None and v <= 0:
            raise ValueError("agent_timeout_s must be > 0 when set")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.quality_score_min > self.quality_score_max:
            errors.append("QUALITY_SCORE_MIN must be <= QUALITY_SCORE_MAX")

        phase_values = {
            "LLM_PHASE_RESEARCH": self.llm_phase_research,
            "LLM_PHASE_PLANNING": self.llm_phase_planning,
            "LLM_PHASE_IMPLEMENTATION": self.llm_phase_implementation,
        }
        for name, value in phase_values.items():
            if value and not _is_assignment(value):
                errors.append(f"{name} must be 'provider:model', got {value!r}")

        for step_id, value in self.llm_step_assignments.items():
            if not _is_assignment(value):
                errors.append(
                    f"LLM_STEP_ASSIGNMENTS[{step_id}] must be 'provider:model', got {value!r}"
                )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def _is_assignment(value: str) -> bool:
    provider, sep, model = value.partition(":")
    return bool(sep and provider.strip() and model.strip())


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
