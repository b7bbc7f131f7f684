# tests/unit/llm/test_unit_config.py — v2
"""Tests for llm/config.py — per-step LLM routing cascade."""

from __future__ import annotations

from sermonflow.config.settings import Settings
from sermonflow.config.steps import STEP_CATALOG
from sermonflow.llm.config import LLMAssignment, resolve_all, resolve_llm

_BY_ID = {s.id: s for s in STEP_CATALOG}


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestResolveLLM:
    def test_default(self):
        r = resolve_llm(_BY_ID["theo-analyst"], _settings())
        assert r.key == "google:gemini-3-flash-preview"
        assert r.source == "default"

    def test_per_step_override(self):
        s = _settings(llm_step_assignments={"sermon-writer": "openai:gpt-4o"})
        r = resolve_llm(_BY_ID["sermon-writer"], s)
        assert (r.provider, r.model, r.source) == ("openai", "gpt-4o", "step")

    def test_per_phase_override(self):
        s = _settings(llm_phase_planning="anthropic:claude-sonnet-4-20250514")
        r = resolve_llm(_BY_ID["outline-architect"], s)
        assert r.provider == "anthropic"
        assert r.source == "phase"
        assert resolve_llm(_BY_ID["theo-analyst"], s).source == "default"

    def test_step_overrides_phase(self):
        s = _settings(
            llm_phase_implementation="anthropic:claude-sonnet-4-20250514",
            llm_step_assignments={"sermon-reviewer": "openai:gpt-4o"},
        )
        assert resolve_llm(_BY_ID["sermon-reviewer"], s).source == "step"
        assert resolve_llm(_BY_ID["sermon-writer"], s).source == "phase"

    def test_fallback_when_default_blank(self):
        s = _settings(llm_default_provider="", llm_default_model="")
        r = resolve_llm(_BY_ID["theo-analyst"], s)
        assert r.source == "fallback"
        assert r.key == "google:gemini-3-flash-preview"

    def test_key_format(self):
        r = LLMAssignment(provider="openai", model="gpt-4o", source="default")
        assert r.key == "openai:gpt-4o"


class TestResolveAll:
    def test_resolves_every_step(self):
        assignments = resolve_all(STEP_CATALOG, _settings())
        assert list(assignments) == [s.id for s in STEP_CATALOG]
        assert all(a.source == "default" for a in assignments.values())
