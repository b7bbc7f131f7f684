# tests/unit/llm/test_unit_client_factory.py — v1
"""Tests for llm/client_factory.py — adapter creation and caching."""

from __future__ import annotations

import pytest

from sermonflow.config.settings import Settings
from sermonflow.config.steps import STEP_CATALOG
from sermonflow.llm.adapters.anthropic_adapter import AnthropicAdapter
from sermonflow.llm.adapters.google_adapter import GoogleAdapter
from sermonflow.llm.adapters.openai_adapter import OpenAIAdapter
from sermonflow.llm.client_factory import (
    LLMClientCache,
    UnsupportedProviderError,
    create_llm_client,
)

_BY_ID = {s.id: s for s in STEP_CATALOG}


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestCreateLLMClient:
    def test_google(self):
        client = create_llm_client("google", "gemini-3-flash-preview", _settings(google_api_key="g"))
        assert isinstance(client, GoogleAdapter)
        assert client.model == "gemini-3-flash-preview"
        assert client.provider_name == "google"

    def test_openai(self):
        client = create_llm_client("openai", "gpt-4o", _settings(openai_api_key="o"))
        assert isinstance(client, OpenAIAdapter)
        assert client.provider_name == "openai"

    def test_anthropic_case_insensitive(self):
        client = create_llm_client("Anthropic", "claude-sonnet-4-20250514")
        assert isinstance(client, AnthropicAdapter)
        assert client.model == "claude-sonnet-4-20250514"

    def test_unsupported(self):
        with pytest.raises(UnsupportedProviderError, match="ollama"):
            create_llm_client("ollama", "llama3")


class TestLLMClientCache:
    def test_reuses_client_per_assignment(self):
        cache = LLMClientCache(_settings())
        a = cache(_BY_ID["original-text"])
        b = cache(_BY_ID["sermon-writer"])
        assert a is b

    def test_separate_clients_for_overrides(self):
        cache = LLMClientCache(_settings(llm_step_assignments={"sermon-writer": "openai:gpt-4o"}))
        writer = cache.get_client(_BY_ID["sermon-writer"])
        other = cache.get_client(_BY_ID["original-text"])
        assert isinstance(writer, OpenAIAdapter)
        assert isinstance(other, GoogleAdapter)
        assert cache.assignment_for(_BY_ID["sermon-writer"]).source == "step"
