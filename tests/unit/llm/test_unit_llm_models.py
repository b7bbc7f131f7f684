# tests/unit/llm/test_unit_llm_models.py — v1
"""Tests for llm/models.py — LLM interface types."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sermonflow.llm.models import LLMResponse, Message


class TestMessage:
    def test_all_roles(self):
        for role in ["user", "assistant", "system"]:
            assert Message(role=role, content="test").role == role

    def test_invalid_role(self):
        with pytest.raises(ValidationError):
            Message(role="tool", content="x")


class TestLLMResponse:
    def test_total_tokens(self):
        r = LLMResponse(content="x", input_tokens=10, output_tokens=5, model="m", provider="p")
        assert r.total_tokens == 15

    def test_defaults(self):
        r = LLMResponse(content="x", model="m", provider="p")
        assert r.latency_ms == 0
        assert r.raw_response is None
