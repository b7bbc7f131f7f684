# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests.

No external services: the full pipeline runs against MockLLMClient,
a BaseLLMClient implementation with scripted responses.
"""

from __future__ import annotations

from typing import Any

import pytest

from sermonflow.config.settings import Settings
from sermonflow.llm.base_client import BaseLLMClient
from sermonflow.llm.models import LLMResponse, Message


class MockLLMClient(BaseLLMClient):
    """Mock LLM client for integration testing without real LLM services.

    Responses are taken from the queue first, then from ``default_response``.
    A response of ``None`` in the queue raises instead of answering.
    """

    def __init__(self, default_response: str = "## Mock analysis\nNothing to report."):
        self._default_response = default_response
        self._response_queue: list[str | None] = []
        self.calls: list[dict[str, Any]] = []

    def set_responses(self, *responses: str | None) -> None:
        self._response_queue = list(responses)

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 8192,
        temperature: float = 0.7,
    ) -> LLMResponse:
        content = self._response_queue.pop(0) if self._response_queue else self._default_response
        self.calls.append({
            "messages": messages, "system": system,
            "max_tokens": max_tokens, "temperature": temperature,
        })
        if content is None:
            raise ConnectionError("mock provider unavailable")
        return LLMResponse(
            content=content, input_tokens=50, output_tokens=len(content) // 4,
            model="mock-model", provider="mock", latency_ms=10,
            raw_response={"mock": True},
        )

    @property
    def model(self) -> str:
        return "mock-model"

    @property
    def provider_name(self) -> str:
        return "mock"


@pytest.fixture
def mock_client() -> MockLLMClient:
    return MockLLMClient()


@pytest.fixture
def int_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        advance_delay_s=0,
        start_delay_s=0,
        output_dir=tmp_path / "reports",
        llm_max_tokens=1024,
    )
