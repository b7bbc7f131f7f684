# src/llm/adapters/google_adapter.py — v3
"""Google Gemini adapter implementing BaseLLMClient.

Uses the google-generativeai SDK. Default provider for every step.
"""

from __future__ import annotations

import time
from typing import Any

from sermonflow.llm.base_client import BaseLLMClient
from sermonflow.llm.models import LLMResponse, Message


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(self, model: str = "gemini-3-flash-preview", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 8192,
        temperature: float = 0.7,
    ) -> LLMResponse:
        import google.generativeai as genai

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(
            self._model,
            system_instruction=system,
        )

        gen_config: dict[str, Any] = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
        }

        # Convert messages to Gemini format
        contents = []
        for m in messages:
            role = "model" if m.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": m.content}]})

        t0 = time.monotonic()
        resp = await model.generate_content_async(
            contents, generation_config=gen_config,
        )
        latency = int((time.monotonic() - t0) * 1000)

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=self._extract_text(resp),
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            model=self._model,
            provider="google",
            latency_ms=latency,
            raw_response=resp,
        )

    @staticmethod
    def _extract_text(resp: Any) -> str:
        """Join the text parts of the first candidate.

        Read through the candidate parts rather than ``resp.text``, which
        raises when a candidate finishes without any part.
        """
        candidates = getattr(resp, "candidates", None) or []
        if not candidates:
            return ""
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        return "".join(getattr(p, "text", "") or "" for p in parts)

    @property
    def model(self) -> str:
        return self._model

    @property
    def provider_name(self) -> str:
        return "google"
