# src/tracking/models.py — v2
"""Tracking domain models: LLMCallRecord."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class LLMCallRecord(BaseModel):
    """Individual LLM API call log entry."""

    call_id: str
    timestamp: datetime
    agent: str
    step: str
    provider: str
    model: str
    input_tokens: int
    output_tokens: int
    total_tokens: int
    latency_ms: int
    status: Literal["success", "failed"]
    error: str | None = None
