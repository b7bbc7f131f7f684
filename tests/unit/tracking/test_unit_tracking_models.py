# tests/unit/tracking/test_unit_tracking_models.py — v1
"""Tests for tracking/models.py."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from sermonflow.tracking.models import LLMCallRecord


class TestLLMCallRecord:
    def _kwargs(self, **overrides):
        values = dict(
            call_id="c1", timestamp=datetime.now(timezone.utc), agent="A", step="a",
            provider="google", model="m", input_tokens=1, output_tokens=2,
            total_tokens=3, latency_ms=4, status="success",
        )
        values.update(overrides)
        return values

    def test_create(self):
        assert LLMCallRecord(**self._kwargs()).error is None

    def test_status_restricted(self):
        with pytest.raises(ValidationError):
            LLMCallRecord(**self._kwargs(status="retry"))
