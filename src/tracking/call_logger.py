# src/tracking/call_logger.py — v2
"""LLM call logging: one record per agent invocation.

Writes LLMCallRecord entries for post-run analysis.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from sermonflow.llm.models import LLMResponse
from sermonflow.tracking.models import LLMCallRecord

logger = logging.getLogger(__name__)


class CallLogger:
    """Accumulates LLM call records during a pipeline run."""

    def __init__(self) -> None:
        self._records: list[LLMCallRecord] = []

    def record(
        self,
        agent: str,
        step: str,
        response: LLMResponse,
    ) -> LLMCallRecord:
        """Record a successful LLM call.

        Args:
            agent: Agent name (e.g. "Sermon Script Writer").
            step: Step identifier (e.g. "sermon-writer").
            response: LLM response with token usage.

        Returns:
            The recorded LLMCallRecord.
        """
        record = LLMCallRecord(
            call_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            agent=agent,
            step=step,
            provider=response.provider,
            model=response.model,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            total_tokens=response.total_tokens,
            latency_ms=response.latency_ms,
            status="success",
        )
        self._records.append(record)
        return record

    def record_failure(
        self,
        agent: str,
        step: str,
        provider: str,
        model: str,
        error: str,
        latency_ms: int = 0,
    ) -> LLMCallRecord:
        """Record a call that raised before producing a response."""
        record = LLMCallRecord(
            call_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            agent=agent,
            step=step,
            provider=provider,
            model=model,
            input_tokens=0,
            output_tokens=0,
            total_tokens=0,
            latency_ms=latency_ms,
            status="failed",
            error=error,
        )
        self._records.append(record)
        return record

    @property
    def records(self) -> list[LLMCallRecord]:
        """All recorded calls."""
        return list(self._records)

    @property
    def total_tokens(self) -> int:
        """Total tokens consumed across all calls."""
        return sum(r.total_tokens for r in self._records)

    @property
    def total_calls(self) -> int:
        """Total number of LLM calls."""
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()

    def save(self, path: Path) -> None:
        """Save all records to a JSON Lines file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            for record in self._records:
                f.write(json.dumps(record.model_dump(), default=str, ensure_ascii=False) + "\n")
        logger.info("Saved %d LLM call records to %s", len(self._records), path)
