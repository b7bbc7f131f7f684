# src/pipeline/event_log.py — v1
"""Append-only, user-facing event log of a run.

Entries land in the session's log list in emission order and are
mirrored to the diagnostic logger.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sermonflow.core.models import LogEntry, LogType

logger = logging.getLogger(__name__)

# Well-known attribution labels
SYSTEM = "System"
ORCHESTRATOR = "Orchestrator"
USER = "User"

_LEVELS: dict[str, int] = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "thinking": logging.DEBUG,
    "tool": logging.DEBUG,
    "agent": logging.DEBUG,
}


class EventLog:
    """Appends LogEntry records to a backing list."""

    def __init__(self, entries: list[LogEntry] | None = None) -> None:
        self._entries = entries if entries is not None else []

    def append(self, message: str, agent: str = SYSTEM, type: LogType = "info") -> LogEntry:  # noqa: A002
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc),
            agent=agent,
            message=message,
            type=type,
        )
        self._entries.append(entry)
        logger.log(
            _LEVELS.get(type, logging.INFO),
            "[%s] %s",
            agent,
            message,
            extra={"data": {"event_type": type, "agent": agent}},
        )
        return entry

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def of_type(self, type: LogType) -> list[LogEntry]:  # noqa: A002
        return [e for e in self._entries if e.type == type]
