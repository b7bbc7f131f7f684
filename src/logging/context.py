# src/logging/context.py — v2
"""Contextual logging support — attach run_id, agent and step to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per pipeline run.
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_agent: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "agent", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    run_id: str | None = None
    agent: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        agent=_agent.get(),
        step=_step.get(),
    )


def set_run_context(run_id: str) -> None:
    """Set run-level context (called once per pipeline start)."""
    _run_id.set(run_id)


def set_step_context(agent: str | None, step: str | None = None) -> None:
    """Set step-level context (called per step execution)."""
    _agent.set(agent)
    _step.set(step)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _agent.set(None)
    _step.set(None)
