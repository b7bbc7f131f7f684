# src/pipeline/context.py — v1
"""Accumulated context: prior step results handed to the next agent."""

from __future__ import annotations

from typing import Sequence

from sermonflow.core.models import StepRuntime


def format_block(step: StepRuntime) -> str:
    return f"[{step.agent_name}]\n{step.result}"


def build_accumulated_context(steps: Sequence[StepRuntime], cursor: int) -> str:
    """Labeled results of every step before ``cursor``, joined by blank lines.

    Steps without a result are skipped. Recomputed on each call since a
    revision can overwrite an earlier result.
    """
    return "\n\n".join(
        format_block(step)
        for step in steps[: max(cursor, 0)]
        if step.result is not None
    )
