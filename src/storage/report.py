# src/storage/report.py — v1
"""Markdown export of a pipeline run: full report, single step, manuscript.

Builders are pure functions over the runtime steps and the pipeline input.
The ``export_*`` coroutines write through a BaseOutputWriter and return the
file name they wrote.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from sermonflow.config.steps import MANUSCRIPT_STEP_ID
from sermonflow.core.models import PipelineInput, StepRuntime
from sermonflow.storage.base_output_writer import BaseOutputWriter

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")


class ExportError(Exception):
    """Raised when there is nothing to export for the requested target."""


# --- File names ---


def passage_slug(passage: str) -> str:
    """Replace each run of whitespace in the passage with a single dash."""
    return _WHITESPACE_RUN.sub("-", passage)


def full_report_filename(pipeline_input: PipelineInput) -> str:
    return f"Full-Report-{passage_slug(pipeline_input.passage)}.md"


def step_filename(step: StepRuntime, pipeline_input: PipelineInput) -> str:
    return f"{step.id}-{passage_slug(pipeline_input.passage)}.md"


def manuscript_filename(pipeline_input: PipelineInput) -> str:
    return f"Sermon-Manuscript-{passage_slug(pipeline_input.passage)}.md"


# --- Builders ---


def build_full_report(steps: Sequence[StepRuntime], pipeline_input: PipelineInput) -> str:
    """Concatenate every step result into one markdown document.

    Steps without a result are left out; order follows the registry.
    """
    report = f"# Sermon Research Report: {pipeline_input.passage}\n"
    report += f"**Theme:** {pipeline_input.theme}\n"
    report += f"**Audience:** {pipeline_input.audience}\n"
    report += f"**Type:** {pipeline_input.sermon_type}\n\n"
    report += "--- \n\n"

    for step in steps:
        if step.result:
            report += f"## {step.agent_name} ({step.phase})\n"
            report += f"{step.result}\n\n"
            report += "---\n\n"
    return report


def build_step_export(step: StepRuntime) -> str:
    """Single-step export is exactly the step's result."""
    if not step.result:
        raise ExportError(f"Step {step.id!r} has no result to export")
    return step.result


def find_manuscript_step(steps: Sequence[StepRuntime]) -> StepRuntime | None:
    for step in steps:
        if step.id == MANUSCRIPT_STEP_ID:
            return step
    return None


# --- Writers ---


async def export_full_report(
    writer: BaseOutputWriter,
    steps: Sequence[StepRuntime],
    pipeline_input: PipelineInput,
) -> str:
    filename = full_report_filename(pipeline_input)
    await writer.write(filename, build_full_report(steps, pipeline_input))
    logger.info("Exported full report: %s", filename)
    return filename


async def export_step(
    writer: BaseOutputWriter,
    step: StepRuntime,
    pipeline_input: PipelineInput,
) -> str:
    content = build_step_export(step)
    filename = step_filename(step, pipeline_input)
    await writer.write(filename, content)
    logger.info("Exported step %s: %s", step.id, filename)
    return filename


async def export_manuscript(
    writer: BaseOutputWriter,
    steps: Sequence[StepRuntime],
    pipeline_input: PipelineInput,
) -> str:
    """Write the sermon manuscript; only available once its step completed."""
    step = find_manuscript_step(steps)
    if step is None or step.status != "completed" or not step.result:
        raise ExportError("Sermon manuscript is not available yet")
    filename = manuscript_filename(pipeline_input)
    await writer.write(filename, step.result)
    logger.info("Exported manuscript: %s", filename)
    return filename
