# src/main.py — v3
"""CLI entry point: steps, run commands.

Usage:
    sermonflow steps
    sermonflow run [--passage TEXT] [options]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from sermonflow.version import __version__

if TYPE_CHECKING:
    from sermonflow.pipeline.state import SessionState

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        _setup_logging(args.verbose)
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _with_suggestions(label: str, options: list[str]) -> str:
    """Help text listing the usual values; any free text is accepted."""
    return f"{label}, e.g. " + "; ".join(repr(o) for o in options)


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    from sermonflow.config.steps import AUDIENCE_TYPES, LENGTH_OPTIONS, SERMON_TYPES
    from sermonflow.core.models import PipelineInput

    defaults = PipelineInput()

    parser = argparse.ArgumentParser(
        prog="sermonflow",
        description=f"sermonflow v{__version__} — Multi-agent sermon research workflow",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- steps ---
    p_steps = subparsers.add_parser(
        "steps", help="List pipeline steps, review gates and LLM routing",
    )
    p_steps.set_defaults(func=_cmd_steps)

    # --- run ---
    p_run = subparsers.add_parser(
        "run", help="Run the workflow interactively in the terminal",
    )
    p_run.add_argument("--passage", default=defaults.passage, help="Scripture passage")
    p_run.add_argument("--theme", default=defaults.theme, help="Sermon theme")
    p_run.add_argument(
        "--audience", default=defaults.audience,
        help=_with_suggestions("Target audience", AUDIENCE_TYPES),
    )
    p_run.add_argument(
        "--length", default=defaults.length,
        help=_with_suggestions("Target length", LENGTH_OPTIONS),
    )
    p_run.add_argument(
        "--level", dest="analysis_level", choices=["standard", "deep"],
        default=defaults.analysis_level, help="Analysis depth (default: deep)",
    )
    p_run.add_argument(
        "--type", dest="sermon_type", default=defaults.sermon_type,
        help=_with_suggestions("Sermon type", SERMON_TYPES),
    )
    p_run.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output directory (default: OUTPUT_DIR setting)",
    )
    p_run.add_argument(
        "-y", "--auto-approve", action="store_true",
        help="Approve every review gate without prompting",
    )
    p_run.add_argument(
        "--call-log", type=Path, default=None,
        help="Write LLM call records (JSON Lines) to this path",
    )
    p_run.set_defaults(func=_cmd_run)

    return parser


async def _cmd_steps(args: argparse.Namespace) -> int:
    """Print the step registry grouped by phase and wave."""
    from sermonflow.config.settings import load_settings
    from sermonflow.llm.config import resolve_llm
    from sermonflow.pipeline.registry import StepRegistry

    settings = load_settings()
    registry = StepRegistry()
    stage_map = registry.stage_map

    index = 0
    for phase, steps in registry.by_phase().items():
        print(f"\n{phase}")
        for step in steps:
            wave = f"wave {step.wave}" if step.wave else "      "
            gate = f"  [{stage_map[step.id].value}]" if step.requires_hitl else ""
            llm = resolve_llm(step, settings).key
            print(f"  {index:2d}. {wave}  {step.agent_name:<28s} {step.id:<18s} {llm}{gate}")
            index += 1
    return 0


async def _cmd_run(args: argparse.Namespace) -> int:
    """Drive one pipeline run, prompting at each review gate."""
    from sermonflow.config.settings import load_settings
    from sermonflow.core.models import PipelineInput
    from sermonflow.pipeline.agent import LLMStepAgent
    from sermonflow.pipeline.orchestrator import PipelineOrchestrator
    from sermonflow.storage.local_writer import LocalWriter

    settings = load_settings()
    output_dir = args.output or settings.output_dir

    pipeline_input = PipelineInput(
        passage=args.passage,
        theme=args.theme,
        audience=args.audience,
        length=args.length,
        analysis_level=args.analysis_level,
        sermon_type=args.sermon_type,
    )

    agent = LLMStepAgent(settings)
    orchestrator = PipelineOrchestrator(agent, settings=settings)
    printed = 0

    def print_new_entries(state: SessionState) -> None:
        nonlocal printed
        for entry in state.logs[printed:]:
            ts = entry.timestamp.astimezone().strftime("%H:%M:%S")
            print(f"[{ts}] {entry.agent:<24s} {entry.type:<8s} {entry.message}")
        printed = len(state.logs)

    orchestrator.subscribe(print_new_entries)

    await orchestrator.start(pipeline_input)

    while True:
        state = orchestrator.snapshot()
        if state.hitl_stage is None:
            break
        if args.auto_approve:
            await orchestrator.approve()
            continue

        action = await _prompt_gate(state)
        if action == "quit":
            print("Run abandoned at review gate.")
            return 2
        if action == "approve":
            await orchestrator.approve()
        else:
            feedback = await asyncio.to_thread(input, "Revision request: ")
            await orchestrator.request_revision(feedback.strip())

    state = orchestrator.snapshot()
    if state.run_status != "completed":
        print("\nRun failed.")
        return 1

    writer = LocalWriter(output_dir)
    report_name = await orchestrator.export_full_report(writer)
    manuscript_name = await orchestrator.export_manuscript(writer)

    if args.call_log:
        agent.call_logger.save(args.call_log)

    print(f"\nRun complete:")
    print(f"  Run ID:         {state.run_id}")
    print(f"  Quality score:  {state.quality_score:.1f} / 5.0")
    print(f"  LLM calls:      {agent.call_logger.total_calls}")
    print(f"  Tokens:         {agent.call_logger.total_tokens}")
    print(f"  Report:         {Path(output_dir) / report_name}")
    print(f"  Manuscript:     {Path(output_dir) / manuscript_name}")
    return 0


async def _prompt_gate(state: SessionState) -> str:
    """Ask the reviewer what to do at the open gate."""
    step = state.current_step
    print(f"\n=== Review gate {state.hitl_stage.value} ===")
    if step is not None and step.result and step.status == "waiting":
        print(f"--- {step.agent_name} ---")
        print(step.result)
        print("---")
    while True:
        answer = await asyncio.to_thread(input, "[a]pprove, [r]evise, [q]uit: ")
        choice = answer.strip().lower()[:1]
        if choice == "a":
            return "approve"
        if choice == "r":
            return "revise"
        if choice == "q":
            return "quit"


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage from settings."""
    from sermonflow.config.settings import load_settings
    from sermonflow.logging.logger import setup_logging

    settings = load_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
