# src/pipeline/errors.py — v1
"""Orchestrator misuse errors.

Raised synchronously by public orchestrator operations. Agent failures
never surface through these; they end the run through the event log.
"""

from __future__ import annotations


class OrchestratorError(Exception):
    """Base class for invalid orchestrator operations."""


class PipelineBusyError(OrchestratorError):
    """Raised when an operation is attempted while a step is in flight."""


class GateNotOpenError(OrchestratorError):
    """Raised when a gate resolution is requested but no gate is open."""


class GateOpenError(OrchestratorError):
    """Raised when execution is requested while a gate is still open."""


class UnmappedGateError(OrchestratorError):
    """Raised when a gated step has no review stage to open."""


class InvalidStepIndexError(OrchestratorError):
    """Raised when execution is requested at an index outside the registry."""
