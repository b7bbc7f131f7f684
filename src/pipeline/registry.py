# src/pipeline/registry.py — v2
"""Step registry: the ordered, immutable catalog a run executes.

Built once from the declarative STEP_CATALOG (or a custom list) and
validated at construction: unique ids, and a review stage for every
gated step. Registry order is execution order.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from sermonflow.config.steps import STEP_CATALOG
from sermonflow.core.models import StepDefinition
from sermonflow.pipeline.hitl import GATE_STAGE_MAP, HitlStage

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when the step catalog is inconsistent."""


class StepRegistry:
    """Ordered collection of step definitions.

    Steps are addressed by index (run order) or by id. The registry never
    changes after construction.
    """

    def __init__(
        self,
        steps: Iterable[StepDefinition] | None = None,
        stage_map: dict[str, HitlStage] | None = None,
    ) -> None:
        self._steps: tuple[StepDefinition, ...] = tuple(STEP_CATALOG if steps is None else steps)
        self._stage_map = dict(GATE_STAGE_MAP if stage_map is None else stage_map)
        self._index: dict[str, int] = {}

        errors = self._validate()
        if errors:
            raise RegistryError("; ".join(errors))

        logger.debug(
            "Registry built with %d steps (%d gated)",
            len(self._steps),
            len(self.gated_indices),
        )

    def _validate(self) -> list[str]:
        errors: list[str] = []
        if not self._steps:
            errors.append("Registry must contain at least one step")
        for idx, step in enumerate(self._steps):
            if step.id in self._index:
                errors.append(f"Duplicate step id '{step.id}'")
                continue
            self._index[step.id] = idx
            if step.requires_hitl and step.id not in self._stage_map:
                errors.append(f"Gated step '{step.id}' has no review stage")
        return errors

    # --- Lookup ---

    @property
    def steps(self) -> tuple[StepDefinition, ...]:
        return self._steps

    @property
    def stage_map(self) -> dict[str, HitlStage]:
        return dict(self._stage_map)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[StepDefinition]:
        return iter(self._steps)

    def __getitem__(self, index: int) -> StepDefinition:
        return self._steps[index]

    def get(self, step_id: str) -> StepDefinition | None:
        """Get step by id, or None if not registered."""
        idx = self._index.get(step_id)
        return None if idx is None else self._steps[idx]

    def get_or_raise(self, step_id: str) -> StepDefinition:
        step = self.get(step_id)
        if step is None:
            raise RegistryError(f"Step '{step_id}' not found in registry")
        return step

    def index_of(self, step_id: str) -> int:
        if step_id not in self._index:
            raise RegistryError(f"Step '{step_id}' not found in registry")
        return self._index[step_id]

    def by_phase(self) -> dict[str, list[StepDefinition]]:
        """Return phase -> steps, phases in first-appearance order."""
        grouped: dict[str, list[StepDefinition]] = {}
        for step in self._steps:
            grouped.setdefault(step.phase, []).append(step)
        return grouped

    @property
    def gated_indices(self) -> list[int]:
        return [i for i, step in enumerate(self._steps) if step.requires_hitl]
