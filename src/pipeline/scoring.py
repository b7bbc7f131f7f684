# src/pipeline/scoring.py — v1
"""Quality score recorded when a run completes.

The score is a bounded pseudo-random placeholder. It does not evaluate
the sermon reviewer's output.
"""

from __future__ import annotations

import random

DEFAULT_SCORE_MIN = 4.5
DEFAULT_SCORE_MAX = 5.0


def placeholder_quality_score(
    rng: random.Random | None = None,
    low: float = DEFAULT_SCORE_MIN,
    high: float = DEFAULT_SCORE_MAX,
) -> float:
    """Uniform value in [low, high], rounded to one decimal.

    Args:
        rng: Random source; pass a seeded instance for reproducible runs.
        low: Lower bound.
        high: Upper bound.
    """
    if low > high:
        raise ValueError(f"low ({low}) must be <= high ({high})")
    source = rng if rng is not None else random
    score = round(low + source.random() * (high - low), 1)
    # Clamp for bounds finer than one decimal
    return min(max(score, low), high)
