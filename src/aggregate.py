# aggregate.py

"""
Statistical views over finished actor histories.

All functions here only read `actor.history` and never draw randomness, so
calling them repeatedly on the same population gives identical output.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Tuple

import numpy as np


def per_level_distributions(actors: Iterable) -> Dict[int, List[int]]:
    """
    Bucket first-arrival attempt counts by level.

    Returns {level: [attempts for actor 0, actor 1, ...]}. Buckets are built
    independently, so a history shorter than its neighbours simply
    contributes to fewer levels.
    """
    output: Dict[int, List[int]] = {}
    for actor in actors:
        for level, attempts in enumerate(actor.history):
            output.setdefault(level, []).append(attempts)
    return output


def flattened_trajectory_points(actors: Iterable) -> List[Tuple[int, int]]:
    """(level, attempts) pairs, actor by actor, in level order within each actor."""
    output: List[Tuple[int, int]] = []
    for actor in actors:
        for level, attempts in enumerate(actor.history):
            output.append((level, attempts))
    return output


def boxplot_data(distributions: Dict[int, List[int]]) -> List[np.ndarray]:
    """Dense list of float arrays ordered by level, one per box."""
    return [np.asarray(distributions[level], dtype=float) for level in sorted(distributions)]


def summarize_levels(distributions: Dict[int, List[int]]) -> List[Dict[str, float]]:
    """
    Per-level summary of first-arrival attempts.

    Each row holds level, n, mean, std (ddof=1, 0 for a single sample),
    min, p50, p90, p95 and max.
    """
    rows = []
    for level in sorted(distributions):
        vals = np.asarray(distributions[level], dtype=float)
        if vals.size == 0:
            continue
        p50, p90, p95 = np.percentile(vals, [50, 90, 95])
        rows.append({
            "level": level,
            "n": int(vals.size),
            "mean": float(vals.mean()),
            "std": float(vals.std(ddof=1)) if vals.size > 1 else 0.0,
            "min": float(vals.min()),
            "p50": float(p50),
            "p90": float(p90),
            "p95": float(p95),
            "max": float(vals.max()),
        })
    return rows
