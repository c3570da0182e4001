# rates.py

"""
Per-level rate derivation.

The rate table is a pure function of an EnhancerParams record: one
EnhanceRate per level 0..max_level. The last level is absorbing, so all four
outcome probabilities there are exactly 0.

Curves are applied by repeated multiplication rather than `**` so the
floored upgrade decay and the downgrade growth follow the same order of
operations level by level.
"""

from __future__ import annotations
import numbers
from typing import List, Tuple

from data_structures import EnhancerParams, EnhanceRate

# Slack allowed when checking that a level's probabilities sum to at most 1.
SUM_TOLERANCE = 1e-9

_RATE_FIELDS = (
    "max_upgrade_rate",
    "min_upgrade_rate",
    "max_downgrade_rate",
    "halve_ratio",
    "reset_ratio",
)
_CURVE_FIELDS = ("upgrade_rate_curve", "downgrade_rate_curve")
_LEVEL_FIELDS = ("min_downgrade_level", "min_halve_level", "min_reset_level")


def validate_params(params: EnhancerParams) -> None:
    """
    Reject parameter sets that cannot produce a well-formed rate table.
    Raises TypeError for non-integer level fields, ValueError otherwise.
    """
    for name in ("max_level",) + _LEVEL_FIELDS:
        v = getattr(params, name)
        if isinstance(v, bool) or not isinstance(v, numbers.Integral):
            raise TypeError(f"{name} must be an integer, got {v!r}")

    if params.max_level < 0:
        raise ValueError(f"max_level must be >= 0, got {params.max_level}")

    for name in _LEVEL_FIELDS:
        if getattr(params, name) < 0:
            raise ValueError(f"{name} must be >= 0, got {getattr(params, name)}")

    for name in _RATE_FIELDS:
        v = float(getattr(params, name))
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"{name} must lie in [0, 1], got {v}")

    for name in _CURVE_FIELDS:
        v = float(getattr(params, name))
        if not 0.0 < v <= 1.0:
            raise ValueError(f"{name} must lie in (0, 1], got {v}")

    if params.min_upgrade_rate > params.max_upgrade_rate:
        raise ValueError("min_upgrade_rate must not exceed max_upgrade_rate")


def gen_value(params: EnhancerParams, level: int) -> float:
    return params.min_value + level * params.value_increment


def gen_upgrade_rate(params: EnhancerParams, level: int) -> float:
    if level >= params.max_level:
        return 0.0

    upgrade_rate = params.max_upgrade_rate
    for _ in range(level):
        upgrade_rate = max(params.min_upgrade_rate, upgrade_rate * params.upgrade_rate_curve)
    return upgrade_rate


def gen_downgrade_rate(params: EnhancerParams, level: int) -> float:
    if level >= params.max_level:
        return 0.0
    if level < params.min_downgrade_level:
        return 0.0

    downgrade_rate = params.max_downgrade_rate
    for _ in range(params.max_level - level - 1):
        downgrade_rate *= params.downgrade_rate_curve
    return downgrade_rate


def gen_halve_rate(params: EnhancerParams, level: int) -> float:
    if level < params.min_halve_level:
        return 0.0
    return gen_downgrade_rate(params, level) * params.halve_ratio


def gen_reset_rate(params: EnhancerParams, level: int) -> float:
    if level < params.min_reset_level:
        return 0.0
    return gen_downgrade_rate(params, level) * params.reset_ratio


def validate_rates(rates: List[EnhanceRate] | Tuple[EnhanceRate, ...]) -> None:
    """Every probability non-negative, and the four of a level sum to <= 1."""
    for rate in rates:
        probs = (rate.upgrade, rate.downgrade, rate.halve, rate.reset)
        if min(probs) < 0.0:
            raise ValueError(f"Negative outcome probability at level {rate.level}: {rate}")
        total = sum(probs)
        if total > 1.0 + SUM_TOLERANCE:
            raise ValueError(
                f"Outcome probabilities at level {rate.level} sum to {total:.6f} > 1 "
                f"(upgrade={rate.upgrade}, downgrade={rate.downgrade}, "
                f"halve={rate.halve}, reset={rate.reset})"
            )


def generate_rates(params: EnhancerParams) -> Tuple[EnhanceRate, ...]:
    """
    Build the rate table for levels 0..max_level inclusive.

    Returns an immutable tuple indexed by level. Raises on invalid
    parameters or if any level's probabilities would not fit in [0, 1].
    """
    validate_params(params)

    rates = []
    for level in range(params.max_level + 1):
        rates.append(EnhanceRate(
            level=level,
            value=gen_value(params, level),
            upgrade=gen_upgrade_rate(params, level),
            downgrade=gen_downgrade_rate(params, level),
            halve=gen_halve_rate(params, level),
            reset=gen_reset_rate(params, level),
        ))

    table = tuple(rates)
    validate_rates(table)
    return table
