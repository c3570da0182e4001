#transitions.py

from data_structures import EnhanceRate, EnhanceResult


def roll_outcome(rate: EnhanceRate, sample: float) -> EnhanceResult:
    """
    Map one uniform sample in [0, 1) onto an outcome.

    Thresholds are cumulative and checked in the fixed order
    reset, halve, downgrade, upgrade; anything above the last
    threshold is NO_CHANGE.
    """
    if not 0.0 <= sample < 1.0:
        raise ValueError(f"sample must lie in [0, 1), got {sample}")

    threshold = rate.reset
    if sample < threshold:
        return EnhanceResult.RESET

    threshold += rate.halve
    if sample < threshold:
        return EnhanceResult.HALVE

    threshold += rate.downgrade
    if sample < threshold:
        return EnhanceResult.DOWNGRADE

    threshold += rate.upgrade
    if sample < threshold:
        return EnhanceResult.UPGRADE

    return EnhanceResult.NO_CHANGE


def apply_outcome(level: int, outcome: EnhanceResult) -> int:
    if outcome == EnhanceResult.NO_CHANGE:
        return level
    if outcome == EnhanceResult.UPGRADE:
        return level + 1
    if outcome == EnhanceResult.DOWNGRADE:
        # floor at 0
        return max(0, level - 1)
    if outcome == EnhanceResult.HALVE:
        return level // 2
    if outcome == EnhanceResult.RESET:
        return 0
    raise ValueError(f"Unknown outcome: {outcome!r}")
