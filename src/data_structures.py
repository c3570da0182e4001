from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

# =====================
# Parameters
# =====================

@dataclass(frozen=True)
class EnhancerParams:
    """
    Parameter set that fully determines the per-level rate table.

      - value:     min_value at level 0, + value_increment per level
      - upgrade:   max_upgrade_rate at level 0, *= upgrade_rate_curve per level,
                   never below min_upgrade_rate
      - downgrade: max_downgrade_rate just below max_level,
                   *= downgrade_rate_curve for each level further down
      - halve / reset: fractions of the downgrade rate, enabled from
                   min_halve_level / min_reset_level upward
    """
    max_level: int

    value_increment: float
    min_value: float

    upgrade_rate_curve: float
    max_upgrade_rate: float
    min_upgrade_rate: float

    downgrade_rate_curve: float
    max_downgrade_rate: float
    halve_ratio: float
    reset_ratio: float
    min_downgrade_level: int
    min_halve_level: int
    min_reset_level: int

    def replace(self, **changes) -> "EnhancerParams":
        return replace(self, **changes)


def default_params() -> EnhancerParams:
    return EnhancerParams(
        max_level=10,
        value_increment=0.125,
        min_value=1.0,
        upgrade_rate_curve=0.5,
        max_upgrade_rate=1.0,
        min_upgrade_rate=0.125,
        downgrade_rate_curve=0.5,
        max_downgrade_rate=0.5,
        halve_ratio=0.25,
        reset_ratio=0.0625,
        min_downgrade_level=1,
        min_halve_level=3,
        min_reset_level=5,
    )

# =====================
# Derived rates
# =====================

@dataclass(frozen=True)
class EnhanceRate:
    """
    Outcome probabilities for one level. Whatever is left after the four
    explicit outcomes is the chance that nothing happens.
    """
    level: int
    value: float
    upgrade: float
    downgrade: float
    halve: float
    reset: float

    @property
    def no_change(self) -> float:
        return 1.0 - (self.reset + self.halve + self.downgrade + self.upgrade)

    @property
    def is_terminal(self) -> bool:
        return self.upgrade == 0.0 and self.downgrade == 0.0 and self.halve == 0.0 and self.reset == 0.0


class EnhanceResult(Enum):
    NO_CHANGE = 0
    UPGRADE = 1
    DOWNGRADE = 2
    HALVE = 3
    RESET = 4
