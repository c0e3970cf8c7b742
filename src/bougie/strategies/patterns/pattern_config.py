"""
Pattern Recognition Configuration

This module defines the tolerance table used when building pattern rules.
All per-family tolerances are centralized here so the catalogue is built
from one explicit table instead of per-class default arguments.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional

from ...config import FlagToleranceMode


class PatternFamily(str, Enum):
    """Rule families sharing one tolerance setting."""

    DOJI = "doji"
    DRAGONFLY_DOJI = "dragonfly_doji"
    GRAVESTONE_DOJI = "gravestone_doji"
    MARUBOZU = "marubozu"
    HAMMER = "hammer"
    INVERTED_HAMMER = "inverted_hammer"
    ENGULFING = "engulfing"
    HARAMI = "harami"

    @property
    def lookback(self) -> int:
        """Number of bars a rule of this family examines."""
        if self in (PatternFamily.ENGULFING, PatternFamily.HARAMI):
            return 2
        return 1


@dataclass(frozen=True)
class PatternToleranceConfig:
    """Tolerances applied to rules when the catalogue is built."""

    doji: float = 0.02       # 2% of range
    hammer: float = 0.01     # 1% of range

    # Read flags computed at the bar's own tolerance instead of the rule's
    share_bar_flags: bool = False

    def for_family(self, family: PatternFamily) -> float:
        """Tolerance configured for a rule family."""
        if family in (PatternFamily.DOJI, PatternFamily.DRAGONFLY_DOJI, PatternFamily.GRAVESTONE_DOJI):
            return self.doji
        if family in (PatternFamily.HAMMER, PatternFamily.INVERTED_HAMMER):
            return self.hammer
        # Marubozu flags use exact equality; two-candle families compare body extents only
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_recognition_config(cls, recognition_config) -> 'PatternToleranceConfig':
        """Build from the `recognition` section of the application Config."""
        return cls(
            doji=recognition_config.doji_tolerance,
            hammer=recognition_config.hammer_tolerance,
            share_bar_flags=recognition_config.flag_tolerance_mode == FlagToleranceMode.SHARED,
        )


DEFAULT_TOLERANCES = PatternToleranceConfig()


def default_tolerance(family: PatternFamily, config: Optional[PatternToleranceConfig] = None) -> float:
    """Tolerance for a family, falling back to the built-in table."""
    return (config or DEFAULT_TOLERANCES).for_family(family)
