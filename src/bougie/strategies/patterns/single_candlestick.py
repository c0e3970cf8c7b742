"""
Single Candlestick Pattern Rules

This module implements rules for patterns formed by one candle:
Doji, Dragonfly Doji, Gravestone Doji, Marubozu, Hammer and Inverted Hammer,
each with a generic, bullish and bearish variant.

Rules read the flags precomputed on DerivedBar. By default a rule evaluates
the bar at its own configured tolerance (re-deriving when the bar was built
at another one); with `share_bar_flags` it reads the flags exactly as the
bar carries them.
"""

from abc import abstractmethod
from typing import Optional, Sequence

from ..candlestick_models import DerivedBar
from .base import PatternRule
from .pattern_config import PatternFamily, default_tolerance


class SingleCandleRule(PatternRule):
    """
    Base class for single-candle rules (lookback 1).

    Subclasses define `family`, `pattern_name` and `evaluate`.
    """

    family: PatternFamily = PatternFamily.DOJI
    pattern_name: str = ""

    def __init__(self, tolerance: Optional[float] = None, share_bar_flags: bool = False):
        """
        Initialize single-candle rule.

        Args:
            tolerance: Approximate-equality fraction, defaults to the family value
            share_bar_flags: Read flags as computed on the bar instead of re-deriving
        """
        if tolerance is None:
            tolerance = default_tolerance(self.family)
        super().__init__(self.pattern_name, lookback=1, tolerance=tolerance)
        self.share_bar_flags = share_bar_flags

    def matches(self, sequence: Optional[Sequence[DerivedBar]], index: int) -> bool:
        if not self.has_enough_data(sequence, index):
            return False
        return self.evaluate(self.candle_for(sequence[index]))

    def candle_for(self, candle: DerivedBar) -> DerivedBar:
        """Bar whose flags this rule reads."""
        if self.share_bar_flags:
            return candle
        return candle.at_tolerance(self.tolerance)

    @abstractmethod
    def evaluate(self, candle: DerivedBar) -> bool:
        """Check the pattern on a single derived bar."""
        pass


# Doji

class DojiRule(SingleCandleRule):
    """Open and close approximately equal on a bar with range."""

    family = PatternFamily.DOJI
    pattern_name = "Doji"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_doji


class BullishDojiRule(SingleCandleRule):
    family = PatternFamily.DOJI
    pattern_name = "Doji (Bullish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_doji and candle.is_bullish


class BearishDojiRule(SingleCandleRule):
    family = PatternFamily.DOJI
    pattern_name = "Doji (Bearish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_doji and candle.is_bearish


# Dragonfly Doji

class DragonflyDojiRule(SingleCandleRule):
    """Doji whose body sits at the high, leaving a long lower tail."""

    family = PatternFamily.DRAGONFLY_DOJI
    pattern_name = "Dragonfly Doji"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_dragonfly_doji


class BullishDragonflyDojiRule(SingleCandleRule):
    family = PatternFamily.DRAGONFLY_DOJI
    pattern_name = "Dragonfly Doji (Bullish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_dragonfly_doji and candle.is_bullish


class BearishDragonflyDojiRule(SingleCandleRule):
    family = PatternFamily.DRAGONFLY_DOJI
    pattern_name = "Dragonfly Doji (Bearish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_dragonfly_doji and candle.is_bearish


# Gravestone Doji

class GravestoneDojiRule(SingleCandleRule):
    """Doji whose body sits at the low, leaving a long upper tail."""

    family = PatternFamily.GRAVESTONE_DOJI
    pattern_name = "Gravestone Doji"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_gravestone_doji


class BullishGravestoneDojiRule(SingleCandleRule):
    family = PatternFamily.GRAVESTONE_DOJI
    pattern_name = "Gravestone Doji (Bullish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_gravestone_doji and candle.is_bullish


class BearishGravestoneDojiRule(SingleCandleRule):
    family = PatternFamily.GRAVESTONE_DOJI
    pattern_name = "Gravestone Doji (Bearish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_gravestone_doji and candle.is_bearish


# Marubozu

class MarubozuRule(SingleCandleRule):
    """
    Body spans the whole range with no tails.

    Marubozu flags use exact equality whatever tolerance the rule carries.
    """

    family = PatternFamily.MARUBOZU
    pattern_name = "Marubozu"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_marubozu


class BullishMarubozuRule(SingleCandleRule):
    family = PatternFamily.MARUBOZU
    pattern_name = "Marubozu (Bullish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_marubozu_bullish


class BearishMarubozuRule(SingleCandleRule):
    family = PatternFamily.MARUBOZU
    pattern_name = "Marubozu (Bearish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_marubozu_bearish


# Hammer

class HammerRule(SingleCandleRule):
    """
    Small body at the top of the range with a lower tail more than twice
    the body and (approximately) no upper tail.
    """

    family = PatternFamily.HAMMER
    pattern_name = "Hammer"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_hammer


class BullishHammerRule(SingleCandleRule):
    family = PatternFamily.HAMMER
    pattern_name = "Hammer (Bullish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_hammer_bullish


class BearishHammerRule(SingleCandleRule):
    family = PatternFamily.HAMMER
    pattern_name = "Hammer (Bearish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_hammer_bearish


# Inverted Hammer

class InvertedHammerRule(SingleCandleRule):
    """Mirror of the Hammer: body at the bottom, long upper tail."""

    family = PatternFamily.INVERTED_HAMMER
    pattern_name = "Inverted Hammer"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_inverted_hammer


class BullishInvertedHammerRule(SingleCandleRule):
    family = PatternFamily.INVERTED_HAMMER
    pattern_name = "Inverted Hammer (Bullish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_inverted_hammer_bullish


class BearishInvertedHammerRule(SingleCandleRule):
    family = PatternFamily.INVERTED_HAMMER
    pattern_name = "Inverted Hammer (Bearish)"

    def evaluate(self, candle: DerivedBar) -> bool:
        return candle.is_inverted_hammer_bearish


SINGLE_CANDLE_RULES = [
    DojiRule,
    BullishDojiRule,
    BearishDojiRule,
    DragonflyDojiRule,
    BullishDragonflyDojiRule,
    BearishDragonflyDojiRule,
    GravestoneDojiRule,
    BullishGravestoneDojiRule,
    BearishGravestoneDojiRule,
    MarubozuRule,
    BullishMarubozuRule,
    BearishMarubozuRule,
    HammerRule,
    BullishHammerRule,
    BearishHammerRule,
    InvertedHammerRule,
    BullishInvertedHammerRule,
    BearishInvertedHammerRule,
]
