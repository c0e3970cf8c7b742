"""
Two-Candlestick Pattern Rules

This module implements rules for patterns formed by two adjacent candles:
Engulfing and Harami, each with a generic, bullish and bearish variant.

The predicates compare body extents only and take no tolerance:
- Engulfing: the current body contains the previous one and is larger
- Harami: the current body sits inside the previous one and is smaller

Containment boundaries are inclusive; body size comparisons are strict.
"""

from abc import abstractmethod
from typing import Optional, Sequence

from ..candlestick_models import DerivedBar
from .base import PatternRule
from .pattern_config import PatternFamily


def _contains(outer: DerivedBar, inner: DerivedBar) -> bool:
    """Check that `outer`'s body covers `inner`'s body, boundaries included."""
    return (
        outer.bottom_of_body <= inner.bottom_of_body and
        outer.top_of_body >= inner.top_of_body
    )


def is_bullish_engulfing(prev: DerivedBar, curr: DerivedBar) -> bool:
    """Bearish candle followed by a larger bullish candle covering its body."""
    if not (prev.is_bearish and curr.is_bullish):
        return False
    return _contains(curr, prev) and curr.body_range > prev.body_range


def is_bearish_engulfing(prev: DerivedBar, curr: DerivedBar) -> bool:
    """Bullish candle followed by a larger bearish candle covering its body."""
    if not (prev.is_bullish and curr.is_bearish):
        return False
    return _contains(curr, prev) and curr.body_range > prev.body_range


def is_engulfing(prev: DerivedBar, curr: DerivedBar) -> bool:
    return is_bullish_engulfing(prev, curr) or is_bearish_engulfing(prev, curr)


def is_bullish_harami(prev: DerivedBar, curr: DerivedBar) -> bool:
    """Bearish candle followed by a smaller bullish candle inside its body."""
    if not (prev.is_bearish and curr.is_bullish):
        return False
    return _contains(prev, curr) and curr.body_range < prev.body_range


def is_bearish_harami(prev: DerivedBar, curr: DerivedBar) -> bool:
    """Bullish candle followed by a smaller bearish candle inside its body."""
    if not (prev.is_bullish and curr.is_bearish):
        return False
    return _contains(prev, curr) and curr.body_range < prev.body_range


def is_harami(prev: DerivedBar, curr: DerivedBar) -> bool:
    return is_bullish_harami(prev, curr) or is_bearish_harami(prev, curr)


class TwoCandleRule(PatternRule):
    """
    Base class for two-candle rules (lookback 2).

    `matches` reads `sequence[index - 1]` and `sequence[index]`.
    """

    family: PatternFamily = PatternFamily.ENGULFING
    pattern_name: str = ""

    def __init__(self):
        super().__init__(self.pattern_name, lookback=2, tolerance=0.0)

    def matches(self, sequence: Optional[Sequence[DerivedBar]], index: int) -> bool:
        if not self.has_enough_data(sequence, index):
            return False
        return self.evaluate(sequence[index - 1], sequence[index])

    @abstractmethod
    def evaluate(self, prev: DerivedBar, curr: DerivedBar) -> bool:
        """Check the pattern on an adjacent pair."""
        pass


class EngulfingRule(TwoCandleRule):
    family = PatternFamily.ENGULFING
    pattern_name = "Engulfing"

    def evaluate(self, prev: DerivedBar, curr: DerivedBar) -> bool:
        return is_engulfing(prev, curr)


class BullishEngulfingRule(TwoCandleRule):
    family = PatternFamily.ENGULFING
    pattern_name = "Engulfing (Bullish)"

    def evaluate(self, prev: DerivedBar, curr: DerivedBar) -> bool:
        return is_bullish_engulfing(prev, curr)


class BearishEngulfingRule(TwoCandleRule):
    family = PatternFamily.ENGULFING
    pattern_name = "Engulfing (Bearish)"

    def evaluate(self, prev: DerivedBar, curr: DerivedBar) -> bool:
        return is_bearish_engulfing(prev, curr)


class HaramiRule(TwoCandleRule):
    family = PatternFamily.HARAMI
    pattern_name = "Harami"

    def evaluate(self, prev: DerivedBar, curr: DerivedBar) -> bool:
        return is_harami(prev, curr)


class BullishHaramiRule(TwoCandleRule):
    family = PatternFamily.HARAMI
    pattern_name = "Harami (Bullish)"

    def evaluate(self, prev: DerivedBar, curr: DerivedBar) -> bool:
        return is_bullish_harami(prev, curr)


class BearishHaramiRule(TwoCandleRule):
    family = PatternFamily.HARAMI
    pattern_name = "Harami (Bearish)"

    def evaluate(self, prev: DerivedBar, curr: DerivedBar) -> bool:
        return is_bearish_harami(prev, curr)


TWO_CANDLE_RULES = [
    EngulfingRule,
    BullishEngulfingRule,
    BearishEngulfingRule,
    HaramiRule,
    BullishHaramiRule,
    BearishHaramiRule,
]
