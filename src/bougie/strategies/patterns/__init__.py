"""
Candlestick Pattern Rules

Pattern Types:
- Single candlestick rules (Doji, Dragonfly/Gravestone Doji, Marubozu,
  Hammer, Inverted Hammer)
- Two-candlestick rules (Engulfing, Harami)
"""

from .base import PatternRule
from .pattern_config import PatternFamily, PatternToleranceConfig
from .single_candlestick import SingleCandleRule, SINGLE_CANDLE_RULES
from .multi_candlestick import TwoCandleRule, TWO_CANDLE_RULES

__all__ = [
    "PatternRule",
    "PatternFamily",
    "PatternToleranceConfig",
    "SingleCandleRule",
    "TwoCandleRule",
    "SINGLE_CANDLE_RULES",
    "TWO_CANDLE_RULES",
]
