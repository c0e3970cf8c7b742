"""
Bougie Recognition Strategies Package

Includes:
- Candle anatomy derivation
- Single- and two-candlestick pattern rules
- The recognition engine that evaluates the rule catalogue over a sequence
"""

from .candlestick_models import DerivedBar, RuleMetadata, derive_sequence
from .recognition_engine import RecognitionEngine, RecognitionResult

__all__ = [
    "DerivedBar",
    "RuleMetadata",
    "derive_sequence",
    "RecognitionEngine",
    "RecognitionResult",
]
