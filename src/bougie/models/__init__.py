"""
Bougie Models Package

Raw market data models consumed by the recognition engine.
"""

from .market_data import (
    CandleDirection,
    RawBar
)

__all__ = [
    "CandleDirection",
    "RawBar",
]
