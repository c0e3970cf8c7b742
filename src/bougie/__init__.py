"""
Bougie: Candlestick Pattern Recognition Engine

Derives candle anatomy from OHLCV bars and classifies bar sequences into
named single- and two-candle patterns for manual chart review.
"""

__version__ = "0.1.0"
__author__ = "Bougie Team"
__description__ = "Candlestick pattern recognition engine"

# Package-level imports for convenience
from .config import Config
from .logger import get_logger

__all__ = ["Config", "get_logger", "__version__"]
