#!/usr/bin/env python3
"""
Pattern Recognition Demo

Demonstrates the recognition engine on generated daily bars:
- Bar generation with a few hand-placed patterns
- Batch analysis over the full catalogue
- Match queries by name and marker spans
- Tolerance mode comparison

Run after installing the package:
    python examples/pattern_recognition_demo.py [count]
"""

import logging
import sys
from datetime import date, timedelta
from typing import List

from bougie.models.market_data import RawBar
from bougie.strategies.patterns.pattern_config import PatternToleranceConfig
from bougie.strategies.recognition_engine import RecognitionEngine


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class DemoDataGenerator:
    """Generate demo bars for pattern recognition."""

    @staticmethod
    def generate_bars(count: int = 30, start: date = date(2024, 1, 1)) -> List[RawBar]:
        """Generate a drifting series with a Doji, a Hammer and an Engulfing pair mixed in."""
        bars = []
        price = 100.0

        for i in range(count):
            swing = ((i * 37) % 11 - 5) / 2.0
            open_price = price
            close = price + swing
            high = max(open_price, close) + 1.0 + (i % 3) * 0.5
            low = min(open_price, close) - 1.0 - (i % 4) * 0.5

            if i % 10 == 3:
                # Doji
                close = open_price
            elif i % 10 == 6:
                # Hammer: body at the top, long lower tail
                close = open_price + 1.0
                high = close
                low = open_price - 4.0
            elif i % 10 == 8:
                # Bearish bar followed by a bullish engulfing bar
                close = open_price - 2.0
                high = open_price + 0.5
                low = close - 0.5

            if i % 10 == 9 and bars:
                prev = bars[-1]
                open_price = prev.close - 1.0
                close = prev.open + 1.0
                high = close + 0.5
                low = open_price - 0.5

            bars.append(RawBar(
                date=start + timedelta(days=i),
                open=round(open_price, 2),
                high=round(high, 2),
                low=round(low, 2),
                close=round(close, 2),
                volume=1000 + i * 10
            ))
            price = close

        return bars


def run_demo(count: int) -> None:
    bars = DemoDataGenerator.generate_bars(count)
    logger.info(f"Generated {len(bars)} bars")

    engine = RecognitionEngine()
    result = engine.analyze_raw(bars)

    print("\n📊 Matches per pattern")
    for name, hits in engine.summary().items():
        if hits:
            print(f"  {name:<28} {hits}")

    print("\n🔍 Engulfing markers")
    for first, last in engine.marker_spans_by_name("Engulfing"):
        print(f"  {bars[first].date} → {bars[last].date}")

    shared = RecognitionEngine(tolerances=PatternToleranceConfig(share_bar_flags=True))
    shared.analyze(result.candles)

    print("\n⚖️ Tolerance modes")
    for name in ("Hammer", "Inverted Hammer"):
        print(f"  {name:<16} per rule: {len(engine.matches_by_name(name))}  "
              f"shared: {len(shared.matches_by_name(name))}")


def main():
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 30

    print("\n🕯️ Candlestick Pattern Recognition Demo")
    print("=" * 50)
    run_demo(count)
    print("\n✅ Demo complete")


if __name__ == "__main__":
    main()
