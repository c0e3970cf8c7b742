"""
Candlestick Anatomy Models

This module extends the raw bar model with the measurements and boolean
single-candle flags that pattern rules read:

- DerivedBar: RawBar plus body/tail extents, direction and pattern flags
- RuleMetadata: read-only description of a pattern rule

All "approximately equal" comparisons use an absolute allowance of
`range * tolerance` price units. A zero-range bar therefore has a zero
allowance and every approximate comparison becomes exact equality.

Built on top of:
- RawBar (from models.market_data)
- CandleDirection (from models.market_data)
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.market_data import CandleDirection, RawBar


DEFAULT_TOLERANCE = 0.02


def compute_anatomy(open_price: float, high: float, low: float, close: float,
                    tolerance: float = DEFAULT_TOLERANCE) -> Dict[str, Any]:
    """
    Compute candle anatomy and single-candle pattern flags.

    Args:
        open_price: Opening price
        high: Highest price
        low: Lowest price
        close: Closing price
        tolerance: Fraction of the range allowed for approximate equality

    Returns:
        Dictionary of derived field values keyed by DerivedBar field name
    """
    tolerance = max(0.0, tolerance)
    direction = CandleDirection.from_prices(open_price, close)
    is_bullish = direction == CandleDirection.BULLISH
    is_bearish = direction == CandleDirection.BEARISH

    bar_range = high - low
    top_of_body = max(open_price, close)
    bottom_of_body = min(open_price, close)
    body_range = abs(close - open_price)
    upper_tail = high - top_of_body
    lower_tail = bottom_of_body - low

    threshold = bar_range * tolerance
    has_range = high > low

    # Doji family
    is_doji = abs(open_price - close) <= threshold and has_range
    is_dragonfly_doji = is_doji and abs(open_price - high) <= threshold and low < high
    is_gravestone_doji = is_doji and abs(open_price - low) <= threshold and has_range

    # Marubozu family ignores tolerance entirely
    is_marubozu_bullish = open_price == low and close == high and has_range
    is_marubozu_bearish = open_price == high and close == low and has_range

    # Hammer family
    is_hammer = (
        abs(top_of_body - high) <= threshold and
        upper_tail <= threshold and
        lower_tail > 2 * body_range and
        body_range > 0
    )
    is_inverted_hammer = (
        abs(bottom_of_body - low) <= threshold and
        lower_tail <= threshold and
        upper_tail > 2 * body_range and
        body_range > 0
    )

    return {
        'tolerance': tolerance,
        'direction': direction,
        'range': bar_range,
        'top_of_body': top_of_body,
        'bottom_of_body': bottom_of_body,
        'body_range': body_range,
        'upper_tail': upper_tail,
        'lower_tail': lower_tail,
        'tolerance_threshold': threshold,
        'is_doji': is_doji,
        'is_dragonfly_doji': is_dragonfly_doji,
        'is_gravestone_doji': is_gravestone_doji,
        'is_marubozu': is_marubozu_bullish or is_marubozu_bearish,
        'is_marubozu_bullish': is_marubozu_bullish,
        'is_marubozu_bearish': is_marubozu_bearish,
        'is_hammer': is_hammer,
        'is_hammer_bullish': is_hammer and is_bullish,
        'is_hammer_bearish': is_hammer and is_bearish,
        'is_inverted_hammer': is_inverted_hammer,
        'is_inverted_hammer_bullish': is_inverted_hammer and is_bullish,
        'is_inverted_hammer_bearish': is_inverted_hammer and is_bearish,
    }


class DerivedBar(RawBar):
    """
    Raw bar extended with computed anatomy and single-candle flags.

    Every derived field is computed from the OHLC prices and `tolerance`
    when the model is constructed; values passed for derived fields are
    ignored. Instances are frozen.
    """

    tolerance: float = Field(
        default=DEFAULT_TOLERANCE,
        description="Fraction of the range allowed for approximate equality"
    )
    direction: CandleDirection = Field(default=CandleDirection.NEUTRAL)

    range: float = Field(default=0.0, description="high - low")
    top_of_body: float = Field(default=0.0, description="max(open, close)")
    bottom_of_body: float = Field(default=0.0, description="min(open, close)")
    body_range: float = Field(default=0.0, description="|close - open|")
    upper_tail: float = Field(default=0.0, description="high - top_of_body")
    lower_tail: float = Field(default=0.0, description="bottom_of_body - low")
    tolerance_threshold: float = Field(default=0.0, description="range * tolerance")

    is_doji: bool = False
    is_dragonfly_doji: bool = False
    is_gravestone_doji: bool = False
    is_marubozu: bool = False
    is_marubozu_bullish: bool = False
    is_marubozu_bearish: bool = False
    is_hammer: bool = False
    is_hammer_bullish: bool = False
    is_hammer_bearish: bool = False
    is_inverted_hammer: bool = False
    is_inverted_hammer_bullish: bool = False
    is_inverted_hammer_bearish: bool = False

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='before')
    @classmethod
    def derive_fields(cls, data: Any) -> Any:
        """Populate derived fields from the raw prices."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        try:
            anatomy = compute_anatomy(
                float(data['open']),
                float(data['high']),
                float(data['low']),
                float(data['close']),
                float(data.get('tolerance', DEFAULT_TOLERANCE)),
            )
        except (KeyError, TypeError, ValueError):
            # Missing or malformed inputs are reported by field validation
            return data
        data.update(anatomy)
        return data

    @classmethod
    def from_raw(cls, bar: RawBar, tolerance: float = DEFAULT_TOLERANCE) -> 'DerivedBar':
        """Derive anatomy for a raw bar at the given tolerance."""
        return cls(
            date=bar.date,
            open=bar.open,
            high=bar.high,
            low=bar.low,
            close=bar.close,
            volume=bar.volume,
            tolerance=tolerance,
        )

    def at_tolerance(self, tolerance: float) -> 'DerivedBar':
        """Return this bar with flags derived at another tolerance."""
        if max(0.0, tolerance) == self.tolerance:
            return self
        return DerivedBar.from_raw(self, tolerance)

    @property
    def is_bullish(self) -> bool:
        """Close above open."""
        return self.direction == CandleDirection.BULLISH

    @property
    def is_bearish(self) -> bool:
        """Open above close."""
        return self.direction == CandleDirection.BEARISH

    @property
    def is_neutral(self) -> bool:
        """Open equals close."""
        return self.direction == CandleDirection.NEUTRAL

    def describe(self) -> str:
        """Multi-line anatomy and flag dump used by debug logging and the CLI."""
        return "\n".join([
            f"{self.date.isoformat()}",
            f"    OHLC: O={self.open:.2f} H={self.high:.2f} L={self.low:.2f} C={self.close:.2f} V={self.volume}",
            f"    Anatomy: range={self.range:.4f} body={self.body_range:.4f} "
            f"upperTail={self.upper_tail:.4f} lowerTail={self.lower_tail:.4f}",
            f"             topBody={self.top_of_body:.2f} bottomBody={self.bottom_of_body:.2f}",
            f"    Direction: {self.direction.value}",
            f"    Patterns: Doji={self.is_doji} DragonflyDoji={self.is_dragonfly_doji} "
            f"GravestoneDoji={self.is_gravestone_doji}",
            f"              Marubozu={self.is_marubozu} (Bull={self.is_marubozu_bullish} "
            f"Bear={self.is_marubozu_bearish})",
            f"              Hammer={self.is_hammer} (Bull={self.is_hammer_bullish} "
            f"Bear={self.is_hammer_bearish})",
            f"              InvHammer={self.is_inverted_hammer} (Bull={self.is_inverted_hammer_bullish} "
            f"Bear={self.is_inverted_hammer_bearish})",
        ])


def derive_sequence(bars: Optional[Iterable[RawBar]],
                    tolerance: float = DEFAULT_TOLERANCE) -> List[DerivedBar]:
    """Derive every bar of a chronologically ordered sequence."""
    if bars is None:
        return []
    return [DerivedBar.from_raw(bar, tolerance) for bar in bars]


class RuleMetadata(BaseModel):
    """Read-only description of a pattern rule for presentation binding."""

    name: str = Field(..., min_length=1)
    lookback: int = Field(..., ge=1)
    tolerance: float = Field(..., ge=0.0)

    model_config = ConfigDict(frozen=True)

    @property
    def is_two_candle(self) -> bool:
        return self.lookback == 2
