"""
Core Market Data Models

This module contains Pydantic models for raw bar data:
- RawBar: immutable daily OHLCV observation
- CandleDirection: bullish / bearish / neutral classification

RawBar does not enforce the OHLC price relationships. The CSV loader drops
rows whose high is below their low and keeps other inconsistent rows,
counting them with `has_valid_ohlc` so they show up in its warnings.
"""

import datetime as dt
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CandleDirection(str, Enum):
    """Direction of a single candle body."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"

    @classmethod
    def from_prices(cls, open_price: float, close_price: float) -> 'CandleDirection':
        """Classify a body from its open and close."""
        if close_price > open_price:
            return cls.BULLISH
        elif open_price > close_price:
            return cls.BEARISH
        return cls.NEUTRAL


class RawBar(BaseModel):
    """
    OHLCV bar for one trading period.

    Constructed once from input and immutable thereafter.
    """

    date: dt.date = Field(
        ...,
        description="Calendar date of the period"
    )
    open: float = Field(
        ...,
        description="Opening price"
    )
    high: float = Field(
        ...,
        description="Highest price"
    )
    low: float = Field(
        ...,
        description="Lowest price"
    )
    close: float = Field(
        ...,
        description="Closing price"
    )
    volume: int = Field(
        default=0,
        description="Traded volume",
        ge=0
    )

    model_config = ConfigDict(
        frozen=True,
        json_encoders={
            dt.date: lambda v: v.isoformat(),
        }
    )

    @field_validator('date', mode='before')
    @classmethod
    def validate_date(cls, v) -> dt.date:
        """Accept dates, datetimes and ISO strings; keep only the calendar date."""
        if isinstance(v, dt.datetime):
            return v.date()
        if isinstance(v, str):
            v = v.strip()
            if v.endswith('Z'):
                v = v[:-1] + '+00:00'
            return dt.datetime.fromisoformat(v).date()
        return v

    @field_validator('volume', mode='before')
    @classmethod
    def validate_volume(cls, v) -> int:
        """Volumes occasionally arrive with a fractional part; keep the integer part."""
        if isinstance(v, str):
            v = v.strip().replace(',', '')
            if '.' in v:
                v = v.split('.')[0] or '0'
            return int(v)
        if isinstance(v, float):
            return int(v)
        return v

    def has_valid_ohlc(self) -> bool:
        """Check the OHLC price relationships expected of well-formed input."""
        return (
            self.high >= self.low and
            self.high >= max(self.open, self.close) and
            self.low <= min(self.open, self.close)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary form used by CSV export and debugging."""
        return {
            'date': self.date.isoformat(),
            'open': self.open,
            'high': self.high,
            'low': self.low,
            'close': self.close,
            'volume': self.volume,
        }
