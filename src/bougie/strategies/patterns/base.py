"""
Pattern Rule Base

Common interface shared by every concrete pattern rule so the recognition
engine can evaluate single- and two-candle rules interchangeably.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..candlestick_models import DerivedBar, RuleMetadata


class PatternRule(ABC):
    """
    Abstract base class for candlestick pattern rules.

    A rule is a named predicate over `(sequence, index)`. Queries that lack
    history or fall outside the sequence are non-matches, never errors.
    """

    def __init__(self, name: str, lookback: int = 1, tolerance: float = 0.0):
        """
        Initialize rule metadata.

        Args:
            name: Display name, unique within a catalogue
            lookback: Number of trailing bars examined (clamped to >= 1)
            tolerance: Approximate-equality fraction (clamped to >= 0)

        Raises:
            ValueError: Empty name
        """
        if not name or not name.strip():
            raise ValueError(f"{self.__class__.__name__} needs a non-empty pattern name")
        self._name = name
        self._lookback = max(1, lookback)
        self._tolerance = max(0.0, tolerance)

    @property
    def name(self) -> str:
        return self._name

    @property
    def lookback(self) -> int:
        return self._lookback

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @property
    def metadata(self) -> RuleMetadata:
        """Read-only metadata view."""
        return RuleMetadata(name=self._name, lookback=self._lookback, tolerance=self._tolerance)

    @abstractmethod
    def matches(self, sequence: Optional[Sequence[DerivedBar]], index: int) -> bool:
        """
        Check whether the pattern completes at `index`.

        Args:
            sequence: Chronologically ordered derived bars
            index: Position of the last bar of the pattern

        Returns:
            True if the pattern is present
        """
        pass

    def has_enough_data(self, sequence: Optional[Sequence[DerivedBar]], index: int) -> bool:
        """Check that `index` is inside the sequence with `lookback - 1` bars before it."""
        if not sequence:
            return False
        return self._lookback - 1 <= index < len(sequence)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self._name!r}, lookback={self._lookback}, tolerance={self._tolerance})"

    def __str__(self) -> str:
        return self._name
