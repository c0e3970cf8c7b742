"""
Candlestick Recognition Engine

Evaluates a fixed, ordered catalogue of pattern rules over a sequence of
derived bars and keeps the match indices of the latest run.

Each call to `analyze` produces a new immutable RecognitionResult that
replaces the previous one. Before any analysis the engine holds an empty
result, so every query returns an empty list.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.market_data import CandleDirection, RawBar
from .candlestick_models import DEFAULT_TOLERANCE, DerivedBar, RuleMetadata, derive_sequence
from .patterns.base import PatternRule
from .patterns.multi_candlestick import TWO_CANDLE_RULES
from .patterns.pattern_config import DEFAULT_TOLERANCES, PatternToleranceConfig
from .patterns.single_candlestick import SINGLE_CANDLE_RULES, SingleCandleRule


logger = logging.getLogger(__name__)


def build_default_rules(tolerances: Optional[PatternToleranceConfig] = None) -> List[PatternRule]:
    """
    Build the standard 24-rule catalogue in display order.

    Args:
        tolerances: Per-family tolerance table, defaults to the built-in values

    Returns:
        Ordered list of rule instances
    """
    tolerances = tolerances or DEFAULT_TOLERANCES
    rules: List[PatternRule] = []

    for rule_class in SINGLE_CANDLE_RULES:
        rules.append(rule_class(
            tolerance=tolerances.for_family(rule_class.family),
            share_bar_flags=tolerances.share_bar_flags,
        ))

    for rule_class in TWO_CANDLE_RULES:
        rules.append(rule_class())

    return rules


@dataclass(frozen=True)
class RecognitionResult:
    """
    Immutable snapshot of one analysis run.

    `matches[k]` holds the ascending match indices of rule `k` into
    `candles`.
    """

    rules: Tuple[RuleMetadata, ...]
    candles: Tuple[DerivedBar, ...] = ()
    matches: Tuple[Tuple[int, ...], ...] = ()
    is_analyzed: bool = True
    _name_index: Dict[str, int] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        # First rule wins when names collide
        index: Dict[str, int] = {}
        for ordinal, rule in enumerate(self.rules):
            index.setdefault(rule.name.lower(), ordinal)
        object.__setattr__(self, '_name_index', index)

    @classmethod
    def empty(cls, rules: Sequence[RuleMetadata]) -> 'RecognitionResult':
        """Result of an engine that has not analyzed anything yet."""
        return cls(
            rules=tuple(rules),
            candles=(),
            matches=tuple(() for _ in rules),
            is_analyzed=False,
        )

    def ordinal_of(self, name: Optional[str]) -> Optional[int]:
        """Case-insensitive rule lookup."""
        if not name:
            return None
        return self._name_index.get(name.lower())

    def matches_for(self, ordinal: int) -> List[int]:
        if ordinal < 0 or ordinal >= len(self.matches):
            return []
        return list(self.matches[ordinal])

    def candle_at(self, index: int) -> Optional[DerivedBar]:
        if index < 0 or index >= len(self.candles):
            return None
        return self.candles[index]

    @property
    def total_matches(self) -> int:
        return sum(len(hits) for hits in self.matches)


class RecognitionEngine:
    """
    Runs the rule catalogue over derived bar sequences.

    The catalogue order is fixed at construction; rule ordinals used by
    `matches_by_index` refer to positions in that order.
    """

    def __init__(
        self,
        rules: Optional[Iterable[PatternRule]] = None,
        tolerances: Optional[PatternToleranceConfig] = None,
        candle_tolerance: float = DEFAULT_TOLERANCE
    ):
        """
        Initialize engine with a rule catalogue.

        Args:
            rules: Ordered rules, defaults to the standard catalogue
            tolerances: Tolerance table used when building the standard catalogue
            candle_tolerance: Tolerance used by `analyze_raw` to derive bars
        """
        if rules is None:
            rules = build_default_rules(tolerances)
        self._rules: List[PatternRule] = list(rules)
        self.candle_tolerance = max(0.0, candle_tolerance)
        self._result = RecognitionResult.empty([rule.metadata for rule in self._rules])

    @classmethod
    def from_config(cls, config) -> 'RecognitionEngine':
        """Build an engine from the application Config."""
        recognition = config.recognition
        return cls(
            tolerances=PatternToleranceConfig.from_recognition_config(recognition),
            candle_tolerance=recognition.candle_tolerance,
        )

    @property
    def rules(self) -> List[PatternRule]:
        return list(self._rules)

    @property
    def result(self) -> RecognitionResult:
        """Snapshot of the latest analysis."""
        return self._result

    @property
    def is_analyzed(self) -> bool:
        return self._result.is_analyzed

    def analyze(self, sequence: Optional[Sequence[DerivedBar]]) -> RecognitionResult:
        """
        Evaluate every rule at every valid index of `sequence`.

        Args:
            sequence: Chronologically ordered derived bars (None treated as empty)

        Returns:
            The new result, which also replaces the engine's stored result
        """
        candles = tuple(sequence) if sequence else ()
        views = self._tolerance_views(candles)

        matches = []
        for rule in self._rules:
            source = views.get(self._view_key(rule), candles)
            hits = tuple(
                index for index in range(rule.lookback - 1, len(source))
                if rule.matches(source, index)
            )
            matches.append(hits)
            logger.debug(f"{rule.name}: {len(hits)} matches")

        self._result = RecognitionResult(
            rules=tuple(rule.metadata for rule in self._rules),
            candles=candles,
            matches=tuple(matches),
        )

        logger.info(
            f"Analyzed {len(candles)} bars with {len(self._rules)} rules: "
            f"{self._result.total_matches} matches"
        )
        return self._result

    def analyze_raw(self, bars: Optional[Iterable[RawBar]]) -> RecognitionResult:
        """Derive raw bars at the engine's candle tolerance, then analyze them."""
        return self.analyze(derive_sequence(bars, self.candle_tolerance))

    def matches_by_index(self, ordinal: int) -> List[int]:
        """Match indices of the rule at `ordinal`; empty when out of range."""
        return self._result.matches_for(ordinal)

    def matches_by_name(self, name: Optional[str]) -> List[int]:
        """Match indices of the named rule (case-insensitive); empty when unknown."""
        ordinal = self._result.ordinal_of(name)
        if ordinal is None:
            return []
        return self._result.matches_for(ordinal)

    def rule_catalogue(self) -> List[RuleMetadata]:
        """Metadata of all rules in catalogue order."""
        return [rule.metadata for rule in self._rules]

    def derived_at(self, index: int) -> Optional[DerivedBar]:
        """Bar at `index` of the last analyzed sequence, or None."""
        return self._result.candle_at(index)

    def marker_spans(self, ordinal: int) -> List[Tuple[int, int]]:
        """
        Bar index spans an annotation layer should mark for a rule.

        Single-candle matches span `(i, i)`; two-candle matches `(i - 1, i)`.
        """
        if ordinal < 0 or ordinal >= len(self._rules):
            return []
        lookback = self._rules[ordinal].lookback
        return [(index - lookback + 1, index) for index in self.matches_by_index(ordinal)]

    def marker_spans_by_name(self, name: Optional[str]) -> List[Tuple[int, int]]:
        ordinal = self._result.ordinal_of(name)
        if ordinal is None:
            return []
        return self.marker_spans(ordinal)

    def summary(self) -> Dict[str, int]:
        """Match count per rule name, in catalogue order."""
        return {
            rule.name: len(self._result.matches_for(ordinal))
            for ordinal, rule in enumerate(self._rules)
        }

    def dump_candles(self) -> None:
        """Log every analyzed bar's anatomy and flags at DEBUG level."""
        if not logger.isEnabledFor(logging.DEBUG):
            return

        if not self._result.candles:
            logger.debug("No derived candlesticks to dump")
            return

        logger.debug(f"Derived candlesticks: {len(self._result.candles)}")
        for index, candle in enumerate(self._result.candles):
            logger.debug(f"[{index}] {candle.describe()}")

    def _view_key(self, rule: PatternRule) -> Optional[float]:
        if isinstance(rule, SingleCandleRule) and not rule.share_bar_flags:
            return rule.tolerance
        return None

    def _tolerance_views(self, candles: Tuple[DerivedBar, ...]) -> Dict[float, Tuple[DerivedBar, ...]]:
        """Derive the sequence once per distinct rule tolerance."""
        views: Dict[float, Tuple[DerivedBar, ...]] = {}
        if not candles:
            return views

        for rule in self._rules:
            key = self._view_key(rule)
            if key is None or key in views:
                continue
            views[key] = tuple(candle.at_tolerance(key) for candle in candles)

        return views


def match_sentiment(rule_name: str, candle: Optional[DerivedBar]) -> CandleDirection:
    """
    Direction an annotation for a match should convey.

    Directional rule names decide on their own; generic rules fall back to
    the direction of the bar that completes the pattern.
    """
    lowered = rule_name.lower()
    if "bullish" in lowered:
        return CandleDirection.BULLISH
    if "bearish" in lowered:
        return CandleDirection.BEARISH
    if candle is None:
        return CandleDirection.NEUTRAL
    return candle.direction
