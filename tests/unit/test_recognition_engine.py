"""
Unit tests for the recognition engine.

Tests catalogue order, batch analysis, query API, snapshot behaviour and
the two flag tolerance modes.
"""

import dataclasses
from datetime import date, timedelta
from typing import List
from unittest.mock import patch

import pytest

from bougie.config import Config, FlagToleranceMode, RecognitionConfig
from bougie.models.market_data import CandleDirection, RawBar
from bougie.strategies.candlestick_models import DerivedBar, RuleMetadata, derive_sequence
from bougie.strategies.patterns.multi_candlestick import EngulfingRule
from bougie.strategies.patterns.pattern_config import PatternToleranceConfig
from bougie.strategies.patterns.single_candlestick import DojiRule, HammerRule
from bougie.strategies.recognition_engine import (
    RecognitionEngine,
    RecognitionResult,
    build_default_rules,
    match_sentiment,
)


CATALOGUE = [
    "Doji", "Doji (Bullish)", "Doji (Bearish)",
    "Dragonfly Doji", "Dragonfly Doji (Bullish)", "Dragonfly Doji (Bearish)",
    "Gravestone Doji", "Gravestone Doji (Bullish)", "Gravestone Doji (Bearish)",
    "Marubozu", "Marubozu (Bullish)", "Marubozu (Bearish)",
    "Hammer", "Hammer (Bullish)", "Hammer (Bearish)",
    "Inverted Hammer", "Inverted Hammer (Bullish)", "Inverted Hammer (Bearish)",
    "Engulfing", "Engulfing (Bullish)", "Engulfing (Bearish)",
    "Harami", "Harami (Bullish)", "Harami (Bearish)",
]


def create_sequence(prices: List[tuple], tolerance: float = 0.02) -> List[DerivedBar]:
    """Create consecutive daily derived bars from (open, high, low, close) tuples."""
    start = date(2024, 1, 1)
    raws = [
        RawBar(date=start + timedelta(days=offset), open=o, high=h, low=l, close=c, volume=100)
        for offset, (o, h, l, c) in enumerate(prices)
    ]
    return derive_sequence(raws, tolerance)


MIXED_PRICES = [
    (100, 110, 100, 110),   # bullish marubozu
    (50, 52, 48, 50),       # doji
    (100, 101, 89, 90),     # bearish
    (85, 111, 84, 110),     # bullish engulfing
    (108, 110, 100, 110),   # bullish hammer
    (80, 121, 79, 120),     # bullish
    (105, 106, 94, 95),     # bearish harami
    (100, 110, 98, 98),     # bearish inverted hammer
    (100, 100, 100, 100),   # zero range
]


class TestCatalogue:
    """Test the default rule catalogue."""

    def setup_method(self):
        self.engine = RecognitionEngine()

    def test_catalogue_order(self):
        catalogue = self.engine.rule_catalogue()

        assert len(catalogue) == 24
        assert [rule.name for rule in catalogue] == CATALOGUE
        assert all(isinstance(rule, RuleMetadata) for rule in catalogue)

    def test_catalogue_tolerances(self):
        tolerances = {rule.name: rule.tolerance for rule in self.engine.rule_catalogue()}

        assert tolerances["Doji"] == 0.02
        assert tolerances["Gravestone Doji (Bearish)"] == 0.02
        assert tolerances["Marubozu (Bullish)"] == 0.0
        assert tolerances["Hammer"] == 0.01
        assert tolerances["Inverted Hammer (Bearish)"] == 0.01
        assert tolerances["Harami"] == 0.0

    def test_catalogue_lookbacks(self):
        lookbacks = [rule.lookback for rule in self.engine.rule_catalogue()]
        assert lookbacks == [1] * 18 + [2] * 6

    def test_build_default_rules_with_custom_table(self):
        rules = build_default_rules(PatternToleranceConfig(doji=0.1, hammer=0.05, share_bar_flags=True))

        assert rules[0].tolerance == 0.1
        assert rules[12].tolerance == 0.05
        assert rules[0].share_bar_flags
        assert rules[18].tolerance == 0.0

    def test_custom_rules(self):
        engine = RecognitionEngine(rules=[DojiRule(), EngulfingRule()])
        assert [rule.name for rule in engine.rule_catalogue()] == ["Doji", "Engulfing"]


class TestEmptyState:
    """Test queries before and after analyzing nothing."""

    def test_before_analysis(self):
        engine = RecognitionEngine()

        assert not engine.is_analyzed
        assert engine.matches_by_index(0) == []
        assert engine.matches_by_name("Doji") == []
        assert engine.derived_at(0) is None
        assert engine.marker_spans(0) == []
        assert set(engine.summary().values()) == {0}

    def test_analyze_empty_sequence(self):
        engine = RecognitionEngine()
        result = engine.analyze([])

        assert engine.is_analyzed
        assert result.is_analyzed
        for ordinal in range(24):
            assert engine.matches_by_index(ordinal) == []
        assert engine.derived_at(0) is None

    def test_analyze_none(self):
        engine = RecognitionEngine()
        engine.analyze(None)

        assert engine.is_analyzed
        assert all(not engine.matches_by_index(k) for k in range(24))

    def test_empty_result(self):
        result = RecognitionResult.empty([RuleMetadata(name="Doji", lookback=1, tolerance=0.02)])

        assert not result.is_analyzed
        assert result.matches == ((),)
        assert result.total_matches == 0


class TestAnalyze:
    """Test batch analysis and the query API."""

    def setup_method(self):
        self.engine = RecognitionEngine()
        self.sequence = create_sequence(MIXED_PRICES)
        self.engine.analyze(self.sequence)

    def test_expected_matches(self):
        assert self.engine.matches_by_name("Doji") == [1]
        assert self.engine.matches_by_name("Marubozu (Bullish)") == [0]
        assert self.engine.matches_by_name("Marubozu") == [0]
        assert self.engine.matches_by_name("Engulfing (Bullish)") == [3]
        assert self.engine.matches_by_name("Engulfing") == [3]
        assert self.engine.matches_by_name("Hammer (Bullish)") == [4]
        assert self.engine.matches_by_name("Harami (Bearish)") == [6]
        assert self.engine.matches_by_name("Inverted Hammer (Bearish)") == [7]
        assert self.engine.matches_by_name("Engulfing (Bearish)") == []

    def test_zero_range_bar_matches_nothing(self):
        last = len(self.sequence) - 1

        for ordinal in range(24):
            assert last not in self.engine.matches_by_index(ordinal)

    def test_name_lookup_is_case_insensitive(self):
        assert self.engine.matches_by_name("engulfing (BULLISH)") == [3]
        assert self.engine.matches_by_name("DOJI") == [1]

    def test_unknown_names(self):
        assert self.engine.matches_by_name("Morning Star") == []
        assert self.engine.matches_by_name("") == []
        assert self.engine.matches_by_name(None) == []

    def test_out_of_range_ordinals(self):
        assert self.engine.matches_by_index(-1) == []
        assert self.engine.matches_by_index(24) == []

    def test_matches_by_index_matches_by_name(self):
        for ordinal, name in enumerate(CATALOGUE):
            assert self.engine.matches_by_index(ordinal) == self.engine.matches_by_name(name)

    def test_indices_ascending_and_in_bounds(self):
        for ordinal, rule in enumerate(self.engine.rule_catalogue()):
            hits = self.engine.matches_by_index(ordinal)
            assert hits == sorted(set(hits))
            for index in hits:
                assert rule.lookback - 1 <= index < len(self.sequence)

    def test_derived_at(self):
        assert self.engine.derived_at(0) == self.sequence[0]
        assert self.engine.derived_at(len(self.sequence)) is None
        assert self.engine.derived_at(-1) is None

    def test_idempotent(self):
        first = self.engine.result
        second = self.engine.analyze(self.sequence)

        assert first == second
        assert [self.engine.matches_by_index(k) for k in range(24)] == [
            list(hits) for hits in first.matches
        ]

    def test_reanalysis_discards_previous_results(self):
        previous = self.engine.result
        self.engine.analyze(self.sequence[:2])

        assert self.engine.matches_by_name("Engulfing") == []
        assert self.engine.matches_by_name("Doji") == [1]
        assert previous.matches_for(previous.ordinal_of("Engulfing")) == [3]

    def test_caller_mutation_does_not_leak(self):
        sequence = list(self.sequence)
        self.engine.analyze(sequence)
        sequence.clear()

        assert self.engine.derived_at(0) is not None
        assert self.engine.matches_by_name("Doji") == [1]

    def test_snapshot_is_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            self.engine.result.matches = ()

    def test_summary(self):
        summary = self.engine.summary()

        assert list(summary) == CATALOGUE
        assert summary["Engulfing"] == 1
        assert summary["Gravestone Doji"] == 0
        assert self.engine.result.total_matches == sum(summary.values())


class TestMarkerSpans:
    """Test annotation spans derived from matches."""

    def setup_method(self):
        self.engine = RecognitionEngine()
        self.engine.analyze(create_sequence(MIXED_PRICES))

    def test_single_candle_span(self):
        assert self.engine.marker_spans_by_name("Doji") == [(1, 1)]

    def test_two_candle_span(self):
        assert self.engine.marker_spans_by_name("Engulfing (Bullish)") == [(2, 3)]
        assert self.engine.marker_spans(CATALOGUE.index("Harami")) == [(5, 6)]

    def test_unknown_spans(self):
        assert self.engine.marker_spans(-1) == []
        assert self.engine.marker_spans(99) == []
        assert self.engine.marker_spans_by_name("nope") == []


class TestFlagToleranceModes:
    """Test per-rule versus shared flag evaluation."""

    def setup_method(self):
        # Upper tail of 0.15 on a 10.15 range: a Hammer at 2%, not at 1%
        self.sequence = create_sequence([(108, 110.15, 100, 110)], tolerance=0.02)

    def test_per_rule_mode_uses_rule_tolerance(self):
        engine = RecognitionEngine()
        engine.analyze(self.sequence)

        assert self.sequence[0].is_hammer
        assert engine.matches_by_name("Hammer") == []

    def test_shared_mode_reads_bar_flags(self):
        engine = RecognitionEngine(tolerances=PatternToleranceConfig(share_bar_flags=True))
        engine.analyze(self.sequence)

        assert engine.matches_by_name("Hammer") == [0]
        assert engine.matches_by_name("Hammer (Bullish)") == [0]

    def test_stored_candles_keep_their_tolerance(self):
        engine = RecognitionEngine()
        engine.analyze(self.sequence)

        assert engine.derived_at(0).tolerance == 0.02

    def test_from_config(self):
        config = Config(recognition=RecognitionConfig(
            flag_tolerance_mode=FlagToleranceMode.SHARED,
            candle_tolerance=0.05,
            doji_tolerance=0.1
        ))
        engine = RecognitionEngine.from_config(config)

        assert engine.candle_tolerance == 0.05
        assert engine.rule_catalogue()[0].tolerance == 0.1
        assert all(rule.share_bar_flags for rule in engine.rules[:18])


class TestAnalyzeRaw:
    """Test analysis straight from raw bars."""

    def test_analyze_raw(self, raw_bars):
        engine = RecognitionEngine(candle_tolerance=0.03)
        result = engine.analyze_raw(raw_bars)

        assert len(result.candles) == 4
        assert engine.derived_at(0).tolerance == 0.03
        assert engine.matches_by_name("Engulfing (Bullish)") == [3]
        assert engine.matches_by_name("Marubozu") == [0]

    def test_analyze_raw_none(self):
        engine = RecognitionEngine()
        result = engine.analyze_raw(None)

        assert result.is_analyzed
        assert result.candles == ()


class TestDumpCandles:
    """Test the debug anatomy dump."""

    def test_dump_logs_each_bar(self):
        engine = RecognitionEngine()
        engine.analyze(create_sequence(MIXED_PRICES[:3]))

        with patch("bougie.strategies.recognition_engine.logger") as mock_logger:
            mock_logger.isEnabledFor.return_value = True
            engine.dump_candles()

        assert mock_logger.debug.call_count == 4
        assert "[2]" in mock_logger.debug.call_args_list[-1][0][0]

    def test_dump_skipped_without_debug(self):
        engine = RecognitionEngine()
        engine.analyze(create_sequence(MIXED_PRICES[:3]))

        with patch("bougie.strategies.recognition_engine.logger") as mock_logger:
            mock_logger.isEnabledFor.return_value = False
            engine.dump_candles()

        mock_logger.debug.assert_not_called()


class TestMatchSentiment:
    """Test annotation sentiment for matches."""

    def test_directional_names_decide(self):
        bearish_bar = create_sequence([(110, 111, 99, 100)])[0]

        assert match_sentiment("Engulfing (Bullish)", bearish_bar) == CandleDirection.BULLISH
        assert match_sentiment("Harami (Bearish)", None) == CandleDirection.BEARISH

    def test_generic_names_follow_candle(self):
        bearish_bar = create_sequence([(110, 111, 99, 100)])[0]

        assert match_sentiment("Engulfing", bearish_bar) == CandleDirection.BEARISH
        assert match_sentiment("Doji", None) == CandleDirection.NEUTRAL
