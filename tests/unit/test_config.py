"""
Unit tests for configuration management.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from bougie.config import Config, FlagToleranceMode, LoggingConfig, RecognitionConfig
from bougie.strategies.patterns.pattern_config import PatternFamily, PatternToleranceConfig


class TestConfig:
    """Test configuration loading and validation."""

    def test_config_loads_defaults(self) -> None:
        """Test that configuration loads with default values."""
        config = Config()

        assert config.recognition.candle_tolerance == 0.02
        assert config.recognition.doji_tolerance == 0.02
        assert config.recognition.hammer_tolerance == 0.01
        assert config.recognition.flag_tolerance_mode == FlagToleranceMode.PER_RULE
        assert config.data.data_file is None
        assert config.logging.level == "INFO"
        assert config.logging.max_size == "10MB"

    def test_config_loads_from_env(self, test_config: Config) -> None:
        """Test that configuration loads from environment variables."""
        assert test_config.recognition.candle_tolerance == 0.03
        assert test_config.recognition.doji_tolerance == 0.05
        assert test_config.recognition.hammer_tolerance == 0.02
        assert test_config.recognition.flag_tolerance_mode == FlagToleranceMode.SHARED
        assert test_config.logging.level == "DEBUG"
        assert test_config.logging.backup_count == 2

    def test_env_defaults_match_model_defaults(self, clean_env, temp_dir) -> None:
        empty_env = temp_dir / "empty.env"
        empty_env.write_text("")

        assert Config.load_from_env(str(empty_env)) == Config()

    def test_env_file_is_read(self, clean_env, temp_dir) -> None:
        env_file = temp_dir / "bougie.env"
        env_file.write_text("DATA_FILE=/tmp/bars.csv\nHAMMER_TOLERANCE=0.005\n")

        config = Config.load_from_env(str(env_file))

        assert config.data.data_file == "/tmp/bars.csv"

    def test_invalid_tolerance_rejected(self, clean_env) -> None:
        with patch.dict(os.environ, {"DOJI_TOLERANCE": "-0.1"}):
            with pytest.raises(ValidationError):
                Config.load_from_env()

    def test_invalid_mode_rejected(self, clean_env) -> None:
        with patch.dict(os.environ, {"FLAG_TOLERANCE_MODE": "sometimes"}):
            with pytest.raises(ValidationError):
                Config.load_from_env()

    def test_tolerance_table_from_config(self, test_config: Config) -> None:
        table = PatternToleranceConfig.from_recognition_config(test_config.recognition)

        assert table.doji == 0.05
        assert table.hammer == 0.02
        assert table.share_bar_flags is True
        assert table.for_family(PatternFamily.MARUBOZU) == 0.0

    def test_marubozu_tolerance_fixed(self) -> None:
        table = PatternToleranceConfig(doji=0.5, hammer=0.5)

        assert table.for_family(PatternFamily.MARUBOZU) == 0.0
        assert "marubozu" not in table.to_dict()

    def test_marubozu_env_var_ignored(self, clean_env) -> None:
        with patch.dict(os.environ, {"MARUBOZU_TOLERANCE": "0.3"}):
            config = Config.load_from_env()

        assert not hasattr(config.recognition, "marubozu_tolerance")


class TestLoggingConfig:
    """Test logging section validation."""

    def test_level_normalized(self) -> None:
        assert LoggingConfig(level=" warning ").level == "WARNING"

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_backup_count_non_negative(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(backup_count=-1)


class TestRecognitionConfig:
    """Test recognition section validation."""

    def test_tolerance_upper_bound(self) -> None:
        with pytest.raises(ValidationError):
            RecognitionConfig(hammer_tolerance=1.5)

    def test_mode_from_string(self) -> None:
        assert RecognitionConfig(flag_tolerance_mode="shared").flag_tolerance_mode == FlagToleranceMode.SHARED
