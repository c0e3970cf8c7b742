"""
Pytest configuration and fixtures for Bougie tests.
"""

import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Generator, List

import pytest
from unittest.mock import patch

from bougie.config import Config
from bougie.models.market_data import RawBar


BOUGIE_ENV_VARS = (
    "CANDLE_TOLERANCE",
    "DOJI_TOLERANCE",
    "HAMMER_TOLERANCE",
    "FLAG_TOLERANCE_MODE",
    "LOG_LEVEL",
    "LOG_FILE_PATH",
    "LOG_MAX_SIZE",
    "LOG_BACKUP_COUNT",
    "DATA_FILE",
)

SAMPLE_CSV = """Date,Open,High,Low,Close,Volume
2024-01-05,85,111,84,110,1800
2024-01-02,100,110,100,110,1000
2024-01-03,50,52,48,50,1200
2024-01-04,100,101,89,90,1500.0
2024-01-08,abc,101,99,100,900
2024-01-09,100,95,105,100,900
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove Bougie settings from the environment for the test's duration."""
    with patch.dict(os.environ):
        for key in BOUGIE_ENV_VARS:
            os.environ.pop(key, None)
        yield


@pytest.fixture
def mock_env_vars(clean_env) -> Generator[dict, None, None]:
    """Mock environment variables for testing."""
    test_env = {
        "CANDLE_TOLERANCE": "0.03",
        "DOJI_TOLERANCE": "0.05",
        "HAMMER_TOLERANCE": "0.02",
        "FLAG_TOLERANCE_MODE": "shared",
        "LOG_LEVEL": "debug",
        "LOG_BACKUP_COUNT": "2",
    }

    with patch.dict(os.environ, test_env, clear=False):
        yield test_env


@pytest.fixture
def test_config(mock_env_vars: dict) -> Config:
    """Create a test configuration instance."""
    return Config.load_from_env()


@pytest.fixture
def sample_csv(temp_dir: Path) -> Path:
    """
    CSV with four valid bars out of order plus two malformed rows.

    Sorted by date the valid bars are a bullish Marubozu, a neutral Doji, a
    bearish bar and a bullish bar engulfing it.
    """
    path = temp_dir / "bars.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def raw_bars() -> List[RawBar]:
    """The valid bars of `sample_csv`, in date order."""
    return [
        RawBar(date=date(2024, 1, 2), open=100, high=110, low=100, close=110, volume=1000),
        RawBar(date=date(2024, 1, 3), open=50, high=52, low=48, close=50, volume=1200),
        RawBar(date=date(2024, 1, 4), open=100, high=101, low=89, close=90, volume=1500),
        RawBar(date=date(2024, 1, 5), open=85, high=111, low=84, close=110, volume=1800),
    ]
