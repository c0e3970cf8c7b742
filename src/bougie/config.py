"""
Configuration management for Bougie.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


class FlagToleranceMode(str, Enum):
    """How single-candle rules obtain the flags they read."""

    PER_RULE = "per_rule"  # re-derive flags at each rule's own tolerance
    SHARED = "shared"      # read flags computed once at the bar's tolerance


class RecognitionConfig(BaseModel):
    """Pattern recognition parameters."""

    candle_tolerance: float = Field(default=0.02, ge=0.0, le=1.0)
    doji_tolerance: float = Field(default=0.02, ge=0.0, le=1.0)
    hammer_tolerance: float = Field(default=0.01, ge=0.0, le=1.0)
    flag_tolerance_mode: FlagToleranceMode = Field(default=FlagToleranceMode.PER_RULE)


class DataConfig(BaseModel):
    """Bar data source configuration."""

    data_file: Optional[str] = None


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    file_path: Optional[str] = None
    max_size: str = Field(default="10MB")
    backup_count: int = Field(default=5, ge=0)

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper().strip()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class Config(BaseModel):
    """Main configuration class."""

    recognition: RecognitionConfig = Field(default_factory=RecognitionConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load_from_env(cls, env_file: Optional[str] = None) -> "Config":
        """Load configuration from environment variables."""
        if env_file:
            load_dotenv(env_file)
        else:
            # Try to load from .env file in current directory
            env_path = Path(".env")
            if env_path.exists():
                load_dotenv(env_path)

        recognition = RecognitionConfig(
            candle_tolerance=float(os.getenv("CANDLE_TOLERANCE", "0.02")),
            doji_tolerance=float(os.getenv("DOJI_TOLERANCE", "0.02")),
            hammer_tolerance=float(os.getenv("HAMMER_TOLERANCE", "0.01")),
            flag_tolerance_mode=os.getenv("FLAG_TOLERANCE_MODE", "per_rule").lower()
        )

        data = DataConfig(
            data_file=os.getenv("DATA_FILE")
        )

        logging = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            file_path=os.getenv("LOG_FILE_PATH"),
            max_size=os.getenv("LOG_MAX_SIZE", "10MB"),
            backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5"))
        )

        return cls(
            recognition=recognition,
            data=data,
            logging=logging
        )
