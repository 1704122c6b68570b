# Copyright 2025 HERU Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration management for the translation core.

Uses pydantic-settings to load configuration from environment variables
and .env files.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WEIGHTS: dict[str, float] = {
    "term_consistency": 2.0,
    "morph_wellformedness": 1.0,
    "length_ratio": 0.5,
    "fluency": 1.0,
    "memory_match": 3.0,
}


class Settings(BaseSettings):
    """Application settings.

    Loads configuration from environment variables or .env file.
    All settings can be overridden via environment variables with HERU_ prefix.

    Example .env file:
        HERU_MAX_CANDIDATES=16
        HERU_LENGTH_RATIO_MAX=3.5
        HERU_STORE_DIR=/var/lib/heru

    Example usage:
        >>> settings = Settings()
        >>> print(settings.max_candidates)
        32
    """

    # Generation
    max_candidates: int = Field(
        default=32,
        description="Upper bound on candidates generated per segment",
        ge=1,
        json_schema_extra={"env": "HERU_MAX_CANDIDATES"},
    )

    top_k: int = Field(
        default=3,
        description="Number of ranked alternatives returned per segment",
        ge=1,
        json_schema_extra={"env": "HERU_TOP_K"},
    )

    context_window: int = Field(
        default=3,
        description="Words on each side used for term sense disambiguation",
        ge=0,
        json_schema_extra={"env": "HERU_CONTEXT_WINDOW"},
    )

    default_source_lang: str = Field(
        default="he",
        description="Source language assumed for feedback whose language cannot be detected",
        json_schema_extra={"env": "HERU_DEFAULT_SOURCE_LANG"},
    )

    # Quality gate
    length_ratio_min: float = Field(
        default=0.25,
        description="Minimum output/source character ratio before rejecting",
        gt=0.0,
        json_schema_extra={"env": "HERU_LENGTH_RATIO_MIN"},
    )

    length_ratio_max: float = Field(
        default=4.0,
        description="Maximum output/source character ratio before rejecting",
        gt=0.0,
        json_schema_extra={"env": "HERU_LENGTH_RATIO_MAX"},
    )

    fluency_soft_threshold: float = Field(
        default=0.15,
        description="Fluency below this value flags the output",
        ge=0.0,
        le=1.0,
        json_schema_extra={"env": "HERU_FLUENCY_SOFT_THRESHOLD"},
    )

    banned_patterns: list[str] = Field(
        default_factory=list,
        description="Regular expressions that must not appear in output",
        json_schema_extra={"env": "HERU_BANNED_PATTERNS"},
    )

    # Ranking
    ranking_weights: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_WEIGHTS),
        description="Initial ranking weights per feature (JSON object in env)",
        json_schema_extra={"env": "HERU_RANKING_WEIGHTS"},
    )

    # Learner
    learning_rate: float = Field(
        default=0.1,
        description="Step size for ranking weight updates",
        gt=0.0,
        json_schema_extra={"env": "HERU_LEARNING_RATE"},
    )

    max_step: float = Field(
        default=0.25,
        description="Largest absolute change of a weight in one retrain",
        gt=0.0,
        json_schema_extra={"env": "HERU_MAX_STEP"},
    )

    min_weight: float = Field(
        default=0.05,
        description="Positive floor applied to every ranking weight after a retrain",
        gt=0.0,
        json_schema_extra={"env": "HERU_MIN_WEIGHT"},
    )

    confidence_step: float = Field(
        default=0.1,
        description="Fraction of remaining distance a term confidence moves per record",
        gt=0.0,
        le=1.0,
        json_schema_extra={"env": "HERU_CONFIDENCE_STEP"},
    )

    min_confidence: float = Field(
        default=0.05,
        description="Floor for term confidence after negative feedback",
        ge=0.0,
        le=1.0,
        json_schema_extra={"env": "HERU_MIN_CONFIDENCE"},
    )

    retrain_batch_size: int = Field(
        default=50,
        description="Pending feedback records that trigger a retrain",
        ge=1,
        json_schema_extra={"env": "HERU_RETRAIN_BATCH_SIZE"},
    )

    retrain_interval_seconds: float = Field(
        default=3600.0,
        description="Seconds after which pending feedback triggers a retrain",
        gt=0.0,
        json_schema_extra={"env": "HERU_RETRAIN_INTERVAL_SECONDS"},
    )

    # Concurrency
    max_workers: int = Field(
        default=4,
        description="Segments translated in parallel per request",
        ge=1,
        json_schema_extra={"env": "HERU_MAX_WORKERS"},
    )

    # Storage
    store_dir: Path = Field(
        default=Path.home() / ".heru",
        description="Directory for snapshots and the feedback database",
        json_schema_extra={"env": "HERU_STORE_DIR"},
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        json_schema_extra={"env": "HERU_LOG_LEVEL"},
    )

    # Model configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HERU_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("default_source_lang")
    @classmethod
    def _check_language(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("he", "ru"):
            raise ValueError(f"default_source_lang must be 'he' or 'ru', got {value!r}")
        return value

    @model_validator(mode="after")
    def _check_band(self) -> Settings:
        if self.length_ratio_min >= self.length_ratio_max:
            raise ValueError(
                f"length_ratio_min ({self.length_ratio_min}) must be below "
                f"length_ratio_max ({self.length_ratio_max})"
            )
        return self

    @property
    def snapshot_dir(self) -> Path:
        return self.store_dir / "snapshots"

    @property
    def feedback_db(self) -> Path:
        return self.store_dir / "feedback.db"


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get global settings instance.

    Returns:
        Settings instance (singleton)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
