"""plagscore Configuration Module.

This module handles all scoring thresholds and policy knobs. Every
value can be overridden per deployment through ``PLAGSCORE_*``
environment variables or a ``.env`` file.

Combination policies:
- max: combined score is the larger of edit distance and pattern score
- weighted: linear blend controlled by ``pattern_weight``
"""
from functools import lru_cache
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings with design defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PLAGSCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Edit distance ===
    # Pairs whose min(len)/max(len) falls below this skip the DP entirely
    length_prefilter_threshold: float = Field(default=0.5, ge=0.0, le=1.0)

    # === Pattern heuristic ===
    pattern_coverage_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    pattern_confidence: float = Field(default=0.60, ge=0.0, le=1.0)

    # === Report ===
    flag_threshold: float = Field(default=0.75, ge=0.0, le=1.0)
    match_floor: float = Field(default=0.7, ge=0.0, le=1.0)  # overall_score only
    combine_policy: Literal["max", "weighted"] = "max"
    pattern_weight: float = Field(default=0.5, ge=0.0, le=1.0)
    snippet_length: int = Field(default=200, ge=0)

    # === Work bounds ===
    max_workers: int = Field(default=1, ge=1)
    max_candidates: Optional[int] = Field(default=None, ge=1)

    # === Paths ===
    reference_corpus_path: str = "./data/reference"
    log_path: str = "./logs"

    def validate_thresholds(self) -> None:
        """Validate cross-field threshold constraints at startup."""
        if self.match_floor > self.flag_threshold:
            raise ValueError(
                f"match_floor ({self.match_floor}) must not exceed "
                f"flag_threshold ({self.flag_threshold})"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    settings.validate_thresholds()
    return settings
