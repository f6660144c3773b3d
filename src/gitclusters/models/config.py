"""Configuration models."""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Sensitivity(str, Enum):
    """How aggressively probabilistic clustering output is trusted."""

    STRICT = "strict"
    BALANCED = "balanced"
    LOOSE = "loose"


class ConfidenceThresholds(BaseModel):
    """Per-commit and per-group confidence cut-offs."""

    per_commit: float = Field(..., ge=0.0, le=1.0, description="Minimum confidence to keep a commit")
    per_group: float = Field(..., ge=0.0, le=1.0, description="Minimum overall confidence to keep a group")


DEFAULT_THRESHOLDS: Dict[Sensitivity, ConfidenceThresholds] = {
    Sensitivity.STRICT: ConfidenceThresholds(per_commit=0.9, per_group=0.85),
    Sensitivity.BALANCED: ConfidenceThresholds(per_commit=0.8, per_group=0.7),
    Sensitivity.LOOSE: ConfidenceThresholds(per_commit=0.6, per_group=0.5),
}


def thresholds_for(sensitivity: Sensitivity) -> ConfidenceThresholds:
    """Return the default threshold pair for a sensitivity level."""
    return DEFAULT_THRESHOLDS[Sensitivity(sensitivity)]


class GroupingOptions(BaseModel):
    """Parameters of the tiered grouping pipeline."""

    time_window_days: float = Field(7.0, ge=0.0, description="Max gap between consecutive sprint commits")
    overlap_threshold: float = Field(
        0.5, gt=0.0, le=1.0, description="Minimum Jaccard file overlap for adjacency"
    )

    class Config:
        """Pydantic config."""
        json_schema_extra = {
            "example": {
                "time_window_days": 7,
                "overlap_threshold": 0.5,
            }
        }


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are prefixed with GITCLUSTERS_ (e.g., GITCLUSTERS_OVERLAP_THRESHOLD).
    """

    model_config = SettingsConfigDict(
        env_prefix="GITCLUSTERS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Tiered pipeline
    time_window_days: float = Field(7.0, ge=0.0)
    overlap_threshold: float = Field(0.5, gt=0.0, le=1.0)

    # AI-assisted clustering
    clustering_sensitivity: Sensitivity = Sensitivity.BALANCED
    per_commit_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)
    per_group_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)

    # Prompt budget
    max_prompt_files: int = Field(5, ge=0)
    max_diff_lines: int = Field(20, ge=0)
    tag_batch_size: int = Field(10, ge=1)

    # Logging
    log_level: str = "INFO"

    def grouping_options(self) -> GroupingOptions:
        """Pipeline options derived from these settings."""
        return GroupingOptions(
            time_window_days=self.time_window_days,
            overlap_threshold=self.overlap_threshold,
        )

    def confidence_thresholds(self, sensitivity: Optional[Sensitivity] = None) -> ConfidenceThresholds:
        """Thresholds for a sensitivity level, with any configured overrides applied.

        Args:
            sensitivity: Level to use (defaults to clustering_sensitivity)

        Returns:
            Threshold pair used by the clustering filter
        """
        base = thresholds_for(sensitivity or self.clustering_sensitivity)
        return ConfidenceThresholds(
            per_commit=base.per_commit if self.per_commit_threshold is None else self.per_commit_threshold,
            per_group=base.per_group if self.per_group_threshold is None else self.per_group_threshold,
        )
