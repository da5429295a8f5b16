from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

CATEGORY_ORDER: Tuple[str, ...] = (
    "shipping",
    "quality",
    "influence",
    "complexity",
    "collaboration",
    "reliability",
    "novelty",
)


class CategoryWeights(BaseModel):
    """Per-category weights in the log-odds aggregate. Must sum to 1."""

    model_config = ConfigDict(frozen=True)

    shipping: float = 0.25
    quality: float = 0.20
    influence: float = 0.20
    complexity: float = 0.15
    collaboration: float = 0.10
    reliability: float = 0.07
    novelty: float = 0.03

    def as_dict(self) -> Dict[str, float]:
        return {c: float(getattr(self, c)) for c in CATEGORY_ORDER}

    def total(self) -> float:
        return math.fsum(self.as_dict().values())


class ScoringConfig(BaseModel):
    """Scoring constants threaded into the scorer as one immutable value."""

    model_config = ConfigDict(frozen=True)

    name: str = "neutral"
    base_bias: float = 0.0
    score_scale: float = 1.0
    clip_z: float = 3.0
    weights: CategoryWeights = Field(default_factory=CategoryWeights)

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, v: CategoryWeights) -> CategoryWeights:
        for k, w in v.as_dict().items():
            if w < 0:
                raise ValueError(f"Negative weight for category {k}: {w}")
        if abs(v.total() - 1.0) > 1e-9:
            raise ValueError(f"Category weights must sum to 1.0, got {v.total()}")
        return v

    @field_validator("clip_z")
    @classmethod
    def validate_clip(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("clip_z must be positive")
        return v


def neutral_scoring_config() -> ScoringConfig:
    return ScoringConfig()


def biased_scoring_config() -> ScoringConfig:
    """Alternative preset leaning on influence with a positive prior."""

    return ScoringConfig(
        name="biased",
        base_bias=1.5,
        score_scale=1.2,
        weights=CategoryWeights(
            shipping=0.20,
            quality=0.15,
            influence=0.35,
            complexity=0.12,
            collaboration=0.08,
            reliability=0.06,
            novelty=0.04,
        ),
    )


class PreprocessConfig(BaseModel):
    """Anti-gaming parameters."""

    model_config = ConfigDict(frozen=True)

    min_spacing_minutes: float = 5.0
    trivial_commit_below: float = 10.0
    trivial_commit_factor: float = 0.5
    trivial_pr_below: float = 5.0
    trivial_pr_factor: float = 0.7
    night_hours: Tuple[int, int] = (2, 5)
    night_factor: float = 0.3
    work_hours: Tuple[int, int] = (9, 17)
    work_factor: float = 1.1
    bot_repo_markers: Tuple[str, ...] = ("bot", "-ci", "-automation")

    @field_validator("night_hours", "work_hours")
    @classmethod
    def validate_hours(cls, v: Tuple[int, int]) -> Tuple[int, int]:
        lo, hi = v
        if not (0 <= lo <= hi <= 23):
            raise ValueError(f"Invalid hour window: {v}")
        return v


class CalibrationConfig(BaseModel):
    data_dir: str = "./data"


class MonitoringConfig(BaseModel):
    """Calibration drift thresholds (population stability index)."""

    psi_warn: float = 0.1
    psi_alert: float = 0.2
    min_sample: int = 10
    bins: int = 5


class Config(BaseModel):
    """Top-level configuration model for the developer scoring engine."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    preprocess: PreprocessConfig = Field(default_factory=PreprocessConfig)
    calibration: CalibrationConfig = Field(default_factory=CalibrationConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)


def load_config(path: Optional[Path] = None) -> Config:
    """Load configuration from a YAML file.

    Args:
        path: Optional custom path to the YAML config. Defaults to the
            ``config_defaults.yaml`` shipped with the package.

    Returns:
        Parsed and validated Config object.
    """

    if path is None:
        path = Path(__file__).with_name("config_defaults.yaml")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return Config(**data)


def get_default_config() -> Config:
    """Return a Config loaded from the default YAML file shipped with the package."""

    return load_config()
