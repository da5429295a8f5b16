from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .config_schema import CATEGORY_ORDER


@dataclass(frozen=True)
class RawEvent:
    """Unprocessed activity event as supplied by a source adapter.

    ``count`` is the magnitude of the event (commits in a push, stars gained,
    follower total, ...). Instances are immutable; preprocessing stages build
    new events with ``dataclasses.replace``.
    """

    type: str
    timestamp: datetime
    count: float = 0.0
    repo: str = ""
    language: str = ""
    metadata: Optional[Mapping[str, Any]] = None



def _sample_values(category: str, raw: Any) -> List[float]:
    """Validate one stored sample: None or a list of real numbers."""

    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"Calibration sample for {category} must be a list, got {type(raw).__name__}")
    out: List[float] = []
    for v in raw:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"Calibration sample for {category} has non-numeric value {v!r}")
        out.append(float(v))
    return out


@dataclass
class CalibrationData:
    """Reference samples per evidence category used for robust normalization."""

    shipping: List[float] = field(default_factory=list)
    quality: List[float] = field(default_factory=list)
    influence: List[float] = field(default_factory=list)
    complexity: List[float] = field(default_factory=list)
    collaboration: List[float] = field(default_factory=list)
    reliability: List[float] = field(default_factory=list)
    novelty: List[float] = field(default_factory=list)

    def sample(self, category: str) -> List[float]:
        return getattr(self, category)

    def to_dict(self) -> Dict[str, List[float]]:
        return {c: [float(v) for v in getattr(self, c)] for c in CATEGORY_ORDER}

    @classmethod
    def from_dict(cls, data: Mapping[str, Sequence[float]]) -> "CalibrationData":
        unknown = set(data) - set(CATEGORY_ORDER)
        if unknown:
            raise ValueError(f"Unknown calibration categories: {sorted(unknown)}")
        return cls(**{c: _sample_values(c, data.get(c)) for c in CATEGORY_ORDER})


@dataclass
class FeatureVector:
    """Normalized features per category plus a data-completeness coverage."""

    shipping: Dict[str, float] = field(default_factory=dict)
    quality: Dict[str, float] = field(default_factory=dict)
    influence: Dict[str, float] = field(default_factory=dict)
    complexity: Dict[str, float] = field(default_factory=dict)
    collaboration: Dict[str, float] = field(default_factory=dict)
    reliability: Dict[str, float] = field(default_factory=dict)
    novelty: Dict[str, float] = field(default_factory=dict)
    coverage: float = 0.5

    def category(self, name: str) -> Dict[str, float]:
        return getattr(self, name)


@dataclass(frozen=True)
class Contributor:
    name: str
    contribution: float


@dataclass(frozen=True)
class Breakdown:
    shipping: float = 0.0
    quality: float = 0.0
    influence: float = 0.0
    complexity: float = 0.0
    collaboration: float = 0.0
    reliability: float = 0.0
    novelty: float = 0.0


@dataclass(frozen=True)
class ScoreResult:
    """Final score with confidence, posterior and explainable contributors.

    score is an integer in [0, 100]; confidence and posterior are in [0, 1].
    """

    score: int
    confidence: float
    posterior: float
    contributors: List[Contributor]
    breakdown: Breakdown

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
