from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from .config_schema import CATEGORY_ORDER, ScoringConfig
from .models import Breakdown, Contributor, FeatureVector, ScoreResult
from .robust import clip


@dataclass(frozen=True)
class CategoryScores:
    evidence: Dict[str, float]
    log_odds: float
    contributors: List[Contributor]
    breakdown: Breakdown


def sigmoid(x: float) -> float:
    """Logistic function, evaluated without overflow for large |x|."""

    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def _bounded(v: float, bound: float) -> float:
    if math.isnan(v):
        return 0.0
    return clip(v, -bound, bound)


def _sum_category(values: Dict[str, float], bound: float) -> float:
    return math.fsum(_bounded(v, bound) for _, v in sorted(values.items()))


def score_categories(fv: FeatureVector, cfg: ScoringConfig) -> CategoryScores:
    """Per-category evidence, the log-odds aggregate, and ordered contributors."""

    evidence: Dict[str, float] = {}
    contributors: List[Contributor] = []
    for category in CATEGORY_ORDER:
        values = fv.category(category)
        evidence[category] = cfg.base_bias + _sum_category(values, cfg.clip_z)
        for key in sorted(values):
            contributors.append(
                Contributor(name=f"{category}.{key}", contribution=_bounded(values[key], cfg.clip_z))
            )

    weights = cfg.weights.as_dict()
    log_odds = cfg.base_bias + math.fsum(weights[c] * evidence[c] for c in CATEGORY_ORDER)
    return CategoryScores(
        evidence=evidence,
        log_odds=log_odds,
        contributors=contributors,
        breakdown=Breakdown(**evidence),
    )


def aggregate_score(fv: FeatureVector, cfg: Optional[ScoringConfig] = None) -> ScoreResult:
    """Collapse a feature vector into a bounded score.

    Confidence is the feature vector's coverage, passed through unchanged;
    it reflects data completeness, not the posterior.
    """

    cfg = cfg or ScoringConfig()
    cs = score_categories(fv, cfg)
    p = sigmoid(cs.log_odds * cfg.score_scale)
    p = min(1.0, max(0.0, p))
    return ScoreResult(
        score=int(math.floor(100 * p + 0.5)),
        confidence=min(1.0, max(0.0, float(fv.coverage))),
        posterior=p,
        contributors=cs.contributors,
        breakdown=cs.breakdown,
    )
