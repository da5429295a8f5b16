from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .calibration import CalibrationStore
from .config_schema import Config, get_default_config
from .features import FeatureVectorBuilder
from .models import RawEvent, ScoreResult
from .preprocess import Preprocessor
from .scorer import aggregate_score

logger = logging.getLogger(__name__)


class Analyzer:
    """Runs preprocessing, feature building and scoring for one request.

    Both entry points always return a result; empty or unusable input
    degrades to a neutral, low-confidence score.
    """

    def __init__(self, data_dir: Optional[Union[str, Path]] = None, cfg: Optional[Config] = None):
        self.cfg = cfg or get_default_config()
        if data_dir is None:
            data_dir = self.cfg.calibration.data_dir
        self.preprocessor = Preprocessor(self.cfg.preprocess)
        self.calibration_store = CalibrationStore(data_dir)
        self.builder = FeatureVectorBuilder(self.calibration_store)

    def analyze_events(self, events: Optional[Iterable[RawEvent]], domain: str) -> ScoreResult:
        processed = self.preprocessor.process_events(events or [])
        fv = self.builder.build_single_source(processed, domain)
        result = aggregate_score(fv, self.cfg.scoring)
        logger.debug("Scored %s (single source): score=%d confidence=%.2f", domain, result.score, result.confidence)
        return result

    def analyze_events_with_x(
        self,
        github_events: Optional[Iterable[RawEvent]],
        x_events: Optional[Iterable[RawEvent]],
        domain: str,
    ) -> ScoreResult:
        """Score code-hosting events together with social-platform events.

        Only the first source goes through anti-gaming preprocessing; the
        second source is taken as already clean.
        """

        processed = self.preprocessor.process_events(github_events or [])
        combined: List[RawEvent] = processed + list(x_events or [])
        fv = self.builder.build_dual_source(combined, domain)
        result = aggregate_score(fv, self.cfg.scoring)
        logger.debug("Scored %s (dual source): score=%d confidence=%.2f", domain, result.score, result.confidence)
        return result


def analysis_type(github_events: Optional[List[RawEvent]], x_events: Optional[List[RawEvent]]) -> str:
    has_github = bool(github_events)
    has_x = bool(x_events)
    if has_github and has_x:
        return "combined"
    if has_github:
        return "github"
    if has_x:
        return "x"
    return "none"


def analyze_input(domain: str, data_dir: Union[str, Path] = "./data") -> ScoreResult:
    """Score a domain with no events; yields the neutral result for that calibration."""

    return Analyzer(data_dir).analyze_events([], domain)
