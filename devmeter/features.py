from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from .calibration import CalibrationError, CalibrationStore, default_calibration
from .config_schema import CATEGORY_ORDER
from .models import CalibrationData, FeatureVector, RawEvent
from .robust import robust_z

logger = logging.getLogger(__name__)

NEUTRAL_COVERAGE = 0.5

SINGLE_SOURCE_TYPES = ("stars", "forks", "followers", "total_stars")

CATEGORY_BY_EVENT_TYPE: Dict[str, str] = {
    # code hosting
    "stars": "influence",
    "forks": "influence",
    "followers": "influence",
    "total_stars": "influence",
    "total_forks": "influence",
    "merged_pr": "shipping",
    "commit": "shipping",
    "language": "complexity",
    # social platform
    "twitter_followers": "influence",
    "twitter_following": "influence",
    "twitter_likes": "influence",
    "twitter_retweets": "influence",
    "twitter_mentions": "influence",
    "twitter_engagement_rate": "influence",
    "twitter_avg_retweets": "influence",
    "twitter_hashtag_usage": "influence",
    "twitter_tweets": "novelty",
    "twitter_tweet": "novelty",
    "twitter_replies": "collaboration",
    "twitter_avg_replies": "collaboration",
    "twitter_avg_likes": "quality",
}


def dual_source_coverage(events: Sequence[RawEvent]) -> float:
    """Coverage from the number of distinct event types seen."""

    distinct = len({e.type for e in events})
    if distinct > 5:
        return 0.9
    if distinct > 2:
        return 0.8
    if distinct > 0:
        return 0.7
    return NEUTRAL_COVERAGE


class FeatureVectorBuilder:
    """Routes events into evidence categories and robust-normalizes them.

    Calibration is read from ``store`` per domain. A failing load is not
    fatal: the default baselines are used and a warning is logged.
    """

    def __init__(self, store: Optional[CalibrationStore] = None):
        self.store = store

    def calibration_for(self, domain: str) -> CalibrationData:
        if self.store is None:
            return default_calibration()
        try:
            return self.store.load_calibration(domain)
        except CalibrationError as e:
            logger.warning("Calibration unavailable for %s, using defaults: %s", domain, e)
            return default_calibration()

    def build_single_source(self, events: Sequence[RawEvent], domain: str) -> FeatureVector:
        fv = FeatureVector()
        for e in events:
            if e.type in SINGLE_SOURCE_TYPES:
                fv.influence[e.type] = fv.influence.get(e.type, 0.0) + e.count

        calibration = self.calibration_for(domain)
        sample = calibration.influence
        fv.influence = {k: robust_z(v, sample) for k, v in fv.influence.items()}

        fv.coverage = 0.8 if events else NEUTRAL_COVERAGE
        return fv

    def build_dual_source(self, events: Sequence[RawEvent], domain: str) -> FeatureVector:
        fv = FeatureVector()
        for e in events:
            category = CATEGORY_BY_EVENT_TYPE.get(e.type)
            if category is None:
                continue
            bucket = fv.category(category)
            bucket[e.type] = bucket.get(e.type, 0.0) + e.count

        calibration = self.calibration_for(domain)
        for category in CATEGORY_ORDER:
            sample = calibration.sample(category)
            values = fv.category(category)
            setattr(fv, category, {k: robust_z(v, sample) for k, v in values.items()})

        fv.coverage = dual_source_coverage(events)
        return fv

