from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..models import CalibrationData, RawEvent

# 20:00 sits outside both the night-penalty and working-hour windows.
NEUTRAL_HOUR = datetime(2024, 3, 4, 20, 0, 0)
WORK_HOUR = datetime(2024, 3, 4, 10, 0, 0)


def make_event(
    type: str,
    count: float,
    at: Optional[datetime] = None,
    repo: str = "octocat/hello-world",
    minutes: float = 0.0,
    metadata: Optional[Dict[str, Any]] = None,
) -> RawEvent:
    ts = (at or NEUTRAL_HOUR) + timedelta(minutes=minutes)
    return RawEvent(type=type, timestamp=ts, count=count, repo=repo, metadata=metadata)


def github_events() -> List[RawEvent]:
    """A plausible code-hosting activity stream for one developer."""

    return [
        make_event("stars", 120, repo="octocat/hello-world"),
        make_event("forks", 14, repo="octocat/hello-world", minutes=30),
        make_event("followers", 340, repo="", minutes=60),
        make_event("total_stars", 900, repo="", minutes=61),
        make_event("commit", 25, at=WORK_HOUR, repo="octocat/spoon-knife"),
        make_event("merged_pr", 3, at=WORK_HOUR, repo="octocat/spoon-knife", minutes=90),
        make_event("language", 0.6, repo="octocat/spoon-knife", minutes=120),
    ]


def x_events() -> List[RawEvent]:
    return [
        make_event("twitter_followers", 5000, repo=""),
        make_event("twitter_tweets", 42, repo=""),
        make_event("twitter_replies", 12, repo=""),
        make_event("twitter_avg_likes", 0.3, repo=""),
    ]


def make_calibration(scale: float = 1.0) -> CalibrationData:
    return CalibrationData(
        shipping=[scale * v for v in (0, 2, 4, 8, 16)],
        quality=[0.1, 0.3, 0.5, 0.7, 0.9],
        influence=[scale * v for v in (10, 20, 40, 80, 160)],
        complexity=[0.2, 0.4, 0.6],
        collaboration=[1, 2, 4, 8],
        reliability=[0.5, 0.75, 1.0],
        novelty=[],
    )
