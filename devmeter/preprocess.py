from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from .config_schema import PreprocessConfig
from .models import RawEvent

logger = logging.getLogger(__name__)


def _as_utc(ts: datetime) -> datetime:
    # Naive timestamps are taken as UTC so mixed inputs stay comparable.
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def is_bot_event(event: RawEvent, markers: Iterable[str]) -> bool:
    if any(m in event.repo for m in markers):
        return True
    if event.metadata is not None and event.metadata.get("is_bot") is True:
        return True
    return False


class Preprocessor:
    """Anti-gaming cleanup of a raw event sequence.

    Stages run in a fixed order on a time-sorted copy of the input:
    duplicate merge, trivial-event discount, timing adjustment, bot exclusion.
    Merging comes first so a merged count is adjusted once.
    """

    def __init__(self, cfg: Optional[PreprocessConfig] = None):
        self.cfg = cfg or PreprocessConfig()
        self.min_spacing = timedelta(minutes=self.cfg.min_spacing_minutes)

    def process_events(self, events: Iterable[RawEvent]) -> List[RawEvent]:
        ordered = sorted(events, key=lambda e: _as_utc(e.timestamp))
        merged = self.remove_duplicates(ordered)
        discounted = self.discount_trivial(merged)
        timed = self.penalize_abnormal_timing(discounted)
        cleaned = self.exclude_bots(timed)
        if len(cleaned) != len(ordered):
            logger.debug(
                "Preprocessed %d events into %d (merged=%d, bots=%d)",
                len(ordered),
                len(cleaned),
                len(ordered) - len(merged),
                len(timed) - len(cleaned),
            )
        return cleaned

    def remove_duplicates(self, events: List[RawEvent]) -> List[RawEvent]:
        """Merge an event into the previous kept one when type and repo match within min spacing."""

        if not events:
            return []
        cleaned: List[RawEvent] = [events[0]]
        for event in events[1:]:
            last = cleaned[-1]
            gap = _as_utc(event.timestamp) - _as_utc(last.timestamp)
            if event.type == last.type and event.repo == last.repo and gap < self.min_spacing:
                cleaned[-1] = replace(last, count=last.count + event.count)
                continue
            cleaned.append(event)
        return cleaned

    def discount_trivial(self, events: List[RawEvent]) -> List[RawEvent]:
        cfg = self.cfg
        out: List[RawEvent] = []
        for e in events:
            if e.type == "commit" and e.count < cfg.trivial_commit_below:
                e = replace(e, count=e.count * cfg.trivial_commit_factor)
            elif e.type == "merged_pr" and e.count < cfg.trivial_pr_below:
                e = replace(e, count=e.count * cfg.trivial_pr_factor)
            out.append(e)
        return out

    def penalize_abnormal_timing(self, events: List[RawEvent]) -> List[RawEvent]:
        """Down-weight 2-5 AM activity and boost 9-17 working hours (local hour of the timestamp)."""

        cfg = self.cfg
        night_lo, night_hi = cfg.night_hours
        work_lo, work_hi = cfg.work_hours
        out: List[RawEvent] = []
        for e in events:
            hour = e.timestamp.hour
            if night_lo <= hour <= night_hi:
                e = replace(e, count=e.count * cfg.night_factor)
            elif work_lo <= hour <= work_hi:
                e = replace(e, count=e.count * cfg.work_factor)
            out.append(e)
        return out

    def exclude_bots(self, events: List[RawEvent]) -> List[RawEvent]:
        return [e for e in events if not is_bot_event(e, self.cfg.bot_repo_markers)]
