from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from devmeter.config_schema import PreprocessConfig
from devmeter.preprocess import Preprocessor
from .fixtures import NEUTRAL_HOUR, WORK_HOUR, make_event


def test_merge_then_working_hour_boost():
    pre = Preprocessor()
    events = [
        make_event("commit", 10, at=WORK_HOUR),
        make_event("commit", 15, at=WORK_HOUR, minutes=1),
    ]
    out = pre.process_events(events)
    assert len(out) == 1
    assert out[0].count == pytest.approx(27.5)
    assert out[0].timestamp == WORK_HOUR


def test_bot_repo_dropped_regardless_of_count():
    out = Preprocessor().process_events(
        [
            make_event("stars", 1_000_000, repo="acme/tool-bot"),
            make_event("stars", 3, repo="acme/tool"),
        ]
    )
    assert [e.repo for e in out] == ["acme/tool"]


@pytest.mark.parametrize("repo", ["acme/release-ci", "acme/deploy-automation", "dependabot/x"])
def test_bot_repo_markers(repo):
    assert Preprocessor().process_events([make_event("forks", 5, repo=repo)]) == []


def test_metadata_bot_flag():
    pre = Preprocessor()
    flagged = make_event("stars", 5, metadata={"is_bot": True})
    not_flagged = make_event("forks", 5, minutes=10, metadata={"is_bot": False})
    no_meta = make_event("followers", 5, minutes=20)
    out = pre.process_events([flagged, not_flagged, no_meta])
    assert [e.type for e in out] == ["forks", "followers"]


def test_night_penalty():
    at = datetime(2024, 3, 4, 2, 30)
    out = Preprocessor().process_events([make_event("commit", 20, at=at)])
    assert out[0].count == pytest.approx(6.0)


@pytest.mark.parametrize(
    "hour,factor",
    [(1, 1.0), (2, 0.3), (5, 0.3), (6, 1.0), (9, 1.1), (17, 1.1), (18, 1.0), (23, 1.0)],
)
def test_timing_windows_are_inclusive(hour, factor):
    at = datetime(2024, 3, 4, hour, 15)
    out = Preprocessor().process_events([make_event("stars", 100, at=at)])
    assert out[0].count == pytest.approx(100 * factor)


def test_timing_uses_local_hour_of_aware_timestamp():
    tz = timezone(timedelta(hours=-5))
    at = datetime(2024, 3, 4, 3, 0, tzinfo=tz)  # 08:00 UTC, 03:00 local
    out = Preprocessor().process_events([make_event("stars", 10, at=at)])
    assert out[0].count == pytest.approx(3.0)


def test_trivial_discounts():
    pre = Preprocessor()
    out = pre.process_events(
        [
            make_event("commit", 4, repo="a/one"),
            make_event("commit", 10, repo="a/two"),
            make_event("merged_pr", 2, repo="a/three"),
            make_event("merged_pr", 5, repo="a/four"),
            make_event("stars", 1, repo="a/five"),
        ]
    )
    assert [e.count for e in out] == pytest.approx([2.0, 10.0, 1.4, 5.0, 1.0])


def test_discount_and_timing_compose_once():
    out = Preprocessor().process_events([make_event("commit", 4, at=WORK_HOUR)])
    assert out[0].count == pytest.approx(4 * 0.5 * 1.1)


def test_merge_combines_before_discount():
    # 6 + 6 merged is 12: above the trivial threshold, so no discount
    out = Preprocessor().process_events(
        [make_event("commit", 6), make_event("commit", 6, minutes=2)]
    )
    assert len(out) == 1
    assert out[0].count == pytest.approx(12.0)


def test_merge_only_with_immediately_preceding_kept_event():
    out = Preprocessor().process_events(
        [
            make_event("commit", 20),
            make_event("stars", 3, minutes=1),
            make_event("commit", 20, minutes=2),
        ]
    )
    assert [e.type for e in out] == ["commit", "stars", "commit"]


def test_merge_chain_keeps_earliest_timestamp():
    out = Preprocessor().process_events(
        [make_event("stars", 1), make_event("stars", 1, minutes=3), make_event("stars", 1, minutes=6)]
    )
    # gaps are measured from the kept event, which keeps its original timestamp
    assert [e.count for e in out] == [2, 1]
    assert out[0].timestamp == NEUTRAL_HOUR


def test_no_merge_at_spacing_boundary_or_across_repos():
    pre = Preprocessor()
    boundary = pre.process_events([make_event("stars", 1), make_event("stars", 1, minutes=5)])
    assert len(boundary) == 2
    repos = pre.process_events([make_event("stars", 1, repo="a/x"), make_event("stars", 1, repo="a/y")])
    assert len(repos) == 2


def test_custom_min_spacing():
    pre = Preprocessor(PreprocessConfig(min_spacing_minutes=30))
    out = pre.process_events([make_event("stars", 1), make_event("stars", 1, minutes=20)])
    assert len(out) == 1


def test_input_is_not_mutated_or_aliased():
    events = [
        make_event("commit", 15, minutes=2),
        make_event("commit", 10),
        make_event("stars", 1, repo="acme/tool-bot", minutes=1),
    ]
    snapshot = list(events)
    out = Preprocessor().process_events(events)
    assert events == snapshot
    assert [e.count for e in events] == [15, 10, 1]
    assert out is not events
    out.clear()
    assert len(events) == 3


def test_sorts_by_timestamp_and_accepts_mixed_timezones():
    aware = datetime(2024, 3, 4, 19, 0, tzinfo=timezone.utc)
    out = Preprocessor().process_events(
        [make_event("forks", 1), make_event("stars", 1, at=aware), make_event("followers", 1, minutes=-120)]
    )
    assert [e.type for e in out] == ["followers", "stars", "forks"]


def test_empty_and_generator_input():
    pre = Preprocessor()
    assert pre.process_events([]) == []
    assert len(pre.process_events(make_event("stars", 1, minutes=m * 10) for m in range(3))) == 3


def test_extreme_and_negative_counts_do_not_raise():
    out = Preprocessor().process_events(
        [make_event("commit", -50), make_event("stars", 1e308, minutes=10), make_event("forks", float("inf"), minutes=20)]
    )
    assert len(out) == 3
    assert out[0].count == -25.0
