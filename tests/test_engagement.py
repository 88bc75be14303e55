from datetime import datetime, timedelta

import pytest

from blogcore.api.analytics.engine import AnalyticsEngine
from blogcore.api.analytics.models import BehaviorAction, BehaviorEvent
from blogcore.api.analytics.scorer import EngagementScorer, engagement_score, is_trending
from blogcore.api.analytics.tracker import BehaviorTracker

NOW = datetime(2024, 3, 1, 9, 0, 0)


def event(action, article_id=1, session_id="s1", at=None, **metadata):
    return BehaviorEvent(
        session_id=session_id,
        article_id=article_id,
        action=BehaviorAction(action),
        timestamp=at or NOW - timedelta(hours=1),
        metadata=metadata,
    )


@pytest.fixture
def tracker(fake_clock):
    return BehaviorTracker(EngagementScorer(), retention_days=30, clock=fake_clock(NOW))


def test_score_formula():
    assert engagement_score(50, 150, 5) == pytest.approx(50.0)
    assert engagement_score(0, 0, 0) == 0
    assert engagement_score(10, 0, 0) == pytest.approx(3.0)


def test_score_saturates_at_100():
    assert engagement_score(100, 300, 10) == pytest.approx(100.0)
    assert engagement_score(10_000, 9_999, 500) == pytest.approx(100.0)


@pytest.mark.parametrize("bump", [(1, 0, 0), (0, 1, 0), (0, 0, 1)])
def test_score_never_drops_when_an_input_grows(bump):
    dv, dt, ds = bump
    for base in [(0, 0, 0), (40, 120, 3), (99, 299, 9)]:
        v, t, s = base
        assert engagement_score(v + dv, t + dt, s + ds) >= engagement_score(v, t, s)


def test_trending_needs_both_thresholds():
    assert is_trending(71, 11)
    assert not is_trending(70, 50)
    assert not is_trending(95, 10)


def test_aggregate_created_lazily_and_updated(tracker):
    scorer = tracker.scorer
    assert scorer.get(1) is None

    tracker.track_behavior(event("view", session_id="a"))
    tracker.track_behavior(event("view", session_id="a"))
    tracker.track_behavior(event("view", session_id="b"))
    tracker.track_behavior(event("scroll", time_spent=100))
    tracker.track_behavior(event("scroll", time_spent=200))
    tracker.track_behavior(event("share"))

    perf = scorer.get(1)
    assert perf.views == 3
    assert perf.unique_views == 2
    assert perf.avg_time_spent == pytest.approx(150.0)
    assert perf.share_count == 1
    assert perf.engagement_score == pytest.approx(engagement_score(3, 150, 1))
    assert perf.last_updated == NOW


def test_scroll_without_time_spent_leaves_average_alone(tracker):
    tracker.track_behavior(event("scroll", time_spent=60))
    tracker.track_behavior(event("scroll"))
    assert tracker.scorer.get(1).avg_time_spent == pytest.approx(60.0)


def _saturate(tracker, article_id, at):
    for i in range(100):
        tracker.track_behavior(event("view", article_id, session_id=f"s{i}", at=at))
    tracker.track_behavior(event("scroll", article_id, at=at, time_spent=300))
    for _ in range(10):
        tracker.track_behavior(event("share", article_id, at=at))


def test_recent_high_scorer_is_trending(tracker):
    _saturate(tracker, 1, NOW - timedelta(hours=2))
    trending = tracker.scorer.get_trending_content()
    assert [p.article_id for p in trending] == [1]


def test_high_score_without_recent_views_is_not_trending(tracker):
    _saturate(tracker, 1, NOW - timedelta(days=3))
    perf = tracker.scorer.get(1)
    assert perf.engagement_score == pytest.approx(100.0)
    assert perf.trending is False


def test_trending_sorted_by_score_and_limited(tracker):
    _saturate(tracker, 1, NOW - timedelta(hours=1))
    _saturate(tracker, 2, NOW - timedelta(hours=1))
    tracker.track_behavior(event("scroll", 2, time_spent=1))  # drags article 2's average down
    result = tracker.scorer.get_trending_content(limit=1)
    assert [p.article_id for p in result] == [1]


def test_sweep_rebuilds_aggregates_from_remaining_events(tracker):
    old = NOW - timedelta(days=40)
    _saturate(tracker, 1, old)
    tracker.track_behavior(event("view", 1, session_id="fresh"))
    tracker.track_behavior(event("view", 2, at=old))

    removed = tracker.prune()

    assert removed == 112
    perf = tracker.scorer.get(1)
    assert perf.views == 1
    assert perf.share_count == 0
    assert perf.engagement_score == pytest.approx(engagement_score(1, 0, 0))
    # nothing left for article 2
    assert tracker.scorer.get(2) is None
    assert tracker.event_count == 1


def test_trending_flag_expires_with_the_window_between_events(fake_clock):
    clock = fake_clock(NOW)
    engine = AnalyticsEngine(clock=clock)
    _saturate(engine.tracker, 1, NOW - timedelta(hours=2))
    assert [p.article_id for p in engine.get_trending_content()] == [1]

    # no new events and no sweep, only time passing
    clock.advance(timedelta(days=2))
    assert engine.get_trending_content() == []
    assert engine.get_content_performance(1)[0].trending is False
