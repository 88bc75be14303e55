# blogcore/api/analytics/scorer.py
"""
Per-article engagement aggregates.

Each aggregate is created on the first event for its article and updated on
every event after that:

    view    -> views += 1, unique_views = distinct sessions that viewed
    scroll  -> avg_time_spent = mean time_spent over the article's scroll events
    share   -> share_count += 1

score = (min(views/100, 1) * 0.3 + min(avg/300, 1) * 0.4 + min(shares/10, 1) * 0.3) * 100

An article is trending when it has more than 10 views in the trailing 24 hours
and a score above 70. Aggregates are derived state: ``rebuild`` recreates all
of them from an event log.
"""
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from .models import BehaviorAction, BehaviorEvent, ContentPerformance

VIEW_SATURATION = 100
TIME_SATURATION_SECONDS = 300
SHARE_SATURATION = 10

VIEW_WEIGHT = 0.3
TIME_WEIGHT = 0.4
SHARE_WEIGHT = 0.3

TRENDING_WINDOW = timedelta(hours=24)
TRENDING_MIN_RECENT_VIEWS = 10
TRENDING_MIN_SCORE = 70


def engagement_score(views: int, avg_time_spent: float, share_count: int) -> float:
    normalized_views = min(views / VIEW_SATURATION, 1)
    normalized_time = min(avg_time_spent / TIME_SATURATION_SECONDS, 1)
    normalized_shares = min(share_count / SHARE_SATURATION, 1)
    return (
        normalized_views * VIEW_WEIGHT
        + normalized_time * TIME_WEIGHT
        + normalized_shares * SHARE_WEIGHT
    ) * 100


def recent_view_count(events: Iterable[BehaviorEvent], now: datetime) -> int:
    since = now - TRENDING_WINDOW
    return sum(1 for e in events if e.action == BehaviorAction.VIEW and e.timestamp > since)


def is_trending(score: float, recent_views: int) -> bool:
    return recent_views > TRENDING_MIN_RECENT_VIEWS and score > TRENDING_MIN_SCORE


class EngagementScorer:
    def __init__(self):
        self._performance: Dict[int, ContentPerformance] = {}

    def update(
        self, event: BehaviorEvent, article_events: Sequence[BehaviorEvent], now: datetime
    ) -> ContentPerformance:
        """Apply one event. ``article_events`` is the article's log, new event included."""
        perf = self._performance.get(event.article_id)
        if perf is None:
            perf = ContentPerformance(article_id=event.article_id)
            self._performance[event.article_id] = perf

        if event.action == BehaviorAction.VIEW:
            perf.views += 1
            perf.unique_views = len(
                {e.session_id for e in article_events if e.action == BehaviorAction.VIEW}
            )
        elif event.action == BehaviorAction.SCROLL and event.time_spent is not None:
            spent = [
                e.time_spent
                for e in article_events
                if e.action == BehaviorAction.SCROLL and e.time_spent is not None
            ]
            perf.avg_time_spent = sum(spent) / len(spent)
        elif event.action == BehaviorAction.SHARE:
            perf.share_count += 1

        self._refresh(perf, article_events, now)
        return perf

    def _refresh(
        self, perf: ContentPerformance, article_events: Iterable[BehaviorEvent], now: datetime
    ) -> None:
        perf.engagement_score = engagement_score(perf.views, perf.avg_time_spent, perf.share_count)
        perf.trending = is_trending(perf.engagement_score, recent_view_count(article_events, now))
        perf.last_updated = now

    def refresh_trending(self, events_by_article: Dict[int, List[BehaviorEvent]], now: datetime) -> None:
        for article_id, perf in self._performance.items():
            recent = recent_view_count(events_by_article.get(article_id, ()), now)
            perf.trending = is_trending(perf.engagement_score, recent)

    def rebuild(self, events: Iterable[BehaviorEvent], now: datetime) -> None:
        """Recompute every aggregate from ``events``; articles with no events left are dropped."""
        by_article: Dict[int, List[BehaviorEvent]] = defaultdict(list)
        for e in events:
            by_article[e.article_id].append(e)

        rebuilt: Dict[int, ContentPerformance] = {}
        for article_id, article_events in by_article.items():
            views = [e for e in article_events if e.action == BehaviorAction.VIEW]
            spent = [
                e.time_spent
                for e in article_events
                if e.action == BehaviorAction.SCROLL and e.time_spent is not None
            ]
            perf = ContentPerformance(
                article_id=article_id,
                views=len(views),
                unique_views=len({e.session_id for e in views}),
                avg_time_spent=sum(spent) / len(spent) if spent else 0.0,
                share_count=sum(1 for e in article_events if e.action == BehaviorAction.SHARE),
            )
            self._refresh(perf, article_events, now)
            rebuilt[article_id] = perf
        self._performance = rebuilt

    # ---------- reads ----------
    def get(self, article_id: int) -> Optional[ContentPerformance]:
        return self._performance.get(article_id)

    def engagement_for(self, article_id: int) -> float:
        perf = self._performance.get(article_id)
        return perf.engagement_score if perf else 0.0

    def get_content_performance(self, article_id: Optional[int] = None) -> List[ContentPerformance]:
        if article_id is not None:
            perf = self._performance.get(article_id)
            return [perf] if perf else []
        return list(self._performance.values())

    def get_trending_content(self, limit: int = 10) -> List[ContentPerformance]:
        trending = [p for p in self._performance.values() if p.trending]
        trending.sort(key=lambda p: p.engagement_score, reverse=True)
        return trending[:limit]
