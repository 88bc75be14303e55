# blogcore/api/analytics/tracker.py
import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional

from blogcore.db.models import utcnow

from .models import ENGAGEMENT_ACTIONS, BehaviorAction, BehaviorEvent
from .scorer import EngagementScorer

logger = logging.getLogger(__name__)

SHORT_READ_SECONDS = 120
LONG_READ_SECONDS = 420


def _time_of_day(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 22:
        return "evening"
    return "night"


def _preferred_length(avg_time_spent: Optional[float]) -> str:
    if avg_time_spent is None:
        return "medium"
    if avg_time_spent < SHORT_READ_SECONDS:
        return "short"
    if avg_time_spent > LONG_READ_SECONDS:
        return "long"
    return "medium"


def _engagement_level(events: List[BehaviorEvent]) -> str:
    if not events:
        return "low"
    ratio = sum(1 for e in events if e.action in ENGAGEMENT_ACTIONS) / len(events)
    if ratio > 0.1:
        return "high"
    if ratio > 0.05:
        return "medium"
    return "low"


def average_time_spent(events: List[BehaviorEvent]) -> Optional[float]:
    spent = [e.time_spent for e in events if e.time_spent is not None]
    return sum(spent) / len(spent) if spent else None


class BehaviorTracker:
    """
    Append-only behavior log with per-article and per-session indexes.

    Every tracked event immediately updates the article's aggregate in the
    scorer, so trending state reflects the latest write. Events are not
    deduplicated. ``prune`` drops events past the retention window and rebuilds
    the aggregates from what is left.
    """

    def __init__(
        self,
        scorer: EngagementScorer,
        *,
        retention_days: int = 30,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.scorer = scorer
        self.retention = timedelta(days=retention_days)
        self._clock = clock
        self._events: List[BehaviorEvent] = []
        self._by_article: Dict[int, List[BehaviorEvent]] = defaultdict(list)
        self._by_session: Dict[str, List[BehaviorEvent]] = defaultdict(list)

    def now(self) -> datetime:
        return self._clock()

    def track_behavior(self, event: BehaviorEvent) -> bool:
        """Record one event. Never raises: tracking must not fail the request it rides on."""
        try:
            article_events = self._by_article.get(event.article_id, []) + [event]
            self.scorer.update(event, article_events, self._clock())
        except Exception:
            # appended only once the aggregate has taken the event
            logger.exception("failed to track behavior event %r", event)
            return False

        self._events.append(event)
        self._by_article[event.article_id].append(event)
        self._by_session[event.session_id].append(event)
        return True

    def prune(self, now: Optional[datetime] = None) -> int:
        now = now or self._clock()
        cutoff = now - self.retention
        kept = [e for e in self._events if e.timestamp > cutoff]
        removed = len(self._events) - len(kept)

        self._events = kept
        self._by_article = defaultdict(list)
        self._by_session = defaultdict(list)
        for e in kept:
            self._by_article[e.article_id].append(e)
            self._by_session[e.session_id].append(e)

        self.scorer.rebuild(kept, now)
        if removed:
            logger.info("behavior sweep removed %d events older than %s", removed, cutoff.isoformat())
        return removed

    def refresh_trending(self, now: Optional[datetime] = None) -> None:
        """Re-test the 24h view window without touching counts or scores."""
        self.scorer.refresh_trending(self._by_article, now or self._clock())

    # ---------- reads ----------
    @property
    def event_count(self) -> int:
        return len(self._events)

    def events_for_session(self, session_id: str) -> List[BehaviorEvent]:
        return list(self._by_session.get(session_id, ()))

    def events_for_article(self, article_id: int) -> List[BehaviorEvent]:
        return list(self._by_article.get(article_id, ()))

    def viewed_article_ids(self, session_id: str) -> List[int]:
        return [e.article_id for e in self._by_session.get(session_id, ()) if e.action == BehaviorAction.VIEW]

    def get_user_insights(
        self,
        session_id: str,
        article_categories: Optional[Mapping[int, Optional[int]]] = None,
    ) -> Dict[str, Any]:
        events = self.events_for_session(session_id)
        views = [e for e in events if e.action == BehaviorAction.VIEW]

        top_categories: Counter = Counter()
        if article_categories:
            for e in views:
                cid = article_categories.get(e.article_id)
                if cid is not None:
                    top_categories[cid] += 1

        avg = average_time_spent(events)
        hours = Counter(_time_of_day(e.timestamp.hour) for e in events)
        return {
            "session_id": session_id,
            "top_categories": [
                {"category_id": cid, "views": n}
                for cid, n in sorted(top_categories.items(), key=lambda kv: (-kv[1], kv[0]))
            ],
            "reading_pattern": {
                "avg_time_spent": avg or 0.0,
                "preferred_length": _preferred_length(avg),
                "most_active_time": hours.most_common(1)[0][0] if hours else None,
            },
            "total_articles_read": len(views),
            "engagement_level": _engagement_level(events),
        }
