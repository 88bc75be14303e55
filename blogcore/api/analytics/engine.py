# blogcore/api/analytics/engine.py
import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from blogcore.api.articles.service import ArticleService
from blogcore.config import Settings
from blogcore.db.models import utcnow

from .models import BehaviorEvent, ContentPerformance
from .ranker import RecommendationRanker
from .scorer import EngagementScorer
from .tracker import BehaviorTracker

logger = logging.getLogger(__name__)


class AnalyticsEngine:
    """
    Owns the behavior log, the aggregates and the ranker for one process.

    Created once at startup and kept on ``app.state``; tests build their own.
    None of the in-memory operations await, so handlers never interleave a
    half-applied update.
    """

    def __init__(
        self,
        *,
        retention_days: int = 30,
        candidate_limit: int = 100,
        result_limit: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.scorer = EngagementScorer()
        self.tracker = BehaviorTracker(self.scorer, retention_days=retention_days, clock=clock)
        self.ranker = RecommendationRanker(
            self.tracker,
            self.scorer,
            candidate_limit=candidate_limit,
            result_limit=result_limit,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalyticsEngine":
        return cls(
            retention_days=settings.BEHAVIOR_RETENTION_DAYS,
            candidate_limit=settings.RECOMMENDATION_CANDIDATES,
            result_limit=settings.RECOMMENDATION_LIMIT,
        )

    # ---------- ingestion ----------
    def track_behavior(self, event: BehaviorEvent) -> bool:
        return self.tracker.track_behavior(event)

    # ---------- aggregates ----------
    def get_content_performance(self, article_id: Optional[int] = None) -> List[ContentPerformance]:
        self.tracker.refresh_trending()
        return self.scorer.get_content_performance(article_id)

    def get_trending_content(self, limit: int = 10) -> List[ContentPerformance]:
        # the 24h window keeps moving between events
        self.tracker.refresh_trending()
        return self.scorer.get_trending_content(limit)

    # ---------- per session ----------
    async def get_user_insights(self, articles: ArticleService, session_id: str) -> Dict[str, Any]:
        viewed = self.tracker.viewed_article_ids(session_id)
        article_categories = await articles.category_ids_for(viewed)
        return self.tracker.get_user_insights(session_id, article_categories)

    async def generate_personalized_recommendations(
        self,
        articles: ArticleService,
        session_id: str,
        current_article_id: Optional[int] = None,
    ) -> List[int]:
        return await self.ranker.generate_personalized_recommendations(
            articles, session_id, current_article_id
        )

    # ---------- retention ----------
    def sweep(self) -> int:
        return self.tracker.prune()

    async def run_sweeper(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                self.sweep()
            except Exception:
                logger.exception("analytics sweep failed")
