# blogcore/api/analytics/ranker.py
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from blogcore.api.articles.service import ArticleService

from .rules import DEFAULT_RULES, Candidate, RecommendationRule, SessionContext
from .scorer import EngagementScorer
from .tracker import BehaviorTracker, average_time_spent


class RecommendationRanker:
    def __init__(
        self,
        tracker: BehaviorTracker,
        scorer: EngagementScorer,
        rules: Sequence[RecommendationRule] = DEFAULT_RULES,
        *,
        candidate_limit: int = 100,
        result_limit: int = 5,
    ):
        self.tracker = tracker
        self.scorer = scorer
        self.rules = list(rules)
        self.candidate_limit = candidate_limit
        self.result_limit = result_limit

    def session_context(
        self,
        session_id: str,
        article_categories: Mapping[int, Optional[int]],
        now: datetime,
    ) -> SessionContext:
        category_views: Counter = Counter()
        for article_id in self.tracker.viewed_article_ids(session_id):
            cid = article_categories.get(article_id)
            if cid is not None:
                category_views[cid] += 1
        return SessionContext(
            session_id=session_id,
            category_views=dict(category_views),
            avg_time_spent=average_time_spent(self.tracker.events_for_session(session_id)),
            now=now,
        )

    def candidate_from_row(self, row: Dict[str, Any]) -> Candidate:
        minutes = row.get("reading_time")
        return Candidate(
            article_id=row["id"],
            category_id=row.get("category_id"),
            reading_time_seconds=minutes * 60.0 if minutes is not None else None,
            published_at=row.get("published_at") or row["created_at"],
            engagement_score=self.scorer.engagement_for(row["id"]),
        )

    def score(self, candidate: Candidate, ctx: SessionContext) -> float:
        return sum(rule.score(candidate, ctx) * rule.weight for rule in self.rules if rule.active)

    def rank(
        self,
        candidates: Iterable[Candidate],
        ctx: SessionContext,
        exclude_article_id: Optional[int] = None,
    ) -> List[int]:
        scored = [
            (c.article_id, self.score(c, ctx))
            for c in candidates
            if c.article_id != exclude_article_id
        ]
        # stable: equal scores keep candidate order (newest first)
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return [article_id for article_id, _ in scored[: self.result_limit]]

    async def generate_personalized_recommendations(
        self,
        articles: ArticleService,
        session_id: str,
        exclude_article_id: Optional[int] = None,
    ) -> List[int]:
        rows = await articles.recent_published(self.candidate_limit)
        article_categories = await articles.category_ids_for(
            self.tracker.viewed_article_ids(session_id)
        )
        ctx = self.session_context(session_id, article_categories, self.tracker.now())
        return self.rank((self.candidate_from_row(r) for r in rows), ctx, exclude_article_id)
