# blogcore/api/analytics/rules.py
# Recommendation rules: pure (candidate, session context) -> 0..100 scorers
# paired with a weight. The ranker only sums weighted sub-scores.
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional, Tuple

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class Candidate:
    article_id: int
    category_id: Optional[int]
    reading_time_seconds: Optional[float]
    published_at: datetime
    engagement_score: float = 0.0


@dataclass(frozen=True)
class SessionContext:
    session_id: str
    category_views: Mapping[int, int]
    avg_time_spent: Optional[float]
    now: datetime


ScoringFn = Callable[[Candidate, SessionContext], float]


@dataclass(frozen=True)
class RecommendationRule:
    id: str
    name: str
    weight: float
    score: ScoringFn
    active: bool = True


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def category_affinity(candidate: Candidate, ctx: SessionContext) -> float:
    """Share of the session's views in the candidate's category, relative to its favourite."""
    if candidate.category_id is None or not ctx.category_views:
        return 0.0
    top = max(ctx.category_views.values())
    if top <= 0:
        return 0.0
    return _clamp(100.0 * ctx.category_views.get(candidate.category_id, 0) / top)


def reading_time_similarity(candidate: Candidate, ctx: SessionContext) -> float:
    # loses 10 points per minute between what the session reads and the article length
    if ctx.avg_time_spent is None or candidate.reading_time_seconds is None:
        return 0.0
    diff = abs(ctx.avg_time_spent - candidate.reading_time_seconds)
    return _clamp(100.0 - (diff / 60.0) * 10.0)


def engagement(candidate: Candidate, ctx: SessionContext) -> float:
    return _clamp(candidate.engagement_score)


def recency(candidate: Candidate, ctx: SessionContext) -> float:
    days = (ctx.now - candidate.published_at).total_seconds() / SECONDS_PER_DAY
    return _clamp(100.0 - days * 5.0)


DEFAULT_RULES: Tuple[RecommendationRule, ...] = (
    RecommendationRule("same-category", "Same Category Preference", 0.4, category_affinity),
    RecommendationRule("reading-time", "Reading Time Similarity", 0.3, reading_time_similarity),
    RecommendationRule("trending", "Trending Content", 0.2, engagement),
    RecommendationRule("recency", "Recent Content", 0.1, recency),
)
