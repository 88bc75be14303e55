# blogcore/api/analytics/router.py
from typing import Optional
from fastapi import APIRouter, Query, status

from blogcore.api.articles.dependencies import ArticleServiceDep

from .dependencies import AnalyticsDep
from .schemas import BehaviorEventIn

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.post("/track", status_code=status.HTTP_202_ACCEPTED, summary="Record a behavior event")
async def track(body: BehaviorEventIn, analytics: AnalyticsDep):
    # a failed track is logged inside the tracker, the caller still gets 202
    tracked = analytics.track_behavior(body.to_event())
    return {"success": tracked}


@router.get("/performance", summary="Engagement aggregates for every tracked article")
async def performance_all(analytics: AnalyticsDep):
    return [p.to_dict() for p in analytics.get_content_performance()]


@router.get("/performance/{article_id}", summary="Engagement aggregate for one article")
async def performance_one(article_id: int, analytics: AnalyticsDep):
    return [p.to_dict() for p in analytics.get_content_performance(article_id)]


@router.get("/trending", summary="Trending articles by engagement score")
async def trending(analytics: AnalyticsDep, limit: int = Query(10, ge=1, le=100)):
    return [p.to_dict() for p in analytics.get_trending_content(limit)]


@router.get("/recommendations/{session_id}", summary="Personalised article ids for a session")
async def recommendations(
    session_id: str,
    analytics: AnalyticsDep,
    articles: ArticleServiceDep,
    current_article_id: Optional[int] = None,
):
    return await analytics.generate_personalized_recommendations(
        articles, session_id, current_article_id
    )


@router.get("/insights/{session_id}", summary="Reading insights for a session")
async def insights(session_id: str, analytics: AnalyticsDep, articles: ArticleServiceDep):
    return await analytics.get_user_insights(articles, session_id)
