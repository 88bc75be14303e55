from typing import Annotated
from fastapi import Depends, Request

from .engine import AnalyticsEngine


def get_analytics_engine(request: Request) -> AnalyticsEngine:
    return request.app.state.analytics


AnalyticsDep = Annotated[AnalyticsEngine, Depends(get_analytics_engine)]
