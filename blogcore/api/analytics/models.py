# blogcore/api/analytics/models.py
# In-memory analytics records. Nothing here is persisted; the event log is the
# source of truth for every aggregate and both reset on restart.
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class BehaviorAction(str, Enum):
    VIEW = "view"
    SCROLL = "scroll"
    SHARE = "share"
    LIKE = "like"
    COMMENT = "comment"


ENGAGEMENT_ACTIONS = {BehaviorAction.SHARE, BehaviorAction.LIKE, BehaviorAction.COMMENT}


@dataclass
class BehaviorEvent:
    session_id: str
    article_id: int
    action: BehaviorAction
    timestamp: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def time_spent(self) -> Optional[float]:
        value = self.metadata.get("time_spent")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)


@dataclass
class ContentPerformance:
    article_id: int
    views: int = 0
    unique_views: int = 0
    avg_time_spent: float = 0.0
    share_count: int = 0
    engagement_score: float = 0.0
    trending: bool = False
    last_updated: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
