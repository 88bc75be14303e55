# blogcore/api/analytics/schemas.py
from typing import Any, Dict, Optional
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from blogcore.db.models import naive_utc, utcnow

from .models import BehaviorAction, BehaviorEvent


class BehaviorEventIn(BaseModel):
    session_id: str = Field(min_length=1, max_length=200)
    article_id: int = Field(ge=1)
    action: BehaviorAction
    timestamp: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("timestamp")
    @classmethod
    def _naive_utc(cls, v):
        return naive_utc(v)

    def to_event(self) -> BehaviorEvent:
        return BehaviorEvent(
            session_id=self.session_id,
            article_id=self.article_id,
            action=self.action,
            timestamp=self.timestamp or utcnow(),
            metadata=dict(self.metadata),
        )
