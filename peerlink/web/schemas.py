"""
Request and response models for the HTTP API.

Field names are snake_case in Python and camelCase on the wire.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from peerlink.models import ConnectionAnalytics, ConnectionRecommendation


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PeerRecommendationRequest(CamelModel):
    user_id: Optional[str] = Field(default=None, description="User to recommend peers for")


class CompatibilityModel(CamelModel):
    symptom_overlap: float
    interest_alignment: float
    communication_match: float
    experience_match: float
    activity_match: float


class RecommendationModel(CamelModel):
    target_user_id: str
    score: float
    reasons: List[str]
    compatibility: CompatibilityModel
    recommendation_type: str
    confidence: float
    ai_insight: str

    @classmethod
    def from_domain(cls, rec: ConnectionRecommendation) -> "RecommendationModel":
        return cls(
            target_user_id=rec.target_user_id,
            score=rec.score,
            reasons=list(rec.reasons),
            compatibility=CompatibilityModel(**rec.compatibility.to_dict()),
            recommendation_type=rec.recommendation_type.value,
            confidence=rec.confidence,
            ai_insight=rec.ai_insight,
        )


class PeerRecommendationsResponse(CamelModel):
    success: bool = True
    recommendations: List[RecommendationModel]
    total_evaluated: int
    timestamp: datetime


class ConnectionAnalyticsModel(CamelModel):
    success_rate: float
    preferred_types: List[str]
    recommendations: List[str]

    @classmethod
    def from_domain(cls, analytics: ConnectionAnalytics) -> "ConnectionAnalyticsModel":
        return cls(**analytics.to_dict())


class ConnectionAnalyticsResponse(CamelModel):
    success: bool = True
    analytics: ConnectionAnalyticsModel
    connection_count: int
