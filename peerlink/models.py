from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class EmotionalState(str, Enum):
    STRUGGLING = "struggling"
    STABLE = "stable"
    IMPROVING = "improving"


class RecommendationType(str, Enum):
    URGENT_SUPPORT = "urgent_support"
    PEER_BUDDY = "peer_buddy"
    MENTOR = "mentor"
    RESEARCH_PARTNER = "research_partner"


class ConnectionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_whitespace(text: str) -> str:
    return " ".join((text or "").split()).strip()


def _clean_list(items: Optional[List[str]]) -> List[str]:
    # Non-string tags from hand-edited documents are dropped
    return [normalize_whitespace(s) for s in (items or []) if isinstance(s, str) and normalize_whitespace(s)]


@dataclass(frozen=True)
class Demographics:
    age: Optional[int] = None
    location: Optional[str] = None
    experience_level: Optional[str] = None  # "newly_diagnosed" | "experienced" | "long_term"


@dataclass(frozen=True)
class MatchingPreferences:
    support_types: List[str] = field(default_factory=list)
    interests: List[str] = field(default_factory=list)
    communication_style: str = "occasional"
    privacy_level: str = "selective"

    def __post_init__(self) -> None:
        object.__setattr__(self, "support_types", _clean_list(self.support_types))
        object.__setattr__(self, "interests", _clean_list(self.interests))


@dataclass(frozen=True)
class ActivityLevel:
    last_active: datetime = field(default_factory=utc_now)
    engagement_score: float = 0.0  # 0-100
    response_rate: float = 0.0  # 0-1


@dataclass(frozen=True)
class UserProfile:
    """
    Everything the recommendation engine knows about one community member.
    Journal and symptom entries are kept as raw store documents.
    """
    user_id: str
    symptoms: List[str] = field(default_factory=list)
    journal_entries: List[Dict[str, Any]] = field(default_factory=list)
    symptom_entries: List[Dict[str, Any]] = field(default_factory=list)
    demographics: Demographics = field(default_factory=Demographics)
    preferences: MatchingPreferences = field(default_factory=MatchingPreferences)
    activity: ActivityLevel = field(default_factory=ActivityLevel)

    def __post_init__(self) -> None:
        object.__setattr__(self, "symptoms", _clean_list(self.symptoms))

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["activity"]["last_active"] = self.activity.last_active.isoformat()
        return d


@dataclass(frozen=True)
class RecommendationContext:
    """
    Per-request signals about the requesting user. Never persisted.
    """
    recent_symptom_changes: bool = False
    emotional_state: EmotionalState = EmotionalState.STABLE
    support_needs: List[str] = field(default_factory=list)
    time_of_request: datetime = field(default_factory=utc_now)
    previous_connections: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recent_symptom_changes": self.recent_symptom_changes,
            "emotional_state": self.emotional_state.value,
            "support_needs": list(self.support_needs),
            "time_of_request": self.time_of_request.isoformat(),
            "previous_connections": list(self.previous_connections),
        }


@dataclass(frozen=True)
class CompatibilityBreakdown:
    symptom_overlap: float
    interest_alignment: float
    communication_match: float
    experience_match: float
    activity_match: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ConnectionRecommendation:
    target_user_id: str
    score: float
    reasons: List[str]
    compatibility: CompatibilityBreakdown
    recommendation_type: RecommendationType
    confidence: float
    ai_insight: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_user_id": self.target_user_id,
            "score": self.score,
            "reasons": list(self.reasons),
            "compatibility": self.compatibility.to_dict(),
            "recommendation_type": self.recommendation_type.value,
            "confidence": self.confidence,
            "ai_insight": self.ai_insight,
        }


@dataclass(frozen=True)
class ConnectionRecord:
    """
    One outgoing peer connection request and its outcome.
    """
    to_user_id: str
    status: ConnectionStatus = ConnectionStatus.PENDING
    connection_type: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ConnectionRecord":
        # Exact match: "Accepted" is not an accepted request
        try:
            status = ConnectionStatus(doc.get("status"))
        except (TypeError, ValueError):
            status = ConnectionStatus.PENDING
        return cls(
            to_user_id=doc.get("toUserId") or "",
            status=status,
            connection_type=doc.get("connectionType"),
        )


@dataclass(frozen=True)
class ConnectionAnalytics:
    success_rate: float
    preferred_types: List[str]
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
