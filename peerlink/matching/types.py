from __future__ import annotations

from dataclasses import dataclass
from typing import List

from peerlink.models import CompatibilityBreakdown, RecommendationType, UserProfile


@dataclass(frozen=True)
class ScoredPeer:
    """Deterministic result for one candidate, before any AI adjustment."""
    match: UserProfile
    score: float  # 0-100
    reasons: List[str]
    compatibility: CompatibilityBreakdown
    recommendation_type: RecommendationType
