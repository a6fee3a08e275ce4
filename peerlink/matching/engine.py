from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from peerlink.models import CompatibilityBreakdown, UserProfile

from .rules import determine_recommendation_type, generate_reasons
from .scoring import (
    activity_match_score,
    clamp,
    communication_match_score,
    experience_match_score,
    interest_alignment_score,
    symptom_overlap_score,
)
from .types import ScoredPeer


# Fixed product weighting: symptom overlap dominates, activity breaks ties.
DEFAULT_WEIGHTS = {
    "symptom": 0.35,
    "interest": 0.25,
    "communication": 0.15,
    "experience": 0.15,
    "activity": 0.10,
}


def compute_compatibility(user: UserProfile, match: UserProfile) -> CompatibilityBreakdown:
    return CompatibilityBreakdown(
        symptom_overlap=symptom_overlap_score(user.symptoms, match.symptoms),
        interest_alignment=interest_alignment_score(
            user.preferences.interests, match.preferences.interests
        ),
        communication_match=communication_match_score(
            user.preferences.communication_style, match.preferences.communication_style
        ),
        experience_match=experience_match_score(
            user.demographics.experience_level, match.demographics.experience_level
        ),
        activity_match=activity_match_score(
            user.activity.engagement_score, match.activity.engagement_score
        ),
    )


def base_score(compatibility: CompatibilityBreakdown, weights: Optional[Dict[str, float]] = None) -> float:
    w = dict(DEFAULT_WEIGHTS)
    if weights:
        w.update(weights)

    total = (
            (compatibility.symptom_overlap * w["symptom"])
            + (compatibility.interest_alignment * w["interest"])
            + (compatibility.communication_match * w["communication"])
            + (compatibility.experience_match * w["experience"])
            + (compatibility.activity_match * w["activity"])
    )
    return clamp(total * 100.0, 0.0, 100.0)


def score_peer(user: UserProfile, match: UserProfile, weights: Optional[Dict[str, float]] = None) -> ScoredPeer:
    compatibility = compute_compatibility(user, match)
    return ScoredPeer(
        match=match,
        score=base_score(compatibility, weights),
        reasons=generate_reasons(user, match, compatibility),
        compatibility=compatibility,
        recommendation_type=determine_recommendation_type(user, match),
    )


def rank_peers(user: UserProfile, candidates: Sequence[UserProfile], top_n: int = 10) -> List[ScoredPeer]:
    """Deterministic ranking only; no AI adjustment. Ties keep input order."""
    scored = [score_peer(user, c) for c in candidates]
    scored.sort(key=lambda x: x.score, reverse=True)
    return scored[:top_n]
