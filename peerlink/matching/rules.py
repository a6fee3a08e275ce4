"""
Match classification and human-readable reasons.

Both are fixed rule lists evaluated in order; the first matching rule wins
for classification, and reasons are collected until the cap is reached.
"""
from __future__ import annotations

import math
from typing import List

from peerlink import config
from peerlink.models import CompatibilityBreakdown, RecommendationType, UserProfile

URGENT_SUPPORT_TYPES = ("Crisis support", "Emotional support")
RESEARCH_INTEREST = "Research participation"


def _percent(fraction: float) -> int:
    # Half-up rounding; round() would turn 62.5 into 62
    return int(math.floor(fraction * 100 + 0.5))


def determine_recommendation_type(user: UserProfile, match: UserProfile) -> RecommendationType:
    support = user.preferences.support_types
    if any(t in support for t in URGENT_SUPPORT_TYPES):
        return RecommendationType.URGENT_SUPPORT

    if (
            user.demographics.experience_level == "newly_diagnosed"
            and match.demographics.experience_level == "long_term"
    ):
        return RecommendationType.MENTOR

    if (
            RESEARCH_INTEREST in user.preferences.interests
            and RESEARCH_INTEREST in match.preferences.interests
    ):
        return RecommendationType.RESEARCH_PARTNER

    return RecommendationType.PEER_BUDDY


def generate_reasons(
        user: UserProfile,
        match: UserProfile,
        compatibility: CompatibilityBreakdown,
        *,
        max_reasons: int = config.MAX_REASONS,
) -> List[str]:
    reasons: List[str] = []

    if compatibility.symptom_overlap > 0.6:
        reasons.append(f"High symptom overlap ({_percent(compatibility.symptom_overlap)}%)")

    if compatibility.interest_alignment > 0.5:
        reasons.append("Shared interests and coping strategies")

    if compatibility.communication_match == 1.0:
        reasons.append("Compatible communication preferences")

    if compatibility.experience_match > 0.7:
        reasons.append("Similar experience level")

    if match.activity.response_rate > 0.8:
        reasons.append("Highly responsive community member")

    match_support = set(match.preferences.support_types)
    common_support = [t for t in user.preferences.support_types if t in match_support]
    if common_support:
        reasons.append(f"Shared support focus: {common_support[0]}")

    return reasons[:max_reasons]
