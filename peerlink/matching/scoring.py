from __future__ import annotations

from typing import Iterable, Optional, Sequence

# Ordinal experience levels, least to most experienced.
EXPERIENCE_LEVELS = ("newly_diagnosed", "experienced", "long_term")

# Distance in EXPERIENCE_LEVELS -> score. Only three levels exist today;
# adding a level means revisiting this table.
_EXPERIENCE_DISTANCE_SCORES = {0: 1.0, 1: 0.7, 2: 0.4}


def clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else (1.0 if x > 1.0 else x)


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else (hi if x > hi else x)


def symptom_overlap_score(user_symptoms: Iterable[str], match_symptoms: Iterable[str]) -> float:
    """
    Shared symptoms over the larger of the two symptom sets.
    Symmetric; two empty sets give 0.0.
    """
    a = set(user_symptoms or [])
    b = set(match_symptoms or [])
    return clamp01(len(a & b) / max(len(a), len(b), 1))


def interest_alignment_score(user_interests: Sequence[str], match_interests: Sequence[str]) -> float:
    """
    Fraction of the requester's interests the candidate shares.
    Not symmetric: normalized by the requester's list only.
    """
    user_interests = list(user_interests or [])
    other = set(match_interests or [])
    common = [i for i in user_interests if i in other]
    return clamp01(len(common) / max(len(user_interests), 1))


def communication_match_score(user_style: Optional[str], match_style: Optional[str]) -> float:
    return 1.0 if user_style == match_style else 0.5


def experience_match_score(user_level: Optional[str], match_level: Optional[str]) -> float:
    if not user_level or not match_level:
        return 0.5
    if user_level not in EXPERIENCE_LEVELS or match_level not in EXPERIENCE_LEVELS:
        return 0.5
    distance = abs(EXPERIENCE_LEVELS.index(user_level) - EXPERIENCE_LEVELS.index(match_level))
    return _EXPERIENCE_DISTANCE_SCORES.get(distance, 0.4)


def activity_match_score(user_engagement: Optional[float], match_engagement: Optional[float]) -> float:
    # Missing engagement counts as zero activity
    a = float(user_engagement or 0.0)
    b = float(match_engagement or 0.0)
    return clamp01(max(0.0, 1.0 - abs(a - b) / 100.0))
