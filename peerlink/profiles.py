"""
Builds engine inputs (UserProfile, RecommendationContext) from the document store.

Every builder here degrades instead of raising: a profile that cannot be read
is None, a candidate pool that cannot be read is empty, and a context that
cannot be read is neutral.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from peerlink import config
from peerlink.core.text_processing import (
    IMPROVING_WORDS,
    STRUGGLING_WORDS,
    SUPPORT_NEED_TRIGGERS,
    count_present,
    joined_text,
)
from peerlink.models import (
    ActivityLevel,
    Demographics,
    EmotionalState,
    MatchingPreferences,
    RecommendationContext,
    UserProfile,
    utc_now,
)
from peerlink.store import DocumentStore

logger = logging.getLogger(__name__)

ACTIVITY_WINDOW = timedelta(days=7)
SYMPTOM_ENTRY_POINTS = 10
JOURNAL_ENTRY_POINTS = 15
# No interaction data is collected yet
DEFAULT_RESPONSE_RATE = 0.8
HIGH_INTENSITY = 7
MAX_SUPPORT_NEEDS = 3


def _intensity(entry: Dict[str, Any]) -> float:
    try:
        return float(entry.get("intensity") or 0)
    except (TypeError, ValueError):
        return 0.0


def _unique_symptoms(symptom_entries: Sequence[Dict[str, Any]]) -> List[str]:
    out: List[str] = []
    seen = set()
    for entry in symptom_entries:
        for s in entry.get("symptoms") or []:
            if not isinstance(s, str) or s in seen:
                continue
            seen.add(s)
            out.append(s)
    return out


def _preferences_from_document(doc: Optional[Dict[str, Any]]) -> MatchingPreferences:
    if not doc:
        return MatchingPreferences()
    return MatchingPreferences(
        support_types=list(doc.get("supportType") or []),
        interests=list(doc.get("interests") or []),
        communication_style=doc.get("communicationStyle") or "occasional",
        privacy_level=doc.get("privacyLevel") or "selective",
    )


def calculate_activity_level(
        user_doc: Dict[str, Any],
        symptom_entries: Sequence[Dict[str, Any]],
        journal_entries: Sequence[Dict[str, Any]],
        *,
        now: Optional[datetime] = None,
) -> ActivityLevel:
    now = now or utc_now()
    cutoff = now - ACTIVITY_WINDOW

    def _recent(entries: Sequence[Dict[str, Any]]) -> int:
        return sum(1 for e in entries if e.get("createdAt") and e["createdAt"] > cutoff)

    engagement = min(
        100,
        _recent(symptom_entries) * SYMPTOM_ENTRY_POINTS + _recent(journal_entries) * JOURNAL_ENTRY_POINTS,
    )
    return ActivityLevel(
        last_active=user_doc.get("lastLogin") or now,
        engagement_score=float(engagement),
        response_rate=DEFAULT_RESPONSE_RATE,
    )


def build_user_profile(
        store: DocumentStore,
        user_id: str,
        *,
        now: Optional[datetime] = None,
) -> Optional[UserProfile]:
    """
    None when the user does not exist or any of their documents cannot be
    turned into a profile. An empty user document is still a user.
    """
    try:
        user_doc = store.get_user(user_id)
        if user_doc is None:
            return None

        symptom_entries = store.symptom_entries(user_id, limit=config.PROFILE_SYMPTOM_ENTRIES)
        journal_entries = store.journal_entries(user_id, limit=config.PROFILE_JOURNAL_ENTRIES)

        return UserProfile(
            user_id=user_id,
            symptoms=_unique_symptoms(symptom_entries),
            journal_entries=journal_entries,
            symptom_entries=symptom_entries,
            demographics=Demographics(
                age=user_doc.get("age"),
                location=user_doc.get("location"),
                experience_level=user_doc.get("experienceLevel"),
            ),
            preferences=_preferences_from_document(store.matching_preferences(user_id)),
            activity=calculate_activity_level(user_doc, symptom_entries, journal_entries, now=now),
        )
    except Exception as exc:
        logger.error("Failed to build profile for user %s: %s", user_id, exc)
        return None


def get_potential_matches(
        store: DocumentStore,
        current_user_id: str,
        *,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
) -> List[UserProfile]:
    """Profiles of the first `limit` other users; unreadable ones are skipped."""
    limit = config.CANDIDATE_POOL_LIMIT if limit is None else limit
    try:
        user_ids = [uid for uid in store.list_user_ids() if uid != current_user_id]
    except Exception as exc:
        logger.error("Failed to list candidate users: %s", exc)
        return []

    profiles: List[UserProfile] = []
    for uid in user_ids[:limit]:
        profile = build_user_profile(store, uid, now=now)
        if profile is not None:
            profiles.append(profile)
    return profiles


def detect_symptom_changes(recent_symptoms: Sequence[Dict[str, Any]]) -> bool:
    """
    True when the two newest entries average more than one intensity point
    above the older baseline. Needs at least three entries.
    """
    if len(recent_symptoms) < 3:
        return False
    intensities = [_intensity(s) for s in recent_symptoms]
    recent = sum(intensities[:2]) / 2
    baseline = sum(intensities[2:]) / max(1, len(intensities) - 2)
    return recent > baseline + 1


def assess_emotional_state(recent_journals: Sequence[Dict[str, Any]]) -> EmotionalState:
    if not recent_journals:
        return EmotionalState.STABLE

    content = joined_text(recent_journals)
    struggling = count_present(content, STRUGGLING_WORDS)
    improving = count_present(content, IMPROVING_WORDS)

    if struggling > improving + 1:
        return EmotionalState.STRUGGLING
    if improving > struggling + 1:
        return EmotionalState.IMPROVING
    return EmotionalState.STABLE


def derive_support_needs(
        recent_symptoms: Sequence[Dict[str, Any]],
        recent_journals: Sequence[Dict[str, Any]],
) -> List[str]:
    needs: List[str] = []

    if any(_intensity(s) > HIGH_INTENSITY for s in recent_symptoms):
        needs.append("Symptom management support")

    content = joined_text(recent_journals)
    for need, triggers in SUPPORT_NEED_TRIGGERS:
        if count_present(content, triggers):
            needs.append(need)

    return needs[:MAX_SUPPORT_NEEDS]


def build_recommendation_context(
        store: DocumentStore,
        user_id: str,
        *,
        now: Optional[datetime] = None,
) -> RecommendationContext:
    now = now or utc_now()
    try:
        recent_symptoms = store.symptom_entries(user_id, limit=config.CONTEXT_SYMPTOM_ENTRIES)
        recent_journals = store.journal_entries(user_id, limit=config.CONTEXT_JOURNAL_ENTRIES)
        connections = store.peer_connections(user_id)
    except Exception as exc:
        logger.error("Failed to build recommendation context for user %s: %s", user_id, exc)
        return RecommendationContext(time_of_request=now)

    return RecommendationContext(
        recent_symptom_changes=detect_symptom_changes(recent_symptoms),
        emotional_state=assess_emotional_state(recent_journals),
        support_needs=derive_support_needs(recent_symptoms, recent_journals),
        time_of_request=now,
        previous_connections=[c["toUserId"] for c in connections if c.get("toUserId")],
    )
