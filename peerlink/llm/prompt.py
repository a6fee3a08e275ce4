"""
peerlink/llm/prompt.py

Builds the compatibility-insight prompt from two profiles and the request context.

Constraints:
- Only symptoms, journal themes (never raw journal text), experience level,
  support preferences and communication style leave the process
- The model must answer with a single JSON object, no prose
"""
from __future__ import annotations

from typing import Sequence

from peerlink.core.text_processing import summarize_journal_themes
from peerlink.models import RecommendationContext, UserProfile

_SYSTEM_PROMPT = """\
You assess whether two members of a chronic-illness patient community would be a good \
peer-support connection.
Base your judgement only on the profile fields provided. Do not diagnose, do not give medical advice.
Respond with exactly one JSON object and nothing else:
{"insight": string, "adjustmentFactor": number, "confidence": number}
- insight: 2-3 sentences, warm and specific to the two profiles
- adjustmentFactor: between 0.8 and 1.2; 1.0 leaves the computed score unchanged
- confidence: between 0 and 100\
"""


def _join(items: Sequence[str], empty: str = "none listed") -> str:
    items = [i for i in (items or []) if i]
    return ", ".join(items) if items else empty


def _profile_block(profile: UserProfile) -> str:
    return f"""\
- Symptoms: {_join(profile.symptoms)}
- Recent journal themes: {summarize_journal_themes(profile.journal_entries)}
- Experience level: {profile.demographics.experience_level or "unknown"}
- Support preferences: {_join(profile.preferences.support_types)}
- Communication style: {profile.preferences.communication_style}"""


def build_insight_prompt(
        *,
        user: UserProfile,
        match: UserProfile,
        context: RecommendationContext,
) -> str:
    """
    Assemble the user-turn prompt. Returns a single string ready to send as the user message.
    """
    return f"""\
Analyze the compatibility between two patients for a peer support connection.

USER PROFILE:
{_profile_block(user)}

POTENTIAL MATCH PROFILE:
{_profile_block(match)}

CONTEXT:
- User's recent symptom changes: {"yes" if context.recent_symptom_changes else "no"}
- User's emotional state: {context.emotional_state.value}
- User's current support needs: {_join(context.support_needs)}

Provide:
1. A compatibility insight (2-3 sentences)
2. Score adjustment factor (0.8-1.2 to adjust the base score)
3. Confidence level (0-100)

Respond in JSON format:
{{"insight": "string", "adjustmentFactor": number, "confidence": number}}\
"""
