from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Sequence, Union

from peerlink.models import ConnectionAnalytics, ConnectionRecord, ConnectionStatus

logger = logging.getLogger(__name__)

MAX_ADVICE = 3


def _fallback() -> ConnectionAnalytics:
    return ConnectionAnalytics(
        success_rate=0.0,
        preferred_types=[],
        recommendations=["Complete your profile to improve matching accuracy"],
    )


def _as_record(conn: Union[ConnectionRecord, Dict[str, Any]]) -> ConnectionRecord:
    if isinstance(conn, ConnectionRecord):
        return conn
    return ConnectionRecord.from_document(conn)


def connection_advice(success_rate: float, preferred_types: Sequence[str]) -> List[str]:
    advice: List[str] = []

    if success_rate < 0.3:
        advice.append("Consider updating your preferences to find better matches")
        advice.append("Add more details to your profile for improved compatibility")
    elif success_rate < 0.6:
        advice.append("Try connecting with users who share your primary symptoms")
        advice.append("Look for matches with similar experience levels")
    else:
        advice.append("Your connection rate is excellent! Keep engaging actively")
        advice.append("Consider mentoring newer community members")

    if preferred_types:
        advice.append(f"Focus on {preferred_types[0]} connections based on your history")

    return advice[:MAX_ADVICE]


def analyze_connection_success(
        user_id: str,
        connections: Sequence[Union[ConnectionRecord, Dict[str, Any]]],
) -> ConnectionAnalytics:
    """
    Acceptance rate of a user's outgoing requests, the connection types that
    were accepted most often (ties keep first-seen order) and up to three
    pieces of advice.
    """
    try:
        records = [_as_record(c) for c in connections or []]
        accepted = [r for r in records if r.status == ConnectionStatus.ACCEPTED]
        success_rate = len(accepted) / max(len(records), 1)

        # Counter.most_common keeps insertion order for equal counts
        frequency = Counter(r.connection_type for r in accepted if r.connection_type)
        preferred_types = [t for t, _ in frequency.most_common()]

        return ConnectionAnalytics(
            success_rate=success_rate,
            preferred_types=preferred_types,
            recommendations=connection_advice(success_rate, preferred_types),
        )
    except Exception:
        logger.exception("Error analyzing connection success for user %s", user_id)
        return _fallback()
