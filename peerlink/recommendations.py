from __future__ import annotations

import argparse
import asyncio
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from peerlink import config
from peerlink.llm.insight import (
    CALL_FALLBACK,
    MAX_ADJUSTMENT,
    MIN_ADJUSTMENT,
    PARSE_FALLBACK,
    AIInsight,
    InsightParseError,
    InsightProvider,
    insight_client_from_config,
)
from peerlink.matching.engine import score_peer
from peerlink.matching.scoring import clamp
from peerlink.matching.types import ScoredPeer
from peerlink.models import (
    ConnectionRecommendation,
    RecommendationContext,
    UserProfile,
    utc_now,
)
from peerlink.profiles import (
    build_recommendation_context,
    build_user_profile,
    get_potential_matches,
)
from peerlink.store import DocumentStore, JsonDocumentStore, default_data_dir

logger = logging.getLogger(__name__)


def adjust_score(base: float, adjustment_factor: float) -> float:
    factor = clamp(adjustment_factor, MIN_ADJUSTMENT, MAX_ADJUSTMENT)
    return clamp(base * factor, 0.0, 100.0)


async def resolve_insight(
        client: Optional[InsightProvider],
        *,
        user: UserProfile,
        match: UserProfile,
        context: RecommendationContext,
        timeout: float,
) -> AIInsight:
    """
    Never raises except on cancellation: every failure maps to a fallback insight.
    """
    if client is None:
        return CALL_FALLBACK
    try:
        return await asyncio.wait_for(
            client.generate(user=user, match=match, context=context),
            timeout=timeout,
        )
    except InsightParseError as exc:
        logger.warning("Unusable AI insight for candidate %s: %s", match.user_id, exc)
        return PARSE_FALLBACK
    except asyncio.TimeoutError:
        logger.warning("AI insight for candidate %s timed out after %ss", match.user_id, timeout)
        return CALL_FALLBACK
    except Exception as exc:
        logger.warning("AI insight failed for candidate %s: %s", match.user_id, exc)
        return CALL_FALLBACK


def _to_recommendation(scored: ScoredPeer, insight: AIInsight) -> ConnectionRecommendation:
    return ConnectionRecommendation(
        target_user_id=scored.match.user_id,
        score=adjust_score(scored.score, insight.adjustment_factor),
        reasons=list(scored.reasons),
        compatibility=scored.compatibility,
        recommendation_type=scored.recommendation_type,
        confidence=clamp(float(insight.confidence), 0.0, 100.0),
        ai_insight=insight.insight,
    )


def _eligible(user: UserProfile, candidates: Sequence[UserProfile], context: RecommendationContext) -> List[UserProfile]:
    skip = set(context.previous_connections or [])
    skip.add(user.user_id)
    return [c for c in candidates if c.user_id not in skip]


async def generate_recommendations(
        user: UserProfile,
        candidates: Sequence[UserProfile],
        context: RecommendationContext,
        *,
        insight_client: Optional[InsightProvider] = None,
        timeout: Optional[float] = None,
        limit: Optional[int] = None,
) -> List[ConnectionRecommendation]:
    """
    Score every eligible candidate, refine each score with one AI insight,
    and return the best `limit` matches, highest score first.

    Insight calls run concurrently and independently. Cancelling this
    coroutine cancels every in-flight call. Any other failure yields [].
    """
    timeout = config.LLM_TIMEOUT_SECONDS if timeout is None else timeout
    limit = config.MAX_RECOMMENDATIONS if limit is None else min(limit, config.MAX_RECOMMENDATIONS)
    try:
        pool = _eligible(user, candidates, context)
        scored = [score_peer(user, c) for c in pool]

        insights = await asyncio.gather(
            *(
                resolve_insight(insight_client, user=user, match=s.match, context=context, timeout=timeout)
                for s in scored
            )
        )

        recommendations = [_to_recommendation(s, i) for s, i in zip(scored, insights)]
        # list.sort is stable: equal scores keep candidate order
        recommendations.sort(key=lambda r: r.score, reverse=True)
        return recommendations[:limit]
    except Exception:
        logger.exception("Error generating peer recommendations for user %s", user.user_id)
        return []


@dataclass(frozen=True)
class PeerRecommendationResult:
    user_id: str
    recommendations: List[ConnectionRecommendation]
    total_evaluated: int
    timestamp: datetime
    duration_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "total_evaluated": self.total_evaluated,
            "timestamp": self.timestamp.isoformat(),
            "duration_ms": self.duration_ms,
        }


async def recommend_for_user(
        store: DocumentStore,
        user_id: str,
        *,
        insight_client: Optional[InsightProvider] = None,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
) -> Optional[PeerRecommendationResult]:
    """
    Full pass for one user straight from the store.
    Returns None when the user's profile cannot be built.
    """
    start = time.time()
    now = now or utc_now()

    profile = build_user_profile(store, user_id, now=now)
    if profile is None:
        return None

    candidates = get_potential_matches(store, user_id, now=now)
    context = build_recommendation_context(store, user_id, now=now)

    recommendations = await generate_recommendations(
        profile,
        candidates,
        context,
        insight_client=insight_client,
        limit=limit,
    )
    logger.info(
        "Recommended %d of %d candidates for user %s",
        len(recommendations), len(candidates), user_id,
    )

    return PeerRecommendationResult(
        user_id=user_id,
        recommendations=recommendations,
        total_evaluated=len(candidates),
        timestamp=now,
        duration_ms=int((time.time() - start) * 1000),
    )


def print_human_summary(result: PeerRecommendationResult) -> None:
    print("\n=== PeerLink Recommendations ===")
    print(f"User: {result.user_id}")
    print(f"Candidates evaluated: {result.total_evaluated}")
    print(f"Duration: {result.duration_ms}ms")

    if not result.recommendations:
        print("\nNo recommendations yet. Log symptoms and set matching preferences to find peers.")
        return

    for idx, r in enumerate(result.recommendations, start=1):
        print(f"\n{idx}) {r.target_user_id}  [{r.recommendation_type.value}]")
        print(f"   score: {r.score:.1f}  (confidence {r.confidence:.0f})")
        for reason in r.reasons:
            print(f"   - {reason}")
        print(f"   insight: {r.ai_insight}")


def main() -> None:
    parser = argparse.ArgumentParser(description="PeerLink peer recommendations")
    parser.add_argument("--user-id", required=True, help="User to recommend peers for")
    parser.add_argument("--data-dir", type=str, default="", help="Directory holding the JSON collections")
    parser.add_argument("--top-k", type=int, default=config.MAX_RECOMMENDATIONS, help="How many matches to return")
    parser.add_argument("--json", action="store_true", help="Print JSON only (machine-readable)")
    parser.add_argument("--no-ai", action="store_true", help="Skip AI insights even when an LLM key is set")
    args = parser.parse_args()

    logging.basicConfig(
        level=config.PEERLINK_LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    data_dir = Path(args.data_dir) if args.data_dir else default_data_dir()
    if not data_dir.exists():
        print(f"\n[PeerLink] Data directory not found: {data_dir}")
        print("Tip: pass --data-dir or set PEERLINK_DATA_DIR\n")
        raise SystemExit(2)

    client = None if args.no_ai else insight_client_from_config()
    result = asyncio.run(
        recommend_for_user(
            JsonDocumentStore(data_dir),
            args.user_id,
            insight_client=client,
            limit=max(0, args.top_k),
        )
    )

    if result is None:
        print(f"\n[PeerLink] User profile not found: {args.user_id}\n")
        raise SystemExit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_human_summary(result)


if __name__ == "__main__":
    main()
