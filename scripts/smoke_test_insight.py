"""
smoke_test_insight.py - Live AI insight smoke test.

Sends one real compatibility request to the configured LLM provider and
checks that the answer decodes against the insight schema, then runs a full
recommendation pass over the bundled fixture data.

Usage (from repo root):
    PEERLINK_LLM_KEY=<key> [PEERLINK_LLM_PROVIDER=openai] python scripts/smoke_test_insight.py

Exit codes:
    0  - all checks passed
    1  - a check failed
    2  - no LLM key configured
"""
from __future__ import annotations

import asyncio
from pathlib import Path

from peerlink import config
from peerlink.llm.insight import CALL_FALLBACK, PARSE_FALLBACK, insight_client_from_config
from peerlink.models import Demographics, MatchingPreferences, RecommendationContext, UserProfile
from peerlink.recommendations import recommend_for_user
from peerlink.store import JsonDocumentStore

REPO_ROOT = Path(__file__).resolve().parent.parent
FIXTURE_DATA = REPO_ROOT / "tests" / "fixtures" / "store"

PASS = "✅"
FAIL = "❌"


def check(label: str, condition: bool, detail: str = "") -> bool:
    status = PASS if condition else FAIL
    line = f"  {status}  {label}"
    if detail:
        line += f"\n       {detail}"
    print(line)
    return condition


async def _run() -> int:
    client = insight_client_from_config()
    if client is None:
        print("ERROR: set PEERLINK_LLM_KEY (or the provider's own API key env var).")
        return 2

    print("\n=== PeerLink Smoke Test: AI insight ===")
    print(f"Provider: {client.provider} | Model: {client.model}\n")

    user = UserProfile(
        user_id="smoke-a",
        symptoms=["itching", "fatigue"],
        demographics=Demographics(experience_level="newly_diagnosed"),
        preferences=MatchingPreferences(support_types=["Practical advice"], communication_style="daily"),
    )
    match = UserProfile(
        user_id="smoke-b",
        symptoms=["itching", "brain fog", "fatigue"],
        demographics=Demographics(experience_level="long_term"),
        preferences=MatchingPreferences(support_types=["Practical advice"], communication_style="daily"),
    )

    ok = True
    insight = await client.generate(user=user, match=match, context=RecommendationContext())
    ok &= check("insight decoded", bool(insight.insight), insight.insight)
    ok &= check("adjustment factor in range", 0.8 <= insight.adjustment_factor <= 1.2, str(insight.adjustment_factor))
    ok &= check("confidence in range", 0 <= insight.confidence <= 100, str(insight.confidence))

    result = await recommend_for_user(JsonDocumentStore(FIXTURE_DATA), "u-alice", insight_client=client)
    ok &= check("full pass returned a result", result is not None)
    if result is not None:
        fallbacks = {CALL_FALLBACK.insight, PARSE_FALLBACK.insight}
        live = [r for r in result.recommendations if r.ai_insight not in fallbacks]
        ok &= check(
            "at least one live insight",
            bool(live),
            f"{len(live)}/{len(result.recommendations)} recommendations used the model",
        )

    print("\nOK" if ok else "\nFAILED")
    return 0 if ok else 1


def main() -> int:
    if not config.llm_configured():
        print("ERROR: set PEERLINK_LLM_KEY (or the provider's own API key env var).")
        return 2
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
