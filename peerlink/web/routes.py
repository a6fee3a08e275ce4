"""
Peer recommendation and connection analytics endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from peerlink.analytics import analyze_connection_success
from peerlink.llm.insight import InsightProvider
from peerlink.recommendations import recommend_for_user
from peerlink.store import DocumentStore, StoreError

from .dependencies import get_insight_client, get_store
from .exceptions import AnalyticsUnavailableException, UserNotFoundException
from .schemas import (
    ConnectionAnalyticsModel,
    ConnectionAnalyticsResponse,
    PeerRecommendationRequest,
    PeerRecommendationsResponse,
    RecommendationModel,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["peers"])


@router.post("/peer-recommendations", response_model=PeerRecommendationsResponse)
async def peer_recommendations(
    body: Optional[PeerRecommendationRequest] = None,
    store: DocumentStore = Depends(get_store),
    insight_client: Optional[InsightProvider] = Depends(get_insight_client),
):
    """
    Rank up to ten peers for the requesting user.

    AI failures never fail the request; affected candidates keep their
    deterministic score with a neutral insight.
    """
    user_id = ((body.user_id if body else None) or "").strip()
    if not user_id:
        raise HTTPException(status_code=400, detail="User ID is required")

    result = await recommend_for_user(store, user_id, insight_client=insight_client)
    if result is None:
        raise UserNotFoundException("User profile not found")

    return PeerRecommendationsResponse(
        recommendations=[RecommendationModel.from_domain(r) for r in result.recommendations],
        total_evaluated=result.total_evaluated,
        timestamp=result.timestamp,
    )


@router.get("/connection-analytics/{user_id}", response_model=ConnectionAnalyticsResponse)
def connection_analytics(
    user_id: str,
    store: DocumentStore = Depends(get_store),
):
    """Acceptance rate and preferred connection types from the user's history."""
    try:
        connections = store.peer_connections(user_id)
    except StoreError as exc:
        logger.error(f"Failed to read connections for {user_id}: {exc}")
        raise AnalyticsUnavailableException("Failed to analyze connections") from exc

    analytics = analyze_connection_success(user_id, connections)
    return ConnectionAnalyticsResponse(
        analytics=ConnectionAnalyticsModel.from_domain(analytics),
        connection_count=len(connections),
    )
