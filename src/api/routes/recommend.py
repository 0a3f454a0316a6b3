"""Recommendation endpoints.

Thin HTTP wrapper around RecommendationEngine: query parameters in, ranked
product ids out. Engine errors propagate to the handlers registered in
src.api.exceptions.
"""

import logging
import time
from datetime import datetime
from functools import lru_cache
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from src.api.config import settings
from src.api.metrics import metrics_service
from src.recommender.engine import RecommendationEngine
from src.recommender.store import CsvEventStore, EventStore, InMemoryEventStore

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommend",
    tags=["recommendations"],
)


class RecommendationResponse(BaseModel):
    """Response model for recommendation requests.

    Attributes:
        user_id: The user the recommendations were generated for.
        recommendations: Product ids, highest affinity first.
        scores: Score of each recommended product (explain mode only).
        cutoff: Start of the event window (explain mode only).
        num_events: In-window events considered (explain mode only).
    """

    user_id: str = Field(..., description="User ID for recommendations")
    recommendations: List[str] = Field(
        ..., description="Recommended product IDs, best first"
    )
    scores: Optional[Dict[str, int]] = Field(
        default=None, description="Per-product scores when explain=true"
    )
    cutoff: Optional[datetime] = Field(
        default=None, description="Events at or before this time were ignored"
    )
    num_events: Optional[int] = Field(
        default=None, description="Number of in-window events considered"
    )


def build_event_store() -> EventStore:
    """Create the event store selected by RECO_EVENTS_CSV."""
    if settings.events_csv:
        logger.info("Using CSV event store", extra={"csv_path": settings.events_csv})
        return CsvEventStore(settings.events_csv)

    logger.warning("RECO_EVENTS_CSV not set, using an empty in-memory event store")
    return InMemoryEventStore()


@lru_cache(maxsize=1)
def get_engine() -> RecommendationEngine:
    """FastAPI dependency returning the process-wide engine.

    Raises:
        InvalidConfiguration: If the configured weights or lookback are invalid.
    """
    return RecommendationEngine(
        event_store=build_event_store(),
        weights=settings.weight_table(),
        lookback=settings.lookback,
    )


@router.get(
    "/{user_id}",
    response_model=RecommendationResponse,
    response_model_exclude_none=True,
)
def get_recommendations(
    user_id: str,
    limit: Optional[int] = Query(
        default=None,
        le=settings.max_limit,
        description="Number of products to return (default from RECO_DEFAULT_LIMIT)",
    ),
    explain: bool = False,
    engine: RecommendationEngine = Depends(get_engine),
) -> RecommendationResponse:
    """Get product recommendations for a user.

    Ranks the products the user interacted with during the lookback window
    by summed event weight.

    Example:
        GET /recommend/u-42?limit=3
        {"user_id": "u-42", "recommendations": ["P2", "P3", "P1"]}
    """
    start_time = time.time()
    effective_limit = settings.default_limit if limit is None else limit

    result = engine.explain(user_id, limit=effective_limit)

    latency_ms = (time.time() - start_time) * 1000
    metrics_service.record_recommendation(latency_ms, len(result.product_ids))

    if not explain:
        return RecommendationResponse(user_id=user_id, recommendations=result.product_ids)

    return RecommendationResponse(
        user_id=user_id,
        recommendations=result.product_ids,
        scores=result.scores,
        cutoff=result.cutoff,
        num_events=result.num_events,
    )
