"""Event-weighted recommendation engine.

Composes the window selector, the event store, the aggregator and the ranker:

    cutoff = now - lookback
    events = event_store.fetch_events(user_id, cutoff)
    scores = aggregate(events, weights)
    return rank(scores, limit)

The engine keeps no state between calls. Its only I/O is the single
fetch_events call, and all argument checks happen before it.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from src.recommender.events import InteractionEvent, ensure_utc
from src.recommender.exceptions import StoreUnavailable
from src.recommender.scoring import aggregate, ranked_items, validate_limit
from src.recommender.store import EventStore
from src.recommender.weights import WeightTable
from src.recommender.window import DEFAULT_LOOKBACK, compute_cutoff, validate_lookback

# Configure module logger
logger = logging.getLogger(__name__)

# Default number of recommendations
DEFAULT_LIMIT = 5


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Recommendation:
    """Ranked products together with the data used to rank them.

    Attributes:
        user_id: User the recommendation was computed for.
        product_ids: Product ids, highest score first.
        scores: Score of each returned product.
        cutoff: Events at or before this time were ignored.
        num_events: Number of in-window events considered.
    """

    user_id: str
    product_ids: List[str]
    scores: Dict[str, int] = field(default_factory=dict)
    cutoff: Optional[datetime] = None
    num_events: int = 0


def _fetch_events(
    event_store: EventStore, user_id: str, cutoff: datetime
) -> Sequence[InteractionEvent]:
    """Query the store, translating any failure into StoreUnavailable."""
    try:
        events = event_store.fetch_events(user_id, cutoff)
    except StoreUnavailable:
        logger.error(
            "Event store unavailable",
            extra={"user_id": user_id, "cutoff": cutoff.isoformat()},
        )
        raise
    except Exception as e:
        logger.error(
            "Event store query failed",
            extra={
                "user_id": user_id,
                "cutoff": cutoff.isoformat(),
                "error": str(e),
                "error_type": type(e).__name__,
            },
        )
        raise StoreUnavailable(user_id, error=e) from e

    return list(events) if events is not None else []


def recommend(
    user_id: str,
    limit: int = DEFAULT_LIMIT,
    *,
    event_store: EventStore,
    now: Optional[datetime] = None,
    lookback: timedelta = DEFAULT_LOOKBACK,
    weights: Optional[Mapping[str, int]] = None,
) -> List[str]:
    """Recommend products for a user from their recent interaction events.

    Args:
        user_id: User to recommend for.
        limit: Maximum number of product ids to return.
        now: Reference time; defaults to the current UTC time.
        lookback: Size of the event window ending at now.
        weights: Event weight table or plain mapping of event type to
            weight; defaults to the built-in table.
        event_store: Store to read events from.

    Returns:
        Product ids, highest affinity first. Empty if the user has no
        in-window events.

    Raises:
        InvalidArgument: If limit is negative.
        InvalidConfiguration: If lookback is negative or a weight is not a
            positive integer.
        StoreUnavailable: If the event store query fails.
    """
    validate_limit(limit)
    engine = RecommendationEngine(event_store=event_store, weights=weights, lookback=lookback)
    return engine.recommend(user_id, limit=limit, now=now)


class RecommendationEngine:
    """Stateless recommender bound to an event store and a configuration.

    Example:
        >>> store = InMemoryEventStore(events)
        >>> engine = RecommendationEngine(store)
        >>> engine.recommend("user-1", limit=3)
        ['P2', 'P3', 'P1']
    """

    def __init__(
        self,
        event_store: EventStore,
        weights: Optional[Mapping[str, int]] = None,
        lookback: timedelta = DEFAULT_LOOKBACK,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.event_store = event_store
        # plain mappings are validated here, before any store query
        self.weights = weights if isinstance(weights, WeightTable) else WeightTable(weights)
        self.lookback = validate_lookback(lookback)
        self.clock = clock or utc_now

    def recommend(
        self,
        user_id: str,
        limit: int = DEFAULT_LIMIT,
        now: Optional[datetime] = None,
    ) -> List[str]:
        """Return up to limit product ids for user_id, best first."""
        return self.explain(user_id, limit=limit, now=now).product_ids

    def explain(
        self,
        user_id: str,
        limit: int = DEFAULT_LIMIT,
        now: Optional[datetime] = None,
    ) -> Recommendation:
        """Like recommend(), but also return scores, cutoff and event count."""
        start_time = time.time()

        validate_limit(limit)
        validate_lookback(self.lookback)

        reference = ensure_utc(now if now is not None else self.clock())
        cutoff = compute_cutoff(reference, self.lookback)

        logger.info(
            "Starting recommendation generation",
            extra={"user_id": user_id, "limit": limit, "cutoff": cutoff.isoformat()},
        )

        events = _fetch_events(self.event_store, user_id, cutoff)
        scores = aggregate(events, self.weights)
        top = ranked_items(scores, limit)

        total_time = time.time() - start_time
        logger.info(
            "Recommendations generated",
            extra={
                "user_id": user_id,
                "num_events": len(events),
                "num_candidates": len(scores),
                "num_recommendations": len(top),
                "total_time_ms": round(total_time * 1000, 2),
            },
        )

        return Recommendation(
            user_id=user_id,
            product_ids=[product_id for product_id, _ in top],
            scores=dict(top),
            cutoff=cutoff,
            num_events=len(events),
        )

    def score(self, user_id: str, now: Optional[datetime] = None) -> Dict[str, int]:
        """Return the full score map for a user without ranking it."""
        reference = ensure_utc(now if now is not None else self.clock())
        cutoff = compute_cutoff(reference, self.lookback)
        return aggregate(_fetch_events(self.event_store, user_id, cutoff), self.weights)
