"""Score aggregation and ranking.

aggregate() folds a window of events into a product -> score map, rank()
turns that map into an ordered, truncated list of product ids.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from src.recommender.events import InteractionEvent
from src.recommender.exceptions import InvalidArgument
from src.recommender.weights import WeightTable

# Configure module logger
logger = logging.getLogger(__name__)

ScoreMap = Dict[str, int]


def aggregate(events: Iterable[InteractionEvent], weights: WeightTable) -> ScoreMap:
    """Sum event weights per product.

    Unknown event kinds weigh 0 and never create an entry, so a product only
    appears in the result if at least one of its events has a known kind.
    Malformed events (no product id or no event type) are skipped.

    Args:
        events: Events to score. Order does not matter.
        weights: Weight table used to look up each event kind.

    Returns:
        Dictionary mapping product_id to its accumulated score.

    Example:
        >>> aggregate(events, WeightTable({"view": 1, "purchase": 5}))
        {'P1': 2, 'P2': 5}
    """
    scores: Dict[str, int] = defaultdict(int)
    skipped = 0

    for event in events:
        product_id = getattr(event, "product_id", None)
        event_type = getattr(event, "event_type", None)

        if not product_id or event_type is None:
            skipped += 1
            continue

        weight = weights.weight_for(event_type)
        if weight == 0:
            continue

        scores[str(product_id)] += weight

    if skipped:
        logger.warning(
            "Skipped malformed events during aggregation",
            extra={"skipped_events": skipped},
        )

    return dict(scores)


def _rank_key(item: Tuple[str, int]) -> Tuple[int, str]:
    product_id, score = item
    return (-score, product_id)


def ranked_items(scores: ScoreMap, limit: int) -> List[Tuple[str, int]]:
    """Return (product_id, score) pairs ordered by score desc, product_id asc.

    Raises:
        InvalidArgument: If limit is negative or not an integer.
    """
    validate_limit(limit)
    if limit == 0:
        return []
    return sorted(scores.items(), key=_rank_key)[:limit]


def rank(scores: ScoreMap, limit: int) -> List[str]:
    """Order products by score and keep the first limit of them.

    Ties are broken by ascending product id so the output never depends on
    dict insertion order.

    Args:
        scores: Product to score mapping produced by aggregate().
        limit: Maximum number of product ids to return. 0 gives [].

    Returns:
        Product ids, highest score first.

    Raises:
        InvalidArgument: If limit is negative.
    """
    return [product_id for product_id, _ in ranked_items(scores, limit)]


def validate_limit(limit: int) -> int:
    """Return limit unchanged, or raise InvalidArgument."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgument("limit", limit, "must be an integer")
    if limit < 0:
        raise InvalidArgument("limit", limit, "must be non-negative")
    return limit
