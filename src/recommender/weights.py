"""Event weight table.

Maps an event kind to a positive integer expressing how strongly that kind of
interaction signals purchase intent. Kinds missing from the table weigh 0.
"""

import json
import logging
from typing import Dict, Iterator, Mapping, Optional

from src.recommender.events import EventType
from src.recommender.exceptions import InvalidConfiguration

# Configure module logger
logger = logging.getLogger(__name__)

# Default weights: a purchase is the strongest intent signal
DEFAULT_EVENT_WEIGHTS: Dict[str, int] = {
    EventType.VIEW.value: 1,
    EventType.CART_ADD.value: 3,
    EventType.PURCHASE.value: 5,
}


class WeightTable(Mapping[str, int]):
    """Immutable, validated mapping from event type to weight.

    Every weight must be a positive integer. Zero or negative weights are
    rejected when the table is built rather than silently accepted.

    Example:
        >>> table = WeightTable({"view": 1, "purchase": 5})
        >>> table.weight_for("purchase")
        5
        >>> table.weight_for("wishlist")
        0
    """

    def __init__(self, weights: Optional[Mapping[str, int]] = None):
        source = DEFAULT_EVENT_WEIGHTS if weights is None else weights
        self._weights = _validate_weights(source)

    def weight_for(self, event_type: Optional[str]) -> int:
        """Return the weight for event_type, or 0 for unknown kinds."""
        if event_type is None:
            return 0
        return self._weights.get(str(event_type), 0)

    @classmethod
    def from_json(cls, raw: str) -> "WeightTable":
        """Parse a JSON object such as '{"view": 1, "purchase": 5}'.

        Raises:
            InvalidConfiguration: If raw is not a JSON object of weights.
        """
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidConfiguration("event_weights", f"not valid JSON: {e}") from e

        if not isinstance(parsed, dict):
            raise InvalidConfiguration(
                "event_weights", "expected a JSON object of event type to weight"
            )
        return cls(parsed)

    def as_dict(self) -> Dict[str, int]:
        return dict(self._weights)

    def __getitem__(self, event_type: str) -> int:
        return self._weights[event_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def __repr__(self) -> str:
        return f"WeightTable({self._weights!r})"


def _validate_weights(weights: Mapping[str, int]) -> Dict[str, int]:
    validated: Dict[str, int] = {}
    for event_type, weight in weights.items():
        key = event_type.value if isinstance(event_type, EventType) else event_type
        if not isinstance(key, str) or not key.strip():
            raise InvalidConfiguration(
                "event_weights",
                f"event type must be a non-empty string, got {event_type!r}",
            )
        # bool is an int subclass; True would otherwise pass as weight 1
        if isinstance(weight, bool) or not isinstance(weight, int):
            raise InvalidConfiguration(
                "event_weights",
                f"weight for '{key}' must be an integer, got {weight!r}",
                details={"event_type": key, "weight": repr(weight)},
            )
        if weight <= 0:
            raise InvalidConfiguration(
                "event_weights",
                f"weight for '{key}' must be positive, got {weight}",
                details={"event_type": key, "weight": weight},
            )
        validated[key] = weight

    logger.debug("Validated weight table", extra={"event_weights": validated})
    return validated
