"""Interaction event model.

Events are recorded by an external store and handed to the engine read-only.
The event_type field is kept as a plain string so that kinds the engine does
not know about yet can still flow through (they simply weigh nothing).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class EventType(str, Enum):
    """Event kinds the default weight table knows about."""

    VIEW = "view"
    CART_ADD = "cart_add"
    PURCHASE = "purchase"


@dataclass(frozen=True)
class InteractionEvent:
    """A single user/product interaction.

    Attributes:
        user_id: Identifier of the user who interacted.
        product_id: Identifier of the product the event references.
        event_type: Kind of interaction, e.g. "view" or "purchase".
        created_at: When the event was recorded (timezone-aware, UTC).
    """

    user_id: str
    product_id: str
    event_type: str
    created_at: datetime

    def __post_init__(self):
        # frozen, so normalize through object.__setattr__
        if isinstance(self.created_at, datetime):
            object.__setattr__(self, "created_at", ensure_utc(self.created_at))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "InteractionEvent":
        """Build an event from a dict-like row (CSV row, JSON payload).

        Raises:
            KeyError: If a required field is missing.
            ValueError: If created_at cannot be parsed.
        """
        created_at = record["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        if not isinstance(created_at, datetime):
            raise ValueError(f"Unsupported created_at value: {created_at!r}")

        event_type = record["event_type"]
        if isinstance(event_type, EventType):
            event_type = event_type.value

        return cls(
            user_id=str(record["user_id"]),
            product_id=str(record["product_id"]),
            event_type=str(event_type),
            created_at=created_at,
        )


def ensure_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
