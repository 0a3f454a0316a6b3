"""Event store implementations.

The engine only depends on the EventStore protocol: given a user id and a
cutoff, return every event recorded for that user strictly after the cutoff.
Two stores are provided, an in-memory one for tests and local runs and a
CSV-backed one for offline event logs.
"""

import logging
import threading
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Protocol, Sequence, Union

import pandas as pd

from src.recommender.events import InteractionEvent, ensure_utc
from src.recommender.exceptions import StoreUnavailable
from src.recommender.window import is_within_window

# Configure module logger
logger = logging.getLogger(__name__)

# Columns every event log must provide
EVENT_COLUMNS = ["user_id", "product_id", "event_type", "created_at"]


class EventStore(Protocol):
    """Read side of an interaction event store."""

    def fetch_events(self, user_id: str, since: datetime) -> Sequence[InteractionEvent]:
        """Return all events for user_id recorded strictly after since.

        Raises:
            StoreUnavailable: On transport or storage failure.
        """
        ...


class InMemoryEventStore:
    """Thread-safe event store holding events in per-user lists."""

    def __init__(self, events: Iterable[InteractionEvent] = ()):
        self._lock = threading.Lock()
        self._events_by_user: Dict[str, List[InteractionEvent]] = defaultdict(list)
        self.add_events(events)

    def add_event(self, event: InteractionEvent) -> None:
        with self._lock:
            self._events_by_user[event.user_id].append(event)

    def add_events(self, events: Iterable[InteractionEvent]) -> None:
        with self._lock:
            for event in events:
                self._events_by_user[event.user_id].append(event)

    def fetch_events(self, user_id: str, since: datetime) -> List[InteractionEvent]:
        cutoff = ensure_utc(since)
        with self._lock:
            user_events = list(self._events_by_user.get(user_id, ()))
        return [e for e in user_events if is_within_window(e.created_at, cutoff)]

    def __len__(self) -> int:
        with self._lock:
            return sum(len(events) for events in self._events_by_user.values())


class CsvEventStore:
    """Event store backed by a CSV log.

    The file is re-read on every query so that appends made by another
    process are picked up. Expected columns: user_id, product_id,
    event_type, created_at (ISO-8601; naive timestamps are taken as UTC).
    """

    def __init__(self, csv_path: Union[str, Path]):
        self.csv_path = Path(csv_path)

    def fetch_events(self, user_id: str, since: datetime) -> List[InteractionEvent]:
        df = self._load_frame(user_id)

        cutoff = pd.Timestamp(ensure_utc(since))
        selected = df[(df["user_id"] == str(user_id)) & (df["created_at"] > cutoff)]

        events = [
            InteractionEvent.from_record(
                {**record, "created_at": record["created_at"].to_pydatetime()}
            )
            for record in selected.to_dict("records")
        ]

        logger.debug(
            "Fetched events from CSV store",
            extra={
                "user_id": user_id,
                "csv_path": str(self.csv_path),
                "num_events": len(events),
            },
        )
        return events

    def _load_frame(self, user_id: str) -> pd.DataFrame:
        if not self.csv_path.exists():
            raise StoreUnavailable(
                user_id, reason=f"event log not found: {self.csv_path}"
            )

        try:
            df = load_events_csv(self.csv_path)
        except (OSError, ValueError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            logger.error(
                "Failed to read event log",
                extra={"csv_path": str(self.csv_path), "error": str(e)},
            )
            raise StoreUnavailable(user_id, error=e) from e

        return df


def load_events_csv(csv_path: Union[str, Path]) -> pd.DataFrame:
    """Load an event log CSV into a normalized DataFrame.

    Identifier and event type columns are read as strings, missing values
    become empty strings, and created_at is parsed to UTC timestamps. Rows
    whose timestamp cannot be parsed are dropped.

    Raises:
        ValueError: If the CSV is missing required columns.
    """
    df = pd.read_csv(
        csv_path,
        dtype={"user_id": str, "product_id": str, "event_type": str, "created_at": str},
    )

    missing = set(EVENT_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"CSV missing required columns: {sorted(missing)}")

    df = df[EVENT_COLUMNS].copy()
    for column in ("user_id", "product_id", "event_type"):
        df[column] = df[column].fillna("").str.strip()

    df["created_at"] = pd.to_datetime(df["created_at"], utc=True, errors="coerce", format="ISO8601")
    invalid = int(df["created_at"].isna().sum())
    if invalid:
        logger.warning(
            "Dropping events with unparseable timestamps",
            extra={"csv_path": str(csv_path), "dropped_rows": invalid},
        )
        df = df.dropna(subset=["created_at"])

    return df
