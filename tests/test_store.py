"""Tests for the in-memory and CSV event stores."""

import threading
from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from src.recommender.engine import RecommendationEngine
from src.recommender.events import EventType, InteractionEvent
from src.recommender.exceptions import StoreUnavailable
from src.recommender.store import EVENT_COLUMNS, CsvEventStore, InMemoryEventStore, load_events_csv

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


def write_events_csv(events, csv_path):
    """Write events to a CSV log readable by CsvEventStore."""
    df = pd.DataFrame(
        [
            {
                "user_id": e.user_id,
                "product_id": e.product_id,
                "event_type": e.event_type,
                "created_at": e.created_at.isoformat(),
            }
            for e in events
        ],
        columns=EVENT_COLUMNS,
    )
    df.to_csv(csv_path, index=False)
    return csv_path


def event(product_id, event_type, days_ago=1.0, user_id="U"):
    return InteractionEvent(
        user_id=user_id,
        product_id=product_id,
        event_type=event_type,
        created_at=NOW - timedelta(days=days_ago),
    )


@pytest.fixture
def events():
    return [
        event("P1", "view", days_ago=2),
        event("P1", "purchase", days_ago=40),
        event("P2", "purchase", days_ago=5),
        event("P3", "cart_add", days_ago=1, user_id="other"),
    ]


@pytest.fixture
def events_csv(tmp_path, events):
    """Fixture providing a CSV event log written from the events fixture."""
    return write_events_csv(events, tmp_path / "events.csv")


# InteractionEvent


def test_event_from_record_parses_iso_timestamp():
    parsed = InteractionEvent.from_record({
        "user_id": 42,
        "product_id": "P1",
        "event_type": EventType.PURCHASE,
        "created_at": "2024-06-29T12:00:00Z",
    })

    assert parsed.user_id == "42"
    assert parsed.event_type == "purchase"
    assert parsed.created_at == NOW - timedelta(days=1)


def test_event_from_record_missing_field():
    with pytest.raises(KeyError):
        InteractionEvent.from_record({"user_id": "U", "product_id": "P1"})


def test_naive_created_at_is_normalized_to_utc():
    naive = InteractionEvent("U", "P1", "view", datetime(2024, 1, 1))
    assert naive.created_at.tzinfo == timezone.utc


def test_event_is_immutable():
    with pytest.raises(AttributeError):
        event("P1", "view").product_id = "P2"


# InMemoryEventStore


def test_memory_store_filters_by_user_and_cutoff(events):
    store = InMemoryEventStore(events)

    fetched = store.fetch_events("U", NOW - timedelta(days=30))

    assert sorted(e.product_id for e in fetched) == ["P1", "P2"]
    assert all(e.user_id == "U" for e in fetched)


def test_memory_store_cutoff_is_exclusive():
    store = InMemoryEventStore([event("P1", "view", days_ago=30)])
    assert store.fetch_events("U", NOW - timedelta(days=30)) == []


def test_memory_store_unknown_user():
    assert InMemoryEventStore().fetch_events("ghost", NOW) == []


def test_memory_store_accepts_naive_cutoff(events):
    store = InMemoryEventStore(events)
    naive_cutoff = (NOW - timedelta(days=30)).replace(tzinfo=None)
    assert len(store.fetch_events("U", naive_cutoff)) == 2


def test_memory_store_concurrent_writes():
    """Test that events added from many threads are all kept."""
    store = InMemoryEventStore()

    def writer(worker_id):
        for i in range(200):
            store.add_event(event(f"P{i}", "view", user_id=f"user-{worker_id % 3}"))

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(store) == 8 * 200


# CsvEventStore


def test_csv_store_round_trip(events_csv):
    """Test that CsvEventStore returns in-window events for the user."""
    store = CsvEventStore(events_csv)

    fetched = store.fetch_events("U", NOW - timedelta(days=30))

    assert sorted((e.product_id, e.event_type) for e in fetched) == [
        ("P1", "view"),
        ("P2", "purchase"),
    ]
    assert all(e.created_at.tzinfo is not None for e in fetched)


def test_csv_store_feeds_engine(events_csv):
    engine = RecommendationEngine(CsvEventStore(events_csv))
    assert engine.recommend("U", limit=5, now=NOW) == ["P2", "P1"]


def test_csv_store_missing_file(tmp_path):
    store = CsvEventStore(tmp_path / "missing.csv")

    with pytest.raises(StoreUnavailable) as exc_info:
        store.fetch_events("U", NOW)

    assert "not found" in exc_info.value.message


def test_csv_store_missing_columns(tmp_path):
    csv_path = tmp_path / "bad.csv"
    pd.DataFrame({"user_id": ["U"], "product_id": ["P1"]}).to_csv(csv_path, index=False)

    with pytest.raises(StoreUnavailable) as exc_info:
        CsvEventStore(csv_path).fetch_events("U", NOW - timedelta(days=30))

    assert exc_info.value.details["error_type"] == "ValueError"


def test_csv_store_empty_file(tmp_path):
    csv_path = tmp_path / "empty.csv"
    csv_path.write_text("")

    with pytest.raises(StoreUnavailable):
        CsvEventStore(csv_path).fetch_events("U", NOW)


def test_csv_store_header_only(tmp_path):
    csv_path = tmp_path / "header.csv"
    csv_path.write_text("user_id,product_id,event_type,created_at\n")

    assert CsvEventStore(csv_path).fetch_events("U", NOW - timedelta(days=30)) == []


def test_load_events_csv_drops_bad_timestamps(tmp_path):
    """Test that unparseable timestamps are dropped and blanks become ''."""
    csv_path = tmp_path / "events.csv"
    csv_path.write_text(
        "user_id,product_id,event_type,created_at\n"
        "U,P1,view,2024-06-29T12:00:00+00:00\n"
        "U,P2,view,yesterday\n"
        "U,,purchase,2024-06-29T13:00:00+00:00\n"
    )

    df = load_events_csv(csv_path)

    assert len(df) == 2
    assert list(df["product_id"]) == ["P1", ""]
    assert str(df["created_at"].dt.tz) == "UTC"


def test_csv_rows_without_product_are_not_scored(tmp_path):
    csv_path = tmp_path / "events.csv"
    csv_path.write_text(
        "user_id,product_id,event_type,created_at\n"
        "U,P1,view,2024-06-29T12:00:00+00:00\n"
        "U,,purchase,2024-06-29T13:00:00+00:00\n"
    )

    engine = RecommendationEngine(CsvEventStore(csv_path))
    assert engine.explain("U", limit=5, now=NOW).scores == {"P1": 1}
