"""Generate fake interaction events for testing and development.

Creates a CSV event log (user_id, product_id, event_type, created_at) that
CsvEventStore and scripts/recommend_cli.py can read.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_events.py

    Or import and use programmatically:
        from scripts.generate_fake_events import generate_fake_events
        df = generate_fake_events(num_users=100, num_products=200)
"""

import argparse
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

# Default configuration constants
DEFAULT_NUM_USERS = 50
DEFAULT_NUM_PRODUCTS = 100
DEFAULT_NUM_EVENTS = 2000
DEFAULT_DAYS_BACK = 60
SECONDS_PER_DAY = 86400

# Views dominate real traffic; purchases are rare
DEFAULT_EVENT_MIX: Dict[str, float] = {
    "view": 0.75,
    "cart_add": 0.18,
    "purchase": 0.07,
}


def generate_fake_events(
    num_users: int = DEFAULT_NUM_USERS,
    num_products: int = DEFAULT_NUM_PRODUCTS,
    num_events: int = DEFAULT_NUM_EVENTS,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    event_mix: Optional[Dict[str, float]] = None,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Generate synthetic interaction events.

    Args:
        num_users: Number of unique users to simulate. Must be positive.
        num_products: Number of unique products available. Must be positive.
        num_events: Total number of events to generate. Must be positive.
        start_date: Earliest event timestamp. Defaults to 60 days before
            end_date.
        end_date: Latest event timestamp. Defaults to now (UTC).
        event_mix: Relative frequency of each event type.
        seed: Random seed for reproducible output.

    Returns:
        DataFrame with columns user_id ("u<N>"), product_id ("p<N>"),
        event_type and created_at (ISO-8601 UTC), sorted by created_at.

    Raises:
        ValueError: If any count is non-positive or start_date is not
            before end_date.
    """
    if num_users <= 0 or num_products <= 0 or num_events <= 0:
        raise ValueError("num_users, num_products, and num_events must be positive")

    rng = random.Random(seed)
    mix = event_mix or DEFAULT_EVENT_MIX

    if end_date is None:
        end_date = datetime.now(timezone.utc)
    if start_date is None:
        start_date = end_date - timedelta(days=DEFAULT_DAYS_BACK)

    if start_date >= end_date:
        raise ValueError("start_date must be before end_date")

    total_seconds = int((end_date - start_date).total_seconds())
    event_types = list(mix.keys())
    frequencies = list(mix.values())

    events = []
    for _ in range(num_events):
        created_at = start_date + timedelta(seconds=rng.randrange(total_seconds))
        events.append({
            "user_id": f"u{rng.randint(1, num_users)}",
            "product_id": f"p{rng.randint(1, num_products)}",
            "event_type": rng.choices(event_types, weights=frequencies)[0],
            "created_at": created_at,
        })

    df = pd.DataFrame(events)
    df = df.sort_values("created_at").reset_index(drop=True)
    df["created_at"] = df["created_at"].map(lambda ts: ts.isoformat())

    return df


def main() -> None:
    """Generate an event log and save it to data/fake_events.csv."""
    parser = argparse.ArgumentParser(description="Generate a fake interaction event log")
    parser.add_argument("--users", type=int, default=DEFAULT_NUM_USERS)
    parser.add_argument("--products", type=int, default=DEFAULT_NUM_PRODUCTS)
    parser.add_argument("--events", type=int, default=DEFAULT_NUM_EVENTS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--output",
        type=str,
        default=str(Path(__file__).parent.parent / "data" / "fake_events.csv"),
    )
    args = parser.parse_args()

    print(f"Generating {args.events} fake events...")
    print(f"Users: {args.users}, Products: {args.products}")

    try:
        df = generate_fake_events(
            num_users=args.users,
            num_products=args.products,
            num_events=args.events,
            seed=args.seed,
        )
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)

    print(f"\nSaved to: {output_path}")
    print(f"\nData preview:")
    print(df.head(10))
    print(f"\nData summary:")
    print(f"  Total events: {len(df)}")
    print(f"  Unique users: {df['user_id'].nunique()}")
    print(f"  Unique products: {df['product_id'].nunique()}")
    print(f"  Event types: {df['event_type'].value_counts().to_dict()}")


if __name__ == "__main__":
    main()
