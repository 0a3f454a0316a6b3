"""CLI script for getting product recommendations from an event log.

Useful for testing and evaluation. Reads a CSV event log, ranks the
products a user interacted with and prints them to the console.
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.recommender.engine import DEFAULT_LIMIT, RecommendationEngine
from src.recommender.exceptions import RecommenderError
from src.recommender.store import CsvEventStore
from src.recommender.weights import WeightTable
from src.recommender.window import DEFAULT_LOOKBACK_DAYS

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing Z for UTC."""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid ISO-8601 timestamp: {value!r}") from e


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Get product recommendations for a user from a CSV event log",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/recommend_cli.py u42 --events data/fake_events.csv
  python scripts/recommend_cli.py u42 --events data/fake_events.csv --limit 10
  python scripts/recommend_cli.py u42 --events data/fake_events.csv --explain
  python scripts/recommend_cli.py u42 --events data/fake_events.csv --weights '{"view": 1, "purchase": 10}'
        """
    )

    parser.add_argument("user_id", type=str, help="User ID to get recommendations for")
    parser.add_argument(
        "--events",
        type=str,
        default="data/fake_events.csv",
        help="CSV event log (default: data/fake_events.csv)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help=f"Number of recommendations to return (default: {DEFAULT_LIMIT})",
    )
    parser.add_argument(
        "--lookback-days",
        type=float,
        default=DEFAULT_LOOKBACK_DAYS,
        help=f"Only count events from the last N days (default: {DEFAULT_LOOKBACK_DAYS})",
    )
    parser.add_argument(
        "--now",
        type=parse_timestamp,
        default=None,
        help="Reference time as ISO-8601 (default: current UTC time)",
    )
    parser.add_argument(
        "--weights",
        type=str,
        default=None,
        help="Event weights as a JSON object (default: view=1, cart_add=3, purchase=5)",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Show scores and the event window",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function."""
    args = parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        weights = WeightTable.from_json(args.weights) if args.weights else WeightTable()
        engine = RecommendationEngine(
            event_store=CsvEventStore(args.events),
            weights=weights,
            lookback=timedelta(days=args.lookback_days),
        )
        result = engine.explain(args.user_id, limit=args.limit, now=args.now)
        candidates = (
            engine.score(args.user_id, now=result.cutoff + engine.lookback)
            if args.explain
            else {}
        )
    except RecommenderError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print(f"\nRecommendations for user {args.user_id}:")
    print(f"  Top {len(result.product_ids)} products: {result.product_ids}")

    if args.explain:
        print(f"\nEvent window: after {result.cutoff.isoformat()}")
        print(f"  Events considered: {result.num_events}")
        print(f"  Candidate products: {len(candidates)}")
        for product_id in result.product_ids:
            print(f"  {product_id}: {result.scores[product_id]}")

    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
