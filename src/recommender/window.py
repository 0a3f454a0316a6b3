"""Lookback window selection.

Only events recorded strictly after the cutoff count as recent.
"""

from datetime import datetime, timedelta

from src.recommender.exceptions import InvalidConfiguration

# Default lookback window
DEFAULT_LOOKBACK_DAYS = 30
DEFAULT_LOOKBACK = timedelta(days=DEFAULT_LOOKBACK_DAYS)


def validate_lookback(lookback: timedelta) -> timedelta:
    """Return lookback unchanged, or raise InvalidConfiguration if unusable."""
    if not isinstance(lookback, timedelta):
        raise InvalidConfiguration(
            "lookback", f"expected a timedelta, got {type(lookback).__name__}"
        )
    if lookback < timedelta(0):
        raise InvalidConfiguration(
            "lookback",
            f"lookback must be non-negative, got {lookback}",
            details={"lookback_seconds": lookback.total_seconds()},
        )
    return lookback


def compute_cutoff(now: datetime, lookback: timedelta = DEFAULT_LOOKBACK) -> datetime:
    """Compute the oldest timestamp an event may have and still be counted.

    Args:
        now: Reference time, normally the current UTC time.
        lookback: How far back from now to look. Must be non-negative.

    Returns:
        now - lookback

    Raises:
        InvalidConfiguration: If lookback is negative.

    Example:
        >>> compute_cutoff(datetime(2024, 3, 31), timedelta(days=30))
        datetime.datetime(2024, 3, 1, 0, 0)
    """
    return now - validate_lookback(lookback)


def is_within_window(created_at: datetime, cutoff: datetime) -> bool:
    """True if an event stamped created_at falls inside the window."""
    return created_at > cutoff
