"""
Time and date utilities for forecast timelines.

Key concepts:
  - Price points carry Unix-second timestamps; forecasts are spaced exactly
    one day (``SECONDS_PER_DAY``) apart.
  - The forecast timeline starts after ``max(now, last historical timestamp)``
    so a stale series never produces forecast points in the past.
  - ``now`` is always injectable; ``utcnow()`` is only the default.
"""

from __future__ import annotations

from datetime import datetime, timezone

SECONDS_PER_DAY = 86_400

DISPLAY_DATE_FORMAT = "%b %d, %Y"


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def to_unix_seconds(moment: datetime | float | int | None) -> int:
    """Normalise ``moment`` to integer Unix seconds; ``None`` means now.

    Naive datetimes are interpreted as UTC.
    """
    if moment is None:
        moment = utcnow()
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return int(moment.timestamp())
    return int(moment)


def days_between(earlier: float, later: float) -> float:
    """Return the (possibly fractional) number of days from ``earlier`` to ``later``."""
    return (later - earlier) / SECONDS_PER_DAY


def forecast_timestamps(last_time: float, now: float, days: int) -> list[int]:
    """Return ``days`` one-day-spaced timestamps starting after ``max(now, last_time)``.

    Args:
        last_time: Timestamp of the last historical point (Unix seconds).
        now:       Reference "current" time (Unix seconds).
        days:      Number of forecast points.

    Returns:
        Strictly increasing list of Unix-second timestamps.
    """
    start = int(max(now, last_time))
    return [start + (day + 1) * SECONDS_PER_DAY for day in range(days)]


def format_display_date(timestamp: float, label: str | None = None) -> str:
    """Format a Unix timestamp as ``"Mar 05, 2026"``, optionally suffixed ``" (label)"``."""
    text = datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime(DISPLAY_DATE_FORMAT)
    return f"{text} ({label})" if label else text
