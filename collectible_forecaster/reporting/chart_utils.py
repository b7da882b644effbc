"""
Helpers for the charting layer that consumes forecasts.

Formatting
  ``format_price``          1234 → "1.2K", 2500000 → "2.5M", 950 → "950".
  ``format_percent_change`` 3.14159 → "+3.14%", -2 → "-2.00%".

Filtering
  ``filter_by_date_range`` keeps points within the trailing window
  (7d / 30d / 90d / 180d / 1y) measured back from the most recent point,
  not from the wall clock, so stale series still show their last window.

Parsing
  Market-data APIs return history in two raw shapes; both parsers produce a
  time-ascending ``list[PricePoint]`` ready for ``generate_full_prediction``.

  ``parse_value_changes``  rows of ``[timestamp, change_type, _, value, ...]``;
                           only ``change_type == 1`` rows with a numeric value
                           are value changes.
  ``parse_rap_history``    parallel ``{"timestamp": [...], "rap": [...]}``
                           arrays; ``None`` RAP entries are skipped.

Export
  ``series_to_csv`` renders ``Date,Value[,Volume]`` text;
  ``export_series_csv`` writes it to disk.
"""

from __future__ import annotations

import csv
import io
import math
from datetime import datetime, timezone
from enum import StrEnum
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from collectible_forecaster.models.market import PricePoint
from collectible_forecaster.utils.time_utils import SECONDS_PER_DAY, format_display_date

VALUE_CHANGE_TYPE = 1
RAP_DATE_FORMAT = "%b %d, %Y, %I:%M %p"


class DateRange(StrEnum):
    """Chart time windows."""

    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    HALF_YEAR = "180d"
    YEAR = "1y"
    ALL = "all"


_RANGE_SECONDS: dict[DateRange, int] = {
    DateRange.WEEK: 7 * SECONDS_PER_DAY,
    DateRange.MONTH: 30 * SECONDS_PER_DAY,
    DateRange.QUARTER: 90 * SECONDS_PER_DAY,
    DateRange.HALF_YEAR: 180 * SECONDS_PER_DAY,
    DateRange.YEAR: 365 * SECONDS_PER_DAY,
}


# ── Formatting ────────────────────────────────────────────────────────────────


def _compact(value: float, suffix: str) -> str:
    text = f"{value:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return text + suffix


def format_price(price: float) -> str:
    """Compact price label with K / M suffixes above one thousand."""
    if price >= 1_000_000:
        return _compact(price / 1_000_000, "M")
    if price >= 1_000:
        return _compact(price / 1_000, "K")
    if float(price).is_integer():
        return f"{int(price):,}"
    return f"{price:,.3f}".rstrip("0").rstrip(".")


def format_percent_change(change: float) -> str:
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.2f}%"


# ── Filtering ─────────────────────────────────────────────────────────────────


def filter_by_date_range(
    series: Sequence[PricePoint],
    date_range: DateRange | str,
) -> list[PricePoint]:
    """Points no older than ``date_range`` before the most recent point.

    Raises:
        ValueError: ``date_range`` is not a known window.
    """
    window = DateRange(date_range)
    if window is DateRange.ALL or not series:
        return list(series)

    most_recent = max(p.time for p in series)
    cutoff = most_recent - _RANGE_SECONDS[window]
    return [p for p in series if p.time >= cutoff]


# ── Parsing ───────────────────────────────────────────────────────────────────


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def parse_value_changes(value_changes: Optional[Sequence[Sequence[Any]]]) -> list[PricePoint]:
    """Convert raw value-change rows into ascending ``PricePoint``s."""
    if not value_changes:
        return []

    points: list[PricePoint] = []
    for change in value_changes:
        if len(change) < 4 or change[1] != VALUE_CHANGE_TYPE or not _is_number(change[3]):
            continue
        timestamp = change[0]
        points.append(PricePoint(
            price=change[3],
            time=timestamp,
            display_date=format_display_date(timestamp),
        ))
    return sorted(points, key=lambda p: p.time)


def parse_rap_history(history: Optional[Mapping[str, Any]]) -> list[PricePoint]:
    """Convert parallel timestamp / RAP arrays into ascending ``PricePoint``s.

    Arrays of unequal length are truncated to the shorter one.
    """
    if not history:
        return []
    timestamps = history.get("timestamp") or []
    raps = history.get("rap") or []

    points: list[PricePoint] = []
    for timestamp, rap in zip(timestamps, raps):
        if rap is None:
            continue
        label = datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime(RAP_DATE_FORMAT)
        points.append(PricePoint(price=rap, time=timestamp, display_date=label))
    return sorted(points, key=lambda p: p.time)


# ── Export ────────────────────────────────────────────────────────────────────


def series_to_csv(series: Sequence[PricePoint], include_volume: bool = False) -> str:
    """Render ``series`` as CSV text with a ``Date,Value[,Volume]`` header."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Date", "Value", "Volume"] if include_volume else ["Date", "Value"])
    for p in series:
        row: list[Any] = [p.display_date, _csv_number(p.price)]
        if include_volume and p.volume is not None:
            row.append(_csv_number(p.volume))
        writer.writerow(row)
    return buffer.getvalue()


def export_series_csv(
    series: Sequence[PricePoint],
    path: Path,
    include_volume: bool = False,
) -> Path:
    """Write ``series_to_csv(series)`` to ``path`` (parent dirs created) and return it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(series_to_csv(series, include_volume), encoding="utf-8")
    return path


def csv_filename(title: str, date_range: DateRange | str) -> str:
    """``"Dominus Empyreus", "30d"`` → ``"Dominus_Empyreus_30d.csv"``."""
    return f"{'_'.join(title.split())}_{DateRange(date_range)}.csv"


def _csv_number(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value
