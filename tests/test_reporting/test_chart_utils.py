"""
Tests for chart formatting, filtering, parsing and CSV export helpers.

What we test
------------
1. Compact price labels and signed percent changes.
2. Date-range filtering relative to the most recent point.
3. Parsing of value-change rows and RAP history arrays.
4. CSV rendering with and without a volume column; file export.
"""

from __future__ import annotations

import pytest

from collectible_forecaster.models.market import PricePoint
from collectible_forecaster.reporting.chart_utils import (
    DateRange,
    csv_filename,
    export_series_csv,
    filter_by_date_range,
    format_percent_change,
    format_price,
    parse_rap_history,
    parse_value_changes,
    series_to_csv,
)
from collectible_forecaster.utils.time_utils import SECONDS_PER_DAY


# ── Formatting ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "price, expected",
    [
        (950, "950"),
        (999.5, "999.5"),
        (1_000, "1K"),
        (1_234, "1.2K"),
        (12_345.6, "12.3K"),
        (1_000_000, "1M"),
        (2_500_000, "2.5M"),
    ],
)
def test_format_price(price, expected) -> None:
    assert format_price(price) == expected


@pytest.mark.parametrize(
    "change, expected", [(3.14159, "+3.14%"), (-2, "-2.00%"), (0, "+0.00%")]
)
def test_format_percent_change(change, expected) -> None:
    assert format_percent_change(change) == expected


# ── Filtering ─────────────────────────────────────────────────────────────────

class TestFilterByDateRange:
    def test_week_window(self, series_factory):
        series = series_factory([100.0] * 40)
        kept = filter_by_date_range(series, DateRange.WEEK)
        assert len(kept) == 8
        assert kept[-1] == series[-1]

    def test_string_range(self, series_factory):
        series = series_factory([100.0] * 40)
        assert len(filter_by_date_range(series, "30d")) == 31

    def test_all_keeps_everything(self, series_factory):
        series = series_factory([100.0] * 40)
        assert filter_by_date_range(series, DateRange.ALL) == series

    def test_empty_series(self):
        assert filter_by_date_range([], DateRange.MONTH) == []

    def test_unknown_range(self, series_factory):
        with pytest.raises(ValueError):
            filter_by_date_range(series_factory([1.0]), "2w")


# ── Parsing ───────────────────────────────────────────────────────────────────

def test_parse_value_changes(fixed_now) -> None:
    later = fixed_now + SECONDS_PER_DAY
    rows = [
        [later, 1, None, 1200],
        [fixed_now, 2, None, 50],
        [fixed_now, 1, None, "n/a"],
        [fixed_now, 1, None, True],
        [fixed_now, 1],
        [fixed_now, 1, None, 1000],
    ]
    points = parse_value_changes(rows)
    assert [(p.time, p.price) for p in points] == [(fixed_now, 1000), (later, 1200)]
    assert points[0].display_date == "Jan 01, 2026"


@pytest.mark.parametrize("empty", [None, []])
def test_parse_value_changes_empty(empty) -> None:
    assert parse_value_changes(empty) == []


def test_parse_rap_history(fixed_now) -> None:
    history = {
        "timestamp": [fixed_now + 2 * SECONDS_PER_DAY, fixed_now, fixed_now + SECONDS_PER_DAY],
        "rap": [300, 100, None],
    }
    points = parse_rap_history(history)
    assert [p.price for p in points] == [100, 300]
    assert points[0].display_date == "Jan 01, 2026, 12:00 AM"


def test_parse_rap_history_missing_keys() -> None:
    assert parse_rap_history({"timestamp": [1, 2]}) == []
    assert parse_rap_history(None) == []


# ── Export ────────────────────────────────────────────────────────────────────

_POINTS = [
    PricePoint(price=1000, time=0, display_date="Jan 01, 1970", volume=4),
    PricePoint(price=1250.5, time=86_400, display_date="Jan 02, 1970"),
]


def test_series_to_csv() -> None:
    assert series_to_csv(_POINTS) == (
        "Date,Value\n"
        '"Jan 01, 1970",1000\n'
        '"Jan 02, 1970",1250.5\n'
    )


def test_series_to_csv_with_volume() -> None:
    lines = series_to_csv(_POINTS, include_volume=True).splitlines()
    assert lines[0] == "Date,Value,Volume"
    assert lines[1] == '"Jan 01, 1970",1000,4'
    assert lines[2] == '"Jan 02, 1970",1250.5'


def test_export_series_csv(tmp_path) -> None:
    target = tmp_path / "charts" / "item.csv"
    written = export_series_csv(_POINTS, target)
    assert written == target
    assert target.read_text(encoding="utf-8") == series_to_csv(_POINTS)


def test_csv_filename() -> None:
    assert csv_filename("Dominus  Empyreus", "30d") == "Dominus_Empyreus_30d.csv"
    assert csv_filename("Valk", DateRange.ALL) == "Valk_all.csv"
