"""Tests for collectible_forecaster.reporting.formatters."""

from __future__ import annotations

import math
import re

from collectible_forecaster.engines.common import build_prediction
from collectible_forecaster.models.forecast import PredictionResult
from collectible_forecaster.reporting.formatters import format_prediction_summary
from collectible_forecaster.taxonomy.market_taxonomy import (
    ConfidenceLevel,
    LiquidityRating,
    MarketRegime,
    PressureDirection,
)

_ROW = re.compile(r"^\s+\d+\s{2}[A-Z][a-z]{2} \d{2}, \d{4}")


# ── Helpers ───────────────────────────────────────────────────────────────────


def _result(fixed_now: int, days: int = 5, **overrides) -> PredictionResult:
    bands = build_prediction(
        fixed_now, fixed_now,
        [1000 + 25 * i for i in range(days)],
        [1100 + 25 * i for i in range(days)],
        [900 + 25 * i for i in range(days)],
    )
    fields = dict(
        predicted=bands.predicted,
        upper_band=bands.upper_band,
        lower_band=bands.lower_band,
        confidence_score=65,
        confidence_level=ConfidenceLevel.MEDIUM,
        confidence_factors=["Liquid market - technical analysis applicable"],
        liquidity_rating=LiquidityRating.FAST,
        days_to_sell=0.5,
        pressure_rating="Undervalued",
        pressure_direction=PressureDirection.UP,
        regime=MarketRegime.FLOW,
        sanitized_count=2,
    )
    fields.update(overrides)
    return PredictionResult(**fields)


def _table_rows(text: str) -> list[str]:
    return [line for line in text.splitlines() if _ROW.match(line)]


# ── Empty result ──────────────────────────────────────────────────────────────


def test_empty_result() -> None:
    """The insufficient-data result prints a single explanatory line."""
    text = format_prediction_summary(PredictionResult.empty())
    assert "=== Price Forecast ===" in text
    assert "insufficient data" in text
    assert "Sanitized" not in text


def test_empty_result_reports_removals() -> None:
    text = format_prediction_summary(PredictionResult.empty(sanitized_count=3))
    assert "3 point(s) removed" in text


# ── Header block ──────────────────────────────────────────────────────────────


def test_header_fields(fixed_now) -> None:
    text = format_prediction_summary(_result(fixed_now))
    assert "Regime:        FLOW" in text
    assert "Confidence:    65% (medium)" in text
    assert "Liquidity:     fast (0.5 days to sell)" in text
    assert "Pressure:      Undervalued (up)" in text
    assert "Sanitized:     2 point(s) removed" in text


def test_unknown_days_to_sell(fixed_now) -> None:
    text = format_prediction_summary(_result(fixed_now, days_to_sell=math.inf))
    assert "(unknown)" in text


def test_horizon_line(fixed_now) -> None:
    """The horizon line compares the last day's median with the last price."""
    text = format_prediction_summary(_result(fixed_now, days=5), last_price=1000)
    assert "Horizon:       1K -> 1.1K (+10.00% over 5 days)" in text


def test_no_horizon_without_last_price(fixed_now) -> None:
    assert "Horizon" not in format_prediction_summary(_result(fixed_now))


def test_factors_toggle(fixed_now) -> None:
    shown = format_prediction_summary(_result(fixed_now))
    hidden = format_prediction_summary(_result(fixed_now), show_factors=False)
    assert "- Liquid market - technical analysis applicable" in shown
    assert "Confidence factors" not in hidden


# ── Table ─────────────────────────────────────────────────────────────────────


def test_short_horizon_lists_every_day(fixed_now) -> None:
    rows = _table_rows(format_prediction_summary(_result(fixed_now, days=5)))
    assert len(rows) == 5
    assert "Jan 02, 2026" in rows[0]
    assert "1K" in rows[0] and "1.1K" in rows[0] and "900" in rows[0]


def test_long_horizon_is_thinned(fixed_now) -> None:
    """30 days with 15 max rows: every second day plus the final day."""
    rows = _table_rows(format_prediction_summary(_result(fixed_now, days=30)))
    assert len(rows) == 16
    assert rows[0].split()[0] == "1"
    assert rows[-1].split()[0] == "30"
