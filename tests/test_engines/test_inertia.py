"""
Tests for the Inertia (illiquid market) engine.

What we test
------------
1. Neutral sentiment on a flat history gives a flat, anchored median.
2. Spread starts at 2.5% and widens with sqrt(day).
3. Sentiment dominates damped historical drift when larger.
4. Drift decays by 0.98 per day.
5. Spread cap depends on seller count (unknown counts as one seller).
6. The engine is deterministic (ignores rng).
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from collectible_forecaster.engines.common import round_price
from collectible_forecaster.engines.inertia import (
    DRIFT_DECAY,
    HISTORICAL_DRIFT_DAMPING,
    ILLIQUID_MAX_SPREAD,
    MAX_SPREAD,
    inertia_daily_drift,
    max_spread_for,
    run_inertia_engine,
)
from collectible_forecaster.features.returns import market_stats_from_series
from collectible_forecaster.models.market import PredictionConfig


# ── Helpers ───────────────────────────────────────────────────────────────────

def _run(series, config, settings, now, days=30, seed=0):
    return run_inertia_engine(
        series, config, days, rng=np.random.default_rng(seed), now=now, settings=settings
    )


# ── Median ────────────────────────────────────────────────────────────────────

def test_flat_history_neutral_sentiment_is_flat(flat_series, settings, fixed_now) -> None:
    out = _run(flat_series, PredictionConfig(sellers=2), settings, fixed_now)
    assert [p.price for p in out.predicted] == [5000] * 30


def test_first_day_spread(flat_series, settings, fixed_now) -> None:
    out = _run(flat_series, PredictionConfig(sellers=2), settings, fixed_now, days=1)
    assert out.upper_band[0].price == 5125
    assert out.lower_band[0].price == 4875


def test_spread_widens(flat_series, settings, fixed_now) -> None:
    out = _run(flat_series, PredictionConfig(sellers=2), settings, fixed_now)
    widths = [u.price - l.price for u, l in zip(out.upper_band, out.lower_band)]
    assert widths == sorted(widths)
    assert widths[-1] > widths[0]


def test_drift_decays(series_factory, settings, fixed_now) -> None:
    series = series_factory([3333.0] * 10)
    out = _run(series, PredictionConfig(sellers=1, demand=3, trend=2), settings, fixed_now, days=5)
    daily = inertia_daily_drift(series, 3, 2)
    cumulative = 0.0
    expected = []
    for day in range(5):
        cumulative += daily * DRIFT_DECAY ** day
        expected.append(round_price(3333.0 * math.exp(cumulative)))
    assert [p.price for p in out.predicted] == expected


def test_bullish_sentiment_rises(series_factory, settings, fixed_now) -> None:
    series = series_factory([3333.0] * 10)
    out = _run(series, PredictionConfig(sellers=1, demand=4, trend=3), settings, fixed_now)
    prices = [p.price for p in out.predicted]
    assert prices[-1] > prices[0] > 3333


# ── Drift selection ───────────────────────────────────────────────────────────

class TestDailyDrift:
    def test_sentiment_dominates_flat_history(self, flat_series):
        assert inertia_daily_drift(flat_series, 3, 2) == pytest.approx(0.006)

    def test_neutral_sentiment_uses_damped_history(self, rising_series):
        expected = market_stats_from_series(rising_series).drift * HISTORICAL_DRIFT_DAMPING
        assert inertia_daily_drift(rising_series, 2, 2) == pytest.approx(expected)


# ── Spread cap ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "sellers, cap",
    [(None, ILLIQUID_MAX_SPREAD), (0, ILLIQUID_MAX_SPREAD), (3, ILLIQUID_MAX_SPREAD),
     (4, MAX_SPREAD), (10, MAX_SPREAD)],
)
def test_max_spread_for(sellers, cap) -> None:
    assert max_spread_for(sellers) == cap


def test_deterministic(flat_series, settings, fixed_now) -> None:
    cfg = PredictionConfig(sellers=2, demand=4, trend=0)
    assert _run(flat_series, cfg, settings, fixed_now, seed=1) == _run(
        flat_series, cfg, settings, fixed_now, seed=2
    )
