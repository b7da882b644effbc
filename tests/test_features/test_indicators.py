"""Tests for collectible_forecaster.features.indicators."""

from __future__ import annotations

import math

import pytest

from collectible_forecaster.features.indicators import (
    average_volume,
    coefficient_of_variation,
    ema,
    floor_support,
    log_returns,
    momentum,
    moving_average,
    series_statistics,
    support_resistance,
    weighted_linear_regression_returns,
)
from collectible_forecaster.models.market import PricePoint


def _series(prices, volumes=None):
    volumes = volumes or [None] * len(prices)
    return [
        PricePoint(price=p, time=i * 86_400, display_date=f"d{i}", volume=v)
        for i, (p, v) in enumerate(zip(prices, volumes))
    ]


# ── Value-list indicators ─────────────────────────────────────────────────────

def test_log_returns_skip_non_positive() -> None:
    out = log_returns([100, 110, 0, 50])
    assert out == [pytest.approx(math.log(1.1))]


def test_ema_period_one_tracks_values() -> None:
    assert ema([1, 2, 3], 1) == [1.0, 2.0, 3.0]


def test_ema_smoothing() -> None:
    # k = 2 / (3 + 1) = 0.5
    assert ema([10, 20], 3) == [10.0, 15.0]


def test_ema_empty() -> None:
    assert ema([], 20) == []


def test_momentum() -> None:
    assert momentum([100] * 14 + [110], 14) == pytest.approx(0.1)
    assert momentum([100, 110], 14) == 0.0


def test_coefficient_of_variation() -> None:
    assert coefficient_of_variation([2, 4]) == pytest.approx(1 / 3)
    assert coefficient_of_variation([5]) == 0.0


# ── Series indicators ─────────────────────────────────────────────────────────

def test_moving_average_aligned_to_window_end() -> None:
    ma = moving_average(_series([1, 2, 3, 4, 5]), 3)
    assert [p.price for p in ma] == pytest.approx([2.0, 3.0, 4.0])
    assert [p.time for p in ma] == [2 * 86_400, 3 * 86_400, 4 * 86_400]
    assert ma[0].display_date == "d2"


def test_moving_average_too_short() -> None:
    assert moving_average(_series([1, 2]), 3) == []


def test_series_statistics() -> None:
    stats = series_statistics(_series([100, 200, 150]))
    assert stats is not None
    assert stats.min == 100 and stats.max == 200
    assert stats.avg == pytest.approx(150)
    assert stats.change_pct == pytest.approx(50.0)
    assert stats.volatility_pct > 0


def test_series_statistics_empty() -> None:
    assert series_statistics([]) is None


class TestSupportResistance:
    def test_short_series_uses_min_max(self):
        assert support_resistance([5, 3, 8]) == (3, 8)

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            support_resistance([])

    def test_local_extrema(self):
        values = [10, 10, 5, 10, 10, 10, 20, 10, 10, 10, 12]
        support, resistance = support_resistance(values)
        assert (support, resistance) == (5, 20)


class TestFloorSupport:
    def test_short_series(self):
        assert floor_support(_series([100, 120])) == (120, 120, 120)

    def test_empty_series(self):
        assert floor_support([]) == (0.0, 0.0, 0.0)

    def test_floor_and_ceiling(self):
        support, resistance, floor_price = floor_support(
            _series([100, 90, 120, 110, 95, 105, 130])
        )
        assert floor_price == 90
        assert support == pytest.approx(85.5)
        assert resistance == pytest.approx(136.5)


def test_average_volume_window_and_missing() -> None:
    series = _series([1] * 4, volumes=[100, None, 4, 8])
    assert average_volume(series, window=3) == pytest.approx(4.0)
    assert average_volume([], window=30) == 0.0


class TestWeightedRegression:
    def test_empty(self):
        assert weighted_linear_regression_returns([]) == (0.0, 0.0)

    def test_constant_returns(self):
        expected, trend = weighted_linear_regression_returns([0.01] * 5)
        assert expected == pytest.approx(0.01)
        assert trend == pytest.approx(0.0)

    def test_linear_returns_recover_slope(self):
        _, trend = weighted_linear_regression_returns([0.0, 1.0, 2.0, 3.0])
        assert trend == pytest.approx(1.0)
