"""
Shared pytest fixtures for the Collectible Forecaster test suite.

Provides:
  - ``rng``: a seeded numpy Generator, so Monte Carlo output is reproducible.
  - ``fixed_now``: a fixed reference time (2026-01-01T00:00:00Z).
  - ``settings``: default ``AppConfig`` with a fixed seed.
  - Series factories for the scenarios used across test modules.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

import numpy as np
import pytest

from collectible_forecaster.config import AppConfig, SimulationConfig
from collectible_forecaster.models.market import PricePoint
from collectible_forecaster.utils.time_utils import SECONDS_PER_DAY

FIXED_NOW = 1_767_225_600  # 2026-01-01T00:00:00Z
SERIES_START = FIXED_NOW - 60 * SECONDS_PER_DAY


def make_series(
    prices: Sequence[float],
    start: int = SERIES_START,
    spacing_days: float = 1.0,
    volume: float | None = None,
) -> list[PricePoint]:
    """Build an ascending series from ``prices`` spaced ``spacing_days`` apart."""
    return [
        PricePoint(
            price=price,
            time=start + int(i * spacing_days * SECONDS_PER_DAY),
            volume=volume,
        )
        for i, price in enumerate(prices)
    ]


def rising_prices(n: int = 20, start: float = 1000.0, total_rise: float = 0.10) -> list[float]:
    """``n`` prices rising linearly by ``total_rise`` overall."""
    return [start * (1.0 + total_rise * i / (n - 1)) for i in range(n)]


# ── Randomness and time ───────────────────────────────────────────────────────

@pytest.fixture
def rng() -> np.random.Generator:
    """A freshly seeded generator per test."""
    return np.random.default_rng(12345)


@pytest.fixture
def fixed_now() -> int:
    return FIXED_NOW


@pytest.fixture
def settings() -> AppConfig:
    """Default settings with a fixed seed."""
    return AppConfig(simulation=SimulationConfig(seed=7))


@pytest.fixture
def restore_root_logger():
    """Undo ``configure_logging`` side effects on the root logger."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers = handlers
    root.setLevel(level)


# ── Series factories ──────────────────────────────────────────────────────────

@pytest.fixture
def series_factory() -> Callable[..., list[PricePoint]]:
    """Return ``make_series`` for tests that need custom shapes."""
    return make_series


@pytest.fixture
def rising_series() -> list[PricePoint]:
    """20 daily points rising 10% in total (1000 → 1100), 25 trades/day."""
    return make_series(rising_prices(), volume=25.0)


@pytest.fixture
def projected_series() -> list[PricePoint]:
    """20 daily points drifting from 9500 to 10000 (a pumped price)."""
    return make_series([9500.0 + 500.0 * i / 19 for i in range(20)], volume=1.0)


@pytest.fixture
def flat_series() -> list[PricePoint]:
    """30 daily points at exactly 5000."""
    return make_series([5000.0] * 30, volume=2.0)
