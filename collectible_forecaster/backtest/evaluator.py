"""
Hold-out backtests that weight the Flow engine's forecast ensemble.

How it works
------------
1. Split the value history into ``train = values[:-holdout]`` and
   ``test = values[-holdout:]``.
2. Each method forecasts ``holdout`` steps from ``train`` alone:
     holt_winters  grid-fitted Holt-Winters
     ema           decaying-slope EMA extrapolation
     gbm           median of a small Monte Carlo run (normal shocks)
3. Score each forecast by MSE against ``test``.
4. Convert errors to inverse-variance weights.

Histories shorter than ``holdout + min_history`` are not backtested; every
method scores ``inf`` and the weights fall back to an equal split.

Leakage proof
-------------
Methods receive only ``train``. ``test`` is used exclusively by
``calculate_mse``.
"""

from __future__ import annotations

import logging
import math
from enum import StrEnum
from typing import Sequence

import numpy as np

from collectible_forecaster.backtest.holt_winters import DEFAULT_VALIDATION_PERIOD, holt_winters
from collectible_forecaster.backtest.metrics import calculate_mse, inverse_variance_weights
from collectible_forecaster.config import BacktestConfig
from collectible_forecaster.features.indicators import ema
from collectible_forecaster.features.returns import market_stats_from_values
from collectible_forecaster.simulation.monte_carlo import run_monte_carlo

logger = logging.getLogger(__name__)

EMA_PERIOD = 20
EMA_SLOPE_DECAY = 0.92  # slope halves roughly every 8 days


class ForecastMethod(StrEnum):
    """Members of the Flow ensemble."""

    HOLT_WINTERS = "holt_winters"
    EMA = "ema"
    GBM = "gbm"


def ema_forecast(
    values: Sequence[float],
    periods: int,
    ema_period: int = EMA_PERIOD,
    slope_decay: float = EMA_SLOPE_DECAY,
) -> list[float]:
    """Extrapolate the last EMA with a geometrically decaying slope.

    ``forecast_i = ema_last + Σ_{k=0..i} slope · decay^k`` where ``slope`` is
    the last one-step EMA change. Momentum rarely persists linearly, so the
    cumulative move converges to ``slope / (1 − decay)``.

    Fewer than two values gives a flat line at the last value (0 if empty).
    """
    smoothed = ema(values, ema_period)
    if len(smoothed) < 2:
        flat = float(values[-1]) if values else 0.0
        return [flat] * periods

    last = smoothed[-1]
    slope = smoothed[-1] - smoothed[-2]
    forecasts: list[float] = []
    cumulative = 0.0
    for i in range(periods):
        cumulative += slope * slope_decay ** i
        forecasts.append(last + cumulative)
    return forecasts


def forecast_values(
    method: ForecastMethod,
    values: Sequence[float],
    periods: int,
    *,
    rng: np.random.Generator,
    num_paths: int,
    validation_period: int = DEFAULT_VALIDATION_PERIOD,
) -> list[float]:
    """Forecast ``periods`` steps of an untimed value list with ``method``."""
    if method is ForecastMethod.HOLT_WINTERS:
        return holt_winters(values, periods, validation_period)
    if method is ForecastMethod.EMA:
        return ema_forecast(values, periods)
    if method is ForecastMethod.GBM:
        stats = market_stats_from_values(values)
        bands = run_monte_carlo(
            values[-1], stats.drift, stats.volatility, periods,
            rng=rng,
            num_simulations=num_paths,
            use_fat_tails=False,
        )
        return bands.median
    raise ValueError(f"Unknown forecast method: {method!r}")


def backtest_method(
    values: Sequence[float],
    method: ForecastMethod,
    *,
    rng: np.random.Generator,
    config: BacktestConfig | None = None,
) -> float:
    """Hold-out MSE of ``method`` on ``values``; ``inf`` if the history is too short."""
    cfg = config or BacktestConfig()
    if len(values) < cfg.holdout_points + cfg.min_history_points:
        return math.inf

    train = list(values[: -cfg.holdout_points])
    test = list(values[-cfg.holdout_points:])
    predicted = forecast_values(
        method, train, cfg.holdout_points,
        rng=rng,
        num_paths=cfg.backtest_paths,
        validation_period=cfg.holdout_points,
    )
    return calculate_mse(test, predicted)


def ensemble_weights(
    values: Sequence[float],
    *,
    rng: np.random.Generator,
    config: BacktestConfig | None = None,
) -> dict[ForecastMethod, float]:
    """Backtest every ensemble member and return inverse-variance weights."""
    errors = {
        method: backtest_method(values, method, rng=rng, config=config)
        for method in ForecastMethod
    }
    weights = inverse_variance_weights(errors)
    logger.debug(
        "Ensemble weights: %s (backtest MSE: %s)",
        {str(m): round(w, 3) for m, w in weights.items()},
        {str(m): e for m, e in errors.items()},
    )
    return weights
