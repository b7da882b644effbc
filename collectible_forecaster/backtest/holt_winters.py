"""
Holt's double exponential smoothing (level + trend) with grid-fitted parameters.

    level_t = α · v_t + (1 − α) · (level_{t−1} + trend_{t−1})
    trend_t = β · (level_t − level_{t−1}) + (1 − β) · trend_{t−1}
    forecast_{t+h} = level_t + h · trend_t

Initialisation: ``level = v_0``, ``trend = v_1 − v_0``; the recursion then
runs from index 1.

Parameter fitting
-----------------
``fit_holt_winters_params`` holds out the last ``validation_period`` values,
fits on the rest and picks the (α, β) pair with the lowest hold-out MSE from
a fixed grid (α ∈ 0.1..0.9 step 0.1, β ∈ 0.05..0.5 step 0.05). The grid is
built from integer steps so float accumulation cannot drop the last value.
Series shorter than ``validation_period + 10`` get the fallback (0.3, 0.1).
"""

from __future__ import annotations

import logging
from typing import Sequence

from collectible_forecaster.backtest.metrics import calculate_mse

logger = logging.getLogger(__name__)

DEFAULT_ALPHA = 0.3
DEFAULT_BETA = 0.1
DEFAULT_VALIDATION_PERIOD = 14
MIN_TRAIN_POINTS = 10

ALPHA_GRID: tuple[float, ...] = tuple(round(0.1 * i, 2) for i in range(1, 10))
BETA_GRID: tuple[float, ...] = tuple(round(0.05 * i, 2) for i in range(1, 11))


def holt_winters_with_params(
    values: Sequence[float],
    alpha: float,
    beta: float,
    periods: int,
) -> list[float]:
    """Forecast ``periods`` steps ahead; empty for fewer than 2 values."""
    if len(values) < 2:
        return []

    level = float(values[0])
    trend = float(values[1] - values[0])
    for v in values[1:]:
        prev_level = level
        level = alpha * v + (1.0 - alpha) * (level + trend)
        trend = beta * (level - prev_level) + (1.0 - beta) * trend

    return [level + h * trend for h in range(1, periods + 1)]


def fit_holt_winters_params(
    values: Sequence[float],
    validation_period: int = DEFAULT_VALIDATION_PERIOD,
) -> tuple[float, float]:
    """Grid-search (α, β) on a trailing hold-out window.

    Returns:
        ``(alpha, beta)``; ``(DEFAULT_ALPHA, DEFAULT_BETA)`` when the series
        is too short to hold anything out.
    """
    if len(values) < validation_period + MIN_TRAIN_POINTS:
        return DEFAULT_ALPHA, DEFAULT_BETA

    train = values[:-validation_period]
    validation = values[-validation_period:]

    best_alpha, best_beta = DEFAULT_ALPHA, DEFAULT_BETA
    best_mse = float("inf")
    for alpha in ALPHA_GRID:
        for beta in BETA_GRID:
            forecast = holt_winters_with_params(train, alpha, beta, validation_period)
            mse = calculate_mse(validation, forecast)
            if mse < best_mse:
                best_mse, best_alpha, best_beta = mse, alpha, beta

    logger.debug(
        "Holt-Winters fit: alpha=%.2f beta=%.2f (hold-out MSE=%.4g)",
        best_alpha, best_beta, best_mse,
    )
    return best_alpha, best_beta


def holt_winters(
    values: Sequence[float],
    periods: int = 30,
    validation_period: int = DEFAULT_VALIDATION_PERIOD,
) -> list[float]:
    """Holt-Winters forecast with parameters fitted to ``values``.

    ``validation_period`` is the fitting hold-out; callers pass
    ``BacktestConfig.holdout_points`` so it matches the ensemble backtest.
    """
    alpha, beta = fit_holt_winters_params(values, validation_period)
    return holt_winters_with_params(values, alpha, beta, periods)
