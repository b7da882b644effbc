"""
Flow engine: liquid, commodity-like assets (many competing sellers).

With enough sellers, supply and demand produce genuine price discovery, so
trend, momentum and volatility estimates mean something. The forecast is a
weighted ensemble of three methods:

  holt_winters  grid-fitted level + trend smoothing
  ema           EMA extrapolation with a decaying slope
  gbm           Monte Carlo median (Student-t shocks)

Weights come from each method's hold-out backtest error
(``backtest.evaluator.ensemble_weights``).

Fundamental adjustments
-----------------------
  drift        += demand / trend table adjustments
                + RAP/Value pressure (±0.003 × magnitude)
  volatility   ×= demand multiplier (0.7 for "amazing" up to 1.4 for "terrible")
  upper band   ×= 1 + 0.5 × order-book gap strength

The median is snapped to psychological levels; the bands are the Monte Carlo
10th / 90th percentiles.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from collectible_forecaster.backtest.evaluator import (
    ForecastMethod,
    ema_forecast,
    ensemble_weights,
)
from collectible_forecaster.backtest.holt_winters import holt_winters
from collectible_forecaster.config import AppConfig
from collectible_forecaster.engines.common import build_prediction, snap_to_psychological_level
from collectible_forecaster.features.returns import market_stats_from_series
from collectible_forecaster.features.sentiment import sentiment_drift, volatility_multiplier
from collectible_forecaster.metrics.liquidity import analyze_order_book_gaps
from collectible_forecaster.metrics.pressure import calculate_pressure
from collectible_forecaster.models.forecast import PredictionWithBands
from collectible_forecaster.models.market import PricePoint, PredictionConfig
from collectible_forecaster.simulation.monte_carlo import run_monte_carlo

logger = logging.getLogger(__name__)

GAP_BAND_WIDENING = 0.5


def _at(values: Sequence[float], day: int, default: float) -> float:
    return values[day] if day < len(values) else default


def run_flow_engine(
    series: Sequence[PricePoint],
    config: PredictionConfig,
    days: int,
    *,
    rng: np.random.Generator,
    now: float,
    settings: AppConfig,
) -> PredictionWithBands:
    """Ensemble forecast for a liquid market.

    Args:
        series: Sanitized history (at least one point), ascending by time.
        config: Fundamentals for this asset.
        days: Forecast horizon.
        rng: Generator for the Monte Carlo and GBM backtest.
        now: Reference Unix time.
        settings: Simulation and backtest settings.

    Returns:
        ``PredictionWithBands`` with ``days`` points per band.
    """
    values = [p.price for p in series]
    last = series[-1]
    last_price = last.price

    stats = market_stats_from_series(series)
    pressure = calculate_pressure(config.rap, config.value)
    sentiment = sentiment_drift(config.demand, config.trend) + pressure.drift_adjustment
    adjusted_vol = stats.volatility * volatility_multiplier(config.demand)

    gaps = analyze_order_book_gaps(config.order_book, last_price)
    upper_multiplier = 1.0 + gaps.gap_strength * GAP_BAND_WIDENING

    weights = ensemble_weights(values, rng=rng, config=settings.backtest)

    hw_forecast = holt_winters(values, days, settings.backtest.holdout_points)
    ema_values = ema_forecast(values, days)
    sim = settings.simulation
    mc = run_monte_carlo(
        last_price, stats.drift, adjusted_vol, days,
        rng=rng,
        num_simulations=sim.num_paths,
        sentiment_adjustment=sentiment,
        use_fat_tails=sim.use_fat_tails,
        df=sim.degrees_of_freedom,
    )

    predicted: list[float] = []
    upper: list[float] = []
    lower: list[float] = []
    for day in range(days):
        blended = (
            _at(hw_forecast, day, last_price) * weights[ForecastMethod.HOLT_WINTERS]
            + _at(ema_values, day, last_price) * weights[ForecastMethod.EMA]
            + _at(mc.median, day, last_price) * weights[ForecastMethod.GBM]
        )
        predicted.append(snap_to_psychological_level(max(1.0, blended)))
        upper.append(mc.upper[day] * upper_multiplier)
        lower.append(mc.lower[day])

    logger.debug(
        "Flow engine: drift=%.5f vol=%.5f (x%.2f) sentiment=%.5f gap_strength=%.2f",
        stats.drift, stats.volatility, volatility_multiplier(config.demand),
        sentiment, gaps.gap_strength,
    )
    return build_prediction(last.time, now, predicted, upper, lower)
