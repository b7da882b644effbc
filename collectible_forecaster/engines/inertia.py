"""
Inertia engine: illiquid, rarely traded assets (few sellers).

These do not behave like stocks. The last sale IS the market price; the
price steps when a sale happens and otherwise sits still, and a jump is real
rather than a spike to be corrected. Stock-style volatility applied here
produces phantom crashes, so volatility is ignored entirely.

Median
------
Anchored to the last price (last observation carried forward) with a small
drift::

    sentiment  = (demand_adj + trend_adj) × 2
    historical = 0.3 × historical drift
    daily      = sentiment                      if |sentiment| > |historical|
                 historical + 0.5 × sentiment   otherwise

    cumulative_d = Σ_{k=0..d} daily × 0.98^k
    median_d     = anchor × exp(cumulative_d)

Bands
-----
Symmetric around the snapped median, widening with the square root of the
horizon::

    spread_d = min(0.02 + 0.005 × sqrt(d + 1), cap)

``cap`` is 25% when there are at most ``ILLIQUID_SELLERS`` sellers (an unknown
count counts as a single seller), otherwise 15%.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from collectible_forecaster.config import AppConfig
from collectible_forecaster.engines.common import build_prediction, snap_to_psychological_level
from collectible_forecaster.features.returns import market_stats_from_series
from collectible_forecaster.features.sentiment import sentiment_drift
from collectible_forecaster.models.forecast import PredictionWithBands
from collectible_forecaster.models.market import PricePoint, PredictionConfig
from collectible_forecaster.regime.detector import ILLIQUID_SELLERS, SINGLE_SELLER

logger = logging.getLogger(__name__)

SENTIMENT_AMPLIFICATION = 2.0
HISTORICAL_DRIFT_DAMPING = 0.3
DRIFT_DECAY = 0.98

BASE_SPREAD = 0.02
SPREAD_GROWTH = 0.005
ILLIQUID_MAX_SPREAD = 0.25
MAX_SPREAD = 0.15


def inertia_daily_drift(series: Sequence[PricePoint], demand: int, trend: int) -> float:
    """Daily drift: amplified sentiment when it dominates, else damped history plus half sentiment."""
    historical = market_stats_from_series(series).drift * HISTORICAL_DRIFT_DAMPING
    sentiment = sentiment_drift(demand, trend) * SENTIMENT_AMPLIFICATION
    if abs(sentiment) > abs(historical):
        return sentiment
    return historical + sentiment * 0.5


def max_spread_for(sellers: int | None) -> float:
    count = sellers if sellers is not None else SINGLE_SELLER
    return ILLIQUID_MAX_SPREAD if count <= ILLIQUID_SELLERS else MAX_SPREAD


def run_inertia_engine(
    series: Sequence[PricePoint],
    config: PredictionConfig,
    days: int,
    *,
    rng: np.random.Generator,
    now: float,
    settings: AppConfig,
) -> PredictionWithBands:
    """Anchored forecast for an illiquid market. Deterministic; ``rng`` is unused."""
    last = series[-1]
    anchor = last.price
    daily = inertia_daily_drift(series, config.demand, config.trend)
    cap = max_spread_for(config.sellers)

    predicted: list[float] = []
    upper: list[float] = []
    lower: list[float] = []
    cumulative = 0.0
    for day in range(days):
        cumulative += daily * DRIFT_DECAY ** day
        median = snap_to_psychological_level(max(1.0, anchor * math.exp(cumulative)))
        spread = min(BASE_SPREAD + SPREAD_GROWTH * math.sqrt(day + 1), cap)

        predicted.append(median)
        upper.append(median * (1.0 + spread))
        lower.append(median * (1.0 - spread))

    logger.debug(
        "Inertia engine: anchor=%.2f daily_drift=%.5f spread_cap=%.2f", anchor, daily, cap
    )
    return build_prediction(last.time, now, predicted, upper, lower)
