"""
Gravity engine: projected assets whose price is artificially inflated.

A projection is a price pumped by wash trading (selling to an alt account at
an inflated price). Once the market notices, the price does not drift back,
it crashes back. The forecast is an exponential decay from the inflated
price toward a target "real" value.

Target
------
  1. The community value, if it is below the inflated price.
  2. Otherwise the mean of up to 14 points before the two most recent ones
     (the two most recent are assumed to be the projection itself).
  3. Otherwise a 50% haircut.

Decay speed
-----------
Bigger projections crash faster::

    ratio     = inflated / target
    half_life = max(10 / sqrt(ratio), 3) days
    rate      = ln 2 / half_life
    median_d  = target + (inflated − target) × exp(−rate × (d + 1))

Bands
-----
Upper ``0.1 + 0.05 × sqrt(d + 1)`` (manipulation may persist); lower
``0.15 + 0.1 × (1 − decay)`` (panic selling can overshoot). Both are relative
to the snapped median.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from collectible_forecaster.config import AppConfig
from collectible_forecaster.engines.common import build_prediction, snap_to_psychological_level
from collectible_forecaster.models.forecast import PredictionWithBands
from collectible_forecaster.models.market import PricePoint, PredictionConfig

logger = logging.getLogger(__name__)

BASE_HALF_LIFE_DAYS = 10.0
MIN_HALF_LIFE_DAYS = 3.0
HISTORY_WINDOW = 14
EXCLUDED_RECENT_POINTS = 2
FALLBACK_HAIRCUT = 0.5


def gravity_target(series: Sequence[PricePoint], value: float | None) -> float:
    """The price a projected asset is expected to fall back to."""
    inflated = series[-1].price
    if value is not None and 0 < value < inflated:
        return value

    start = -(HISTORY_WINDOW + EXCLUDED_RECENT_POINTS)
    history = series[start:-EXCLUDED_RECENT_POINTS]
    if history:
        return sum(p.price for p in history) / len(history)
    return inflated * FALLBACK_HAIRCUT


def decay_rate(inflated: float, target: float) -> float:
    """Daily exponential decay rate for a projection of ``inflated / target``."""
    ratio = inflated / target
    half_life = BASE_HALF_LIFE_DAYS / math.sqrt(ratio)
    return math.log(2) / max(half_life, MIN_HALF_LIFE_DAYS)


def run_gravity_engine(
    series: Sequence[PricePoint],
    config: PredictionConfig,
    days: int,
    *,
    rng: np.random.Generator,
    now: float,
    settings: AppConfig,
) -> PredictionWithBands:
    """Decay-toward-target forecast for a projected asset. Deterministic; ``rng`` is unused."""
    last = series[-1]
    inflated = last.price
    target = gravity_target(series, config.value)
    rate = decay_rate(inflated, target)

    predicted: list[float] = []
    upper: list[float] = []
    lower: list[float] = []
    for day in range(days):
        decay = math.exp(-rate * (day + 1))
        median = snap_to_psychological_level(max(1.0, target + (inflated - target) * decay))
        upper_spread = 0.1 + 0.05 * math.sqrt(day + 1)
        lower_spread = 0.15 + 0.1 * (1.0 - decay)

        predicted.append(median)
        upper.append(median * (1.0 + upper_spread))
        lower.append(median * (1.0 - lower_spread))

    logger.debug(
        "Gravity engine: inflated=%.2f target=%.2f rate=%.4f/day", inflated, target, rate
    )
    return build_prediction(last.time, now, predicted, upper, lower)
