"""
Table-driven sentiment adjustments from demand / trend ratings.

Ratings are small integers from the upstream market API:

  demand: -1 none, 0 terrible, 1 low, 2 normal, 3 high, 4 amazing
  trend:  -1 none, 0 lowering, 1 unstable, 2 stable, 3 raising, 4 fluctuating

The drift values are small daily log-return adjustments:
even "amazing" demand rarely sustains more than ~1% a day on collectibles.
Unknown keys map to a neutral adjustment.
"""

from __future__ import annotations

DEMAND_DRIFT_ADJUSTMENT: dict[int, float] = {
    -1: 0.0,
    0: -0.005,
    1: -0.001,
    2: 0.0,
    3: 0.003,
    4: 0.008,
}

TREND_DRIFT_ADJUSTMENT: dict[int, float] = {
    -1: 0.0,
    0: -0.004,
    1: -0.001,
    2: 0.0,
    3: 0.004,
    4: -0.0005,  # fluctuating: uncertainty leans slightly negative
}

# High demand = tight spreads = lower volatility.
DEMAND_VOLATILITY_MULTIPLIER: dict[int, float] = {
    -1: 1.0,
    0: 1.4,
    1: 1.2,
    2: 1.0,
    3: 0.85,
    4: 0.7,
}


def demand_drift(demand: int) -> float:
    return DEMAND_DRIFT_ADJUSTMENT.get(demand, 0.0)


def trend_drift(trend: int) -> float:
    return TREND_DRIFT_ADJUSTMENT.get(trend, 0.0)


def sentiment_drift(demand: int, trend: int) -> float:
    """Combined daily drift adjustment from demand and trend."""
    return demand_drift(demand) + trend_drift(trend)


def volatility_multiplier(demand: int) -> float:
    return DEMAND_VOLATILITY_MULTIPLIER.get(demand, 1.0)
