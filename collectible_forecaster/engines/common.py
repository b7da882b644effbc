"""
Post-processing shared by all three engines.

Psychological price levels
--------------------------
Collectible prices cluster at round numbers (10k, 25k, 100k, ...). A forecast
that lands within ``SNAP_THRESHOLD`` (1%) of one of ``PRICE_MAGNETS`` is
pulled onto it. Magnets are checked in ascending order and the first match
wins; since adjacent magnets are always more than 2% apart, at most one can
match.

Output points
-------------
Every engine hands its raw per-day floats to ``build_prediction``, which:
  - rounds half-up to integers and floors at 1,
  - clamps ``lower <= predicted <= upper`` after rounding,
  - stamps each day with ``forecast_timestamps(...)`` and labelled display
    dates ("Predicted", "Upper 90%", "Lower 10%").
"""

from __future__ import annotations

import math
from typing import Sequence

from collectible_forecaster.models.forecast import PredictionWithBands
from collectible_forecaster.models.market import PricePoint
from collectible_forecaster.utils.time_utils import forecast_timestamps, format_display_date

PRICE_MAGNETS: tuple[int, ...] = (
    1_000, 2_000, 2_500, 3_000, 4_000, 5_000, 7_500,
    10_000, 15_000, 20_000, 25_000, 30_000, 40_000, 50_000, 75_000,
    100_000, 150_000, 200_000, 250_000, 300_000, 400_000, 500_000, 750_000,
    1_000_000, 1_500_000, 2_000_000,
)
SNAP_THRESHOLD = 0.01
MIN_OUTPUT_PRICE = 1

PREDICTED_LABEL = "Predicted"
UPPER_LABEL = "Upper 90%"
LOWER_LABEL = "Lower 10%"


def snap_to_psychological_level(price: float, threshold: float = SNAP_THRESHOLD) -> float:
    """Return the first magnet within ``threshold`` (relative) of ``price``, else ``price``."""
    for magnet in PRICE_MAGNETS:
        if abs(price - magnet) / magnet <= threshold:
            return float(magnet)
    return price


def round_price(price: float) -> int:
    """Round half-up to an integer, floored at ``MIN_OUTPUT_PRICE``."""
    return max(MIN_OUTPUT_PRICE, int(math.floor(price + 0.5)))


def build_prediction(
    last_time: float,
    now: float,
    predicted: Sequence[float],
    upper: Sequence[float],
    lower: Sequence[float],
) -> PredictionWithBands:
    """Assemble aligned output points from raw per-day band values.

    Args:
        last_time: Timestamp of the last historical point.
        now: Reference "current" time; forecasts start after the later of the two.
        predicted: Median per day (already snapped where applicable).
        upper: Upper band per day.
        lower: Lower band per day.
    """
    timestamps = forecast_timestamps(last_time, now, len(predicted))

    predicted_points: list[PricePoint] = []
    upper_points: list[PricePoint] = []
    lower_points: list[PricePoint] = []
    for ts, mid, hi, lo in zip(timestamps, predicted, upper, lower):
        mid_price = round_price(mid)
        hi_price = max(round_price(hi), mid_price)
        lo_price = min(round_price(lo), mid_price)

        predicted_points.append(PricePoint(
            price=mid_price, time=ts, display_date=format_display_date(ts, PREDICTED_LABEL)
        ))
        upper_points.append(PricePoint(
            price=hi_price, time=ts, display_date=format_display_date(ts, UPPER_LABEL)
        ))
        lower_points.append(PricePoint(
            price=lo_price, time=ts, display_date=format_display_date(ts, LOWER_LABEL)
        ))

    return PredictionWithBands(
        predicted=predicted_points, upper_band=upper_points, lower_band=lower_points
    )
