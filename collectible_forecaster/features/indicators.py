"""
Technical indicators over plain value lists and price-point series.

These are small, dependency-free building blocks. The Flow engine uses
``ema`` (via the EMA forecast) and the confidence calculator uses
``average_volume``; the rest are exposed for callers that chart or describe
a series (moving averages, support / resistance, summary statistics).

All functions return neutral values (0, empty list, ``None``) for inputs that
are too short, rather than raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from collectible_forecaster.models.market import PricePoint

DEFAULT_VOLUME_WINDOW = 30


def log_returns(values: Sequence[float]) -> list[float]:
    """Plain per-step log returns, skipping pairs with a non-positive value."""
    return [
        math.log(curr / prev)
        for prev, curr in zip(values, values[1:])
        if prev > 0 and curr > 0
    ]


def ema(values: Sequence[float], period: int) -> list[float]:
    """Exponential moving average seeded with the first value (k = 2 / (period + 1))."""
    if not values:
        return []
    k = 2.0 / (period + 1)
    result = [float(values[0])]
    for v in values[1:]:
        result.append(v * k + result[-1] * (1.0 - k))
    return result


def momentum(values: Sequence[float], period: int = 14) -> float:
    """Rate of change over ``period`` steps; 0 if too short or the base is 0."""
    if len(values) < period + 1:
        return 0.0
    current = values[-1]
    past = values[-1 - period]
    return (current - past) / past if past != 0 else 0.0


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population std / mean; 0 for fewer than two values or a zero mean."""
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    if mean == 0:
        return 0.0
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / mean


def moving_average(series: Sequence[PricePoint], period: int) -> list[PricePoint]:
    """Simple moving average aligned to the last point of each window."""
    if period < 1 or len(series) < period:
        return []
    result: list[PricePoint] = []
    window_sum = sum(p.price for p in series[:period])
    for i in range(period - 1, len(series)):
        if i >= period:
            window_sum += series[i].price - series[i - period].price
        result.append(
            PricePoint(
                price=window_sum / period,
                time=series[i].time,
                display_date=series[i].display_date,
            )
        )
    return result


@dataclass(frozen=True)
class SeriesStatistics:
    """Descriptive statistics for a price series.

    Attributes:
        min: Lowest price.
        max: Highest price.
        avg: Mean price.
        first: First price.
        last: Last price.
        change_pct: ``(last - first) / first * 100``; 0 if ``first`` is 0.
        volatility_pct: Population std as a percentage of the mean.
    """

    min: float
    max: float
    avg: float
    first: float
    last: float
    change_pct: float
    volatility_pct: float


def series_statistics(series: Sequence[PricePoint]) -> SeriesStatistics | None:
    """Summary statistics, or ``None`` for an empty series."""
    if not series:
        return None
    values = [p.price for p in series]
    avg = sum(values) / len(values)
    first, last = values[0], values[-1]
    variance = sum((v - avg) ** 2 for v in values) / len(values)
    return SeriesStatistics(
        min=min(values),
        max=max(values),
        avg=avg,
        first=first,
        last=last,
        change_pct=((last - first) / first * 100.0) if first != 0 else 0.0,
        volatility_pct=(math.sqrt(variance) / avg * 100.0) if avg != 0 else 0.0,
    )


def support_resistance(
    values: Sequence[float],
    sensitivity: float = 0.03,
) -> tuple[float, float]:
    """Classic support / resistance from 5-point local extrema.

    Support is the highest extremum below ``last * (1 + sensitivity)``;
    resistance is the lowest extremum above ``last * (1 - sensitivity)``.
    Falls back to the series min / max.

    Raises:
        ValueError: If ``values`` is empty.
    """
    if not values:
        raise ValueError("support_resistance() requires at least one value.")
    lo, hi = min(values), max(values)
    if len(values) < 10:
        return lo, hi

    levels: list[float] = []
    for i in range(2, len(values) - 2):
        neighbours = (values[i - 2], values[i - 1], values[i + 1], values[i + 2])
        if all(values[i] < n for n in neighbours) or all(values[i] > n for n in neighbours):
            levels.append(values[i])

    if not levels:
        return lo, hi

    current = values[-1]
    supports = [l for l in levels if l < current * (1 + sensitivity)]
    resistances = [l for l in levels if l > current * (1 - sensitivity)]
    return (
        max(supports) if supports else lo,
        min(resistances) if resistances else hi,
    )


def floor_support(
    series: Sequence[PricePoint],
    lookback: int = 7,
) -> tuple[float, float, float]:
    """Floor-based support for thin collectible markets.

    Support sits 5% under the recent lowest sale; resistance 5% over the
    recent 90th-percentile sale (which drops a projected spike).

    Returns:
        ``(support, resistance, floor_price)``; all equal the last price (or
        0 for an empty series) when fewer than three points are given.
    """
    if len(series) < 3:
        val = series[-1].price if series else 0.0
        return val, val, val

    recent = sorted(p.price for p in series[-lookback:])
    floor_price = recent[0]
    ceiling = recent[min(int(len(recent) * 0.9), len(recent) - 1)]
    return floor_price * 0.95, ceiling * 1.05, floor_price


def average_volume(series: Sequence[PricePoint], window: int = DEFAULT_VOLUME_WINDOW) -> float:
    """Mean volume over the last ``window`` points; missing volume counts as 0."""
    recent = series[-window:]
    if not recent:
        return 0.0
    return sum(p.volume or 0.0 for p in recent) / len(recent)


def weighted_linear_regression_returns(
    returns: Sequence[float],
    decay: float = 0.95,
) -> tuple[float, float]:
    """Exponentially weighted regression of returns on their index.

    Fitting returns rather than prices keeps extrapolation bounded.

    Returns:
        ``(expected_return, return_trend)``: the weighted mean return and the
        weighted slope of returns per step.
    """
    n = len(returns)
    if n == 0:
        return 0.0, 0.0

    weights = [decay ** (n - 1 - i) for i in range(n)]
    total = sum(weights)
    mean_x = sum(i * w for i, w in enumerate(weights)) / total
    mean_y = sum(r * w for r, w in zip(returns, weights)) / total

    cov = sum(w * (i - mean_x) * (r - mean_y) for i, (r, w) in enumerate(zip(returns, weights)))
    var = sum(w * (i - mean_x) ** 2 for i, w in enumerate(weights))
    return mean_y, (cov / var if var != 0 else 0.0)
