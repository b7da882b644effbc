"""
Statistics engine: time-normalized returns and volatility clustering.

Why time-normalized returns?
----------------------------
Collectible price histories are irregular. A value that changes once a week
by 10% is not ten times more volatile than one that changes daily by 1.4%,
but naive per-observation log returns say it is. Each pair is therefore
scaled to a daily rate::

    daily_return = ln(p2 / p1) / max(days_elapsed, 0.1)

The 0.1-day floor keeps intraday duplicates from exploding the estimate.
Pairs with a non-positive price or a non-increasing timestamp are skipped
(never turned into NaN).

Volatility: GARCH(1,1)-style recursion
--------------------------------------
    variance_t = omega + alpha * r_{t-1}^2 + beta * variance_{t-1}

``alpha`` (reaction to shock) and ``beta`` (persistence) are fixed; ``omega``
is derived from the sample variance so the long-run variance of the recursion
equals the sample variance::

    omega = sample_variance * (1 - alpha - beta)

Final volatility blends the recursive ("current") estimate 70/30 with the
unconditional ("long-term") estimate and is floored at ``VOLATILITY_FLOOR``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from collectible_forecaster.models.market import PricePoint
from collectible_forecaster.taxonomy.market_taxonomy import DataQuality
from collectible_forecaster.utils.time_utils import days_between

GARCH_ALPHA = 0.1
GARCH_BETA = 0.84
GARCH_MIN_RETURNS = 5

CURRENT_VOL_WEIGHT = 0.7
LONG_TERM_VOL_WEIGHT = 0.3

VOLATILITY_FLOOR = 0.001
DEFAULT_VOLATILITY = 0.01
FALLBACK_GARCH_VOL = 0.02

MIN_DAYS_ELAPSED = 0.1

HIGH_QUALITY_MAX_SPACING_DAYS = 1.5
MEDIUM_QUALITY_MAX_SPACING_DAYS = 7.0


@dataclass(frozen=True)
class MarketStats:
    """Drift / volatility summary of a historical series.

    Attributes:
        drift: Mean daily log return.
        volatility: Blended daily volatility, always >= ``VOLATILITY_FLOOR``.
        returns: The (time-normalized) daily returns used.
        avg_data_frequency: Average days between usable observations.
        data_quality: Bucketed ``avg_data_frequency``.
    """

    drift: float
    volatility: float
    returns: list[float] = field(default_factory=list)
    avg_data_frequency: float = 1.0
    data_quality: DataQuality = DataQuality.LOW


@dataclass(frozen=True)
class NormalizedReturns:
    """Output of ``time_normalized_returns``."""

    daily_returns: list[float]
    avg_days_between_points: float
    time_gaps: list[float]


def time_normalized_returns(series: Sequence[PricePoint]) -> NormalizedReturns:
    """Compute per-pair daily log returns, corrected for irregular spacing.

    Args:
        series: Ascending price points.

    Returns:
        ``NormalizedReturns``; ``avg_days_between_points`` is 1.0 when no
        usable pair exists.
    """
    daily_returns: list[float] = []
    time_gaps: list[float] = []

    for prev, curr in zip(series, series[1:]):
        if prev.price <= 0 or curr.price <= 0 or curr.time <= prev.time:
            continue
        days_elapsed = days_between(prev.time, curr.time)
        time_gaps.append(days_elapsed)
        total_return = math.log(curr.price / prev.price)
        daily_returns.append(total_return / max(days_elapsed, MIN_DAYS_ELAPSED))

    avg_gap = (sum(time_gaps) / len(time_gaps)) if time_gaps else 1.0
    return NormalizedReturns(
        daily_returns=daily_returns,
        avg_days_between_points=avg_gap,
        time_gaps=time_gaps,
    )


def estimate_garch_volatility(
    returns: Sequence[float],
    alpha: float = GARCH_ALPHA,
    beta: float = GARCH_BETA,
) -> tuple[float, float]:
    """GARCH(1,1)-style volatility estimate.

    Args:
        returns: Daily log returns, oldest first.
        alpha: Reaction to the previous squared shock.
        beta: Persistence of the previous variance.

    Returns:
        ``(current_vol, long_term_vol)``. Both are finite and >= 0. With
        fewer than ``GARCH_MIN_RETURNS`` returns both equal the RMS return
        (``FALLBACK_GARCH_VOL`` when there are none).

    Raises:
        ValueError: If ``alpha + beta >= 1`` (non-stationary recursion).
    """
    if alpha < 0 or beta < 0 or alpha + beta >= 1.0:
        raise ValueError(
            f"GARCH parameters must satisfy alpha, beta >= 0 and alpha + beta < 1 "
            f"(got alpha={alpha}, beta={beta})."
        )

    if len(returns) < GARCH_MIN_RETURNS:
        if not returns:
            return FALLBACK_GARCH_VOL, FALLBACK_GARCH_VOL
        vol = math.sqrt(sum(r * r for r in returns) / len(returns))
        return vol, vol

    sample_variance = sum(r * r for r in returns) / len(returns)
    omega = sample_variance * (1.0 - alpha - beta)

    variance = sample_variance
    for prev_return in returns[:-1]:
        variance = omega + alpha * prev_return * prev_return + beta * variance

    return math.sqrt(max(variance, 0.0)), math.sqrt(sample_variance)


def blended_volatility(returns: Sequence[float]) -> float:
    """70/30 blend of current and long-term GARCH volatility, floored."""
    current_vol, long_term_vol = estimate_garch_volatility(returns)
    blended = current_vol * CURRENT_VOL_WEIGHT + long_term_vol * LONG_TERM_VOL_WEIGHT
    return max(blended, VOLATILITY_FLOOR)


def classify_data_quality(avg_days_between_points: float) -> DataQuality:
    if avg_days_between_points <= HIGH_QUALITY_MAX_SPACING_DAYS:
        return DataQuality.HIGH
    if avg_days_between_points <= MEDIUM_QUALITY_MAX_SPACING_DAYS:
        return DataQuality.MEDIUM
    return DataQuality.LOW


def market_stats_from_series(series: Sequence[PricePoint]) -> MarketStats:
    """Time-aware market statistics for a timestamped series.

    This is the preferred statistics entry point; every engine uses it.
    """
    if len(series) < 2:
        return MarketStats(drift=0.0, volatility=DEFAULT_VOLATILITY)

    normalized = time_normalized_returns(series)
    if not normalized.daily_returns:
        return MarketStats(
            drift=0.0,
            volatility=DEFAULT_VOLATILITY,
            avg_data_frequency=normalized.avg_days_between_points,
        )

    returns = normalized.daily_returns
    return MarketStats(
        drift=sum(returns) / len(returns),
        volatility=blended_volatility(returns),
        returns=returns,
        avg_data_frequency=normalized.avg_days_between_points,
        data_quality=classify_data_quality(normalized.avg_days_between_points),
    )


def market_stats_from_values(values: Sequence[float]) -> MarketStats:
    """Market statistics for an untimed value list (one step = one day).

    Used by the GBM backtest, which works on raw value windows. Data quality
    is reported as ``MEDIUM`` since spacing is unknown.
    """
    returns = [
        math.log(curr / prev)
        for prev, curr in zip(values, values[1:])
        if prev > 0 and curr > 0
    ]
    if not returns:
        return MarketStats(drift=0.0, volatility=DEFAULT_VOLATILITY)

    return MarketStats(
        drift=sum(returns) / len(returns),
        volatility=blended_volatility(returns),
        returns=returns,
        avg_data_frequency=1.0,
        data_quality=DataQuality.MEDIUM,
    )
