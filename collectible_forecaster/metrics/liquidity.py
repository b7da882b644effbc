"""
Liquidity velocity and order-book gap analysis.

Liquidity velocity
------------------
"How long until my listing fills?"  With ``sellers`` ahead in the queue and
``volume`` sales per day::

    days_to_sell = sellers / max(volume, 0.1)

The 0.1 floor keeps a zero-volume series from producing infinity.

Gap strength
------------
Tight gaps between consecutive seller listings mean the price is well
supported; wide gaps mean buying out the cheapest seller jumps the price to
the next level. ``gap_strength = min(avg_gap_pct * 10, 1)`` normalises the
average percentage gap into [0, 1] and is used to widen the Flow engine's
upper band.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from collectible_forecaster.models.market import OrderBookEntry
from collectible_forecaster.taxonomy.market_taxonomy import LiquidityRating

MIN_DAILY_VOLUME = 0.1

FAST_MAX_DAYS = 1.0
MODERATE_MAX_DAYS = 3.0
SLOW_MAX_DAYS = 7.0

GAP_STRENGTH_SCALE = 10.0
DEFAULT_RESISTANCE_MULTIPLIER = 1.1


@dataclass(frozen=True)
class LiquidityAssessment:
    """Days-to-sell estimate.

    Attributes:
        velocity: Estimated days to sell (>= 0).
        rating: Bucketed ``velocity``.
        sellers_per_day: Absorption rate used (floored volume).
    """

    velocity: float
    rating: LiquidityRating
    sellers_per_day: float


@dataclass(frozen=True)
class GapAnalysis:
    """Order-book gap summary.

    Attributes:
        gap_strength: Normalised average gap in [0, 1].
        next_resistance: Second-cheapest listing, or ``current_price × 1.1``.
        average_gap: Mean fractional gap between consecutive listings.
    """

    gap_strength: float
    next_resistance: float
    average_gap: float


def rate_liquidity(days_to_sell: float) -> LiquidityRating:
    if days_to_sell <= FAST_MAX_DAYS:
        return LiquidityRating.FAST
    if days_to_sell <= MODERATE_MAX_DAYS:
        return LiquidityRating.MODERATE
    if days_to_sell <= SLOW_MAX_DAYS:
        return LiquidityRating.SLOW
    return LiquidityRating.ILLIQUID


def calculate_liquidity_velocity(volume: float, sellers: int) -> LiquidityAssessment:
    """Estimate days-to-sell from average daily volume and seller count.

    With no sellers there is no queue to measure; the result is
    ``velocity=0`` rated ``ILLIQUID``.
    """
    if sellers <= 0:
        return LiquidityAssessment(velocity=0.0, rating=LiquidityRating.ILLIQUID, sellers_per_day=0.0)

    sellers_per_day = max(volume, MIN_DAILY_VOLUME)
    days_to_sell = sellers / sellers_per_day
    return LiquidityAssessment(
        velocity=days_to_sell,
        rating=rate_liquidity(days_to_sell),
        sellers_per_day=sellers_per_day,
    )


def analyze_order_book_gaps(
    order_book: Sequence[OrderBookEntry],
    current_price: float,
) -> GapAnalysis:
    """Measure price-jump risk from the spacing of seller listings."""
    if len(order_book) < 2:
        return GapAnalysis(
            gap_strength=0.0,
            next_resistance=current_price * DEFAULT_RESISTANCE_MULTIPLIER,
            average_gap=0.0,
        )

    prices = sorted(entry.price for entry in order_book)
    gaps = [(curr - prev) / prev for prev, curr in zip(prices, prices[1:])]
    average_gap = sum(gaps) / len(gaps)

    return GapAnalysis(
        gap_strength=min(average_gap * GAP_STRENGTH_SCALE, 1.0),
        next_resistance=prices[1],
        average_gap=average_gap,
    )
