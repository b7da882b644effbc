"""
Prediction confidence score with an explainable factor list.

Score formula (additive, clamped to [10, 90])
---------------------------------------------
    score = 50                                   # base
          + regime adjustment                    # FLOW +10, INERTIA -10, GRAVITY +5
          + data frequency                       # high +10, low -10
          + history length                       # >=180 +10, >=60 +5, <30 -10
          + liquidity        (non-GRAVITY only)  # vol >=20 +10, >=5 +5, <1 -15
          + volatility       (FLOW only)         # annualised <30% +10, >80% -10
          + demand signal                        # >=3 +5, 0..1 -5
          + trend signal                         # raising +5, lowering -5, fluctuating -3

Every adjustment appends a human-readable factor string, so the number is
never opaque. Level buckets: high (>= 70), medium (>= 45), low otherwise.

Why regime-aware?
  FLOW     technical analysis is meaningful; good data earns confidence.
  INERTIA  illiquid prices step discretely; the forecast is a range, not
           a path, so confidence starts lower.
  GRAVITY  direction (down) is near-certain, timing is not.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from collectible_forecaster.features.indicators import average_volume
from collectible_forecaster.features.returns import market_stats_from_series
from collectible_forecaster.models.market import PricePoint
from collectible_forecaster.taxonomy.market_taxonomy import (
    ConfidenceLevel,
    DataQuality,
    MarketRegime,
)

BASE_SCORE = 50
MIN_SCORE = 10
MAX_SCORE = 90
HIGH_LEVEL_MIN = 70
MEDIUM_LEVEL_MIN = 45

TRADING_DAYS_PER_YEAR = 252

_REGIME_ADJUSTMENT: dict[MarketRegime, tuple[int, list[str]]] = {
    MarketRegime.FLOW: (10, ["Liquid market - technical analysis applicable"]),
    MarketRegime.INERTIA: (-10, [
        "Illiquid market - price anchored to last sale",
        "Predictions show expected range, not guaranteed path",
    ]),
    MarketRegime.GRAVITY: (5, [
        "Projected - price expected to revert to real value",
        "High confidence in direction, timing uncertain",
    ]),
}


@dataclass(frozen=True)
class ConfidenceAssessment:
    """Confidence score with its explanation.

    Attributes:
        level: Bucketed score.
        percentage: Integer score in [MIN_SCORE, MAX_SCORE].
        factors: One string per adjustment applied.
    """

    level: ConfidenceLevel
    percentage: int
    factors: list[str] = field(default_factory=list)


def confidence_level(score: int) -> ConfidenceLevel:
    if score >= HIGH_LEVEL_MIN:
        return ConfidenceLevel.HIGH
    if score >= MEDIUM_LEVEL_MIN:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def calculate_prediction_confidence(
    series: Sequence[PricePoint],
    regime: MarketRegime,
    demand: int | None = None,
    trend: int | None = None,
) -> ConfidenceAssessment:
    """Score how much the forecast for ``series`` under ``regime`` can be trusted.

    Args:
        series: The (sanitized) history the forecast was built from.
        regime: Engine that produced the forecast.
        demand: Demand rating, or ``None`` / -1 for no signal.
        trend: Trend rating, or ``None`` / -1 for no signal.

    Returns:
        ``ConfidenceAssessment``.
    """
    score, factors = _REGIME_ADJUSTMENT[regime]
    score = BASE_SCORE + score
    factors = list(factors)

    # ── Data frequency ────────────────────────────────────────────────────────
    stats = market_stats_from_series(series)
    if stats.data_quality is DataQuality.HIGH:
        score += 10
        factors.append(f"Good data frequency (~{stats.avg_data_frequency:.1f} days/update)")
    elif stats.data_quality is DataQuality.LOW:
        score -= 10
        factors.append(f"Sparse data (~{stats.avg_data_frequency:.1f} days/update)")

    # ── History length ────────────────────────────────────────────────────────
    n = len(series)
    if n >= 180:
        score += 10
        factors.append("Extensive history (6+ months)")
    elif n >= 60:
        score += 5
        factors.append("Good history (2+ months)")
    elif n < 30:
        score -= 10
        factors.append("Limited history - wider uncertainty")

    # ── Liquidity ─────────────────────────────────────────────────────────────
    if regime is not MarketRegime.GRAVITY:
        avg_vol = average_volume(series)
        if avg_vol >= 20:
            score += 10
            factors.append(f"High liquidity ({avg_vol:.1f} trades/day)")
        elif avg_vol >= 5:
            score += 5
            factors.append(f"Moderate liquidity ({avg_vol:.1f} trades/day)")
        elif avg_vol < 1:
            score -= 15
            factors.append("Very low liquidity (<1 trade/day)")

    # ── Volatility ────────────────────────────────────────────────────────────
    if regime is MarketRegime.FLOW:
        annualized = stats.volatility * math.sqrt(TRADING_DAYS_PER_YEAR)
        if annualized < 0.3:
            score += 10
            factors.append(f"Low volatility ({annualized * 100:.0f}% annualized)")
        elif annualized > 0.8:
            score -= 10
            factors.append(f"High volatility ({annualized * 100:.0f}% annualized)")

    # ── Sentiment signal strength ─────────────────────────────────────────────
    if demand is not None and demand >= 0:
        if demand >= 3:
            score += 5
            factors.append("Strong demand signal")
        elif demand <= 1:
            score -= 5
            factors.append("Weak demand - selling pressure")

    if trend is not None and trend >= 0:
        if trend == 3:
            score += 5
            factors.append("Rising trend confirmed")
        elif trend == 0:
            score -= 5
            factors.append("Declining trend confirmed")
        elif trend == 4:
            score -= 3
            factors.append("Fluctuating - direction unclear")

    score = max(MIN_SCORE, min(MAX_SCORE, score))
    return ConfidenceAssessment(level=confidence_level(score), percentage=score, factors=factors)
