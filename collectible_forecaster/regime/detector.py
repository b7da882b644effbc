"""
Regime detection: the triage gate in front of the forecast engines.

Decision table, evaluated in priority order:

  1. is_projected                      → GRAVITY  (regardless of liquidity)
  2. sellers unknown                   → FLOW     (avoid degenerate flat lines
                                                   when liquidity is unknown)
  3. sellers >  FLOW_MIN_SELLERS       → FLOW
  4. otherwise                         → INERTIA
"""

from __future__ import annotations

from collectible_forecaster.models.market import PredictionConfig
from collectible_forecaster.taxonomy.market_taxonomy import MarketRegime

FLOW_MIN_SELLERS = 10
ILLIQUID_SELLERS = 3
SINGLE_SELLER = 1


def detect_regime(config: PredictionConfig) -> MarketRegime:
    """Classify the market for ``config`` into FLOW, INERTIA or GRAVITY."""
    if config.is_projected:
        return MarketRegime.GRAVITY
    if config.sellers is None:
        return MarketRegime.FLOW
    if config.sellers > FLOW_MIN_SELLERS:
        return MarketRegime.FLOW
    return MarketRegime.INERTIA
