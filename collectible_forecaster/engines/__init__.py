"""
Regime-specific forecast engines.

Modules
-------
flow      Liquid markets: Holt-Winters / EMA / Monte Carlo ensemble.
inertia   Illiquid markets: last-price anchor with sentiment drift.
gravity   Projected markets: exponential decay toward real value.
common    Psychological-level snapping and output point assembly.

``ENGINES`` maps each ``MarketRegime`` to its engine. Every engine has the
signature ``(series, config, days, *, rng, now, settings) -> PredictionWithBands``.
"""

from __future__ import annotations

from typing import Callable

from collectible_forecaster.engines.flow import run_flow_engine
from collectible_forecaster.engines.gravity import run_gravity_engine
from collectible_forecaster.engines.inertia import run_inertia_engine
from collectible_forecaster.models.forecast import PredictionWithBands
from collectible_forecaster.taxonomy.market_taxonomy import MarketRegime

Engine = Callable[..., PredictionWithBands]

ENGINES: dict[MarketRegime, Engine] = {
    MarketRegime.FLOW: run_flow_engine,
    MarketRegime.INERTIA: run_inertia_engine,
    MarketRegime.GRAVITY: run_gravity_engine,
}
