"""
Monte Carlo price-path simulation (Geometric Brownian Motion).

Per-step log return (dt = 1 day)::

    log_return = (drift + sentiment * 0.9^day - 0.5 * vol^2) + vol * shock

  - ``-0.5 * vol^2`` is the Itô correction so the expected price grows at
    ``drift`` rather than being biased upward by volatility.
  - ``sentiment * 0.9^day``: hype decays geometrically; after ~20 days its
    effect is negligible rather than compounding for the whole horizon.
  - ``shock``: Student's t (4 df, unit variance) by default, so crash-sized
    moves occur at realistic frequencies; standard normal when fat tails are
    disabled (used for backtests, where stability matters more).

Each path compounds from its unfloored price; only the emitted price is
floored at 1. A path below 1 is reported as 1 until its underlying price
climbs back above it.

Vectorisation
-------------
All paths advance together: one (num_simulations,) shock vector per day.
Only per-day order statistics are consumed, so path order is irrelevant and
results depend solely on the generator state.

Percentiles use the order-statistic convention ``sorted[floor(n * q)]`` for
q = 0.1 / 0.5 / 0.9.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from collectible_forecaster.simulation.rng import normal_shocks, student_t_shocks

DEFAULT_NUM_SIMULATIONS = 500
SENTIMENT_DECAY = 0.9
FAT_TAIL_DF = 4
MIN_PRICE = 1.0

LOWER_PERCENTILE = 0.1
MEDIAN_PERCENTILE = 0.5
UPPER_PERCENTILE = 0.9


@dataclass(frozen=True)
class MonteCarloBands:
    """Per-day percentile paths.

    Attributes:
        median: 50th percentile per day.
        lower: 10th percentile per day.
        upper: 90th percentile per day.
    """

    median: list[float] = field(default_factory=list)
    lower: list[float] = field(default_factory=list)
    upper: list[float] = field(default_factory=list)


def simulate_paths(
    last_price: float,
    drift: float,
    volatility: float,
    days: int,
    *,
    rng: np.random.Generator,
    num_simulations: int = DEFAULT_NUM_SIMULATIONS,
    sentiment_adjustment: float = 0.0,
    use_fat_tails: bool = True,
    df: int = FAT_TAIL_DF,
) -> np.ndarray:
    """Simulate GBM paths.

    Returns:
        Array of shape ``(num_simulations, days)``; column ``d`` holds the
        price at the end of day ``d + 1``.
    """
    if num_simulations < 1:
        raise ValueError(f"num_simulations must be >= 1, got {num_simulations}.")
    if volatility < 0:
        raise ValueError(f"volatility must be non-negative, got {volatility}.")

    paths = np.empty((num_simulations, days), dtype=np.float64)
    prices = np.full(num_simulations, float(last_price))
    ito = 0.5 * volatility * volatility

    for day in range(days):
        shocks = (
            student_t_shocks(rng, num_simulations, df)
            if use_fat_tails
            else normal_shocks(rng, num_simulations)
        )
        day_drift = drift + sentiment_adjustment * SENTIMENT_DECAY ** day
        prices = prices * np.exp((day_drift - ito) + volatility * shocks)
        paths[:, day] = np.maximum(prices, MIN_PRICE)

    return paths


def generate_gbm_path(
    last_price: float,
    drift: float,
    volatility: float,
    days: int,
    *,
    rng: np.random.Generator,
    sentiment_adjustment: float = 0.0,
    use_fat_tails: bool = True,
    df: int = FAT_TAIL_DF,
) -> list[float]:
    """A single GBM path as a plain list."""
    paths = simulate_paths(
        last_price, drift, volatility, days,
        rng=rng,
        num_simulations=1,
        sentiment_adjustment=sentiment_adjustment,
        use_fat_tails=use_fat_tails,
        df=df,
    )
    return paths[0].tolist()


def run_monte_carlo(
    last_price: float,
    drift: float,
    volatility: float,
    days: int,
    *,
    rng: np.random.Generator,
    num_simulations: int = DEFAULT_NUM_SIMULATIONS,
    sentiment_adjustment: float = 0.0,
    use_fat_tails: bool = True,
    df: int = FAT_TAIL_DF,
) -> MonteCarloBands:
    """Run ``num_simulations`` GBM paths and extract 10/50/90 percentile bands.

    Args:
        last_price: Starting price.
        drift: Daily log drift.
        volatility: Daily volatility (>= 0).
        days: Horizon; each band has exactly ``days`` entries.
        rng: Injected generator.
        num_simulations: Number of paths.
        sentiment_adjustment: Extra day-0 drift, decayed by ``SENTIMENT_DECAY``.
        use_fat_tails: Student-t shocks if True, normal otherwise.
        df: Degrees of freedom for the t shocks.

    Returns:
        ``MonteCarloBands``.
    """
    if days <= 0:
        return MonteCarloBands()

    paths = simulate_paths(
        last_price, drift, volatility, days,
        rng=rng,
        num_simulations=num_simulations,
        sentiment_adjustment=sentiment_adjustment,
        use_fat_tails=use_fat_tails,
        df=df,
    )
    ordered = np.sort(paths, axis=0)
    n = num_simulations

    def _row(q: float) -> list[float]:
        return ordered[int(n * q)].tolist()

    return MonteCarloBands(
        median=_row(MEDIAN_PERCENTILE),
        lower=_row(LOWER_PERCENTILE),
        upper=_row(UPPER_PERCENTILE),
    )
