"""
Random-number source for the Monte Carlo simulator.

Every stochastic routine takes a ``numpy.random.Generator`` argument; nothing
draws from a module-level or global random state. ``make_rng(seed)`` is the
single place generators are created, so a seed in ``SimulationConfig`` (or
passed by a test) makes a whole forecast reproducible.
"""

from __future__ import annotations

import numpy as np


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Return a PCG64-backed generator; ``seed=None`` draws fresh OS entropy."""
    return np.random.default_rng(seed)


def normal_shocks(rng: np.random.Generator, size: int) -> np.ndarray:
    """Standard normal shocks."""
    return rng.standard_normal(size)


def student_t_shocks(rng: np.random.Generator, size: int, df: int = 4) -> np.ndarray:
    """Student's t shocks rescaled to unit variance.

    A t(df) variable has variance ``df / (df - 2)``; multiplying by
    ``sqrt((df - 2) / df)`` keeps the volatility meaning of the GBM term
    while retaining fat tails.
    """
    if df <= 2:
        raise ValueError(f"Student-t shocks need df > 2 for finite variance, got {df}.")
    return rng.standard_t(df, size) * np.sqrt((df - 2) / df)
