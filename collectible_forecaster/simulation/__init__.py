"""
Monte Carlo price simulation.

Modules
-------
rng          Seedable numpy Generator construction and shock draws.
monte_carlo  Vectorised GBM paths and percentile bands.
"""
