"""Regime-switching price forecaster for illiquid collectible markets."""

__version__ = "0.3.0"
