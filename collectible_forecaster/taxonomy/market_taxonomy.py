"""
Market taxonomy: the small closed vocabularies shared by every engine.

``MarketRegime`` is the tagged-union selector for the three forecast engines:

  FLOW     liquid items with many competing sellers; behave like commodities.
  INERTIA  rare items with few sellers; the last sale IS the market.
  GRAVITY  projected items whose price was pumped and will revert.

The remaining enums label derived metrics. All values are lowercase slugs
except ``MarketRegime``, whose uppercase values are part of the output contract.

This module has NO imports from any other ``collectible_forecaster`` package.
"""

from enum import StrEnum


class MarketRegime(StrEnum):
    """Which forecast engine applies to an asset."""

    FLOW = "FLOW"
    """Liquid commodity: ensemble of Holt-Winters, EMA and Monte Carlo."""

    INERTIA = "INERTIA"
    """Illiquid rarity: flat forecast anchored to the last sale."""

    GRAVITY = "GRAVITY"
    """Projected / manipulated item: exponential decay toward real value."""


class DataQuality(StrEnum):
    """Sampling density of the historical series."""

    HIGH = "high"
    """Daily or better (average spacing <= 1.5 days)."""

    MEDIUM = "medium"
    """Weekly or better (average spacing <= 7 days)."""

    LOW = "low"
    """Sparse data."""


class LiquidityRating(StrEnum):
    """How quickly a new listing is expected to fill."""

    FAST = "fast"
    MODERATE = "moderate"
    SLOW = "slow"
    ILLIQUID = "illiquid"


class PressureDirection(StrEnum):
    """Expected direction of the community value adjustment (RAP vs Value)."""

    UP = "up"
    NEUTRAL = "neutral"
    DOWN = "down"


class ConfidenceLevel(StrEnum):
    """Bucketed confidence score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
