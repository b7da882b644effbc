"""
Market input models: historical price points and per-asset fundamentals.

``PricePoint``: one observed transaction / value change.
``OrderBookEntry``: one active seller listing.
``PredictionConfig``: fundamentals and forecast settings for a single call.

All models are frozen (immutable) after construction: the engine never
mutates caller data, it only derives new sequences from it.

Validation is the call-boundary check for malformed input. Anything that
cannot be a price (non-numeric, NaN, infinite, negative) fails here with a
descriptive ``ValidationError`` instead of propagating NaN into the numerical
routines further down.
"""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Demand / trend ratings: -1 (no data) to 4.
RATING_MIN = -1
RATING_MAX = 4

DEFAULT_PREDICTION_DAYS = 30


class PricePoint(BaseModel):
    """A single historical (or forecast) price observation.

    Attributes:
        price: Observed price. Zero is accepted as a "no sale" marker but such
            points are not usable for forecasting.
        time: Unix timestamp in seconds.
        display_date: Human-readable date label for charts.
        volume: Units traded on that observation, or ``None`` if unknown.
    """

    model_config = ConfigDict(frozen=True)

    price: float
    time: float
    display_date: str = ""
    volume: Optional[float] = None

    @field_validator("price", "time")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"Expected a finite number, got {v}.")
        return v

    @field_validator("price")
    @classmethod
    def validate_price_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"price must be non-negative, got {v}.")
        return v

    @field_validator("volume")
    @classmethod
    def validate_volume(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and (not math.isfinite(v) or v < 0):
            raise ValueError(f"volume must be a finite non-negative number, got {v}.")
        return v


class OrderBookEntry(BaseModel):
    """An active seller listing used for order-book gap analysis."""

    model_config = ConfigDict(frozen=True)

    price: float = Field(gt=0)
    seller_id: Optional[int] = None


class PredictionConfig(BaseModel):
    """Fundamentals and settings for one forecast call.

    Attributes:
        sellers: Active seller count; ``None`` when unknown (drives regime).
        demand: Demand rating, -1 (none) … 4 (amazing). Default 2 (normal).
        trend: Trend rating, -1 (none), 0 lowering, 1 unstable, 2 stable,
            3 raising, 4 fluctuating. Default 2.
        rap: Recent Average Price, or ``None``.
        value: Community-assessed value, or ``None``.
        is_projected: Price flagged as artificially inflated.
        order_book: Next seller listings (any order).
        prediction_days: Forecast horizon in days.
    """

    model_config = ConfigDict(frozen=True)

    sellers: Optional[int] = Field(default=None, ge=0)
    demand: int = Field(default=2, ge=RATING_MIN, le=RATING_MAX)
    trend: int = Field(default=2, ge=RATING_MIN, le=RATING_MAX)
    rap: Optional[float] = Field(default=None, ge=0)
    value: Optional[float] = Field(default=None, ge=0)
    is_projected: bool = False
    order_book: list[OrderBookEntry] = Field(default_factory=list)
    prediction_days: int = Field(default=DEFAULT_PREDICTION_DAYS, ge=1)

    @field_validator("rap", "value")
    @classmethod
    def zero_means_unavailable(cls, v: Optional[float]) -> Optional[float]:
        """Upstream APIs report 0 for "no data"; treat it as missing."""
        if v is None or v == 0:
            return None
        if not math.isfinite(v):
            raise ValueError(f"Expected a finite number, got {v}.")
        return v
