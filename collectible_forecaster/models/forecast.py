"""
Forecast output models.

``PredictionWithBands`` is the shape every engine returns: three aligned
day-by-day sequences (median, upper, lower).

``PredictionResult`` extends it with the auxiliary metrics computed by the
orchestrator (liquidity, pressure, confidence) and the regime that produced
it. It is the sole externally visible output of the engine.

Both models are frozen.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

from collectible_forecaster.models.market import PricePoint
from collectible_forecaster.taxonomy.market_taxonomy import (
    ConfidenceLevel,
    LiquidityRating,
    MarketRegime,
    PressureDirection,
)


class PredictionWithBands(BaseModel):
    """Median forecast plus upper / lower confidence bands.

    Attributes:
        predicted: Median forecast, one point per day.
        upper_band: Upper band (90th-percentile style), aligned with ``predicted``.
        lower_band: Lower band (10th-percentile style), aligned with ``predicted``.
    """

    model_config = ConfigDict(frozen=True)

    predicted: list[PricePoint] = Field(default_factory=list)
    upper_band: list[PricePoint] = Field(default_factory=list)
    lower_band: list[PricePoint] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_aligned(self) -> "PredictionWithBands":
        n = len(self.predicted)
        if len(self.upper_band) != n or len(self.lower_band) != n:
            raise ValueError(
                "predicted, upper_band and lower_band must have equal length "
                f"(got {n}, {len(self.upper_band)}, {len(self.lower_band)})."
            )
        for p, u, l in zip(self.predicted, self.upper_band, self.lower_band):
            if not (p.time == u.time == l.time):
                raise ValueError(f"Band timestamps are misaligned at t={p.time}.")
        return self

    def __len__(self) -> int:
        return len(self.predicted)


class PredictionResult(PredictionWithBands):
    """Complete forecast with fundamentals-derived metrics.

    Attributes:
        confidence_score: 0–100; 0 only for the empty (insufficient data) result.
        confidence_level: Bucketed ``confidence_score``.
        confidence_factors: Human-readable reasons behind the score.
        liquidity_rating: How fast a listing is expected to fill.
        days_to_sell: Estimated days to find a buyer (``inf`` when unknown).
        pressure_rating: RAP/Value label, e.g. ``"Undervalued"``.
        pressure_direction: Expected value adjustment direction.
        regime: Engine that produced the forecast.
        sanitized_count: Number of snipes / outliers filtered out.
    """

    confidence_score: int = Field(default=0, ge=0, le=100)
    confidence_level: ConfidenceLevel = ConfidenceLevel.LOW
    confidence_factors: list[str] = Field(default_factory=list)
    liquidity_rating: LiquidityRating = LiquidityRating.ILLIQUID
    days_to_sell: float = Field(default=math.inf, ge=0)
    pressure_rating: str = "Fair Value"
    pressure_direction: PressureDirection = PressureDirection.NEUTRAL
    regime: MarketRegime = MarketRegime.INERTIA
    sanitized_count: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        """True for the documented insufficient-data result."""
        return not self.predicted

    @classmethod
    def empty(cls, sanitized_count: int = 0) -> "PredictionResult":
        """The soft-fail result returned when there is too little usable data."""
        return cls(sanitized_count=sanitized_count)
