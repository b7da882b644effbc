"""
Pricing pressure: divergence between RAP and community Value.

  RAP > Value  → the item trades above its assessed worth; the value is
                 likely to be raised ("Undervalued", upward pressure).
  RAP < Value  → trades below assessed worth; value likely lowered.
  RAP ≈ Value  → equilibrium.

Thresholds on ``ratio = RAP / Value``:

  ratio > 1.30  Strongly Undervalued   (up)
  ratio > 1.15  Undervalued            (up)
  ratio < 0.70  Strongly Overvalued    (down)
  ratio < 0.85  Overvalued             (down)
  otherwise     Fair Value             (neutral)

``magnitude = min(|ratio - 1| / 0.5, 1)`` for directional ratings, else 0.
"""

from __future__ import annotations

from dataclasses import dataclass

from collectible_forecaster.taxonomy.market_taxonomy import PressureDirection

UPWARD_RATIO = 1.15
STRONG_UPWARD_RATIO = 1.3
DOWNWARD_RATIO = 0.85
STRONG_DOWNWARD_RATIO = 0.7
MAGNITUDE_SCALE = 0.5

# Daily drift added by the Flow engine at full pressure magnitude.
PRESSURE_DRIFT_PER_DAY = 0.003


@dataclass(frozen=True)
class PressureAssessment:
    """RAP/Value pressure.

    Attributes:
        ratio: RAP / Value (1.0 when either is unavailable).
        direction: Expected value adjustment direction.
        magnitude: Strength in [0, 1].
        rating: Display label.
    """

    ratio: float
    direction: PressureDirection
    magnitude: float
    rating: str

    @property
    def drift_adjustment(self) -> float:
        """Signed daily drift term: ±``PRESSURE_DRIFT_PER_DAY`` × magnitude."""
        if self.direction is PressureDirection.UP:
            return PRESSURE_DRIFT_PER_DAY * self.magnitude
        if self.direction is PressureDirection.DOWN:
            return -PRESSURE_DRIFT_PER_DAY * self.magnitude
        return 0.0


NEUTRAL_PRESSURE = PressureAssessment(
    ratio=1.0, direction=PressureDirection.NEUTRAL, magnitude=0.0, rating="Fair Value"
)


def calculate_pressure(rap: float | None, value: float | None) -> PressureAssessment:
    """Assess RAP/Value pressure; missing or non-positive inputs are neutral."""
    if rap is None or value is None or rap <= 0 or value <= 0:
        return NEUTRAL_PRESSURE

    ratio = rap / value
    if ratio > UPWARD_RATIO:
        return PressureAssessment(
            ratio=ratio,
            direction=PressureDirection.UP,
            magnitude=min((ratio - 1.0) / MAGNITUDE_SCALE, 1.0),
            rating="Strongly Undervalued" if ratio > STRONG_UPWARD_RATIO else "Undervalued",
        )
    if ratio < DOWNWARD_RATIO:
        return PressureAssessment(
            ratio=ratio,
            direction=PressureDirection.DOWN,
            magnitude=min((1.0 - ratio) / MAGNITUDE_SCALE, 1.0),
            rating="Strongly Overvalued" if ratio < STRONG_DOWNWARD_RATIO else "Overvalued",
        )
    return PressureAssessment(
        ratio=ratio, direction=PressureDirection.NEUTRAL, magnitude=0.0, rating="Fair Value"
    )
