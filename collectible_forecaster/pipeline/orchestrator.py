"""
Forecast orchestration: the single public entry point of the engine.

``generate_full_prediction`` runs the full sequence for one asset:

  Step 1  Coerce:     Validate the series and fundamentals (pydantic).
  Step 2  Gate:       Require ``min_points`` usable (positive-price) points.
  Step 3  Sanitize:   Drop snipes / outliers against the community value
                       (or the last price when no value is known).
  Step 4  Triage:     ``detect_regime`` picks FLOW, INERTIA or GRAVITY.
  Step 5  Execute:    Dispatch through ``ENGINES``.
  Step 6  Metrics:    Liquidity, pressure and confidence.

Failure modes
-------------
- Too little data (before or after sanitisation): the documented empty
  ``PredictionResult`` (no points, score 0, regime INERTIA,
  ``days_to_sell = inf``). Not an exception.
- Malformed input (non-numeric prices, NaN, negative values, out-of-range
  ratings): ``pydantic.ValidationError`` from the model constructors.
- ``series`` that is not a sequence at all: ``TypeError``.

Reproducibility
---------------
Nothing here reads global state. Randomness comes from ``rng`` (or a
generator built from ``settings.simulation.seed``), the reference time from
``now`` (or the wall clock), and every threshold from ``settings`` (or
``AppConfig()`` defaults). Same arguments, same forecast.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Optional, Union

import numpy as np

from collectible_forecaster.config import AppConfig
from collectible_forecaster.engines import ENGINES
from collectible_forecaster.features.indicators import average_volume
from collectible_forecaster.metrics.confidence import calculate_prediction_confidence
from collectible_forecaster.metrics.liquidity import calculate_liquidity_velocity
from collectible_forecaster.metrics.pressure import calculate_pressure
from collectible_forecaster.models.forecast import PredictionResult, PredictionWithBands
from collectible_forecaster.models.market import PricePoint, PredictionConfig
from collectible_forecaster.pipeline.sanitize import sanitize_series
from collectible_forecaster.regime.detector import detect_regime
from collectible_forecaster.simulation.rng import make_rng
from collectible_forecaster.utils.time_utils import to_unix_seconds

logger = logging.getLogger(__name__)

SeriesInput = Sequence[Union[PricePoint, Mapping[str, Any]]]
ConfigInput = Optional[Union[PredictionConfig, Mapping[str, Any]]]


# ── Input coercion ────────────────────────────────────────────────────────────

def coerce_series(series: Any) -> list[PricePoint]:
    """Return ``series`` as a list of ``PricePoint``, validating dict entries.

    Raises:
        TypeError: ``series`` is not a list / tuple-like sequence, or an
            entry is neither a ``PricePoint`` nor a mapping.
        pydantic.ValidationError: an entry fails field validation.
    """
    if isinstance(series, (str, bytes)) or not isinstance(series, Sequence):
        raise TypeError(
            f"series must be a sequence of price points, got {type(series).__name__}."
        )

    points: list[PricePoint] = []
    for i, item in enumerate(series):
        if isinstance(item, PricePoint):
            points.append(item)
        elif isinstance(item, Mapping):
            points.append(PricePoint.model_validate(item))
        else:
            raise TypeError(
                f"series[{i}] must be a PricePoint or mapping, got {type(item).__name__}."
            )
    return points


def coerce_config(config: Any, settings: AppConfig) -> PredictionConfig:
    """Return ``config`` as a ``PredictionConfig``; ``None`` gives defaults."""
    if config is None:
        return PredictionConfig(prediction_days=settings.forecast.default_prediction_days)
    if isinstance(config, PredictionConfig):
        return config
    if isinstance(config, Mapping):
        data = dict(config)
        data.setdefault("prediction_days", settings.forecast.default_prediction_days)
        return PredictionConfig.model_validate(data)
    raise TypeError(
        f"config must be a PredictionConfig or mapping, got {type(config).__name__}."
    )


# ── Public API ────────────────────────────────────────────────────────────────

def generate_full_prediction(
    series: SeriesInput,
    config: ConfigInput = None,
    *,
    rng: Optional[np.random.Generator] = None,
    now: datetime | float | int | None = None,
    settings: Optional[AppConfig] = None,
) -> PredictionResult:
    """Forecast ``series`` with bands and fundamentals-derived metrics.

    Args:
        series: Ascending, deduplicated history (``PricePoint`` or dicts with
            the same fields).
        config: Fundamentals (``PredictionConfig`` or a dict); ``None`` for
            defaults.
        rng: Random source; defaults to ``make_rng(settings.simulation.seed)``.
        now: Reference time; forecasts start the day after
            ``max(now, last point)``. Defaults to the current UTC time.
        settings: Thresholds and simulation sizes; defaults to ``AppConfig()``.

    Returns:
        ``PredictionResult``; ``PredictionResult.empty()`` when there is too
        little usable data.
    """
    settings = settings or AppConfig()
    points = coerce_series(series)
    cfg = coerce_config(config, settings)
    min_points = settings.forecast.min_points

    usable = [p for p in points if p.price > 0]
    if len(usable) < min_points:
        logger.debug(
            "Insufficient data: %d usable point(s), need %d", len(usable), min_points
        )
        return PredictionResult.empty()

    reference = cfg.value if cfg.value is not None else usable[-1].price
    san = settings.sanitizer
    cleaned = sanitize_series(
        usable, reference,
        snipe_ratio=san.snipe_ratio,
        outlier_ratio=san.outlier_ratio,
        max_removal_fraction=san.max_removal_fraction,
    )
    if len(cleaned.sanitized) < min_points:
        logger.debug(
            "Insufficient data after sanitisation: %d kept, %d removed",
            len(cleaned.sanitized), cleaned.removed_count,
        )
        return PredictionResult.empty(sanitized_count=cleaned.removed_count)

    regime = detect_regime(cfg)
    engine = ENGINES[regime]
    prediction = engine(
        cleaned.sanitized,
        cfg,
        cfg.prediction_days,
        rng=rng if rng is not None else make_rng(settings.simulation.seed),
        now=to_unix_seconds(now),
        settings=settings,
    )

    liquidity = calculate_liquidity_velocity(
        average_volume(cleaned.sanitized), cfg.sellers or 0
    )
    pressure = calculate_pressure(cfg.rap, cfg.value)
    confidence = calculate_prediction_confidence(
        cleaned.sanitized, regime, cfg.demand, cfg.trend
    )

    result = PredictionResult(
        predicted=prediction.predicted,
        upper_band=prediction.upper_band,
        lower_band=prediction.lower_band,
        confidence_score=confidence.percentage,
        confidence_level=confidence.level,
        confidence_factors=confidence.factors,
        liquidity_rating=liquidity.rating,
        days_to_sell=liquidity.velocity,
        pressure_rating=pressure.rating,
        pressure_direction=pressure.direction,
        regime=regime,
        sanitized_count=cleaned.removed_count,
    )

    logger.info(
        "Forecast: regime=%s days=%d points=%d removed=%d confidence=%d%% (%s) "
        "liquidity=%s pressure=%s",
        regime, cfg.prediction_days, len(cleaned.sanitized), cleaned.removed_count,
        confidence.percentage, confidence.level, liquidity.rating, pressure.rating,
    )
    return result


def generate_predictions_with_bands(
    series: SeriesInput,
    config: ConfigInput = None,
    **kwargs: Any,
) -> PredictionWithBands:
    """The three forecast bands of ``generate_full_prediction`` without metrics."""
    full = generate_full_prediction(series, config, **kwargs)
    return PredictionWithBands(
        predicted=full.predicted, upper_band=full.upper_band, lower_band=full.lower_band
    )


def generate_predictions(
    series: SeriesInput,
    config: ConfigInput = None,
    **kwargs: Any,
) -> list[PricePoint]:
    """Just the median forecast line."""
    return generate_full_prediction(series, config, **kwargs).predicted
