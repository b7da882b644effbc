"""
Data sanitizer: drop snipes and extreme outliers before any modelling.

A "snipe" is a sale executed far below fair value (a lucky find, a bot, a
distressed seller). It is noise, not signal: left in, it drags drift down and
widens every band. Symmetrically, sales far above value are usually
projections; moderate ones are left for the Gravity engine to interpret, but
egregious ones (> ``OUTLIER_RATIO`` × value) are removed.

Rules (relative to ``reference_value``):
  price <  SNIPE_RATIO   × reference  → removed, counted as a snipe
  price >  OUTLIER_RATIO × reference  → removed

Safety valve
------------
If more than ``MAX_REMOVAL_FRACTION`` of the series would be removed, the
reference value is presumed stale or wrong and the ORIGINAL series is
returned with zero counts. The threshold is a heuristic; it is kept as a
named constant (and is overridable via ``SanitizerConfig``) rather than
hard-coded at the call site.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from collectible_forecaster.models.market import PricePoint

logger = logging.getLogger(__name__)

SNIPE_RATIO = 0.5
OUTLIER_RATIO = 3.0
MAX_REMOVAL_FRACTION = 0.7

PROJECTION_SALE_RATIO = 1.5


@dataclass(frozen=True)
class SanitizeResult:
    """Output of ``sanitize_series``.

    Attributes:
        sanitized: Retained points, original order.
        removed_count: Points removed (snipes + outliers).
        snipe_count: Points removed specifically as snipes.
        valve_tripped: True if the safety valve restored the original series.
    """

    sanitized: list[PricePoint] = field(default_factory=list)
    removed_count: int = 0
    snipe_count: int = 0
    valve_tripped: bool = False


def is_snipe(sale_price: float, value: float, threshold: float = SNIPE_RATIO) -> bool:
    """True if ``sale_price`` is below ``threshold`` × ``value``."""
    if value <= 0:
        return False
    return sale_price < value * threshold


def is_projection_sale(
    sale_price: float,
    value: float,
    threshold: float = PROJECTION_SALE_RATIO,
) -> bool:
    """True if ``sale_price`` is above ``threshold`` × ``value`` (artificial inflation)."""
    if value <= 0:
        return False
    return sale_price > value * threshold


def sanitize_series(
    series: Sequence[PricePoint],
    reference_value: float,
    snipe_ratio: float = SNIPE_RATIO,
    outlier_ratio: float = OUTLIER_RATIO,
    max_removal_fraction: float = MAX_REMOVAL_FRACTION,
) -> SanitizeResult:
    """Filter snipes and extreme outliers relative to ``reference_value``.

    Args:
        series: Historical points, ascending.
        reference_value: Community value, or the last observed price when the
            value is unavailable.
        snipe_ratio: Lower cut-off as a fraction of the reference.
        outlier_ratio: Upper cut-off as a multiple of the reference.
        max_removal_fraction: Removing more than this fraction trips the valve.

    Returns:
        ``SanitizeResult``. An empty series or a non-positive reference is
        returned unchanged.
    """
    original = list(series)
    if not original or reference_value <= 0:
        return SanitizeResult(sanitized=original)

    kept: list[PricePoint] = []
    snipe_count = 0
    outlier_count = 0
    for point in original:
        if is_snipe(point.price, reference_value, snipe_ratio):
            snipe_count += 1
        elif point.price > reference_value * outlier_ratio:
            outlier_count += 1
        else:
            kept.append(point)

    removed = snipe_count + outlier_count
    if removed > len(original) * max_removal_fraction:
        logger.warning(
            "Sanitizer safety valve tripped: %d of %d points outside [%.2f, %.2f]; "
            "keeping original series (reference value may be stale).",
            removed, len(original),
            reference_value * snipe_ratio, reference_value * outlier_ratio,
        )
        return SanitizeResult(sanitized=original, valve_tripped=True)

    if removed:
        logger.debug(
            "Sanitizer removed %d point(s) (%d snipes, %d outliers) vs reference %.2f",
            removed, snipe_count, outlier_count, reference_value,
        )
    return SanitizeResult(sanitized=kept, removed_count=removed, snipe_count=snipe_count)
