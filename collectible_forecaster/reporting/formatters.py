"""
ASCII terminal formatters for the ``predict`` CLI command.

Formatters accept a ``PredictionResult`` and return plain multi-line strings
suitable for ``typer.echo()``. No third-party dependencies (no ``rich``).

Layout::

  === Price Forecast ===
    Regime:        FLOW
    Confidence:    65% (medium)
    Liquidity:     fast (0.5 days to sell)
    Pressure:      Undervalued (up)
    Sanitized:     2 point(s) removed

    Day  Date              Lower  Predicted    Upper
    -------------------------------------------------
      1  Mar 06, 2026        980       1.1K     1.2K
    ...

Long horizons are thinned to the first, last and every ``step``-th day.
"""

from __future__ import annotations

import math

from collectible_forecaster.models.forecast import PredictionResult
from collectible_forecaster.reporting.chart_utils import format_price
from collectible_forecaster.utils.time_utils import format_display_date

DEFAULT_MAX_ROWS = 15


def _days_to_sell_text(days: float) -> str:
    if math.isinf(days):
        return "unknown"
    return f"{days:.1f} days to sell"


def _row_indices(n: int, max_rows: int) -> list[int]:
    if n <= max_rows:
        return list(range(n))
    step = math.ceil(n / max_rows)
    indices = list(range(0, n, step))
    if indices[-1] != n - 1:
        indices.append(n - 1)
    return indices


def format_prediction_summary(
    result: PredictionResult,
    last_price: float | None = None,
    max_rows: int = DEFAULT_MAX_ROWS,
    show_factors: bool = True,
) -> str:
    """Format a forecast as a header block plus a day-by-day band table.

    Args:
        result: Output of ``generate_full_prediction``.
        last_price: Last historical price; adds a horizon change line when given.
        max_rows: Table rows before thinning kicks in.
        show_factors: Include the confidence factor list.

    Returns:
        Multi-line string.
    """
    lines: list[str] = ["", "=== Price Forecast ==="]

    if result.is_empty:
        lines.append("  (insufficient data: need at least 5 usable price points)")
        if result.sanitized_count:
            lines.append(f"  Sanitized:     {result.sanitized_count} point(s) removed")
        return "\n".join(lines)

    lines.append(f"  Regime:        {result.regime}")
    lines.append(f"  Confidence:    {result.confidence_score}% ({result.confidence_level})")
    lines.append(
        f"  Liquidity:     {result.liquidity_rating} ({_days_to_sell_text(result.days_to_sell)})"
    )
    lines.append(f"  Pressure:      {result.pressure_rating} ({result.pressure_direction})")
    lines.append(f"  Sanitized:     {result.sanitized_count} point(s) removed")

    if last_price:
        final = result.predicted[-1].price
        change = (final - last_price) / last_price * 100.0
        lines.append(
            f"  Horizon:       {format_price(last_price)} -> {format_price(final)} "
            f"({change:+.2f}% over {len(result)} days)"
        )

    if show_factors and result.confidence_factors:
        lines.append("")
        lines.append("  Confidence factors:")
        for factor in result.confidence_factors:
            lines.append(f"    - {factor}")

    lines.append("")
    header = f"    {'Day':>3}  {'Date':<14}  {'Lower':>9}  {'Predicted':>9}  {'Upper':>9}"
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))
    for i in _row_indices(len(result), max_rows):
        p = result.predicted[i]
        lines.append(
            f"    {i + 1:>3}  {format_display_date(p.time):<14}  "
            f"{format_price(result.lower_band[i].price):>9}  "
            f"{format_price(p.price):>9}  "
            f"{format_price(result.upper_band[i].price):>9}"
        )

    return "\n".join(lines)
