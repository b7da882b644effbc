"""
Forecast error metrics and ensemble weighting.

MSE (Mean Squared Error)
  The Flow ensemble scores each forecasting method by its squared error on a
  hold-out window. Squaring punishes a method that is occasionally far off
  more than one that is consistently slightly off, which is what matters
  when the output is blended into a single price line.
  Only the overlapping prefix of ``actual`` and ``predicted`` is compared;
  nothing to compare gives ``inf`` ("this method could not be evaluated").

Inverse-variance weights
  ``w_i = (1 / max(err_i, MIN_ERROR)) / Σ_j (1 / max(err_j, MIN_ERROR))``.
  A method with half the error gets twice the weight. ``MIN_ERROR`` keeps a
  perfect backtest (err = 0) from taking the whole ensemble to infinity.

  When no method could be evaluated (every error is ``inf``), the inverse
  errors sum to 0. The weights then fall back to an equal split instead of
  dividing 0 by 0.
"""

from __future__ import annotations

import math
from typing import Mapping, Sequence

MIN_ERROR = 0.001


def calculate_mse(actual: Sequence[float], predicted: Sequence[float]) -> float:
    """Mean squared error over the overlapping prefix; ``inf`` if empty."""
    n = min(len(actual), len(predicted))
    if n == 0:
        return math.inf
    return sum((actual[i] - predicted[i]) ** 2 for i in range(n)) / n


def inverse_variance_weights(errors: Mapping[str, float]) -> dict[str, float]:
    """Normalised inverse-error weights keyed like ``errors``.

    Args:
        errors: Method name → backtest error (``inf`` = not evaluable).

    Returns:
        Weights in [0, 1] summing to 1 (empty dict for empty input).
    """
    if not errors:
        return {}

    inverse = {
        name: (0.0 if math.isinf(err) else 1.0 / max(err, MIN_ERROR))
        for name, err in errors.items()
    }
    total = sum(inverse.values())
    if total <= 0:
        equal = 1.0 / len(errors)
        return {name: equal for name in errors}
    return {name: inv / total for name, inv in inverse.items()}
