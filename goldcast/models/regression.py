# goldcast/models/regression.py
"""
Ordinary least squares over a price sequence.

x-values are the indices 0..n-1, so the slope is "price change per sample".
The fit never raises: degenerate input (fewer than two samples, zero variance)
gets a defined fallback with ``r_squared == 0``.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float
    r_squared: float


def linear_regression(values: Sequence[float]) -> RegressionResult:
    """
    Fit y = intercept + slope * x with x = 0..n-1.

    Args:
        values (Sequence[float]): Ordered samples (typically closing prices).
            Non-finite entries are dropped before fitting.

    Returns:
        RegressionResult: slope, intercept and coefficient of determination.
            n < 2          -> slope 0, intercept = the single value (or 0), r² 0
            zero variance  -> slope 0, intercept = mean(y), r² 0
    """
    y = np.asarray(list(values), dtype=float)
    y = y[np.isfinite(y)]
    n = y.size

    if n < 2:
        return RegressionResult(slope=0.0, intercept=float(y[0]) if n else 0.0, r_squared=0.0)

    x = np.arange(n, dtype=float)
    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_x2 = (x * x).sum()
    sum_y2 = (y * y).sum()

    denominator = n * sum_x2 - sum_x * sum_x
    mean_y = sum_y / n
    if denominator == 0 or np.ptp(y) == 0:
        return RegressionResult(slope=0.0, intercept=float(mean_y), r_squared=0.0)

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    ss_tot = sum_y2 - n * mean_y * mean_y
    residuals = y - (slope * x + intercept)
    ss_res = float((residuals * residuals).sum())
    if ss_tot <= 0:
        # Cancellation in the running sums on a near-flat series
        ss_tot = float(((y - mean_y) ** 2).sum())
    r_squared = 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0

    return RegressionResult(
        slope=float(slope),
        intercept=float(intercept),
        r_squared=float(min(1.0, max(0.0, r_squared))),
    )
