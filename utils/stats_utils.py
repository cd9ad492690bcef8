#!/usr/bin/env python3
"""
Statistical Helpers
Numeric building blocks shared by the ESG analytics engines.

Features:
- Min/max metric normalization onto a 0-100 scale
- Abramowitz-Stegun error function and standard normal CDF
- Ordinary least-squares slope over an evenly spaced series
- Population volatility and sub-window momentum

Author: ESG Analytics Team
Version: 1.0.0
"""

import math
from typing import Optional, Sequence

import numpy as np

from utils.validation import to_number


NEUTRAL_SCORE = 50.0

# Abramowitz & Stegun, formula 7.1.26
ERF_A1 = 0.254829592
ERF_A2 = -0.284496736
ERF_A3 = 1.421413741
ERF_A4 = -1.453152027
ERF_A5 = 1.061405429
ERF_P = 0.3275911


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


def normalize_metric(value, minimum: float, maximum: float, inverse: bool = False) -> float:
    """Normalize a raw metric onto 0-100.

    Args:
        value: Raw metric value (may be missing or malformed)
        minimum: Value mapped to 0
        maximum: Value mapped to 100
        inverse: True when lower raw values are better

    Returns:
        Normalized score; 50 for missing/invalid values or a degenerate range
    """
    number = to_number(value)
    if number is None:
        return NEUTRAL_SCORE

    if minimum >= maximum:
        return NEUTRAL_SCORE

    normalized = ((number - minimum) / (maximum - minimum)) * 100
    bounded = clamp(normalized, 0.0, 100.0)

    return 100.0 - bounded if inverse else bounded


def erf(x: float) -> float:
    """Rational approximation of the Gauss error function (|error| < 1.5e-7)."""
    sign = 1.0 if x >= 0 else -1.0
    x = abs(x)

    t = 1.0 / (1.0 + ERF_P * x)
    y = 1.0 - (((((ERF_A5 * t + ERF_A4) * t) + ERF_A3) * t + ERF_A2) * t + ERF_A1) * t * math.exp(-x * x)

    return sign * y


def normal_cdf(x: float) -> float:
    """Standard normal cumulative distribution function."""
    return 0.5 * (1.0 + erf(x / math.sqrt(2.0)))


def ols_slope(values: Sequence[float]) -> float:
    """Least-squares slope of ``values`` against their index 0..n-1.

    Returns:
        Slope, or 0.0 when fewer than two points make it undefined
    """
    n = len(values)
    if n < 2:
        return 0.0

    y = np.asarray(values, dtype=float)
    x = np.arange(n, dtype=float)

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_xx = (x * x).sum()

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0

    return float((n * sum_xy - sum_x * sum_y) / denominator)


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation (ddof=0); 0.0 for an empty series."""
    if len(values) == 0:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty series."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def relative_change(recent: Sequence[float], earlier: Sequence[float]) -> Optional[float]:
    """Relative change of the mean of ``recent`` against the mean of ``earlier``.

    Returns:
        Fractional change, or None when the earlier mean is zero or either window is empty
    """
    if len(recent) == 0 or len(earlier) == 0:
        return None

    baseline = mean(earlier)
    if baseline == 0:
        return None

    return (mean(recent) - baseline) / baseline


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (58.5 -> 59, -2.5 -> -2).

    Scores are reported with half-up rounding rather than Python's
    banker's rounding.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
