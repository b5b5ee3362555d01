# File: utils/math_utils.py
"""Math and calculation utilities for Numu.

Pure Python math functions used by the statistics and gamification engines.

Functions:
    - round_ratio: Consistent rounding of rates
    - safe_ratio: Division with zero-denominator protection
    - calculate_percentage: Progress percentage calculations
    - whole_percent: Floor a fraction to an integer percentage
    - clamp: Bound a value between limits
    - mean: Average with empty-input protection
"""

from __future__ import annotations

from collections.abc import Iterable
import logging
import math

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# Default float precision for rate rounding
DATA_FLOAT_PRECISION = 4


def round_ratio(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a rate to the configured precision.

    Prevents float drift (e.g., 0.30000000000000004 → 0.3) from leaking into
    stored progress values.

    Examples:
        round_ratio(0.123456) → 0.1235
        round_ratio(1.0) → 1.0
    """
    return round(value, precision)


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 when the denominator is not positive.

    Examples:
        safe_ratio(3, 4) → 0.75
        safe_ratio(5, 0) → 0.0  # Division by zero protection
    """
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def calculate_percentage(
    current: float,
    target: float,
    precision: int = 2,
) -> float:
    """Calculate progress percentage with proper rounding.

    Args:
        current: Current progress value
        target: Target/total value
        precision: Number of decimal places for rounding

    Returns:
        Percentage (0-100) with proper rounding, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(5, 0) → 0.0
    """
    if target <= 0:
        return 0.0
    return round((current / target) * 100, precision)


def whole_percent(fraction: float) -> int:
    """Convert a 0-1 fraction to a whole percentage, rounding down.

    A tiny epsilon absorbs float error so that 0.9 * 100 counts as 90.

    Examples:
        whole_percent(0.9) → 90
        whole_percent(0.899) → 89
        whole_percent(1.0) → 100
    """
    return int(math.floor(fraction * 100 + 1e-9))


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
        clamp(50, 0, 100) → 50
    """
    return max(min_val, min(value, max_val))


def mean(values: Iterable[float]) -> float:
    """Return the arithmetic mean, or 0.0 for an empty input."""
    total = 0.0
    count = 0
    for value in values:
        total += value
        count += 1
    if count == 0:
        _LOGGER.debug("mean() called with no values, returning 0.0")
        return 0.0
    return total / count
