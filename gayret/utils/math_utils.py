# File: utils/math_utils.py
"""Math and calculation utilities for Gayret.

Pure Python math functions with no dependency on the rest of the package.

Percentages stay unrounded through aggregation; only the value handed to the
caller is rounded, once, to a whole percent.

Functions:
    - round_percent: Half-up rounding to a whole percent
    - calculate_percentage: Zero-safe progress percentage
    - capped_percentage: Zero-safe percentage clamped to 0..100
    - clamp: Bound a value to a range
    - mean: Arithmetic mean with an empty-input fallback
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

PERCENT_MAX = 100.0


def round_percent(value: float) -> int:
    """Round a percentage to a whole number, halves rounding up.

    Python's ``round`` rounds halves to even; progress displays round 12.5
    to 13.

    Examples:
        round_percent(33.333) → 33
        round_percent(12.5) → 13
        round_percent(66.7) → 67
    """
    return math.floor(value + 0.5)


def calculate_percentage(current: float, target: float) -> float:
    """Calculate an unrounded progress percentage.

    Args:
        current: Current progress value
        target: Target/total value

    Returns:
        Percentage, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(5, 0) → 0.0  # Division by zero protection
    """
    if target <= 0:
        return 0.0
    return (current / target) * 100


def capped_percentage(current: float, target: float) -> float:
    """Calculate a percentage clamped to the 0..100 range.

    Examples:
        capped_percentage(15, 10) → 100.0
        capped_percentage(3, 0) → 0.0
    """
    return clamp(calculate_percentage(current, target), 0.0, PERCENT_MAX)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
    """
    return max(min_val, min(value, max_val))


def mean(values: Sequence[float]) -> float:
    """Return the arithmetic mean, or 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)
