"""Terminal width normalisation and breakpoint classification."""
from __future__ import annotations

import math
from typing import Any

from ..datatypes import DEFAULT_THRESHOLDS, Breakpoint, BreakpointThresholds

MIN_WIDTH = 1


def normalize_width(value: Any, *, minimum: int = MIN_WIDTH) -> int:
    """
    Coerce a raw width sample into a positive integer column count.

    Non-numeric values, NaN, infinities, and anything below ``minimum`` collapse to
    ``minimum``; finite floats are floored. Booleans are not treated as numbers.

    Returns:
        int: A column count that is always ``>= minimum``.
    """
    if isinstance(value, bool):
        return minimum
    if isinstance(value, int):
        return value if value >= minimum else minimum
    try:
        number = float(value)
    except (TypeError, ValueError):
        return minimum
    if not math.isfinite(number):
        return minimum
    floored = math.floor(number)
    return floored if floored >= minimum else minimum


def classify(width: Any, thresholds: BreakpointThresholds = DEFAULT_THRESHOLDS) -> Breakpoint:
    """
    Map a terminal width onto one of the four ordered breakpoints.

    The cut points are exact: ``width < narrow_max`` is narrow,
    ``narrow_max <= width < compact_max`` is compact,
    ``compact_max <= width <= normal_max`` is normal, anything wider is wide.
    """
    columns = normalize_width(width)
    if columns < thresholds.narrow_max:
        return Breakpoint.NARROW
    if columns < thresholds.compact_max:
        return Breakpoint.COMPACT
    if columns <= thresholds.normal_max:
        return Breakpoint.NORMAL
    return Breakpoint.WIDE


__all__ = ["MIN_WIDTH", "classify", "normalize_width"]
