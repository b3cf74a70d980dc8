"""Countdown formatting and urgency tiers for auto-execute timers."""
from __future__ import annotations

import math
from typing import Any, Dict

from ..datatypes import UrgencyTier
from .terminal import COLOR_BLIND_OVERRIDES

LOW_URGENCY_ABOVE_SECONDS = 5
HIGH_URGENCY_AT_OR_BELOW_SECONDS = 2

URGENCY_STYLES: Dict[UrgencyTier, str] = {
    UrgencyTier.LOW: "green",
    UrgencyTier.MEDIUM: "yellow",
    UrgencyTier.HIGH: "red",
}


def countdown_seconds(remaining_ms: Any) -> int:
    """
    Whole seconds shown for ``remaining_ms``, rounded up.

    Negative, NaN, infinite, and non-numeric inputs are clamped to 0 so the display
    never shows negative or non-numeric countdowns.
    """
    if isinstance(remaining_ms, bool):
        return 0
    try:
        value = float(remaining_ms)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(value) or value <= 0:
        return 0
    return math.ceil(value / 1000)


def tier_for_seconds(seconds: int) -> UrgencyTier:
    if seconds > LOW_URGENCY_ABOVE_SECONDS:
        return UrgencyTier.LOW
    if seconds > HIGH_URGENCY_AT_OR_BELOW_SECONDS:
        return UrgencyTier.MEDIUM
    return UrgencyTier.HIGH


def urgency_tier(remaining_ms: Any) -> UrgencyTier:
    """Urgency band for a countdown, derived from the same ceiled seconds as the label."""

    return tier_for_seconds(countdown_seconds(remaining_ms))


def format_countdown(remaining_ms: Any) -> str:
    return f"{countdown_seconds(remaining_ms)}s"


def urgency_style(tier: UrgencyTier, *, color_blind: bool = False) -> str:
    """Rich style name used to colour a countdown of the given tier."""

    style = URGENCY_STYLES[UrgencyTier(tier)]
    if color_blind:
        return COLOR_BLIND_OVERRIDES.get(style, style)
    return style


__all__ = [
    "URGENCY_STYLES",
    "countdown_seconds",
    "format_countdown",
    "tier_for_seconds",
    "urgency_style",
    "urgency_tier",
]
