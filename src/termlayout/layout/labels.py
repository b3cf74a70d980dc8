"""Full versus abbreviated label selection."""
from __future__ import annotations

from typing import Union

from ..datatypes import AbbreviationMode, Breakpoint, DisplayDensity, Segment
from .segments import coerce_density


def coerce_abbreviation_mode(value: Union[AbbreviationMode, str, None]) -> AbbreviationMode:
    """Parse a mode name; unknown values behave like ``auto``."""

    if isinstance(value, AbbreviationMode):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in AbbreviationMode:
            if member.value == normalized:
                return member
    return AbbreviationMode.AUTO


def abbreviation_mode_for(density: Union[DisplayDensity, str, None]) -> AbbreviationMode:
    """Translate a display density into the abbreviation policy it implies."""

    resolved = coerce_density(density)
    if resolved is DisplayDensity.COMPACT:
        return AbbreviationMode.ABBREVIATED
    if resolved is DisplayDensity.VERBOSE:
        return AbbreviationMode.FULL
    return AbbreviationMode.AUTO


def resolve_label(
    segment: Segment,
    mode: Union[AbbreviationMode, str],
    breakpoint: Breakpoint,
) -> str:
    """
    Choose the label text shown for ``segment``.

    ``full`` always uses the label. ``abbreviated`` uses the abbreviation when one
    is defined, including a deliberately empty one, and falls back to the label
    when it is missing. ``auto`` abbreviates only at the narrow breakpoint.
    """
    resolved = coerce_abbreviation_mode(mode)
    if resolved is AbbreviationMode.FULL:
        return segment.label
    if resolved is AbbreviationMode.AUTO and breakpoint != Breakpoint.NARROW:
        return segment.label
    if segment.abbreviated_label is None:
        return segment.label
    return segment.abbreviated_label


__all__ = ["abbreviation_mode_for", "coerce_abbreviation_mode", "resolve_label"]
