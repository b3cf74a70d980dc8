"""Priority-tiered visibility filtering for status segments."""
from __future__ import annotations

import logging
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from ..datatypes import Breakpoint, DisplayDensity, Priority, Segment, Side

logger = logging.getLogger(__name__)

_ALL_PRIORITIES: FrozenSet[Priority] = frozenset(Priority)

VISIBLE_PRIORITIES: Dict[Breakpoint, FrozenSet[Priority]] = {
    Breakpoint.NARROW: frozenset({Priority.CRITICAL, Priority.HIGH}),
    Breakpoint.COMPACT: frozenset({Priority.CRITICAL, Priority.HIGH, Priority.MEDIUM}),
    Breakpoint.NORMAL: frozenset({Priority.CRITICAL, Priority.HIGH, Priority.MEDIUM}),
    Breakpoint.WIDE: _ALL_PRIORITIES,
}

# Lower rank is more important; used when trimming to fit.
PRIORITY_RANK: Dict[Priority, int] = {
    Priority.CRITICAL: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}


def coerce_priority(value: Union[Priority, str, None]) -> Optional[Priority]:
    """Return the matching :class:`Priority` or ``None`` for unrecognised values."""

    if isinstance(value, Priority):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in Priority:
            if member.value == normalized:
                return member
    return None


def coerce_density(value: Union[DisplayDensity, str, None]) -> Optional[DisplayDensity]:
    if value is None or isinstance(value, DisplayDensity):
        return value
    normalized = str(value).strip().lower()
    for member in DisplayDensity:
        if member.value == normalized:
            return member
    return None


def effective_breakpoint(
    breakpoint: Breakpoint, density: Union[DisplayDensity, str, None] = None
) -> Breakpoint:
    """
    Apply the display density override to a measured breakpoint.

    ``compact`` pins the narrow tier, ``verbose`` pins the wide tier, and ``normal``
    (or no override) keeps the measured tier.
    """
    resolved = coerce_density(density)
    if resolved is DisplayDensity.COMPACT:
        return Breakpoint.NARROW
    if resolved is DisplayDensity.VERBOSE:
        return Breakpoint.WIDE
    return breakpoint


def visible_priorities(
    breakpoint: Breakpoint, density: Union[DisplayDensity, str, None] = None
) -> FrozenSet[Priority]:
    return VISIBLE_PRIORITIES[effective_breakpoint(breakpoint, density)]


def build_visible_segments(
    segments: Iterable[Segment],
    breakpoint: Breakpoint,
    density: Union[DisplayDensity, str, None] = None,
) -> List[Segment]:
    """
    Select and order the segments shown for a breakpoint and density.

    Segments whose priority is not visible at the effective tier are skipped, as are
    segments with unrecognised priorities. ``verbose_only`` segments appear only
    under the verbose density. Left segments precede right segments and each group
    keeps its input order. The input is not modified.
    """
    resolved_density = coerce_density(density)
    allowed = visible_priorities(breakpoint, resolved_density)
    verbose = resolved_density is DisplayDensity.VERBOSE
    left: List[Segment] = []
    right: List[Segment] = []
    for segment in segments:
        priority = coerce_priority(segment.priority)
        if priority is None:
            logger.debug("Dropping segment %r with unknown priority %r", segment.id, segment.priority)
            continue
        if priority not in allowed:
            continue
        if segment.verbose_only and not verbose:
            continue
        if segment.side == Side.RIGHT:
            right.append(segment)
        else:
            left.append(segment)
    return left + right


def split_by_side(segments: Sequence[Segment]) -> Tuple[List[Segment], List[Segment]]:
    """Partition segments into ``(left, right)`` preserving relative order."""

    left = [segment for segment in segments if segment.side != Side.RIGHT]
    right = [segment for segment in segments if segment.side == Side.RIGHT]
    return left, right


def trim_to_fit(
    segments: Sequence[Segment],
    width: int,
    measure: Callable[[Segment], int],
    *,
    separator_width: int = 1,
) -> List[Segment]:
    """
    Drop the least important segments until the row fits in ``width`` cells.

    Removal goes from the lowest priority upwards and, within a priority, from the
    last segment backwards. Critical segments are never removed, so the result may
    still be wider than ``width``; the caller truncates what remains.

    Parameters:
        segments (Sequence[Segment]): Already filtered, ordered segments.
        width (int): Available columns for the whole row.
        measure (Callable[[Segment], int]): Display width of one formatted segment.
        separator_width (int): Columns consumed between adjacent segments.

    Returns:
        List[Segment]: The surviving segments in their original order.
    """
    kept = list(segments)
    widths = {id(segment): measure(segment) for segment in kept}

    def _row_width() -> int:
        if not kept:
            return 0
        return sum(widths[id(segment)] for segment in kept) + separator_width * (len(kept) - 1)

    while kept and _row_width() > width:
        candidates = [
            (PRIORITY_RANK.get(coerce_priority(segment.priority) or Priority.LOW, 3), index)
            for index, segment in enumerate(kept)
            if coerce_priority(segment.priority) is not Priority.CRITICAL
        ]
        if not candidates:
            break
        _, victim = max(candidates)
        logger.debug("Trimming segment %r to fit %s columns", kept[victim].id, width)
        del kept[victim]
    return kept


__all__ = [
    "PRIORITY_RANK",
    "VISIBLE_PRIORITIES",
    "build_visible_segments",
    "coerce_density",
    "coerce_priority",
    "effective_breakpoint",
    "split_by_side",
    "trim_to_fit",
    "visible_priorities",
]
