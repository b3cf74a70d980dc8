from __future__ import annotations

from typing import List

import pytest
from hypothesis import given, seed, settings
from hypothesis import strategies as st

from termlayout.datatypes import Breakpoint, DisplayDensity, Priority, Segment, Side
from termlayout.layout.segments import (
    build_visible_segments,
    effective_breakpoint,
    split_by_side,
    trim_to_fit,
)


def _segment(
    seg_id: str,
    priority: Priority | str,
    side: Side = Side.LEFT,
    value: str = "value",
    verbose_only: bool = False,
) -> Segment:
    return Segment(
        id=seg_id,
        priority=priority,
        side=side,
        label="",
        value=value,
        verbose_only=verbose_only,
    )


@pytest.fixture
def tiered() -> List[Segment]:
    return [
        _segment("crit", Priority.CRITICAL),
        _segment("high", Priority.HIGH),
        _segment("med", Priority.MEDIUM),
        _segment("low", Priority.LOW),
    ]


def _ids(segments: List[Segment]) -> List[str]:
    return [segment.id for segment in segments]


@pytest.mark.parametrize(
    ("breakpoint", "expected"),
    [
        (Breakpoint.NARROW, ["crit", "high"]),
        (Breakpoint.COMPACT, ["crit", "high", "med"]),
        (Breakpoint.NORMAL, ["crit", "high", "med"]),
        (Breakpoint.WIDE, ["crit", "high", "med", "low"]),
    ],
)
def test_visibility_by_breakpoint(tiered: List[Segment], breakpoint: Breakpoint, expected: List[str]) -> None:
    assert _ids(build_visible_segments(tiered, breakpoint)) == expected


def test_compact_density_pins_narrow_tier(tiered: List[Segment]) -> None:
    visible = build_visible_segments(tiered, Breakpoint.WIDE, DisplayDensity.COMPACT)

    assert _ids(visible) == ["crit", "high"]


def test_verbose_density_shows_everything_even_when_narrow(tiered: List[Segment]) -> None:
    visible = build_visible_segments(tiered, Breakpoint.NARROW, "verbose")

    assert _ids(visible) == ["crit", "high", "med", "low"]


def test_normal_density_keeps_measured_tier() -> None:
    assert effective_breakpoint(Breakpoint.COMPACT, DisplayDensity.NORMAL) is Breakpoint.COMPACT
    assert effective_breakpoint(Breakpoint.COMPACT, None) is Breakpoint.COMPACT
    assert effective_breakpoint(Breakpoint.COMPACT, "unknown") is Breakpoint.COMPACT


def test_verbose_only_segments_need_verbose_density() -> None:
    segments = [
        _segment("crit", Priority.CRITICAL),
        _segment("timing", Priority.LOW, verbose_only=True),
    ]

    assert _ids(build_visible_segments(segments, Breakpoint.WIDE)) == ["crit"]
    assert _ids(build_visible_segments(segments, Breakpoint.WIDE, DisplayDensity.VERBOSE)) == [
        "crit",
        "timing",
    ]


def test_unknown_priority_is_dropped() -> None:
    segments = [_segment("crit", Priority.CRITICAL), _segment("odd", "urgent")]

    assert _ids(build_visible_segments(segments, Breakpoint.WIDE)) == ["crit"]


def test_string_priorities_are_accepted() -> None:
    segments = [_segment("crit", "CRITICAL"), _segment("low", "low")]

    assert _ids(build_visible_segments(segments, Breakpoint.WIDE)) == ["crit", "low"]


def test_left_segments_precede_right_segments_in_stable_order() -> None:
    segments = [
        _segment("r1", Priority.CRITICAL, Side.RIGHT),
        _segment("l1", Priority.HIGH),
        _segment("r2", Priority.HIGH, Side.RIGHT),
        _segment("l2", Priority.CRITICAL),
    ]
    snapshot = list(segments)

    visible = build_visible_segments(segments, Breakpoint.WIDE)

    assert _ids(visible) == ["l1", "l2", "r1", "r2"]
    assert segments == snapshot


def test_split_by_side() -> None:
    segments = [
        _segment("l1", Priority.HIGH),
        _segment("r1", Priority.CRITICAL, Side.RIGHT),
        _segment("l2", Priority.LOW),
    ]

    left, right = split_by_side(segments)

    assert _ids(left) == ["l1", "l2"]
    assert _ids(right) == ["r1"]


def test_trim_removes_lowest_priority_first(tiered: List[Segment]) -> None:
    segments = [
        _segment(segment.id, segment.priority, value="xxxx") for segment in tiered
    ]

    kept = trim_to_fit(segments, 14, lambda segment: len(segment.value))

    assert _ids(kept) == ["crit", "high", "med"]


def test_trim_never_removes_critical(tiered: List[Segment]) -> None:
    segments = [
        _segment(segment.id, segment.priority, value="xxxx") for segment in tiered
    ]

    kept = trim_to_fit(segments, 3, lambda segment: len(segment.value))

    assert _ids(kept) == ["crit"]


def test_trim_removes_last_segment_within_a_priority() -> None:
    segments = [
        _segment("crit", Priority.CRITICAL, value="cc"),
        _segment("low1", Priority.LOW, value="aa"),
        _segment("low2", Priority.LOW, value="bb"),
    ]

    kept = trim_to_fit(segments, 5, lambda segment: len(segment.value))

    assert _ids(kept) == ["crit", "low1"]


def test_trim_keeps_everything_that_fits(tiered: List[Segment]) -> None:
    assert trim_to_fit(tiered, 200, lambda segment: len(segment.value)) == tiered


_priorities = st.sampled_from(list(Priority))
_sides = st.sampled_from(list(Side))
_segments = st.lists(
    st.builds(
        _segment,
        seg_id=st.text(alphabet="abcdef", min_size=1, max_size=4),
        priority=_priorities,
        side=_sides,
        verbose_only=st.booleans(),
    ),
    max_size=12,
)


@seed(4201)
@settings(max_examples=150, deadline=None)
@given(
    segments=_segments,
    breakpoint=st.sampled_from(list(Breakpoint)),
    density=st.sampled_from([None, *DisplayDensity]),
)
def test_critical_segments_are_always_visible(
    segments: List[Segment], breakpoint: Breakpoint, density: DisplayDensity | None
) -> None:
    visible = build_visible_segments(segments, breakpoint, density)
    expected_critical = [
        segment
        for segment in segments
        if segment.priority is Priority.CRITICAL
        and (not segment.verbose_only or density is DisplayDensity.VERBOSE)
    ]

    for segment in expected_critical:
        assert segment in visible
    left, right = split_by_side(visible)
    assert visible == left + right
    assert [s for s in segments if s in left] == left


@pytest.mark.parametrize(
    ("narrower", "wider"),
    [
        (Breakpoint.NARROW, Breakpoint.COMPACT),
        (Breakpoint.COMPACT, Breakpoint.NORMAL),
        (Breakpoint.NORMAL, Breakpoint.WIDE),
    ],
)
def test_visibility_is_monotonic(tiered: List[Segment], narrower: Breakpoint, wider: Breakpoint) -> None:
    assert set(_ids(build_visible_segments(tiered, narrower))) <= set(
        _ids(build_visible_segments(tiered, wider))
    )
