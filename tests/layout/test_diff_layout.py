from __future__ import annotations

import logging
import math
from typing import Any

import pytest
from hypothesis import given, seed, settings
from hypothesis import strategies as st

from termlayout.datatypes import DiffConfig, DiffLayoutMode, Dimensions
from termlayout.layout.diff_layout import (
    DiffRow,
    content_width,
    layout_diff_rows,
    line_number_width,
    plan_diff_layout,
    select_mode,
)
from termlayout.layout.text import display_width


@pytest.mark.parametrize(
    ("requested", "width", "expected"),
    [
        ("auto", 150, DiffLayoutMode.SPLIT),
        ("auto", 120, DiffLayoutMode.SPLIT),
        ("auto", 119, DiffLayoutMode.UNIFIED),
        ("split", 130, DiffLayoutMode.SPLIT),
        ("unified", 200, DiffLayoutMode.UNIFIED),
        ("inline", 40, DiffLayoutMode.INLINE),
        ("bogus", 200, DiffLayoutMode.SPLIT),
        (None, 80, DiffLayoutMode.UNIFIED),
    ],
)
def test_select_mode(requested: Any, width: int, expected: DiffLayoutMode) -> None:
    selection = select_mode(requested, width)

    assert selection.mode is expected
    assert selection.notice is None


def test_split_falls_back_to_unified_with_notice(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="termlayout.layout.diff_layout"):
        selection = select_mode(DiffLayoutMode.SPLIT, 100)

    assert selection.mode is DiffLayoutMode.UNIFIED
    assert selection.requested is DiffLayoutMode.SPLIT
    assert selection.fell_back
    assert "120" in (selection.notice or "")
    assert any("unified" in record.getMessage() for record in caplog.records)


def test_selections_compare_by_value_not_by_mode() -> None:
    refused = select_mode("split", 80)
    plain = select_mode("unified", 80)

    assert refused.mode is plain.mode is DiffLayoutMode.UNIFIED
    assert refused != plain
    assert plain == select_mode("unified", 200)
    assert plain != DiffLayoutMode.UNIFIED


def test_custom_split_threshold() -> None:
    assert select_mode("auto", 90, split_min_width=80).mode is DiffLayoutMode.SPLIT


@pytest.mark.parametrize(
    ("max_line", "width", "expected"),
    [
        (999, 80, 3),
        (5, 80, 3),
        (12345, 80, 5),
        (10**9, 80, 6),
        (5, 40, 2),
        (99999, 40, 4),
        (None, 80, 3),
        (0, 80, 3),
        (-5, 80, 3),
        (math.nan, 80, 3),
    ],
)
def test_line_number_width(max_line: Any, width: int, expected: int) -> None:
    assert line_number_width(max_line, width) == expected


def test_content_width_unified() -> None:
    assert content_width(100, 4) == 96


def test_content_width_split_accounts_for_both_gutters_and_separator() -> None:
    per_pane = content_width(120, 4, panes=2, separator_width=3)

    assert per_pane == 54
    assert 2 * per_pane + 2 * 4 + 3 <= 120


def test_content_width_is_never_negative() -> None:
    assert content_width(5, 4, panes=2) == 0
    assert content_width(-10, 4) == 0


def test_plan_split_on_wide_terminal() -> None:
    plan = plan_diff_layout("auto", Dimensions(width=150, height=40), 200)

    assert plan.mode is DiffLayoutMode.SPLIT
    assert plan.panes == 2
    assert plan.gutter_width == 3
    assert plan.pane_width == 70
    assert display_width(plan.separator) == 3


def test_plan_split_request_on_narrow_terminal() -> None:
    plan = plan_diff_layout("split", Dimensions(width=80, height=24), 200)

    assert plan.mode is DiffLayoutMode.UNIFIED
    assert plan.requested is DiffLayoutMode.SPLIT
    assert plan.notice is not None
    assert plan.pane_width == 77


def test_plan_split_with_panes_below_minimum_falls_back() -> None:
    config = DiffConfig(split_min_width=20, min_pane_width=10)

    plan = plan_diff_layout("split", Dimensions(width=25, height=24), 100, config)

    assert plan.mode is DiffLayoutMode.UNIFIED
    assert plan.notice is not None
    assert "minimum 10" in plan.notice


def test_plan_drops_gutter_when_it_cannot_fit() -> None:
    plan = plan_diff_layout("unified", Dimensions(width=3, height=10), 100)

    assert plan.gutter_width == 0
    assert plan.pane_width == 3


def test_layout_unified_rows() -> None:
    plan = plan_diff_layout("unified", Dimensions(width=40, height=24), 2)
    rows = [
        DiffRow(kind="context", old_number=1, new_number=1, old_text="hello", new_text="hello"),
        DiffRow(kind="add", new_number=2, new_text="world"),
        DiffRow(kind="remove", old_number=2, old_text="gone"),
    ]

    assert layout_diff_rows(rows, plan) == [" 1  hello", " 2+ world", " 2- gone"]


def test_layout_unified_change_becomes_remove_then_add() -> None:
    plan = plan_diff_layout("unified", Dimensions(width=40, height=24), 2)
    rows = [DiffRow(kind="change", old_number=1, new_number=1, old_text="old", new_text="new")]

    assert layout_diff_rows(rows, plan) == [" 1- old", " 1+ new"]


def test_layout_inline_change_is_merged() -> None:
    plan = plan_diff_layout("inline", Dimensions(width=40, height=24), 2)
    rows = [DiffRow(kind="change", old_number=1, new_number=1, old_text="old", new_text="new")]

    assert layout_diff_rows(rows, plan) == [" 1~ old → new"]


def test_layout_wraps_long_lines_within_width() -> None:
    plan = plan_diff_layout("unified", Dimensions(width=40, height=24), 2)
    rows = [DiffRow(kind="add", new_number=1, new_text="x" * 200)]

    lines = layout_diff_rows(rows, plan)

    assert len(lines) > 1
    assert all(display_width(line) <= 40 for line in lines)
    assert "".join(line.strip().lstrip("1+").strip() for line in lines) == "x" * 200


def test_layout_split_rows_side_by_side() -> None:
    plan = plan_diff_layout("split", Dimensions(width=130, height=24), 9)
    rows = [
        DiffRow(kind="change", old_number=1, new_number=1, old_text="old", new_text="new"),
        DiffRow(kind="add", new_number=2, new_text="added"),
    ]

    lines = layout_diff_rows(rows, plan)

    assert lines[0].startswith("  1- old")
    assert lines[0].endswith("  1+ new")
    assert plan.separator in lines[0]
    assert lines[1].endswith("  2+ added")
    assert all(display_width(line) <= 130 for line in lines)


@seed(4601)
@settings(max_examples=300, deadline=None)
@given(
    total=st.integers(min_value=1, max_value=400),
    gutter=st.integers(min_value=0, max_value=12),
    panes=st.sampled_from([1, 2]),
    separator_width=st.integers(min_value=0, max_value=6),
)
def test_content_width_respects_the_column_budget(
    total: int, gutter: int, panes: int, separator_width: int
) -> None:
    width = content_width(total, gutter, panes, separator_width)

    assert width >= 0
    fixed = panes * gutter + separator_width * (panes - 1)
    if fixed <= total:
        assert panes * width + fixed <= total


_DIFF_TEXT = st.text(alphabet=st.sampled_from(list("abcXYZ -/.,日é→")), max_size=60)
_LINE_NUMBER = st.one_of(st.none(), st.integers(min_value=1, max_value=100000))
_ROWS = st.lists(
    st.builds(
        DiffRow,
        kind=st.sampled_from(["context", "add", "remove", "change"]),
        old_number=_LINE_NUMBER,
        new_number=_LINE_NUMBER,
        old_text=_DIFF_TEXT,
        new_text=_DIFF_TEXT,
    ),
    max_size=8,
)


@seed(4602)
@settings(max_examples=200, deadline=None)
@given(
    rows=_ROWS,
    width=st.integers(min_value=1, max_value=260),
    requested=st.sampled_from(["auto", "split", "unified", "inline"]),
    max_line=st.integers(min_value=1, max_value=100000),
    separator_width=st.integers(min_value=0, max_value=5),
    min_pane_width=st.integers(min_value=1, max_value=40),
)
def test_laid_out_diff_lines_fit_the_terminal(
    rows: list[DiffRow],
    width: int,
    requested: str,
    max_line: int,
    separator_width: int,
    min_pane_width: int,
) -> None:
    config = DiffConfig(separator_width=separator_width, min_pane_width=min_pane_width)
    plan = plan_diff_layout(requested, Dimensions(width=width, height=24), max_line, config)

    lines = layout_diff_rows(rows, plan)

    assert all(display_width(line) <= width for line in lines)
    if plan.panes == 2:
        assert 2 * plan.pane_width + 2 * plan.gutter_width + display_width(plan.separator) <= width
