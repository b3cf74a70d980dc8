"""Layout selection and column budgeting for diff and code views."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import zip_longest
from typing import Any, List, Optional, Sequence, Union

from ..datatypes import DiffConfig, DiffLayoutMode, Dimensions, ModeSelection
from .breakpoints import normalize_width
from .text import display_width, pad_to_width, wrap

logger = logging.getLogger(__name__)

DEFAULT_SPLIT_MIN_WIDTH = 120
DEFAULT_LINE_NUMBER_WIDTH = 3
NARROW_GUTTER_BELOW = 60
NARROW_GUTTER_MIN = 2
NARROW_GUTTER_MAX = 4
GUTTER_MIN = 3
GUTTER_MAX = 6
SPLIT_SEPARATOR = " │ "

_MARKERS = {
    "context": "  ",
    "add": "+ ",
    "remove": "- ",
    "change": "~ ",
}


def coerce_layout_mode(value: Union[DiffLayoutMode, str, None]) -> DiffLayoutMode:
    """Parse a layout mode; anything unrecognised is treated as ``auto``."""

    if isinstance(value, DiffLayoutMode):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in DiffLayoutMode:
            if member.value == normalized:
                return member
    return DiffLayoutMode.AUTO


def select_mode(
    requested: Union[DiffLayoutMode, str, None],
    width: Any,
    split_min_width: int = DEFAULT_SPLIT_MIN_WIDTH,
) -> ModeSelection:
    """
    Resolve the diff layout for the current width.

    An explicit choice wins, except that ``split`` narrower than ``split_min_width``
    falls back to ``unified``; that fallback carries a notice and is logged so the
    lost request is visible. ``auto`` picks ``split`` when there is room and
    ``unified`` otherwise; it never picks ``inline``.

    Returns:
        ModeSelection: The resolved mode (never ``auto``), the requested mode, and a
        notice when the request could not be honoured.
    """
    mode = coerce_layout_mode(requested)
    columns = normalize_width(width)
    fits_split = columns >= split_min_width
    if mode is DiffLayoutMode.AUTO:
        resolved = DiffLayoutMode.SPLIT if fits_split else DiffLayoutMode.UNIFIED
        return ModeSelection(mode=resolved, requested=mode)
    if mode is DiffLayoutMode.SPLIT and not fits_split:
        notice = (
            f"Split view needs at least {split_min_width} columns "
            f"(terminal is {columns}); showing unified diff instead."
        )
        logger.info(notice)
        return ModeSelection(mode=DiffLayoutMode.UNIFIED, requested=mode, notice=notice)
    return ModeSelection(mode=mode, requested=mode)


def line_number_width(max_line_number: Any, width: Any) -> int:
    """
    Gutter width needed for line numbers up to ``max_line_number``.

    Grows with the digit count, is held to a compact range on narrow terminals, and
    is capped so huge files cannot dominate the layout. Missing or non-positive
    line counts yield the default width.
    """
    if isinstance(max_line_number, bool) or max_line_number is None:
        return DEFAULT_LINE_NUMBER_WIDTH
    try:
        number = float(max_line_number)
    except (TypeError, ValueError):
        return DEFAULT_LINE_NUMBER_WIDTH
    if not math.isfinite(number) or number < 1:
        return DEFAULT_LINE_NUMBER_WIDTH
    digits = len(str(int(number)))
    if normalize_width(width) < NARROW_GUTTER_BELOW:
        return max(NARROW_GUTTER_MIN, min(digits, NARROW_GUTTER_MAX))
    return max(GUTTER_MIN, min(digits, GUTTER_MAX))


def content_width(
    total_width: Any,
    line_number_width: int,
    panes: int = 1,
    separator_width: int = len(SPLIT_SEPARATOR),
) -> int:
    """
    Columns left for text in each pane.

    Split layouts (``panes=2``) share the remaining width evenly after both gutters
    and the separator between panes. The result is never negative and always
    satisfies ``panes * content + panes * gutter + separators <= total`` whenever the
    gutters and separator themselves fit.
    """
    pane_count = 2 if panes == 2 else 1
    total = normalize_width(total_width)
    gutter = max(0, int(line_number_width))
    separators = max(0, int(separator_width)) * (pane_count - 1)
    available = total - pane_count * gutter - separators
    return max(0, available // pane_count)


@dataclass(frozen=True)
class DiffLayoutPlan:
    """Column budget for one render of a diff view."""

    mode: DiffLayoutMode
    requested: DiffLayoutMode
    notice: Optional[str]
    total_width: int
    gutter_width: int
    pane_width: int
    panes: int
    separator: str

    @property
    def text_width(self) -> int:
        """Columns for line text once the change marker is drawn."""

        return max(0, self.pane_width - len(_MARKERS["context"]))


@dataclass(frozen=True)
class DiffRow:
    """One caller-computed diff row: ``context``, ``add``, ``remove`` or ``change``."""

    kind: str
    old_number: Optional[int] = None
    new_number: Optional[int] = None
    old_text: str = ""
    new_text: str = ""


def plan_diff_layout(
    requested: Union[DiffLayoutMode, str, None],
    dimensions: Dimensions,
    max_line_number: Optional[int],
    config: Optional[DiffConfig] = None,
) -> DiffLayoutPlan:
    """
    Combine mode selection, gutter sizing, and pane budgeting for one render.

    A split request that would leave panes narrower than ``min_pane_width`` is
    downgraded to unified with a notice, just like a split request on a narrow
    terminal. The gutter is dropped entirely when the terminal cannot hold it.
    """
    cfg = config or DiffConfig()
    total = dimensions.width
    selection = select_mode(requested, total, cfg.split_min_width)
    mode = selection.mode
    notice = selection.notice
    gutter = line_number_width(max_line_number, total)

    if mode is DiffLayoutMode.SPLIT:
        separator = _separator(cfg.separator_width)
        pane = content_width(total, gutter, 2, display_width(separator))
        if pane < cfg.min_pane_width:
            notice = (
                f"Split panes would be {pane} columns wide (minimum {cfg.min_pane_width}); "
                "showing unified diff instead."
            )
            logger.info(notice)
            mode = DiffLayoutMode.UNIFIED
        else:
            return DiffLayoutPlan(
                mode=mode,
                requested=selection.requested,
                notice=notice,
                total_width=total,
                gutter_width=gutter,
                pane_width=pane,
                panes=2,
                separator=separator,
            )

    if gutter + 1 > total:
        gutter = 0
    pane = content_width(total, gutter, 1, 0)
    return DiffLayoutPlan(
        mode=mode,
        requested=selection.requested,
        notice=notice,
        total_width=total,
        gutter_width=gutter,
        pane_width=pane,
        panes=1,
        separator="",
    )


def _separator(width: int) -> str:
    """Pane divider of exactly ``width`` cells, centred on a vertical bar."""

    if width <= 0:
        return ""
    if width < 3:
        return "│" + " " * (width - 1)
    left = (width - 1) // 2
    return " " * left + "│" + " " * (width - 1 - left)


def _gutter(number: Optional[int], width: int) -> str:
    if width <= 0:
        return ""
    if number is None:
        return " " * width
    label = str(number)
    if len(label) > width:
        label = "…" + label[-(width - 1):] if width > 1 else "…"
    return label.rjust(width)


def _pane_lines(marker: str, number: Optional[int], text: str, plan: DiffLayoutPlan) -> List[str]:
    """Render one side of a row, wrapping text under a blank gutter."""

    gutter = _gutter(number, plan.gutter_width)
    blank_gutter = " " * plan.gutter_width
    marker_width = min(len(marker), plan.pane_width)
    body_width = plan.pane_width - marker_width
    chunks = wrap(text, body_width) if body_width > 0 else []
    if not chunks:
        chunks = [""]
    lines = []
    for index, chunk in enumerate(chunks):
        prefix = gutter + marker[:marker_width] if index == 0 else blank_gutter + " " * marker_width
        lines.append(prefix + chunk)
    return lines


def _unified_rows(row: DiffRow, plan: DiffLayoutPlan) -> List[str]:
    if row.kind == "add":
        return _pane_lines(_MARKERS["add"], row.new_number, row.new_text, plan)
    if row.kind == "remove":
        return _pane_lines(_MARKERS["remove"], row.old_number, row.old_text, plan)
    if row.kind == "change":
        if plan.mode is DiffLayoutMode.INLINE:
            merged = f"{row.old_text} → {row.new_text}"
            return _pane_lines(_MARKERS["change"], row.new_number, merged, plan)
        return _pane_lines(_MARKERS["remove"], row.old_number, row.old_text, plan) + _pane_lines(
            _MARKERS["add"], row.new_number, row.new_text, plan
        )
    number = row.new_number if row.new_number is not None else row.old_number
    text = row.new_text or row.old_text
    return _pane_lines(_MARKERS["context"], number, text, plan)


def _split_rows(row: DiffRow, plan: DiffLayoutPlan) -> List[str]:
    if row.kind == "add":
        left: List[str] = []
        right = _pane_lines(_MARKERS["add"], row.new_number, row.new_text, plan)
    elif row.kind == "remove":
        left = _pane_lines(_MARKERS["remove"], row.old_number, row.old_text, plan)
        right = []
    elif row.kind == "change":
        left = _pane_lines(_MARKERS["remove"], row.old_number, row.old_text, plan)
        right = _pane_lines(_MARKERS["add"], row.new_number, row.new_text, plan)
    else:
        left = _pane_lines(_MARKERS["context"], row.old_number, row.old_text or row.new_text, plan)
        right = _pane_lines(_MARKERS["context"], row.new_number, row.new_text or row.old_text, plan)
    side_width = plan.gutter_width + plan.pane_width
    lines = []
    for left_line, right_line in zip_longest(left, right, fillvalue=""):
        lines.append(pad_to_width(left_line, side_width) + plan.separator + right_line)
    return lines


def layout_diff_rows(rows: Sequence[DiffRow], plan: DiffLayoutPlan) -> List[str]:
    """
    Turn diff rows into printable lines for the planned mode.

    Text is wrapped inside each pane so no line exceeds ``plan.total_width``.
    """
    lines: List[str] = []
    for row in rows:
        if plan.mode is DiffLayoutMode.SPLIT:
            lines.extend(_split_rows(row, plan))
        else:
            lines.extend(_unified_rows(row, plan))
    return [line.rstrip() for line in lines]


__all__ = [
    "DEFAULT_SPLIT_MIN_WIDTH",
    "DiffLayoutPlan",
    "DiffRow",
    "coerce_layout_mode",
    "content_width",
    "layout_diff_rows",
    "line_number_width",
    "plan_diff_layout",
    "select_mode",
]
