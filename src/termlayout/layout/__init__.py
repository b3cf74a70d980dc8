"""Pure layout decisions: breakpoints, visibility, text fitting, and diff budgeting."""

from .breakpoints import classify, normalize_width
from .diff_layout import (
    DiffLayoutPlan,
    DiffRow,
    content_width,
    layout_diff_rows,
    line_number_width,
    plan_diff_layout,
    select_mode,
)
from .labels import abbreviation_mode_for, resolve_label
from .previews import ContentPreview, layout_stack_trace, stack_trace_budget, thought_preview
from .segments import build_visible_segments, split_by_side, trim_to_fit
from .terminal import get_dimensions, strip_ansi
from .text import display_width, pad_to_width, truncate, truncate_chars, truncate_middle, wrap
from .urgency import countdown_seconds, format_countdown, urgency_style, urgency_tier

__all__ = [
    "ContentPreview",
    "DiffLayoutPlan",
    "DiffRow",
    "abbreviation_mode_for",
    "build_visible_segments",
    "classify",
    "content_width",
    "countdown_seconds",
    "display_width",
    "format_countdown",
    "get_dimensions",
    "layout_diff_rows",
    "layout_stack_trace",
    "line_number_width",
    "normalize_width",
    "pad_to_width",
    "plan_diff_layout",
    "resolve_label",
    "select_mode",
    "split_by_side",
    "stack_trace_budget",
    "strip_ansi",
    "thought_preview",
    "trim_to_fit",
    "truncate",
    "truncate_chars",
    "truncate_middle",
    "urgency_style",
    "urgency_tier",
    "wrap",
]
