"""Density- and width-aware previews for long content blocks."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from ..datatypes import Breakpoint, DisplayDensity, Dimensions, TruncationConfig
from .segments import coerce_density
from .text import truncate, truncate_chars, truncation_indicator, wrap

# (lines without verbose, lines with verbose); None means every line.
STACK_TRACE_BUDGETS: Dict[Breakpoint, Tuple[int, Optional[int]]] = {
    Breakpoint.NARROW: (0, 3),
    Breakpoint.COMPACT: (0, 5),
    Breakpoint.NORMAL: (5, 10),
    Breakpoint.WIDE: (8, None),
}
STACK_LINE_MARGIN = 4


@dataclass(frozen=True)
class ContentPreview:
    text: str
    truncated: bool
    original_length: int
    indicator: str


def thought_preview(
    text: Optional[str],
    density: Union[DisplayDensity, str, None] = None,
    config: Optional[TruncationConfig] = None,
) -> Optional[ContentPreview]:
    """
    Cap free-form "thinking" text according to the display density.

    Compact density hides the block (``None``); normal and verbose densities keep
    up to their configured character limits and report the original length when
    content was cut.
    """
    cfg = config or TruncationConfig()
    resolved = coerce_density(density) or DisplayDensity.NORMAL
    if resolved is DisplayDensity.COMPACT:
        return None
    limit = cfg.thought_limit_verbose if resolved is DisplayDensity.VERBOSE else cfg.thought_limit_normal
    result = truncate_chars(text, limit, cfg.ellipsis)
    return ContentPreview(
        text=result.text,
        truncated=result.truncated,
        original_length=result.original_length,
        indicator=truncation_indicator(result),
    )


def stack_trace_budget(breakpoint: Breakpoint, verbose: bool) -> Optional[int]:
    """Number of stack lines shown for a breakpoint; ``None`` shows them all."""

    quiet_lines, verbose_lines = STACK_TRACE_BUDGETS[breakpoint]
    return verbose_lines if verbose else quiet_lines


def layout_stack_trace(
    stack: Optional[str],
    dimensions: Dimensions,
    verbose: bool,
    *,
    ellipsis: str = "...",
) -> List[str]:
    """
    Select and fit stack trace lines for the current terminal.

    Blank lines are ignored. Lines are truncated to the terminal width minus a small
    margin, except on wide terminals where they wrap instead. A footer reports how
    many lines were hidden.
    """
    lines = [line.strip() for line in (stack or "").splitlines() if line.strip()]
    budget = stack_trace_budget(dimensions.breakpoint, verbose)
    if not lines or budget == 0:
        return []
    shown = lines if budget is None else lines[:budget]
    output = [f"Stack Trace ({len(shown)} lines):"]
    if dimensions.breakpoint is Breakpoint.WIDE:
        for line in shown:
            output.extend(wrap(line, dimensions.width))
    else:
        line_width = max(1, dimensions.width - STACK_LINE_MARGIN)
        output.extend(truncate(line, line_width, ellipsis).text for line in shown)
    hidden = len(lines) - len(shown)
    if hidden > 0:
        output.append(f"... {hidden} more lines (use verbose mode to see full trace)")
    return [truncate(line, dimensions.width, ellipsis).text for line in output]


__all__ = [
    "STACK_TRACE_BUDGETS",
    "ContentPreview",
    "layout_stack_trace",
    "stack_trace_budget",
    "thought_preview",
]
