"""Status bar composition: segment construction, fitting, and line packing."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union
from urllib.parse import urlparse

from .datatypes import (
    AbbreviationMode,
    AppConfig,
    Breakpoint,
    Dimensions,
    DisplayDensity,
    Priority,
    RenderedSegment,
    Segment,
    Side,
)
from .layout.labels import abbreviation_mode_for, coerce_abbreviation_mode, resolve_label
from .layout.segments import build_visible_segments, coerce_density, effective_breakpoint, split_by_side, trim_to_fit
from .layout.text import display_width, truncate

logger = logging.getLogger(__name__)

CONNECTED_GLYPH = "●"
DISCONNECTED_GLYPH = "○"
BRANCH_ICON = ""
AGENT_ICON = "⚡"
STAGE_ICON = "▶"
SUBTASK_ICON = "📋"
SESSION_ICON = "💾"
PREVIEW_TEXT = "📋 PREVIEW"


@dataclass
class StatusInfo:
    """Raw session state shown in the status bar. ``None`` fields are omitted."""

    is_connected: bool = False
    git_branch: Optional[str] = None
    agent: Optional[str] = None
    workflow_stage: Optional[str] = None
    tokens: Optional[Tuple[int, int]] = None
    cost: Optional[float] = None
    session_cost: Optional[float] = None
    model: Optional[str] = None
    api_url: Optional[str] = None
    web_url: Optional[str] = None
    session_name: Optional[str] = None
    subtask_progress: Optional[Tuple[int, int]] = None
    elapsed_seconds: Optional[float] = None
    preview_mode: bool = False
    detailed_timing: Optional[Tuple[int, int, int]] = None


@dataclass(frozen=True)
class StatusBarLayout:
    """Fitted status bar ready for a drawing sink."""

    breakpoint: Breakpoint
    density: Optional[DisplayDensity]
    width: int
    left: Tuple[RenderedSegment, ...]
    right: Tuple[RenderedSegment, ...]
    lines: Tuple[str, ...]


def _as_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    return int(number)


def format_tokens(count: Any) -> str:
    """Compact token count: ``950``, ``2.0k``, ``1.2M``."""

    number = _as_count(count)
    if number < 1000:
        return str(number)
    if number < 1_000_000:
        return f"{number / 1000:.1f}k"
    return f"{number / 1_000_000:.1f}M"


def format_cost(cost: Any) -> str:
    try:
        value = float(cost)
    except (TypeError, ValueError):
        value = 0.0
    if not math.isfinite(value) or value < 0:
        value = 0.0
    return f"${value:.4f}"


def format_elapsed(seconds: Any) -> str:
    """Clock-style elapsed time: ``MM:SS`` below an hour, ``H:MM:SS`` above."""

    total = _as_count(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_duration(milliseconds: Any) -> str:
    """Human duration for timing breakdowns: ``850ms``, ``42s``, ``2m 0s``, ``1h 5m``."""

    total_ms = _as_count(milliseconds)
    if total_ms < 1000:
        return f"{total_ms}ms"
    seconds = total_ms // 1000
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"


def url_port(url: Optional[str]) -> str:
    """
    Port portion of a service URL, falling back to the host when none is given.

    Malformed URLs are returned unchanged so the user still sees something useful.
    """
    if not url:
        return ""
    try:
        parsed = urlparse(url if "//" in url else f"//{url}")
        port = parsed.port
    except ValueError:
        return url
    if port is not None:
        return str(port)
    return parsed.hostname or url


def build_status_segments(info: StatusInfo) -> List[Segment]:
    """
    Translate session state into status segments with stable identifiers.

    Fields that are unset produce no segment. The connection indicator and the
    elapsed timer are critical; timing breakdowns are only shown in verbose mode.
    """
    segments: List[Segment] = [
        Segment(
            id="connection",
            priority=Priority.CRITICAL,
            side=Side.LEFT,
            label="",
            value=CONNECTED_GLYPH if info.is_connected else DISCONNECTED_GLYPH,
        )
    ]
    if info.git_branch:
        segments.append(
            Segment(id="branch", priority=Priority.HIGH, side=Side.LEFT, label="", value=info.git_branch, icon=BRANCH_ICON)
        )
    if info.agent:
        segments.append(
            Segment(id="agent", priority=Priority.HIGH, side=Side.LEFT, label="", value=info.agent, icon=AGENT_ICON)
        )
    if info.workflow_stage:
        segments.append(
            Segment(
                id="stage",
                priority=Priority.MEDIUM,
                side=Side.LEFT,
                label="",
                value=info.workflow_stage,
                icon=STAGE_ICON,
            )
        )
    if info.subtask_progress is not None:
        completed, total = info.subtask_progress
        segments.append(
            Segment(
                id="subtasks",
                priority=Priority.MEDIUM,
                side=Side.LEFT,
                label="",
                value=f"[{_as_count(completed)}/{_as_count(total)}]",
                icon=SUBTASK_ICON,
            )
        )
    if info.tokens is not None:
        tokens_in, tokens_out = info.tokens
        segments.append(
            Segment(
                id="tokens",
                priority=Priority.MEDIUM,
                side=Side.LEFT,
                label="tokens:",
                value=format_tokens(_as_count(tokens_in) + _as_count(tokens_out)),
                abbreviated_label="tok:",
            )
        )
    if info.cost is not None:
        segments.append(
            Segment(
                id="cost",
                priority=Priority.HIGH,
                side=Side.LEFT,
                label="cost:",
                value=format_cost(info.cost),
                abbreviated_label="",
            )
        )
    if info.model:
        segments.append(
            Segment(
                id="model",
                priority=Priority.HIGH,
                side=Side.LEFT,
                label="model:",
                value=info.model,
                abbreviated_label="mod:",
            )
        )
    if info.session_name:
        segments.append(
            Segment(
                id="session",
                priority=Priority.LOW,
                side=Side.LEFT,
                label="",
                value=info.session_name,
                icon=SESSION_ICON,
            )
        )
    if info.api_url:
        segments.append(
            Segment(id="api", priority=Priority.LOW, side=Side.LEFT, label="api:", value=url_port(info.api_url))
        )
    if info.web_url:
        segments.append(
            Segment(id="web", priority=Priority.LOW, side=Side.LEFT, label="web:", value=url_port(info.web_url))
        )
    if info.preview_mode:
        segments.append(
            Segment(id="preview", priority=Priority.LOW, side=Side.LEFT, label="", value=PREVIEW_TEXT)
        )

    if info.detailed_timing is not None:
        active_ms, idle_ms, stage_ms = info.detailed_timing
        for seg_id, label, value in (
            ("active_time", "active:", active_ms),
            ("idle_time", "idle:", idle_ms),
            ("stage_time", "stage:", stage_ms),
        ):
            segments.append(
                Segment(
                    id=seg_id,
                    priority=Priority.LOW,
                    side=Side.RIGHT,
                    label=label,
                    value=format_duration(value),
                    verbose_only=True,
                )
            )
    if info.tokens is not None:
        tokens_in, tokens_out = info.tokens
        segments.append(
            Segment(
                id="total_tokens",
                priority=Priority.LOW,
                side=Side.RIGHT,
                label="total:",
                value=f"{_as_count(tokens_in) + _as_count(tokens_out):,}",
                verbose_only=True,
            )
        )
    if info.session_cost is not None:
        segments.append(
            Segment(
                id="session_cost",
                priority=Priority.LOW,
                side=Side.RIGHT,
                label="session:",
                value=format_cost(info.session_cost),
                verbose_only=True,
            )
        )
    if info.elapsed_seconds is not None:
        segments.append(
            Segment(
                id="timer",
                priority=Priority.CRITICAL,
                side=Side.RIGHT,
                label="",
                value=format_elapsed(info.elapsed_seconds),
            )
        )
    return segments


def format_segment(
    segment: Segment,
    mode: Union[AbbreviationMode, str],
    breakpoint: Breakpoint,
) -> str:
    """Join icon, resolved label, and value into the text shown for one segment.

    Tabs become single spaces since a tab's width depends on its column.
    """

    parts = []
    if segment.icon:
        parts.append(segment.icon)
    label = resolve_label(segment, mode, breakpoint)
    if label:
        parts.append(label)
    if segment.value:
        parts.append(segment.value)
    return " ".join(parts).replace("\t", " ")


def _pack(texts: Sequence[str], width: int, separator: str) -> List[str]:
    """Greedily pack segment texts into lines of at most ``width`` cells."""

    lines: List[str] = []
    current = ""
    for text in texts:
        fitted = truncate(text, width).text
        if not fitted:
            continue
        if not current:
            current = fitted
            continue
        candidate = f"{current}{separator}{fitted}"
        if display_width(candidate) <= width:
            current = candidate
        else:
            lines.append(current)
            current = fitted
    if current:
        lines.append(current)
    return lines


def _compose_lines(left: Sequence[str], right: Sequence[str], width: int, separator: str) -> List[str]:
    left_text = separator.join(left)
    right_text = separator.join(right)
    used = display_width(left_text) + display_width(right_text)
    gap = 1 if left_text and right_text else 0
    if used + gap <= width:
        padding = width - used
        return [f"{left_text}{' ' * padding}{right_text}".rstrip()]

    lines = _pack(left, width, separator)
    for line in _pack(right, width, separator):
        lines.append(" " * (width - display_width(line)) + line)
    return lines


def compose_status_bar(
    info: StatusInfo,
    dimensions: Dimensions,
    density: Union[DisplayDensity, str, None] = None,
    config: Optional[AppConfig] = None,
) -> StatusBarLayout:
    """
    Produce the status bar for one terminal size.

    The width is classified with the configured thresholds, segments are filtered
    by priority and density, labels are resolved, low-priority segments are
    trimmed until the row fits, and whatever remains is packed into lines no wider
    than the terminal. When a single row is not enough the left and right groups
    wrap independently.

    Parameters:
        info (StatusInfo): Current session state.
        dimensions (Dimensions): Terminal size sample.
        density (DisplayDensity | str | None): Explicit density; defaults to the
            configured one.
        config (AppConfig | None): Loaded configuration, defaults when omitted.

    Returns:
        StatusBarLayout: Rendered segments per side plus the printable lines.
    """
    cfg = config or AppConfig()
    resolved_density = coerce_density(density if density is not None else cfg.status.density)
    measured = dimensions.classify_with(cfg.breakpoints.thresholds())
    label_breakpoint = effective_breakpoint(measured, resolved_density)
    mode = abbreviation_mode_for(resolved_density)
    if mode is AbbreviationMode.AUTO:
        mode = coerce_abbreviation_mode(cfg.status.abbreviation)
    separator = cfg.status.separator
    width = dimensions.width

    visible = build_visible_segments(build_status_segments(info), measured, resolved_density)
    texts = {segment.id: format_segment(segment, mode, label_breakpoint) for segment in visible}
    kept = trim_to_fit(
        visible,
        width,
        lambda segment: display_width(texts[segment.id]),
        separator_width=display_width(separator),
    )
    logger.debug(
        "Status bar at %s columns (%s): %d of %d segments kept",
        width,
        label_breakpoint.value,
        len(kept),
        len(visible),
    )
    left_segments, right_segments = split_by_side(kept)
    left = tuple(
        RenderedSegment(text=texts[segment.id], side=Side.LEFT, order=index, segment_id=segment.id)
        for index, segment in enumerate(left_segments)
    )
    right = tuple(
        RenderedSegment(text=texts[segment.id], side=Side.RIGHT, order=index, segment_id=segment.id)
        for index, segment in enumerate(right_segments)
    )
    lines = _compose_lines([item.text for item in left], [item.text for item in right], width, separator)
    return StatusBarLayout(
        breakpoint=measured,
        density=resolved_density,
        width=width,
        left=left,
        right=right,
        lines=tuple(lines),
    )


__all__ = [
    "StatusBarLayout",
    "StatusInfo",
    "build_status_segments",
    "compose_status_bar",
    "format_cost",
    "format_duration",
    "format_elapsed",
    "format_segment",
    "format_tokens",
    "url_port",
]
