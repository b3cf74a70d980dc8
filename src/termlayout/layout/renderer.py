"""Rich drawing sink for status bars, diff views, and countdowns."""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Mapping, Optional

from rich.console import Console
from rich.text import Text

from ..datatypes import DiffLayoutMode
from .diff_layout import DiffLayoutPlan
from .terminal import COLOR_BLIND_OVERRIDES, color_disabled
from .urgency import format_countdown, urgency_style, urgency_tier

if TYPE_CHECKING:
    from ..status_bar import StatusBarLayout

SEGMENT_STYLES: Dict[str, str] = {
    "connection": "green",
    "branch": "magenta",
    "agent": "cyan",
    "stage": "blue",
    "cost": "yellow",
    "model": "bold",
    "preview": "bold yellow",
    "timer": "dim",
}

DIFF_MARKER_STYLES: Dict[str, str] = {
    "+": "green",
    "-": "red",
    "~": "yellow",
}


class LayoutRenderer:
    """Paint engine output onto a rich console.

    The renderer never changes geometry: every line it receives has already been
    fitted to the terminal, so it only adds colour.
    """

    def __init__(
        self,
        console: Console,
        *,
        no_color: bool = False,
        color_blind: bool = False,
        segment_styles: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Parameters:
            console: Rich console receiving output.
            no_color: Disable styling entirely; ``NO_COLOR`` in the environment has the same effect.
            color_blind: Swap red/green/yellow for palette-safe alternatives.
            segment_styles: Per-segment-id style overrides.
        """
        self.console = console
        self.no_color = color_disabled(no_color)
        self.color_blind = color_blind
        self._segment_styles = dict(SEGMENT_STYLES)
        if segment_styles:
            self._segment_styles.update(segment_styles)

    def _style(self, style: Optional[str]) -> Optional[str]:
        """Resolve a style name through the colour-blind palette; ``None`` when colour is off."""

        if self.no_color or not style:
            return None
        if not self.color_blind:
            return style
        return " ".join(COLOR_BLIND_OVERRIDES.get(part, part) for part in style.split())

    def _write(self, text: Text) -> None:
        self.console.print(text, soft_wrap=True)

    def render_lines(self, lines: Iterable[str], style: Optional[str] = None) -> None:
        """Print pre-fitted lines, optionally in a single style."""

        resolved = self._style(style)
        for line in lines:
            self._write(Text(line, style=resolved or ""))

    def render_status_bar(self, layout: StatusBarLayout) -> None:
        """
        Print a composed status bar, colouring each segment by its id.

        A disconnected indicator is shown in red rather than the connection colour.
        """
        rendered = list(layout.left) + list(layout.right)
        for line in layout.lines:
            text = Text(line)
            for segment in rendered:
                style_name = self._segment_styles.get(segment.segment_id)
                if segment.segment_id == "connection" and segment.text != "●":
                    style_name = "red"
                style = self._style(style_name)
                if style and segment.text:
                    text.highlight_words([segment.text], style)
            self._write(text)

    def _style_diff_half(self, text: Text, start: int, chunk: str, gutter_width: int) -> None:
        marker = chunk[gutter_width:gutter_width + 1]
        style = self._style(DIFF_MARKER_STYLES.get(marker))
        if style:
            text.stylize(style, start, start + len(chunk))
        elif gutter_width:
            dim = self._style("dim")
            if dim:
                text.stylize(dim, start, start + gutter_width)

    def render_diff(self, lines: Iterable[str], plan: DiffLayoutPlan) -> None:
        """Print laid-out diff lines, colouring additions, removals and changes."""

        if plan.notice:
            self.render_lines([plan.notice], style="yellow")
        for line in lines:
            text = Text(line)
            if plan.mode is DiffLayoutMode.SPLIT and plan.separator:
                index = line.find(plan.separator)
                if index >= 0:
                    self._style_diff_half(text, 0, line[:index], plan.gutter_width)
                    right_start = index + len(plan.separator)
                    self._style_diff_half(text, right_start, line[right_start:], plan.gutter_width)
                else:
                    self._style_diff_half(text, 0, line, plan.gutter_width)
            else:
                self._style_diff_half(text, 0, line, plan.gutter_width)
            self._write(text)

    def render_countdown(self, remaining_ms: object, *, prefix: str = "Auto-executing in ") -> None:
        """Print a countdown coloured by its urgency tier."""

        tier = urgency_tier(remaining_ms)
        style = None if self.no_color else urgency_style(tier, color_blind=self.color_blind)
        text = Text(prefix)
        text.append(format_countdown(remaining_ms), style=style or "")
        self._write(text)


__all__ = ["DIFF_MARKER_STYLES", "SEGMENT_STYLES", "LayoutRenderer"]
