"""Terminal size acquisition and colour capability handling."""
from __future__ import annotations

import logging
import os
import re
import sys
from typing import IO, Any, Dict, Optional

from rich.console import Console

from ..datatypes import Dimensions
from .breakpoints import normalize_width

logger = logging.getLogger(__name__)

ANSI_ESCAPE_RE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")

DEFAULT_FALLBACK_WIDTH = 80
DEFAULT_FALLBACK_HEIGHT = 24

COLOR_BLIND_OVERRIDES: Dict[str, str] = {
    "green": "cyan",
    "yellow": "orange1",
    "red": "magenta",
}


def _is_truthy_flag(raw_value: str) -> bool:
    """Return True when an environment-style flag requests enabling behavior."""

    normalized = raw_value.strip().lower()
    return bool(normalized) and normalized not in {"0", "false", "no", "off"}


def color_disabled(no_color: bool = False) -> bool:
    """Combine an explicit ``no_color`` flag with the ``NO_COLOR`` convention."""

    return no_color or _is_truthy_flag(os.environ.get("NO_COLOR", ""))


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


def _query_console(console: Console) -> Optional[tuple[int, int]]:
    """Read the size rich resolved for ``console``; ``None`` when it is unusable.

    Rich reports its own 80x25 default for consoles that are not attached to a
    terminal, so such a console only counts when both dimensions were set
    explicitly (through the constructor or ``COLUMNS``/``LINES``).
    """

    if not console.is_terminal and (
        getattr(console, "_width", None) is None or getattr(console, "_height", None) is None
    ):
        return None
    try:
        size = console.size
    except (OSError, ValueError):
        return None
    width = _positive_int(getattr(size, "width", None))
    height = _positive_int(getattr(size, "height", None))
    if width is None or height is None:
        return None
    return width, height


def _query_stream(stream: Optional[IO[str]]) -> Optional[tuple[int, int]]:
    """Ask the OS for the size of the terminal attached to ``stream``."""

    target = stream if stream is not None else sys.__stdout__
    if target is None:
        return None
    try:
        fileno = target.fileno()
        size = os.get_terminal_size(fileno)
    except (AttributeError, OSError, ValueError):
        return None
    width = _positive_int(size.columns)
    height = _positive_int(size.lines)
    if width is None or height is None:
        return None
    return width, height


def get_dimensions(
    fallback_width: int = DEFAULT_FALLBACK_WIDTH,
    fallback_height: int = DEFAULT_FALLBACK_HEIGHT,
    *,
    console: Optional[Console] = None,
    stream: Optional[IO[str]] = None,
) -> Dimensions:
    """
    Sample the current terminal size.

    A rich ``console`` takes precedence when supplied; otherwise the OS is asked
    for the size of ``stream`` (stdout by default). When neither yields a usable
    size the fallback values are returned with ``is_available`` set to False.
    This function never raises.

    Parameters:
        fallback_width (int): Columns to report when the terminal cannot be queried.
        fallback_height (int): Rows to report when the terminal cannot be queried.
        console (Console, optional): Rich console whose resolved size should be used.
        stream (IO[str], optional): Stream whose terminal should be queried.

    Returns:
        Dimensions: A fresh, normalised size sample.
    """
    measured = _query_console(console) if console is not None else _query_stream(stream)
    if measured is None:
        logger.debug(
            "Terminal size unavailable; using fallback %sx%s", fallback_width, fallback_height
        )
        return Dimensions(
            width=normalize_width(fallback_width),
            height=normalize_width(fallback_height),
            is_available=False,
        )
    width, height = measured
    return Dimensions(width=width, height=height, is_available=True)


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences so only printable glyphs remain."""

    return ANSI_ESCAPE_RE.sub("", text)


__all__ = [
    "ANSI_ESCAPE_RE",
    "COLOR_BLIND_OVERRIDES",
    "DEFAULT_FALLBACK_HEIGHT",
    "DEFAULT_FALLBACK_WIDTH",
    "color_disabled",
    "get_dimensions",
    "strip_ansi",
]
