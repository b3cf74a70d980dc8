"""Display-width aware truncation and wrapping."""
from __future__ import annotations

import math
import re
from typing import Any, List, Optional, Tuple

from rich.cells import cell_len

from ..datatypes import TruncationResult
from .terminal import strip_ansi

DEFAULT_ELLIPSIS = "..."
PATH_ELLIPSIS = "…"
REPLACEMENT_GLYPH = "?"
# Terminals and rich both expand a raw tab to the next multiple of eight columns.
TAB_SIZE = 8

# A token ends after a run of these characters, so lines may break right after them.
_BREAK_AFTER = "-/\\,;:|."
_WHITESPACE_SPLIT_RE = re.compile(r"(\s+)")
_TOKEN_RE = re.compile(
    r"[^{chars}]*[{chars}]+|[^{chars}]+".format(chars=re.escape(_BREAK_AFTER))
)


def display_width(text: Optional[str]) -> int:
    """Number of terminal cells ``text`` occupies once ANSI escapes are removed.

    Tabs are counted at their expanded width rather than as zero-width controls.
    """

    if not text:
        return 0
    return cell_len(strip_ansi(str(text)).expandtabs(TAB_SIZE))


def _coerce_limit(value: Any) -> int:
    """Return a non-negative integer width; garbage and non-finite input become 0."""

    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, math.floor(number))


def _take_prefix(text: str, budget: int) -> str:
    """Longest prefix of ``text`` whose display width does not exceed ``budget``."""

    used = 0
    end = 0
    for index, char in enumerate(text):
        width = cell_len(char)
        if used + width > budget:
            break
        used += width
        end = index + 1
    return text[:end]


def _take_suffix(text: str, budget: int) -> str:
    used = 0
    start = len(text)
    for index in range(len(text) - 1, -1, -1):
        width = cell_len(text[index])
        if used + width > budget:
            break
        used += width
        start = index
    return text[start:]


def truncate(text: Optional[str], max_width: Any, ellipsis: str = DEFAULT_ELLIPSIS) -> TruncationResult:
    """
    Fit ``text`` into ``max_width`` terminal cells, appending ``ellipsis`` when cut.

    Text that already fits is returned untouched. Otherwise the longest prefix whose
    width plus the ellipsis width fits is kept and the ellipsis appended. When the
    budget cannot even hold the ellipsis the text is dropped entirely and reported
    as not truncated, since no marker could be placed. ANSI escapes are stripped
    and tabs expanded in truncated output. Never raises.

    Parameters:
        text (str | None): Text to fit; ``None`` is treated as empty.
        max_width (int): Available columns; non-finite or negative values mean 0.
        ellipsis (str): Marker appended to truncated text.

    Returns:
        TruncationResult: Fitted text, whether it was cut, and the original
        character count.
    """
    source = "" if text is None else str(text)
    marker = "" if ellipsis is None else str(ellipsis)
    original_length = len(source)
    limit = _coerce_limit(max_width)

    if display_width(source) <= limit:
        return TruncationResult(text=source, truncated=False, original_length=original_length)

    marker_width = display_width(marker)
    if marker_width > limit:
        return TruncationResult(text="", truncated=False, original_length=original_length)

    plain = strip_ansi(source).expandtabs(TAB_SIZE)
    prefix = _take_prefix(plain, limit - marker_width)
    return TruncationResult(
        text=f"{prefix}{marker}", truncated=True, original_length=original_length
    )


def truncate_chars(
    text: Optional[str], max_chars: Any, ellipsis: str = DEFAULT_ELLIPSIS
) -> TruncationResult:
    """
    Cap ``text`` at ``max_chars`` characters for content previews.

    Unlike :func:`truncate` the ellipsis is appended after the kept characters, so
    the result is ``max_chars + len(ellipsis)`` long. Callers that must fit a
    column budget should use :func:`truncate` instead.
    """
    source = "" if text is None else str(text)
    limit = _coerce_limit(max_chars)
    if len(source) <= limit:
        return TruncationResult(text=source, truncated=False, original_length=len(source))
    return TruncationResult(
        text=f"{source[:limit]}{ellipsis}", truncated=True, original_length=len(source)
    )


def truncation_indicator(result: TruncationResult) -> str:
    """Human readable ``(truncated from N chars)`` note, empty when nothing was cut."""

    if not result.truncated:
        return ""
    return f"(truncated from {result.original_length} chars)"


def truncate_middle(
    text: Optional[str], max_width: Any, ellipsis: str = PATH_ELLIPSIS
) -> str:
    """
    Shorten a path-like string, keeping its final component visible.

    The ellipsis replaces the middle of the path. If the final component alone does
    not fit, its tail is kept instead. Plain strings without separators are cut at
    the end like :func:`truncate`.
    """
    source = "" if text is None else strip_ansi(str(text)).expandtabs(TAB_SIZE)
    limit = _coerce_limit(max_width)
    if display_width(source) <= limit:
        return source
    marker_width = display_width(ellipsis)
    if marker_width > limit:
        return ""
    budget = limit - marker_width
    last_sep = max(source.rfind("/"), source.rfind("\\"))
    if last_sep == -1:
        return f"{_take_prefix(source, budget)}{ellipsis}"
    prefix = source[:last_sep + 1]
    suffix = source[last_sep + 1:]
    available = budget - display_width(suffix)
    if available <= 0:
        return f"{ellipsis}{_take_suffix(suffix, budget)}"
    return f"{_take_prefix(prefix, available)}{ellipsis}{suffix}"


def pad_to_width(text: str, width: int) -> str:
    """Right-pad ``text`` with spaces until it covers ``width`` cells."""

    visible = display_width(text)
    if visible >= width:
        return text
    return text + " " * (width - visible)


def _split_token(token: str, width: int) -> Tuple[List[str], str]:
    """
    Hard-split an over-long token into full lines plus a remainder.

    Glyphs wider than the entire line are replaced with a single-cell placeholder so
    no line can overflow.
    """
    lines: List[str] = []
    current = ""
    used = 0
    for char in token:
        char_width = cell_len(char)
        if char_width > width:
            char = REPLACEMENT_GLYPH
            char_width = 1
        if used + char_width > width:
            lines.append(current)
            current = ""
            used = 0
        current += char
        used += char_width
    return lines, current


def _tokenize(paragraph: str) -> List[str]:
    tokens: List[str] = []
    for chunk in _WHITESPACE_SPLIT_RE.split(paragraph):
        if not chunk:
            continue
        if chunk.isspace():
            tokens.append(chunk)
        else:
            tokens.extend(_TOKEN_RE.findall(chunk))
    return tokens


def _wrap_paragraph(paragraph: str, width: int) -> List[str]:
    lines: List[str] = []
    current = ""
    used = 0
    for token in _tokenize(paragraph):
        token_width = cell_len(token)
        if used + token_width <= width:
            current += token
            used += token_width
            continue
        if token.isspace():
            # whitespace at a break point is consumed by the break
            if current.strip():
                lines.append(current.rstrip())
            current = ""
            used = 0
            continue
        if current.strip():
            lines.append(current.rstrip())
        current = ""
        used = 0
        if token_width > width:
            full_lines, token = _split_token(token, width)
            lines.extend(full_lines)
            token_width = cell_len(token)
        current = token
        used = token_width
    lines.append(current.rstrip())
    return lines


def wrap(text: Optional[str], max_width: Any, *, tab_size: int = 4) -> List[str]:
    """
    Wrap ``text`` into lines no wider than ``max_width`` cells.

    Explicit newlines are honoured as forced breaks and each resulting paragraph is
    wrapped independently. Lines break after whitespace or after punctuation such as
    ``-``, ``/`` and ``,``; a token longer than a whole line is split mid-token. Every
    non-whitespace character of the input appears in the output in its original
    order. A width below one column yields no lines.
    """
    limit = _coerce_limit(max_width)
    if limit < 1:
        return []
    source = "" if text is None else strip_ansi(str(text))
    source = source.replace("\r\n", "\n").replace("\r", "\n")
    lines: List[str] = []
    for paragraph in source.split("\n"):
        lines.extend(_wrap_paragraph(paragraph.expandtabs(tab_size), limit))
    return lines


__all__ = [
    "DEFAULT_ELLIPSIS",
    "PATH_ELLIPSIS",
    "display_width",
    "pad_to_width",
    "truncate",
    "truncate_chars",
    "truncate_middle",
    "truncation_indicator",
    "wrap",
]
