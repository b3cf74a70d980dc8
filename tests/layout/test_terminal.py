from __future__ import annotations

import io
import os
from types import SimpleNamespace

import pytest
from rich.console import Console

from termlayout.layout import terminal
from termlayout.layout.terminal import color_disabled, get_dimensions, strip_ansi


def _tty_stream() -> SimpleNamespace:
    return SimpleNamespace(fileno=lambda: 1)


def test_get_dimensions_reads_the_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(terminal.os, "get_terminal_size", lambda _fd: os.terminal_size((132, 43)))

    dims = get_dimensions(stream=_tty_stream())

    assert (dims.width, dims.height) == (132, 43)
    assert dims.is_available is True


def test_get_dimensions_falls_back_for_non_terminal_streams() -> None:
    dims = get_dimensions(stream=io.StringIO())

    assert (dims.width, dims.height) == (80, 24)
    assert dims.is_available is False


def test_get_dimensions_uses_custom_fallback(no_terminal: None) -> None:
    dims = get_dimensions(100, 30, stream=_tty_stream())

    assert (dims.width, dims.height) == (100, 30)
    assert dims.is_available is False


def test_get_dimensions_rejects_zero_sized_terminals(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(terminal.os, "get_terminal_size", lambda _fd: os.terminal_size((0, 0)))

    dims = get_dimensions(stream=_tty_stream())

    assert dims.is_available is False
    assert dims.width == 80


def test_get_dimensions_normalises_bad_fallbacks(no_terminal: None) -> None:
    dims = get_dimensions(-5, 0, stream=_tty_stream())

    assert (dims.width, dims.height) == (1, 1)


def test_get_dimensions_prefers_rich_console() -> None:
    console = Console(width=90, height=30, file=io.StringIO())

    dims = get_dimensions(console=console)

    assert (dims.width, dims.height) == (90, 30)
    assert dims.is_available is True


def test_get_dimensions_ignores_rich_default_for_detached_console(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("COLUMNS", raising=False)
    monkeypatch.delenv("LINES", raising=False)
    console = Console(file=io.StringIO())

    dims = get_dimensions(100, 30, console=console)

    assert (dims.width, dims.height) == (100, 30)
    assert dims.is_available is False


def test_get_dimensions_detached_console_needs_both_dimensions(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("COLUMNS", raising=False)
    monkeypatch.delenv("LINES", raising=False)
    console = Console(width=90, file=io.StringIO())

    dims = get_dimensions(100, 30, console=console)

    assert dims.is_available is False


@pytest.mark.parametrize(
    ("env_value", "expected"),
    [("1", True), ("yes", True), ("0", False), ("false", False), ("", False)],
)
def test_color_disabled_honours_no_color(
    monkeypatch: pytest.MonkeyPatch, env_value: str, expected: bool
) -> None:
    monkeypatch.setenv("NO_COLOR", env_value)

    assert color_disabled() is expected
    assert color_disabled(no_color=True) is True


def test_color_enabled_without_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)

    assert color_disabled() is False


def test_strip_ansi() -> None:
    assert strip_ansi("\x1b[1;32mok\x1b[0m done") == "ok done"
