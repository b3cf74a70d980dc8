"""Click CLI wiring and entry points for termlayout."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, cast

import click
from rich.console import Console
from rich.logging import RichHandler

from .config_loader import ConfigError, load_config
from .datatypes import AppConfig, Dimensions, DisplayDensity
from .layout.diff_layout import DiffRow, layout_diff_rows, plan_diff_layout
from .layout.renderer import LayoutRenderer
from .layout.terminal import color_disabled, get_dimensions
from .layout.text import truncate, truncate_middle, truncation_indicator, wrap
from .layout.urgency import urgency_style, urgency_tier
from .status_bar import StatusInfo, compose_status_bar

_DEFAULT_CONFIG_HELP = "Path to a termlayout TOML file. Missing files fall back to defaults."

logger = logging.getLogger(__name__)


def setup_logging(level: str = "WARNING", *, no_color: bool = False) -> None:
    """Route log records through a rich handler on stderr."""

    console = Console(stderr=True, no_color=no_color)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(console=console, rich_tracebacks=True, show_time=False, show_path=False)
        ],
    )


def _load_app_config(config_path: Optional[str]) -> AppConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc


def _resolve_dimensions(params: Dict[str, Any], config: AppConfig) -> Dimensions:
    """Use ``--width``/``--height`` when given, otherwise sample the real terminal."""

    width = params.get("width")
    height = params.get("height")
    sampled = get_dimensions(config.terminal.fallback_width, config.terminal.fallback_height)
    if width is None and height is None:
        return sampled
    return Dimensions(
        width=width if width is not None else sampled.width,
        height=height if height is not None else sampled.height,
        is_available=True,
    )


class _Session:
    """Resolved per-invocation state shared by subcommands."""

    def __init__(self, params: Dict[str, Any]) -> None:
        self.config = _load_app_config(params.get("config_path"))
        self.dimensions = _resolve_dimensions(params, self.config)
        self.verbose = bool(params.get("verbose", False))
        self.no_color = color_disabled(bool(params.get("no_color", False)))
        self.console = Console(
            no_color=self.no_color,
            highlight=False,
            width=self.dimensions.width,
        )
        self.renderer = LayoutRenderer(
            self.console,
            no_color=self.no_color,
            color_blind=self.config.status.color_blind,
        )


def _session(ctx: click.Context) -> _Session:
    params = cast(Dict[str, Any], ctx.ensure_object(dict))
    session = params.get("_session")
    if session is None:
        session = _Session(params)
        params["_session"] = session
    return cast(_Session, session)


def _read_text(text: Optional[str]) -> str:
    if text is not None:
        return text
    return click.get_text_stream("stdin").read()


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    show_default=False,
    type=click.Path(dir_okay=False),
    help=_DEFAULT_CONFIG_HELP,
)
@click.option("--width", type=int, default=None, help="Pretend the terminal is this many columns wide.")
@click.option("--height", type=int, default=None, help="Pretend the terminal is this many rows tall.")
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colour output.")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Optional[str],
    width: Optional[int],
    height: Optional[int],
    verbose: bool,
    no_color: bool,
) -> None:
    """Responsive terminal layout engine."""

    setup_logging("DEBUG" if verbose else "WARNING", no_color=no_color)
    params_map = cast(Dict[str, Any], ctx.ensure_object(dict))
    params_map.update(
        {
            "config_path": config_path,
            "width": width,
            "height": height,
            "verbose": verbose,
            "no_color": no_color,
        }
    )
    ctx.obj = params_map


@main.command("classify")
@click.pass_context
def classify_command(ctx: click.Context) -> None:
    """Print the terminal size and its breakpoint."""

    session = _session(ctx)
    dims = session.dimensions
    breakpoint = dims.classify_with(session.config.breakpoints.thresholds())
    available = "yes" if dims.is_available else "no (fallback)"
    click.echo(f"width: {dims.width}")
    click.echo(f"height: {dims.height}")
    click.echo(f"available: {available}")
    click.echo(f"breakpoint: {breakpoint.value}")


@main.command("status")
@click.option(
    "--density",
    type=click.Choice([member.value for member in DisplayDensity], case_sensitive=False),
    default=None,
    help="Override [status].density.",
)
@click.option("--connected/--disconnected", default=True, show_default=True)
@click.option("--branch", default=None, help="Git branch to show.")
@click.option("--agent", default=None, help="Active agent name.")
@click.option("--stage", default=None, help="Workflow stage.")
@click.option("--model", default=None, help="Model name.")
@click.option("--tokens-in", type=int, default=None, help="Input tokens used.")
@click.option("--tokens-out", type=int, default=None, help="Output tokens used.")
@click.option("--cost", type=float, default=None, help="Cost of the current task in USD.")
@click.option("--session-cost", type=float, default=None, help="Cost of the whole session in USD.")
@click.option("--session-name", default=None, help="Named session.")
@click.option("--api-url", default=None, help="API server URL.")
@click.option("--web-url", default=None, help="Web UI URL.")
@click.option("--preview", is_flag=True, help="Show the preview-mode badge.")
@click.option("--elapsed", type=float, default=None, help="Elapsed seconds for the timer.")
@click.pass_context
def status_command(
    ctx: click.Context,
    density: Optional[str],
    connected: bool,
    branch: Optional[str],
    agent: Optional[str],
    stage: Optional[str],
    model: Optional[str],
    tokens_in: Optional[int],
    tokens_out: Optional[int],
    cost: Optional[float],
    session_cost: Optional[float],
    session_name: Optional[str],
    api_url: Optional[str],
    web_url: Optional[str],
    preview: bool,
    elapsed: Optional[float],
) -> None:
    """Render a status bar for the given session values."""

    session = _session(ctx)
    tokens = None
    if tokens_in is not None or tokens_out is not None:
        tokens = (tokens_in or 0, tokens_out or 0)
    info = StatusInfo(
        is_connected=connected,
        git_branch=branch,
        agent=agent,
        workflow_stage=stage,
        tokens=tokens,
        cost=cost,
        session_cost=session_cost,
        model=model,
        api_url=api_url,
        web_url=web_url,
        session_name=session_name,
        elapsed_seconds=elapsed,
        preview_mode=preview,
    )
    layout = compose_status_bar(info, session.dimensions, density, session.config)
    session.renderer.render_status_bar(layout)


def build_diff_rows(old_lines: Sequence[str], new_lines: Sequence[str]) -> List[DiffRow]:
    """Pair two line sequences into diff rows using :mod:`difflib` opcodes."""

    rows: List[DiffRow] = []
    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for offset in range(i2 - i1):
                rows.append(
                    DiffRow(
                        kind="context",
                        old_number=i1 + offset + 1,
                        new_number=j1 + offset + 1,
                        old_text=old_lines[i1 + offset],
                        new_text=new_lines[j1 + offset],
                    )
                )
        elif tag == "delete":
            for index in range(i1, i2):
                rows.append(DiffRow(kind="remove", old_number=index + 1, old_text=old_lines[index]))
        elif tag == "insert":
            for index in range(j1, j2):
                rows.append(DiffRow(kind="add", new_number=index + 1, new_text=new_lines[index]))
        else:
            paired = min(i2 - i1, j2 - j1)
            for offset in range(paired):
                rows.append(
                    DiffRow(
                        kind="change",
                        old_number=i1 + offset + 1,
                        new_number=j1 + offset + 1,
                        old_text=old_lines[i1 + offset],
                        new_text=new_lines[j1 + offset],
                    )
                )
            for index in range(i1 + paired, i2):
                rows.append(DiffRow(kind="remove", old_number=index + 1, old_text=old_lines[index]))
            for index in range(j1 + paired, j2):
                rows.append(DiffRow(kind="add", new_number=index + 1, new_text=new_lines[index]))
    return rows


def _read_lines(path: str) -> List[str]:
    try:
        return Path(path).read_text(encoding="utf-8").splitlines()
    except UnicodeDecodeError as exc:
        raise click.ClickException(f"{path} is not UTF-8 text") from exc


@main.command("diff")
@click.argument("old", type=click.Path(exists=True, dir_okay=False))
@click.argument("new", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--mode",
    type=click.Choice(["unified", "split", "inline", "auto"], case_sensitive=False),
    default=None,
    help="Override [diff].default_mode.",
)
@click.pass_context
def diff_command(ctx: click.Context, old: str, new: str, mode: Optional[str]) -> None:
    """Lay out a line diff of OLD against NEW for the current width."""

    session = _session(ctx)
    old_lines = _read_lines(old)
    new_lines = _read_lines(new)
    rows = build_diff_rows(old_lines, new_lines)
    requested = mode if mode is not None else session.config.diff.default_mode
    plan = plan_diff_layout(
        requested,
        session.dimensions,
        max(len(old_lines), len(new_lines)),
        session.config.diff,
    )
    logger.debug("Diff layout %s with %d rows", plan.mode.value, len(rows))
    session.renderer.render_diff(layout_diff_rows(rows, plan), plan)


@main.command("countdown")
@click.argument("remaining_ms", type=float)
@click.pass_context
def countdown_command(ctx: click.Context, remaining_ms: float) -> None:
    """Show the countdown label and urgency tier for REMAINING_MS milliseconds."""

    session = _session(ctx)
    tier = urgency_tier(remaining_ms)
    session.renderer.render_countdown(remaining_ms)
    style = urgency_style(tier, color_blind=session.config.status.color_blind)
    click.echo(f"urgency: {tier.value} ({style})")


@main.command("wrap")
@click.argument("text", required=False)
@click.option("--max-width", type=int, default=None, help="Wrap width; defaults to the terminal width.")
@click.pass_context
def wrap_command(ctx: click.Context, text: Optional[str], max_width: Optional[int]) -> None:
    """Wrap TEXT (or stdin) to the terminal width."""

    session = _session(ctx)
    width = max_width if max_width is not None else session.dimensions.width
    for line in wrap(_read_text(text), width):
        click.echo(line)


@main.command("truncate")
@click.argument("text", required=False)
@click.option("--max-width", type=int, default=None, help="Column budget; defaults to the terminal width.")
@click.option("--path", "as_path", is_flag=True, help="Keep the final path component visible.")
@click.option("--ellipsis", default=None, help="Override [truncation].ellipsis.")
@click.pass_context
def truncate_command(
    ctx: click.Context,
    text: Optional[str],
    max_width: Optional[int],
    as_path: bool,
    ellipsis: Optional[str],
) -> None:
    """Fit TEXT (or stdin) into the column budget."""

    session = _session(ctx)
    width = max_width if max_width is not None else session.dimensions.width
    source = _read_text(text).rstrip("\n")
    truncation_cfg = session.config.truncation
    if as_path and truncation_cfg.path_ellipsis == "middle":
        click.echo(truncate_middle(source, width, ellipsis if ellipsis is not None else "…"))
        return
    marker = ellipsis if ellipsis is not None else truncation_cfg.ellipsis
    result = truncate(source, width, marker)
    click.echo(result.text)
    if result.truncated and session.verbose:
        click.echo(truncation_indicator(result), err=True)


__all__ = ["build_diff_rows", "main", "setup_logging"]
