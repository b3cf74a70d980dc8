"""Responsive terminal layout engine."""

from .config_loader import ConfigError, load_config
from .datatypes import (
    AbbreviationMode,
    AppConfig,
    Breakpoint,
    BreakpointThresholds,
    DiffLayoutMode,
    Dimensions,
    DisplayDensity,
    ModeSelection,
    Priority,
    RenderedSegment,
    Segment,
    Side,
    TruncationResult,
    UrgencyTier,
)
from .status_bar import StatusBarLayout, StatusInfo, build_status_segments, compose_status_bar

__version__ = "0.1.0"

__all__ = [
    "AbbreviationMode",
    "AppConfig",
    "Breakpoint",
    "BreakpointThresholds",
    "ConfigError",
    "DiffLayoutMode",
    "Dimensions",
    "DisplayDensity",
    "ModeSelection",
    "Priority",
    "RenderedSegment",
    "Segment",
    "Side",
    "StatusBarLayout",
    "StatusInfo",
    "TruncationResult",
    "UrgencyTier",
    "build_status_segments",
    "compose_status_bar",
    "load_config",
]
