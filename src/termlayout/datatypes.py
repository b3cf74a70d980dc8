"""Layout value types and configuration dataclasses for termlayout."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class Breakpoint(str, Enum):
    """Measured terminal width tier, ordered ``narrow < compact < normal < wide``."""

    NARROW = "narrow"
    COMPACT = "compact"
    NORMAL = "normal"
    WIDE = "wide"

    @property
    def rank(self) -> int:
        return _BREAKPOINT_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Breakpoint):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Breakpoint):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Breakpoint):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Breakpoint):
            return NotImplemented
        return self.rank >= other.rank


_BREAKPOINT_ORDER = (
    Breakpoint.NARROW,
    Breakpoint.COMPACT,
    Breakpoint.NORMAL,
    Breakpoint.WIDE,
)


class DisplayDensity(str, Enum):
    """User-requested display density; overrides the measured breakpoint."""

    COMPACT = "compact"
    NORMAL = "normal"
    VERBOSE = "verbose"


class Priority(str, Enum):
    """Importance of a status segment. ``critical`` is never hidden by width."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Side(str, Enum):
    """Which half of the status row a segment belongs to."""

    LEFT = "left"
    RIGHT = "right"


class AbbreviationMode(str, Enum):
    """Policy for choosing between full and abbreviated segment labels."""

    FULL = "full"
    ABBREVIATED = "abbreviated"
    AUTO = "auto"


class DiffLayoutMode(str, Enum):
    """Macro arrangement for wide structured content such as diffs."""

    UNIFIED = "unified"
    SPLIT = "split"
    INLINE = "inline"
    AUTO = "auto"


class UrgencyTier(str, Enum):
    """Coarse remaining-time classification used for colour emphasis."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class BreakpointThresholds:
    """Cut points for :func:`termlayout.layout.breakpoints.classify`."""

    narrow_max: int = 60
    compact_max: int = 100
    normal_max: int = 160

    def __post_init__(self) -> None:
        if not (self.narrow_max < self.compact_max < self.normal_max):
            raise ValueError(
                "breakpoint thresholds must satisfy narrow_max < compact_max < normal_max "
                f"(got {self.narrow_max}, {self.compact_max}, {self.normal_max})"
            )


DEFAULT_THRESHOLDS = BreakpointThresholds()


@dataclass(frozen=True)
class Dimensions:
    """A single terminal size sample. Replaced, never mutated."""

    width: int
    height: int
    is_available: bool = True

    def __post_init__(self) -> None:
        from .layout.breakpoints import normalize_width

        object.__setattr__(self, "width", normalize_width(self.width))
        object.__setattr__(self, "height", normalize_width(self.height))

    @property
    def breakpoint(self) -> Breakpoint:
        return self.classify_with(DEFAULT_THRESHOLDS)

    def classify_with(self, thresholds: BreakpointThresholds) -> Breakpoint:
        from .layout.breakpoints import classify

        return classify(self.width, thresholds)


@dataclass(frozen=True)
class Segment:
    """One discrete piece of status information.

    ``abbreviated_label`` distinguishes ``None`` (no abbreviation, fall back to
    ``label``) from ``""`` (show the value bare).
    """

    id: str
    priority: Union[Priority, str]
    side: Side
    label: str
    value: str
    icon: Optional[str] = None
    abbreviated_label: Optional[str] = None
    verbose_only: bool = False


@dataclass(frozen=True)
class RenderedSegment:
    """Formatted segment text handed to the drawing sink."""

    text: str
    side: Side
    order: int
    segment_id: str = ""


@dataclass(frozen=True)
class TruncationResult:
    text: str
    truncated: bool
    original_length: int


@dataclass(frozen=True)
class ModeSelection:
    """Resolved diff layout mode plus the notice emitted when a request was refused."""

    mode: DiffLayoutMode
    requested: DiffLayoutMode
    notice: Optional[str] = None

    @property
    def fell_back(self) -> bool:
        return self.notice is not None


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass
class BreakpointConfig:
    """Width cut points loaded from ``[breakpoints]``."""

    narrow_max: int = 60
    compact_max: int = 100
    normal_max: int = 160

    def thresholds(self) -> BreakpointThresholds:
        return BreakpointThresholds(
            narrow_max=int(self.narrow_max),
            compact_max=int(self.compact_max),
            normal_max=int(self.normal_max),
        )


@dataclass
class DiffConfig:
    """Options controlling diff/code layout selection."""

    default_mode: DiffLayoutMode = DiffLayoutMode.AUTO
    split_min_width: int = 120
    separator_width: int = 3
    min_pane_width: int = 10


@dataclass
class StatusConfig:
    """Status bar presentation defaults."""

    density: DisplayDensity = DisplayDensity.NORMAL
    abbreviation: AbbreviationMode = AbbreviationMode.AUTO
    color_blind: bool = False
    separator: str = " │ "


@dataclass
class TruncationConfig:
    ellipsis: str = "..."
    path_ellipsis: str = "middle"
    thought_limit_normal: int = 300
    thought_limit_verbose: int = 1000


@dataclass
class TerminalConfig:
    """Fallback size used when the real terminal cannot be queried."""

    fallback_width: int = 80
    fallback_height: int = 24


@dataclass
class AppConfig:
    """Top-level configuration returned by :func:`termlayout.config_loader.load_config`."""

    breakpoints: BreakpointConfig = field(default_factory=BreakpointConfig)
    diff: DiffConfig = field(default_factory=DiffConfig)
    status: StatusConfig = field(default_factory=StatusConfig)
    truncation: TruncationConfig = field(default_factory=TruncationConfig)
    terminal: TerminalConfig = field(default_factory=TerminalConfig)
