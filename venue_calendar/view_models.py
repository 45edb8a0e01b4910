"""Plain view models produced by the calendar components and painted by render/."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Region(Enum):
    """Page regions that can be repainted independently."""
    LEGEND = 'legend'
    GRID = 'grid'
    TOOLTIP = 'tooltip'


class PageStatus(Enum):
    """Load state of the calendar page."""
    LOADING = 'loading'
    READY = 'ready'
    ERROR = 'error'


@dataclass
class DayCell:
    """A single day of a month grid."""
    day: int
    date_key: str
    interactive: bool = False
    event_count: int = 0
    colors: List[str] = field(default_factory=list)
    overflow: int = 0

    @property
    def aria_label(self) -> str:
        suffix = 's' if self.event_count > 1 else ''
        return f"{self.day} - {self.event_count} event{suffix}"


@dataclass
class MonthGrid:
    """One month of the yearly grid; ``None`` cells are leading placeholders."""
    year: int
    month: int
    name: str
    cells: List[Optional[DayCell]] = field(default_factory=list)

    @property
    def title(self) -> str:
        return f"{self.name} {self.year}"


@dataclass
class LegendEntry:
    """One venue row of the legend."""
    venue_id: str
    name: str
    color: str
    checked: bool


@dataclass
class LegendView:
    """Legend with its toggle-all control."""
    entries: List[LegendEntry]
    toggle_label: str

    @property
    def empty(self) -> bool:
        return not self.entries


@dataclass
class Rect:
    """On-screen bounding box, viewport coordinates in pixels."""
    left: float
    top: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass
class Size:
    width: float
    height: float


@dataclass
class TooltipItem:
    """One event line of the tooltip."""
    event_id: str
    title: str
    color: str
    time: str
    venue_name: str
    link: str


@dataclass
class TooltipContent:
    items: List[TooltipItem]
    more_count: int = 0

    @property
    def more_label(self) -> str:
        if self.more_count <= 0:
            return ''
        suffix = 's' if self.more_count > 1 else ''
        return f"+{self.more_count} more event{suffix}..."


@dataclass
class TooltipState:
    visible: bool = False
    anchor_date_key: Optional[str] = None
