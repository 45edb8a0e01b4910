"""Hover/tap tooltip state machine for calendar day cells."""
import logging
import queue
import threading
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

from venue_calendar.colors import color_for
from venue_calendar.event_index import format_event_time
from venue_calendar.models import Event
from venue_calendar.view_models import (
    Rect, Size, TooltipContent, TooltipItem, TooltipState
)

logger = logging.getLogger(__name__)

HIDE_DELAY = 0.3          # seconds after leaving a day cell
TOOLTIP_HIDE_DELAY = 0.2  # seconds after leaving the tooltip itself
MOBILE_BREAKPOINT = 768
EDGE_MARGIN = 10
ANCHOR_GAP = 10
MAX_TOOLTIP_EVENTS = 3

DETAILS_PATH = '/event-details.html'
NO_VENUE_LABEL = 'No venue'


def event_detail_link(event_id: str) -> str:
    """Path of the event detail view."""
    return f"{DETAILS_PATH}?id={quote(str(event_id), safe='')}"


def position_tooltip(anchor: Rect, tooltip: Size, viewport: Size) -> Tuple[float, float]:
    """
    Compute the tooltip's top-left corner.

    Placed above the anchor and centred on it; clamped horizontally to the
    viewport margin, and moved below the anchor if it would leave the top.

    Args:
        anchor: Bounding box of the day cell
        tooltip: Rendered size of the tooltip
        viewport: Viewport size

    Returns:
        Tuple of (left, top) in pixels
    """
    left = anchor.left + anchor.width / 2 - tooltip.width / 2
    top = anchor.top - tooltip.height - ANCHOR_GAP

    if left < EDGE_MARGIN:
        left = EDGE_MARGIN
    elif left + tooltip.width > viewport.width - EDGE_MARGIN:
        left = viewport.width - tooltip.width - EDGE_MARGIN

    if top < EDGE_MARGIN:
        top = anchor.bottom + ANCHOR_GAP

    return left, top


def build_tooltip_content(
    events: List[Event],
    color_map: Dict[str, str],
    tz=None,
    link_builder: Callable[[str], str] = event_detail_link
) -> TooltipContent:
    """
    Tooltip lines for a day's filtered events.

    Shows the first three events; the rest are summarised by ``more_count``.
    """
    items = []
    for event in events[:MAX_TOOLTIP_EVENTS]:
        try:
            time_str = format_event_time(event.starts_at, tz)
        except (TypeError, ValueError):
            time_str = ''
        items.append(TooltipItem(
            event_id=event.id,
            title=event.title,
            color=color_for(color_map, event.venue_id),
            time=time_str,
            venue_name=event.venue.name if event.venue else NO_VENUE_LABEL,
            link=link_builder(event.id)
        ))

    return TooltipContent(
        items=items,
        more_count=max(0, len(events) - MAX_TOOLTIP_EVENTS)
    )


class TimerScheduler:
    """
    Delays callbacks with ``threading.Timer`` and runs them on the owning thread.

    Timer threads only queue expired callbacks; the thread that owns the
    page state runs them with ``run_pending()``, so tooltip state is never
    changed from a timer thread.
    """

    def __init__(self):
        self._ready = queue.Queue()

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, self._ready.put, args=(callback,))
        timer.daemon = True
        timer.start()
        return timer

    def run_pending(self) -> int:
        """
        Run every callback whose delay has elapsed.

        Returns:
            Number of callbacks run
        """
        count = 0
        while True:
            try:
                callback = self._ready.get_nowait()
            except queue.Empty:
                return count
            callback()
            count += 1


class TooltipController:
    """
    Tooltip visibility, content and position.

    States are Hidden and Visible(anchor_date_key). Leaving a cell or the
    tooltip schedules a hide through ``scheduler``; entering a cell or the
    tooltip cancels it. At most one hide is pending at any time.
    """

    def __init__(
        self,
        scheduler,
        events_for_date: Callable[[str], List[Event]],
        content_builder: Callable[[List[Event]], TooltipContent],
        viewport: Optional[Size] = None,
        tooltip_size: Optional[Size] = None
    ):
        """
        Initialize the controller.

        Args:
            scheduler: Object with ``call_later(delay, callback)`` returning a
                handle with ``cancel()``
            events_for_date: Returns the filtered events of a day key
            content_builder: Builds tooltip content from events
            viewport: Current viewport size
            tooltip_size: Rendered tooltip size used for positioning
        """
        self.scheduler = scheduler
        self.events_for_date = events_for_date
        self.content_builder = content_builder
        self.viewport = viewport or Size(1280, 800)
        self.tooltip_size = tooltip_size or Size(280, 180)
        self.state = TooltipState()
        self.content: Optional[TooltipContent] = None
        self.position: Optional[Tuple[float, float]] = None
        self._pending_hide = None

    @property
    def visible(self) -> bool:
        return self.state.visible

    @property
    def hide_pending(self) -> bool:
        return self._pending_hide is not None

    @property
    def is_mobile(self) -> bool:
        return self.viewport.width < MOBILE_BREAKPOINT

    def pointer_enter(self, date_key: str, anchor: Rect) -> bool:
        """
        Show the tooltip for a hovered or focused day cell.

        Returns:
            True if the tooltip is now shown for ``date_key``
        """
        events = self.events_for_date(date_key)
        if not events:
            return False

        self._cancel_hide()
        self._show(date_key, anchor, events)
        return True

    focus = pointer_enter

    def pointer_leave(self) -> None:
        self._schedule_hide(HIDE_DELAY)

    blur = pointer_leave

    def tooltip_enter(self) -> None:
        self._cancel_hide()

    def tooltip_leave(self) -> None:
        self._schedule_hide(TOOLTIP_HIDE_DELAY)

    def tap(self, date_key: str, anchor: Rect) -> None:
        """Toggle the tooltip on narrow viewports; ignored otherwise."""
        if not self.is_mobile:
            return

        if self.state.visible and self.state.anchor_date_key == date_key:
            self.hide()
            return

        events = self.events_for_date(date_key)
        if events:
            self._cancel_hide()
            self._show(date_key, anchor, events)

    def outside_click(self, in_tooltip: bool, in_day_cell: bool) -> None:
        if not in_tooltip and not in_day_cell:
            self.hide()

    def hide(self) -> None:
        self._cancel_hide()
        self.state = TooltipState()
        self.content = None
        self.position = None

    def _show(self, date_key: str, anchor: Rect, events: List[Event]) -> None:
        self.content = self.content_builder(events)
        self.position = position_tooltip(anchor, self.tooltip_size, self.viewport)
        self.state = TooltipState(visible=True, anchor_date_key=date_key)
        logger.debug(f"Tooltip shown for {date_key} with {len(events)} events")

    def _schedule_hide(self, delay: float) -> None:
        self._cancel_hide()
        handle = None

        def fire():
            # Ignore a timer that was superseded before it could be cancelled
            if self._pending_hide is handle:
                self._pending_hide = None
                self.hide()

        handle = self.scheduler.call_later(delay, fire)
        self._pending_hide = handle

    def _cancel_hide(self) -> None:
        if self._pending_hide is not None:
            self._pending_hide.cancel()
            self._pending_hide = None
