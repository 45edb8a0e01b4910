"""Calendar page orchestration: year selection, loading and user actions."""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, tzinfo
from typing import Callable, Dict, List, Optional, Set, Tuple

from venue_calendar.colors import assign_venue_colors
from venue_calendar.event_index import (
    build_events_by_date, filter_events, venue_ids_with_events
)
from venue_calendar.grid import build_year_grid
from venue_calendar.legend import LegendController
from venue_calendar.models import Event, FetchResult, LoadResult, Venue
from venue_calendar.preferences import PreferenceStore
from venue_calendar.tooltip import (
    TimerScheduler, TooltipController, build_tooltip_content, event_detail_link
)
from venue_calendar.view_models import (
    LegendView, MonthGrid, PageStatus, Rect, Region, Size, TooltipContent
)

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = 'Failed to load calendar data. Please try again.'


def year_range(year: int, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """Local-midnight bounds ``[Jan 1 year, Jan 1 year+1)`` as aware datetimes."""
    if tz is None:
        return datetime(year, 1, 1).astimezone(), datetime(year + 1, 1, 1).astimezone()
    return datetime(year, 1, 1, tzinfo=tz), datetime(year + 1, 1, 1, tzinfo=tz)


class CalendarPage:
    """
    Owns the calendar page state and wires the calendar components.

    One instance per page view. The current year, derived indices and the
    tooltip controller live here; the venue selection lives on the legend.
    """

    def __init__(
        self,
        client,
        preferences: PreferenceStore,
        scheduler=None,
        tz: Optional[tzinfo] = None,
        today: Optional[date] = None,
        link_builder: Callable[[str], str] = event_detail_link,
        viewport: Optional[Size] = None
    ):
        """
        Initialize the page.

        Args:
            client: Backend with ``fetch_venues`` and
                ``fetch_published_events_in_range``
            preferences: Store for the venue selection
            scheduler: Timer scheduler for the tooltip (default: threading timers)
            tz: Viewer time zone (default: host local zone)
            today: Date used for the year selector (default: today in ``tz``)
            link_builder: Builds event detail links
            viewport: Viewport size for tooltip placement
        """
        self.client = client
        self.tz = tz
        self.link_builder = link_builder

        today = today or datetime.now(tz).date()
        self.year_options = list(range(today.year - 1, today.year + 3))
        self.current_year = today.year

        self.status = PageStatus.LOADING
        self.error_message: Optional[str] = None
        self.venues: List[Venue] = []
        self.color_map: Dict[str, str] = {}
        self.events_by_date: Dict[str, List[Event]] = {}
        self.grid: Optional[List[MonthGrid]] = None

        self.legend = LegendController(preferences)
        self.tooltip = TooltipController(
            scheduler or TimerScheduler(),
            self.filtered_events_for,
            self._build_tooltip_content,
            viewport=viewport
        )

    @property
    def selected_venues(self) -> Set[str]:
        return self.legend.selected_venues

    def start(self) -> LoadResult:
        """Initial load for the current year."""
        return self.load(self.current_year)

    def select_year(self, year: int) -> LoadResult:
        """
        Switch to another year and reload.

        Raises:
            ValueError: If the year is not offered by the year selector
        """
        if year not in self.year_options:
            raise ValueError(f"Year {year} is not selectable")
        self.current_year = year
        return self.load(year)

    def load(self, year: int) -> LoadResult:
        """
        Fetch venues and events for ``year`` and rebuild the page.

        Both fetches must succeed. A load that completes after the current
        year moved on is discarded without touching page state.

        Args:
            year: Year being loaded

        Returns:
            LoadResult describing whether the data was applied
        """
        logger.info(f"Loading calendar for {year}")
        self.status = PageStatus.LOADING

        try:
            venues_result, events_result = self._fetch(year)
        except Exception as e:
            if year != self.current_year:
                logger.info(f"Discarding failed load for {year}; current year is {self.current_year}")
                return LoadResult(year=year, applied=False, errors=[str(e)])
            logger.error(f"Load calendar error: {e}", exc_info=True)
            self._fail()
            return LoadResult(year=year, applied=False, errors=[str(e)])

        if year != self.current_year:
            logger.info(f"Discarding stale load for {year}; current year is {self.current_year}")
            return LoadResult(year=year, applied=False)

        errors = []
        if not venues_result.ok:
            errors.append(f"Failed to load venues: {venues_result.error}")
        if not events_result.ok:
            errors.append(f"Failed to load events: {events_result.error}")
        if errors:
            for message in errors:
                logger.error(message)
            self._fail()
            return LoadResult(year=year, applied=False, errors=errors)

        try:
            self._apply(venues_result.data, events_result.data)
        except Exception as e:
            logger.error(f"Load calendar error: {e}", exc_info=True)
            self._fail()
            return LoadResult(year=year, applied=False, errors=[str(e)])

        logger.info(
            f"Calendar for {year} loaded: {len(self.venues)} venues, "
            f"{len(events_result.data)} events"
        )
        return LoadResult(
            year=year,
            applied=True,
            venues_count=len(self.venues),
            events_count=len(events_result.data)
        )

    def toggle_venue(self, venue_id: str, checked: bool) -> Set[Region]:
        regions = self.legend.toggle_venue(venue_id, checked)
        self._refresh_grid()
        return regions

    def toggle_all(self) -> Set[Region]:
        regions = self.legend.toggle_all()
        self._refresh_grid()
        return regions

    def resume_selection(self) -> bool:
        """
        Continue from the selection the user last saved.

        Used by follow-up actions on a freshly loaded page so they apply to
        the stored selection rather than to the first-view defaults.

        Returns:
            True if a stored selection was applied
        """
        if self.status is not PageStatus.READY:
            return False
        restored = self.legend.restore_saved()
        if restored:
            self._refresh_grid()
        return restored

    def show_tooltip(self, date_key: str, anchor: Rect) -> Set[Region]:
        """
        Show the tooltip for a day cell, or hide it if the day has no visible events.

        Returns:
            Regions to repaint (the tooltip only)
        """
        if not self.tooltip.pointer_enter(date_key, anchor):
            self.tooltip.hide()
        return {Region.TOOLTIP}

    def legend_view(self) -> LegendView:
        return self.legend.view()

    def render_grid(self) -> List[MonthGrid]:
        return build_year_grid(
            self.current_year,
            self.events_by_date,
            self.color_map,
            self.legend.selected_venues
        )

    def filtered_events_for(self, date_key: str) -> List[Event]:
        """Events of a day that pass the venue filter."""
        return filter_events(self.events_by_date.get(date_key, []), self.legend.selected_venues)

    def on_outside_click(self, in_tooltip: bool, in_day_cell: bool) -> None:
        self.tooltip.outside_click(in_tooltip, in_day_cell)

    def on_tooltip_enter(self) -> None:
        self.tooltip.tooltip_enter()

    def on_tooltip_leave(self) -> None:
        self.tooltip.tooltip_leave()

    def _fetch(self, year: int) -> Tuple[FetchResult, FetchResult]:
        start, end = year_range(year, self.tz)
        with ThreadPoolExecutor(max_workers=2) as executor:
            venues_future = executor.submit(self.client.fetch_venues)
            events_future = executor.submit(
                self.client.fetch_published_events_in_range, start, end
            )
            return venues_future.result(), events_future.result()

    def _apply(self, venues: List[Venue], events: List[Event]) -> None:
        self.tooltip.hide()
        self.venues = list(venues)
        self.color_map = assign_venue_colors(self.venues)
        self.legend.reset(self.venues, self.color_map, venue_ids_with_events(events))
        self.events_by_date = build_events_by_date(events, self.tz)
        self.grid = self.render_grid()
        self.error_message = None
        self.status = PageStatus.READY

    def _refresh_grid(self) -> None:
        if self.status is PageStatus.READY:
            self.grid = self.render_grid()

    def _fail(self) -> None:
        self.tooltip.hide()
        self.venues = []
        self.color_map = {}
        self.events_by_date = {}
        self.legend.clear()
        self.grid = None
        self.error_message = LOAD_ERROR_MESSAGE
        self.status = PageStatus.ERROR

    def _build_tooltip_content(self, events: List[Event]) -> TooltipContent:
        return build_tooltip_content(events, self.color_map, self.tz, self.link_builder)
