"""Yearly calendar grid view model."""
import calendar
from typing import Dict, List, Set

from venue_calendar.colors import color_for
from venue_calendar.event_index import filter_events, format_date_key
from venue_calendar.models import Event
from venue_calendar.view_models import DayCell, MonthGrid

WEEKDAY_HEADERS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
MAX_INDICATORS = 3

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]


def distinct_venue_ids(events: List[Event]) -> List[str]:
    """Venue ids in first-seen order, skipping venue-less events."""
    seen: List[str] = []
    for event in events:
        if event.venue_id and event.venue_id not in seen:
            seen.append(event.venue_id)
    return seen


def build_day_cell(
    day: int,
    key: str,
    events: List[Event],
    color_map: Dict[str, str]
) -> DayCell:
    """
    Build a day cell from the day's already-filtered events.

    Args:
        day: Day of month
        key: Day key of the cell
        events: Filtered events starting that day
        color_map: Venue id to colour mapping

    Returns:
        Plain cell when there are no events, interactive cell otherwise
    """
    if not events:
        return DayCell(day=day, date_key=key)

    venue_ids = distinct_venue_ids(events)
    colors = [color_for(color_map, venue_id) for venue_id in venue_ids]

    return DayCell(
        day=day,
        date_key=key,
        interactive=True,
        event_count=len(events),
        colors=colors[:MAX_INDICATORS],
        overflow=max(0, len(venue_ids) - MAX_INDICATORS)
    )


def build_month_grid(
    year: int,
    month: int,
    events_by_date: Dict[str, List[Event]],
    color_map: Dict[str, str],
    selected_venues: Set[str]
) -> MonthGrid:
    """
    Build one month, ``month`` being 1-based.

    Leading ``None`` cells pad the first week so that weeks start on Monday.
    """
    first_weekday, days_in_month = calendar.monthrange(year, month)
    cells = [None] * first_weekday

    for day in range(1, days_in_month + 1):
        key = format_date_key(year, month, day)
        day_events = filter_events(events_by_date.get(key, []), selected_venues)
        cells.append(build_day_cell(day, key, day_events, color_map))

    return MonthGrid(
        year=year,
        month=month,
        name=MONTH_NAMES[month - 1],
        cells=cells
    )


def build_year_grid(
    year: int,
    events_by_date: Dict[str, List[Event]],
    color_map: Dict[str, str],
    selected_venues: Set[str]
) -> List[MonthGrid]:
    """Build all twelve months of ``year``."""
    return [
        build_month_grid(year, month, events_by_date, color_map, selected_venues)
        for month in range(1, 13)
    ]
