"""Day-keyed index of events in the viewer's time zone."""
import logging
from datetime import datetime, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Set

from dateutil import parser as date_parser

from venue_calendar.models import Event

logger = logging.getLogger(__name__)


def parse_instant(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp into an aware datetime.

    Accepts a trailing ``Z`` and fractional seconds of any length; naive
    timestamps are taken as UTC.

    Args:
        value: Timestamp string, e.g. ``2026-03-05T18:00:00Z``

    Returns:
        Timezone-aware datetime

    Raises:
        TypeError: If the value is not a string
        ValueError: If the string is not a valid timestamp
    """
    if not isinstance(value, str):
        raise TypeError(f"timestamp must be a string, not {type(value).__name__}")
    text = value.strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    parsed = date_parser.isoparse(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_local(value: str, tz: Optional[tzinfo] = None) -> datetime:
    """Convert a timestamp to the viewer's zone (host local zone if ``tz`` is None)."""
    return parse_instant(value).astimezone(tz)


def format_date_key(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def date_key(starts_at: str, tz: Optional[tzinfo] = None) -> str:
    """
    Day key (``YYYY-MM-DD``) of an instant as read on the viewer's wall clock.

    Args:
        starts_at: ISO 8601 timestamp
        tz: Viewer time zone; None means the host's local zone

    Returns:
        Zero-padded day key
    """
    local = to_local(starts_at, tz)
    return format_date_key(local.year, local.month, local.day)


def format_event_time(starts_at: str, tz: Optional[tzinfo] = None) -> str:
    """24-hour ``HH:MM`` start time in the viewer's zone."""
    return to_local(starts_at, tz).strftime('%H:%M')


def build_events_by_date(
    events: Iterable[Event],
    tz: Optional[tzinfo] = None
) -> Dict[str, List[Event]]:
    """
    Group events by the local calendar day they start on.

    Input order is preserved within each day and duplicates are kept.
    Events whose start time cannot be parsed are skipped.

    Args:
        events: Events to index
        tz: Viewer time zone

    Returns:
        Dictionary mapping day key to the events starting that day
    """
    events_by_date: Dict[str, List[Event]] = {}

    for event in events:
        try:
            key = date_key(event.starts_at, tz)
        except (TypeError, ValueError) as e:
            logger.warning(
                f"Skipping event '{event.id}' with invalid starts_at "
                f"{event.starts_at!r}: {e}"
            )
            continue
        events_by_date.setdefault(key, []).append(event)

    return events_by_date


def venue_ids_with_events(events: Iterable[Event]) -> Set[str]:
    return {event.venue_id for event in events if event.venue_id}


def is_visible(event: Event, selected_venues: Set[str]) -> bool:
    """Venue-less events always pass the venue filter."""
    return not event.venue_id or event.venue_id in selected_venues


def filter_events(events: Iterable[Event], selected_venues: Set[str]) -> List[Event]:
    return [event for event in events if is_visible(event, selected_venues)]
