"""Venue colour assignment."""
from typing import Dict, List

from venue_calendar.models import Venue

VENUE_COLORS = [
    '#3b82f6',  # blue
    '#10b981',  # green
    '#f59e0b',  # amber
    '#ef4444',  # red
    '#8b5cf6',  # purple
    '#ec4899',  # pink
    '#14b8a6',  # teal
    '#f97316',  # orange
]

DEFAULT_COLOR = '#6c757d'


def assign_venue_colors(venues: List[Venue]) -> Dict[str, str]:
    """
    Map each venue id to a palette colour by its position in the list.

    The palette cycles when there are more venues than colours, so the
    mapping depends only on the order of ``venues``.

    Args:
        venues: Venues in display order

    Returns:
        Dictionary mapping venue id to hex colour
    """
    return {
        venue.id: VENUE_COLORS[index % len(VENUE_COLORS)]
        for index, venue in enumerate(venues)
    }


def color_for(color_map: Dict[str, str], venue_id) -> str:
    """Colour for a venue id, falling back to the neutral colour."""
    if not venue_id:
        return DEFAULT_COLOR
    return color_map.get(venue_id, DEFAULT_COLOR)
