"""Venue legend and filter selection."""
import logging
from typing import Dict, Iterable, List, Set

from venue_calendar.colors import color_for
from venue_calendar.models import Venue
from venue_calendar.preferences import PreferenceStore
from venue_calendar.view_models import LegendEntry, LegendView, Region

logger = logging.getLogger(__name__)

SELECT_ALL_LABEL = 'Select All'
UNSELECT_ALL_LABEL = 'Unselect All'


class LegendController:
    """Owns the selected venue set and the legend built from it."""

    def __init__(self, preferences: PreferenceStore):
        self.preferences = preferences
        self.venues: List[Venue] = []
        self.color_map: Dict[str, str] = {}
        self.selected_venues: Set[str] = set()

    def reset(
        self,
        venues: List[Venue],
        color_map: Dict[str, str],
        venue_ids_with_events: Iterable[str]
    ) -> None:
        """
        Replace venues after a load and restore the persisted selection.

        Args:
            venues: All venues
            color_map: Venue id to colour mapping for ``venues``
            venue_ids_with_events: Venues with events in the loaded period
        """
        self.venues = list(venues)
        self.color_map = color_map
        self.selected_venues = self.preferences.load(
            [venue.id for venue in self.venues],
            venue_ids_with_events
        )

    def restore_saved(self) -> bool:
        """
        Replace the selection with the stored one, as the user left it.

        Unlike ``reset`` no fallback applies: a cleared selection stays
        cleared and venues without events stay selected. Ids of venues that
        no longer exist are dropped.

        Returns:
            True if a stored selection was applied
        """
        saved = self.preferences.read_selection()
        if saved is None:
            return False
        self.selected_venues = saved & self.all_venue_ids
        return True

    def clear(self) -> None:
        """Forget venues and selection without touching persisted state."""
        self.venues = []
        self.color_map = {}
        self.selected_venues = set()

    @property
    def all_venue_ids(self) -> Set[str]:
        return {venue.id for venue in self.venues}

    @property
    def all_selected(self) -> bool:
        return len(self.selected_venues) == len(self.venues)

    def view(self) -> LegendView:
        """Legend rows in venue order plus the toggle-all label."""
        entries = [
            LegendEntry(
                venue_id=venue.id,
                name=venue.name,
                color=color_for(self.color_map, venue.id),
                checked=venue.id in self.selected_venues
            )
            for venue in self.venues
        ]
        label = UNSELECT_ALL_LABEL if self.all_selected else SELECT_ALL_LABEL
        return LegendView(entries=entries, toggle_label=label)

    def toggle_venue(self, venue_id: str, checked: bool) -> Set[Region]:
        """
        Add or remove a single venue.

        Args:
            venue_id: Venue to toggle
            checked: New checkbox state

        Returns:
            Regions to repaint (the grid only)

        Raises:
            ValueError: If the venue is not known
        """
        if venue_id not in self.all_venue_ids:
            raise ValueError(f"Unknown venue: {venue_id}")

        if checked:
            self.selected_venues.add(venue_id)
        else:
            self.selected_venues.discard(venue_id)

        self.preferences.save(self.selected_venues)
        return {Region.GRID}

    def toggle_all(self) -> Set[Region]:
        """
        Deselect every venue if all are selected, otherwise select all.

        Returns:
            Regions to repaint (legend and grid)
        """
        if self.all_selected:
            self.selected_venues = set()
        else:
            self.selected_venues = self.all_venue_ids

        logger.info(f"Toggled all venues; {len(self.selected_venues)} selected")
        self.preferences.save(self.selected_venues)
        return {Region.LEGEND, Region.GRID}
