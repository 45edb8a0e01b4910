"""Persisted venue filter selection."""
import json
import logging
from typing import Iterable, Optional, Set

logger = logging.getLogger(__name__)

STORAGE_KEY = 'calendar_selected_venues'
SCHEMA_VERSION = 1


class PreferenceStore:
    """
    Read/write the selected venue set through a key/value storage backend.

    The storage backend only needs ``get_item(key)`` and ``set_item(key, value)``.
    Every storage failure is logged and absorbed; the caller's in-memory
    selection stays authoritative.
    """

    def __init__(self, storage, key: str = STORAGE_KEY):
        """
        Initialize the preference store.

        Args:
            storage: Key/value backend (see storage/)
            key: Storage key holding the selection
        """
        self.storage = storage
        self.key = key

    def load(
        self,
        all_venue_ids: Iterable[str],
        venue_ids_with_events: Iterable[str]
    ) -> Set[str]:
        """
        Determine the initial venue selection.

        Persisted ids are kept only if the venue has events in the period.
        When nothing persisted survives, every venue with events is
        selected, or every venue if no event has one.

        Args:
            all_venue_ids: Ids of all known venues
            venue_ids_with_events: Ids of venues with events in the period

        Returns:
            Selected venue ids
        """
        with_events = set(venue_ids_with_events)

        persisted = self._read()
        if persisted is not None:
            selected = persisted & with_events
            if selected:
                logger.debug(f"Restored {len(selected)} persisted venue selections")
                return selected
            logger.info("Persisted venue selection has no events in period; using defaults")

        if with_events:
            return with_events
        return set(all_venue_ids)

    def save(self, selected_venues: Iterable[str]) -> bool:
        """
        Persist the selection.

        Args:
            selected_venues: Venue ids currently selected

        Returns:
            True if written, False if the write failed
        """
        try:
            payload = {'version': SCHEMA_VERSION, 'venueIds': sorted(selected_venues)}
            self.storage.set_item(self.key, json.dumps(payload))
            return True
        except Exception as e:
            logger.error(f"Error saving venue selections: {e}")
            return False

    def read_selection(self) -> Optional[Set[str]]:
        """
        The persisted selection exactly as stored, without the load policy.

        Returns:
            Stored venue ids (possibly empty), or None if nothing usable is stored
        """
        return self._read()

    def _read(self) -> Optional[Set[str]]:
        try:
            raw = self.storage.get_item(self.key)
        except Exception as e:
            logger.error(f"Error loading venue selections: {e}")
            return None

        if raw is None:
            return None

        try:
            return self._decode(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed venue selections: {e}")
            return None

    def _decode(self, raw: str) -> Set[str]:
        data = json.loads(raw)

        # Unversioned payloads are a bare list of ids
        if isinstance(data, list):
            ids = data
        elif isinstance(data, dict):
            version = data.get('version')
            if version != SCHEMA_VERSION:
                raise ValueError(f"unsupported version {version!r}")
            ids = data.get('venueIds')
            if not isinstance(ids, list):
                raise ValueError("venueIds is not a list")
        else:
            raise ValueError(f"unexpected payload type {type(data).__name__}")

        return {str(venue_id) for venue_id in ids}
