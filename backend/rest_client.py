"""Read-only client for the Supabase REST backend."""
import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import requests

from venue_calendar.models import Event, FetchResult, Venue

logger = logging.getLogger(__name__)

Params = Union[Dict[str, str], Sequence[Tuple[str, str]]]


class BackendClient:
    """Client for the venues and events tables exposed by PostgREST."""

    REST_PATH = '/rest/v1'
    EVENT_SELECT = '*,venue:venues(id,name)'

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: int = 30,
        max_retries: int = 3,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the backend client.

        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            api_key: Publishable (anon) API key
            timeout: HTTP request timeout in seconds (default: 30)
            max_retries: Attempts per request before giving up (default: 3)
            session: Optional requests session to reuse
        """
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = session or requests.Session()

    def fetch_venues(self) -> FetchResult:
        """
        Fetch all venues ordered by name.

        Returns:
            FetchResult with a list of Venue objects, or an error message
        """
        logger.info("Fetching venues")
        try:
            rows = self._get('venues', {'select': '*', 'order': 'name.asc'})
        except requests.RequestException as e:
            logger.error(f"Error fetching venues: {e}")
            return FetchResult(error=str(e))

        venues = self._parse_rows(rows, Venue.from_row)
        logger.info(f"Fetched {len(venues)} venues")
        return FetchResult(data=venues)

    def fetch_published_events_in_range(
        self,
        start: datetime,
        end: datetime
    ) -> FetchResult:
        """
        Fetch published events starting in ``[start, end)``.

        Args:
            start: Inclusive range start (timezone-aware)
            end: Exclusive range end (timezone-aware)

        Returns:
            FetchResult with a list of Event objects, or an error message
        """
        logger.info(f"Fetching published events from {start.isoformat()} to {end.isoformat()}")
        params = [
            ('select', self.EVENT_SELECT),
            ('status', 'eq.published'),
            ('starts_at', f"gte.{start.isoformat()}"),
            ('starts_at', f"lt.{end.isoformat()}"),
            ('order', 'starts_at.asc'),
        ]
        try:
            rows = self._get('events', params)
        except requests.RequestException as e:
            logger.error(f"Error fetching published events: {e}")
            return FetchResult(error=str(e))

        events = self._parse_rows(rows, Event.from_row)
        logger.info(f"Fetched {len(events)} published events")
        return FetchResult(data=events)

    def _headers(self) -> Dict[str, str]:
        return {
            'apikey': self.api_key,
            'Authorization': f"Bearer {self.api_key}",
            'Accept': 'application/json'
        }

    def _get(self, table: str, params: Params) -> List[Dict[str, Any]]:
        """
        GET a table with retry logic.

        Args:
            table: Table name under the REST path
            params: Query parameters (repeated keys allowed as tuples)

        Returns:
            Decoded JSON rows

        Raises:
            requests.RequestException: If all retry attempts fail
        """
        url = f"{self.base_url}{self.REST_PATH}/{table}"
        base_delay = 1  # seconds

        for attempt in range(self.max_retries):
            try:
                response = self.session.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.json()

            except requests.RequestException as e:
                if attempt < self.max_retries - 1:
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        f"Request to {table} failed (attempt {attempt + 1}/{self.max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {self.max_retries} attempts to fetch {table} failed. Last error: {e}"
                    )
                    raise

    def _parse_rows(self, rows, factory) -> list:
        """Convert rows with ``factory``, skipping rows that cannot be read."""
        items = []
        for row in rows or []:
            try:
                items.append(factory(row))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed row: {e}")
                continue
        return items
