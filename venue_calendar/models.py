"""Data models for the venue calendar."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Venue:
    """Venue as returned by the backend."""
    id: str
    name: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Venue':
        """Build a Venue from a backend row."""
        return cls(id=str(row['id']), name=row.get('name') or '')


@dataclass
class Event:
    """Published event as returned by the backend."""
    id: str
    title: str
    starts_at: str
    description: Optional[str] = None
    venue_id: Optional[str] = None
    venue: Optional[Venue] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Event':
        """
        Build an Event from a backend row.

        The embedded ``venue`` object is optional and may be null.

        Args:
            row: Row dictionary from the events endpoint

        Returns:
            Event object
        """
        venue_row = row.get('venue')
        venue_id = row.get('venue_id')
        return cls(
            id=str(row['id']),
            title=row.get('title') or '',
            starts_at=row.get('starts_at') or '',
            description=row.get('description'),
            venue_id=str(venue_id) if venue_id else None,
            venue=Venue.from_row(venue_row) if venue_row else None
        )


@dataclass
class FetchResult:
    """Result of a backend read."""
    data: list = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LoadResult:
    """Outcome of one calendar load."""
    year: int
    applied: bool
    venues_count: int = 0
    events_count: int = 0
    errors: List[str] = field(default_factory=list)
