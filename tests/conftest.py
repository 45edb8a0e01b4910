"""Shared fixtures for calendar tests."""
from zoneinfo import ZoneInfo

import pytest

from venue_calendar.models import Event, FetchResult, Venue


class ManualHandle:
    """Handle returned by ManualScheduler.call_later."""

    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Logical clock: timers only fire when the test advances time."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def call_later(self, delay, callback):
        handle = ManualHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds):
        self.now += seconds
        due = [h for h in self.pending if h.due <= self.now]
        for handle in due:
            self.handles.remove(handle)
            handle.callback()


class FakeBackend:
    """In-memory backend returning canned FetchResults."""

    def __init__(self, venues=None, events=None, venues_error=None, events_error=None):
        self.venues = venues or []
        self.events = events or []
        self.venues_error = venues_error
        self.events_error = events_error
        self.ranges = []
        self.on_events_fetch = None

    def fetch_venues(self):
        if self.venues_error:
            return FetchResult(error=self.venues_error)
        return FetchResult(data=list(self.venues))

    def fetch_published_events_in_range(self, start, end):
        self.ranges.append((start, end))
        if self.on_events_fetch:
            self.on_events_fetch(start, end)
        if self.events_error:
            return FetchResult(error=self.events_error)
        return FetchResult(data=list(self.events))


class MemoryStorage:
    """Dict-backed key/value storage."""

    def __init__(self, data=None):
        self.data = dict(data or {})

    def get_item(self, key):
        return self.data.get(key)

    def set_item(self, key, value):
        self.data[key] = value


@pytest.fixture
def sofia():
    return ZoneInfo('Europe/Sofia')


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def sample_venues():
    return [
        Venue(id='v1', name='Hall A'),
        Venue(id='v2', name='Hall B'),
    ]


@pytest.fixture
def sample_events(sample_venues):
    hall_a, hall_b = sample_venues
    return [
        Event(
            id='e1',
            title='Evening Concert',
            starts_at='2026-03-05T18:00:00Z',
            venue_id='v1',
            venue=hall_a
        ),
        Event(
            id='e2',
            title='Morning Lecture',
            starts_at='2026-03-05T09:00:00Z',
            venue_id='v2',
            venue=hall_b
        ),
    ]


@pytest.fixture
def fake_backend(sample_venues, sample_events):
    return FakeBackend(venues=sample_venues, events=sample_events)
