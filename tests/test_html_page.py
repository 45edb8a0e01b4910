"""Unit tests for the HTML painter."""
from datetime import date

import pytest
from bs4 import BeautifulSoup

from conftest import FakeBackend
from render.html_page import REGION_ELEMENT_IDS, render_page, render_regions
from venue_calendar.models import Event, Venue
from venue_calendar.page import LOAD_ERROR_MESSAGE, CalendarPage
from venue_calendar.preferences import PreferenceStore
from venue_calendar.view_models import Rect, Region


@pytest.fixture
def page(fake_backend, memory_storage, scheduler, sofia):
    calendar_page = CalendarPage(
        fake_backend,
        PreferenceStore(memory_storage),
        scheduler=scheduler,
        tz=sofia,
        today=date(2026, 10, 19)
    )
    calendar_page.start()
    return calendar_page


def _parse(html):
    return BeautifulSoup(html, 'html.parser')


class TestRenderPage:
    """Test cases for the full page."""

    def test_year_selector(self, page):
        """Test the year options and the selected year."""
        soup = _parse(render_page(page))
        options = soup.select('#year-selector option')

        assert [o['value'] for o in options] == ['2025', '2026', '2027', '2028']
        assert soup.select_one('#year-selector option[selected]')['value'] == '2026'

    def test_grid_and_panels_when_ready(self, page):
        """Test visibility of grid, spinner and error panel."""
        soup = _parse(render_page(page))

        assert 'none' not in soup.select_one('#calendar-root')['style']
        assert 'none' in soup.select_one('#calendar-loading')['style']
        assert 'none' in soup.select_one('#calendar-error')['style']
        assert len(soup.select('.month-container')) == 12

    def test_day_cell_markup(self, page):
        """Test the interactive March 5 cell."""
        soup = _parse(render_page(page))
        cell = soup.select_one('button[data-date="2026-03-05"]')

        assert cell['aria-label'] == '5 - 2 events'
        assert len(cell.select('.event-indicator')) == 2
        assert cell.select_one('.event-overflow') is None
        assert len(soup.select('.calendar-day-with-events')) == 1

    def test_weekday_header(self, page):
        """Test each month starts with the weekday header."""
        soup = _parse(render_page(page))
        first_month = soup.select('.calendar-grid')[0]

        assert [d.get_text() for d in first_month.select('.calendar-weekday')] == [
            'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun'
        ]

    def test_legend(self, page):
        """Test legend rows and toggle label."""
        soup = _parse(render_page(page))

        assert soup.select_one('#toggle-all-venues').get_text() == 'Unselect All'
        checkboxes = soup.select('.legend-checkbox')
        assert [c['data-venue-id'] for c in checkboxes] == ['v1', 'v2']
        assert all(c.has_attr('checked') for c in checkboxes)

    def test_error_page(self, memory_storage, scheduler, sofia):
        """Test the error panel replaces grid and spinner."""
        failing = CalendarPage(
            FakeBackend(venues_error='boom'),
            PreferenceStore(memory_storage),
            scheduler=scheduler,
            tz=sofia,
            today=date(2026, 10, 19)
        )
        failing.start()
        soup = _parse(render_page(failing))

        error = soup.select_one('#calendar-error')
        assert error.get_text() == LOAD_ERROR_MESSAGE
        assert 'block' in error['style']
        assert 'none' in soup.select_one('#calendar-loading')['style']
        assert 'none' in soup.select_one('#calendar-root')['style']
        assert soup.select('.month-container') == []

    def test_text_is_escaped(self, memory_storage, scheduler, sofia):
        """Test that venue names cannot inject markup."""
        venue = Venue(id='v1', name='<script>alert(1)</script>')
        backend = FakeBackend(
            venues=[venue],
            events=[Event(id='e1', title='Show', starts_at='2026-03-05T18:00:00Z',
                          venue_id='v1', venue=venue)]
        )
        unsafe = CalendarPage(backend, PreferenceStore(memory_storage),
                              scheduler=scheduler, tz=sofia, today=date(2026, 10, 19))
        unsafe.start()
        html = render_page(unsafe)

        assert '<script>' not in html
        assert '&lt;script&gt;' in html


class TestRenderTooltip:
    """Test cases for the tooltip element."""

    def test_hidden_by_default(self, page):
        """Test the tooltip starts hidden."""
        soup = _parse(render_page(page))
        tooltip = soup.select_one('#event-tooltip')

        assert 'none' in tooltip['style']
        assert tooltip['data-current-date'] == ''

    def test_visible_tooltip(self, page):
        """Test tooltip content and position after hover."""
        page.tooltip.pointer_enter('2026-03-05', Rect(500, 400, 40, 40))
        fragments = render_regions(page, {Region.TOOLTIP})
        tooltip = _parse(fragments['tooltip']).select_one('#event-tooltip')

        assert tooltip['data-current-date'] == '2026-03-05'
        assert 'display: block' in tooltip['style']
        links = [a['href'] for a in tooltip.select('.tooltip-event-link')]
        assert links == ['/event-details.html?id=e1', '/event-details.html?id=e2']
        assert tooltip.select_one('.tooltip-more') is None


class TestRenderRegions:
    """Test cases for partial repaints."""

    def test_grid_only(self, page):
        """Test a venue toggle repaints only the grid."""
        regions = page.toggle_venue('v2', False)
        fragments = render_regions(page, regions)

        assert list(fragments) == ['grid']
        cell = _parse(fragments['grid']).select_one('button[data-date="2026-03-05"]')
        assert len(cell.select('.event-indicator')) == 1

    def test_legend_and_grid(self, page):
        """Test toggle-all repaints legend and grid."""
        regions = page.toggle_all()
        fragments = render_regions(page, regions)

        assert set(fragments) == {'legend', 'grid'}
        legend = _parse(fragments['legend'])
        assert legend.select_one('#toggle-all-venues').get_text() == 'Select All'
        assert not any(c.has_attr('checked') for c in legend.select('.legend-checkbox'))
        assert _parse(fragments['grid']).select('.calendar-day-with-events') == []

    def test_empty_legend_message(self, memory_storage, scheduler, sofia):
        """Test the legend when no venues exist."""
        empty = CalendarPage(FakeBackend(), PreferenceStore(memory_storage),
                             scheduler=scheduler, tz=sofia, today=date(2026, 10, 19))
        empty.start()
        fragments = render_regions(empty, {Region.LEGEND})

        assert 'No venues available' in fragments['legend']


class TestPageWiring:
    """Test cases for the form and script that drive the page."""

    def test_year_selector_in_get_form(self, page):
        """Test that the year selector submits to the calendar route."""
        soup = _parse(render_page(page, base_path='/prod/calendar'))
        form = soup.select_one('#year-form')

        assert form['method'] == 'get'
        assert form['action'] == '/prod/calendar'
        assert form.select_one('#year-selector')['name'] == 'year'

    def test_main_carries_client_config(self, page):
        """Test the attributes the script reads."""
        main = _parse(render_page(page)).select_one('main')

        assert main['data-calendar-base'] == '/calendar'
        assert main['data-year'] == '2026'

    def test_script_targets_region_elements(self, page):
        """Test that the script knows every region element id."""
        soup = _parse(render_page(page))
        script = soup.select_one('script').get_text()

        for element_id in REGION_ELEMENT_IDS.values():
            assert soup.find(id=element_id) is not None
            assert element_id in script
        assert '/venues/toggle-all' in script
        assert "'/tooltip'" in script
        assert 'var HIDE_DELAY_MS = 300;' in script
        assert 'var TOOLTIP_HIDE_DELAY_MS = 200;' in script
        assert '__' not in script

    def test_script_not_escaped(self, page):
        """Test that script source is emitted verbatim."""
        html = render_page(page)
        assert "classList.contains('legend-checkbox')" in html
        assert '&amp;' not in html.split('<script>')[1]
