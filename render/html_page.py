"""Paint calendar view models as HTML."""
import logging
from typing import Dict, Iterable, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from render.client_script import build_client_script
from venue_calendar.grid import WEEKDAY_HEADERS
from venue_calendar.tooltip import TooltipController
from venue_calendar.view_models import (
    DayCell, LegendView, MonthGrid, PageStatus, Region
)

logger = logging.getLogger(__name__)

PAGE_TITLE = 'Event Calendar'
DEFAULT_BASE_PATH = '/calendar'
NO_VENUES_TEXT = 'No venues available'
HIDDEN = 'display: none;'
SHOWN = 'display: block;'

REGION_ELEMENT_IDS = {
    Region.LEGEND.value: 'calendar-legend',
    Region.GRID.value: 'calendar-root',
    Region.TOOLTIP.value: 'event-tooltip'
}


def _tag(soup: BeautifulSoup, name: str, attrs: Optional[Dict[str, str]] = None,
         text: Optional[str] = None) -> Tag:
    tag = soup.new_tag(name, attrs=attrs or {})
    if text is not None:
        tag.string = text
    return tag


def _dot(soup: BeautifulSoup, css_class: str, color: str) -> Tag:
    return _tag(soup, 'span', {'class': css_class, 'style': f"background-color: {color};"})


def render_year_selector(soup: BeautifulSoup, years: Iterable[int], current_year: int,
                         action: str = DEFAULT_BASE_PATH) -> Tag:
    """Year ``select`` inside a GET form that reloads the page for the chosen year."""
    form = _tag(soup, 'form', {'id': 'year-form', 'method': 'get', 'action': action})
    select = _tag(soup, 'select', {'id': 'year-selector', 'name': 'year', 'class': 'form-select'})
    for year in years:
        attrs = {'value': str(year)}
        if year == current_year:
            attrs['selected'] = 'selected'
        select.append(_tag(soup, 'option', attrs, str(year)))
    form.append(select)

    fallback = _tag(soup, 'noscript')
    fallback.append(_tag(soup, 'button', {'type': 'submit', 'class': 'btn btn-sm btn-primary'},
                         'Show'))
    form.append(fallback)
    return form


def render_legend(soup: BeautifulSoup, legend: LegendView) -> Tag:
    """
    Venue checklist with the toggle-all button.

    Args:
        soup: Document used to create tags
        legend: Legend view model

    Returns:
        The ``#calendar-legend`` element
    """
    container = _tag(soup, 'div', {'id': 'calendar-legend'})

    if legend.empty:
        container.append(_tag(soup, 'p', {'class': 'text-muted small'}, NO_VENUES_TEXT))
        return container

    wrapper = _tag(soup, 'div', {'class': 'legend-container'})
    header = _tag(soup, 'div', {'class': 'legend-header'})
    header.append(_tag(soup, 'strong', {'class': 'legend-title'}, 'Venues:'))
    header.append(_tag(
        soup,
        'button',
        {'id': 'toggle-all-venues', 'class': 'btn btn-sm btn-outline-secondary legend-toggle-btn'},
        legend.toggle_label
    ))
    wrapper.append(header)

    items = _tag(soup, 'div', {'class': 'legend-items'})
    for entry in legend.entries:
        label = _tag(soup, 'label', {'class': 'legend-item legend-item-checkbox'})
        checkbox_attrs = {
            'type': 'checkbox',
            'class': 'legend-checkbox',
            'data-venue-id': entry.venue_id
        }
        if entry.checked:
            checkbox_attrs['checked'] = 'checked'
        label.append(_tag(soup, 'input', checkbox_attrs))
        label.append(_dot(soup, 'legend-dot', entry.color))
        label.append(_tag(soup, 'span', {'class': 'legend-label'}, entry.name))
        items.append(label)
    wrapper.append(items)

    container.append(wrapper)
    return container


def render_day_cell(soup: BeautifulSoup, cell: Optional[DayCell]) -> Tag:
    if cell is None:
        return _tag(soup, 'div', {'class': 'calendar-day calendar-day-empty'})

    if not cell.interactive:
        plain = _tag(soup, 'div', {'class': 'calendar-day'})
        plain.append(_tag(soup, 'span', {'class': 'calendar-day-number'}, str(cell.day)))
        return plain

    button = _tag(soup, 'button', {
        'class': 'calendar-day calendar-day-with-events',
        'data-date': cell.date_key,
        'aria-label': cell.aria_label,
        'tabindex': '0'
    })
    button.append(_tag(soup, 'span', {'class': 'calendar-day-number'}, str(cell.day)))
    indicators = _tag(soup, 'div', {'class': 'event-indicators'})
    for color in cell.colors:
        indicators.append(_dot(soup, 'event-indicator', color))
    if cell.overflow:
        indicators.append(_tag(soup, 'span', {'class': 'event-overflow'}, f"+{cell.overflow}"))
    button.append(indicators)
    return button


def render_month(soup: BeautifulSoup, month: MonthGrid) -> Tag:
    column = _tag(soup, 'div', {'class': 'col-12 col-md-6 col-lg-4'})
    container = _tag(soup, 'div', {'class': 'month-container'})
    container.append(_tag(soup, 'h5', {'class': 'month-title'}, month.title))

    grid = _tag(soup, 'div', {'class': 'calendar-grid'})
    for weekday in WEEKDAY_HEADERS:
        grid.append(_tag(soup, 'div', {'class': 'calendar-weekday'}, weekday))
    for cell in month.cells:
        grid.append(render_day_cell(soup, cell))

    container.append(grid)
    column.append(container)
    return column


def render_grid(soup: BeautifulSoup, months: Optional[List[MonthGrid]]) -> Tag:
    """The ``#calendar-root`` element; hidden when there is no grid to show."""
    root = _tag(soup, 'div', {'id': 'calendar-root', 'style': SHOWN if months else HIDDEN})
    if not months:
        return root

    row = _tag(soup, 'div', {'class': 'row g-4'})
    for month in months:
        row.append(render_month(soup, month))
    root.append(row)
    return root


def render_tooltip(soup: BeautifulSoup, controller: TooltipController) -> Tag:
    """
    The ``#event-tooltip`` element in its current state.

    Args:
        soup: Document used to create tags
        controller: Tooltip controller

    Returns:
        Tooltip element, hidden unless the controller is visible
    """
    state = controller.state
    attrs = {
        'id': 'event-tooltip',
        'class': 'event-tooltip',
        'role': 'tooltip',
        'data-current-date': state.anchor_date_key or ''
    }
    if state.visible and controller.position is not None:
        left, top = controller.position
        attrs['style'] = f"display: block; position: fixed; left: {left:g}px; top: {top:g}px;"
    else:
        attrs['style'] = HIDDEN
    tooltip = _tag(soup, 'div', attrs)

    content = _tag(soup, 'div', {'class': 'event-tooltip-content'})
    if state.visible and controller.content is not None:
        for item in controller.content.items:
            event_div = _tag(soup, 'div', {'class': 'tooltip-event'})

            header = _tag(soup, 'div', {'class': 'tooltip-event-header'})
            header.append(_dot(soup, 'tooltip-event-dot', item.color))
            header.append(_tag(soup, 'strong', text=item.title))
            event_div.append(header)

            details = _tag(soup, 'div', {'class': 'tooltip-event-details'})
            details.append(_tag(soup, 'small', {'class': 'text-muted'},
                                f"{item.time} • {item.venue_name}"))
            event_div.append(details)

            event_div.append(_tag(soup, 'a', {'href': item.link, 'class': 'tooltip-event-link'},
                                  'View details →'))
            content.append(event_div)

        if controller.content.more_count:
            content.append(_tag(soup, 'p', {'class': 'tooltip-more text-muted small mb-0'},
                                controller.content.more_label))
    tooltip.append(content)
    return tooltip


def render_status_panels(soup: BeautifulSoup, status: PageStatus,
                         error_message: Optional[str]) -> List[Tag]:
    loading = _tag(soup, 'div', {
        'id': 'calendar-loading',
        'class': 'text-center',
        'style': SHOWN if status is PageStatus.LOADING else HIDDEN
    })
    loading.append(_tag(soup, 'div', {'class': 'spinner-border', 'role': 'status'}))

    error = _tag(soup, 'div', {
        'id': 'calendar-error',
        'class': 'alert alert-danger',
        'role': 'alert',
        'style': SHOWN if status is PageStatus.ERROR else HIDDEN
    }, error_message or '')
    return [loading, error]


def render_page(page, base_path: str = DEFAULT_BASE_PATH) -> str:
    """
    Full HTML document for a calendar page.

    Args:
        page: CalendarPage instance
        base_path: Path the calendar endpoints are served under

    Returns:
        HTML string
    """
    soup = BeautifulSoup('<!DOCTYPE html><html lang="en"><head></head><body></body></html>',
                         'html.parser')
    soup.head.append(_tag(soup, 'meta', {'charset': 'utf-8'}))
    soup.head.append(_tag(soup, 'title', text=PAGE_TITLE))

    main = _tag(soup, 'main', {
        'class': 'container py-4',
        'data-calendar-base': base_path,
        'data-year': str(page.current_year)
    })
    header = _tag(soup, 'div', {'class': 'calendar-header'})
    header.append(_tag(soup, 'h1', {'class': 'h3'}, PAGE_TITLE))
    header.append(render_year_selector(soup, page.year_options, page.current_year, base_path))
    main.append(header)

    ready = page.status is PageStatus.READY
    if ready:
        main.append(render_legend(soup, page.legend_view()))
    else:
        main.append(_tag(soup, 'div', {'id': 'calendar-legend'}))

    for panel in render_status_panels(soup, page.status, page.error_message):
        main.append(panel)
    main.append(render_grid(soup, page.grid if ready else None))
    main.append(render_tooltip(soup, page.tooltip))

    soup.body.append(main)
    soup.body.append(_tag(soup, 'script', text=build_client_script(REGION_ELEMENT_IDS)))
    return str(soup)


def render_regions(page, regions: Iterable[Region]) -> Dict[str, str]:
    """
    HTML fragments for the regions an action asked to repaint.

    Returns:
        Dictionary mapping region name to its HTML
    """
    soup = BeautifulSoup('', 'html.parser')
    fragments = {}
    for region in regions:
        if region is Region.LEGEND:
            tag = render_legend(soup, page.legend_view())
        elif region is Region.GRID:
            tag = render_grid(soup, page.grid)
        else:
            tag = render_tooltip(soup, page.tooltip)
        fragments[region.value] = str(tag)
    logger.debug(f"Rendered regions: {sorted(fragments)}")
    return fragments
