"""AWS Lambda handler for the venue event calendar."""
import json
import logging
import os
import re
import time
from http.cookies import CookieError, SimpleCookie
from typing import Any, Dict, Optional
from urllib.parse import unquote
from zoneinfo import ZoneInfo

from backend.rest_client import BackendClient
from render.client_script import CLIENT_ID_COOKIE
from render.html_page import render_page, render_regions
from storage.dynamodb_storage import DynamoDBStorage
from storage.file_storage import JsonFileStorage
from venue_calendar.page import CalendarPage
from venue_calendar.preferences import STORAGE_KEY, PreferenceStore
from venue_calendar.view_models import PageStatus, Rect, Size

CALENDAR_PATH = '/calendar'
TOGGLE_ALL_PATH = '/calendar/venues/toggle-all'
TOOLTIP_PATH = '/calendar/tooltip'
VENUE_PATH = re.compile(r'^/calendar/venues/(?P<venue_id>[^/]+)$')
DATE_KEY = re.compile(r'^\d{4}-\d{2}-\d{2}$')
DEFAULT_CLIENT_ID = 'anonymous'


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def _response(status_code: int, body: str, content_type: str) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': content_type},
        'body': body
    }


def _json_response(status_code: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    return _response(status_code, json.dumps(payload), 'application/json')


def _html_response(status_code: int, html: str) -> Dict[str, Any]:
    return _response(status_code, html, 'text/html; charset=utf-8')


def _client_id(event: Dict[str, Any]) -> str:
    """Client identity from the ``X-Client-Id`` header, else from the page's cookie."""
    headers = {name.lower(): value for name, value in (event.get('headers') or {}).items()}
    if headers.get('x-client-id'):
        return headers['x-client-id']

    # HTTP API payloads move cookies out of the headers
    cookie_header = '; '.join(event.get('cookies') or []) or headers.get('cookie', '')
    try:
        morsel = SimpleCookie(cookie_header).get(CLIENT_ID_COOKIE)
    except CookieError:
        morsel = None
    if morsel is not None and morsel.value:
        return morsel.value
    return DEFAULT_CLIENT_ID


def _requested_year(event: Dict[str, Any]) -> Optional[int]:
    """
    Year from the query string, or None if absent.

    Raises:
        ValueError: If the parameter is not an integer
    """
    params = event.get('queryStringParameters') or {}
    raw = params.get('year')
    if raw in (None, ''):
        return None
    return int(raw)


def _tooltip_request(event: Dict[str, Any]):
    """
    Day key, anchor box and viewport of a tooltip request.

    Raises:
        ValueError: If the date or a coordinate is malformed
    """
    params = event.get('queryStringParameters') or {}
    date_key = params.get('date') or ''
    if not DATE_KEY.match(date_key):
        raise ValueError(f"Invalid date: {date_key!r}")

    def number(name: str, default: float = 0.0) -> float:
        raw = params.get(name)
        return default if raw in (None, '') else float(raw)

    anchor = Rect(number('left'), number('top'), number('width'), number('height'))
    viewport = Size(number('vw', 1280), number('vh', 800))
    return date_key, anchor, viewport


def _parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    body = event.get('body')
    if not body:
        return {}
    data = json.loads(body)
    if not isinstance(data, dict):
        raise ValueError('Request body must be a JSON object')
    return data


def build_preferences(client_id: str) -> PreferenceStore:
    """Preference store on DynamoDB when configured, else on a local JSON file."""
    table_name = os.environ.get('PREFERENCES_TABLE')
    if table_name:
        storage = DynamoDBStorage(table_name=table_name, client_id=client_id)
        key = STORAGE_KEY
    else:
        path = os.environ.get('PREFERENCES_FILE', '/tmp/venue_calendar_preferences.json')
        storage = JsonFileStorage(path)
        # One file serves every client
        key = f"{STORAGE_KEY}:{client_id}"
    return PreferenceStore(storage, key=key)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler for the calendar endpoints.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        Response dict with statusCode, headers and body
    """
    # Read configuration from environment variables
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    supabase_url = os.environ.get('SUPABASE_URL', '')
    supabase_key = os.environ.get('SUPABASE_KEY', '')
    timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '30'))
    display_timezone = os.environ.get('DISPLAY_TIMEZONE')
    base_path = os.environ.get('CALENDAR_BASE_PATH', CALENDAR_PATH)

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    method = (event.get('httpMethod') or 'GET').upper()
    path = (event.get('path') or CALENDAR_PATH).rstrip('/') or CALENDAR_PATH

    start_time = time.time()
    logger.info(
        "Lambda execution started",
        extra={'method': method, 'path': path}
    )

    try:
        try:
            year = _requested_year(event)
        except ValueError:
            return _json_response(400, {'message': 'Invalid year'})

        viewport = None
        venue_match = VENUE_PATH.match(path)
        if method == 'GET' and path == CALENDAR_PATH:
            action = 'view'
        elif method == 'GET' and path == TOOLTIP_PATH:
            action = 'tooltip'
            try:
                date_key, anchor, viewport = _tooltip_request(event)
            except ValueError as e:
                return _json_response(400, {'message': str(e)})
        elif method == 'POST' and path == TOGGLE_ALL_PATH:
            action = 'toggle_all'
        elif method == 'POST' and venue_match:
            action = 'toggle_venue'
            venue_id = unquote(venue_match.group('venue_id'))
            try:
                checked = bool(_parse_body(event).get('checked', False))
            except ValueError:
                return _json_response(400, {'message': 'Invalid request body'})
        else:
            return _json_response(404, {'message': 'Not found'})

        if not supabase_url or not supabase_key:
            logger.warning("SUPABASE_URL or SUPABASE_KEY is not set")

        client_id = _client_id(event)
        tz = ZoneInfo(display_timezone) if display_timezone else None
        client = BackendClient(supabase_url, supabase_key, timeout=timeout_seconds)
        page = CalendarPage(
            client,
            build_preferences(client_id),
            tz=tz,
            viewport=viewport
        )

        if year is not None and year not in page.year_options:
            return _json_response(400, {'message': f"Year {year} is not available"})

        if year is not None and year != page.current_year:
            page.select_year(year)
        else:
            page.start()

        if action == 'view':
            html = render_page(page, base_path)
            logger.info(
                "Lambda execution completed successfully",
                extra={
                    'duration_seconds': round(time.time() - start_time, 2),
                    'status': page.status.value
                }
            )
            return _html_response(200, html)

        if page.status is not PageStatus.READY:
            return _json_response(503, {
                'message': page.error_message,
                'year': page.current_year
            })

        # Follow-up requests act on the selection as the client last saved it
        page.resume_selection()

        if action == 'tooltip':
            regions = page.show_tooltip(date_key, anchor)
        elif action == 'toggle_all':
            regions = page.toggle_all()
        else:
            try:
                regions = page.toggle_venue(venue_id, checked)
            except ValueError as e:
                return _json_response(404, {'message': str(e)})

        logger.info(
            "Lambda execution completed successfully",
            extra={
                'duration_seconds': round(time.time() - start_time, 2),
                'action': action,
                'selected_venues': len(page.selected_venues)
            }
        )
        return _json_response(200, {
            'year': page.current_year,
            'selectedVenues': sorted(page.selected_venues),
            'regions': render_regions(page, regions)
        })

    except Exception as e:
        duration = time.time() - start_time

        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )

        return _json_response(500, {
            'message': 'Calendar request failed',
            'error': str(e),
            'error_type': type(e).__name__,
            'duration_seconds': round(duration, 2)
        })
