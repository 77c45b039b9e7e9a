"""
Calendar connector for handing extracted events to an external calendar.
Builds "add event" template URLs (Google Calendar by default) and opens them
in the user's browser.
"""

import threading
import webbrowser
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import quote

from schedcal.event_models import StructuredEvent
from schedcal.logging_helper import Log
from schedcal.settings_manager import get_calendar_base_url

DEFAULT_EVENT_DURATION = timedelta(hours=1)
OPEN_TIMEOUT_SECONDS = 10
CALENDAR_DATETIME_FORMAT = "%Y%m%dT%H%M%S"


def resolve_end_time(event: StructuredEvent) -> Optional[datetime]:
    """
    End of the event: end_datetime when it is valid and after the start,
    otherwise start + 1 hour. None if the start itself is unusable.
    """
    if not event.has_valid_start():
        return None
    end = event.end_datetime
    if isinstance(end, datetime) and end > event.start_datetime:
        return end
    return event.start_datetime + DEFAULT_EVENT_DURATION


def build_details(event: StructuredEvent) -> str:
    """Description text with the source line appended for traceability."""
    original = f"(Originally: {event.original_text})"
    if event.description:
        return f"{event.description} {original}"
    return original


def _format_calendar_datetime(dt: datetime) -> str:
    """Compact local timestamp, e.g. 20240729T090000."""
    return dt.strftime(CALENDAR_DATETIME_FORMAT)


def build_calendar_url(event: StructuredEvent, base_url: Optional[str] = None) -> str:
    """
    Generate an "add event" calendar URL with pre-filled event details.

    If the start time does not validate, the dates segment is left out so the
    link still opens an undated event.

    Args:
        event: StructuredEvent to export
        base_url: Template endpoint; defaults to the configured calendar_base_url

    Returns:
        URL string
    """
    base = base_url or get_calendar_base_url()
    url = f"{base}?action=TEMPLATE&text={quote(event.title, safe='')}"

    end = resolve_end_time(event)
    if end is not None:
        start_str = _format_calendar_datetime(event.start_datetime)
        end_str = _format_calendar_datetime(end)
        url += f"&dates={start_str}/{end_str}"
    else:
        Log.warn(f"Event '{event.title}' has no valid start time; omitting dates from calendar URL")

    url += f"&details={quote(build_details(event), safe='')}"

    if event.location:
        url += f"&location={quote(event.location, safe='')}"

    Log.kv({"stage": "calendar", "action": "url_built", "event_title": event.title, "dated": end is not None})
    return url


def _open_url(url: str):
    try:
        opened = webbrowser.open(url, new=2)
    except webbrowser.Error as e:
        Log.warn(f"Error opening calendar URL: {e}")
        return
    if opened:
        Log.info(f"Opened calendar URL in browser: {url[:100]}...")
        Log.kv({"stage": "calendar", "action": "url_opened"})
    else:
        Log.warn("No browser available to open calendar URL")


def open_calendar_url(
    event: StructuredEvent,
    base_url: Optional[str] = None,
    wait: bool = False,
) -> str:
    """
    Build the calendar URL for an event and open it in the browser on a
    background thread.

    Args:
        event: Event to open
        base_url: Calendar endpoint (defaults to the configured one)
        wait: Block until the browser call returns, for short-lived callers

    Returns:
        The URL that was opened
    """
    Log.section("Calendar Connector")
    url = build_calendar_url(event, base_url)
    opener = threading.Thread(
        target=_open_url,
        args=(url,),
        daemon=True,
        name="CalendarUrlOpener",
    )
    opener.start()
    if wait:
        opener.join(timeout=OPEN_TIMEOUT_SECONDS)
    return url
