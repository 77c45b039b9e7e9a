"""
ICS generator for exporting extracted events as an iCalendar (.ics) file.
Times are written as floating local times (no TZID), matching how events are
parsed.
"""

import hashlib
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from schedcal.calendar_connector import build_details, resolve_end_time
from schedcal.event_models import StructuredEvent
from schedcal.logging_helper import Log

ICS_MAX_LINE_OCTETS = 75


def _escape_ical_text(text: Optional[str]) -> str:
    """
    Escape text for iCalendar format (RFC5545).
    Escapes backslashes, semicolons, commas and newlines.
    """
    if text is None:
        return ""
    text = text.replace('\\', '\\\\')
    text = text.replace(';', '\\;')
    text = text.replace(',', '\\,')
    text = text.replace('\r', '')
    return text.replace('\n', '\\n')


def _fold_line(line: str) -> str:
    """
    Fold a content line at 75 octets; continuation lines start with a space.
    """
    parts: List[str] = []
    current = ""
    for char in line:
        candidate = current + char
        if len(candidate.encode('utf-8')) > ICS_MAX_LINE_OCTETS and current:
            parts.append(current)
            current = " " + char
        else:
            current = candidate
    parts.append(current)
    return '\r\n'.join(parts)


def _format_ical_datetime(dt: datetime) -> str:
    """Floating local datetime (YYYYMMDDTHHMMSS)."""
    return dt.strftime('%Y%m%dT%H%M%S')


def _event_uid(event: StructuredEvent) -> str:
    digest = hashlib.md5(f"{event.id}_{event.title}".encode('utf-8')).hexdigest()
    return f"{digest}@schedcal.local"


def build_ics(events: Iterable[StructuredEvent], stamp: Optional[datetime] = None) -> str:
    """
    Build an ICS document with one VEVENT per event that has a valid start.

    Args:
        events: Events to export
        stamp: DTSTAMP value (defaults to now)

    Returns:
        ICS text with CRLF line endings
    """
    stamp = stamp or datetime.now()
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//ScheduleCal//schedcal//EN",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]

    exported = 0
    for event in events:
        end = resolve_end_time(event)
        if end is None:
            Log.warn(f"Skipping event without valid start in ICS export: {event.title}")
            continue
        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_event_uid(event)}")
        lines.append(f"DTSTAMP:{_format_ical_datetime(stamp)}")
        lines.append(f"DTSTART:{_format_ical_datetime(event.start_datetime)}")
        lines.append(f"DTEND:{_format_ical_datetime(end)}")
        lines.append(f"SUMMARY:{_escape_ical_text(event.title)}")
        lines.append(f"DESCRIPTION:{_escape_ical_text(build_details(event))}")
        if event.location:
            lines.append(f"LOCATION:{_escape_ical_text(event.location)}")
        lines.append("END:VEVENT")
        exported += 1

    lines.append("END:VCALENDAR")
    Log.kv({"stage": "ics", "result": "built", "events": exported})
    return '\r\n'.join(_fold_line(line) for line in lines) + '\r\n'


def write_ics(events: Iterable[StructuredEvent], path: Path) -> Optional[Path]:
    """
    Write events to an .ics file.

    Returns:
        Path written, or None if writing failed
    """
    Log.section("ICS Export")
    try:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline='' keeps the CRLF endings intact on every platform
        with open(path, 'w', encoding='utf-8', newline='') as ics_file:
            ics_file.write(build_ics(events))
    except OSError as e:
        Log.error(f"ICS export failed: {e}")
        Log.kv({"stage": "ics", "result": "failed", "error": str(e)})
        return None

    Log.info(f"ICS file written: {path}")
    Log.kv({"stage": "ics", "result": "success", "ics_path": str(path)})
    return path
