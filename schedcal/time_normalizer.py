"""
Time/date normalizer for loosely formatted schedule fragments.
Turns "2:30 PM" / "July 29th" style text into datetime.time / datetime.date,
degrading to fallbacks instead of raising.
"""

import re
from datetime import date, datetime, time
from typing import Optional

from dateutil import parser as dateutil_parser

from schedcal.logging_helper import Log

_CLOCK_RE = re.compile(r'(\d{1,2}):(\d{2})\s*(AM|PM)?', re.IGNORECASE)
_ORDINAL_RE = re.compile(r'(\d{1,2})(?:st|nd|rd|th)\b', re.IGNORECASE)
_YEAR_RE = re.compile(r'\b\d{4}\b')


def to_24_hour(hour: int, meridiem: Optional[str]) -> int:
    """
    Apply the 12-hour clock rule.

    PM with hour < 12 adds 12, AM with hour 12 is midnight; anything else
    (including 24h values like 14 PM) passes through unchanged.
    """
    marker = (meridiem or "").upper()
    if marker == "PM" and hour < 12:
        return hour + 12
    if marker == "AM" and hour == 12:
        return 0
    return hour


def parse_clock_time(fragment: Optional[str]) -> Optional[time]:
    """
    Parse 'H:MM' / 'HH:MM' with optional AM/PM into a 24-hour time.

    Returns:
        time, or None if the fragment has no clock value or it is out of range
    """
    if not fragment:
        return None
    match = _CLOCK_RE.search(fragment)
    if not match:
        return None
    hour = to_24_hour(int(match.group(1)), match.group(3))
    minute = int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def parse_date_fragment(fragment: Optional[str], now: Optional[datetime] = None) -> Optional[date]:
    """
    Parse a date fragment such as 'July 29th, 2024', 'July 29th' or '2024-07-29'.

    Ordinal suffixes are stripped. When no 4-digit year is present the year
    of `now` is assumed.

    Args:
        fragment: Date text, possibly empty
        now: Reference time for the default year (defaults to datetime.now())

    Returns:
        date, or None if the fragment does not parse
    """
    if not fragment:
        return None
    now = now or datetime.now()

    cleaned = _ORDINAL_RE.sub(r'\1', fragment.strip()).strip(" ,.")
    if not cleaned:
        return None
    if not _YEAR_RE.search(cleaned):
        cleaned = f"{cleaned}, {now.year}"

    try:
        parsed = dateutil_parser.parse(cleaned, default=datetime(now.year, 1, 1))
    except (ValueError, OverflowError) as e:
        Log.info(f"Ignoring unparsable date fragment '{fragment}': {e}")
        return None
    return parsed.date()


def normalize_datetime(
    date_fragment: Optional[str],
    time_fragment: Optional[str],
    context: Optional[date] = None,
    now: Optional[datetime] = None,
) -> datetime:
    """
    Combine a date fragment and a time fragment into one local datetime.

    Date: the parsed fragment wins, then the heading context, then today.
    Time: an unparsable fragment falls back to 00:00. That fallback cannot be
    told apart from a real midnight event; it is kept for compatibility with
    schedules saved by earlier versions.

    Args:
        date_fragment: Date text from the event line (may be None)
        time_fragment: Clock text from the event line
        context: Date of the most recent heading, if any
        now: Reference time (defaults to datetime.now())

    Returns:
        Naive local datetime
    """
    now = now or datetime.now()

    event_date = parse_date_fragment(date_fragment, now) if date_fragment else None
    if event_date is None:
        event_date = context if context is not None else now.date()

    clock = parse_clock_time(time_fragment)
    if clock is None:
        Log.warn(f"Could not parse time '{time_fragment}', defaulting to midnight")
        clock = time(0, 0)

    return datetime.combine(event_date, clock)
