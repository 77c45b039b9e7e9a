"""
Line classifier for generated schedule markdown.

A line can be a date heading ("### Monday, July 29th, 2024"), an event line,
both, or neither. Event lines are recognised by an ordered list of pure
matchers; the first one that matches wins:

    1. dated_time_ampm   [YYYY-MM-DD] H:MM [AM|PM] - Title
    2. dated_time_24h    [YYYY-MM-DD] H:MM - Title
    3. task_or_event     Task:/Event: Title [@ H:MM [AM|PM]] [on Month Day[, YYYY]]

Matching is purely lexical. Changing the order of EVENT_LINE_MATCHERS
changes which fragments are picked up from ambiguous lines.
"""

import re
from datetime import date, datetime
from typing import Callable, NamedTuple, Optional, Tuple

from schedcal.time_normalizer import parse_date_fragment

_MONTH = (
    r'(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?'
    r'|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)'
)
_WEEKDAY = r'(?:mon|tues?|wed(?:nes)?|thu(?:rs?)?|fri|sat(?:ur)?|sun)(?:day)?'

HEADING_RE = re.compile(
    r'^[#*_\s]*'
    r'(?:' + _WEEKDAY + r'\.?,?\s+)?'
    r'(?P<date>' + _MONTH + r'\.?\s+\d{1,2}(?:st|nd|rd|th)?(?:,?\s*\d{4})?)\b',
    re.IGNORECASE,
)

_DATED_TIME_AMPM_RE = re.compile(
    r'^(?:(\d{4}-\d{2}-\d{2})?\s*(\d{1,2}:\d{2}\s*(?:AM|PM)?)\s*-\s*)(.+)$',
    re.IGNORECASE,
)
_DATED_TIME_24H_RE = re.compile(
    r'^(?:(\d{4}-\d{2}-\d{2})?\s*(\d{1,2}:\d{2})\s*-\s*)(.+)$',
)
_TASK_OR_EVENT_RE = re.compile(
    r'^(?:Task|Event):\s*(.+?)'
    r'(?:\s*@\s*(\d{1,2}:\d{2}\s*(?:AM|PM)?))?'
    r'(?:\s*on\s*(\w+\s\d{1,2}(?:st|nd|rd|th)?(?:,\s*\d{4})?))?$',
    re.IGNORECASE,
)

_LIST_MARKER_RE = re.compile(r'^(?:[-*+]|\d+[.)])\s+')
_TITLE_WRAPPERS = ('**', '__', '*', '_', '`', '"')


class EventLineMatch(NamedTuple):
    shape: str
    title: str
    time_fragment: Optional[str]
    date_fragment: Optional[str]


def clean_title(raw: str) -> str:
    """
    Trim whitespace and matched wrapper punctuation such as **bold**.

    A wrapper is only removed when it has no other copy inside the title, so
    '**Team** sync with **Ops**' is left as it is.
    """
    title = raw.strip()
    stripped = True
    while stripped:
        stripped = False
        for wrapper in _TITLE_WRAPPERS:
            size = len(wrapper)
            if (
                len(title) >= 2 * size
                and title.startswith(wrapper)
                and title.endswith(wrapper)
                and wrapper not in title[size:-size]
            ):
                title = title[size:-size].strip()
                stripped = True
                break
    return title


def match_heading(line: str, now: Optional[datetime] = None) -> Optional[date]:
    """
    Return the date a heading line establishes, or None.

    Accepts optional markdown markers and an optional weekday before a
    month-name date, e.g. '### Monday, July 29th, 2024' or '**Jul 30**'.
    """
    match = HEADING_RE.match(line.strip())
    if not match:
        return None
    return parse_date_fragment(match.group('date').replace('.', ''), now)


def _match_dated_time_ampm(line: str) -> Optional[EventLineMatch]:
    match = _DATED_TIME_AMPM_RE.match(line)
    if not match:
        return None
    return EventLineMatch('dated_time_ampm', match.group(3), match.group(2), match.group(1))


def _match_dated_time_24h(line: str) -> Optional[EventLineMatch]:
    match = _DATED_TIME_24H_RE.match(line)
    if not match:
        return None
    return EventLineMatch('dated_time_24h', match.group(3), match.group(2), match.group(1))


def _match_task_or_event(line: str) -> Optional[EventLineMatch]:
    match = _TASK_OR_EVENT_RE.match(line)
    if not match:
        return None
    return EventLineMatch('task_or_event', match.group(1), match.group(2), match.group(3))


EVENT_LINE_MATCHERS: Tuple[Callable[[str], Optional[EventLineMatch]], ...] = (
    _match_dated_time_ampm,
    _match_dated_time_24h,
    _match_task_or_event,
)


def classify_event_line(line: str) -> Optional[EventLineMatch]:
    """
    Try each event matcher in order on the trimmed line.

    A leading markdown list marker ('- ', '* ', '1. ') is removed first.

    Returns:
        The first successful EventLineMatch, or None
    """
    text = _LIST_MARKER_RE.sub('', line.strip(), count=1)
    if not text:
        return None
    for matcher in EVENT_LINE_MATCHERS:
        result = matcher(text)
        if result is not None:
            return result
    return None
