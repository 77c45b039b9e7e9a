"""
Event extractor for generated schedule markdown.
Walks the document line by line, carrying the most recent heading date
forward, and produces StructuredEvent records in document order.
"""

from datetime import date, datetime
from typing import List, Optional, Tuple

from schedcal.event_models import StructuredEvent
from schedcal.line_classifier import classify_event_line, clean_title, match_heading
from schedcal.logging_helper import Log
from schedcal.time_normalizer import normalize_datetime


def _consume_line(
    line: str,
    context: Optional[date],
    now: datetime,
) -> Tuple[Optional[date], Optional[StructuredEvent]]:
    """
    Process one line against the current date context.

    Returns:
        (context for the next line, event extracted from this line or None)
    """
    text = line.strip()
    if not text:
        return context, None

    # A heading can also carry an event, so keep going after updating context
    heading_date = match_heading(text, now)
    if heading_date is not None:
        context = heading_date

    match = classify_event_line(text)
    if match is None:
        return context, None

    title = clean_title(match.title)
    if not title or not match.time_fragment:
        return context, None

    start = normalize_datetime(match.date_fragment, match.time_fragment.strip(), context, now)
    event = StructuredEvent(title=title, start_datetime=start, original_text=text)
    return context, event


def extract_events(markdown: str, now: Optional[datetime] = None) -> List[StructuredEvent]:
    """
    Extract calendar events from schedule markdown.

    Best-effort: lines that match no pattern are skipped silently and never
    raise. Output keeps document order (no sorting by start time).

    Args:
        markdown: Generated schedule text
        now: Reference time for default year and "today" (defaults to datetime.now())

    Returns:
        List of StructuredEvent
    """
    Log.section("Event Extractor")
    now = now or datetime.now()

    events: List[StructuredEvent] = []
    context: Optional[date] = None
    for line in (markdown or "").splitlines():
        context, event = _consume_line(line, context, now)
        if event is not None:
            events.append(event)
            Log.info(f"Event: {event.title} at {event.start_datetime:%Y-%m-%d %H:%M}")

    Log.kv({
        "stage": "extract",
        "result": "success" if events else "no_events",
        "events": len(events),
    })
    return events
