"""
Event data models for schedule parsing.
Defines StructuredEvent (extracted from generated schedule text) and
StoredSchedule (one history record per schedule-generation request).
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from dateutil import parser as dateutil_parser

from schedcal.logging_helper import Log

# Persisted form of start/end timestamps (local time, minute precision)
EVENT_DATETIME_FORMAT = "%Y-%m-%dT%H:%M"


def new_event_id() -> str:
    return uuid.uuid4().hex


def format_event_datetime(value: Optional[datetime]) -> Optional[str]:
    if not isinstance(value, datetime):
        return None
    return value.strftime(EVENT_DATETIME_FORMAT)


def parse_event_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a stored 'YYYY-MM-DDTHH:MM' timestamp back into a naive datetime.

    Returns:
        datetime, or None if the value is missing or malformed
    """
    if not value:
        return None
    try:
        parsed = dateutil_parser.isoparse(value)
    except (ValueError, OverflowError) as e:
        Log.warn(f"Discarding malformed stored timestamp '{value}': {e}")
        return None
    # Stored values are local wall-clock times
    return parsed.replace(tzinfo=None)


@dataclass(frozen=True)
class StructuredEvent:
    """
    Calendar event extracted from one line of a generated schedule.
    start_datetime is always set on extracted events; it can only be None on
    records loaded from history whose timestamp no longer parses.
    """
    title: str
    start_datetime: Optional[datetime]
    original_text: str
    end_datetime: Optional[datetime] = None
    description: Optional[str] = None
    location: Optional[str] = None
    id: str = field(default_factory=new_event_id)

    def has_valid_start(self) -> bool:
        """Check if the event carries a usable start timestamp."""
        return isinstance(self.start_datetime, datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "startDateTime": format_event_datetime(self.start_datetime),
            "endDateTime": format_event_datetime(self.end_datetime),
            "description": self.description,
            "location": self.location,
            "originalText": self.original_text,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StructuredEvent":
        return cls(
            id=data.get("id") or new_event_id(),
            title=data.get("title") or "",
            start_datetime=parse_event_datetime(data.get("startDateTime")),
            end_datetime=parse_event_datetime(data.get("endDateTime")),
            description=data.get("description"),
            location=data.get("location"),
            original_text=data.get("originalText") or "",
        )


@dataclass
class StoredSchedule:
    """History record for one schedule-generation request."""
    user_input: str
    generated_schedule: str
    current_schedule: Optional[str] = None
    parsed_events: List[StructuredEvent] = field(default_factory=list)
    id: str = field(default_factory=new_event_id)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def preview(self, limit: int = 50) -> str:
        """Short label used when listing history."""
        text = self.user_input[:limit]
        if len(self.user_input) > limit:
            text += "..."
        return f"Schedule for: {text}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "userInput": self.user_input,
            "currentSchedule": self.current_schedule,
            "generatedSchedule": self.generated_schedule,
            "parsedEvents": [event.to_dict() for event in self.parsed_events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredSchedule":
        return cls(
            id=data.get("id") or new_event_id(),
            timestamp=data.get("timestamp") or "",
            user_input=data.get("userInput") or "",
            current_schedule=data.get("currentSchedule"),
            generated_schedule=data.get("generatedSchedule") or "",
            parsed_events=[
                StructuredEvent.from_dict(item)
                for item in data.get("parsedEvents") or []
                if isinstance(item, dict)
            ],
        )
