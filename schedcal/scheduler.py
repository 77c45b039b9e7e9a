"""
Scheduler feature: turns a schedule request into generated markdown,
extracted events, a history entry, calendar links and reminders.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from schedcal.calendar_connector import build_calendar_url, open_calendar_url
from schedcal.event_extractor import extract_events
from schedcal.event_models import StoredSchedule, StructuredEvent
from schedcal.exceptions import ScheduleRequestError
from schedcal.history_store import HistoryStore
from schedcal.logging_helper import Log
from schedcal.reminders import NotificationBackend, Reminder, set_reminder
from schedcal.text_llm_client import GroundingCitation, TextLLMClient

SCHEDULE_HISTORY_KEY = "schedulerHistory"


def build_schedule_prompt(tasks: str, current_schedule: str = "") -> str:
    """Prompt asking the model for a schedule in the shape the extractor reads."""
    if current_schedule.strip():
        schedule_block = f"Current schedule provided by user:\n---\n{current_schedule}\n---\n"
    else:
        schedule_block = (
            "The user has not provided an existing schedule. "
            "Assume this is a new schedule or an update to an implicit one.\n"
        )
    return (
        "You are a schedule assistant.\n"
        f"{schedule_block}\n"
        "Tasks/Updates requested by user:\n"
        f"---\n{tasks}\n---\n\n"
        "Please generate an updated or new schedule based on the request.\n"
        'Organize the schedule clearly using markdown. Use headings for days (e.g., "### Monday, July 29th, 2024").\n'
        'For each task or event, try to include a specific time (e.g., "09:00 AM - Meeting with Team" '
        'or "14:30 - Doctor\'s Appointment").\n'
        "If there are conflicts from the new tasks with the existing schedule (if provided), point them out "
        "and suggest resolutions if possible, or incorporate changes logically.\n"
        "The output should be the full updated schedule text.\n"
        'If the request is vague (e.g. "plan my week"), make reasonable assumptions.\n'
    )


@dataclass
class ScheduleResult:
    text: str
    events: List[StructuredEvent] = field(default_factory=list)
    sources: List[GroundingCitation] = field(default_factory=list)
    error: Optional[str] = None
    stored: Optional[StoredSchedule] = None


class Scheduler:
    """Schedule generation and the actions offered on each extracted event."""

    def __init__(
        self,
        llm_client: TextLLMClient,
        history_store: HistoryStore,
        notification_backend: NotificationBackend,
    ):
        self.llm_client = llm_client
        self.history_store = history_store
        self.notification_backend = notification_backend

    def generate_schedule(
        self,
        tasks: str,
        current_schedule: str = "",
        now: Optional[datetime] = None,
    ) -> ScheduleResult:
        """
        Generate a schedule, extract its events and record it in history.

        Args:
            tasks: Requested tasks or updates
            current_schedule: Existing schedule text, optional
            now: Reference time for date defaults (defaults to datetime.now())

        Returns:
            ScheduleResult; on generation failure `error` is set, no events
            are extracted and nothing is stored

        Raises:
            ScheduleRequestError: if tasks is blank
        """
        Log.section("Scheduler")
        if not tasks or not tasks.strip():
            raise ScheduleRequestError("Please enter tasks or updates for your schedule.")

        generation = self.llm_client.generate_text(build_schedule_prompt(tasks, current_schedule))
        if not generation.ok:
            Log.warn(f"Schedule generation failed: {generation.error}")
            Log.kv({"stage": "scheduler", "result": "failed", "reason": "generation_error"})
            return ScheduleResult(
                text=generation.text,
                sources=generation.sources,
                error=generation.error or "empty response",
            )

        events = extract_events(generation.text, now=now)
        stored = StoredSchedule(
            user_input=tasks,
            current_schedule=current_schedule if current_schedule.strip() else None,
            generated_schedule=generation.text,
            parsed_events=events,
        )
        self.history_store.add_history_item(SCHEDULE_HISTORY_KEY, stored.to_dict())

        Log.kv({"stage": "scheduler", "result": "success", "events": len(events), "history_id": stored.id})
        return ScheduleResult(
            text=generation.text,
            events=events,
            sources=generation.sources,
            stored=stored,
        )

    def history(self) -> List[StoredSchedule]:
        return [
            StoredSchedule.from_dict(item)
            for item in self.history_store.get_history(SCHEDULE_HISTORY_KEY)
        ]

    def delete_history_item(self, item_id: str) -> List[StoredSchedule]:
        # Reminders already scheduled for this entry still fire
        remaining = self.history_store.remove_history_item(SCHEDULE_HISTORY_KEY, item_id)
        return [StoredSchedule.from_dict(item) for item in remaining]

    def calendar_url(self, event: StructuredEvent, base_url: Optional[str] = None) -> str:
        return build_calendar_url(event, base_url)

    def open_in_calendar(self, event: StructuredEvent, wait: bool = False) -> str:
        return open_calendar_url(event, wait=wait)

    def set_reminder(self, event: StructuredEvent, now: Optional[datetime] = None) -> Reminder:
        return set_reminder(event, self.notification_backend, now=now)
