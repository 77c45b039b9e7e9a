"""
Reminder scheduler for extracted events.

Reminders are one-shot and fire-and-forget: once scheduled there is no
handle to cancel them, so deleting a schedule from history does not stop a
pending reminder.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from schedcal.event_models import StructuredEvent
from schedcal.exceptions import InvalidEventTimeError, NotificationPermissionError, PastEventError
from schedcal.logging_helper import Log
from schedcal.notifications import show_notification
from schedcal.permissions import ensure_notification_permission

REMINDER_TITLE = "Upcoming Event Reminder"


@dataclass(frozen=True)
class ReminderPayload:
    title: str
    body: str


@dataclass(frozen=True)
class Reminder:
    event_id: str
    fire_at: datetime
    delay_seconds: float
    payload: ReminderPayload


class NotificationBackend(ABC):
    """Host capability for showing notifications at a later time."""

    @abstractmethod
    def request_permission(self) -> bool:
        """Return True if notifications are (or can now be) allowed."""

    @abstractmethod
    def schedule_one_shot(self, delay_seconds: float, payload: ReminderPayload) -> None:
        """Show payload once after delay_seconds."""


class DesktopNotificationBackend(NotificationBackend):
    """
    Shows reminders as desktop notifications from a daemon timer thread.
    Pending timers die with the process.
    """

    def request_permission(self) -> bool:
        return ensure_notification_permission()

    def schedule_one_shot(self, delay_seconds: float, payload: ReminderPayload) -> None:
        timer = threading.Timer(delay_seconds, self._fire, args=(payload,))
        timer.daemon = True
        timer.name = "ReminderTimer"
        timer.start()

    @staticmethod
    def _fire(payload: ReminderPayload):
        Log.section("Reminder")
        show_notification(payload.title, payload.body)


class StubNotificationBackend(NotificationBackend):
    """
    Records reminders instead of showing them.
    Used for dry runs and tests.
    """

    def __init__(self, permission_granted: bool = True):
        self.permission_granted = permission_granted
        self.scheduled: List[Tuple[float, ReminderPayload]] = []

    def request_permission(self) -> bool:
        Log.info(f"Stub notification permission: {self.permission_granted}")
        return self.permission_granted

    def schedule_one_shot(self, delay_seconds: float, payload: ReminderPayload) -> None:
        Log.info(f"Stub reminder recorded: '{payload.title}' in {delay_seconds:.0f}s")
        self.scheduled.append((delay_seconds, payload))


def set_reminder(
    event: StructuredEvent,
    backend: NotificationBackend,
    now: Optional[datetime] = None,
) -> Reminder:
    """
    Schedule a one-shot reminder at the event's start time.

    Args:
        event: Event to be reminded of
        backend: Notification capability
        now: Current wall-clock time (defaults to datetime.now())

    Returns:
        Reminder describing what was scheduled

    Raises:
        NotificationPermissionError: notifications denied or unsupported
        InvalidEventTimeError: event has no usable start time
        PastEventError: event starts now or in the past
    """
    Log.section("Reminder Scheduler")

    if not backend.request_permission():
        Log.kv({"stage": "reminder", "result": "failed", "reason": "permission_denied"})
        raise NotificationPermissionError(
            "Notification permission denied. Please enable notifications in your system settings."
        )

    if event.start_datetime is None:
        Log.kv({"stage": "reminder", "result": "failed", "reason": "missing_start"})
        raise InvalidEventTimeError("Event has no start time, can't set reminder.")
    if not event.has_valid_start():
        Log.kv({"stage": "reminder", "result": "failed", "reason": "invalid_start"})
        raise InvalidEventTimeError("Invalid event time for reminder.")

    now = now or datetime.now()
    delay_seconds = (event.start_datetime - now).total_seconds()
    if delay_seconds <= 0:
        Log.kv({"stage": "reminder", "result": "failed", "reason": "past_event", "event_title": event.title})
        raise PastEventError(f'Cannot set reminder for "{event.title}" as it\'s in the past or now.')

    payload = ReminderPayload(title=REMINDER_TITLE, body=f"{event.title} is starting now!")
    backend.schedule_one_shot(delay_seconds, payload)

    reminder = Reminder(
        event_id=event.id,
        fire_at=event.start_datetime,
        delay_seconds=delay_seconds,
        payload=payload,
    )
    Log.info(f'Reminder set for "{event.title}" at {event.start_datetime:%Y-%m-%d %H:%M}')
    Log.kv({
        "stage": "reminder",
        "result": "scheduled",
        "event_title": event.title,
        "delay_s": int(delay_seconds),
    })
    return reminder
