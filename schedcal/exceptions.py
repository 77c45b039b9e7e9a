"""Custom exceptions for ScheduleCal.

Parsing never raises; these cover the few operations with hard failure
conditions. Messages are written to be shown to the user as-is.
"""


class ScheduleCalError(Exception):
    """Base exception for all ScheduleCal errors."""


class ScheduleRequestError(ScheduleCalError):
    """Raised when a schedule request is rejected before generation."""


class ReminderError(ScheduleCalError):
    """Base exception for reminders that could not be scheduled."""


class NotificationPermissionError(ReminderError):
    """Raised when notification permission is denied or unsupported."""


class InvalidEventTimeError(ReminderError):
    """Raised when an event has no usable start time."""


class PastEventError(ReminderError):
    """Raised when an event starts now or in the past."""
