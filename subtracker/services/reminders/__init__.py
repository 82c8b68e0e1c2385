"""Reminder scheduling package."""

from subtracker.services.reminders.delivery import (
    InMemoryReminderCenter,
    ReminderDeliveryError,
    ReminderDeliveryInterface,
)
from subtracker.services.reminders.scheduler import (
    ReminderScheduler,
    reminder_identifier,
)

__all__ = [
    "InMemoryReminderCenter",
    "ReminderDeliveryError",
    "ReminderDeliveryInterface",
    "ReminderScheduler",
    "reminder_identifier",
]
