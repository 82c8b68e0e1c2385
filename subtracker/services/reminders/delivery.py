"""
Reminder Delivery

The scheduler only decides WHEN a reminder fires and what it says.
Showing it to the user is the job of a delivery backend behind this
interface (a desktop notification centre, a mail queue, ...).
"""

from abc import ABC, abstractmethod

from subtracker.models.reminder import Reminder


class ReminderDeliveryError(Exception):
    """The delivery backend rejected or could not store a reminder."""
    pass


class ReminderDeliveryInterface(ABC):
    """Abstract interface for the system that displays reminders."""

    @abstractmethod
    def deliver(self, reminder: Reminder) -> None:
        """
        Hand a reminder over for display at reminder.fire_at.

        Raises:
            ReminderDeliveryError: If the reminder cannot be scheduled
        """
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """Withdraw every pending reminder previously handed over."""
        pass


class InMemoryReminderCenter(ReminderDeliveryInterface):
    """Keeps pending reminders keyed by their identifier."""

    def __init__(self):
        self._pending: dict[str, Reminder] = {}

    def deliver(self, reminder: Reminder) -> None:
        self._pending[reminder.identifier] = reminder

    def clear_all(self) -> None:
        self._pending.clear()

    def pending(self) -> list[Reminder]:
        """Pending reminders, soonest first."""
        return sorted(self._pending.values(), key=lambda r: (r.fire_at, r.identifier))

    def __len__(self) -> int:
        return len(self._pending)
