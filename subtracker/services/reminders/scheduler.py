"""
Reminder Scheduler

Derives the reminders ahead of each active subscription's next payment:
three days before, one day before, and on the day itself, each at the
configured local time of day. Only reminders strictly in the future
are scheduled.

Every run is a full recompute: all pending reminders are withdrawn
before the new set is handed to the delivery backend. Delivery is
best-effort per reminder; one rejected reminder never stops the rest.
"""

from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from subtracker.audit import AuditLogger
from subtracker.config import ReminderSettings, get_settings
from subtracker.models.audit import AuditEventBuilder
from subtracker.models.reminder import Reminder, ReminderKind
from subtracker.models.subscription import Subscription
from subtracker.services.reminders.delivery import (
    ReminderDeliveryError,
    ReminderDeliveryInterface,
)


_TITLES = {
    ReminderKind.THREE_DAYS_BEFORE: "Upcoming Payment",
    ReminderKind.ONE_DAY_BEFORE: "Payment Tomorrow",
    ReminderKind.DUE_TODAY: "Payment Due Today",
}

_WHEN = {
    ReminderKind.THREE_DAYS_BEFORE: "due in 3 days",
    ReminderKind.ONE_DAY_BEFORE: "due tomorrow",
    ReminderKind.DUE_TODAY: "is due today",
}


def reminder_identifier(subscription: Subscription, fire_at: datetime) -> str:
    """Deterministic id: "{subscription_id}-{epoch_seconds}" (local time)."""
    return f"{subscription.id}-{int(fire_at.timestamp())}"


class ReminderScheduler:
    """
    Computes reminders and pushes them to a delivery backend.
    """

    def __init__(
        self,
        delivery: ReminderDeliveryInterface,
        settings: Optional[ReminderSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._delivery = delivery
        self._settings = settings or get_settings().reminders
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock

    def _message(self, subscription: Subscription, kind: ReminderKind) -> str:
        cost = f"{self._settings.currency_symbol}{subscription.cost:.2f}"
        return f"{subscription.name} - {cost} {_WHEN[kind]}"

    def reminders_for(
        self,
        subscription: Subscription,
        now: Optional[datetime] = None,
    ) -> list[Reminder]:
        """Future reminders for one subscription (none if it is canceled)."""
        if not subscription.is_active:
            return []

        now = now or self._clock()
        reminders = []
        for kind in ReminderKind:
            day = subscription.next_payment_date - timedelta(days=kind.days_before)
            fire_at = datetime.combine(day, self._settings.fire_time)
            if fire_at <= now:
                continue
            reminders.append(
                Reminder(
                    identifier=reminder_identifier(subscription, fire_at),
                    subscription_id=subscription.id,
                    kind=kind,
                    fire_at=fire_at,
                    title=_TITLES[kind],
                    body=self._message(subscription, kind),
                )
            )
        return reminders

    def compute(
        self,
        subscriptions: Iterable[Subscription],
        now: Optional[datetime] = None,
    ) -> list[Reminder]:
        """All future reminders for the active subscriptions."""
        now = now or self._clock()
        reminders = []
        for subscription in subscriptions:
            reminders.extend(self.reminders_for(subscription, now))
        return reminders

    def reschedule(
        self,
        subscriptions: Iterable[Subscription],
        now: Optional[datetime] = None,
    ) -> list[Reminder]:
        """
        Replace every pending reminder with a freshly computed set.

        Returns the reminders the delivery backend accepted.
        """
        try:
            self._delivery.clear_all()
        except ReminderDeliveryError as e:
            self._audit_logger.log(
                AuditEventBuilder.system_error("reminder_clear_failed", str(e))
            )

        scheduled = []
        failed = 0
        for reminder in self.compute(subscriptions, now):
            try:
                self._delivery.deliver(reminder)
            except Exception as e:
                failed += 1
                self._audit_logger.log(
                    AuditEventBuilder.reminder_delivery_failed(
                        reminder.identifier,
                        reminder.subscription_id,
                        str(e),
                    )
                )
                continue
            scheduled.append(reminder)

        self._audit_logger.log(
            AuditEventBuilder.reminders_scheduled(len(scheduled), failed)
        )
        return scheduled
