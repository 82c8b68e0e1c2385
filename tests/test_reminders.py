"""Tests for the reminder scheduler and delivery backend."""

from datetime import date, datetime, time

import pytest

from subtracker.audit import AuditLogger
from subtracker.config import ReminderSettings
from subtracker.models.audit import AuditEventType
from subtracker.models.reminder import ReminderKind
from subtracker.services.reminders import (
    InMemoryReminderCenter,
    ReminderDeliveryError,
    ReminderScheduler,
    reminder_identifier,
)

NOW = datetime(2025, 1, 10, 12, 0)


class RejectingCenter(InMemoryReminderCenter):
    """Rejects every reminder of one kind."""

    def __init__(self, rejected_kind):
        super().__init__()
        self.rejected_kind = rejected_kind

    def deliver(self, reminder):
        if reminder.kind == self.rejected_kind:
            raise ReminderDeliveryError("notification quota exceeded")
        super().deliver(reminder)


class TestReminderComputation:
    """Tests for which reminders exist and when they fire."""

    @pytest.mark.parametrize("due, expected_kinds", [
        (date(2025, 1, 20), [
            ReminderKind.THREE_DAYS_BEFORE,
            ReminderKind.ONE_DAY_BEFORE,
            ReminderKind.DUE_TODAY,
        ]),
        (date(2025, 1, 12), [ReminderKind.ONE_DAY_BEFORE, ReminderKind.DUE_TODAY]),
        (date(2025, 1, 11), [ReminderKind.DUE_TODAY]),
        (date(2025, 1, 10), []),
        (date(2024, 12, 1), []),
    ])
    def test_only_future_reminders(self, scheduler, make_subscription, due, expected_kinds):
        """Test reminders at or before now are dropped."""
        sub = make_subscription(next_payment_date=due)
        reminders = scheduler.reminders_for(sub, NOW)
        assert [r.kind for r in reminders] == expected_kinds

    def test_fire_times(self, scheduler, make_subscription):
        """Test each reminder fires at the configured time of day."""
        sub = make_subscription(next_payment_date=date(2025, 1, 20))
        fire_times = [r.fire_at for r in scheduler.reminders_for(sub, NOW)]
        assert fire_times == [
            datetime(2025, 1, 17, 9, 0),
            datetime(2025, 1, 19, 9, 0),
            datetime(2025, 1, 20, 9, 0),
        ]

    def test_custom_fire_time(self, reminder_center, make_subscription):
        """Test the hour and minute come from settings."""
        scheduler = ReminderScheduler(
            reminder_center,
            settings=ReminderSettings(hour=18, minute=30),
            clock=lambda: NOW,
        )
        sub = make_subscription(next_payment_date=date(2025, 1, 10))
        reminders = scheduler.reminders_for(sub)
        assert [r.fire_at for r in reminders] == [datetime(2025, 1, 10, 18, 30)]

    def test_canceled_subscription_has_no_reminders(self, scheduler, make_subscription):
        """Test only active subscriptions are reminded."""
        sub = make_subscription(status="Canceled")
        assert scheduler.reminders_for(sub, NOW) == []

    def test_titles_and_bodies(self, scheduler, make_subscription):
        """Test the reminder text."""
        sub = make_subscription(next_payment_date=date(2025, 1, 20))
        reminders = scheduler.reminders_for(sub, NOW)
        assert [r.title for r in reminders] == [
            "Upcoming Payment",
            "Payment Tomorrow",
            "Payment Due Today",
        ]
        assert [r.body for r in reminders] == [
            "Netflix - $15.99 due in 3 days",
            "Netflix - $15.99 due tomorrow",
            "Netflix - $15.99 is due today",
        ]

    def test_identifier_is_deterministic(self, scheduler, make_subscription):
        """Test recomputing yields the same ids."""
        sub = make_subscription()
        first = [r.identifier for r in scheduler.reminders_for(sub, NOW)]
        second = [r.identifier for r in scheduler.reminders_for(sub, NOW)]
        assert first == second
        fire_at = datetime.combine(date(2025, 1, 20), time(9, 0))
        assert first[-1] == reminder_identifier(sub, fire_at)
        assert first[-1].startswith(f"{sub.id}-")

    def test_compute_spans_subscriptions(self, scheduler, make_subscription):
        """Test compute collects reminders of every active subscription."""
        subs = [
            make_subscription(name="A", next_payment_date=date(2025, 1, 20)),
            make_subscription(name="B", next_payment_date=date(2025, 1, 11)),
            make_subscription(name="C", status="Canceled"),
        ]
        assert len(scheduler.compute(subs, NOW)) == 4


class TestReschedule:
    """Tests for pushing reminders to the delivery backend."""

    def test_reschedule_replaces_pending(self, scheduler, reminder_center, make_subscription):
        """Test each run clears what the previous run scheduled."""
        first = make_subscription(name="First", next_payment_date=date(2025, 1, 20))
        second = make_subscription(name="Second", next_payment_date=date(2025, 1, 11))

        scheduler.reschedule([first], NOW)
        assert len(reminder_center) == 3

        scheduler.reschedule([second], NOW)
        pending = reminder_center.pending()
        assert len(pending) == 1
        assert pending[0].subscription_id == second.id

    def test_pending_is_sorted(self, scheduler, reminder_center, make_subscription):
        """Test the in-memory centre lists soonest first."""
        scheduler.reschedule([
            make_subscription(name="Late", next_payment_date=date(2025, 1, 25)),
            make_subscription(name="Soon", next_payment_date=date(2025, 1, 12)),
        ], NOW)
        fire_times = [r.fire_at for r in reminder_center.pending()]
        assert fire_times == sorted(fire_times)

    def test_delivery_failure_does_not_stop_others(self, make_subscription):
        """Test a rejected reminder is logged and the rest still scheduled."""
        center = RejectingCenter(ReminderKind.ONE_DAY_BEFORE)
        audit_logger = AuditLogger()
        scheduler = ReminderScheduler(center, audit_logger=audit_logger, clock=lambda: NOW)

        scheduled = scheduler.reschedule(
            [make_subscription(next_payment_date=date(2025, 1, 20))]
        )

        assert [r.kind for r in scheduled] == [
            ReminderKind.THREE_DAYS_BEFORE,
            ReminderKind.DUE_TODAY,
        ]
        assert len(center) == 2
        failures = [
            e for e in audit_logger.events
            if e.event_type == AuditEventType.REMINDER_DELIVERY_FAILED
        ]
        assert len(failures) == 1

    def test_reschedule_is_audited(self, scheduler, audit_logger, make_subscription):
        """Test every run logs how many reminders were scheduled."""
        scheduler.reschedule([make_subscription()], NOW)
        events = [
            e for e in audit_logger.events
            if e.event_type == AuditEventType.REMINDERS_SCHEDULED
        ]
        assert len(events) == 1
