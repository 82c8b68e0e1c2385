"""
Shared fixtures.

Every fixture works on in-memory storage or pytest's tmp_path and uses a
fixed clock, so no test touches the user's data directory or depends
on today's date.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from subtracker.audit import AuditLogger
from subtracker.config import AppSettings, CSVSettings, ReminderSettings
from subtracker.models.subscription import BillingCycle, Subscription
from subtracker.queries import StatisticsEngine
from subtracker.services.csv_codec import CSVCodec
from subtracker.services.reminders import InMemoryReminderCenter, ReminderScheduler
from subtracker.services.storage import InMemoryStorage
from subtracker.store import EntityStore


TODAY = date(2025, 1, 10)
NOW = datetime(2025, 1, 10, 12, 0)


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def reminder_settings():
    return ReminderSettings(hour=9, minute=0, currency_symbol="$")


@pytest.fixture
def csv_settings():
    return CSVSettings(
        date_formats="%m/%d/%Y,%m/%d/%y",
        default_color="#007AFF",
        tag_separator="; ",
    )


@pytest.fixture
def app_settings():
    return AppSettings(upcoming_window_days=7, upcoming_payments_days=30)


@pytest.fixture
def reminder_center():
    return InMemoryReminderCenter()


@pytest.fixture
def scheduler(reminder_center, reminder_settings, audit_logger):
    return ReminderScheduler(
        reminder_center,
        settings=reminder_settings,
        audit_logger=audit_logger,
        clock=lambda: NOW,
    )


@pytest.fixture
def store(storage, audit_logger, scheduler):
    return EntityStore(storage, audit_logger=audit_logger, reminder_scheduler=scheduler)


@pytest.fixture
def statistics(store, app_settings):
    return StatisticsEngine(store, settings=app_settings, today=lambda: TODAY)


@pytest.fixture
def codec(store, csv_settings, audit_logger):
    return CSVCodec(store, settings=csv_settings, audit_logger=audit_logger)


@pytest.fixture
def make_subscription():
    """Factory for subscriptions with sensible defaults."""
    def _make(**overrides):
        fields = {
            "name": "Netflix",
            "cost": Decimal("15.99"),
            "billing_cycle": BillingCycle.MONTHLY,
            "next_payment_date": date(2025, 1, 20),
        }
        fields.update(overrides)
        return Subscription(**fields)
    return _make
