"""
Component Wiring for Subscription Tracker

This module constructs every component once and hands each one the
collaborators it needs:

    storage -> EntityStore -> StatisticsEngine / CSVCodec
                   |
                   +-> ReminderScheduler (re-run after subscription writes)

DESIGN DECISION: Nothing here is global. Call create_app_components()
at startup, keep the result for the lifetime of the process, and pass
it (or its parts) to whatever needs them.
"""

from typing import Optional

from subtracker.audit import AuditLogger
from subtracker.config import Settings, StorageSettings, get_settings
from subtracker.queries import StatisticsEngine
from subtracker.services.csv_codec import CSVCodec
from subtracker.services.reminders import (
    InMemoryReminderCenter,
    ReminderDeliveryInterface,
    ReminderScheduler,
)
from subtracker.services.storage import (
    CollectionStorageInterface,
    InMemoryStorage,
    JsonFileStorage,
    JsonLinesAuditStorage,
)
from subtracker.store import EntityStore


class AppComponents:
    """The constructed object graph of one running tracker."""

    def __init__(
        self,
        store: EntityStore,
        statistics: StatisticsEngine,
        csv_codec: CSVCodec,
        reminder_scheduler: ReminderScheduler,
        reminder_delivery: ReminderDeliveryInterface,
        audit_logger: AuditLogger,
    ):
        self.store = store
        self.statistics = statistics
        self.csv_codec = csv_codec
        self.reminder_scheduler = reminder_scheduler
        self.reminder_delivery = reminder_delivery
        self.audit_logger = audit_logger

    def refresh_reminders(self):
        """Recompute reminders from the current subscriptions."""
        return self.reminder_scheduler.reschedule(self.store.list_subscriptions())


def create_app_components(
    use_storage: bool = True,
    settings: Optional[Settings] = None,
    storage: Optional[CollectionStorageInterface] = None,
    reminder_delivery: Optional[ReminderDeliveryInterface] = None,
    storage_settings: Optional[StorageSettings] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Persist to the configured data directory.
                    Set to False for a throwaway in-memory session.
        settings: Settings to use instead of get_settings()
        storage: Collection backend overriding use_storage
        reminder_delivery: Delivery backend (in-memory if None)
        storage_settings: Storage settings overriding settings.storage

    Returns:
        The wired components, with reminders already scheduled
    """
    settings = settings or get_settings()
    storage_settings = storage_settings or settings.storage

    audit_storage = None
    if use_storage and storage_settings.audit_enabled:
        audit_storage = JsonLinesAuditStorage(storage_settings.audit_log_path)
    audit_logger = AuditLogger(audit_storage)

    if storage is None:
        storage = JsonFileStorage(storage_settings) if use_storage else InMemoryStorage()

    reminder_delivery = reminder_delivery or InMemoryReminderCenter()
    scheduler = ReminderScheduler(
        reminder_delivery,
        settings=settings.reminders,
        audit_logger=audit_logger,
    )

    store = EntityStore(storage, audit_logger=audit_logger, reminder_scheduler=scheduler)

    components = AppComponents(
        store=store,
        statistics=StatisticsEngine(store, settings=settings.app),
        csv_codec=CSVCodec(store, settings=settings.csv, audit_logger=audit_logger),
        reminder_scheduler=scheduler,
        reminder_delivery=reminder_delivery,
        audit_logger=audit_logger,
    )
    components.refresh_reminders()
    return components
