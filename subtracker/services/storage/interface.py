"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the JSON files on disk as the default backend
2. Use in-memory storage for testing
3. Keep the EntityStore decoupled from the storage implementation

Each collection is an independently keyed blob holding a JSON array.
It is loaded in full and rewritten in full; there is no incremental log.
"""

from abc import ABC, abstractmethod

from subtracker.models.audit import AuditEvent


SUBSCRIPTIONS = "subscriptions"
CATEGORIES = "categories"
TAGS = "tags"

COLLECTIONS = (SUBSCRIPTIONS, CATEGORIES, TAGS)


class CollectionStorageInterface(ABC):
    """
    Abstract interface for whole-collection persistence.

    Records are plain JSON-compatible dicts; turning them into models
    is the EntityStore's job.
    """

    @abstractmethod
    def load(self, collection: str) -> list[dict]:
        """
        Load every record of a collection.

        Args:
            collection: One of SUBSCRIPTIONS, CATEGORIES, TAGS

        Returns:
            The stored records, or an empty list if nothing was stored yet

        Raises:
            CorruptDataError: If the stored blob cannot be decoded
            StorageError: If reading fails
        """
        pass

    @abstractmethod
    def save(self, collection: str, records: list[dict]) -> None:
        """
        Replace the stored collection with the given records.

        Raises:
            StorageError: If writing fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but cannot be decoded."""
    pass
