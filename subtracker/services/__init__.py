"""Services package."""

from subtracker.services.storage import (
    AuditStorageInterface,
    CollectionStorageInterface,
    CorruptDataError,
    InMemoryStorage,
    JsonFileStorage,
    JsonLinesAuditStorage,
    StorageError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "CollectionStorageInterface",
    "CorruptDataError",
    "InMemoryStorage",
    "JsonFileStorage",
    "JsonLinesAuditStorage",
    "StorageError",
]
