"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Collections are stored as JSON files by default; an in-memory backend
is available for tests.
"""

from subtracker.services.storage.interface import (
    CATEGORIES,
    COLLECTIONS,
    SUBSCRIPTIONS,
    TAGS,
    AuditStorageInterface,
    CollectionStorageInterface,
    CorruptDataError,
    StorageError,
)
from subtracker.services.storage.json_file import (
    InMemoryStorage,
    JsonFileStorage,
    JsonLinesAuditStorage,
)

__all__ = [
    # Collection names
    "CATEGORIES",
    "COLLECTIONS",
    "SUBSCRIPTIONS",
    "TAGS",
    # Interfaces
    "AuditStorageInterface",
    "CollectionStorageInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
    "JsonLinesAuditStorage",
]
