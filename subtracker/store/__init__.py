"""Entity store package."""

from subtracker.store.entity_store import DuplicateIdError, EntityStore, StoreError

__all__ = ["DuplicateIdError", "EntityStore", "StoreError"]
