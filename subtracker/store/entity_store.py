"""
Entity Store

Owns the three canonical collections: subscriptions, categories and tags.

DESIGN DECISION: The store is an explicitly constructed object that is
passed to every component needing it. There is no module-level instance.

DESIGN DECISION: Every mutation is followed synchronously by a full
rewrite of the affected collection(s). Writing the subscriptions
collection additionally re-runs the reminder scheduler.

References from a subscription to its category and tags are weak:
deleting a category or tag clears those references (it never deletes
the subscriptions), and resolving a dangling reference yields nothing
rather than an error.

The store performs no locking. Callers sharing one store across
threads must serialize access themselves.
"""

from datetime import date
from typing import Optional, TypeVar
from uuid import UUID

from pydantic import ValidationError

from subtracker.audit import AuditLogger
from subtracker.models.audit import AuditEventBuilder
from subtracker.models.subscription import (
    Category,
    Subscription,
    Tag,
    default_categories,
    default_tags,
)
from subtracker.services.reminders import ReminderScheduler
from subtracker.services.storage import (
    CATEGORIES,
    SUBSCRIPTIONS,
    TAGS,
    CollectionStorageInterface,
    StorageError,
)


EntityT = TypeVar("EntityT", Subscription, Category, Tag)

_ENTITY_TYPES = {
    SUBSCRIPTIONS: "subscription",
    CATEGORIES: "category",
    TAGS: "tag",
}


class StoreError(Exception):
    """Base exception for entity store operations."""
    pass


class DuplicateIdError(StoreError):
    """An entity with the same id is already in the collection."""
    pass


class EntityStore:
    """
    In-memory collections backed by whole-collection persistence.

    Entities are copied on the way in and on the way out, so changing
    a returned object never changes the store without an update() call.
    """

    def __init__(
        self,
        storage: CollectionStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        reminder_scheduler: Optional[ReminderScheduler] = None,
        seed_defaults: bool = True,
    ):
        """
        Load all collections from storage.

        Args:
            storage: Persistence backend
            audit_logger: Where mutations are logged (local-only if None)
            reminder_scheduler: Re-run after every subscriptions write
            seed_defaults: Insert the predefined categories/tags into
                          an empty collection
        """
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._reminder_scheduler = reminder_scheduler

        self._subscriptions: list[Subscription] = self._load(SUBSCRIPTIONS, Subscription)
        self._categories: list[Category] = self._load(CATEGORIES, Category)
        self._tags: list[Tag] = self._load(TAGS, Tag)

        if seed_defaults:
            if not self._categories:
                self._categories = default_categories()
                self._save(CATEGORIES)
                self._audit_logger.log(
                    AuditEventBuilder.collection_seeded(CATEGORIES, len(self._categories))
                )
            if not self._tags:
                self._tags = default_tags()
                self._save(TAGS)
                self._audit_logger.log(
                    AuditEventBuilder.collection_seeded(TAGS, len(self._tags))
                )

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _load(self, collection: str, model: type[EntityT]) -> list[EntityT]:
        """
        Load one collection.

        A corrupt or unreadable collection falls back to empty. The
        failure is logged; the data on disk is overwritten by the next
        save of that collection.
        """
        try:
            records = self._storage.load(collection)
            return [model.model_validate(record) for record in records]
        except (StorageError, ValidationError) as e:
            self._audit_logger.log(
                AuditEventBuilder.collection_load_failed(collection, str(e))
            )
            return []

    def _items(self, collection: str) -> list:
        if collection == SUBSCRIPTIONS:
            return self._subscriptions
        if collection == CATEGORIES:
            return self._categories
        return self._tags

    def _save(self, collection: str) -> None:
        """
        Rewrite one collection in full.

        Raises:
            StorageError: If the backend write fails
        """
        records = [item.model_dump(mode="json") for item in self._items(collection)]
        try:
            self._storage.save(collection, records)
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.save_failed(collection, str(e)))
            raise

        if collection == SUBSCRIPTIONS and self._reminder_scheduler is not None:
            self._reminder_scheduler.reschedule(self._subscriptions)

    def attach_reminder_scheduler(self, scheduler: Optional[ReminderScheduler]) -> None:
        self._reminder_scheduler = scheduler

    # =========================================================================
    # GENERIC CRUD
    # =========================================================================

    def _add(self, collection: str, entity: EntityT) -> EntityT:
        items = self._items(collection)
        if any(item.id == entity.id for item in items):
            raise DuplicateIdError(
                f"{_ENTITY_TYPES[collection]} {entity.id} already exists"
            )
        items.append(entity.model_copy(deep=True))
        self._save(collection)
        self._audit_logger.log(
            AuditEventBuilder.entity_added(_ENTITY_TYPES[collection], entity.id, entity.name)
        )
        return entity.model_copy(deep=True)

    def _update(self, collection: str, entity: EntityT) -> bool:
        items = self._items(collection)
        for index, item in enumerate(items):
            if item.id == entity.id:
                replacement = entity.model_copy(deep=True)
                if collection == SUBSCRIPTIONS:
                    # The creation timestamp belongs to the stored record
                    replacement = replacement.model_copy(
                        update={"created_at": item.created_at}
                    )
                items[index] = replacement
                self._save(collection)
                self._audit_logger.log(
                    AuditEventBuilder.entity_updated(
                        _ENTITY_TYPES[collection], entity.id, entity.name
                    )
                )
                return True
        return False

    def _remove(self, collection: str, entity_id: UUID) -> bool:
        items = self._items(collection)
        remaining = [item for item in items if item.id != entity_id]
        if len(remaining) == len(items):
            return False
        items[:] = remaining
        return True

    @staticmethod
    def _find(items: list, entity_id: UUID):
        for item in items:
            if item.id == entity_id:
                return item.model_copy(deep=True)
        return None

    # =========================================================================
    # SUBSCRIPTIONS
    # =========================================================================

    def add_subscription(self, subscription: Subscription) -> Subscription:
        """
        Add a new subscription.

        Raises:
            DuplicateIdError: If a subscription with this id exists
            StorageError: If persisting fails
        """
        return self._add(SUBSCRIPTIONS, subscription)

    def update_subscription(self, subscription: Subscription) -> bool:
        """Replace the subscription with the same id. Returns False if absent."""
        return self._update(SUBSCRIPTIONS, subscription)

    def delete_subscription(self, subscription_id: UUID) -> bool:
        if not self._remove(SUBSCRIPTIONS, subscription_id):
            return False
        self._save(SUBSCRIPTIONS)
        self._audit_logger.log(
            AuditEventBuilder.entity_deleted("subscription", subscription_id)
        )
        return True

    def get_subscription(self, subscription_id: UUID) -> Optional[Subscription]:
        return self._find(self._subscriptions, subscription_id)

    def list_subscriptions(self) -> list[Subscription]:
        return [s.model_copy(deep=True) for s in self._subscriptions]

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def add_category(self, category: Category) -> Category:
        return self._add(CATEGORIES, category)

    def update_category(self, category: Category) -> bool:
        return self._update(CATEGORIES, category)

    def delete_category(self, category_id: UUID) -> bool:
        """
        Delete a category and clear it from every subscription using it.

        The subscriptions themselves are kept, now uncategorized.
        """
        if not self._remove(CATEGORIES, category_id):
            return False

        cleared = []
        for subscription in self._subscriptions:
            if subscription.category_id == category_id:
                subscription.category_id = None
                cleared.append(subscription.id)

        self._save(CATEGORIES)
        self._save(SUBSCRIPTIONS)
        self._audit_logger.log(AuditEventBuilder.entity_deleted("category", category_id))
        if cleared:
            self._audit_logger.log(
                AuditEventBuilder.references_cleared("category", category_id, cleared)
            )
        return True

    def get_category(self, category_id: UUID) -> Optional[Category]:
        return self._find(self._categories, category_id)

    def list_categories(self) -> list[Category]:
        return [c.model_copy(deep=True) for c in self._categories]

    def find_category_by_name(self, name: str) -> Optional[Category]:
        """First category with exactly this name (case-sensitive)."""
        for category in self._categories:
            if category.name == name:
                return category.model_copy(deep=True)
        return None

    # =========================================================================
    # TAGS
    # =========================================================================

    def add_tag(self, tag: Tag) -> Tag:
        return self._add(TAGS, tag)

    def update_tag(self, tag: Tag) -> bool:
        return self._update(TAGS, tag)

    def delete_tag(self, tag_id: UUID) -> bool:
        """Delete a tag and remove every reference to it from subscriptions."""
        if not self._remove(TAGS, tag_id):
            return False

        cleared = []
        for subscription in self._subscriptions:
            if tag_id in subscription.tag_ids:
                subscription.tag_ids = [t for t in subscription.tag_ids if t != tag_id]
                cleared.append(subscription.id)

        self._save(TAGS)
        self._save(SUBSCRIPTIONS)
        self._audit_logger.log(AuditEventBuilder.entity_deleted("tag", tag_id))
        if cleared:
            self._audit_logger.log(
                AuditEventBuilder.references_cleared("tag", tag_id, cleared)
            )
        return True

    def get_tag(self, tag_id: UUID) -> Optional[Tag]:
        return self._find(self._tags, tag_id)

    def list_tags(self) -> list[Tag]:
        return [t.model_copy(deep=True) for t in self._tags]

    def find_tag_by_name(self, name: str) -> Optional[Tag]:
        """First tag with exactly this name (case-sensitive)."""
        for tag in self._tags:
            if tag.name == name:
                return tag.model_copy(deep=True)
        return None

    # =========================================================================
    # WEAK REFERENCE RESOLUTION
    # =========================================================================

    def resolve_category(self, subscription: Subscription) -> Optional[Category]:
        """The subscription's category, or None if unset or dangling."""
        if subscription.category_id is None:
            return None
        return self.get_category(subscription.category_id)

    def resolve_tags(self, subscription: Subscription) -> list[Tag]:
        """The subscription's tags in reference order; dangling ids are skipped."""
        by_id = {tag.id: tag for tag in self._tags}
        return [
            by_id[tag_id].model_copy(deep=True)
            for tag_id in subscription.tag_ids
            if tag_id in by_id
        ]

    # =========================================================================
    # QUERIES
    # =========================================================================

    def search_subscriptions(self, text: str = "") -> list[Subscription]:
        """
        Subscriptions whose name contains text (case-insensitive),
        ordered by next payment date. An empty text matches everything.
        """
        needle = text.casefold()
        matches = [
            s for s in self._subscriptions
            if not needle or needle in s.name.casefold()
        ]
        return [
            s.model_copy(deep=True)
            for s in sorted(matches, key=lambda s: s.next_payment_date)
        ]

    def subscriptions_on(self, day: date) -> list[Subscription]:
        """Active subscriptions whose next payment falls on day."""
        return [
            s.model_copy(deep=True)
            for s in self._subscriptions
            if s.is_active and s.next_payment_date == day
        ]
