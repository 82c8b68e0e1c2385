"""
Reminder and reporting models.

These are derived values: they are computed from the stored
collections and never persisted as part of them.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from subtracker.models.subscription import Category


class ReminderKind(str, Enum):
    """Which of the reminders ahead of a payment this is."""
    THREE_DAYS_BEFORE = "three_days_before"
    ONE_DAY_BEFORE = "one_day_before"
    DUE_TODAY = "due_today"

    @property
    def days_before(self) -> int:
        return _DAYS_BEFORE[self]


_DAYS_BEFORE = {
    ReminderKind.THREE_DAYS_BEFORE: 3,
    ReminderKind.ONE_DAY_BEFORE: 1,
    ReminderKind.DUE_TODAY: 0,
}


class Reminder(BaseModel):
    """
    A reminder that should fire ahead of a payment.

    The identifier is deterministic: "{subscription_id}-{epoch_seconds}",
    so recomputing reminders for unchanged data yields the same ids.
    """

    identifier: str = Field(
        ...,
        description="Stable identifier for the delivery system"
    )
    subscription_id: UUID
    kind: ReminderKind
    fire_at: datetime = Field(
        ...,
        description="Local wall-clock instant the reminder should fire"
    )
    title: str
    body: str


class CategoryCost(BaseModel):
    """Monthly cost of the active subscriptions in one category bucket."""

    category_id: Optional[UUID] = Field(
        default=None,
        description="None for the uncategorized bucket"
    )
    category: Optional[Category] = None
    cost: Decimal = Field(
        ...,
        description="Sum of normalized monthly costs"
    )
    share: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Fraction of the total monthly cost"
    )

    @property
    def display_name(self) -> str:
        return self.category.name if self.category else "Uncategorized"


class MonthlySpending(BaseModel):
    """Raw cost of the payments falling due in one calendar month."""

    month: int = Field(ge=1, le=12)
    amount: Decimal


class SkippedRow(BaseModel):
    """A CSV data row that was not imported."""

    line_number: int = Field(
        ...,
        ge=1,
        description="1-based line number among the non-empty lines of the file"
    )
    reason: str
    content: str


class ImportReport(BaseModel):
    """Outcome of importing a CSV document."""

    imported: list[UUID] = Field(
        default_factory=list,
        description="Ids of the subscriptions created"
    )
    skipped: list[SkippedRow] = Field(default_factory=list)
    created_categories: list[str] = Field(default_factory=list)
    created_tags: list[str] = Field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return len(self.imported)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
