"""
Core Data Models for Subscription Tracker

These models define the schemas for the three canonical collections:
subscriptions, categories and tags. They are designed to:
1. Enforce type safety at runtime
2. Be serializable for the JSON collections on disk
3. Keep references between entities as plain identifiers

DESIGN DECISION: Category and tag references on a Subscription are weak.
They are lookup keys only, resolved through the EntityStore, and may
point at nothing after the referenced entity is deleted.

DESIGN DECISION: Enumerations use internal values that never change and
are persisted as display labels through an explicit, versioned mapping.
Renaming a label means adding a new mapping version, never editing
the enum values.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)


DEFAULT_COLOR = "#007AFF"

# Version of the label mapping used for persisted and exported enum values
LABEL_SCHEMA_VERSION = 1


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class BillingCycle(str, Enum):
    """
    Supported billing cycles.

    Each cycle has a fixed day-length used to advance the next payment
    date and a monthly-equivalent multiplier used to normalize cost.
    """
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUALLY = "semiannually"
    ANNUALLY = "annually"

    @property
    def days(self) -> int:
        return _CYCLE_DAYS[self]

    @property
    def monthly_equivalent(self) -> Fraction:
        """Multiplier converting one period's cost into a monthly amount."""
        return _CYCLE_MONTHLY_EQUIVALENT[self]

    @property
    def label(self) -> str:
        return CYCLE_LABELS[LABEL_SCHEMA_VERSION][self]

    @classmethod
    def from_label(cls, text: str) -> Optional["BillingCycle"]:
        """Exact, case-sensitive label lookup. Returns None when unmatched."""
        for cycle, label in CYCLE_LABELS[LABEL_SCHEMA_VERSION].items():
            if label == text:
                return cycle
        return None


class SubscriptionStatus(str, Enum):
    """Whether a subscription is still being paid for."""
    ACTIVE = "active"
    CANCELED = "canceled"

    @property
    def label(self) -> str:
        return STATUS_LABELS[LABEL_SCHEMA_VERSION][self]

    @classmethod
    def from_label(cls, text: str) -> Optional["SubscriptionStatus"]:
        """Exact, case-sensitive label lookup. Returns None when unmatched."""
        for status, label in STATUS_LABELS[LABEL_SCHEMA_VERSION].items():
            if label == text:
                return status
        return None


_CYCLE_DAYS = {
    BillingCycle.WEEKLY: 7,
    BillingCycle.MONTHLY: 30,
    BillingCycle.QUARTERLY: 90,
    BillingCycle.SEMIANNUALLY: 180,
    BillingCycle.ANNUALLY: 365,
}

_CYCLE_MONTHLY_EQUIVALENT = {
    BillingCycle.WEEKLY: Fraction(52, 12),
    BillingCycle.MONTHLY: Fraction(1),
    BillingCycle.QUARTERLY: Fraction(1, 3),
    BillingCycle.SEMIANNUALLY: Fraction(1, 6),
    BillingCycle.ANNUALLY: Fraction(1, 12),
}

CYCLE_LABELS: dict[int, dict[BillingCycle, str]] = {
    1: {
        BillingCycle.WEEKLY: "Weekly",
        BillingCycle.MONTHLY: "Monthly",
        BillingCycle.QUARTERLY: "Quarterly",
        BillingCycle.SEMIANNUALLY: "Semi-annually",
        BillingCycle.ANNUALLY: "Annually",
    },
}

STATUS_LABELS: dict[int, dict[SubscriptionStatus, str]] = {
    1: {
        SubscriptionStatus.ACTIVE: "Active",
        SubscriptionStatus.CANCELED: "Canceled",
    },
}


# =============================================================================
# COLOURS
# =============================================================================

_NON_ALPHANUMERIC = re.compile(r"[^0-9A-Za-z]")
_HEX_DIGITS = re.compile(r"^[0-9A-Fa-f]+$")


def parse_hex_color(text: str) -> tuple[int, int, int, int]:
    """
    Parse a hex colour string into (red, green, blue, alpha) components.

    Non-alphanumeric characters (such as a leading '#') are ignored.
    - 3 digits: RGB, each nibble duplicated ("F80" -> "FF8800"), opaque
    - 6 digits: RRGGBB, opaque
    - 8 digits: AARRGGBB, the leading byte is the alpha channel

    Raises:
        ValueError: if the remaining text is not 3, 6 or 8 hex digits
    """
    digits = _NON_ALPHANUMERIC.sub("", text)
    if not _HEX_DIGITS.match(digits):
        raise ValueError(f"Invalid hex colour: {text!r}")

    value = int(digits, 16)
    if len(digits) == 3:
        return (
            (value >> 8) * 17,
            (value >> 4 & 0xF) * 17,
            (value & 0xF) * 17,
            255,
        )
    if len(digits) == 6:
        return (value >> 16, value >> 8 & 0xFF, value & 0xFF, 255)
    if len(digits) == 8:
        return (value >> 16 & 0xFF, value >> 8 & 0xFF, value & 0xFF, value >> 24)

    raise ValueError(
        f"Invalid hex colour: {text!r} (expected 3, 6 or 8 digits)"
    )


class _LabelledEntity(BaseModel):
    """Shared shape of Category and Tag."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        frozen=True,
        description="Unique identifier"
    )
    name: str = Field(
        ...,
        description="Display name"
    )
    color: str = Field(
        default=DEFAULT_COLOR,
        description="Hex colour (3, 6 or 8 digits)"
    )

    @field_validator('color')
    @classmethod
    def validate_color(cls, v: str) -> str:
        parse_hex_color(v)
        return v

    @property
    def rgba(self) -> tuple[int, int, int, int]:
        return parse_hex_color(self.color)


class Category(_LabelledEntity):
    """A user-defined grouping for subscriptions (one per subscription)."""


class Tag(_LabelledEntity):
    """A free label for subscriptions (many per subscription)."""


def default_categories() -> list[Category]:
    """The categories seeded into an empty store."""
    return [
        Category(name="Entertainment", color="#FF3B30"),
        Category(name="Productivity", color="#007AFF"),
        Category(name="Cloud Storage", color="#5856D6"),
        Category(name="Music & Audio", color="#FF2D55"),
        Category(name="News & Media", color="#FF9500"),
        Category(name="Fitness", color="#34C759"),
        Category(name="Development", color="#5AC8FA"),
        Category(name="Other", color="#8E8E93"),
    ]


def default_tags() -> list[Tag]:
    """The tags seeded into an empty store."""
    return [
        Tag(name="Annual", color="#FF3B30"),
        Tag(name="Trial", color="#FF9500"),
        Tag(name="One-time", color="#34C759"),
    ]


# =============================================================================
# CORE SUBSCRIPTION MODEL
# =============================================================================

class Subscription(BaseModel):
    """
    A recurring financial obligation.

    The id and created_at are assigned once and cannot be reassigned.
    Cost must be non-negative; callers are expected to only create
    subscriptions with a positive cost, the store does not check it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        frozen=True,
        description="Unique subscription ID"
    )

    name: str = Field(
        ...,
        description="Name of the service"
    )
    cost: Decimal = Field(
        ...,
        ge=0,
        description="Amount charged once per billing cycle"
    )
    billing_cycle: BillingCycle = Field(
        ...,
        description="How often the cost is charged"
    )
    next_payment_date: date = Field(
        ...,
        description="Calendar day of the next charge"
    )

    # Weak references
    category_id: Optional[UUID] = Field(
        default=None,
        description="Category this subscription belongs to, if any"
    )
    tag_ids: list[UUID] = Field(
        default_factory=list,
        description="Tags attached to this subscription (order is not significant)"
    )

    status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE,
        description="Active or canceled"
    )
    notes: str = Field(
        default="",
        description="Free-text notes"
    )

    created_at: datetime = Field(
        default_factory=datetime.now,
        frozen=True,
        description="When the subscription was created (local time)"
    )

    @field_validator('billing_cycle', mode='before')
    @classmethod
    def decode_billing_cycle(cls, v: Any) -> Any:
        """Accept persisted labels ("Semi-annually") as well as enum values."""
        if isinstance(v, str) and not isinstance(v, BillingCycle):
            return BillingCycle.from_label(v) or v
        return v

    @field_validator('status', mode='before')
    @classmethod
    def decode_status(cls, v: Any) -> Any:
        """Accept persisted labels ("Active") as well as enum values."""
        if isinstance(v, str) and not isinstance(v, SubscriptionStatus):
            return SubscriptionStatus.from_label(v) or v
        return v

    @field_serializer('billing_cycle')
    def encode_billing_cycle(self, v: BillingCycle) -> str:
        return v.label

    @field_serializer('status')
    def encode_status(self, v: SubscriptionStatus) -> str:
        return v.label

    @property
    def is_active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE
