"""
Data Models Package

This package contains all Pydantic models used in the Subscription Tracker.
All data flowing through the system must conform to these schemas.
"""

from subtracker.models.subscription import (
    DEFAULT_COLOR,
    LABEL_SCHEMA_VERSION,
    BillingCycle,
    Category,
    Subscription,
    SubscriptionStatus,
    Tag,
    default_categories,
    default_tags,
    parse_hex_color,
)
from subtracker.models.reminder import (
    CategoryCost,
    ImportReport,
    MonthlySpending,
    Reminder,
    ReminderKind,
    SkippedRow,
)
from subtracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Subscription models
    "DEFAULT_COLOR",
    "LABEL_SCHEMA_VERSION",
    "BillingCycle",
    "Category",
    "Subscription",
    "SubscriptionStatus",
    "Tag",
    "default_categories",
    "default_tags",
    "parse_hex_color",
    # Derived models
    "CategoryCost",
    "ImportReport",
    "MonthlySpending",
    "Reminder",
    "ReminderKind",
    "SkippedRow",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
