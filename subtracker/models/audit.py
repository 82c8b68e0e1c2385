"""
Audit Models for Subscription Tracker

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of every store mutation
2. A record of skipped CSV rows and failed reminders
3. Debugging information when persistence fails

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Store mutations
    SUBSCRIPTION_ADDED = "subscription_added"
    SUBSCRIPTION_UPDATED = "subscription_updated"
    SUBSCRIPTION_DELETED = "subscription_deleted"
    CATEGORY_ADDED = "category_added"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"
    TAG_ADDED = "tag_added"
    TAG_UPDATED = "tag_updated"
    TAG_DELETED = "tag_deleted"
    REFERENCES_CLEARED = "references_cleared"

    # Persistence
    COLLECTION_SEEDED = "collection_seeded"
    COLLECTION_LOAD_FAILED = "collection_load_failed"
    SAVE_FAILED = "save_failed"

    # CSV
    CSV_EXPORTED = "csv_exported"
    CSV_EXPORT_FAILED = "csv_export_failed"
    CSV_IMPORTED = "csv_imported"
    CSV_IMPORT_FAILED = "csv_import_failed"
    CSV_ROW_SKIPPED = "csv_row_skipped"

    # Reminders
    REMINDERS_SCHEDULED = "reminders_scheduled"
    REMINDER_DELIVERY_FAILED = "reminder_delivery_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'subscription', 'category', 'csv')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all rows of one import)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_json_line(self) -> str:
        """Serialize as a single line for the append-only audit file."""
        return json.dumps(self.to_log_dict(), default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_added("subscription", sub.id, sub.name)
        event = AuditEventBuilder.csv_row_skipped(3, "unknown billing cycle", cid)
    """

    @staticmethod
    def entity_added(entity_type: str, entity_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType(f"{entity_type}_added"),
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} added: {name}"[:500],
            details={"name": name},
        )

    @staticmethod
    def entity_updated(entity_type: str, entity_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType(f"{entity_type}_updated"),
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} updated: {name}"[:500],
            details={"name": name},
        )

    @staticmethod
    def entity_deleted(entity_type: str, entity_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType(f"{entity_type}_deleted"),
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted",
        )

    @staticmethod
    def references_cleared(
        entity_type: str,
        entity_id: UUID,
        subscription_ids: list[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REFERENCES_CLEARED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=(
                f"Cleared {entity_type} reference from "
                f"{len(subscription_ids)} subscription(s)"
            ),
            details={"subscription_ids": [str(i) for i in subscription_ids]},
        )

    @staticmethod
    def collection_seeded(collection: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_SEEDED,
            entity_type=collection,
            description=f"Seeded empty {collection} collection with {count} defaults",
            details={"count": count},
        )

    @staticmethod
    def collection_load_failed(collection: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=collection,
            description=f"Could not load {collection}; starting with an empty collection",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(collection: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=collection,
            description=f"Failed to save {collection}",
            error_message=error_message,
        )

    @staticmethod
    def csv_exported(path: str, row_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_EXPORTED,
            entity_type="csv",
            description=f"Exported {row_count} subscription(s) to CSV",
            details={"path": path, "row_count": row_count},
        )

    @staticmethod
    def csv_export_failed(path: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_EXPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="csv",
            description="CSV export failed",
            details={"path": path},
            error_message=error_message,
        )

    @staticmethod
    def csv_imported(
        imported: int,
        skipped: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_IMPORTED,
            entity_type="csv",
            correlation_id=correlation_id,
            description=f"Imported {imported} subscription(s), skipped {skipped} row(s)",
            details={"imported": imported, "skipped": skipped},
        )

    @staticmethod
    def csv_import_failed(
        error_message: str,
        correlation_id: UUID,
        path: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_IMPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="csv",
            correlation_id=correlation_id,
            description="CSV import failed",
            details={"path": path} if path else {},
            error_message=error_message,
        )

    @staticmethod
    def csv_row_skipped(
        line_number: int,
        reason: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_ROW_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="csv",
            correlation_id=correlation_id,
            description=f"Skipped CSV line {line_number}: {reason}"[:500],
            details={"line_number": line_number, "reason": reason},
        )

    @staticmethod
    def reminders_scheduled(scheduled: int, failed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMINDERS_SCHEDULED,
            entity_type="reminder",
            description=f"Scheduled {scheduled} reminder(s), {failed} failed",
            details={"scheduled": scheduled, "failed": failed},
        )

    @staticmethod
    def reminder_delivery_failed(
        identifier: str,
        subscription_id: UUID,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMINDER_DELIVERY_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="subscription",
            entity_id=subscription_id,
            description=f"Could not schedule reminder {identifier}",
            details={"identifier": identifier},
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"System error: {error_type}",
            details=details or {},
            error_message=error_message,
        )
