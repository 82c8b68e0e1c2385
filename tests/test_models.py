"""
Tests for Subscription Tracker models

Test strategy:
1. Unit tests for individual components (models, calculator, codec)
2. Integration tests for flows (store + scheduler + codec together)
3. No real data directory in tests (in-memory storage or tmp_path)
"""

import json
from datetime import date, datetime
from decimal import Decimal
from fractions import Fraction
from uuid import uuid4

import pytest
from pydantic import ValidationError

from subtracker.models.subscription import (
    BillingCycle,
    Category,
    Subscription,
    SubscriptionStatus,
    Tag,
    default_categories,
    default_tags,
    parse_hex_color,
)
from subtracker.models.reminder import CategoryCost, ImportReport, SkippedRow
from subtracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestBillingCycle:
    """Tests for the billing cycle enum."""

    def test_cycle_days(self):
        """Test the fixed day-length of every cycle."""
        assert BillingCycle.WEEKLY.days == 7
        assert BillingCycle.MONTHLY.days == 30
        assert BillingCycle.QUARTERLY.days == 90
        assert BillingCycle.SEMIANNUALLY.days == 180
        assert BillingCycle.ANNUALLY.days == 365

    def test_cycle_monthly_equivalents(self):
        """Test the monthly-equivalent multipliers are exact fractions."""
        assert BillingCycle.WEEKLY.monthly_equivalent == Fraction(52, 12)
        assert BillingCycle.MONTHLY.monthly_equivalent == 1
        assert BillingCycle.QUARTERLY.monthly_equivalent == Fraction(1, 3)
        assert BillingCycle.SEMIANNUALLY.monthly_equivalent == Fraction(1, 6)
        assert BillingCycle.ANNUALLY.monthly_equivalent == Fraction(1, 12)

    def test_labels(self):
        """Test the persisted display labels."""
        assert BillingCycle.SEMIANNUALLY.label == "Semi-annually"
        assert BillingCycle.MONTHLY.label == "Monthly"
        assert SubscriptionStatus.CANCELED.label == "Canceled"

    def test_from_label_is_exact(self):
        """Test label lookup is exact and case-sensitive."""
        assert BillingCycle.from_label("Annually") == BillingCycle.ANNUALLY
        assert BillingCycle.from_label("annually") is None
        assert BillingCycle.from_label("Biweekly") is None
        assert SubscriptionStatus.from_label("Active") == SubscriptionStatus.ACTIVE
        assert SubscriptionStatus.from_label("ACTIVE") is None


class TestSubscriptionModel:
    """Tests for the Subscription model."""

    def test_subscription_defaults(self, make_subscription):
        """Test defaults for optional fields."""
        sub = make_subscription()
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.category_id is None
        assert sub.tag_ids == []
        assert sub.notes == ""
        assert isinstance(sub.created_at, datetime)
        assert sub.is_active is True

    def test_subscription_strips_whitespace(self, make_subscription):
        """Test that whitespace is stripped from the name."""
        sub = make_subscription(name="  Spotify  ")
        assert sub.name == "Spotify"

    def test_long_name_is_accepted(self, make_subscription):
        """Test names have no length limit."""
        assert len(make_subscription(name="x" * 500).name) == 500
        assert len(Category(name="c" * 300).name) == 300

    def test_subscription_rejects_negative_cost(self, make_subscription):
        """Test that negative costs are rejected."""
        with pytest.raises(ValidationError):
            make_subscription(cost=Decimal("-1"))

    def test_zero_cost_is_accepted(self, make_subscription):
        """Test the model itself does not require a positive cost."""
        assert make_subscription(cost=Decimal("0")).cost == 0

    def test_id_is_immutable(self, make_subscription):
        """Test the identifier cannot be reassigned."""
        sub = make_subscription()
        with pytest.raises(ValidationError):
            sub.id = uuid4()

    def test_created_at_is_immutable(self, make_subscription):
        """Test the creation timestamp cannot be reassigned."""
        sub = make_subscription()
        with pytest.raises(ValidationError):
            sub.created_at = datetime(2000, 1, 1)

    def test_serializes_enum_labels(self, make_subscription):
        """Test enums are persisted as their labels."""
        sub = make_subscription(
            billing_cycle=BillingCycle.SEMIANNUALLY,
            status=SubscriptionStatus.CANCELED,
        )
        data = sub.model_dump(mode="json")
        assert data["billing_cycle"] == "Semi-annually"
        assert data["status"] == "Canceled"

    def test_decodes_labels_and_values(self, make_subscription):
        """Test both labels and enum values are accepted on input."""
        from_label = make_subscription(billing_cycle="Quarterly", status="Canceled")
        from_value = make_subscription(billing_cycle="quarterly", status="canceled")
        assert from_label.billing_cycle == BillingCycle.QUARTERLY
        assert from_value.billing_cycle == BillingCycle.QUARTERLY
        assert from_label.status == SubscriptionStatus.CANCELED

    def test_json_round_trip(self, make_subscription):
        """Test a persisted record loads back to an equal model."""
        sub = make_subscription(category_id=uuid4(), tag_ids=[uuid4()], notes="family plan")
        record = json.loads(json.dumps(sub.model_dump(mode="json")))
        assert Subscription.model_validate(record) == sub

    def test_unknown_cycle_rejected(self, make_subscription):
        """Test unknown cycles fail validation."""
        with pytest.raises(ValidationError):
            make_subscription(billing_cycle="Biweekly")


class TestColors:
    """Tests for hex colour parsing."""

    def test_six_digit_color(self):
        """Test RRGGBB parsing."""
        assert parse_hex_color("#007AFF") == (0, 122, 255, 255)

    def test_three_digit_color_duplicates_nibbles(self):
        """Test RGB expands each nibble."""
        assert parse_hex_color("#F80") == (255, 136, 0, 255)

    def test_eight_digit_color_has_leading_alpha(self):
        """Test AARRGGBB puts alpha first."""
        assert parse_hex_color("80FF0000") == (255, 0, 0, 128)

    @pytest.mark.parametrize("text", ["#12345", "#GGGGGG", "", "#1234567890"])
    def test_invalid_colors(self, text):
        """Test other lengths and non-hex digits are rejected."""
        with pytest.raises(ValueError):
            parse_hex_color(text)

    def test_category_validates_color(self):
        """Test Category rejects an invalid colour."""
        with pytest.raises(ValidationError):
            Category(name="Bad", color="#12")

    def test_entity_rgba(self):
        """Test the rgba property on a tag."""
        assert Tag(name="Trial", color="#FF9500").rgba == (255, 149, 0, 255)


class TestDefaults:
    """Tests for the seeded categories and tags."""

    def test_default_categories(self):
        """Test there are eight predefined categories."""
        categories = default_categories()
        assert len(categories) == 8
        assert categories[0].name == "Entertainment"
        assert categories[-1].name == "Other"

    def test_default_tags(self):
        """Test there are three predefined tags."""
        assert [t.name for t in default_tags()] == ["Annual", "Trial", "One-time"]

    def test_defaults_get_fresh_ids(self):
        """Test two seedings never share ids."""
        first = {c.id for c in default_categories()}
        second = {c.id for c in default_categories()}
        assert first.isdisjoint(second)


class TestDerivedModels:
    """Tests for report models."""

    def test_category_cost_display_name(self):
        """Test the uncategorized bucket label."""
        assert CategoryCost(cost=Decimal("1")).display_name == "Uncategorized"
        named = CategoryCost(
            category=Category(name="Fitness"),
            cost=Decimal("1"),
        )
        assert named.display_name == "Fitness"

    def test_import_report_counts(self):
        """Test the report counters."""
        report = ImportReport(
            imported=[uuid4(), uuid4()],
            skipped=[SkippedRow(line_number=3, reason="bad", content="x")],
        )
        assert report.imported_count == 2
        assert report.skipped_count == 1


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_ADDED,
            description="Subscription added",
        )
        assert event.event_type == AuditEventType.SUBSCRIPTION_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.CSV_IMPORTED,
            description="Imported",
            details={"imported": 3},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "csv_imported"
        assert log_dict["details"]["imported"] == 3

    def test_audit_event_json_line_round_trip(self):
        """Test a JSON line loads back into an event."""
        event = AuditEventBuilder.csv_row_skipped(4, "unknown status", uuid4())
        line = event.to_json_line()
        assert "\n" not in line
        restored = AuditEvent.model_validate_json(line)
        assert restored.event_id == event.event_id
        assert restored.details["line_number"] == 4

    def test_builder_entity_events(self):
        """Test the entity event builders map to the right types."""
        entity_id = uuid4()
        assert AuditEventBuilder.entity_added("tag", entity_id, "Trial").event_type \
            == AuditEventType.TAG_ADDED
        assert AuditEventBuilder.entity_updated("category", entity_id, "Other").event_type \
            == AuditEventType.CATEGORY_UPDATED
        deleted = AuditEventBuilder.entity_deleted("subscription", entity_id)
        assert deleted.event_type == AuditEventType.SUBSCRIPTION_DELETED
        assert deleted.entity_id == entity_id

    def test_builder_truncates_long_names(self):
        """Test an entity name longer than a description still builds an event."""
        event = AuditEventBuilder.entity_added("subscription", uuid4(), "n" * 600)
        assert len(event.description) == 500

    def test_builder_failure_severity(self):
        """Test failure events carry warning/error severity."""
        assert AuditEventBuilder.save_failed("tags", "disk full").severity \
            == AuditSeverity.ERROR
        assert AuditEventBuilder.collection_load_failed("tags", "bad").severity \
            == AuditSeverity.WARNING


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
