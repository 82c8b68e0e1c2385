"""
CSV Import/Export

Wire format (UTF-8, one subscription per line):

    Name,Cost,Billing Cycle,Next Payment Date,Status,Category,Tags,Notes
    "Netflix",15.99,"Monthly","01/15/2025","Active","Entertainment","",""

Every text field is wrapped in double quotes with internal quotes
doubled; Cost is a bare decimal. Tags holds the tag names joined
with "; ". Line breaks inside text fields are exported as spaces, since
import reads one record per line.

IMPORTANT: Import is deliberately forgiving. The row scanner toggles an
"inside quotes" flag on every double quote and splits on commas outside
quotes. A doubled quote therefore toggles twice and disappears rather
than being unescaped to one quote. Rows that cannot be understood are
skipped and reported; they never abort the import.

Import is not transactional: rows processed before a failure stay
committed.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from subtracker.audit import AuditLogger, create_correlation_id
from subtracker.config import CSVSettings, get_settings
from subtracker.models.audit import AuditEventBuilder
from subtracker.models.reminder import ImportReport, SkippedRow
from subtracker.models.subscription import (
    BillingCycle,
    Category,
    Subscription,
    SubscriptionStatus,
    Tag,
)
from subtracker.store import EntityStore


HEADER = "Name,Cost,Billing Cycle,Next Payment Date,Status,Category,Tags,Notes"

MIN_FIELDS = 5

_LINE_BREAKS = re.compile(r"\r\n|\r|\n")


class CSVCodecError(Exception):
    """Base exception for CSV import/export."""
    pass


class CSVFormatError(CSVCodecError):
    """The document has no data rows."""
    pass


class CSVFileError(CSVCodecError):
    """The CSV file could not be read or written."""
    pass


def quote(value: str) -> str:
    """Wrap a field in double quotes, doubling any quote inside it."""
    return '"' + value.replace('"', '""') + '"'


def single_line(value: str) -> str:
    """Replace line breaks with spaces; a record must fit on one line."""
    return _LINE_BREAKS.sub(" ", value)


def split_row(row: str) -> list[str]:
    """
    Split one CSV line into fields.

    Quotes toggle the inside-quotes flag and are dropped; commas inside
    quotes are kept. Spaces and tabs around each field are trimmed.
    """
    fields = []
    current = []
    inside_quotes = False

    for char in row:
        if char == '"':
            inside_quotes = not inside_quotes
        elif char == "," and not inside_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    fields.append("".join(current))
    return [field.strip(" \t") for field in fields]


def parse_cost(text: str) -> Decimal:
    """Parse a cost; anything that is not a finite number becomes 0."""
    try:
        value = Decimal(text)
    except InvalidOperation:
        return Decimal("0.0")
    if not value.is_finite():
        return Decimal("0.0")
    return value


class CSVCodec:
    """
    Serializes a store to CSV and imports CSV rows into it.

    Categories and tags are matched by exact, case-sensitive name and
    created with the default colour when missing.
    """

    def __init__(
        self,
        store: EntityStore,
        settings: Optional[CSVSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._settings = settings or get_settings().csv
        self._audit_logger = audit_logger or AuditLogger()

    # =========================================================================
    # EXPORT
    # =========================================================================

    def _subscription_to_row(self, subscription: Subscription) -> str:
        category = self._store.resolve_category(subscription)
        tags = self._settings.tag_separator.join(
            tag.name for tag in self._store.resolve_tags(subscription)
        )
        return ",".join([
            quote(single_line(subscription.name)),
            format(subscription.cost, "f"),
            quote(subscription.billing_cycle.label),
            quote(subscription.next_payment_date.strftime(self._settings.export_date_format)),
            quote(subscription.status.label),
            quote(single_line(category.name if category else "")),
            quote(single_line(tags)),
            quote(single_line(subscription.notes)),
        ])

    def export_text(self) -> str:
        """The whole store as a CSV document, header first."""
        lines = [HEADER]
        lines.extend(
            self._subscription_to_row(s) for s in self._store.list_subscriptions()
        )
        return "\n".join(lines) + "\n"

    def export_csv(self, path: Path) -> int:
        """
        Write the CSV document to path.

        Returns:
            Number of subscriptions written

        Raises:
            CSVFileError: If the file cannot be written
        """
        path = Path(path)
        text = self.export_text()
        try:
            path.write_text(text, encoding=self._settings.encoding)
        except (OSError, UnicodeEncodeError) as e:
            self._audit_logger.log(AuditEventBuilder.csv_export_failed(str(path), str(e)))
            raise CSVFileError(f"Failed to write {path}: {e}")

        row_count = len(self._store.list_subscriptions())
        self._audit_logger.log(AuditEventBuilder.csv_exported(str(path), row_count))
        return row_count

    # =========================================================================
    # IMPORT
    # =========================================================================

    def _parse_date(self, text: str) -> Optional[date]:
        for fmt in self._settings.date_formats_list:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        return None

    def _row_category(self, name: str) -> Optional[Category]:
        """The category named in a row: an existing one, or a new one not yet stored."""
        if not name:
            return None
        existing = self._store.find_category_by_name(name)
        if existing:
            return existing
        return Category(name=name, color=self._settings.default_color)

    def _row_tags(self, text: str) -> list[Tag]:
        """The tags named in a row, in order; missing ones are built but not stored."""
        tags: list[Tag] = []
        if not text:
            return tags
        for name in text.split(self._settings.tag_separator):
            name = name.strip()
            if not name:
                continue
            existing = self._store.find_tag_by_name(name)
            if existing is None:
                # A name repeated within one row is created only once
                existing = next((t for t in tags if t.name == name), None)
            tags.append(existing or Tag(name=name, color=self._settings.default_color))
        return tags

    def _commit_category(self, category: Optional[Category], report: ImportReport) -> Optional[UUID]:
        if category is None:
            return None
        if self._store.get_category(category.id) is None:
            self._store.add_category(category)
            report.created_categories.append(category.name)
        return category.id

    def _commit_tags(self, tags: list[Tag], report: ImportReport) -> list[UUID]:
        for tag in tags:
            if self._store.get_tag(tag.id) is None:
                self._store.add_tag(tag)
                report.created_tags.append(tag.name)
        return [tag.id for tag in tags]

    def _import_row(self, fields: list[str], report: ImportReport) -> Optional[str]:
        """
        Import one data row.

        Returns None on success, or the reason the row was skipped.
        """
        if len(fields) < MIN_FIELDS:
            return f"expected at least {MIN_FIELDS} fields, found {len(fields)}"

        name, cost_text, cycle_text, date_text, status_text = fields[:MIN_FIELDS]
        category_name = fields[5] if len(fields) > 5 else ""
        tags_text = fields[6] if len(fields) > 6 else ""
        notes = fields[7] if len(fields) > 7 else ""

        billing_cycle = BillingCycle.from_label(cycle_text)
        if billing_cycle is None:
            return f"unknown billing cycle {cycle_text!r}"

        next_payment_date = self._parse_date(date_text)
        if next_payment_date is None:
            return f"unparsable date {date_text!r}"

        status = SubscriptionStatus.from_label(status_text)
        if status is None:
            return f"unknown status {status_text!r}"

        try:
            subscription = Subscription(
                name=name,
                cost=parse_cost(cost_text),
                billing_cycle=billing_cycle,
                next_payment_date=next_payment_date,
                status=status,
                notes=notes,
            )
            category = self._row_category(category_name)
            tags = self._row_tags(tags_text)
        except ValidationError as e:
            return f"invalid {e.title.lower()}: {e.error_count()} validation error(s)"

        # Nothing is stored until every entity of the row has validated
        subscription.category_id = self._commit_category(category, report)
        subscription.tag_ids = self._commit_tags(tags, report)

        self._store.add_subscription(subscription)
        report.imported.append(subscription.id)
        return None

    def import_text(
        self,
        text: str,
        correlation_id: Optional[UUID] = None,
    ) -> ImportReport:
        """
        Import every data row of a CSV document into the store.

        The first non-empty line is the header and is not checked.

        Raises:
            CSVFormatError: If there is no data row
            StorageError: If persisting an imported entity fails
        """
        correlation_id = correlation_id or create_correlation_id()
        lines = [line.rstrip("\r") for line in text.split("\n")]
        lines = [line for line in lines if line]

        if len(lines) < 2:
            self._audit_logger.log(
                AuditEventBuilder.csv_import_failed(
                    "CSV file is empty or has no data rows",
                    correlation_id,
                )
            )
            raise CSVFormatError("CSV file is empty or has no data rows")

        report = ImportReport()
        for line_number, line in enumerate(lines[1:], start=2):
            reason = self._import_row(split_row(line), report)
            if reason is None:
                continue
            report.skipped.append(
                SkippedRow(line_number=line_number, reason=reason, content=line)
            )
            self._audit_logger.log(
                AuditEventBuilder.csv_row_skipped(line_number, reason, correlation_id)
            )

        self._audit_logger.log(
            AuditEventBuilder.csv_imported(
                report.imported_count,
                report.skipped_count,
                correlation_id,
            )
        )
        return report

    def import_csv(self, path: Path) -> ImportReport:
        """
        Read a CSV file and import it.

        Raises:
            CSVFileError: If the file cannot be read
            CSVFormatError: If there is no data row
        """
        path = Path(path)
        correlation_id = create_correlation_id()
        try:
            text = path.read_text(encoding=self._settings.encoding)
        except (OSError, UnicodeDecodeError) as e:
            self._audit_logger.log(
                AuditEventBuilder.csv_import_failed(str(e), correlation_id, str(path))
            )
            raise CSVFileError(f"Failed to read {path}: {e}")

        return self.import_text(text, correlation_id)
