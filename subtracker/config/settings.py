"""
Configuration Management for Subscription Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Each component receives its settings group explicitly and only falls
back to get_settings() when none is given, so tests never read the
user's real environment by accident.
"""

from datetime import time
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the three collections and the audit trail are persisted."""

    model_config = SettingsConfigDict(
        env_prefix="SUBTRACKER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("~/.subtracker"),
        validate_default=True,
        description="Directory holding the JSON collections"
    )
    subscriptions_file: str = Field(
        default="subscriptions.json",
        description="File name of the subscriptions collection"
    )
    categories_file: str = Field(
        default="categories.json",
        description="File name of the categories collection"
    )
    tags_file: str = Field(
        default="tags.json",
        description="File name of the tags collection"
    )

    # Audit trail
    audit_enabled: bool = Field(
        default=True,
        description="Append audit events to the audit log file"
    )
    audit_log_file: str = Field(
        default="audit.jsonl",
        description="File name of the append-only audit log"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        """Expand ~ so the path can be used directly."""
        return v.expanduser()

    @property
    def audit_log_path(self) -> Path:
        return self.data_dir / self.audit_log_file


class CSVSettings(BaseSettings):
    """CSV import/export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUBTRACKER_CSV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    date_formats: str = Field(
        default="%m/%d/%Y,%m/%d/%y",
        description="Comma-separated strptime formats; the first one is used for export"
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of CSV files"
    )
    default_color: str = Field(
        default="#007AFF",
        pattern=r"^#?([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$",
        description="Colour given to categories/tags created during import"
    )
    tag_separator: str = Field(
        default="; ",
        min_length=1,
        description="Separator between tag names inside the Tags column"
    )

    @field_validator('date_formats')
    @classmethod
    def require_date_format(cls, v: str) -> str:
        """At least one format is needed; the first is used for export."""
        if not any(fmt.strip() for fmt in v.split(",")):
            raise ValueError("date_formats must name at least one format")
        return v

    @property
    def date_formats_list(self) -> list[str]:
        """Get date formats as a list."""
        return [fmt.strip() for fmt in self.date_formats.split(",") if fmt.strip()]

    @property
    def export_date_format(self) -> str:
        return self.date_formats_list[0]


class ReminderSettings(BaseSettings):
    """Reminder scheduling configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUBTRACKER_REMINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Local wall-clock time a reminder fires on its calendar day
    hour: int = Field(
        default=9,
        ge=0,
        le=23,
        description="Hour of day reminders fire"
    )
    minute: int = Field(
        default=0,
        ge=0,
        le=59,
        description="Minute of hour reminders fire"
    )
    currency_symbol: str = Field(
        default="$",
        description="Currency symbol used in reminder messages"
    )

    @property
    def fire_time(self) -> time:
        return time(hour=self.hour, minute=self.minute)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Statistics windows
    upcoming_window_days: int = Field(
        default=7,
        ge=0,
        description="A payment within this many days is 'upcoming'"
    )
    upcoming_payments_days: int = Field(
        default=30,
        ge=0,
        description="Default look-ahead for the upcoming payments list"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def csv(self) -> CSVSettings:
        return CSVSettings()

    @property
    def reminders(self) -> ReminderSettings:
        return ReminderSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry holding the message for each failure.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "csv", "reminders", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
