"""Tests for configuration."""

from datetime import time
from pathlib import Path

import pytest
from pydantic import ValidationError

from subtracker.config import (
    CSVSettings,
    ReminderSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


class TestSettings:
    """Tests for the settings groups."""

    def test_data_dir_from_environment(self, monkeypatch, tmp_path):
        """Test the env prefix of the storage group."""
        monkeypatch.setenv("SUBTRACKER_STORAGE_DATA_DIR", str(tmp_path))
        settings = StorageSettings()
        assert settings.data_dir == tmp_path
        assert settings.audit_log_path == tmp_path / "audit.jsonl"

    def test_default_data_dir_is_expanded(self, monkeypatch):
        """Test ~ is expanded in the default."""
        monkeypatch.delenv("SUBTRACKER_STORAGE_DATA_DIR", raising=False)
        assert StorageSettings().data_dir == Path("~/.subtracker").expanduser()

    def test_reminder_fire_time(self):
        """Test hour and minute combine into a time."""
        assert ReminderSettings(hour=7, minute=45).fire_time == time(7, 45)

    def test_reminder_hour_range(self):
        """Test hours outside the day are rejected."""
        with pytest.raises(ValidationError):
            ReminderSettings(hour=24)

    def test_csv_date_formats(self):
        """Test the first date format is used for export."""
        settings = CSVSettings(date_formats="%Y-%m-%d, %m/%d/%Y")
        assert settings.date_formats_list == ["%Y-%m-%d", "%m/%d/%Y"]
        assert settings.export_date_format == "%Y-%m-%d"

    @pytest.mark.parametrize("value", ["", " , ,"])
    def test_csv_date_formats_required(self, value):
        """Test a blank date format list is rejected up front."""
        with pytest.raises(ValidationError):
            CSVSettings(date_formats=value)

    def test_csv_date_formats_required_from_environment(self, monkeypatch):
        """Test a blank list from the environment is rejected too."""
        monkeypatch.setenv("SUBTRACKER_CSV_DATE_FORMATS", ",")
        with pytest.raises(ValidationError):
            CSVSettings()

    def test_csv_default_color_validated(self):
        """Test the import colour must be hex."""
        with pytest.raises(ValidationError):
            CSVSettings(default_color="blue")

    def test_get_settings_is_cached(self):
        """Test the settings object is reused."""
        get_settings.cache_clear()
        assert get_settings() is get_settings()

    def test_validate_all_settings(self):
        """Test every group validates with defaults."""
        get_settings.cache_clear()
        results = validate_all_settings()
        assert all(results[name] for name in ("storage", "csv", "reminders", "app"))
