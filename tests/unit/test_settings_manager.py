"""Unit tests for settings management."""

import json
from pathlib import Path

import pytest

from schedcal.settings_manager import (
    DEFAULT_SETTINGS,
    get_calendar_base_url,
    get_gemini_model,
    get_history_path,
    get_settings_file,
    load_settings,
    set_calendar_base_url,
)


class TestSettings:
    """Test suite for the settings file."""

    def test_defaults_without_file(self) -> None:
        """Test that defaults are returned when no file exists."""
        assert load_settings() == DEFAULT_SETTINGS
        assert get_gemini_model() == "gemini-2.5-flash"
        assert get_calendar_base_url() == "https://calendar.google.com/calendar/render"

    def test_known_keys_are_merged(self) -> None:
        """Test that known keys override defaults and unknown keys are ignored."""
        get_settings_file().parent.mkdir(parents=True, exist_ok=True)
        get_settings_file().write_text(json.dumps({"gemini_model": "gemini-pro", "theme": "dark"}))

        settings = load_settings()

        assert settings["gemini_model"] == "gemini-pro"
        assert "theme" not in settings

    def test_invalid_json_falls_back(self) -> None:
        """Test that a corrupt file yields defaults."""
        get_settings_file().parent.mkdir(parents=True, exist_ok=True)
        get_settings_file().write_text("[1, 2")

        assert load_settings() == DEFAULT_SETTINGS

    def test_set_calendar_base_url(self) -> None:
        """Test persisting the calendar endpoint."""
        set_calendar_base_url("https://calendar.example/render")

        assert get_calendar_base_url() == "https://calendar.example/render"

    def test_set_invalid_calendar_base_url(self) -> None:
        """Test that non-http URLs are rejected."""
        with pytest.raises(ValueError):
            set_calendar_base_url("ftp://calendar.example")

    def test_history_path_in_settings_dir(self, isolated_settings: Path) -> None:
        """Test that the history file lives next to the settings file."""
        assert get_history_path() == isolated_settings / "history.json"
