"""
Application settings management for user preferences.

Tracks the Gemini model used for schedule generation, the base URL of the
"add event" calendar link and the file name of the history store. Settings
are persisted as JSON in the per-user application directory so they survive
restarts. SCHEDCAL_HOME overrides the directory.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import TypedDict

from schedcal.logging_helper import Log


class SettingsSchema(TypedDict, total=False):
    gemini_model: str
    calendar_base_url: str
    history_file: str


DEFAULT_SETTINGS: SettingsSchema = {
    "gemini_model": "gemini-2.5-flash",
    "calendar_base_url": "https://calendar.google.com/calendar/render",
    "history_file": "history.json",
}


def get_settings_dir() -> Path:
    """Resolve the settings directory for the current platform."""
    override = os.environ.get("SCHEDCAL_HOME")
    if override:
        return Path(override)
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "ScheduleCal"
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "schedcal"


def get_settings_file() -> Path:
    return get_settings_dir() / "settings.json"


def _ensure_settings_dir() -> None:
    settings_dir = get_settings_dir()
    try:
        settings_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        Log.warn(f"Unable to create settings directory {settings_dir}: {err}")


def load_settings() -> SettingsSchema:
    """
    Load settings from disk, falling back to defaults if anything fails.
    """
    _ensure_settings_dir()
    settings_file = get_settings_file()
    if not settings_file.exists():
        Log.info(f"Settings file not found, using defaults: {settings_file}")
        return DEFAULT_SETTINGS.copy()

    try:
        data = json.loads(settings_file.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Settings data is not a JSON object")
    except (OSError, ValueError) as err:
        Log.warn(f"Failed to read settings file ({settings_file}): {err}")
        return DEFAULT_SETTINGS.copy()

    merged: SettingsSchema = DEFAULT_SETTINGS.copy()
    # Merge only known keys with string values
    for key in DEFAULT_SETTINGS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            merged[key] = value.strip()  # type: ignore[literal-required]
    return merged


def save_settings(settings: SettingsSchema) -> None:
    """
    Persist settings to disk.
    """
    _ensure_settings_dir()
    settings_file = get_settings_file()
    try:
        settings_file.write_text(
            json.dumps(settings, indent=2, sort_keys=True),
            encoding="utf-8",
        )
    except OSError as err:
        Log.warn(f"Failed to write settings file ({settings_file}): {err}")


def get_gemini_model() -> str:
    return load_settings().get("gemini_model", DEFAULT_SETTINGS["gemini_model"])


def get_calendar_base_url() -> str:
    base_url = load_settings().get("calendar_base_url", DEFAULT_SETTINGS["calendar_base_url"])
    if not base_url.startswith(("http://", "https://")):
        Log.warn(f"Invalid calendar_base_url '{base_url}', using default")
        base_url = DEFAULT_SETTINGS["calendar_base_url"]
    return base_url.rstrip("?")


def set_calendar_base_url(value: str) -> None:
    if not value.startswith(("http://", "https://")):
        raise ValueError(f"Invalid calendar base URL: {value}")
    settings = load_settings()
    settings["calendar_base_url"] = value
    save_settings(settings)
    Log.info(f"Saved calendar base URL setting: {value}")


def get_history_path() -> Path:
    history_file = load_settings().get("history_file", DEFAULT_SETTINGS["history_file"])
    return get_settings_dir() / history_file
