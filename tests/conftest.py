"""Pytest configuration and shared fixtures."""

import os
import tempfile
from datetime import datetime

# Keep test runs out of the project logs directory; read at import time
os.environ.setdefault("SCHEDCAL_LOG_DIR", tempfile.mkdtemp(prefix="schedcal-logs-"))
os.environ.setdefault("SCHEDCAL_QUIET", "1")

import pytest  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings and history at a per-test directory."""
    home = tmp_path / "schedcal-home"
    monkeypatch.setenv("SCHEDCAL_HOME", str(home))
    for name in ("USE_STUB", "GEMINI_API_KEY", "API_KEY"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture(autouse=True)
def reset_permissions():
    """Forget cached notification permission between tests."""
    from schedcal.permissions import reset_permission_cache

    reset_permission_cache()
    yield
    reset_permission_cache()


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for date defaults."""
    return datetime(2026, 10, 19, 8, 0)


@pytest.fixture
def sample_schedule() -> str:
    """Schedule markdown in the shape the model is prompted for."""
    return """Here is your updated schedule:

### Monday, July 29th, 2024
09:00 AM - Team Meeting
12:30 PM - **Lunch with Sarah**
14:00 - Dentist Appointment

Notes: bring the quarterly numbers.

### Tuesday, July 30th, 2024
- 10:00 AM - Finish quarterly report
Task: Call John @ 3:00 PM
Event: Board review @ 4:30 PM on August 2nd, 2024
"""


@pytest.fixture
def team_meeting():
    """Event as extracted from '09:00 AM - Team Meeting' under a July 29th 2024 heading."""
    from schedcal.event_models import StructuredEvent

    return StructuredEvent(
        title="Team Meeting",
        start_datetime=datetime(2024, 7, 29, 9, 0),
        original_text="09:00 AM - Team Meeting",
    )
