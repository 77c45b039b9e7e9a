"""Unit tests for the command line app."""

from pathlib import Path

import pytest

from schedcal import calendar_connector
from schedcal.app import main

FUTURE_SCHEDULE = "### Monday, January 5th, 2099\n09:00 AM - Launch review\nTask: Ship it @ 4:00 PM\n"


@pytest.fixture
def schedule_file(tmp_path: Path) -> Path:
    path = tmp_path / "schedule.md"
    path.write_text(FUTURE_SCHEDULE)
    return path


class TestCli:
    """Test suite for the schedcal CLI."""

    def test_parse(self, schedule_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Test offline extraction from a file."""
        assert main(["parse", str(schedule_file)]) == 0

        output = capsys.readouterr().out
        assert "1. Launch review - Jan 05, 2099 at 09:00 AM" in output
        assert "dates=20990105T090000/20990105T100000" in output

    def test_parse_with_ics(self, schedule_file: Path, tmp_path: Path) -> None:
        """Test the ICS export option."""
        ics_path = tmp_path / "out.ics"

        assert main(["parse", str(schedule_file), "--ics", str(ics_path)]) == 0
        assert ics_path.read_bytes().count(b"BEGIN:VEVENT") == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that unreadable input is an error exit, not a traceback."""
        assert main(["parse", str(tmp_path / "missing.md")]) == 1

    def test_generate_and_history(self, capsys: pytest.CaptureFixture) -> None:
        """Test generating with the stub model and listing the saved entry."""
        assert main(["generate", "Plan my week", "--stub"]) == 0
        assert "Team Meeting" in capsys.readouterr().out

        assert main(["history"]) == 0
        assert "Schedule for: Plan my week  (5 events)" in capsys.readouterr().out

    def test_empty_history(self, capsys: pytest.CaptureFixture) -> None:
        """Test the message shown before anything is generated."""
        assert main(["history"]) == 0
        assert "No schedules generated yet." in capsys.readouterr().out

    def test_remind_dry_run(self, schedule_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Test recording a reminder without waiting for it."""
        assert main(["remind", str(schedule_file), "2", "--dry-run"]) == 0
        assert 'Reminder set for "Ship it" at 04:00 PM.' in capsys.readouterr().out

    def test_remind_bad_index(self, schedule_file: Path) -> None:
        """Test that an out-of-range event number fails cleanly."""
        assert main(["remind", str(schedule_file), "5", "--dry-run"]) == 1

    def test_parse_open(self, schedule_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that --open hands every event link to the browser."""
        opened = []
        monkeypatch.setattr(calendar_connector.webbrowser, "open", lambda url, new=0: opened.append(url) or True)

        assert main(["parse", str(schedule_file), "--open"]) == 0
        assert len(opened) == 2
        assert "text=Launch%20review" in opened[0]
        assert "text=Ship%20it" in opened[1]

    def test_generate_open(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test opening the generated events from the stub model."""
        opened = []
        monkeypatch.setattr(calendar_connector.webbrowser, "open", lambda url, new=0: opened.append(url) or True)

        assert main(["generate", "Plan my week", "--stub", "--open"]) == 0
        assert len(opened) == 5

    def test_config_sets_calendar_base_url(self, schedule_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Test that a saved endpoint is used for later event links."""
        assert main(["config", "--calendar-base-url", "https://calendar.example/render"]) == 0
        assert "calendar_base_url: https://calendar.example/render" in capsys.readouterr().out

        assert main(["parse", str(schedule_file)]) == 0
        assert "https://calendar.example/render?action=TEMPLATE" in capsys.readouterr().out

    def test_config_rejects_bad_url(self, capsys: pytest.CaptureFixture) -> None:
        """Test that a non-http endpoint is an error exit and is not saved."""
        assert main(["config", "--calendar-base-url", "ftp://calendar.example"]) == 1

        assert main(["config"]) == 0
        assert "calendar_base_url: https://calendar.google.com/calendar/render" in capsys.readouterr().out
