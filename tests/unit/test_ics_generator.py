"""Unit tests for ICS export."""

from datetime import datetime
from pathlib import Path

from schedcal.event_models import StructuredEvent
from schedcal.ics_generator import build_ics, write_ics

STAMP = datetime(2024, 7, 1, 12, 0)


class TestBuildIcs:
    """Test suite for build_ics."""

    def test_single_event(self, team_meeting: StructuredEvent) -> None:
        """Test the VEVENT fields for a parsed event."""
        ics = build_ics([team_meeting], stamp=STAMP)
        lines = ics.split("\r\n")

        assert lines[0] == "BEGIN:VCALENDAR"
        assert "DTSTART:20240729T090000" in lines
        assert "DTEND:20240729T100000" in lines
        assert "DTSTAMP:20240701T120000" in lines
        assert "SUMMARY:Team Meeting" in lines
        assert "DESCRIPTION:(Originally: 09:00 AM - Team Meeting)" in lines
        assert ics.endswith("END:VCALENDAR\r\n")

    def test_text_is_escaped(self) -> None:
        """Test RFC 5545 escaping of commas, semicolons and newlines."""
        event = StructuredEvent(
            title="Lunch, then; coffee",
            start_datetime=datetime(2024, 7, 29, 12, 0),
            original_text="12:00 PM - Lunch, then; coffee",
            location="Cafe\nDowntown",
        )
        ics = build_ics([event], stamp=STAMP)

        assert "SUMMARY:Lunch\\, then\\; coffee" in ics
        assert "LOCATION:Cafe\\nDowntown" in ics

    def test_long_lines_are_folded(self) -> None:
        """Test that no physical line exceeds 75 octets."""
        event = StructuredEvent(
            title="Quarterly planning " * 10,
            start_datetime=datetime(2024, 7, 29, 12, 0),
            original_text="12:00 PM - planning",
        )
        ics = build_ics([event], stamp=STAMP)

        assert all(len(line.encode("utf-8")) <= 75 for line in ics.split("\r\n"))
        assert "\r\n " in ics

    def test_events_without_start_are_skipped(self) -> None:
        """Test that undated history records are left out."""
        event = StructuredEvent(title="Undated", start_datetime=None, original_text="Undated")

        assert "BEGIN:VEVENT" not in build_ics([event], stamp=STAMP)


class TestWriteIcs:
    """Test suite for write_ics."""

    def test_writes_file_with_crlf(self, tmp_path: Path, team_meeting: StructuredEvent) -> None:
        """Test that the file is written with CRLF line endings."""
        path = write_ics([team_meeting], tmp_path / "out" / "schedule.ics")

        assert path == tmp_path / "out" / "schedule.ics"
        content = path.read_bytes()
        assert content.startswith(b"BEGIN:VCALENDAR\r\n")
        assert b"SUMMARY:Team Meeting\r\n" in content

    def test_unwritable_path_returns_none(self, tmp_path: Path, team_meeting: StructuredEvent) -> None:
        """Test that write failures are reported as None."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        assert write_ics([team_meeting], blocker / "schedule.ics") is None
