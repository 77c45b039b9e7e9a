"""Unit tests for the time/date normalizer."""

from datetime import date, datetime, time

import pytest

from schedcal.time_normalizer import (
    normalize_datetime,
    parse_clock_time,
    parse_date_fragment,
    to_24_hour,
)


class TestClockTime:
    """Test suite for 12/24-hour clock parsing."""

    @pytest.mark.parametrize(
        "fragment, expected",
        [
            ("2:30 PM", time(14, 30)),
            ("12:15 AM", time(0, 15)),
            ("12:00 PM", time(12, 0)),
            ("09:00 AM", time(9, 0)),
            ("9:05am", time(9, 5)),
            ("14:30", time(14, 30)),
            ("0:45", time(0, 45)),
        ],
    )
    def test_parse_clock_time(self, fragment: str, expected: time) -> None:
        """Test conversion of clock fragments to 24-hour time."""
        assert parse_clock_time(fragment) == expected

    def test_24h_hour_with_pm_passes_through(self) -> None:
        """Test that an hour already past noon is not shifted again by PM."""
        assert to_24_hour(14, "PM") == 14
        assert parse_clock_time("14:00 PM") == time(14, 0)

    @pytest.mark.parametrize("fragment", ["noon", "", None, "24:00", "10:75", "13"])
    def test_unparsable_clock_returns_none(self, fragment) -> None:
        """Test that missing or out-of-range clock values are rejected."""
        assert parse_clock_time(fragment) is None


class TestDateFragment:
    """Test suite for date fragment parsing."""

    def test_full_date_with_ordinal(self, now: datetime) -> None:
        """Test a month-name date with an explicit year."""
        assert parse_date_fragment("July 29th, 2024", now) == date(2024, 7, 29)

    def test_missing_year_uses_current_year(self, now: datetime) -> None:
        """Test that a date without a year falls in the year of now."""
        assert parse_date_fragment("July 29th", now) == date(2026, 7, 29)
        assert parse_date_fragment("August 1st", now) == date(2026, 8, 1)

    def test_iso_date(self, now: datetime) -> None:
        """Test ISO dates as used by timed event lines."""
        assert parse_date_fragment("2024-07-29", now) == date(2024, 7, 29)

    @pytest.mark.parametrize("fragment", ["Someday", "February 30th, 2024", "", "  ,  "])
    def test_bad_fragment_returns_none(self, fragment: str, now: datetime) -> None:
        """Test that unparsable dates degrade to None instead of raising."""
        assert parse_date_fragment(fragment, now) is None


class TestNormalizeDatetime:
    """Test suite for combining date and time fragments."""

    def test_fragment_date_wins_over_context(self, now: datetime) -> None:
        """Test that an explicit date beats the heading context."""
        result = normalize_datetime("2024-08-01", "10:00 AM", date(2024, 7, 29), now)
        assert result == datetime(2024, 8, 1, 10, 0)

    def test_bad_date_falls_back_to_context(self, now: datetime) -> None:
        """Test that a bad date fragment is discarded in favour of the context."""
        result = normalize_datetime("Someday", "9:00 AM", date(2024, 7, 29), now)
        assert result == datetime(2024, 7, 29, 9, 0)

    def test_no_date_and_no_context_uses_today(self, now: datetime) -> None:
        """Test the today fallback."""
        assert normalize_datetime(None, "3:00 PM", None, now) == datetime(2026, 10, 19, 15, 0)

    def test_unparsable_time_defaults_to_midnight(self, now: datetime) -> None:
        """Test the midnight fallback (indistinguishable from a real midnight event)."""
        result = normalize_datetime(None, "25:00", date(2024, 7, 29), now)
        assert result == datetime(2024, 7, 29, 0, 0)
