"""Tests for the lenient cell parsers."""

from datetime import date, datetime, time

import pytest

from health_insights.parsing import (
    parse_bedtime_hours,
    parse_date,
    parse_distance_km,
    parse_duration_minutes,
    parse_hours,
    to_float,
)


class TestParseDate:
    """Tests for parse_date."""

    @pytest.mark.parametrize("value,expected", [
        ("2024-03-05", date(2024, 3, 5)),
        ("2024-03-05T06:12:00Z", date(2024, 3, 5)),
        ("2024-03-05 23:12:00 -0500", date(2024, 3, 5)),
        ("7/11/2025", date(2025, 7, 11)),
        ("7/11/25", date(2025, 7, 11)),
        ("3/5/2024 6:00 AM", date(2024, 3, 5)),
        (45292, date(2024, 1, 1)),
        ("45292", date(2024, 1, 1)),
        (datetime(2024, 3, 5, 23, 59), date(2024, 3, 5)),
        (date(2024, 3, 5), date(2024, 3, 5)),
    ])
    def test_supported_encodings(self, value, expected):
        """Every supported encoding resolves to the same calendar date."""
        assert parse_date(value) == expected

    def test_offset_timestamp_keeps_written_date(self):
        """The calendar date as written is used, not converted to UTC."""
        assert parse_date("2024-03-05 23:30:00 -0800") == date(2024, 3, 5)

    @pytest.mark.parametrize("value", [None, "", "   ", "yesterday", "13/45/2024", -5])
    def test_unparsable(self, value):
        assert parse_date(value) is None


class TestParseDuration:
    """Tests for parse_duration_minutes."""

    @pytest.mark.parametrize("value,expected", [
        ("1h:05m:30s", 65.5),
        ("0h:45m", 45),
        ("1:05", 65),
        ("1:05:30", 65.5),
        (45, 45),
        ("45", 45),
        (1.5, 1.5),
    ])
    def test_minutes_policy(self, value, expected):
        """Bare numbers are minutes by default."""
        assert parse_duration_minutes(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value,expected", [(1.5, 90), (25, 1500), (45, 45), ("1:05", 65)])
    def test_magnitude_policy(self, value, expected):
        """Small bare numbers are hours, larger ones minutes."""
        assert parse_duration_minutes(value, plain_policy="magnitude") == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, "", "long", -10, "n/a"])
    def test_unparsable(self, value):
        assert parse_duration_minutes(value) is None


class TestParseHours:
    """Tests for sleep durations."""

    @pytest.mark.parametrize("value,expected", [
        (7.5, 7.5),
        ("7.5", 7.5),
        (450, 7.5),
        ("7h:30m", 7.5),
        ("7:30", 7.5),
        (25, 25),
        (26, 26 / 60),
    ])
    def test_encodings(self, value, expected):
        assert parse_hours(value) == pytest.approx(expected)

    def test_blank(self):
        assert parse_hours(None) is None
        assert parse_hours("") is None


class TestParseBedtime:
    """Tests for parse_bedtime_hours."""

    @pytest.mark.parametrize("value,expected", [
        ("23:30", -0.5),
        ("00:45", 0.75),
        ("22:00:00", -2),
        ("11:30 PM", -0.5),
        ("12:15 AM", 0.25),
        ("2024-03-05 23:00:00 -0500", -1),
        (time(1, 30), 1.5),
        (datetime(2024, 3, 5, 22, 30), -1.5),
    ])
    def test_relative_to_midnight(self, value, expected):
        """Evening times are negative, early-morning times positive."""
        assert parse_bedtime_hours(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, "", "late", "25:00", "13:00 PM", 2330])
    def test_unparsable(self, value):
        assert parse_bedtime_hours(value) is None


class TestParseDistance:
    """Tests for parse_distance_km."""

    @pytest.mark.parametrize("value,expected", [
        (5, 5),
        ("5.2", 5.2),
        ("5 km", 5),
        ("3.1mi", 3.1 * 1.609344),
        ("1,500 m", 1.5),
        ({"qty": 2, "units": "mi"}, 2 * 1.609344),
        ({"value": 800, "unit": "yd"}, 800 * 0.0009144),
        ({"qty": 10}, 10),
    ])
    def test_units(self, value, expected):
        assert parse_distance_km(value) == pytest.approx(expected)

    def test_default_unit_for_flat_values(self):
        """Flat values use the configured unit, nested ones their own."""
        assert parse_distance_km(10, default_unit="mi") == pytest.approx(16.09344)
        assert parse_distance_km({"qty": 10, "units": "km"}, default_unit="mi") == pytest.approx(10)

    def test_blank_is_zero(self):
        assert parse_distance_km(None) == 0
        assert parse_distance_km("") == 0

    @pytest.mark.parametrize("value", ["far", "5 furlongs", -3, {"qty": "x", "units": "km"}])
    def test_unparsable(self, value):
        assert parse_distance_km(value) is None


class TestToFloat:
    """Tests for to_float."""

    @pytest.mark.parametrize("value,expected", [(3, 3.0), ("3.5", 3.5), (" 1,200 ", 1200.0)])
    def test_numbers(self, value, expected):
        assert to_float(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", True, float("nan"), float("inf"), [1]])
    def test_not_numbers(self, value):
        assert to_float(value) is None
