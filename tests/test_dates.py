from datetime import date, datetime, timedelta, timezone

import pytest

from dates import (
    add_months,
    format_timestamp,
    is_valid_date,
    is_valid_year_month,
    last_n_months,
    month_bounds,
    month_difference,
    now_utc,
    parse_date,
    parse_timestamp,
    year_month_difference,
)


class TestDates:
    """Tests for date helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-02-29", True),
            ("2023-02-29", False),
            ("2024-2-1", False),
            ("", False),
            (None, False),
            (date(2024, 1, 1), True),
        ],
    )
    def test_is_valid_date(self, value, expected):
        assert is_valid_date(value) is expected

    def test_parse_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_date("01/03/2024")

    def test_year_month(self):
        assert is_valid_year_month("2024-12")
        assert not is_valid_year_month("2024-00")
        assert year_month_difference("2023-11", "2024-02") == 3
        assert year_month_difference("2024-02", "2023-11") == -3

    def test_month_arithmetic(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert month_difference(date(2024, 1, 31), date(2024, 2, 1)) == 1
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_last_n_months_crosses_year(self):
        assert last_n_months(3, date(2024, 1, 15)) == ["2023-11", "2023-12", "2024-01"]


class TestTimestamps:
    """Tests for timestamp formatting."""

    def test_format_milliseconds_z(self):
        value = datetime(2024, 3, 1, 8, 30, 5, 123456, tzinfo=timezone.utc)

        assert format_timestamp(value) == "2024-03-01T08:30:05.123Z"

    def test_format_converts_to_utc(self):
        value = datetime(2024, 3, 1, 8, 0, tzinfo=timezone(timedelta(hours=7)))

        assert format_timestamp(value) == "2024-03-01T01:00:00.000Z"

    def test_parse_z_suffix(self):
        parsed = parse_timestamp("2024-03-01T08:30:05.123Z")

        assert parsed == datetime(2024, 3, 1, 8, 30, 5, 123000, tzinfo=timezone.utc)

    def test_parse_naive_is_utc(self):
        assert parse_timestamp("2024-03-01T08:30:05").tzinfo == timezone.utc

    def test_now_has_millisecond_precision(self):
        """Test the current time survives formatting and parsing unchanged."""
        now = now_utc()

        assert now.microsecond % 1000 == 0
        assert parse_timestamp(format_timestamp(now)) == now
