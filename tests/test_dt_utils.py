"""Tests for numu.utils.dt_utils - local calendar helpers."""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pytest

from numu.utils.dt_utils import (
    as_local,
    days_between,
    dt_parse_date,
    end_of_week,
    get_default_timezone,
    iter_days,
    set_default_timezone,
    start_of_week,
    to_local_date,
)

NEW_YORK = ZoneInfo("America/New_York")


class TestToLocalDate:
    """Tests for to_local_date() normalization."""

    def test_date_passthrough(self) -> None:
        """Plain dates are returned unchanged."""
        assert to_local_date(date(2025, 1, 6)) == date(2025, 1, 6)

    def test_iso_date_string(self) -> None:
        """ISO date strings parse directly."""
        assert to_local_date("2025-01-06") == date(2025, 1, 6)

    def test_none(self) -> None:
        """None stays None."""
        assert to_local_date(None) is None

    def test_garbage_string(self, caplog) -> None:
        """Unparseable strings give None and a warning."""
        assert to_local_date("next tuesday") is None
        assert "Unparseable date string" in caplog.text

    def test_aware_datetime_uses_local_calendar(self) -> None:
        """A late-evening UTC instant is the previous day in New York."""
        set_default_timezone(NEW_YORK)
        instant = datetime(2025, 1, 7, 2, 30, tzinfo=UTC)
        assert to_local_date(instant) == date(2025, 1, 6)
        assert to_local_date(instant.isoformat()) == date(2025, 1, 6)

    def test_naive_datetime_is_local(self) -> None:
        """Naive datetimes are taken as local wall time."""
        set_default_timezone(NEW_YORK)
        assert to_local_date(datetime(2025, 1, 6, 23, 59)) == date(2025, 1, 6)


class TestTimezoneConfig:
    """Tests for the default timezone setting."""

    def test_set_and_get(self) -> None:
        """The configured zone is returned and used by as_local()."""
        set_default_timezone(NEW_YORK)
        assert get_default_timezone() is NEW_YORK
        converted = as_local(datetime(2025, 6, 1, 12, 0, tzinfo=UTC))
        assert converted.hour == 8

    def test_parse_date_with_offset(self) -> None:
        """ISO datetimes with an offset are converted before taking the date."""
        assert dt_parse_date("2025-01-06T23:30:00-05:00") == date(2025, 1, 7)


class TestWeekArithmetic:
    """Tests for Monday-start week boundaries."""

    @pytest.mark.parametrize(
        ("day", "monday"),
        [
            (date(2025, 1, 6), date(2025, 1, 6)),
            (date(2025, 1, 8), date(2025, 1, 6)),
            (date(2025, 1, 12), date(2025, 1, 6)),
            (date(2025, 1, 13), date(2025, 1, 13)),
            (date(2025, 1, 1), date(2024, 12, 30)),
        ],
    )
    def test_start_of_week(self, day: date, monday: date) -> None:
        """Every day maps to the Monday on or before it."""
        assert start_of_week(day) == monday

    def test_end_of_week(self) -> None:
        """The week ends on Sunday."""
        assert end_of_week(date(2025, 1, 8)) == date(2025, 1, 12)
        assert end_of_week(date(2025, 1, 12)) == date(2025, 1, 12)


class TestRanges:
    """Tests for days_between() and iter_days()."""

    def test_days_between_signed(self) -> None:
        """The difference is signed."""
        assert days_between(date(2025, 1, 6), date(2025, 1, 13)) == 7
        assert days_between(date(2025, 1, 13), date(2025, 1, 6)) == -7

    def test_iter_days_inclusive(self) -> None:
        """Both ends are included."""
        days = list(iter_days(date(2025, 2, 27), date(2025, 3, 2)))
        assert days == [
            date(2025, 2, 27),
            date(2025, 2, 28),
            date(2025, 3, 1),
            date(2025, 3, 2),
        ]

    def test_iter_days_empty(self) -> None:
        """A reversed range yields nothing."""
        assert list(iter_days(date(2025, 1, 7), date(2025, 1, 6))) == []
