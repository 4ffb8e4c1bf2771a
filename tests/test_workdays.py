"""Tests for calendar arithmetic."""

from datetime import date

from datechain.models import Weekday
from datechain.workdays import (
    MAX_WEEKDAY_SEARCH_DAYS,
    add_business_days,
    add_calendar_days,
    count_business_days,
    is_weekend,
    next_allowed_weekday,
    skip_weekend,
    span_in_days,
)


class TestAddDays:
    """Test calendar-day and business-day addition."""

    def test_add_calendar_days_crosses_weekend(self) -> None:
        assert add_calendar_days(date(2024, 1, 5), 2) == date(2024, 1, 7)

    def test_add_calendar_days_negative(self) -> None:
        assert add_calendar_days(date(2024, 1, 1), -1) == date(2023, 12, 31)

    def test_add_business_days_zero_is_unchanged(self) -> None:
        """Zero business days returns the same date, even on a weekend."""
        assert add_business_days(date(2024, 1, 6), 0) == date(2024, 1, 6)

    def test_add_business_days_within_week(self) -> None:
        assert add_business_days(date(2024, 1, 1), 2) == date(2024, 1, 3)

    def test_add_business_days_skips_weekend(self) -> None:
        """Friday plus one business day is the following Monday."""
        assert add_business_days(date(2024, 1, 5), 1) == date(2024, 1, 8)

    def test_add_business_days_from_saturday(self) -> None:
        assert add_business_days(date(2024, 1, 6), 1) == date(2024, 1, 8)

    def test_add_business_days_full_weeks(self) -> None:
        assert add_business_days(date(2024, 1, 1), 10) == date(2024, 1, 15)


class TestCountBusinessDays:
    """Test inclusive business-day counting."""

    def test_single_weekday(self) -> None:
        assert count_business_days(date(2024, 1, 3), date(2024, 1, 3)) == 1

    def test_single_weekend_day(self) -> None:
        assert count_business_days(date(2024, 1, 6), date(2024, 1, 6)) == 0

    def test_span_over_weekend(self) -> None:
        """Thursday to Tuesday covers four business days."""
        assert count_business_days(date(2024, 1, 4), date(2024, 1, 9)) == 4

    def test_end_before_start_is_zero(self) -> None:
        assert count_business_days(date(2024, 1, 10), date(2024, 1, 1)) == 0


class TestWeekendHandling:
    """Test weekend detection and skipping."""

    def test_is_weekend(self) -> None:
        assert not is_weekend(date(2024, 1, 5))
        assert is_weekend(date(2024, 1, 6))
        assert is_weekend(date(2024, 1, 7))

    def test_skip_weekend_saturday(self) -> None:
        assert skip_weekend(date(2024, 1, 6)) == date(2024, 1, 8)

    def test_skip_weekend_sunday(self) -> None:
        assert skip_weekend(date(2024, 1, 7)) == date(2024, 1, 8)

    def test_skip_weekend_weekday_unchanged(self) -> None:
        assert skip_weekend(date(2024, 1, 3)) == date(2024, 1, 3)


class TestNextAllowedWeekday:
    """Test resolution of allowed start days."""

    def test_empty_set_is_unconstrained(self) -> None:
        assert next_allowed_weekday(date(2024, 1, 3), set()) == date(2024, 1, 3)

    def test_already_allowed(self) -> None:
        assert next_allowed_weekday(date(2024, 1, 3), {Weekday.WEDNESDAY}) == date(2024, 1, 3)

    def test_wednesday_to_monday(self) -> None:
        """A Wednesday constrained to Mondays moves to the following Monday."""
        assert next_allowed_weekday(date(2024, 1, 3), {Weekday.MONDAY}) == date(2024, 1, 8)

    def test_nearest_of_several(self) -> None:
        allowed = {Weekday.MONDAY, Weekday.THURSDAY}
        assert next_allowed_weekday(date(2024, 1, 2), allowed) == date(2024, 1, 4)

    def test_search_is_bounded(self) -> None:
        """A weekday value that never matches stops after the search bound."""
        start = date(2024, 1, 1)
        result = next_allowed_weekday(start, [7])  # type: ignore[list-item]
        assert (result - start).days == MAX_WEEKDAY_SEARCH_DAYS


class TestSpanInDays:
    """Test duration implied by a date span."""

    def test_calendar_mode(self) -> None:
        assert span_in_days(date(2024, 1, 5), date(2024, 1, 8), include_weekends=True) == 4

    def test_business_mode(self) -> None:
        assert span_in_days(date(2024, 1, 5), date(2024, 1, 8), include_weekends=False) == 2

    def test_same_day(self) -> None:
        assert span_in_days(date(2024, 1, 3), date(2024, 1, 3), include_weekends=False) == 1
