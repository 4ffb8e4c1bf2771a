"""Calendar arithmetic for business-day and calendar-day scheduling.

Every date computation the scheduler performs goes through this module, so
the meaning of "a day" under each calendar mode lives in one place. All
functions are pure and never fail for valid dates.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import date, timedelta

from .models import Weekday

# Upper bound on day-steps when searching for an allowed weekday
MAX_WEEKDAY_SEARCH_DAYS = 365

_ONE_DAY = timedelta(days=1)


def is_weekend(d: date) -> bool:
    """Return True for Saturday and Sunday."""
    return d.weekday() >= Weekday.SATURDAY


def add_calendar_days(d: date, days: int) -> date:
    """Return ``d`` shifted by ``days`` calendar days."""
    return d + timedelta(days=days)


def add_business_days(d: date, days: int) -> date:
    """Advance ``d`` by ``days`` business days (Monday to Friday).

    Counting starts on the day after ``d``. With ``days <= 0`` the date is
    returned unchanged.

    Example:
        add_business_days(date(2024, 1, 5), 1) == date(2024, 1, 8)  # Fri -> Mon
    """
    result = d
    added = 0
    while added < days:
        result += _ONE_DAY
        if not is_weekend(result):
            added += 1
    return result


def count_business_days(start: date, end: date) -> int:
    """Count business days in the inclusive range ``[start, end]``.

    Returns 0 when ``end`` is before ``start``.
    """
    count = 0
    current = start
    while current <= end:
        if not is_weekend(current):
            count += 1
        current += _ONE_DAY
    return count


def skip_weekend(d: date) -> date:
    """Move a Saturday or Sunday forward to the following Monday."""
    result = d
    while is_weekend(result):
        result += _ONE_DAY
    return result


def next_allowed_weekday(d: date, allowed: Collection[Weekday]) -> date:
    """Return the first date on or after ``d`` whose weekday is allowed.

    An empty ``allowed`` collection means no constraint. The search gives up
    after MAX_WEEKDAY_SEARCH_DAYS steps and returns the date it reached.
    """
    if not allowed:
        return d

    allowed_numbers = {int(day) for day in allowed}
    result = d
    steps = 0
    while result.weekday() not in allowed_numbers and steps < MAX_WEEKDAY_SEARCH_DAYS:
        result += _ONE_DAY
        steps += 1
    return result


def span_in_days(start: date, end: date, include_weekends: bool) -> int:
    """Duration covered by ``[start, end]`` under the given calendar mode.

    Inverse of the end-date rule used by the scheduler: business days counted
    inclusively when weekends are excluded, calendar days plus one otherwise.
    """
    if include_weekends:
        return (end - start).days + 1
    return count_business_days(start, end)
