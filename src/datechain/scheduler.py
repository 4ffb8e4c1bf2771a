"""Schedule propagation: recompute every activity's start and end dates.

The scheduler is a pure function of the activity list, the project start
date and the calendar mode. It never touches its input; callers compare the
old and new lists to find out what moved.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date

from .graph import dependency_positions, resolve_positions, topological_order
from .logger import get_logger
from .models import Activity, Weekday
from .workdays import (
    add_business_days,
    add_calendar_days,
    next_allowed_weekday,
    skip_weekend,
)

logger = get_logger()


def earliest_start_date(
    index: int,
    activities: Sequence[Activity],
    project_start_date: date,
    include_weekends: bool,
) -> date:
    """Earliest date the activity at ``index`` may start.

    Without dependencies this is the project start. Otherwise it is the day
    after the latest end date among the dependencies that have one, moved off
    the weekend when weekends are excluded. Dependencies without an end date,
    deleted dependencies and self-references are ignored; if nothing is left
    the project start applies.
    """
    activity = activities[index]
    if not activity.has_dependencies:
        return project_start_date

    positions = resolve_positions(activities)
    dep_ends = [
        activities[dep_position].end_date
        for dep_position in dependency_positions(activity, positions)
        if dep_position != index
    ]
    latest_end = max((end for end in dep_ends if end is not None), default=None)
    if latest_end is None:
        return project_start_date

    earliest = add_calendar_days(latest_end, 1)
    if not include_weekends:
        earliest = skip_weekend(earliest)
    return earliest


def _startable_days(activity: Activity, include_weekends: bool) -> frozenset[Weekday]:
    """Allowed start days that the calendar mode can actually honor.

    With weekends excluded, Saturday and Sunday are dropped from the allowed
    set. If nothing is left the constraint cannot be met and is ignored.
    """
    if include_weekends:
        return activity.allowed_days
    return frozenset(day for day in activity.allowed_days if day < Weekday.SATURDAY)


def compute_end_date(start_date: date, duration: int, include_weekends: bool) -> date:
    """End date of an activity of ``duration`` days starting on ``start_date``."""
    if include_weekends:
        return add_calendar_days(start_date, duration - 1)
    return add_business_days(start_date, duration - 1)


def propagate(
    activities: Sequence[Activity],
    project_start_date: date,
    include_weekends: bool,
) -> list[Activity]:
    """Recompute start and end dates for every activity.

    Activities are visited in dependency order, and each result is written
    back before the next activity is visited, so dependents always see the
    end dates computed in this pass. For each activity:

    1. Work out the earliest permissible start (see earliest_start_date).
    2. Activities with dependencies start exactly on that date. Activities
       without dependencies keep their previous start unless it is unset or
       too early.
    3. Move the start forward to an allowed weekday, then off the weekend
       when weekends are excluded.
    4. Derive the end date from the duration.

    Args:
        activities: Current activity list (not modified)
        project_start_date: Earliest date any activity may start
        include_weekends: True for calendar days, False for business days

    Returns:
        New Activity objects, in the same order as ``activities``
    """
    result = [
        replace(activity, dependencies=list(activity.dependencies)) for activity in activities
    ]

    for index in topological_order(result):
        activity = result[index]
        earliest = earliest_start_date(index, result, project_start_date, include_weekends)

        if activity.has_dependencies:
            start = earliest
        elif activity.start_date is None or activity.start_date < earliest:
            start = earliest
        else:
            start = activity.start_date
            logger.checks(f"  #{index + 1} {activity.name}: keeping manual start {start}")

        start = next_allowed_weekday(start, _startable_days(activity, include_weekends))
        if not include_weekends:
            start = skip_weekend(start)

        end = compute_end_date(start, activity.duration, include_weekends)
        logger.debug(
            f"  #{index + 1} {activity.name}: earliest={earliest} start={start} "
            f"end={end} duration={activity.duration}"
        )

        result[index] = replace(activity, start_date=start, end_date=end)

    for before, after in zip(activities, result):
        if (before.start_date, before.end_date) != (after.start_date, after.end_date):
            logger.checks(
                f"{after.name}: {before.start_date} - {before.end_date} -> "
                f"{after.start_date} - {after.end_date}"
            )

    return result
