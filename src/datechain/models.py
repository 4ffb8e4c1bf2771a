"""Data models for datechain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum


class Weekday(IntEnum):
    """Day of the week, numbered like ``date.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def short_name(self) -> str:
        """Three-letter label, e.g. "Mon"."""
        return self.name[:3].title()

    @classmethod
    def from_token(cls, token: str) -> Weekday | None:
        """Look up a weekday by full name or three-letter abbreviation.

        Matching is case-insensitive. Returns None for anything else.
        """
        return _WEEKDAY_TOKENS.get(token.strip().lower())


_WEEKDAY_TOKENS: dict[str, Weekday] = {}
for _day in Weekday:
    _WEEKDAY_TOKENS[_day.name.lower()] = _day
    _WEEKDAY_TOKENS[_day.name[:3].lower()] = _day


def _default_dependency_list() -> list[int]:
    return []


def _default_allowed_days() -> frozenset[Weekday]:
    return frozenset()


@dataclass
class Activity:
    """A schedulable unit of work.

    ``dependencies`` holds the ids of the activities that must finish before
    this one may start. Ids are stable across deletions; an id that no longer
    matches any activity is ignored by the scheduler.

    ``start_date`` and ``end_date`` are derived by the scheduler and are
    overwritten on every propagation pass.
    """

    id: int
    name: str
    duration: int
    dependencies: list[int] = field(default_factory=_default_dependency_list)
    allowed_days: frozenset[Weekday] = field(default_factory=_default_allowed_days)
    start_date: date | None = None
    end_date: date | None = None

    @property
    def has_dependencies(self) -> bool:
        return bool(self.dependencies)


def parse_dependencies(dep_str: str | None) -> list[int]:
    """Parse a comma-separated list of 1-based activity numbers.

    Returns 0-based positions. Tokens that are not integers, or are not
    positive, are discarded.

    Example:
        parse_dependencies("1, 3, x, 0") == [0, 2]
    """
    if not dep_str or not dep_str.strip():
        return []

    positions: list[int] = []
    for token in dep_str.split(","):
        try:
            number = int(token.strip())
        except ValueError:
            continue
        if number >= 1:
            positions.append(number - 1)
    return positions


def format_dependencies(positions: list[int]) -> str:
    """Format 0-based positions as 1-based display numbers ("1, 3")."""
    return ", ".join(str(position + 1) for position in positions)


def parse_allowed_days(days_str: str | None) -> frozenset[Weekday]:
    """Parse a comma-separated list of weekday names.

    Accepts full names and three-letter abbreviations in any case
    ("Mon", "thursday"). Unrecognized tokens are dropped.
    """
    if not days_str or not days_str.strip():
        return frozenset()

    days: set[Weekday] = set()
    for token in days_str.split(","):
        day = Weekday.from_token(token)
        if day is not None:
            days.add(day)
    return frozenset(days)


def format_allowed_days(days: frozenset[Weekday]) -> str:
    """Format allowed days in week order ("Mon, Thu")."""
    return ", ".join(day.short_name for day in sorted(days))
