"""Pytest configuration and fixtures for datechain tests."""

from __future__ import annotations

from datetime import date

import pytest

from datechain.logger import reset_logger
from datechain.models import Activity, Weekday
from datechain.storage import MemoryStore

# 2024-01-01 is a Monday
MONDAY = date(2024, 1, 1)


@pytest.fixture(autouse=True)
def clean_logger() -> None:
    """Reset logger state before each test for isolation."""
    reset_logger()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


def make_activity(  # noqa: PLR0913 - mirrors the Activity fields tests care about
    activity_id: int,
    duration: int = 1,
    *,
    deps: list[int] | None = None,
    days: set[Weekday] | None = None,
    start: date | None = None,
    end: date | None = None,
    name: str | None = None,
) -> Activity:
    """Create an Activity with sensible defaults for tests.

    Example:
        make_activity(2, 3, deps=[1])  # activity 2, three days, after activity 1
    """
    return Activity(
        id=activity_id,
        name=name or f"Activity {activity_id}",
        duration=duration,
        dependencies=list(deps or []),
        allowed_days=frozenset(days or ()),
        start_date=start,
        end_date=end,
    )
