"""Project controller: owns the activity list and applies edits.

Every edit is validated, applied to a copy of the activity list, and followed
by a full propagation pass before it becomes the current state. A rejected
edit raises a ValidationError subclass and leaves the project untouched.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date

from .exceptions import (
    ActivityNotFoundError,
    CircularDependencyError,
    DateOrderError,
    MissingFieldError,
    StorageError,
    WeekendDateError,
)
from .graph import find_cycle
from .logger import get_logger
from .models import Activity, parse_allowed_days, parse_dependencies
from .scheduler import earliest_start_date, propagate
from .storage import STORAGE_KEY, KeyValueStore, ProjectSnapshot, load_project, save_project
from .workdays import is_weekend, span_in_days

logger = get_logger()

DEFAULT_PROJECT_NAME = "Untitled project"


def _positions_to_ids(positions: Sequence[int], activities: Sequence[Activity]) -> list[int]:
    """Map 0-based positions to activity ids, dropping positions that don't exist."""
    ids: list[int] = []
    for position in positions:
        if 0 <= position < len(activities):
            activity_id = activities[position].id
            if activity_id not in ids:
                ids.append(activity_id)
    return ids


def _describe_cycle(cycle: Sequence[int]) -> str:
    return " -> ".join(f"#{position + 1}" for position in cycle)


class ProjectPlanner:
    """The current project: parameters, activities and unsaved-changes state.

    The scheduled activity list is replaced wholesale after every edit, so a
    list obtained from ``activities`` is never changed behind the caller's
    back.
    """

    def __init__(  # noqa: PLR0913 - project parameters plus storage wiring
        self,
        project_start_date: date,
        include_weekends: bool = False,
        name: str = DEFAULT_PROJECT_NAME,
        *,
        store: KeyValueStore | None = None,
        storage_key: str = STORAGE_KEY,
    ):
        self.name = name
        self.project_start_date = project_start_date
        self.include_weekends = include_weekends
        self.activities: list[Activity] = []
        self.next_id = 1
        self.store = store
        self.storage_key = storage_key
        self.has_unsaved_changes = False

    @classmethod
    def from_snapshot(
        cls,
        snapshot: ProjectSnapshot,
        *,
        store: KeyValueStore | None = None,
        storage_key: str = STORAGE_KEY,
    ) -> ProjectPlanner:
        """Restore a project. Dates are recomputed but not marked as unsaved."""
        planner = cls(
            snapshot.project_start_date,
            snapshot.include_weekends,
            snapshot.name,
            store=store,
            storage_key=storage_key,
        )
        planner.next_id = snapshot.next_id
        planner.activities = propagate(
            snapshot.activities, snapshot.project_start_date, snapshot.include_weekends
        )
        return planner

    @classmethod
    def load(  # noqa: PLR0913 - defaults for a fresh project
        cls,
        store: KeyValueStore,
        storage_key: str = STORAGE_KEY,
        *,
        default_start_date: date | None = None,
        default_include_weekends: bool = False,
        default_name: str = DEFAULT_PROJECT_NAME,
    ) -> ProjectPlanner:
        """Load the stored project, or start an empty one if there is none.

        An unreadable stored project is treated the same as a missing one.
        """
        snapshot = load_project(store, storage_key)
        if snapshot is None:
            logger.checks("No stored project; starting a new one")
            return cls(
                default_start_date or date.today(),  # noqa: DTZ011
                default_include_weekends,
                default_name,
                store=store,
                storage_key=storage_key,
            )
        return cls.from_snapshot(snapshot, store=store, storage_key=storage_key)

    def snapshot(self) -> ProjectSnapshot:
        return ProjectSnapshot(
            name=self.name,
            project_start_date=self.project_start_date,
            include_weekends=self.include_weekends,
            next_id=self.next_id,
            activities=list(self.activities),
        )

    def save(self) -> None:
        """Persist the project and clear the unsaved-changes flag.

        Raises:
            StorageError: If there is no store or the write fails. The
                project and its unsaved-changes flag are left as they were.
        """
        if self.store is None:
            raise StorageError("No project store configured")
        save_project(self.store, self.snapshot(), self.storage_key)
        self.has_unsaved_changes = False

    # Edits

    def _get(self, index: int) -> Activity:
        if not 0 <= index < len(self.activities):
            raise ActivityNotFoundError(
                f"There is no activity #{index + 1} (the project has {len(self.activities)})"
            )
        return self.activities[index]

    def _commit(self, activities: list[Activity], description: str) -> None:
        self.activities = propagate(activities, self.project_start_date, self.include_weekends)
        self.has_unsaved_changes = True
        logger.changes(description)

    def _replace(self, index: int, activity: Activity) -> list[Activity]:
        updated = list(self.activities)
        updated[index] = activity
        return updated

    def _check_acyclic(self, index: int, activities: Sequence[Activity]) -> None:
        cycle = find_cycle(index, activities)
        if cycle is None:
            return
        if len(cycle) == 2:  # noqa: PLR2004 - [i, i] is a self-reference
            raise CircularDependencyError(f"Activity #{index + 1} cannot depend on itself")
        raise CircularDependencyError(
            f"These dependencies would create a cycle: {_describe_cycle(cycle)}"
        )

    def add_activity(
        self,
        name: str,
        duration: int | None,
        dependencies: str = "",
        allowed_days: str = "",
    ) -> Activity:
        """Append a new activity and schedule it.

        Args:
            name: Display name (required)
            duration: Number of days, at least 1 (required)
            dependencies: 1-based activity numbers, comma-separated ("1, 2")
            allowed_days: Permitted start days, comma-separated ("Mon, Thu")

        Returns:
            The new activity with its computed dates
        """
        if not name or not name.strip():
            raise MissingFieldError("Please enter a name for the activity")
        if duration is None or duration < 1:
            raise MissingFieldError("Please enter a duration of at least 1 day")

        activity = Activity(
            id=self.next_id,
            name=name.strip(),
            duration=duration,
            allowed_days=parse_allowed_days(allowed_days),
        )
        candidate = [*self.activities, activity]
        activity.dependencies = _positions_to_ids(parse_dependencies(dependencies), candidate)
        self._check_acyclic(len(candidate) - 1, candidate)

        self.next_id += 1
        self._commit(candidate, f"Added activity #{len(candidate)} '{activity.name}'")
        return self.activities[-1]

    def remove_activity(self, index: int) -> Activity:
        """Delete an activity and drop every dependency on it.

        An activity left without dependencies has its start date cleared, so
        it falls back to the project start instead of keeping a date that was
        derived from the deleted activity.
        """
        removed = self._get(index)
        remaining: list[Activity] = []
        for position, activity in enumerate(self.activities):
            if position == index:
                continue
            if removed.id in activity.dependencies:
                dependencies = [dep for dep in activity.dependencies if dep != removed.id]
                activity = replace(
                    activity,
                    dependencies=dependencies,
                    start_date=activity.start_date if dependencies else None,
                )
            remaining.append(activity)

        self._commit(remaining, f"Removed activity #{index + 1} '{removed.name}'")
        return removed

    def rename_activity(self, index: int, name: str) -> None:
        activity = self._get(index)
        if not name or not name.strip():
            raise MissingFieldError("Please enter a name for the activity")
        self._commit(
            self._replace(index, replace(activity, name=name.strip())),
            f"Renamed activity #{index + 1} to '{name.strip()}'",
        )

    def set_duration(self, index: int, duration: int) -> None:
        activity = self._get(index)
        if duration < 1:
            raise MissingFieldError("Please enter a duration of at least 1 day")
        self._commit(
            self._replace(index, replace(activity, duration=duration)),
            f"Set duration of #{index + 1} '{activity.name}' to {duration}",
        )

    def set_allowed_days(self, index: int, allowed_days: str) -> None:
        activity = self._get(index)
        self._commit(
            self._replace(index, replace(activity, allowed_days=parse_allowed_days(allowed_days))),
            f"Set allowed start days of #{index + 1} '{activity.name}'",
        )

    def set_dependencies(self, index: int, dependencies: str) -> None:
        """Replace an activity's dependencies.

        The new set is rejected if it creates a cycle. On success the start
        date is cleared so it is derived from the new dependencies.
        """
        activity = self._get(index)
        dep_ids = _positions_to_ids(parse_dependencies(dependencies), self.activities)
        candidate = self._replace(
            index, replace(activity, dependencies=dep_ids, start_date=None)
        )
        self._check_acyclic(index, candidate)
        self._commit(candidate, f"Set dependencies of #{index + 1} '{activity.name}'")

    def _check_not_weekend(self, d: date, what: str) -> None:
        if not self.include_weekends and is_weekend(d):
            raise WeekendDateError(
                f"{what} {d.isoformat()} is a {d:%A}, but weekends are excluded from the schedule"
            )

    def set_start_date(self, index: int, start_date: date) -> None:
        """Move an activity's start date.

        Rejected if it falls on an excluded weekend or before the earliest
        date its dependencies (or the project start) allow.
        """
        activity = self._get(index)
        self._check_not_weekend(start_date, "Start date")

        earliest = earliest_start_date(
            index, self.activities, self.project_start_date, self.include_weekends
        )
        if start_date < earliest:
            raise DateOrderError(
                f"Start date {start_date.isoformat()} is before {earliest.isoformat()}, "
                f"the earliest date activity #{index + 1} can start"
            )

        self._commit(
            self._replace(index, replace(activity, start_date=start_date)),
            f"Set start of #{index + 1} '{activity.name}' to {start_date.isoformat()}",
        )

    def set_end_date(self, index: int, end_date: date) -> None:
        """Move an activity's end date by changing its duration.

        Rejected if it falls on an excluded weekend or before the start date.
        """
        activity = self._get(index)
        self._check_not_weekend(end_date, "End date")

        start_date = activity.start_date
        if start_date is None:
            start_date = earliest_start_date(
                index, self.activities, self.project_start_date, self.include_weekends
            )
        if end_date < start_date:
            raise DateOrderError(
                f"End date {end_date.isoformat()} is before the start date "
                f"{start_date.isoformat()}"
            )

        duration = span_in_days(start_date, end_date, self.include_weekends)
        self._commit(
            self._replace(index, replace(activity, duration=duration)),
            f"Set end of #{index + 1} '{activity.name}' to {end_date.isoformat()} "
            f"({duration} days)",
        )

    def set_project_start_date(self, project_start_date: date) -> None:
        self.project_start_date = project_start_date
        self._commit(list(self.activities), f"Project start set to {project_start_date}")

    def set_include_weekends(self, include_weekends: bool) -> None:
        self.include_weekends = include_weekends
        mode = "calendar days" if include_weekends else "business days"
        self._commit(list(self.activities), f"Scheduling in {mode}")
