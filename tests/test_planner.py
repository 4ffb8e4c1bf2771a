"""Tests for the project controller."""

from datetime import date
from io import StringIO
from pathlib import Path

import pytest

from datechain.exceptions import (
    ActivityNotFoundError,
    CircularDependencyError,
    DateOrderError,
    MissingFieldError,
    StorageError,
    ValidationError,
    WeekendDateError,
)
from datechain.logger import setup_logger
from datechain.models import Weekday
from datechain.planner import ProjectPlanner
from datechain.storage import STORAGE_KEY, DirectoryStore, MemoryStore
from tests.conftest import MONDAY


@pytest.fixture
def planner(memory_store: MemoryStore) -> ProjectPlanner:
    """Business-day project starting Monday 2024-01-01 with a three-step chain."""
    p = ProjectPlanner(MONDAY, include_weekends=False, name="Relaunch", store=memory_store)
    p.add_activity("Design", 3)
    p.add_activity("Build", 2, "1")
    p.add_activity("Review", 1, "2")
    return p


class TestAddActivity:
    """Test creating activities."""

    def test_add_schedules_immediately(self, planner: ProjectPlanner) -> None:
        assert [(a.start_date, a.end_date) for a in planner.activities] == [
            (date(2024, 1, 1), date(2024, 1, 3)),
            (date(2024, 1, 4), date(2024, 1, 5)),
            (date(2024, 1, 8), date(2024, 1, 8)),
        ]

    def test_ids_are_sequential(self, planner: ProjectPlanner) -> None:
        assert [a.id for a in planner.activities] == [1, 2, 3]

    def test_dependency_numbers_become_ids(self, planner: ProjectPlanner) -> None:
        activity = planner.add_activity("Launch", 1, "1, 3, 9, x")
        assert activity.dependencies == [1, 3]

    def test_allowed_days_parsed(self, planner: ProjectPlanner) -> None:
        activity = planner.add_activity("Standup", 1, allowed_days="Mon, Thursday, blah")
        assert activity.allowed_days == {Weekday.MONDAY, Weekday.THURSDAY}

    def test_name_required(self, planner: ProjectPlanner) -> None:
        with pytest.raises(MissingFieldError):
            planner.add_activity("  ", 2)
        assert len(planner.activities) == 3

    def test_duration_required(self, planner: ProjectPlanner) -> None:
        with pytest.raises(MissingFieldError):
            planner.add_activity("Launch", None)
        with pytest.raises(MissingFieldError):
            planner.add_activity("Launch", 0)

    def test_self_reference_rejected(self, planner: ProjectPlanner) -> None:
        """The new activity would be #4; depending on #4 is rejected."""
        with pytest.raises(CircularDependencyError, match="itself"):
            planner.add_activity("Launch", 1, "4")
        assert len(planner.activities) == 3
        assert planner.next_id == 4

    def test_marks_unsaved(self, memory_store: MemoryStore) -> None:
        p = ProjectPlanner(MONDAY, store=memory_store)
        assert not p.has_unsaved_changes
        p.add_activity("Design", 1)
        assert p.has_unsaved_changes


class TestRemoveActivity:
    """Test deleting activities."""

    def test_ids_never_reused(self, planner: ProjectPlanner) -> None:
        planner.remove_activity(2)
        activity = planner.add_activity("Launch", 1)
        assert activity.id == 4

    def test_dependents_keep_their_dependencies(self, planner: ProjectPlanner) -> None:
        """Deleting #1 doesn't shift references: Review still follows Build."""
        planner.add_activity("Launch", 1, "1, 3")
        planner.remove_activity(0)

        names = [a.name for a in planner.activities]
        assert names == ["Build", "Review", "Launch"]
        assert planner.activities[1].dependencies == [2]
        assert planner.activities[2].dependencies == [3]

    def test_orphaned_activity_falls_back_to_project_start(
        self, planner: ProjectPlanner
    ) -> None:
        planner.remove_activity(0)
        build = planner.activities[0]
        assert build.dependencies == []
        assert build.start_date == MONDAY
        assert build.end_date == date(2024, 1, 2)

    def test_unknown_number(self, planner: ProjectPlanner) -> None:
        with pytest.raises(ActivityNotFoundError, match="#7"):
            planner.remove_activity(6)


class TestSetDependencies:
    """Test dependency edits."""

    def test_cycle_rejected(self, planner: ProjectPlanner) -> None:
        """Design <- Build <- Review; making Design depend on Review is a cycle."""
        before = list(planner.activities)
        with pytest.raises(CircularDependencyError, match="#1 -> #3 -> #2 -> #1"):
            planner.set_dependencies(0, "3")
        assert planner.activities == before

    def test_self_reference_rejected(self, planner: ProjectPlanner) -> None:
        with pytest.raises(CircularDependencyError):
            planner.set_dependencies(1, "2")

    def test_removing_dependencies_falls_back_to_project_start(
        self, planner: ProjectPlanner
    ) -> None:
        planner.set_dependencies(2, "")
        review = planner.activities[2]
        assert review.dependencies == []
        assert review.start_date == MONDAY

    def test_new_dependencies_rederive_start(self, planner: ProjectPlanner) -> None:
        planner.set_dependencies(2, "1")
        assert planner.activities[2].start_date == date(2024, 1, 4)

    def test_forward_reference_accepted(self, planner: ProjectPlanner) -> None:
        planner.set_dependencies(1, "")
        planner.set_dependencies(0, "2")
        design, build, _ = planner.activities
        assert build.start_date == MONDAY
        assert design.start_date == date(2024, 1, 3)


class TestSetStartDate:
    """Test manual start date edits."""

    def test_later_start_kept(self, planner: ProjectPlanner) -> None:
        planner.set_start_date(0, date(2024, 1, 10))
        design, build, review = planner.activities
        assert design.start_date == date(2024, 1, 10)
        assert build.start_date == date(2024, 1, 15)
        assert review.start_date == date(2024, 1, 17)

    def test_weekend_rejected(self, planner: ProjectPlanner) -> None:
        with pytest.raises(WeekendDateError, match="Saturday"):
            planner.set_start_date(0, date(2024, 1, 6))

    def test_weekend_allowed_in_calendar_mode(self, planner: ProjectPlanner) -> None:
        planner.set_include_weekends(True)
        planner.set_start_date(0, date(2024, 1, 6))
        assert planner.activities[0].start_date == date(2024, 1, 6)

    def test_before_dependencies_rejected(self, planner: ProjectPlanner) -> None:
        with pytest.raises(DateOrderError, match="2024-01-04"):
            planner.set_start_date(1, date(2024, 1, 2))

    def test_before_project_start_rejected(self, planner: ProjectPlanner) -> None:
        with pytest.raises(DateOrderError):
            planner.set_start_date(0, date(2023, 12, 29))


class TestSetEndDate:
    """Test manual end date edits."""

    def test_end_date_changes_duration(self, planner: ProjectPlanner) -> None:
        planner.set_end_date(0, date(2024, 1, 9))
        design = planner.activities[0]
        assert design.duration == 7
        assert design.end_date == date(2024, 1, 9)
        assert planner.activities[1].start_date == date(2024, 1, 10)

    def test_end_date_calendar_mode(self, planner: ProjectPlanner) -> None:
        planner.set_include_weekends(True)
        planner.set_end_date(0, date(2024, 1, 9))
        assert planner.activities[0].duration == 9

    def test_before_start_rejected(self, planner: ProjectPlanner) -> None:
        with pytest.raises(DateOrderError):
            planner.set_end_date(1, date(2024, 1, 3))

    def test_weekend_rejected(self, planner: ProjectPlanner) -> None:
        with pytest.raises(WeekendDateError):
            planner.set_end_date(0, date(2024, 1, 7))


class TestOtherEdits:
    """Test the remaining edit entry points."""

    def test_rename(self, planner: ProjectPlanner) -> None:
        planner.rename_activity(0, " Discovery ")
        assert planner.activities[0].name == "Discovery"
        with pytest.raises(MissingFieldError):
            planner.rename_activity(0, "")

    def test_set_duration(self, planner: ProjectPlanner) -> None:
        planner.set_duration(0, 1)
        assert planner.activities[1].start_date == date(2024, 1, 2)
        with pytest.raises(MissingFieldError):
            planner.set_duration(0, 0)

    def test_set_allowed_days(self, planner: ProjectPlanner) -> None:
        planner.set_allowed_days(1, "Mon")
        assert planner.activities[1].start_date == date(2024, 1, 8)

    def test_project_start(self, planner: ProjectPlanner) -> None:
        planner.set_project_start_date(date(2024, 1, 8))
        assert planner.activities[0].start_date == date(2024, 1, 8)
        assert planner.activities[2].start_date == date(2024, 1, 15)

    def test_include_weekends(self, planner: ProjectPlanner) -> None:
        planner.set_include_weekends(True)
        assert planner.activities[2].start_date == date(2024, 1, 6)

    def test_validation_errors_share_base_class(self, planner: ProjectPlanner) -> None:
        with pytest.raises(ValidationError):
            planner.set_start_date(0, date(2024, 1, 6))


class TestPersistence:
    """Test save and load through the controller."""

    def test_save_clears_unsaved_flag(self, planner: ProjectPlanner) -> None:
        assert planner.has_unsaved_changes
        planner.save()
        assert not planner.has_unsaved_changes

    def test_round_trip(self, planner: ProjectPlanner, memory_store: MemoryStore) -> None:
        planner.set_start_date(0, date(2024, 1, 2))
        planner.save()

        loaded = ProjectPlanner.load(memory_store)

        assert loaded.name == "Relaunch"
        assert loaded.project_start_date == MONDAY
        assert loaded.activities == planner.activities
        assert loaded.next_id == 4
        assert not loaded.has_unsaved_changes

    def test_load_without_project(self, memory_store: MemoryStore) -> None:
        loaded = ProjectPlanner.load(
            memory_store, default_start_date=MONDAY, default_include_weekends=True
        )
        assert loaded.activities == []
        assert loaded.include_weekends

    def test_load_corrupted_project(self, memory_store: MemoryStore) -> None:
        memory_store.set(STORAGE_KEY, "version: 1\nactivities: [")
        loaded = ProjectPlanner.load(memory_store, default_start_date=MONDAY)
        assert loaded.activities == []

    def test_load_zero_duration_project(self, memory_store: MemoryStore) -> None:
        """A stored duration below one day would end before it starts."""
        memory_store.set(
            STORAGE_KEY,
            "version: 1\nproject_start_date: '2024-01-01'\ninclude_weekends: true\n"
            "activities: [{id: 1, name: A, duration: 0}]\n",
        )
        loaded = ProjectPlanner.load(memory_store, default_start_date=MONDAY)
        assert loaded.activities == []

    def test_load_undecodable_project(self, tmp_path: Path) -> None:
        store = DirectoryStore(tmp_path)
        store.path_for(STORAGE_KEY).write_bytes(b"\xff\xfe\x00garbage")
        loaded = ProjectPlanner.load(store, default_start_date=MONDAY)
        assert loaded.activities == []

    def test_save_failure_keeps_state(self, planner: ProjectPlanner, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("")
        planner.store = DirectoryStore(blocker)

        with pytest.raises(StorageError):
            planner.save()
        assert planner.has_unsaved_changes
        assert len(planner.activities) == 3

    def test_save_without_store(self) -> None:
        with pytest.raises(StorageError):
            ProjectPlanner(MONDAY).save()


class TestLogging:
    """Test change logging."""

    def test_changes_logged_at_verbosity_1(self, memory_store: MemoryStore) -> None:
        output = StringIO()
        setup_logger(1, stream=output)

        planner = ProjectPlanner(MONDAY, store=memory_store)
        planner.add_activity("Design", 2)

        assert "Added activity #1 'Design'" in output.getvalue()

    def test_silent_by_default(self, memory_store: MemoryStore) -> None:
        output = StringIO()
        setup_logger(0, stream=output)

        planner = ProjectPlanner(MONDAY, store=memory_store)
        planner.add_activity("Design", 2)

        assert output.getvalue() == ""
