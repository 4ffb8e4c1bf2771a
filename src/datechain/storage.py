"""Project persistence in a key-value store.

The whole project (name, start date, calendar mode and the scheduled
activities) is written as one YAML document under a single key and read back
in one piece. There is no partial update.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Protocol, cast

import yaml

from .exceptions import StorageError
from .logger import get_logger
from .models import Activity, Weekday

logger = get_logger()

STORAGE_KEY = "project-timeline-activities"
STORAGE_FORMAT_VERSION = 1


class KeyValueStore(Protocol):
    """Minimal string key-value store."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Remove ``key``. Removing an absent key is not an error."""
        ...


class MemoryStore:
    """In-process store, mainly for tests."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class DirectoryStore:
    """Store each key as a YAML file in a directory.

    Writes go to a temporary file that then replaces the target, so an
    interrupted save never leaves a half-written project behind.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory).expanduser()

    def path_for(self, key: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9._-]", "_", key)
        return self.directory / f"{safe_key}.yaml"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        temp = path.with_suffix(path.suffix + ".tmp")
        temp.write_text(value, encoding="utf-8")
        temp.replace(path)

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


def _default_activities() -> list[Activity]:
    return []


@dataclass
class ProjectSnapshot:
    """Everything needed to restore a project."""

    name: str
    project_start_date: date
    include_weekends: bool
    next_id: int
    activities: list[Activity] = field(default_factory=_default_activities)


def _format_date(d: date | None) -> str | None:
    return d.isoformat() if d is not None else None


def _parse_date(value: Any, what: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise ValueError(f"Invalid {what}: {e}") from e


def serialize_project(snapshot: ProjectSnapshot) -> str:
    """Serialize a project snapshot to a YAML document."""
    activities_data: list[dict[str, Any]] = [
        {
            "id": activity.id,
            "name": activity.name,
            "duration": activity.duration,
            "dependencies": list(activity.dependencies),
            "allowed_days": [day.name.lower() for day in sorted(activity.allowed_days)],
            "start_date": _format_date(activity.start_date),
            "end_date": _format_date(activity.end_date),
        }
        for activity in snapshot.activities
    ]

    output: dict[str, Any] = {
        "version": STORAGE_FORMAT_VERSION,
        "name": snapshot.name,
        "project_start_date": snapshot.project_start_date.isoformat(),
        "include_weekends": snapshot.include_weekends,
        "next_id": snapshot.next_id,
        "activities": activities_data,
    }
    return yaml.safe_dump(output, default_flow_style=False, sort_keys=False)


def _parse_activity(raw: Any, position: int) -> Activity:
    if not isinstance(raw, dict):
        raise ValueError(f"Activity {position + 1} must be a mapping")
    data = cast(dict[str, Any], raw)

    try:
        activity_id = int(data["id"])
        name = str(data["name"])
        duration = int(data["duration"])
    except KeyError as e:
        raise ValueError(f"Activity {position + 1} missing field {e}") from e
    if duration < 1:
        raise ValueError(f"Activity {position + 1} must have a duration of at least 1")

    allowed_days: set[Weekday] = set()
    for token in data.get("allowed_days") or []:
        day = Weekday.from_token(str(token))
        if day is None:
            raise ValueError(f"Activity {position + 1} has unknown weekday '{token}'")
        allowed_days.add(day)

    return Activity(
        id=activity_id,
        name=name,
        duration=duration,
        dependencies=[int(dep) for dep in data.get("dependencies") or []],
        allowed_days=frozenset(allowed_days),
        start_date=_parse_date(data.get("start_date"), f"start date for activity {position + 1}"),
        end_date=_parse_date(data.get("end_date"), f"end date for activity {position + 1}"),
    )


def deserialize_project(text: str) -> ProjectSnapshot:
    """Rebuild a project snapshot from its YAML document.

    Raises:
        ValueError: If the document is malformed or its version is unsupported
    """
    try:
        raw_data: Any = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Stored project is not valid YAML: {e}") from e

    if not isinstance(raw_data, dict):
        raise ValueError(f"Invalid stored project: expected mapping, got {type(raw_data)}")
    data = cast(dict[str, Any], raw_data)

    version = data.get("version")
    if version != STORAGE_FORMAT_VERSION:
        raise ValueError(
            f"Unsupported stored project version {version}, expected {STORAGE_FORMAT_VERSION}"
        )

    project_start_date = _parse_date(data.get("project_start_date"), "project start date")
    if project_start_date is None:
        raise ValueError("Stored project missing 'project_start_date'")

    raw_activities = data.get("activities") or []
    if not isinstance(raw_activities, list):
        raise ValueError("Stored project 'activities' must be a list")
    activities = [
        _parse_activity(raw, position)
        for position, raw in enumerate(cast(list[Any], raw_activities))
    ]

    next_id = int(data.get("next_id") or 0)
    highest_id = max((activity.id for activity in activities), default=0)

    return ProjectSnapshot(
        name=str(data.get("name") or ""),
        project_start_date=project_start_date,
        include_weekends=bool(data.get("include_weekends", False)),
        next_id=max(next_id, highest_id + 1),
        activities=activities,
    )


def save_project(store: KeyValueStore, snapshot: ProjectSnapshot, key: str = STORAGE_KEY) -> None:
    """Write the project to the store.

    Raises:
        StorageError: If the store rejects the write
    """
    try:
        store.set(key, serialize_project(snapshot))
    except (OSError, yaml.YAMLError) as e:
        raise StorageError(f"Could not save project: {e}") from e
    logger.changes(f"Saved project '{snapshot.name}' ({len(snapshot.activities)} activities)")


def load_project(store: KeyValueStore, key: str = STORAGE_KEY) -> ProjectSnapshot | None:
    """Read the project from the store.

    Returns None when nothing is stored or the stored project cannot be read;
    the failure is logged rather than raised.
    """
    try:
        text = store.get(key)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read stored project: {e}")
        return None

    if not text:
        return None

    try:
        return deserialize_project(text)
    except (ValueError, TypeError) as e:
        logger.warning(f"Ignoring unreadable stored project: {e}")
        return None


def clear_project(store: KeyValueStore, key: str = STORAGE_KEY) -> None:
    """Remove the stored project.

    Raises:
        StorageError: If the store cannot remove it
    """
    try:
        store.delete(key)
    except OSError as e:
        raise StorageError(f"Could not clear stored project: {e}") from e
