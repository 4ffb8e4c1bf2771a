"""Display and export views of a scheduled activity list."""

from __future__ import annotations

import csv
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from .graph import dependency_positions, resolve_positions
from .models import Activity, format_allowed_days, format_dependencies

NOT_SET = "Not set"
ANY_DAY = "Any day"
NO_DEPENDENCIES = "None"

TABLE_COLUMNS = ["ID", "Activity", "Dependencies", "Constraints", "Start", "Duration", "End"]
CSV_COLUMNS = ["number", "id", "name", "dependencies", "allowed_days", "start", "duration", "end"]


def format_date_for_display(d: date | None) -> str:
    """Human-readable date, e.g. "Mon, Jan 1, 2024"."""
    if d is None:
        return NOT_SET
    return f"{d:%a}, {d:%b} {d.day}, {d.year}"


def format_date_for_input(d: date | None) -> str:
    """ISO date for input fields and files, e.g. "2024-01-01"."""
    if d is None:
        return ""
    return d.isoformat()


def parse_input_date(value: str) -> date:
    """Parse an ISO date ("YYYY-MM-DD").

    Raises:
        ValueError: If the value is not a valid ISO date
    """
    return date.fromisoformat(value.strip())


def format_duration(days: int) -> str:
    return "1 day" if days == 1 else f"{days} days"


def _dependency_numbers(activity: Activity, positions: dict[int, int]) -> str:
    return format_dependencies(dependency_positions(activity, positions))


def activity_rows(activities: Sequence[Activity]) -> list[list[str]]:
    """Display cells for each activity, in TABLE_COLUMNS order."""
    positions = resolve_positions(activities)
    rows: list[list[str]] = []
    for number, activity in enumerate(activities, start=1):
        rows.append(
            [
                f"#{number}",
                activity.name,
                _dependency_numbers(activity, positions) or NO_DEPENDENCIES,
                format_allowed_days(activity.allowed_days) or ANY_DAY,
                format_date_for_display(activity.start_date),
                format_duration(activity.duration),
                format_date_for_display(activity.end_date),
            ]
        )
    return rows


def render_table(activities: Sequence[Activity]) -> str:
    """Render activities as a plain-text table with aligned columns."""
    if not activities:
        return "No activities yet. Add your first activity to get started."

    rows = [TABLE_COLUMNS, *activity_rows(activities)]
    widths = [max(len(row[col]) for row in rows) for col in range(len(TABLE_COLUMNS))]

    lines: list[str] = []
    for row_index, row in enumerate(rows):
        lines.append("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())
        if row_index == 0:
            lines.append("  ".join("-" * width for width in widths))
    return "\n".join(lines)


def write_csv(activities: Sequence[Activity], output_path: Path) -> None:
    """Export activities to CSV with ISO dates and 1-based dependency numbers."""
    positions = resolve_positions(activities)
    with output_path.open("w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for number, activity in enumerate(activities, start=1):
            writer.writerow(
                [
                    number,
                    activity.id,
                    activity.name,
                    _dependency_numbers(activity, positions),
                    format_allowed_days(activity.allowed_days),
                    format_date_for_input(activity.start_date),
                    activity.duration,
                    format_date_for_input(activity.end_date),
                ]
            )
