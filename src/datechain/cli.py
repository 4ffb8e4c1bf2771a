"""Command-line interface for datechain."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from . import context
from .config import PlannerConfig
from .exceptions import PlannerError, StorageError, ValidationError
from .formatting import format_date_for_display, parse_input_date, render_table, write_csv
from .logger import VERBOSITY_DEBUG, VERBOSITY_SILENT, setup_logger
from .planner import ProjectPlanner
from .storage import DirectoryStore, clear_project

app = typer.Typer(
    name="datechain",
    help="Plan project activities and propagate their dates through dependencies",
    add_completion=False,
)


class WeekendMode(str, Enum):
    """Whether weekends count as work days."""

    INCLUDE = "include"
    EXCLUDE = "exclude"


ActivityNumber = Annotated[int, typer.Argument(help="Activity number as shown by 'show'", min=1)]


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=VERBOSITY_SILENT,
            max=VERBOSITY_DEBUG,
        ),
    ] = VERBOSITY_SILENT,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: datechain_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for datechain commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _config() -> PlannerConfig:
    """Get the active configuration, exiting on a missing or invalid config file."""
    try:
        return context.get_config()
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _store() -> DirectoryStore:
    return DirectoryStore(_config().storage.directory)


def _open_planner() -> ProjectPlanner:
    """Load the stored project, or a new one built from the configured defaults."""
    config = _config()
    return ProjectPlanner.load(
        _store(),
        config.storage.key,
        default_include_weekends=config.defaults.include_weekends,
        default_name=config.defaults.project_name,
    )


def _parse_date_argument(value: str) -> date:
    """Parse a YYYY-MM-DD command-line value."""
    try:
        return parse_input_date(value)
    except ValueError:
        typer.echo(f"Error: Invalid date '{value}'. Use YYYY-MM-DD format.", err=True)
        raise typer.Exit(1) from None


def _show(planner: ProjectPlanner) -> None:
    mode = "calendar days" if planner.include_weekends else "business days (weekends excluded)"
    typer.echo(planner.name)
    typer.echo(f"Project start: {format_date_for_display(planner.project_start_date)}")
    typer.echo(f"Scheduling in: {mode}")
    typer.echo("")
    typer.echo(render_table(planner.activities))


def _edit(edit: Callable[[ProjectPlanner], object]) -> None:
    """Apply an edit to the stored project, save it and show the result.

    Validation failures and save failures are reported and exit with status 1.
    """
    planner = _open_planner()
    try:
        edit(planner)
    except ValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    try:
        planner.save()
    except StorageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    _show(planner)


@app.command()
def show() -> None:
    """Show the project and its scheduled activities."""
    _show(_open_planner())


@app.command()
def init(
    name: Annotated[str, typer.Argument(help="Project name")],
    *,
    start: Annotated[
        str | None, typer.Option("--start", "-s", help="Project start date (YYYY-MM-DD)")
    ] = None,
    include_weekends: Annotated[
        bool,
        typer.Option("--include-weekends/--exclude-weekends", help="Count weekends as work days"),
    ] = False,
    force: Annotated[
        bool, typer.Option("--force", help="Replace an existing project")
    ] = False,
) -> None:
    """Start a new, empty project."""
    config = _config()
    store = _store()
    if store.get(config.storage.key) is not None and not force:
        typer.echo("Error: A project already exists. Use --force to replace it.", err=True)
        raise typer.Exit(1)

    start_date = _parse_date_argument(start) if start else date.today()  # noqa: DTZ011
    planner = ProjectPlanner(
        start_date, include_weekends, name, store=store, storage_key=config.storage.key
    )
    try:
        planner.save()
    except StorageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    _show(planner)


@app.command()
def add(
    name: Annotated[str, typer.Argument(help="Activity name")],
    *,
    duration: Annotated[int, typer.Option("--duration", "-d", help="Duration in days")] = 1,
    deps: Annotated[
        str, typer.Option("--deps", help="Activity numbers this depends on, e.g. '1, 2'")
    ] = "",
    days: Annotated[
        str, typer.Option("--days", help="Allowed start days, e.g. 'Mon, Thu'")
    ] = "",
) -> None:
    """Add an activity at the end of the list."""
    _edit(lambda planner: planner.add_activity(name, duration, deps, days))


@app.command()
def remove(number: ActivityNumber) -> None:
    """Remove an activity. Dependencies on it are dropped."""
    _edit(lambda planner: planner.remove_activity(number - 1))


@app.command()
def rename(
    number: ActivityNumber,
    name: Annotated[str, typer.Argument(help="New activity name")],
) -> None:
    """Rename an activity."""
    _edit(lambda planner: planner.rename_activity(number - 1, name))


@app.command("set-duration")
def set_duration(
    number: ActivityNumber,
    duration: Annotated[int, typer.Argument(help="Duration in days")],
) -> None:
    """Change an activity's duration."""
    _edit(lambda planner: planner.set_duration(number - 1, duration))


@app.command("set-start")
def set_start(
    number: ActivityNumber,
    start: Annotated[str, typer.Argument(help="Start date (YYYY-MM-DD)")],
) -> None:
    """Move an activity's start date."""
    start_date = _parse_date_argument(start)
    _edit(lambda planner: planner.set_start_date(number - 1, start_date))


@app.command("set-end")
def set_end(
    number: ActivityNumber,
    end: Annotated[str, typer.Argument(help="End date (YYYY-MM-DD)")],
) -> None:
    """Move an activity's end date, changing its duration."""
    end_date = _parse_date_argument(end)
    _edit(lambda planner: planner.set_end_date(number - 1, end_date))


@app.command("set-deps")
def set_deps(
    number: ActivityNumber,
    deps: Annotated[str, typer.Argument(help="Activity numbers, e.g. '1, 2' ('' for none)")],
) -> None:
    """Replace an activity's dependencies."""
    _edit(lambda planner: planner.set_dependencies(number - 1, deps))


@app.command("set-days")
def set_days(
    number: ActivityNumber,
    days: Annotated[str, typer.Argument(help="Allowed start days, e.g. 'Mon, Thu' ('' for any)")],
) -> None:
    """Restrict the weekdays an activity may start on."""
    _edit(lambda planner: planner.set_allowed_days(number - 1, days))


@app.command("project-start")
def project_start(
    start: Annotated[str, typer.Argument(help="Project start date (YYYY-MM-DD)")],
) -> None:
    """Change the project start date."""
    start_date = _parse_date_argument(start)
    _edit(lambda planner: planner.set_project_start_date(start_date))


@app.command()
def weekends(
    mode: Annotated[
        WeekendMode,
        typer.Argument(help="'include' to count weekends, 'exclude' for business days only"),
    ],
) -> None:
    """Switch between calendar-day and business-day scheduling."""
    _edit(lambda planner: planner.set_include_weekends(mode == WeekendMode.INCLUDE))


@app.command()
def export(
    output: Annotated[Path, typer.Argument(help="CSV file to write")],
) -> None:
    """Export the scheduled activities to CSV."""
    planner = _open_planner()
    try:
        write_csv(planner.activities, output)
    except OSError as e:
        typer.echo(f"Error: Could not write {output}: {e}", err=True)
        raise typer.Exit(1) from None
    typer.echo(f"Schedule written to {output}")


@app.command()
def clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Don't ask for confirmation")] = False,
) -> None:
    """Delete the stored project."""
    if not yes:
        typer.confirm("Delete the stored project?", abort=True)
    try:
        clear_project(_store(), _config().storage.key)
    except PlannerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    typer.echo("Stored project deleted")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
