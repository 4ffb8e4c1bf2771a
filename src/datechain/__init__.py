"""datechain - activity date propagation through dependencies and calendars."""

from .exceptions import (
    CircularDependencyError,
    DateOrderError,
    PlannerError,
    StorageError,
    ValidationError,
    WeekendDateError,
)
from .graph import find_cycle, has_cycle, topological_order
from .models import Activity, Weekday
from .planner import ProjectPlanner
from .scheduler import earliest_start_date, propagate

__version__ = "0.1.0"

__all__ = [
    "Activity",
    "CircularDependencyError",
    "DateOrderError",
    "PlannerError",
    "ProjectPlanner",
    "StorageError",
    "ValidationError",
    "Weekday",
    "WeekendDateError",
    "earliest_start_date",
    "find_cycle",
    "has_cycle",
    "propagate",
    "topological_order",
]
