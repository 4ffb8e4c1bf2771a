"""Custom exceptions for datechain."""


class PlannerError(Exception):
    """Base exception for all datechain errors."""

    pass


class ValidationError(PlannerError):
    """Raised when a requested change is rejected.

    The change is not applied and the project is left as it was.
    """

    pass


class MissingFieldError(ValidationError):
    """Raised when a required activity field is missing or not usable."""

    pass


class ActivityNotFoundError(ValidationError):
    """Raised when an activity number does not exist."""

    pass


class CircularDependencyError(ValidationError):
    """Raised when a dependency edit would introduce a cycle."""

    pass


class WeekendDateError(ValidationError):
    """Raised when a weekend date is set while weekends are excluded."""

    pass


class DateOrderError(ValidationError):
    """Raised when a date falls before the date it must follow."""

    pass


class StorageError(PlannerError):
    """Raised when the project store cannot be written."""

    pass
