"""Global application context and state management."""

from __future__ import annotations

from pathlib import Path

from .config import PlannerConfig, resolve_config


class _Context:
    """Application context for managing global state."""

    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.config: PlannerConfig | None = None


# Singleton instance
_context = _Context()


def set_config_path(path: Path | None) -> None:
    """Set the global config path and drop any previously loaded config."""
    _context.config_path = path
    _context.config = None


def get_config() -> PlannerConfig:
    """Get the active configuration, loading it on first use."""
    if _context.config is None:
        _context.config = resolve_config(_context.config_path)
    return _context.config
