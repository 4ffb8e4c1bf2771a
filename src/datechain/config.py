"""Configuration loader for datechain.

Settings live in a single YAML file (datechain_config.yaml by default):

    storage:
      directory: ~/.local/share/datechain
      key: project-timeline-activities
    defaults:
      project_name: Website relaunch
      include_weekends: false
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, field_validator

from .storage import STORAGE_KEY

DEFAULT_CONFIG_FILENAME = "datechain_config.yaml"
DEFAULT_STORAGE_DIRECTORY = Path("~/.local/share/datechain")


class StorageConfig(BaseModel):
    """Where the project is persisted."""

    directory: Path = DEFAULT_STORAGE_DIRECTORY
    key: str = STORAGE_KEY

    @field_validator("key")
    @classmethod
    def validate_key(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("storage.key must not be empty")
        return value


class ProjectDefaults(BaseModel):
    """Settings applied when no project has been saved yet."""

    project_name: str = "Untitled project"
    include_weekends: bool = False


class PlannerConfig(BaseModel):
    """Top-level configuration."""

    storage: StorageConfig = StorageConfig()
    defaults: ProjectDefaults = ProjectDefaults()


def load_config(config_path: Path | str) -> PlannerConfig:
    """Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open() as f:
        data: Any = yaml.safe_load(f)

    if data is None:
        return PlannerConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config file: expected mapping, got {type(data)}")

    return PlannerConfig.model_validate(data)


def resolve_config(config_path: Path | None) -> PlannerConfig:
    """Load the explicit config file, else the default file if present, else defaults."""
    if config_path is not None:
        return load_config(config_path)

    default_path = Path(DEFAULT_CONFIG_FILENAME)
    if default_path.exists():
        return load_config(default_path)

    return PlannerConfig()
