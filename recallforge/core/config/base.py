"""
Base configuration classes for project and logging settings.

Provides the project layout (where the review database lives) and
the logging defaults applied by the CLI at startup.
"""

from dataclasses import dataclass
from typing import Optional

from recallforge.core.constants import DEFAULT_DATABASE_NAME, DEFAULT_DATA_DIR
from recallforge.core.env import LOG_LEVELS
from recallforge.core.exceptions import ConfigValidationError


@dataclass
class ProjectConfig:
    """Project-level configuration."""

    name: str = "my-study-deck"
    data_dir: str = DEFAULT_DATA_DIR
    database_name: str = DEFAULT_DATABASE_NAME

    def __post_init__(self) -> None:
        if self.data_dir in ("/", "\\", ""):
            raise ConfigValidationError(
                f"data_dir must not be root or empty: {self.data_dir!r}",
                field="project.data_dir",
                value=self.data_dir,
            )
        if not self.database_name:
            raise ConfigValidationError(
                "database_name must not be empty", field="project.database_name"
            )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    file: Optional[str] = None  # Relative paths resolve against the project

    def __post_init__(self) -> None:
        self.level = self.level.upper()
        if self.level not in LOG_LEVELS:
            raise ConfigValidationError(
                f"logging.level must be one of {sorted(LOG_LEVELS)}, got: {self.level}",
                field="logging.level",
                value=self.level,
            )
