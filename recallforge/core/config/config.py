"""
Main configuration class for RecallForge.

This module provides the Config dataclass that aggregates all sub-configs
and handles path management and dictionary (YAML) parsing.

Architecture Context
--------------------
Configuration is an application-layer concern. The scheduling core takes its
parameters as explicit arguments (SchedulerConfig, MasteryConfig); the CLI
and the review service build those from a Config loaded once at startup.

    recallforge.yaml
           ↓
    load_config() → Config object
           ↓
    Passed to: ReviewService, StatsAggregator, CLI commands

Configuration Hierarchy
-----------------------
    Config
    ├── ProjectConfig      # Project name, data directory, database file
    ├── SchedulerConfig    # SM-2 parameters and failure policy
    ├── RetentionConfig    # Forgetting-curve strategy, report sizes
    ├── MasteryConfig      # Mastery weights and classification thresholds
    └── LoggingConfig      # Log level and optional log file

Environment Variables
---------------------
Deployment-specific values use ${VAR_NAME} syntax:

    project:
      data_dir: ${RECALLFORGE_HOME:.data}

Usage Example
-------------
    config = load_config()
    strategy = config.retention.strategy
    db_path = config.database_path
"""

from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, get_args, get_type_hints

from recallforge.core.config.analytics import MasteryConfig, RetentionConfig
from recallforge.core.config.base import LoggingConfig, ProjectConfig
from recallforge.core.config.scheduling import SchedulerConfig
from recallforge.core.exceptions import ConfigValidationError


@dataclass
class Config:
    """Main RecallForge configuration."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    retention: RetentionConfig = field(default_factory=RetentionConfig)
    mastery: MasteryConfig = field(default_factory=MasteryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Runtime paths (set after loading)
    _base_path: Path = field(default_factory=Path.cwd, repr=False)

    def __post_init__(self) -> None:
        """Validate nested config types."""
        expected = {
            "project": ProjectConfig,
            "scheduler": SchedulerConfig,
            "retention": RetentionConfig,
            "mastery": MasteryConfig,
            "logging": LoggingConfig,
        }
        for name, cls_type in expected.items():
            if not isinstance(getattr(self, name), cls_type):
                raise ConfigValidationError(
                    f"{name} must be {cls_type.__name__}", field=name
                )

    @property
    def base_path(self) -> Path:
        """Get the project base directory."""
        return self._base_path

    @property
    def data_path(self) -> Path:
        """Get absolute path to data directory."""
        data_dir = Path(self.project.data_dir)
        if data_dir.is_absolute():
            return data_dir
        return self._base_path / data_dir

    @property
    def database_path(self) -> Path:
        """Get path to the SQLite review database."""
        return self.data_path / self.project.database_name

    @property
    def log_path(self) -> Optional[Path]:
        """Get path to the log file, if file logging is enabled."""
        if not self.logging.file:
            return None
        log_file = Path(self.logging.file)
        if log_file.is_absolute():
            return log_file
        return self._base_path / log_file

    def ensure_directories(self) -> None:
        """Create the data directory."""
        self.data_path.mkdir(parents=True, exist_ok=True)

    def with_scheduler(self, **changes: Any) -> "Config":
        """Return a copy with scheduler fields replaced (validated)."""
        return replace(self, scheduler=replace(self.scheduler, **changes))

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        result: dict[str, Any] = {}
        for key, value in asdict(self).items():
            if key.startswith("_"):
                continue
            result[key] = value
        return result

    @staticmethod
    def _filter_fields(cls_type: Any, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Filter dict to only keys that match dataclass fields, handling None."""
        if not data:
            return {}
        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"{cls_type.__name__} section must be a mapping, got: {type(data).__name__}"
            )
        valid_keys = {f.name for f in fields(cls_type)}
        hints = get_type_hints(cls_type)
        return {
            k: Config._coerce_value(cls_type, k, v, hints[k])
            for k, v in data.items()
            if k in valid_keys
        }

    @staticmethod
    def _coerce_value(cls_type: Any, name: str, value: Any, hint: Any) -> Any:
        """Convert ${VAR} expansion results to the field's numeric type.

        Expansion always yields strings; only str values headed for an int
        or float field are converted. An empty string clears an Optional field.
        """
        if not isinstance(value, str):
            return value
        optional = type(None) in get_args(hint)
        target = next((t for t in (int, float) if t is hint or t in get_args(hint)), None)
        if target is None:
            return value
        if optional and not value.strip():
            return None
        try:
            return target(value.strip())
        except ValueError as e:
            raise ConfigValidationError(
                f"{cls_type.__name__}.{name} must be {target.__name__}, got: {value!r}",
                field=name,
                value=value,
            ) from e

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], base_path: Optional[Path] = None
    ) -> "Config":
        """Create Config from dictionary.

        Raises:
            ConfigValidationError: If a section holds invalid values
        """
        # Import here to avoid circular dependency
        from recallforge.core.config_loaders import expand_env_vars

        data = expand_env_vars(data or {})

        try:
            config = cls(
                project=ProjectConfig(
                    **cls._filter_fields(ProjectConfig, data.get("project"))
                ),
                scheduler=SchedulerConfig(
                    **cls._filter_fields(SchedulerConfig, data.get("scheduler"))
                ),
                retention=RetentionConfig(
                    **cls._filter_fields(RetentionConfig, data.get("retention"))
                ),
                mastery=MasteryConfig(
                    **cls._filter_fields(MasteryConfig, data.get("mastery"))
                ),
                logging=LoggingConfig(
                    **cls._filter_fields(LoggingConfig, data.get("logging"))
                ),
            )
        except (TypeError, AttributeError) as e:
            raise ConfigValidationError(f"Malformed configuration: {e}") from e

        if base_path:
            config._base_path = base_path

        return config
