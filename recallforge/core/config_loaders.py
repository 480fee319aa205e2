"""
Configuration Loading and Management Functions.

Handles loading, saving, and applying environment overrides to the
RecallForge configuration.

Configuration precedence: 1. RECALLFORGE_* env vars, 2. YAML file, 3. Defaults

Environment Overrides
---------------------
    RECALLFORGE_LOG_LEVEL            DEBUG | INFO | WARNING | ERROR | CRITICAL
    RECALLFORGE_DATA_DIR             Data directory (relative to the project)
    RECALLFORGE_RETENTION_STRATEGY   exponential | piecewise-linear
    RECALLFORGE_FOCUS_COUNT          Weakest cards listed by `retention` (0-100)
    RECALLFORGE_FAILURE_POLICY       reset | decrement
    RECALLFORGE_TARGET_RETENTION     Float in (0, 1)

Invalid override values are ignored with a warning.
"""

import os
import re
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import yaml

from recallforge.core.constants import CONFIG_FILENAMES
from recallforge.core.env import (
    FAILURE_POLICIES,
    LOG_LEVELS,
    RETENTION_STRATEGIES,
    get_env_float,
    get_env_int,
    get_env_str,
    get_env_whitelist,
)
from recallforge.core.logging import get_logger

if TYPE_CHECKING:
    from recallforge.core.config import Config

logger = get_logger(__name__)

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Handles nested structures including:
    - Strings with ${VAR_NAME} or ${VAR_NAME:default} syntax
    - Nested dictionaries
    - Nested lists

    Args:
        value: Configuration value (string, dict, list, or primitive)

    Returns:
        Value with all environment variables expanded
    """
    if isinstance(value, str):

        def replace_env_var(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return _ENV_PATTERN.sub(replace_env_var, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    # Return primitives (int, float, bool, None) unchanged
    return value


def _apply_env_overrides(config: "Config") -> "Config":
    """
    Apply environment variable overrides to configuration.

    Environment variables take precedence over config file values.
    """
    _apply_logging_overrides(config)
    _apply_project_overrides(config)
    _apply_retention_overrides(config)
    _apply_scheduler_overrides(config)
    return config


def _apply_logging_overrides(config: "Config") -> None:
    """Apply log level override."""
    level = get_env_whitelist("RECALLFORGE_LOG_LEVEL", LOG_LEVELS)
    if level:
        config.logging.level = level


def _apply_project_overrides(config: "Config") -> None:
    """Apply data directory override."""
    data_dir = get_env_str("RECALLFORGE_DATA_DIR")
    if data_dir and data_dir not in ("/", "\\"):
        config.project.data_dir = data_dir


def _apply_retention_overrides(config: "Config") -> None:
    """Apply retention strategy and focus count overrides."""
    strategy = get_env_whitelist("RECALLFORGE_RETENTION_STRATEGY", RETENTION_STRATEGIES)
    if strategy:
        config.retention.strategy = strategy

    focus_count = get_env_int("RECALLFORGE_FOCUS_COUNT", min_value=0, max_value=100)
    if focus_count is not None:
        config.retention.focus_count = focus_count


def _apply_scheduler_overrides(config: "Config") -> None:
    """Apply failure policy and target retention overrides.

    SchedulerConfig is frozen, so overrides build a replacement.
    """
    changes: dict[str, Any] = {}

    policy = get_env_whitelist("RECALLFORGE_FAILURE_POLICY", FAILURE_POLICIES)
    if policy:
        changes["failure_policy"] = policy

    target = get_env_float(
        "RECALLFORGE_TARGET_RETENTION", min_value=0.01, max_value=0.99
    )
    if target is not None:
        changes["target_retention"] = target

    if changes:
        config.scheduler = replace(config.scheduler, **changes)


def find_config_file(base_path: Path) -> Optional[Path]:
    """Locate the first known config file in base_path."""
    for filename in CONFIG_FILENAMES:
        candidate = base_path / filename
        if candidate.exists():
            return candidate
    return None


def load_config(
    config_path: Optional[Path] = None, base_path: Optional[Path] = None
) -> "Config":
    """
    Load configuration from YAML file with environment variable overrides.

    A missing or unreadable file falls back to defaults; a readable file
    with invalid values raises.

    Args:
        config_path: Path to config file. Defaults to recallforge.yaml or
            config.yaml in base_path.
        base_path: Base path for the project. Defaults to current directory.

    Returns:
        Config object with all settings.

    Raises:
        ConfigValidationError: If the file holds invalid values
    """
    # Lazy import to avoid circular dependency
    from recallforge.core.config import Config

    base_path = base_path or Path.cwd()

    if config_path is None:
        config_path = find_config_file(base_path)
    if config_path is None or not config_path.exists():
        return _create_default_config(base_path)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(
            "Could not read config, using defaults",
            path=str(config_path),
            error=str(e),
        )
        return _create_default_config(base_path)

    if not isinstance(data, dict):
        logger.warning(
            "Config root is not a mapping, using defaults", path=str(config_path)
        )
        return _create_default_config(base_path)

    config = Config.from_dict(data, base_path)
    logger.debug("Loaded configuration", path=str(config_path))
    return _apply_env_overrides(config)


def _create_default_config(base_path: Path) -> "Config":
    """
    Create default configuration with environment overrides.
    """
    from recallforge.core.config import Config

    config = Config()
    config._base_path = base_path
    return _apply_env_overrides(config)


def save_config(config: "Config", config_path: Optional[Path] = None) -> Path:
    """
    Save configuration to a YAML file.

    Args:
        config: Configuration to write.
        config_path: Target path. Defaults to recallforge.yaml in the
            config's base path.

    Returns:
        Path that was written.
    """
    target = config_path or config.base_path / CONFIG_FILENAMES[0]
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    return target
