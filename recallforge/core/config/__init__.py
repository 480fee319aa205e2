"""
Configuration Management for RecallForge.

This module provides the application's configuration system using a hierarchy
of dataclasses that map to a YAML configuration file. It supports environment
variable expansion and RECALLFORGE_* overrides.

Public API
----------
    from recallforge.core.config import Config, load_config
    from recallforge.core.config import SchedulerConfig, MasteryConfig

Architecture
------------
    config/
    ├── base.py          # ProjectConfig, LoggingConfig
    ├── scheduling.py    # SchedulerConfig
    ├── analytics.py     # RetentionConfig, MasteryConfig
    └── config.py        # Main Config class
"""

from recallforge.core.config.analytics import MasteryConfig, RetentionConfig
from recallforge.core.config.base import LoggingConfig, ProjectConfig
from recallforge.core.config.config import Config
from recallforge.core.config.scheduling import SchedulerConfig
from recallforge.core.config_loaders import (
    expand_env_vars,
    load_config,
    save_config,
)

__all__ = [
    "Config",
    "ProjectConfig",
    "LoggingConfig",
    "SchedulerConfig",
    "RetentionConfig",
    "MasteryConfig",
    "expand_env_vars",
    "load_config",
    "save_config",
]
