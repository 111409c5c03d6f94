"""Configuration for annotation resolution runs."""

from rules.config import (
    CONFIG_FILENAME,
    AnnotateConfig,
    ConfigError,
    DirectivesConfig,
    SuppressionsConfig,
    VisibilityConfig,
    load_config,
)

__all__ = [
    "CONFIG_FILENAME",
    "AnnotateConfig",
    "ConfigError",
    "DirectivesConfig",
    "SuppressionsConfig",
    "VisibilityConfig",
    "load_config",
]
