"""Configuration management for consentcalc.

This module provides settings loading, validation, and creation
functionality for the consentcalc application.
"""

from consentcalc.config.base import (
    ConfigError,
    Configurator,
    build_calendar,
    create_default_config,
    get_config_path,
    load_settings,
)

__all__ = [
    "ConfigError",
    "Configurator",
    "build_calendar",
    "create_default_config",
    "get_config_path",
    "load_settings",
]
