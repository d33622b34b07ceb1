"""Configuration management for consentcalc.

Handles loading, validating and creating the settings file. Settings are
optional: when the file does not exist the calculator runs on defaults.
"""

import contextlib
from pathlib import Path

import questionary
import yaml

from consentcalc.calendar import DEFAULT_BLACKOUT, NonWorkingDayCalendar
from consentcalc.config.interactive import run_interactive_wizard
from consentcalc.models import Settings
from consentcalc.utils.env import get_config_dir


class ConfigError(Exception):
    """Configuration-related error."""

    pass


class Configurator:
    """Configuration manager for consentcalc.

    Examples:
        # Use default path
        config = Configurator()
        settings = config.load_or_default()

        # Use custom path (useful for testing)
        config = Configurator(settings_path="/tmp/test-settings.yaml")
        settings = config.load()
    """

    def __init__(self, settings_path: Path | str | None = None) -> None:
        """Initialize configuration manager.

        Args:
            settings_path: Path to settings.yaml. If None, uses the default
                location (~/.config/consentcalc/settings.yaml or
                $XDG_CONFIG_HOME/consentcalc/settings.yaml)
        """
        self.settings_path = (
            Path(settings_path) if settings_path else self._get_default_settings_path()
        )

    @staticmethod
    def _get_default_settings_path() -> Path:
        """Get default path for settings.yaml."""
        return get_config_dir() / "settings.yaml"

    def load(self) -> Settings:
        """Load and validate settings from the config file.

        Returns:
            Validated Settings instance

        Raises:
            ConfigError: If the file doesn't exist or is invalid
        """
        try:
            return Settings.from_yaml_file(self.settings_path)
        except FileNotFoundError as e:
            raise ConfigError(
                f"Configuration file not found: {self.settings_path}\n\n"
                "Please run 'consentcalc config' to set up your configuration."
            ) from e
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML in configuration file:\n{e}\n\n"
                f"Please check {self.settings_path} for syntax errors."
            ) from e
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"Invalid configuration:\n{e}\n\n"
                "Please run 'consentcalc config' to update your configuration."
            ) from e

    def load_or_default(self) -> Settings:
        """Load settings, or return defaults if the file doesn't exist.

        Raises:
            ConfigError: If the file exists but is invalid
        """
        if not self.settings_path.exists():
            return Settings()
        return self.load()

    def create(self, interactive: bool = True) -> None:
        """Create the configuration file.

        Args:
            interactive: If True, run the interactive wizard. If False,
                write the default settings.

        Raises:
            ConfigError: If the configuration cannot be saved
        """
        self.settings_path.parent.mkdir(parents=True, exist_ok=True)

        current_settings = None
        if self.settings_path.exists():
            with contextlib.suppress(ConfigError):
                current_settings = self.load()

        if interactive:
            settings = run_interactive_wizard(defaults=current_settings)
        else:
            settings = current_settings or Settings()

        try:
            settings.to_yaml_file(self.settings_path)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration: {e}") from e
        questionary.print(
            f"\n✓ Configuration saved to {self.settings_path}", style="green"
        )


def build_calendar(settings: Settings, source: str | None = None) -> NonWorkingDayCalendar:
    """Create and load the calendar described by settings.

    A failed load does not raise; check calendar.degraded.

    Args:
        settings: Settings to apply
        source: Overrides settings.non_working_days when given

    Returns:
        Loaded NonWorkingDayCalendar
    """
    calendar = NonWorkingDayCalendar(
        blackout=DEFAULT_BLACKOUT if settings.seasonal_blackout else None
    )
    calendar.load(source if source is not None else settings.non_working_days)
    return calendar


# Convenience functions that use default paths


def load_settings() -> Settings:
    """Load settings from the default location, defaults if absent.

    Raises:
        ConfigError: If the config file exists but is invalid
    """
    return Configurator().load_or_default()


def get_config_path() -> Path:
    """Return path to default settings.yaml file (may not exist yet)."""
    return Configurator._get_default_settings_path()


def create_default_config(interactive: bool = True) -> None:
    """Create configuration file at the default location.

    Args:
        interactive: If True, run the interactive wizard

    Raises:
        ConfigError: If configuration creation fails
    """
    Configurator().create(interactive=interactive)
