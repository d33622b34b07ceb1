"""Environment-aware path and date resolution.

Config and cache directories follow the XDG Base Directory specification
and the HOME environment variable.
"""

import logging
import os
from datetime import date
from pathlib import Path

logger = logging.getLogger(__name__)

APP_NAME = "consentcalc"

FAKE_DATE_ENV = "CONSENTCALC_FAKE_DATE"


def _validate_xdg_path(xdg_var_name: str, xdg_value: str) -> Path | None:
    """Validate XDG path per XDG Base Directory specification.

    Args:
        xdg_var_name: Name of the XDG environment variable
        xdg_value: Value from the environment variable

    Returns:
        Application subdirectory if the value is absolute, None otherwise
    """
    xdg_path = Path(xdg_value)
    if not xdg_path.is_absolute():
        logger.warning(
            "%s contains relative path '%s' which violates "
            "XDG Base Directory specification. Ignoring and using default.",
            xdg_var_name,
            xdg_value,
        )
        return None
    return xdg_path / APP_NAME


def get_home_dir() -> Path:
    """Get the user's home directory (HOME, falling back to Path.home())."""
    home = os.environ.get("HOME")
    return Path(home) if home else Path.home()


def config_dir_for_home(home_dir: Path) -> Path:
    """Config directory (~/.config/consentcalc) for a given home directory."""
    return home_dir / ".config" / APP_NAME


def cache_dir_for_home(home_dir: Path) -> Path:
    """Cache directory (~/.cache/consentcalc) for a given home directory."""
    return home_dir / ".cache" / APP_NAME


def _resolve_dir(xdg_var_name: str, fallback: Path) -> Path:
    xdg_value = os.environ.get(xdg_var_name)
    if xdg_value:
        validated_path = _validate_xdg_path(xdg_var_name, xdg_value)
        if validated_path:
            return validated_path
    return fallback


def get_config_dir() -> Path:
    """Get the application's configuration directory.

    Respects XDG_CONFIG_HOME and HOME. Relative XDG_CONFIG_HOME values are
    ignored.

    Returns:
        Path to the consentcalc configuration directory
    """
    return _resolve_dir("XDG_CONFIG_HOME", config_dir_for_home(get_home_dir()))


def get_cache_dir() -> Path:
    """Get the application's cache directory (holds the log file).

    Respects XDG_CACHE_HOME and HOME. Relative XDG_CACHE_HOME values are
    ignored.

    Returns:
        Path to the consentcalc cache directory
    """
    return _resolve_dir("XDG_CACHE_HOME", cache_dir_for_home(get_home_dir()))


def get_today() -> date:
    """Get today's date.

    CONSENTCALC_FAKE_DATE (YYYY-MM-DD) overrides the real date, for tests
    and for replaying a calculation as of a past day.

    Returns:
        Today's date (or the fake date if set and valid)
    """
    fake_date = os.environ.get(FAKE_DATE_ENV)
    if fake_date:
        try:
            return date.fromisoformat(fake_date)
        except ValueError:
            logger.warning(
                "Invalid %s '%s' (expected YYYY-MM-DD). Using real date.",
                FAKE_DATE_ENV,
                fake_date,
            )
    return date.today()
