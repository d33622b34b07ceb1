"""Pytest configuration and shared fixtures for consentcalc tests."""

from datetime import date
from pathlib import Path

import pytest
from _pytest.config import Config

from consentcalc.calendar import NonWorkingDayCalendar

# Public holidays used by tests that do not load the bundled list
TEST_HOLIDAYS = frozenset(
    {
        date(2024, 1, 1),
        date(2024, 1, 2),
        date(2024, 2, 6),
        date(2024, 3, 29),
        date(2024, 4, 1),
        date(2024, 4, 25),
        date(2024, 12, 25),
        date(2024, 12, 26),
        date(2025, 1, 1),
        date(2025, 1, 2),
    }
)


def pytest_configure(config: Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Set up isolated HOME environment for testing.

    HOME points at a temp directory and XDG_CONFIG_HOME/XDG_CACHE_HOME
    are unset, so default path resolution never touches real user files.

    Returns:
        Path: The temporary home directory
    """
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def calendar() -> NonWorkingDayCalendar:
    """Calendar with test holidays and the default seasonal blackout."""
    return NonWorkingDayCalendar(holidays=TEST_HOLIDAYS)


@pytest.fixture
def plain_calendar() -> NonWorkingDayCalendar:
    """Calendar with test holidays and no seasonal blackout."""
    return NonWorkingDayCalendar(holidays=TEST_HOLIDAYS, blackout=None)
