"""Shared fixtures and utilities for CLI tests."""

import re

import pytest
from click.testing import CliRunner

# Regex to strip ANSI escape codes
ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text."""
    return ANSI_ESCAPE.sub("", text)


@pytest.fixture
def runner() -> CliRunner:
    """Provide a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_env(isolated_home, monkeypatch):
    """Isolated HOME, a fixed 'today' of 2024-04-10 and a wide console."""
    monkeypatch.setenv("CONSENTCALC_FAKE_DATE", "2024-04-10")
    monkeypatch.setenv("COLUMNS", "200")
    return isolated_home
