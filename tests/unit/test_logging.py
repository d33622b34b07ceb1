"""Unit tests for consentcalc.utils.logging module."""

import logging
from pathlib import Path

import pytest
from consentcalc.utils.logging import (
    LOG_FORMAT,
    RelativePathFormatter,
    console_handler,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _record(pathname: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname=pathname,
        lineno=10,
        msg="Test message",
        args=(),
        exc_info=None,
    )


class TestRelativePathFormatter:
    """Test RelativePathFormatter class."""

    @pytest.mark.unit
    def test_default_base_path(self):
        formatter = RelativePathFormatter(LOG_FORMAT)
        assert formatter.base_path == str(Path.cwd())

    @pytest.mark.unit
    def test_relative_path(self, tmp_path: Path):
        formatter = RelativePathFormatter(LOG_FORMAT, base_path=str(tmp_path))

        formatted = formatter.format(_record(str(tmp_path / "pkg" / "mod.py")))

        assert "(pkg/mod.py:10)" in formatted
        assert "Test message" in formatted
        assert "[   INFO]" in formatted

    @pytest.mark.unit
    def test_missing_pathname(self):
        formatter = RelativePathFormatter(LOG_FORMAT)

        formatted = formatter.format(_record(""))

        assert "Test message" in formatted


class TestSetupLogging:
    """Test setup_logging()."""

    @pytest.mark.unit
    def test_writes_to_file(self, tmp_path: Path, restore_root_logger):
        log_file = tmp_path / "consentcalc.log"
        log_file.write_text("stale\n", encoding="utf-8")

        setup_logging(log_file)
        logging.getLogger("consentcalc.test").debug("hello %s", "log")
        for handler in restore_root_logger.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "stale" not in content
        assert "hello log" in content
        assert restore_root_logger.level == logging.DEBUG

    @pytest.mark.unit
    def test_extra_handlers(self, tmp_path: Path, restore_root_logger):
        extra = logging.StreamHandler()

        setup_logging(tmp_path / "consentcalc.log", extra_handlers=[extra])

        assert extra in restore_root_logger.handlers
        assert isinstance(extra.formatter, RelativePathFormatter)

    @pytest.mark.unit
    def test_console_handler(self):
        handler = console_handler(logging.WARNING)

        assert isinstance(handler, logging.StreamHandler)
        assert handler.level == logging.WARNING
