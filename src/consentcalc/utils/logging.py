"""Logging configuration.

Everything goes to a log file that is truncated on each run; console
output to stderr is optional.
"""

import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

# levelname width 7 fits "WARNING"; %(relpath)s is set by RelativePathFormatter
LOG_FORMAT = "[%(levelname)7s] %(asctime)s (%(relpath)s:%(lineno)d) --- %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "[%(levelname)7s] %(name)s --- %(message)s"


class RelativePathFormatter(logging.Formatter):
    """Formatter that shows source paths relative to a base directory."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        base_path: str | None = None,
    ) -> None:
        """Initialize the formatter.

        Args:
            fmt: Log format string
            datefmt: Date format string
            base_path: Base path to make paths relative to (default: cwd)
        """
        super().__init__(fmt, datefmt)
        self.base_path = base_path or str(Path.cwd())

    def format(self, record: logging.LogRecord) -> str:
        """Format the record, adding the relpath field."""
        if record.pathname:
            try:
                relpath = os.path.relpath(record.pathname, self.base_path)
            except ValueError:
                # On Windows, relpath fails for different drives
                relpath = record.pathname
        else:
            relpath = record.filename or "unknown"

        record.relpath = relpath
        return super().format(record)


def console_handler(level: int = logging.INFO) -> logging.Handler:
    """Build a console handler writing to stderr.

    Args:
        level: Minimum level shown on the console

    Returns:
        Configured StreamHandler
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def setup_logging(
    log_file: Path,
    level: int = logging.DEBUG,
    extra_handlers: Sequence[logging.Handler] | None = None,
) -> None:
    """Set up root logging to a file plus any extra handlers.

    Extra handlers keep their own formatter when they already have one.

    Args:
        log_file: Path to log file (truncated on each run)
        level: Root log level (default: DEBUG)
        extra_handlers: Additional handlers (e.g. console_handler())
    """
    file_handler = logging.FileHandler(log_file, mode="w")
    file_handler.setFormatter(RelativePathFormatter(LOG_FORMAT, LOG_DATE_FORMAT))

    handlers: list[logging.Handler] = [file_handler]
    for handler in extra_handlers or ():
        if handler.formatter is None:
            handler.setFormatter(RelativePathFormatter(LOG_FORMAT, LOG_DATE_FORMAT))
        handlers.append(handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in handlers:
        root_logger.addHandler(handler)
