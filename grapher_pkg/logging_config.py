"""Logging for Grapher: one ``grapher`` logger tree, configured by the CLI.

Library modules only call ``get_logger``; nothing is printed until
``setup_logging`` attaches handlers, so embedding applications keep control
of their own logging.
"""

import logging
import sys
from datetime import datetime
from typing import Optional

LOGGER_NAME = "grapher"


class StructuredFormatter(logging.Formatter):
    """``<ISO timestamp> [LEVEL] grapher.<module>: message``, plus any traceback."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        line = f"{timestamp} [{record.levelname}] {record.name}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """Send ``grapher.*`` records at ``level`` and above to stderr and, optionally, a file.

    Calling it again replaces the handlers from the previous call. An
    unknown level name falls back to WARNING.
    """
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(StructuredFormatter())
        root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for one module, e.g. ``get_logger("domain")`` is ``grapher.domain``."""
    return logging.getLogger(LOGGER_NAME).getChild(name)
