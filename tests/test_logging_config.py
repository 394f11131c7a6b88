"""Tests for logging setup."""

import logging
import sys

import pytest

from grapher_pkg.logging_config import StructuredFormatter, get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger("grapher")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


def test_module_loggers_share_one_tree():
    assert get_logger("domain").name == "grapher.domain"
    assert get_logger("domain").parent is logging.getLogger("grapher")


def test_setup_writes_to_file(tmp_path):
    log_file = tmp_path / "grapher.log"
    root = setup_logging("debug", str(log_file))
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 2
    get_logger("parser").debug("parsed 3 tokens")
    for handler in root.handlers:
        handler.flush()
    text = log_file.read_text()
    assert "[DEBUG] grapher.parser: parsed 3 tokens" in text


def test_setup_replaces_handlers():
    setup_logging("INFO")
    root = setup_logging("ERROR")
    assert len(root.handlers) == 1
    assert root.level == logging.ERROR


def test_unknown_level_falls_back_to_warning():
    assert setup_logging("chatty").level == logging.WARNING


def test_formatter_appends_traceback():
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            "grapher.domain", logging.WARNING, __file__, 1, "analysis failed", None, sys.exc_info()
        )
    line = StructuredFormatter().format(record)
    assert "[WARNING] grapher.domain: analysis failed" in line
    assert "ValueError: boom" in line
