"""Tests for structured logging setup."""

import logging

import pytest

from scicalc_pkg.logging_config import (
    StructuredFormatter,
    evaluation_context,
    get_logger,
    setup_logging,
)


@pytest.fixture
def restore_loggers():
    saved = {}
    for name in ("scicalc", "werkzeug"):
        target = logging.getLogger(name)
        saved[name] = (target.level, list(target.handlers))
    yield
    for name, (level, handlers) in saved.items():
        target = logging.getLogger(name)
        target.setLevel(level)
        target.handlers[:] = handlers


def _record(msg="Calculated %s", args=("12",), **extra):
    record = logging.LogRecord("scicalc.server", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_context_fields():
    line = StructuredFormatter().format(
        _record(expression="8+4", angle_mode="Rad", elapsed_ms=1.5)
    )
    assert "[INFO] scicalc.server: Calculated 12" in line
    assert line.endswith("expression='8+4' angle_mode='Rad' elapsed_ms=1.5")


def test_formatter_skips_missing_fields():
    line = StructuredFormatter().format(_record(error_code=None))
    assert line.endswith("scicalc.server: Calculated 12")


def test_setup_logging_replaces_handlers(restore_loggers):
    setup_logging("DEBUG")
    logger = setup_logging("WARNING")
    assert logger.name == "scicalc"
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, StructuredFormatter)


def test_setup_logging_routes_werkzeug_for_server(restore_loggers):
    setup_logging("INFO", server=True)
    werkzeug = logging.getLogger("werkzeug")
    assert werkzeug.level == logging.INFO
    assert werkzeug.handlers == logging.getLogger("scicalc").handlers


def test_setup_logging_writes_file(tmp_path, restore_loggers):
    log_file = tmp_path / "scicalc.log"
    logger = setup_logging("INFO", log_file=str(log_file))
    get_logger("test").info("hello", extra=evaluation_context("1+1", error_code="PARSE_ERROR"))
    for handler in logger.handlers:
        handler.flush()
        if isinstance(handler, logging.FileHandler):
            handler.close()
    text = log_file.read_text()
    assert "scicalc.test: hello expression='1+1' error_code='PARSE_ERROR'" in text


def test_get_logger_namespace():
    assert get_logger("server").name == "scicalc.server"
    assert get_logger("server").parent is logging.getLogger("scicalc")


def test_evaluation_context():
    assert evaluation_context("2^3", "Deg", None, 3.14159) == {
        "expression": "2^3",
        "angle_mode": "Deg",
        "error_code": None,
        "elapsed_ms": 3.1,
    }
    assert evaluation_context("2^3")["elapsed_ms"] is None
