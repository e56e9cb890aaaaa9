"""Observability tests - JSON log shape and handler setup."""

import json
import logging

from autorest.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "autorest.test", logging.INFO, __file__, 1, "Exposing %s", ("Author",), None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_base_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "INFO"
    assert log["logger"] == "autorest.test"
    assert log["message"] == "Exposing Author"
    assert "timestamp" in log


def test_json_formatter_surfaces_known_extra_fields_only():
    log = json.loads(JSONFormatter().format(
        _record(model="Author", error_code="MALFORMED_QUERY", secret="x"),
    ))
    assert log["model"] == "Author"
    assert log["error_code"] == "MALFORMED_QUERY"
    assert "secret" not in log


def test_setup_logging_replaces_previous_handler():
    first = setup_logging("DEBUG", "json")
    second = setup_logging("WARNING", "text")
    try:
        assert first not in logging.root.handlers
        assert second in logging.root.handlers
        assert logging.root.level == logging.WARNING
        assert not isinstance(second.formatter, JSONFormatter)
    finally:
        logging.root.removeHandler(second)
