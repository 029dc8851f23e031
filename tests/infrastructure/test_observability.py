"""Structured Logging - tests for the JSON formatter and setup helpers."""

import json
import logging
import sys

import pytest

from domainguard.config import Settings
from domainguard.core.errors import InvariantViolation
from domainguard.infrastructure.observability import (
    JSONFormatter, configure_logging, setup_logging,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "domainguard.services.boundary_resolver", logging.INFO, __file__, 1,
        "Flushed %d entities", (2,), None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_core_fields():
    payload = json.loads(JSONFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "domainguard.services.boundary_resolver"
    assert payload["message"] == "Flushed 2 entities"
    assert "timestamp" in payload


def test_json_formatter_surfaces_extra_fields():
    payload = json.loads(JSONFormatter().format(
        _record(scope_id="s-1", entity_id="u-1", unrelated="ignored"),
    ))
    assert payload["scope_id"] == "s-1"
    assert payload["entity_id"] == "u-1"
    assert "unrelated" not in payload


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()
    payload = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in payload["exception"]


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize("fmt,formatter_type", [("json", JSONFormatter), ("text", logging.Formatter)])
def test_setup_logging_installs_handler(restore_root_logger, fmt, formatter_type):
    handler = setup_logging("debug", fmt)
    assert handler in logging.getLogger().handlers
    assert type(handler.formatter) is formatter_type
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_reads_settings(restore_root_logger):
    handler = configure_logging(Settings(log_level="WARNING", log_format="text"))
    assert logging.getLogger().level == logging.WARNING
    assert not isinstance(handler.formatter, JSONFormatter)


def test_json_formatter_renders_domain_error_extra():
    error = InvariantViolation("Group", "demote", ["has_administrator"], "g-1")
    payload = json.loads(JSONFormatter().format(_record(**error.log_extra())))
    assert payload["error_code"] == "INVARIANT_VIOLATION"
    assert payload["behavior"] == "demote"
    assert payload["failed_invariants"] == ["has_administrator"]
    assert payload["entity_id"] == "g-1"
