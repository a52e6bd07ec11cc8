"""Tests for settings and logging setup."""

import json
import logging

import pytest
from pydantic import ValidationError
from pythonjsonlogger.json import JsonFormatter

from arazzo_builder.config.settings import BuilderSettings, get_settings, reset_settings
from arazzo_builder.observability.logging import configure_logging
from arazzo_builder.workflow.engine import new_editor_state


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


def test_environment_overrides(monkeypatch):
    """Test ARAZZO_BUILDER_* variables feed the blank document."""
    monkeypatch.setenv("ARAZZO_BUILDER_DEFAULT_TITLE", "Checkout")
    monkeypatch.setenv("ARAZZO_BUILDER_DEFAULT_WORKFLOW_ID", "checkout")

    state = new_editor_state()

    assert state.document.info.title == "Checkout"
    assert state.document.workflows[0].workflow_id == "checkout"


def test_settings_are_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("ARAZZO_BUILDER_LOG_LEVEL", "DEBUG")
    assert get_settings() is first
    reset_settings()
    assert get_settings().log_level == "DEBUG"


def test_negative_history_limit_rejected():
    with pytest.raises(ValidationError):
        BuilderSettings(history_limit=-1)


def test_configure_text_logging():
    handler = configure_logging(BuilderSettings(log_level="debug"))
    logger = logging.getLogger("arazzo_builder")

    assert logger.handlers == [handler]
    assert logger.level == logging.DEBUG


def test_configure_json_logging():
    """Test JSON mode emits one object per line with renamed fields."""
    handler = configure_logging(BuilderSettings(log_json=True))
    assert isinstance(handler.formatter, JsonFormatter)
    record = logging.LogRecord("arazzo_builder.workflow.engine", logging.WARNING, __file__, 1,
                               "Step %s removed", ("pay",), None)

    payload = json.loads(handler.format(record))

    assert payload["message"] == "Step pay removed"
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "arazzo_builder.workflow.engine"
