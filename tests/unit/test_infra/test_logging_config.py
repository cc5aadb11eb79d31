"""Tests for logging configuration, formatter and context filter."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from problem_service.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    build_logging_config,
    clear_log_context,
    get_log_context,
    set_log_context,
    setup_logging,
)
from problem_service.infra.logging import config as config_module


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_log_context()
    yield
    clear_log_context()


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="problem_service.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestBuildLoggingConfig:
    """Test suite for build_logging_config."""

    def test_json_formatter_with_service(self):
        config = build_logging_config(log_level="debug", service_name="orders")

        assert config["root"] == {"level": "DEBUG", "handlers": ["console"]}
        assert config["formatters"]["default"]["()"].endswith("JSONFormatter")
        assert config["formatters"]["default"]["static"] == {"service": "orders"}
        assert config["handlers"]["console"]["filters"] == ["context"]

    def test_plain_formatter(self):
        config = build_logging_config(json_logs=False)

        assert "format" in config["formatters"]["default"]

    def test_uvicorn_loggers_propagate(self):
        assert config_module.UVICORN_LOGGERS[0] in build_logging_config()["loggers"]
        assert build_logging_config(include_uvicorn=False)["loggers"] == {}


@pytest.mark.unit
class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_runs_once(self, monkeypatch: pytest.MonkeyPatch):
        calls: list[dict] = []
        monkeypatch.setattr(config_module, "_LOGGING_INITIALIZED", False)
        monkeypatch.setattr(config_module, "configure_logging", lambda **kw: calls.append(kw))

        setup_logging()
        setup_logging()

        assert len(calls) == 1
        assert calls[0]["log_level"] == "INFO"

    def test_force_and_overrides(self, monkeypatch: pytest.MonkeyPatch):
        calls: list[dict] = []
        monkeypatch.setattr(config_module, "configure_logging", lambda **kw: calls.append(kw))

        setup_logging(force=True, json_logs=False)

        assert calls[0]["json_logs"] is False


@pytest.mark.unit
class TestJSONFormatter:
    """Test suite for JSONFormatter."""

    def test_formats_standard_fields(self):
        data = json.loads(JSONFormatter(static={"service": "problem-service"}).format(_record()))

        assert data["level"] == "WARNING"
        assert data["logger"] == "problem_service.test"
        assert data["message"] == "hello"
        assert data["service"] == "problem-service"
        assert data["timestamp"].endswith("Z")

    def test_includes_extra_fields(self):
        data = json.loads(JSONFormatter().format(_record(status_code=500, surface="route")))

        assert data["status_code"] == 500
        assert data["surface"] == "route"

    def test_includes_exception(self):
        try:
            raise RuntimeError("kaput")
        except RuntimeError:
            record = logging.LogRecord(
                "problem_service.test", logging.ERROR, __file__, 1, "failed", (), exc_info=sys.exc_info()
            )

        data = json.loads(JSONFormatter().format(record))

        assert "RuntimeError: kaput" in data["exception"]


@pytest.mark.unit
class TestContextInjectingFilter:
    """Test suite for the log context helpers."""

    def test_injects_context(self):
        set_log_context(request_id="abc-123")
        record = _record()

        assert ContextInjectingFilter().filter(record) is True
        assert record.request_id == "abc-123"

    def test_record_values_win(self):
        set_log_context(request_id="from-context")
        record = _record(request_id="from-extra")

        ContextInjectingFilter().filter(record)

        assert record.request_id == "from-extra"

    def test_context_helpers(self):
        set_log_context(a=1)
        set_log_context(b=2)

        assert get_log_context() == {"a": 1, "b": 2}

        clear_log_context()

        assert get_log_context() == {}
