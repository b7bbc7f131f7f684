# tests/unit/logging/test_logger.py — v2
"""Tests for logging/logger.py — logger factory and formatters."""

from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler

from sermonflow.logging.context import clear_context, set_run_context, set_step_context
from sermonflow.logging.logger import JsonFormatter, TextFormatter, get_logger, setup_logging


def _record(msg: str = "Hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_run_context("run-1234")
        set_step_context("Keyword Expert", "keyword-expert")
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["context"] == {
            "run_id": "run-1234", "agent": "Keyword Expert", "step": "keyword-expert",
        }

    def test_format_extra_data(self):
        parsed = json.loads(JsonFormatter().format(_record(data={"event_type": "error"})))
        assert parsed["data"] == {"event_type": "error"}

    def test_non_ascii_preserved(self):
        output = JsonFormatter().format(_record("로마서 8:28"))
        assert "로마서" in output


class TestTextFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output

    def test_includes_run_and_step(self):
        set_run_context("abcdef123456")
        set_step_context("Outline Designer", "outline-architect")
        output = TextFormatter().format(_record())
        assert "<abcdef12>" in output
        assert "(outline-architect)" in output


class TestGetLogger:
    def test_returns_namespaced_logger(self):
        assert get_logger("pipeline").name == "sermonflow.pipeline"


class TestSetupLogging:
    def teardown_method(self):
        root = logging.getLogger("sermonflow")
        for handler in list(root.handlers):
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.NOTSET)

    def test_setup_json(self):
        setup_logging(level="DEBUG", log_format="json")
        root = logging.getLogger("sermonflow")
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_setup_text(self):
        setup_logging(level="INFO", log_format="text")
        root = logging.getLogger("sermonflow")
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_setup_with_file(self, tmp_path):
        setup_logging(level="INFO", log_file=tmp_path / "logs" / "run.log", rotation="1MB")
        root = logging.getLogger("sermonflow")
        assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
