# tests/unit/pipeline/test_unit_event_log.py — v1
"""Tests for pipeline/event_log.py — append-only event log."""

from __future__ import annotations

import logging

from sermonflow.pipeline.event_log import ORCHESTRATOR, SYSTEM, EventLog


class TestEventLog:
    def test_append_defaults(self):
        log = EventLog()
        entry = log.append("hello")
        assert entry.agent == SYSTEM
        assert entry.type == "info"
        assert entry.timestamp.tzinfo is not None
        assert log.entries == [entry]

    def test_writes_into_backing_list(self):
        backing = []
        log = EventLog(backing)
        log.append("a", ORCHESTRATOR, "thinking")
        log.append("b", ORCHESTRATOR, "success")
        assert [e.message for e in backing] == ["a", "b"]
        assert len(log) == 2

    def test_of_type(self):
        log = EventLog()
        log.append("w1", type="warning")
        log.append("i1")
        log.append("w2", type="warning")
        assert [e.message for e in log.of_type("warning")] == ["w1", "w2"]

    def test_mirrored_to_logger(self, caplog):
        log = EventLog()
        with caplog.at_level(logging.DEBUG, logger="sermonflow.pipeline.event_log"):
            log.append("step failed", "Keyword Expert", "error")
            log.append("thinking...", ORCHESTRATOR, "thinking")
        levels = [(r.levelno, r.getMessage()) for r in caplog.records]
        assert (logging.ERROR, "[Keyword Expert] step failed") in levels
        assert (logging.DEBUG, "[Orchestrator] thinking...") in levels

    def test_entries_is_a_copy(self):
        log = EventLog()
        log.append("x")
        log.entries.clear()
        assert len(log) == 1
