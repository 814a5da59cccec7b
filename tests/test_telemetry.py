"""Tests for session metrics and submission records."""

import logging

import pytest

from cmdsuggest.config import Settings
from cmdsuggest.engine import SuggestionEngine
from cmdsuggest.telemetry import LoggingSink, SessionMetrics, submission_record


@pytest.fixture
def engine():
    engine = SuggestionEngine(Settings())
    engine.refresh_commands(["Get-Thing -Name foo"])
    engine.refresh_corpus(["Get-Thing -Name foo -Force"])
    return engine


@pytest.fixture
def metrics():
    return SessionMetrics()


class TestSessionMetrics:
    def test_counters(self, metrics):
        metrics.record_keystroke()
        metrics.record_keystroke()
        metrics.record_accepted_part(from_suggestion=True)
        metrics.record_accepted_part(from_suggestion=False)
        metrics.record_accepted_part(from_suggestion=False)
        assert metrics.keystrokes == 2
        assert metrics.suggestion_parts_accepted == 1
        assert metrics.history_parts_accepted == 2

    def test_reset_keeps_session(self, metrics):
        session_id = metrics.session_id
        metrics.record_keystroke()
        metrics.record_accepted_part(from_suggestion=True)
        metrics.reset()
        assert metrics.keystrokes == 0
        assert metrics.suggestion_parts_accepted == 0
        assert metrics.history_parts_accepted == 0
        assert metrics.session_id == session_id

    def test_session_ids_are_unique(self):
        assert SessionMetrics().session_id != SessionMetrics().session_id


class TestSubmissionRecord:
    def test_unknown_command(self, engine, metrics):
        assert submission_record(engine, metrics, "Other-Cmd -X 1", []) is None

    def test_record_fields(self, engine, metrics):
        for _ in range(3):
            metrics.record_keystroke()
        metrics.record_accepted_part(from_suggestion=True)

        line = "Get-Thing -Name bar"
        record = submission_record(engine, metrics, line, ["Get-Thing -Name x"])

        assert record == {
            "line": "Get-Thing -Name ***",
            "related_history": "start_of_snippet\nGet-Thing -Name ***",
            "keystrokes": "3",
            "num_history_accepted": "0",
            "num_suggestions_part_accepted": "1",
            "line_length": str(len(line)),
            "session_id": metrics.session_id,
            "suggestion_index": "0",
        }

    def test_unmatched_line_reports_minus_one(self, engine, metrics):
        record = submission_record(engine, metrics, "Get-Thing -Name bar -Verbose", [])
        assert record["suggestion_index"] == "-1"
        assert record["line"] == "Get-Thing -Name ***"


def test_logging_sink(caplog):
    with caplog.at_level(logging.INFO, logger="cmdsuggest.telemetry"):
        LoggingSink().track("submission", {"keystrokes": "4"})
    assert caplog.records[0].getMessage() == "Telemetry event"
    assert caplog.records[0].event == "submission"
    assert caplog.records[0].keystrokes == "4"
