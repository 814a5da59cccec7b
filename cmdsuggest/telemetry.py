"""Per-session counters and the submission telemetry record."""

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence
from uuid import uuid4

from cmdsuggest.engine import SuggestionEngine

logger = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    def track(self, event: str, properties: dict[str, str]) -> None: ...


class LoggingSink:
    """Sink that writes events to the application log."""

    def track(self, event: str, properties: dict[str, str]) -> None:
        logger.info("Telemetry event", extra={"event": event, **properties})


@dataclass(slots=True)
class SessionMetrics:
    session_id: str = field(default_factory=lambda: str(uuid4()))
    keystrokes: int = 0
    suggestion_parts_accepted: int = 0
    history_parts_accepted: int = 0

    def record_keystroke(self) -> None:
        self.keystrokes += 1

    def record_accepted_part(self, from_suggestion: bool) -> None:
        if from_suggestion:
            self.suggestion_parts_accepted += 1
        else:
            self.history_parts_accepted += 1

    def reset(self) -> None:
        self.keystrokes = 0
        self.suggestion_parts_accepted = 0
        self.history_parts_accepted = 0


def submission_record(
    engine: SuggestionEngine,
    metrics: SessionMetrics,
    line: str,
    history: Sequence[str],
) -> Optional[dict[str, str]]:
    """Build the "submission" record for a submitted line.

    Args:
        engine: Engine holding the current snapshots.
        metrics: Counters accumulated since the last predictions request.
        line: The submitted command line.
        history: History as it was before ``line`` was submitted.

    Returns:
        The record, or None when the line's command is not a known command.
    """
    if not engine.is_known_command(line):
        return None

    template_index = engine.match_predictions(line)
    return {
        "line": engine.normalize_line(line),
        "related_history": engine.build_context_snippet(history),
        "keystrokes": str(metrics.keystrokes),
        "num_history_accepted": str(metrics.history_parts_accepted),
        "num_suggestions_part_accepted": str(metrics.suggestion_parts_accepted),
        "line_length": str(len(line)),
        "session_id": metrics.session_id,
        "suggestion_index": str(-1 if template_index is None else template_index),
    }
