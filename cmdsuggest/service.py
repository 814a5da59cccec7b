"""Suggestion service: wires predictor refreshes into the engine."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Sequence

from cmdsuggest.config import Settings
from cmdsuggest.engine import SuggestionEngine
from cmdsuggest.predictor import PredictorClient, PredictorUnavailable
from cmdsuggest.telemetry import LoggingSink, SessionMetrics, TelemetrySink, submission_record

logger = logging.getLogger(__name__)


class SuggestionService:
    """Keystroke-facing facade over the engine.

    ``suggest`` never waits on the network. Corpus refreshes run as
    background tasks and publish into the engine when they finish; a
    failed refresh publishes nothing.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        engine: Optional[SuggestionEngine] = None,
        client: Optional[PredictorClient] = None,
        sink: Optional[TelemetrySink] = None,
        history: Callable[[], Sequence[str]] = tuple,
    ) -> None:
        self.settings = settings
        self.engine = engine or SuggestionEngine(settings)
        self.client = client or PredictorClient(settings)
        self.sink = sink or LoggingSink()
        self.history = history
        self.metrics = SessionMetrics()
        self._commands_task: Optional[asyncio.Task] = None
        self._predictions_task: Optional[asyncio.Task] = None

    # ------------- lifecycle -------------

    async def start(self) -> None:
        self._commands_task = asyncio.create_task(self._refresh_commands())
        logger.info("Suggestion service started", extra={"session_id": self.metrics.session_id})

    async def stop(self) -> None:
        tasks = [t for t in (self._commands_task, self._predictions_task) if t and not t.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await self.client.aclose()
        logger.info("Suggestion service stopped")

    # ------------- line editor hooks -------------

    def suggest(self, line: str) -> Optional[str]:
        self.metrics.record_keystroke()
        return self.engine.query(line)

    def accept_part(self, part: str) -> None:
        self.metrics.record_accepted_part(self.engine.match_predictions(part) is not None)

    def submit(self, line: str) -> None:
        """Record telemetry for a submitted line and refresh predictions.

        The history provider must not include ``line`` yet.
        """
        prior = list(self.history())
        record = submission_record(self.engine, self.metrics, line, prior)
        if record is not None:
            self.sink.track("submission", record)
        self.request_predictions([*prior, line])

    # ------------- refreshes -------------

    def request_predictions(self, history: Optional[Sequence[str]] = None) -> Optional[asyncio.Task]:
        """Start a predictions refresh for ``history`` (default: the history provider).

        Supersedes any refresh still in flight. Does nothing until the
        commands list has arrived.
        """
        self.metrics.reset()
        if not self.engine.commands_ready:
            return None

        snippet = self.engine.build_context_snippet(
            self.history() if history is None else history
        )
        generation = self.engine.begin_refresh()
        if self._predictions_task is not None and not self._predictions_task.done():
            self._predictions_task.cancel()
        logger.debug("Requesting predictions", extra={"generation": generation})
        self._predictions_task = asyncio.create_task(self._refresh_predictions(generation, snippet))
        return self._predictions_task

    async def _refresh_commands(self) -> None:
        try:
            commands = await self.client.fetch_commands()
        except PredictorUnavailable as exc:
            logger.warning("Commands refresh failed: %s", exc)
            return
        self.engine.refresh_commands(commands)
        self.request_predictions()

    async def _refresh_predictions(self, generation: int, snippet: str) -> None:
        try:
            predictions = await self.client.fetch_predictions(snippet)
        except PredictorUnavailable as exc:
            logger.warning("Predictions refresh failed: %s", exc, extra={"generation": generation})
            return
        self.engine.refresh_corpus(predictions, generation=generation)
