"""Suggestion engine: corpus snapshots and the query surface used by the line editor."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional, Sequence

from cmdsuggest.config import Settings
from cmdsuggest.matching.assembler import SuggestionAssembler
from cmdsuggest.matching.history import HistorySnippetBuilder
from cmdsuggest.matching.index import Corpus, build_corpus
from cmdsuggest.matching.matcher import BagMatcher
from cmdsuggest.matching.tokenizer import command_token

logger = logging.getLogger(__name__)


class SuggestionEngine:
    """Holds the published corpora and answers keystroke queries.

    Two corpora are kept: ``predictions`` (history-conditioned candidates
    from the remote predictor) and ``commands`` (general command strings).
    A corpus is ``None`` until its first publish and is skipped while unset.

    Each corpus is an immutable snapshot swapped in with a single attribute
    assignment. Queries read each reference once, so they see either the old
    or the new snapshot, never a mix. Prediction refreshes carry a generation
    number; only the most recently issued generation may publish.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.assembler = SuggestionAssembler()
        self.snippet_builder = HistorySnippetBuilder(
            settings.history_window,
            flag_prefix=settings.flag_prefix,
            noise_flags=settings.noise_flags,
            redaction_marker=settings.redaction_marker,
            sentinel=settings.sentinel,
        )
        self._predictions: Optional[Corpus] = None
        self._commands: Optional[Corpus] = None
        self._known_commands: frozenset[str] = frozenset()
        self._generation = 0
        self._lock = threading.Lock()

    # ------------- snapshots -------------

    @property
    def predictions(self) -> Optional[Corpus]:
        return self._predictions

    @property
    def commands(self) -> Optional[Corpus]:
        return self._commands

    @property
    def known_commands(self) -> frozenset[str]:
        return self._known_commands

    @property
    def commands_ready(self) -> bool:
        return self._commands is not None

    @property
    def generation(self) -> int:
        return self._generation

    def begin_refresh(self) -> int:
        """Issue a new predictions generation and withdraw the current snapshot.

        Returns:
            The generation number the pending refresh must publish with.
        """
        with self._lock:
            self._generation += 1
            self._predictions = None
            return self._generation

    def refresh_corpus(self, raw_lines: Iterable[str], generation: Optional[int] = None) -> bool:
        """Replace the predictions corpus.

        Args:
            raw_lines: Candidate command strings.
            generation: Generation returned by ``begin_refresh``. When omitted,
                a new generation is issued, superseding any refresh in flight.

        Returns:
            True if the snapshot was published, False if it was stale.
        """
        corpus = build_corpus(raw_lines, self.settings.flag_prefix)
        with self._lock:
            if generation is None:
                self._generation += 1
                generation = self._generation
            elif generation != self._generation:
                logger.info(
                    "Discarding stale predictions refresh",
                    extra={"generation": generation, "latest": self._generation},
                )
                return False
            self._predictions = corpus
        logger.info(
            "Published predictions corpus",
            extra={"generation": generation, "templates": len(corpus)},
        )
        return True

    def refresh_commands(self, raw_lines: Sequence[str]) -> None:
        """Replace the commands corpus and the known-command set derived from it."""
        corpus = build_corpus(raw_lines, self.settings.flag_prefix)
        self._commands = corpus
        self.refresh_known_commands(raw_lines)
        logger.info("Published commands corpus", extra={"templates": len(corpus)})

    def refresh_known_commands(self, names: Iterable[str]) -> None:
        known = frozenset(command_token(name).casefold() for name in names)
        self._known_commands = known - {""}

    # ------------- queries -------------

    def query(self, line: str) -> Optional[str]:
        """Return a full replacement for ``line``, or None."""
        corpora = [corpus for corpus in (self._predictions, self._commands) if corpus is not None]
        if not corpora:
            return None
        return self.assembler.assemble(line, corpora)

    def match_predictions(self, line: str) -> Optional[int]:
        """Position of the predictions template that would complete ``line``, if any."""
        corpus = self._predictions
        if corpus is None:
            return None
        result = BagMatcher(corpus).match(line.lstrip())
        return None if result is None else result.template_index

    def is_known_command(self, line: str) -> bool:
        return command_token(line).casefold() in self._known_commands

    def build_context_snippet(self, history: Sequence[str], window_size: Optional[int] = None) -> str:
        return self.snippet_builder.build(history, self._known_commands, window_size)

    def normalize_line(self, line: str) -> str:
        return self.snippet_builder.normalize(line)
