"""Constrained bag matching against a corpus snapshot."""

import logging
from typing import Optional

from cmdsuggest.matching.index import Corpus
from cmdsuggest.matching.tokenizer import tokenize
from cmdsuggest.matching.types import MatchResult, ParameterBag, Template

logger = logging.getLogger(__name__)


class BagMatcher:
    """Greedy first-fit matcher.

    Picks the first template whose command extends the typed command, then
    the first of its bags in which every typed flag claims a distinct
    position by case-insensitive prefix. Typed values replace recorded
    ones; unclaimed positions are appended in the bag's own order.
    """

    def __init__(self, corpus: Corpus) -> None:
        self.corpus = corpus

    def match(self, line: str) -> Optional[MatchResult]:
        """Match a partially typed line.

        Args:
            line: The input text, without leading whitespace or earlier segments.

        Returns:
            MatchResult carrying the completed line and the template's position,
            or None when nothing compatible extends the input.
        """
        command, input_bag = tokenize(line, self.corpus.flag_prefix)
        if not command:
            return None

        finished = bool(input_bag) or line[-1:].isspace()
        position = self.select_template(command, finished)
        if position is None:
            return None

        template = self.corpus[position]
        for bag in template.bags:
            parts = self.fit(template, bag, input_bag)
            if parts is not None:
                break
        else:
            return None

        suggestion = self.keep_typed(line, " ".join(parts))
        if len(suggestion) <= len(line):
            return None

        logger.debug(
            "Bag match found",
            extra={"command": template.command, "template_index": position},
        )
        return MatchResult(suggestion=suggestion, template_index=position)

    def select_template(self, command: str, finished: bool) -> Optional[int]:
        """Position of the first template whose command starts with ``command``."""
        needle = (command + " " if finished else command).casefold()
        for position, template in enumerate(self.corpus):
            if (template.command + " ").casefold().startswith(needle):
                return position
        return None

    @staticmethod
    def keep_typed(line: str, completed: str) -> str:
        """Rewrite ``completed`` so it starts with ``line`` exactly as typed.

        Applies when the completed words repeat the typed words (ignoring case),
        the last typed word possibly being a prefix. Otherwise ``completed``
        is returned unchanged.
        """
        typed = line.split()
        words = completed.split()
        if len(words) < len(typed):
            return completed
        *complete, last = typed
        if any(w.casefold() != t.casefold() for w, t in zip(words, complete)):
            return completed

        head = words[len(typed) - 1]
        rest = words[len(typed):]
        if line[-1:].isspace():
            if head.casefold() != last.casefold():
                return completed
            return line + " ".join(rest)
        if head[: len(last)].casefold() != last.casefold():
            return completed
        return line + head[len(last):] + "".join(" " + w for w in rest)

    @staticmethod
    def fit(template: Template, bag: ParameterBag, input_bag: ParameterBag) -> Optional[list[str]]:
        """Try to satisfy every input pair from a distinct position of ``bag``.

        Returns the words of the completed line, or None if some input pair
        has no unclaimed flag it prefixes.
        """
        claimed_flags: set[int] = set()
        claimed_values: set[int] = set()
        parts = [template.command]

        for flag, value in input_bag:
            needle = flag.casefold()
            match = next(
                (
                    k
                    for k, (candidate, _) in enumerate(bag)
                    if k not in claimed_flags and candidate.casefold().startswith(needle)
                ),
                None,
            )
            if match is None:
                return None

            candidate_flag, candidate_value = bag[match]
            claimed_flags.add(match)
            claimed_values.add(match)
            parts.append(candidate_flag)
            chosen = value if value is not None else candidate_value
            if chosen is not None:
                parts.append(chosen)

        for k, (candidate_flag, candidate_value) in enumerate(bag):
            if k not in claimed_flags:
                parts.append(candidate_flag)
            if k not in claimed_values and candidate_value is not None:
                parts.append(candidate_value)

        return parts
