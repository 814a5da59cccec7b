"""Turn a bag match into a full replacement line."""

from typing import Iterable, Optional

from cmdsuggest.matching.index import Corpus
from cmdsuggest.matching.matcher import BagMatcher
from cmdsuggest.matching.tokenizer import split_segments


class SuggestionAssembler:
    """Complete the trailing segment of a line from one or more corpora.

    Corpora are tried in order; the first match wins. Earlier segments,
    separators and the trailing segment's leading whitespace are kept as typed.
    """

    def assemble(self, line: str, corpora: Iterable[Corpus]) -> Optional[str]:
        segments = split_segments(line)
        last = segments[-1]
        text = last.lstrip()
        leading = last[: len(last) - len(text)]

        for corpus in corpora:
            result = BagMatcher(corpus).match(text)
            if result is not None:
                segments[-1] = leading + result.suggestion
                return "".join(segments)
        return None
