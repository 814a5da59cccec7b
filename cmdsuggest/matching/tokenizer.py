"""Command line tokenization."""

import re
from typing import Optional

from cmdsuggest.matching.types import Pair, ParameterBag

FLAG_PREFIX = "-"

# Pipeline, assignment and logical-and boundaries; the capture group keeps them in split output.
SEGMENT_SEPARATOR_RE = re.compile(r"([|=]|&&)")


def tokenize(line: str, flag_prefix: str = FLAG_PREFIX) -> tuple[str, ParameterBag]:
    """Split a raw line into its command name and parameter bag.

    Args:
        line: The raw command line.
        flag_prefix: Prefix that marks a token as a flag.

    Returns:
        ``(command, bag)``. An empty line yields ``("", ParameterBag())``.
    """
    tokens = line.split()
    if not tokens:
        return "", ParameterBag()

    command = tokens[0]
    pairs: list[list[Optional[str]]] = []
    for token in tokens[1:]:
        if token.startswith(flag_prefix):
            pairs.append([token, None])
        elif pairs and pairs[-1][1] is None:
            pairs[-1][1] = token
        else:
            # Follows another non-flag token: multi-word command or positional argument.
            command = f"{command} {token}"

    bag: tuple[Pair, ...] = tuple((flag, value) for flag, value in pairs)
    return command, ParameterBag(bag)


def command_token(line: str) -> str:
    """Return the first whitespace-delimited token of ``line`` (empty if none)."""
    parts = line.split(maxsplit=1)
    return parts[0] if parts else ""


def split_segments(line: str) -> list[str]:
    """Split ``line`` on segment separators, keeping the separators as their own items.

    ``"a | b"`` becomes ``["a ", "|", " b"]``; joining the result restores the line.
    """
    return SEGMENT_SEPARATOR_RE.split(line)
