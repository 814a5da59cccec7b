"""Shared matching models."""

from dataclasses import dataclass, field
from typing import Iterator, Optional

Pair = tuple[str, Optional[str]]


@dataclass(frozen=True, slots=True)
class ParameterBag:
    """Flag/value pairs of one invocation, in the order the flags were typed.

    A value of ``None`` marks a switch (a flag with nothing after it).
    Flags are not deduplicated.
    """

    pairs: tuple[Pair, ...] = ()

    def __len__(self) -> int:
        return len(self.pairs)

    def __iter__(self) -> Iterator[Pair]:
        return iter(self.pairs)

    def __getitem__(self, position: int) -> Pair:
        return self.pairs[position]


@dataclass(frozen=True, slots=True)
class Template:
    """Every observed parameter bag for one command name."""

    command: str
    bags: tuple[ParameterBag, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class MatchResult:
    suggestion: str
    template_index: int
