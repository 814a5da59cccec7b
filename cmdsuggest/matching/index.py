"""Template index: command name -> observed parameter bags."""

from dataclasses import dataclass
from typing import Iterable, Iterator

from cmdsuggest.matching.tokenizer import FLAG_PREFIX, tokenize
from cmdsuggest.matching.types import ParameterBag, Template


@dataclass(frozen=True, slots=True)
class Corpus:
    """Immutable snapshot of templates in first-seen order.

    A refresh builds a new ``Corpus`` and swaps the reference; a snapshot
    is never modified after construction.
    """

    templates: tuple[Template, ...] = ()
    flag_prefix: str = FLAG_PREFIX

    def __len__(self) -> int:
        return len(self.templates)

    def __iter__(self) -> Iterator[Template]:
        return iter(self.templates)

    def __getitem__(self, position: int) -> Template:
        return self.templates[position]


def build_corpus(lines: Iterable[str], flag_prefix: str = FLAG_PREFIX) -> Corpus:
    """Build a corpus from raw command strings.

    Lines sharing a command name (case-insensitive) append their bag to the
    first template seen for that name; bags keep arrival order and are not
    deduplicated. Blank lines are skipped.
    """
    commands: list[str] = []
    bags: list[list[ParameterBag]] = []
    positions: dict[str, int] = {}

    for line in lines:
        command, bag = tokenize(line, flag_prefix)
        if not command:
            continue
        key = command.casefold()
        position = positions.get(key)
        if position is None:
            positions[key] = len(commands)
            commands.append(command)
            bags.append([bag])
        else:
            bags[position].append(bag)

    templates = tuple(
        Template(command=command, bags=tuple(command_bags))
        for command, command_bags in zip(commands, bags)
    )
    return Corpus(templates=templates, flag_prefix=flag_prefix)
