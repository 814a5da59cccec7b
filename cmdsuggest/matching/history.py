"""History snippet normalization and redaction."""

from typing import AbstractSet, Iterable, Optional, Sequence

from cmdsuggest.matching.tokenizer import FLAG_PREFIX, command_token

SENTINEL = "start_of_snippet"
REDACTION_MARKER = "***"
NOISE_FLAGS = (
    "-Verbose",
    "-ErrorAction",
    "-Debug",
    "-ErrorVariable",
    "-OutVariable",
    "-OutBuffer",
)


class HistorySnippetBuilder:
    """Build a fixed-length, redacted context from recent history."""

    def __init__(
        self,
        window: int = 2,
        *,
        flag_prefix: str = FLAG_PREFIX,
        noise_flags: Iterable[str] = NOISE_FLAGS,
        redaction_marker: str = REDACTION_MARKER,
        sentinel: str = SENTINEL,
    ) -> None:
        if window < 1:
            raise ValueError(f"window must be at least 1, got {window}")
        self.window = window
        self.flag_prefix = flag_prefix
        self.noise_flags = frozenset(flag.casefold() for flag in noise_flags)
        self.redaction_marker = redaction_marker
        self.sentinel = sentinel

    def normalize(self, line: str) -> str:
        """Rewrite a command line into its redacted canonical form.

        Keeps the command name, drops noise flags (with their values) and
        positional words, replaces every remaining value with the redaction
        marker, and sorts the flags by name.

        Args:
            line: A raw history entry.

        Returns:
            The canonical line, e.g. ``"Get-Thing -Name *** -Force"`` becomes
            ``"Get-Thing -Force -Name ***"``.
        """
        tokens = line.split()
        if not tokens:
            return ""

        args: list[list[str]] = []
        expecting_value = False
        for token in tokens[1:]:
            if token.startswith(self.flag_prefix):
                expecting_value = token.casefold() not in self.noise_flags
                if expecting_value:
                    args.append([token])
            elif expecting_value:
                args[-1].append(self.redaction_marker)
                expecting_value = False

        args.sort(key=lambda pair: (pair[0].casefold(), pair[0]))
        return " ".join([tokens[0], *(" ".join(pair) for pair in args)])

    def build_lines(
        self,
        history: Sequence[str],
        known_commands: AbstractSet[str],
        window: Optional[int] = None,
    ) -> list[str]:
        """Normalize the last ``window`` history entries, oldest first.

        ``known_commands`` must hold casefolded names. Missing entries become
        the sentinel; an entry whose command is unknown turns itself and every
        earlier slot into the sentinel.

        Raises:
            ValueError: If the window is smaller than 1.
        """
        size = self.window if window is None else window
        if size < 1:
            raise ValueError(f"window must be at least 1, got {size}")
        lines: list[str] = []
        for i in range(len(history) - size, len(history)):
            if i < 0:
                lines.append(self.sentinel)
                continue

            entry = history[i]
            if command_token(entry).casefold() not in known_commands:
                lines = [self.sentinel] * (len(lines) + 1)
                continue

            lines.append(self.normalize(entry))
        return lines

    def build(
        self,
        history: Sequence[str],
        known_commands: AbstractSet[str],
        window: Optional[int] = None,
    ) -> str:
        return "\n".join(self.build_lines(history, known_commands, window))
