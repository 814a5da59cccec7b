"""Tests for HistorySnippetBuilder."""

import pytest

from cmdsuggest.matching.history import SENTINEL, HistorySnippetBuilder


@pytest.fixture
def builder():
    return HistorySnippetBuilder()


KNOWN = frozenset({"get-thing", "set-thing"})


class TestNormalize:
    def test_redacts_and_sorts(self, builder):
        assert builder.normalize("Get-Thing -Name foo -Force") == "Get-Thing -Force -Name ***"

    def test_drops_noise_flags_and_their_values(self, builder):
        line = "Get-Thing -Name foo -Verbose -ErrorAction Stop"
        assert builder.normalize(line) == "Get-Thing -Name ***"

    def test_noise_flags_ignore_case(self, builder):
        assert builder.normalize("Get-Thing -verbose -Id 3") == "Get-Thing -Id ***"

    def test_drops_positional_words(self, builder):
        assert builder.normalize("Get-Thing extra -Name foo") == "Get-Thing -Name ***"

    def test_command_only(self, builder):
        assert builder.normalize("Get-Thing") == "Get-Thing"

    def test_empty(self, builder):
        assert builder.normalize("") == ""

    def test_idempotent(self, builder):
        for line in (
            "Set-Thing -Mode fast -Id 1 -Force",
            "Get-Thing -b 1 -A 2 -a",
            "Get-Thing -Name foo -Debug",
        ):
            once = builder.normalize(line)
            assert builder.normalize(once) == once

    def test_custom_marker(self):
        builder = HistorySnippetBuilder(redaction_marker="<v>", noise_flags=())
        assert builder.normalize("Get-Thing -Verbose -Id 1") == "Get-Thing -Id <v> -Verbose"


class TestBuild:
    def test_pads_short_history(self, builder):
        assert builder.build_lines([], KNOWN) == [SENTINEL, SENTINEL]
        assert builder.build_lines(["Get-Thing -Name foo"], KNOWN) == [
            SENTINEL,
            "Get-Thing -Name ***",
        ]

    def test_unrelated_last_entry_resets_window(self, builder):
        history = ["Get-Thing -Name foo", "Get-Other -X 1"]
        assert builder.build_lines(history, frozenset({"get-thing"})) == [SENTINEL, SENTINEL]

    def test_unrelated_entry_resets_only_earlier_slots(self, builder):
        history = ["Get-Thing -A 1", "Other-Cmd", "Set-Thing -B 2"]
        assert builder.build_lines(history, KNOWN, window=3) == [
            SENTINEL,
            SENTINEL,
            "Set-Thing -B ***",
        ]

    def test_uses_most_recent_entries(self, builder):
        history = ["Other-Cmd", "Get-Thing -A 1", "Get-Thing -B 2", "Set-Thing -C 3"]
        assert builder.build_lines(history, KNOWN) == ["Get-Thing -B ***", "Set-Thing -C ***"]

    def test_known_commands_ignore_case(self, builder):
        assert builder.build_lines(["GET-THING -X 1"], KNOWN, window=1) == ["GET-THING -X ***"]

    def test_build_joins_oldest_first(self, builder):
        history = ["Get-Thing -A 1", "Set-Thing -B 2"]
        assert builder.build(history, KNOWN) == "Get-Thing -A ***\nSet-Thing -B ***"

    def test_window_from_constructor(self):
        builder = HistorySnippetBuilder(3)
        assert builder.build(["Get-Thing"], KNOWN) == f"{SENTINEL}\n{SENTINEL}\nGet-Thing"

    @pytest.mark.parametrize("window", [0, -1])
    def test_rejects_empty_window(self, builder, window):
        with pytest.raises(ValueError, match="window"):
            builder.build(["Get-Thing -A 1"], KNOWN, window)

    def test_constructor_rejects_empty_window(self):
        with pytest.raises(ValueError, match="window"):
            HistorySnippetBuilder(0)
