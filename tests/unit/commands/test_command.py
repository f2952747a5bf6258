"""Tests for the command grammar."""

import pytest

from tabedit.commands.command import Command, CommandType, split_script
from tabedit.commands.help import COMMAND_HELP, command_help, help_text, version_text
from tabedit.exceptions import CommandError


class TestCommandType:
    """Test command names and classification."""

    @pytest.mark.parametrize(
        ("token", "expected"),
        [
            ("edit", CommandType.EDIT_CELL),
            ("edit-cell", CommandType.EDIT_CELL),
            ("MOVE", CommandType.MOVE_ROW),
            ("q", CommandType.EXIT),
            ("quit", CommandType.EXIT),
            ("lp", CommandType.LIMIT_PRESET),
        ],
    )
    def test_aliases(self, token: str, expected: CommandType) -> None:
        assert CommandType.from_str(token) is expected

    def test_unknown_command(self) -> None:
        with pytest.raises(CommandError, match="No such command"):
            CommandType.from_str("frobnicate")

    def test_aliases_are_unique(self) -> None:
        aliases = [alias for command_type in CommandType for alias in command_type.aliases]
        assert len(aliases) == len(set(aliases))

    def test_history_tracking(self) -> None:
        assert CommandType.CREATE.is_history_tracked
        assert CommandType.SCHEMA.is_history_tracked
        assert not CommandType.PRINT.is_history_tracked
        assert not CommandType.UNDO.is_history_tracked
        assert not CommandType.IMPORT.is_history_tracked


class TestCommandParse:
    """Test tokenizing command lines."""

    def test_shell_quoting(self) -> None:
        command = Command.parse("edit 0,name 'hello world'")
        assert command.command_type is CommandType.EDIT_CELL
        assert command.arguments == ["0,name", "hello world"]

    def test_empty_line(self) -> None:
        with pytest.raises(CommandError):
            Command.parse("   ")

    def test_unbalanced_quotes(self) -> None:
        with pytest.raises(CommandError):
            Command.parse('add-row 0 "a,b')


class TestSplitScript:
    """Test splitting scripts into commands."""

    def test_split_on_newlines_and_semicolons(self) -> None:
        script = 'create a b; add-row 0 "x,y"\n# comment\n\nprint\n'
        assert split_script(script) == [
            (1, "create a b"),
            (1, 'add-row 0 "x,y"'),
            (4, "print"),
        ]

    @pytest.mark.parametrize(
        ("script", "expected"),
        [
            ('edit 0,0 "a;b"; print', [(1, 'edit 0,0 "a;b"'), (1, "print")]),
            ("edit 0,0 'x;y'", [(1, "edit 0,0 'x;y'")]),
            ('edit 0,0 "say \\"hi;\\""; undo', [(1, 'edit 0,0 "say \\"hi;\\""'), (1, "undo")]),
        ],
    )
    def test_quoted_semicolons_stay_in_argument(
        self, script: str, expected: list[tuple[int, str]]
    ) -> None:
        assert split_script(script) == expected

    def test_quoted_argument_parses_after_split(self) -> None:
        ((_, text),) = split_script('edit 0,0 "a;b"')
        assert Command.parse(text).arguments[-1] == "a;b"


class TestHelp:
    """Test help texts."""

    def test_every_command_has_help(self) -> None:
        assert set(COMMAND_HELP) == set(CommandType)

    def test_help_text_lists_commands(self) -> None:
        text = help_text()
        assert text.startswith(version_text())
        assert "limit-preset <column> <preset>" in text

    def test_command_help(self) -> None:
        assert command_help(CommandType.MOVE_ROW).startswith("move-row <src> <dst>")
