"""Tests for snapshot history."""

import json
from pathlib import Path

import pytest

from tabedit.models.history_manager import HistoryManager
from tabedit.models.table import Table


def table_with(value: str) -> Table:
    return Table.from_records(["v"], [[value]])


def cell(table: Table | None) -> str:
    assert table is not None
    return str(table.get_cell(0, 0))


class TestHistoryManager:
    """Test undo and redo over snapshots."""

    def test_empty_history(self) -> None:
        history = HistoryManager("s1")
        assert history.is_empty()
        assert not history.can_undo()
        assert not history.can_redo()
        assert history.undo(table_with("x")) is None
        assert history.redo() is None

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            HistoryManager("s1", capacity=0)

    def test_undo_then_redo_restores_live_state(self) -> None:
        history = HistoryManager("s1")
        history.take_snapshot(table_with("a"), "edit")

        restored = history.undo(table_with("b"))
        assert cell(restored) == "a"
        assert history.can_redo()

        assert cell(history.redo()) == "b"
        assert not history.can_redo()

    def test_multiple_undo_redo(self) -> None:
        history = HistoryManager("s1")
        history.take_snapshot(table_with("a"), "edit")
        history.take_snapshot(table_with("b"), "edit")

        assert cell(history.undo(table_with("c"))) == "b"
        assert cell(history.undo(table_with("b"))) == "a"
        assert history.undo(table_with("a")) is None
        assert cell(history.redo()) == "b"
        assert cell(history.redo()) == "c"

    def test_branch_discards_redo(self) -> None:
        history = HistoryManager("s1")
        history.take_snapshot(table_with("a"), "edit")
        history.take_snapshot(table_with("b"), "edit")
        history.undo(table_with("c"))

        history.take_snapshot(table_with("b"), "move-row")
        assert len(history.history) == 2
        assert not history.can_redo()
        assert history.history[-1].operation_type == "move-row"

    def test_capacity_evicts_oldest(self) -> None:
        history = HistoryManager("s1", capacity=3)
        for value in "abcde":
            history.take_snapshot(table_with(value), "edit")

        assert len(history.history) == 3
        assert [cell(record.snapshot) for record in history.history] == ["c", "d", "e"]
        assert history.current_index == 3

    def test_snapshot_is_a_copy(self) -> None:
        history = HistoryManager("s1")
        table = table_with("a")
        history.take_snapshot(table, "edit")
        table.set_cell(0, 0, "changed")
        assert cell(history.undo(table)) == "a"

    def test_get_history_marks_undone(self) -> None:
        history = HistoryManager("s1")
        history.take_snapshot(table_with("a"), "create")
        history.take_snapshot(table_with("b"), "edit", {"arguments": ["0,0", "x"]})
        history.undo(table_with("c"))

        entries = history.get_history()
        assert [entry["is_undone"] for entry in entries] == [False, True]
        assert entries[0]["is_current"]
        assert entries[1]["details"] == {"arguments": ["0,0", "x"]}
        assert "snapshot" not in entries[0]
        assert len(history.get_history(limit=1)) == 1

    def test_clear_history(self) -> None:
        history = HistoryManager("s1")
        history.take_snapshot(table_with("a"), "edit")
        assert history.clear_history() == 1
        assert history.is_empty()
        assert history.current_index == 0

    def test_export_history(self, tmp_path: Path) -> None:
        history = HistoryManager("s1")
        history.take_snapshot(table_with("a"), "edit")
        target = tmp_path / "history.json"

        assert history.export_history(str(target)) == 1
        data = json.loads(target.read_text())
        assert data["session_id"] == "s1"
        assert data["operations"][0]["operation_type"] == "edit"

    def test_statistics(self) -> None:
        history = HistoryManager("s1", capacity=4)
        history.take_snapshot(table_with("a"), "edit")
        history.take_snapshot(table_with("b"), "edit")
        stats = history.get_statistics()
        assert stats["operation_types"] == {"edit": 2}
        assert stats["capacity"] == 4
