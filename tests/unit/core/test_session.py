"""Tests for editing sessions and the session manager."""

from datetime import timedelta

import pytest

from tabedit.core.session import (
    EditorSession,
    SessionLifecycle,
    SessionManager,
    get_session_manager,
    reset_session_manager,
)
from tabedit.exceptions import ConstraintViolationError, PageOperationError, SessionNotFoundError
from tabedit.models.limiter import ValueLimiter
from tabedit.models.table import Table


class TestEditorSession:
    """Test history tracking around table operations."""

    def test_execute_records_snapshot(self, people_table: Table) -> None:
        session = EditorSession("s1", people_table)
        session.execute("delete-row", lambda t: t.delete_row(0))

        assert session.table.row_count == 2
        assert session.history.can_undo()
        assert session.undo() == "delete-row"
        assert session.table.row_count == 3
        assert session.redo() == "delete-row"
        assert session.table.row_count == 2

    def test_failed_operation_without_change_is_not_recorded(
        self, people_table: Table
    ) -> None:
        session = EditorSession("s1", people_table)
        limiter = ValueLimiter.from_line(["number", "", "", ""])

        with pytest.raises(ConstraintViolationError):
            session.execute("limit", lambda t: t.set_limiter(0, limiter))

        assert session.history.is_empty()

    def test_failed_operation_with_change_is_recorded(self, people_table: Table) -> None:
        session = EditorSession("s1", people_table)

        def half_done(table: Table) -> None:
            table.delete_row(0)
            raise ConstraintViolationError("name", "x")

        with pytest.raises(ConstraintViolationError):
            session.execute("edit", half_done)

        assert session.undo() == "edit"
        assert session.table.row_count == 3

    def test_load_table_clears_history(self, people_table: Table) -> None:
        session = EditorSession("s1", people_table)
        session.execute("delete-row", lambda t: t.delete_row(0))
        session.load_table(Table(), "other.csv")

        assert session.history.is_empty()
        assert session.source_file == "other.csv"
        assert not session.has_data()

    def test_undo_without_history(self) -> None:
        session = EditorSession()
        assert session.undo() is None
        assert session.redo() is None

    def test_get_info(self, people_table: Table) -> None:
        session = EditorSession("s1", people_table, source_file="people.csv")
        info = session.get_info()
        assert info.row_count == 3
        assert info.columns == ["name", "age", "department"]
        assert info.file_path == "people.csv"
        assert not info.can_undo


class TestSessionLifecycle:
    """Test TTL handling."""

    def test_no_ttl_never_expires(self) -> None:
        lifecycle = SessionLifecycle("s1")
        assert not lifecycle.is_expired()
        assert lifecycle.get_remaining_ttl() is None

    def test_zero_ttl_expires(self) -> None:
        lifecycle = SessionLifecycle("s1", ttl_seconds=0)
        lifecycle.last_accessed = lifecycle.last_accessed.replace(year=2000)
        assert lifecycle.is_expired()


class TestSessionManager:
    """Test page management."""

    def test_add_session_sets_cursor(self) -> None:
        manager = SessionManager()
        manager.add_session("a")
        manager.add_session("b")
        assert manager.current_session().session_id == "b"

    def test_duplicate_session(self) -> None:
        manager = SessionManager()
        manager.add_session("a")
        with pytest.raises(PageOperationError):
            manager.add_session("a")
        manager.add_session("a", replace=True)
        assert len(manager.sessions) == 1

    def test_remove_session_moves_cursor(self) -> None:
        manager = SessionManager()
        manager.add_session("a")
        manager.add_session("b")
        assert manager.remove_session("b")
        assert manager.cursor == "a"
        assert not manager.remove_session("missing")

    def test_capacity_evicts_least_recently_used(self) -> None:
        manager = SessionManager(max_sessions=2)
        manager.add_session("a")
        manager.add_session("b")
        manager.sessions["b"].lifecycle.last_accessed -= timedelta(seconds=10)
        manager.add_session("c")
        assert set(manager.sessions) == {"a", "c"}

    def test_no_current_session(self) -> None:
        manager = SessionManager()
        with pytest.raises(PageOperationError):
            manager.current_session()
        manager.add_session("a")
        manager.cursor = "gone"
        with pytest.raises(SessionNotFoundError):
            manager.current_session()

    def test_sessions_use_history_capacity(self) -> None:
        manager = SessionManager(history_capacity=2)
        session = manager.get_or_create_session("a")
        assert session.history.capacity == 2

    def test_global_manager(self) -> None:
        manager = get_session_manager()
        assert get_session_manager() is manager
        reset_session_manager()
        assert get_session_manager() is not manager
