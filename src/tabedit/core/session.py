"""Session management for tabedit.

A session (a "page" in the shell) owns one table, its undo history and the file the
table came from. The session manager keeps sessions by id and remembers which one
is current.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar
from uuid import uuid4

from ..exceptions import PageOperationError, SessionNotFoundError
from ..models.data_models import SessionInfo
from ..models.history_manager import DEFAULT_HISTORY_CAPACITY, HistoryManager
from ..models.table import Table
from .settings import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionLifecycle:
    """Manages session TTL and expiration logic."""

    def __init__(self, session_id: str, ttl_seconds: int | None = None):
        """Initialize session lifecycle manager. A TTL of None never expires."""
        self.session_id = session_id
        self.ttl = timedelta(seconds=ttl_seconds) if ttl_seconds is not None else None
        self.created_at = datetime.now(UTC)
        self.last_accessed = datetime.now(UTC)

    def update_access_time(self) -> None:
        """Update the last accessed time."""
        self.last_accessed = datetime.now(UTC)

    def is_expired(self) -> bool:
        """Check if session has expired."""
        if self.ttl is None:
            return False
        return datetime.now(UTC) - self.last_accessed > self.ttl

    def get_remaining_ttl(self) -> timedelta | None:
        """Get remaining time until expiration."""
        if self.ttl is None:
            return None
        elapsed = datetime.now(UTC) - self.last_accessed
        return max(timedelta(0), self.ttl - elapsed)


class EditorSession:
    """A table with its history and source file."""

    def __init__(
        self,
        session_id: str | None = None,
        table: Table | None = None,
        source_file: str | None = None,
        history_capacity: int = DEFAULT_HISTORY_CAPACITY,
        ttl_seconds: int | None = None,
    ):
        """Initialize an editing session."""
        self.session_id = session_id or str(uuid4())
        self.table = table if table is not None else Table()
        self.source_file = source_file
        self.history = HistoryManager(self.session_id, capacity=history_capacity)
        self.lifecycle = SessionLifecycle(self.session_id, ttl_seconds)

    def update_access_time(self) -> None:
        self.lifecycle.update_access_time()

    def is_expired(self) -> bool:
        return self.lifecycle.is_expired()

    def has_data(self) -> bool:
        """Check if the table has at least one column."""
        return not self.table.is_empty()

    def load_table(self, table: Table, source_file: str | None = None) -> None:
        """Replace the table wholesale. History starts over."""
        self.table = table
        self.source_file = source_file
        self.history.clear_history()
        self.update_access_time()
        logger.info(
            "Loaded %sx%s table into session %s",
            table.row_count,
            table.column_count,
            self.session_id,
        )

    @contextmanager
    def track(self, operation_type: str, details: dict[str, Any] | None = None) -> Iterator[Table]:
        """Record a snapshot of the table around a mutating operation.

        The snapshot is kept when the operation succeeds, or when it fails after
        having changed the table.
        """
        before = self.table.clone()
        try:
            yield self.table
        except Exception:
            if self.table != before:
                self.history.take_snapshot(before, operation_type, details)
            raise
        else:
            self.history.take_snapshot(before, operation_type, details)
        finally:
            self.update_access_time()

    def execute(
        self,
        operation_type: str,
        operation: Callable[[Table], T],
        details: dict[str, Any] | None = None,
    ) -> T:
        """Run a mutating operation on the table with history tracking."""
        with self.track(operation_type, details) as table:
            return operation(table)

    def undo(self) -> str | None:
        """Restore the previous snapshot. Returns the undone operation type."""
        restored = self.history.undo(self.table)
        if restored is None:
            return None
        self.table = restored
        self.update_access_time()
        return self.history.operation_type_at(self.history.current_index)

    def redo(self) -> str | None:
        """Restore the next snapshot. Returns the redone operation type."""
        index = self.history.current_index
        restored = self.history.redo()
        if restored is None:
            return None
        self.table = restored
        self.update_access_time()
        return self.history.operation_type_at(index)

    def get_info(self) -> SessionInfo:
        """Get session information."""
        return SessionInfo(
            session_id=self.session_id,
            created_at=self.lifecycle.created_at,
            last_accessed=self.lifecycle.last_accessed,
            row_count=self.table.row_count,
            column_count=self.table.column_count,
            columns=self.table.column_names(),
            operations_count=len(self.history.history),
            can_undo=self.history.can_undo(),
            can_redo=self.history.can_redo(),
            file_path=self.source_file,
        )


class SessionManager:
    """Manages multiple sessions with a current-session cursor."""

    def __init__(
        self,
        max_sessions: int = 100,
        ttl_seconds: int | None = None,
        history_capacity: int = DEFAULT_HISTORY_CAPACITY,
    ):
        """Initialize session manager with limits."""
        self.sessions: dict[str, EditorSession] = {}
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self.history_capacity = history_capacity
        self.cursor: str | None = None

    def get_session(self, session_id: str) -> EditorSession | None:
        """Get a session by ID without creating it if it doesn't exist."""
        session = self.sessions.get(session_id)
        if session and not session.is_expired():
            session.update_access_time()
            return session
        return None

    def get_or_create_session(self, session_id: str) -> EditorSession:
        """Get a session by ID, creating it if it doesn't exist."""
        session = self.get_session(session_id)
        if session is None:
            session = self.add_session(session_id, replace=True)
        return session

    def add_session(
        self,
        session_id: str,
        table: Table | None = None,
        source_file: str | None = None,
        replace: bool = False,
    ) -> EditorSession:
        """Add a session and make it current."""
        if session_id in self.sessions and not replace:
            raise PageOperationError(f"Page '{session_id}' already exists")

        self._cleanup_expired()
        if session_id not in self.sessions and len(self.sessions) >= self.max_sessions:
            oldest = min(self.sessions.values(), key=lambda s: s.lifecycle.last_accessed)
            self.remove_session(oldest.session_id)

        session = EditorSession(
            session_id=session_id,
            table=table,
            source_file=source_file,
            history_capacity=self.history_capacity,
            ttl_seconds=self.ttl_seconds,
        )
        self.sessions[session_id] = session
        self.cursor = session_id
        logger.info("Created new session: %s", session_id)
        return session

    def remove_session(self, session_id: str) -> bool:
        """Remove a session."""
        if session_id not in self.sessions:
            return False
        del self.sessions[session_id]
        if self.cursor == session_id:
            self.cursor = next(iter(self.sessions), None)
        logger.info("Removed session: %s", session_id)
        return True

    def clear(self) -> None:
        """Drop every session."""
        self.sessions.clear()
        self.cursor = None

    def current_session(self) -> EditorSession:
        """Return the current session."""
        if self.cursor is None:
            raise PageOperationError("No page is selected")
        session = self.get_session(self.cursor)
        if session is None:
            raise SessionNotFoundError(self.cursor)
        return session

    def list_sessions(self) -> list[SessionInfo]:
        """List all active sessions."""
        self._cleanup_expired()
        return [session.get_info() for session in self.sessions.values()]

    def _cleanup_expired(self) -> None:
        expired = [sid for sid, session in self.sessions.items() if session.is_expired()]
        for session_id in expired:
            self.remove_session(session_id)
        if expired:
            logger.info("Removed %s expired sessions", len(expired))


_session_manager: SessionManager | None = None


def get_session_manager() -> SessionManager:
    """Return the global session manager, built from the settings on first use."""
    global _session_manager  # noqa: PLW0603
    if _session_manager is None:
        settings = get_settings()
        _session_manager = SessionManager(
            max_sessions=settings.max_sessions,
            ttl_seconds=settings.session_timeout,
            history_capacity=settings.history_capacity,
        )
    return _session_manager


def reset_session_manager() -> None:
    """Drop the global session manager."""
    global _session_manager  # noqa: PLW0603
    _session_manager = None
