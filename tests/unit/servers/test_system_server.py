"""Tests for the system server tools."""

import os
from unittest.mock import patch

from tabedit.core.session import get_session_manager
from tabedit.core.settings import reset_settings
from tabedit.servers.system_server import (
    count_total_history_operations,
    get_memory_usage,
    get_server_info,
    health_check,
)
from tabedit.servers.table_server import set_cell
from tests.test_mock_context import create_mock_context


class TestHealthCheck:
    """Test the health check tool."""

    async def test_healthy(self, test_session: str) -> None:
        ctx = create_mock_context(test_session)
        await set_cell(ctx, 0, "name", "Alicia")

        result = await health_check(ctx)

        assert result.status == "healthy"
        assert result.active_sessions == 1
        assert result.history_operations_total == 1
        assert result.memory_usage_mb >= 0

    async def test_degraded_near_capacity(self) -> None:
        with patch.dict(os.environ, {"TABEDIT_MAX_SESSIONS": "2"}):
            reset_settings()
            manager = get_session_manager()
            manager.get_or_create_session("a")
            manager.get_or_create_session("b")
            ctx = create_mock_context("a")

            result = await health_check(ctx)

        assert result.status == "degraded"
        assert any(level == "warning" for level, _ in ctx.messages)

    def test_memory_usage(self) -> None:
        assert get_memory_usage() > 0

    def test_count_history_without_sessions(self) -> None:
        assert count_total_history_operations(get_session_manager()) == 0


class TestServerInfo:
    """Test the server info tool."""

    async def test_server_info(self) -> None:
        result = await get_server_info(create_mock_context())

        assert result.name == "tabedit"
        assert result.value_types == ["number", "text"]
        assert {"email", "date", "number"} <= set(result.presets)
        assert "limit-preset" in result.capabilities["shell_commands"]
        assert "set_limiter" in result.capabilities["limiters"]
