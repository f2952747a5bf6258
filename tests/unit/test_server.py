"""Tests for the composed MCP server."""

from tabedit.server import INSTRUCTIONS, mcp


class TestServerConfiguration:
    """Test server setup."""

    async def test_mounted_tools(self) -> None:
        tools = await mcp.get_tools()
        for name in ("health_check", "load_table_from_content", "set_limiter", "undo"):
            assert name in tools

    def test_instructions(self) -> None:
        assert mcp.instructions == INSTRUCTIONS
        assert "undo" in INSTRUCTIONS
