"""Tests for the table editing server tools."""

import pytest
from fastmcp.exceptions import ToolError

from tabedit.core.session import get_session_manager
from tabedit.models.value import ValueType
from tabedit.servers.table_server import (
    apply_preset,
    delete_column,
    delete_row,
    get_cell,
    get_columns,
    get_row,
    insert_column,
    insert_row,
    move_column,
    move_row,
    rename_column,
    set_cell,
    set_column,
    set_limiter,
    update_row,
)
from tests.test_mock_context import create_mock_context


def table_text(session_id: str) -> str:
    session = get_session_manager().get_session(session_id)
    assert session is not None
    return session.table.to_string()


class TestCells:
    """Test cell access."""

    async def test_get_cell_by_name_and_index(self, test_session: str) -> None:
        ctx = create_mock_context(test_session)

        by_name = await get_cell(ctx, 0, "name")
        by_index = await get_cell(ctx, 1, 1)

        assert by_name.value == "Alice"
        assert by_name.data_type == "text"
        assert by_index.column == "age"
        assert by_index.value == "25"

    async def test_get_cell_out_of_range(self, test_session: str) -> None:
        with pytest.raises(ToolError, match="out of range"):
            await get_cell(create_mock_context(test_session), 9, "name")

    async def test_get_cell_unknown_column(self, test_session: str) -> None:
        with pytest.raises(ToolError):
            await get_cell(create_mock_context(test_session), 0, "salary")

    async def test_set_cell(self, test_session: str) -> None:
        result = await set_cell(create_mock_context(test_session), 0, "name", "Alicia")
        assert result.old_value == "Alice"
        assert result.new_value == "Alicia"

    async def test_set_cell_respects_column_type(self, test_session: str) -> None:
        ctx = create_mock_context(test_session)
        await set_limiter(ctx, "age", ValueType.NUMBER)

        result = await set_cell(ctx, 0, "age", 31)
        assert result.new_value == 31

        with pytest.raises(ToolError):
            await set_cell(ctx, 0, "age", "thirty")
        with pytest.raises(ToolError):
            await set_cell(ctx, 0, "age", "thirty", force=True)

    async def test_set_cell_is_undoable(self, test_session: str) -> None:
        await set_cell(create_mock_context(test_session), 0, "name", "Alicia")
        session = get_session_manager().get_session(test_session)
        assert session is not None
        assert session.undo() == "edit"
        assert session.table.get_cell(0, 0).data == "Alice"


class TestRows:
    """Test row tools."""

    async def test_get_row(self, test_session: str) -> None:
        result = await get_row(create_mock_context(test_session), 1)
        assert result.data == {"name": "Bob", "age": "25", "department": "Marketing"}

    async def test_insert_row_appends(self, test_session: str) -> None:
        result = await insert_row(
            create_mock_context(test_session), values=["Dora", 41, "Sales"]
        )
        assert result.row_index == 3
        assert result.rows_before == 3
        assert result.rows_after == 4
        assert result.data == {"name": "Dora", "age": "41", "department": "Sales"}

    async def test_insert_row_defaults(self, test_session: str) -> None:
        result = await insert_row(create_mock_context(test_session), row_index=0)
        assert result.data == {"name": "", "age": "", "department": ""}
        assert table_text(test_session).splitlines()[2].startswith("Alice")

    async def test_insert_row_wrong_length(self, test_session: str) -> None:
        with pytest.raises(ToolError):
            await insert_row(create_mock_context(test_session), values=["Dora"])

    async def test_delete_row(self, test_session: str) -> None:
        result = await delete_row(create_mock_context(test_session), 1)
        assert result.data["name"] == "Bob"
        assert result.rows_after == 2

    async def test_delete_row_out_of_range(self, test_session: str) -> None:
        with pytest.raises(ToolError):
            await delete_row(create_mock_context(test_session), 3)

    async def test_update_row_keeps_null_cells(self, test_session: str) -> None:
        result = await update_row(create_mock_context(test_session), 0, [None, "31", None])
        assert result.data == {"name": "Alice", "age": "31", "department": "Engineering"}

    async def test_update_row_is_atomic(self, test_session: str) -> None:
        ctx = create_mock_context(test_session)
        await set_limiter(ctx, "age", ValueType.NUMBER)

        with pytest.raises(ToolError):
            await update_row(ctx, 0, ["Alicia", "old", None])
        assert (await get_row(ctx, 0)).data["name"] == "Alice"

    async def test_move_row(self, test_session: str) -> None:
        result = await move_row(create_mock_context(test_session), 0, 2)
        assert result.data["name"] == "Alice"
        names = [line.split(",")[0] for line in table_text(test_session).splitlines()[1:]]
        assert names == ["Bob", "Charlie", "Alice"]


class TestColumns:
    """Test column tools."""

    async def test_get_columns(self, test_session: str) -> None:
        result = await get_columns(create_mock_context(test_session))
        assert [column.index for column in result.columns] == [0, 1, 2]
        assert result.columns[0].default_value == ""

    async def test_insert_column(self, test_session: str) -> None:
        ctx = create_mock_context(test_session)
        result = await insert_column(ctx, "salary", 1, ValueType.NUMBER, 100)

        assert result.columns == ["name", "salary", "age", "department"]
        assert (await get_cell(ctx, 2, "salary")).value == 100

    async def test_insert_duplicate_column(self, test_session: str) -> None:
        with pytest.raises(ToolError):
            await insert_column(create_mock_context(test_session), "age")

    async def test_delete_column(self, test_session: str) -> None:
        result = await delete_column(create_mock_context(test_session), "age")
        assert result.column == "age"
        assert result.columns == ["name", "department"]

    async def test_rename_column(self, test_session: str) -> None:
        result = await rename_column(create_mock_context(test_session), 0, "full_name")
        assert result.columns[0] == "full_name"
        assert table_text(test_session).splitlines()[1] == "Alice,30,Engineering"

    async def test_move_column(self, test_session: str) -> None:
        result = await move_column(create_mock_context(test_session), "name", "department")
        assert result.columns == ["age", "department", "name"]
        assert result.column_index == 2

    async def test_set_column(self, test_session: str) -> None:
        await set_column(create_mock_context(test_session), "department", "Sales")
        lines = table_text(test_session).splitlines()[1:]
        assert all(line.endswith(",Sales") for line in lines)


class TestLimiters:
    """Test limiter tools."""

    async def test_set_limiter_variants(self, test_session: str) -> None:
        result = await set_limiter(
            create_mock_context(test_session),
            "department",
            variants=["Engineering", "Marketing"],
        )
        assert result.column.variants == ["Engineering", "Marketing"]
        assert result.rows_checked == 3

    async def test_set_limiter_rejects_existing_cells(self, test_session: str) -> None:
        ctx = create_mock_context(test_session)
        with pytest.raises(ToolError):
            await set_limiter(ctx, "department", variants=["Sales"], default="Sales")
        assert (await get_cell(ctx, 0, "department")).value == "Engineering"

    async def test_set_limiter_force_uses_default(self, test_session: str) -> None:
        await set_limiter(
            create_mock_context(test_session),
            "department",
            variants=["Sales", "Engineering"],
            default="Sales",
            force=True,
        )
        departments = [line.split(",")[2] for line in table_text(test_session).splitlines()[1:]]
        assert departments == ["Engineering", "Sales", "Engineering"]

    async def test_set_limiter_invalid_default(self, test_session: str) -> None:
        with pytest.raises(ToolError):
            await set_limiter(
                create_mock_context(test_session), "department", variants=["A"], default="B"
            )

    async def test_set_limiter_pattern(self, test_session: str) -> None:
        ctx = create_mock_context(test_session)
        await set_limiter(ctx, "name", pattern="^[A-Z]")
        with pytest.raises(ToolError):
            await set_cell(ctx, 0, "name", "alice")

    async def test_apply_preset(self, test_session: str) -> None:
        ctx = create_mock_context(test_session)
        result = await apply_preset(ctx, "age", "number")
        assert result.column.type is ValueType.NUMBER
        assert (await get_cell(ctx, 0, "age")).value == 30

    async def test_apply_preset_strict(self, test_session: str) -> None:
        with pytest.raises(ToolError):
            await apply_preset(create_mock_context(test_session), "name", "email")

    async def test_unknown_preset(self, test_session: str) -> None:
        with pytest.raises(ToolError, match="No such preset"):
            await apply_preset(create_mock_context(test_session), "name", "weekday")

    async def test_forced_cell_falls_back_to_default(self, test_session: str) -> None:
        ctx = create_mock_context(test_session)
        await set_limiter(ctx, "age", ValueType.NUMBER, default=35, variants=[25, 30, 35])

        result = await set_cell(ctx, 0, "age", 99, force=True)

        assert result.new_value == 35
