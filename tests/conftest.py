"""Pytest configuration for tabedit tests."""

import io
from collections.abc import Generator
from pathlib import Path

import pytest

from tabedit.commands.processor import Processor
from tabedit.core.session import SessionManager, reset_session_manager
from tabedit.core.settings import TabeditSettings, reset_settings
from tabedit.models.table import Table
from tabedit.servers.io_server import load_table_from_content
from tabedit.services.presets import PresetRegistry
from tests.test_mock_context import create_mock_context


@pytest.fixture(autouse=True)
def reset_globals() -> Generator[None]:
    """Give every test fresh settings and a fresh session manager."""
    reset_settings()
    reset_session_manager()
    yield
    reset_settings()
    reset_session_manager()


@pytest.fixture
def sample_csv_data() -> str:
    """Provide sample CSV data for testing."""
    return """name,age,department
Alice,30,Engineering
Bob,25,Marketing
Charlie,35,Engineering"""


@pytest.fixture
def people_table() -> Table:
    """A small table of text columns."""
    return Table.from_records(
        ["name", "age", "department"],
        [
            ["Alice", "30", "Engineering"],
            ["Bob", "25", "Marketing"],
            ["Charlie", "35", "Engineering"],
        ],
    )


@pytest.fixture
def test_settings(tmp_path: Path) -> TabeditSettings:
    """Settings that keep caches and presets inside the test directory."""
    return TabeditSettings(cache_dir=tmp_path, preset_file=tmp_path / "presets.csv")


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def processor(test_settings: TabeditSettings, output: io.StringIO) -> Processor:
    """A scripted processor with an empty page, writing to ``output``."""
    processor = Processor(
        session_manager=SessionManager(history_capacity=test_settings.history_capacity),
        settings=test_settings,
        presets=PresetRegistry.load(test_settings.preset_file),
        output=output,
        no_loop=True,
    )
    processor.add_empty_page()
    return processor


@pytest.fixture
async def test_session(sample_csv_data: str) -> str:
    """Create a session with the sample data loaded."""
    ctx = create_mock_context()
    await load_table_from_content(ctx, sample_csv_data)
    return ctx.session_id
