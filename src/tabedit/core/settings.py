"""Configuration settings for tabedit."""

from __future__ import annotations

import tempfile
import threading
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class TabeditSettings(BaseSettings):
    """Configuration settings for tabedit.

    Settings are organized into categories:

    History:
    - history_capacity: How many snapshots each session keeps for undo

    Files:
    - read_strict: Whether blank rows make an import fail
    - preset_file: User defined limiter presets
    - schema_file_name: File written by schema-init when no name is given
    - cache_dir: Where write keeps a backup of the file it overwrites

    Display:
    - viewer: External command that receives the table text

    Sessions (MCP server):
    - max_sessions / session_timeout
    """

    # History
    history_capacity: int = Field(
        default=16, ge=1, description="Number of snapshots kept for undo per session"
    )

    # Files
    read_strict: bool = Field(
        default=False, description="Fail imports that contain blank rows instead of skipping them"
    )
    preset_file: Path = Field(
        default_factory=lambda: Path.home() / ".tabedit_preset.csv",
        description="CSV file with user limiter presets (name,type,default,variants,pattern)",
    )
    schema_file_name: str = Field(
        default="tabedit_schema.csv", description="Default file name for schema-init"
    )
    cache_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory for the backup copy made before overwriting a file",
    )

    # Display
    viewer: str | None = Field(
        default=None, description="Command line of an external viewer for print commands"
    )

    # Session management
    max_sessions: int = Field(default=100, ge=1, description="Maximum number of open sessions")
    session_timeout: int = Field(default=3600, description="Session timeout in seconds")

    log_level: str = Field(default="INFO", description="Log level of the tabedit logger")

    model_config = {"env_prefix": "TABEDIT_", "case_sensitive": False}


_settings: TabeditSettings | None = None
_lock = threading.Lock()


def create_settings() -> TabeditSettings:
    """Create a new tabedit settings instance."""
    return TabeditSettings()


def get_settings() -> TabeditSettings:
    """Create or get the global tabedit settings instance."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        with _lock:
            if _settings is None:
                _settings = create_settings()
    return _settings


def reset_settings() -> None:
    """Reset the global tabedit settings instance."""
    global _settings  # noqa: PLW0603
    with _lock:
        _settings = None
