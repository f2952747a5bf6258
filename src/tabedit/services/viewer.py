"""Bridge to external viewer programs."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence

from ..exceptions import TabeditIOError

logger = logging.getLogger(__name__)


def resolve_viewer(args: Sequence[str], configured: str | None) -> list[str]:
    """Viewer command from command arguments, else from the configured command line."""
    if args:
        return list(args)
    if configured:
        return shlex.split(configured)
    return []


def pipe_to_viewer(command: Sequence[str], text: str) -> str:
    """Feed text to a viewer process and return what it printed."""
    logger.debug("Piping %s characters to %s", len(text), command[0])
    try:
        result = subprocess.run(  # noqa: S603
            list(command), input=text, capture_output=True, text=True, check=False
        )
    except OSError as e:
        raise TabeditIOError(f"Failed to run viewer \"{command[0]}\"", cause=e) from e

    if result.returncode != 0:
        raise TabeditIOError(
            f"Viewer \"{command[0]}\" exited with status {result.returncode}: "
            f"{result.stderr.strip()}"
        )
    return result.stdout
