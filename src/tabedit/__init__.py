"""tabedit - a CSV editor with typed, constrained columns and undo history."""

import logging

from ._version import __version__
from .core.settings import get_settings

logging.getLogger("tabedit").setLevel(get_settings().log_level)

__all__ = ["__version__"]
