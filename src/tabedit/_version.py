"""Version information for tabedit."""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("tabedit")
except importlib.metadata.PackageNotFoundError:
    # Fallback for development mode
    __version__ = "1.0.0-dev"

VERSION = __version__
