"""Named limiter presets."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pandas as pd

from ..exceptions import InvalidLimiterError, TabeditIOError
from ..models.limiter import LIMITER_ATTRIBUTE_LEN, ValueLimiter

logger = logging.getLogger(__name__)

BUILTIN_PRESETS: dict[str, list[str]] = {
    "text": ["text", "", "", ""],
    "number": ["number", "", "", ""],
    "float": ["text", "0.0", "", r"[+-]?([0-9]*[.])?[0-9]+"],
    "email": [
        "text",
        "johndoe@mail.com",
        "",
        r"^([a-zA-Z0-9._%-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,6})*$",
    ],
    "date": [
        "text",
        "2000-01-01",
        "",
        r"([12]\d{3}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01]))",
    ],
    "time": [
        "text",
        "00:00:00",
        "",
        r"^(?:(?:([01]?\d|2[0-3]):)?([0-5]?\d):)?([0-5]?\d)$",
    ],
    "url": [
        "text",
        "http://john.doe",
        "",
        r"[(http(s)?)://(www\.)?a-zA-Z0-9@:%._\+~#=]{2,256}\.[a-z]{2,6}\b([-a-zA-Z0-9@:%_\+.~#?&//=]*)",
    ],
}


def parse_presets(text: str) -> dict[str, ValueLimiter]:
    """Parse preset lines of the form ``name,type,default,variants,pattern``."""
    if not text.strip():
        return {}
    try:
        df = pd.read_csv(io.StringIO(text), header=None, dtype=str, keep_default_na=False)
    except pd.errors.ParserError as e:
        raise InvalidLimiterError(f"Preset file could not be parsed: {e}") from e

    expected = LIMITER_ATTRIBUTE_LEN + 1
    if len(df.columns) != expected:
        raise InvalidLimiterError(
            f"Preset lines need {expected} fields (name,type,default,variants,pattern) "
            f"but have {len(df.columns)}"
        )

    presets = {}
    for record in df.itertuples(index=False, name=None):
        if any(pd.isna(field) for field in record):
            raise InvalidLimiterError(
                f"Preset line \"{','.join(str(f) for f in record if not pd.isna(f))}\" "
                "doesn't include necessary limiter data"
            )
        name, *attributes = record
        presets[name.strip()] = ValueLimiter.from_line(attributes)
    return presets


class PresetRegistry:
    """Built-in presets extended by the user preset file."""

    def __init__(self, presets: dict[str, ValueLimiter] | None = None):
        self.presets: dict[str, ValueLimiter] = dict(presets or {})

    @classmethod
    def load(cls, preset_file: Path | None = None, use_builtin: bool = True) -> PresetRegistry:
        registry = cls()
        if use_builtin:
            registry.presets.update(
                {name: ValueLimiter.from_line(line) for name, line in BUILTIN_PRESETS.items()}
            )
        if preset_file is not None:
            registry.extend_from_file(preset_file)
        return registry

    def extend_from_file(self, preset_file: Path) -> None:
        """Add presets from a file. A missing file is ignored."""
        if not preset_file.exists():
            return
        try:
            text = preset_file.read_text(encoding="utf-8")
        except OSError as e:
            raise TabeditIOError(
                "Failed to read preset file", path=str(preset_file), cause=e
            ) from e
        loaded = parse_presets(text)
        self.presets.update(loaded)
        logger.debug("Loaded %s presets from %s", len(loaded), preset_file)

    def get(self, name: str) -> ValueLimiter | None:
        return self.presets.get(name)

    def names(self) -> list[str]:
        return sorted(self.presets)
