"""Tests for limiter presets."""

from pathlib import Path

import pytest

from tabedit.exceptions import InvalidLimiterError
from tabedit.models.value import Value, ValueType
from tabedit.services.presets import BUILTIN_PRESETS, PresetRegistry, parse_presets


class TestBuiltinPresets:
    """Test the presets shipped with tabedit."""

    def test_all_builtin_presets_load(self) -> None:
        registry = PresetRegistry.load()
        assert set(BUILTIN_PRESETS) <= set(registry.names())

    @pytest.mark.parametrize(
        ("preset", "good", "bad"),
        [
            ("email", "john@example.com", "not an email"),
            ("date", "2024-02-29", "29/02/2024"),
            ("float", "3.14", "pi"),
        ],
    )
    def test_preset_patterns(self, preset: str, good: str, bad: str) -> None:
        limiter = PresetRegistry.load().get(preset)
        assert limiter is not None
        assert limiter.qualify(Value.text(good))
        assert not limiter.qualify(Value.text(bad))

    def test_number_preset(self) -> None:
        limiter = PresetRegistry.load().get("number")
        assert limiter is not None
        assert limiter.value_type is ValueType.NUMBER


class TestPresetFile:
    """Test user preset files."""

    def test_parse_presets(self) -> None:
        presets = parse_presets("size,text,M,S M L,\nyear,number,2000,,\n")
        assert presets["size"].variants == [Value.text("S"), Value.text("M"), Value.text("L")]
        assert presets["year"].default == Value.number(2000)

    def test_wrong_field_count(self) -> None:
        with pytest.raises(InvalidLimiterError):
            parse_presets("size,text,M\n")

    def test_missing_file_is_ignored(self, tmp_path: Path) -> None:
        registry = PresetRegistry.load(tmp_path / "missing.csv")
        assert registry.get("email") is not None

    def test_user_presets_extend_builtins(self, tmp_path: Path) -> None:
        preset_file = tmp_path / "presets.csv"
        preset_file.write_text("yesno,text,no,yes no,\n")
        registry = PresetRegistry.load(preset_file)
        assert registry.get("yesno") is not None
        assert registry.get("text") is not None

    def test_without_builtins(self) -> None:
        assert PresetRegistry.load(use_builtin=False).names() == []
