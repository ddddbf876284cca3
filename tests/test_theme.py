"""Tests for chotko/dashboard/theme.py - built-in and custom themes."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from chotko.dashboard.theme import (
    BUILTIN_THEME_NAMES,
    BUILTIN_THEMES,
    load_theme,
    nearest_basic,
    nearest_xterm256,
    parse_hex,
    save_theme_template,
    theme_from_dict,
)
from chotko.exceptions import ThemeError


class TestBuiltins:
    def test_every_listed_theme_exists(self):
        assert set(BUILTIN_THEME_NAMES) == set(BUILTIN_THEMES)

    def test_severity_color(self):
        colors = BUILTIN_THEMES["default"].colors
        assert colors.severity_color(5) == colors.disaster
        assert colors.severity_color(0) == colors.not_classified
        assert colors.severity_color(42) == colors.not_classified


class TestParseHex:
    def test_long_form(self):
        assert parse_hex("#FF8000") == (255, 128, 0)

    def test_short_form(self):
        assert parse_hex("#abc") == (170, 187, 204)

    @pytest.mark.parametrize("value", ["", "#12", "#GGGGGG", "red"])
    def test_invalid(self, value: str):
        with pytest.raises(ThemeError):
            parse_hex(value)


class TestColorMapping:
    def test_xterm256_cube(self):
        assert nearest_xterm256("#000000") == 16
        assert nearest_xterm256("#FFFFFF") == 231

    def test_xterm256_gray_ramp(self):
        """Mid grays map onto the 24-step gray ramp."""
        assert nearest_xterm256("#808080") == 244

    def test_basic(self):
        assert nearest_basic("#FF0000") == 1
        assert nearest_basic("#0000FF") == 4


class TestCustomThemes:
    """Tests for YAML theme files."""

    def test_missing_colors_use_default(self):
        theme = theme_from_dict({"name": "mine", "colors": {"disaster": "#123456"}})
        assert theme.name == "mine"
        assert theme.colors.disaster == "#123456"
        assert theme.colors.ok == BUILTIN_THEMES["default"].colors.ok

    def test_invalid_color_rejected(self):
        with pytest.raises(ThemeError):
            theme_from_dict({"colors": {"ok": "green"}})

    def test_load_builtin(self, tmp_path: Path):
        assert load_theme("dracula", tmp_path).name == "dracula"

    def test_load_custom_file(self, tmp_path: Path):
        themes = tmp_path / "themes"
        themes.mkdir()
        (themes / "ocean.yaml").write_text('name: ocean\ncolors:\n  primary: "#0077BE"\n')
        theme = load_theme("ocean", tmp_path)
        assert theme.name == "ocean"
        assert theme.colors.primary == "#0077BE"

    def test_load_unknown(self, tmp_path: Path):
        with pytest.raises(ThemeError, match="failed to read"):
            load_theme("nope", tmp_path)

    def test_template_is_loadable(self, tmp_path: Path):
        """The saved example template parses as a valid theme."""
        path = save_theme_template(tmp_path)
        assert path.name == "custom.yaml.example"
        theme = theme_from_dict(yaml.safe_load(path.read_text()))
        assert theme.name == "custom"
