"""Color themes: built-in palettes and custom YAML themes.

Palettes are stored as ``#RRGGBB`` strings. The curses layer maps them to
the nearest color the terminal can show (see :func:`nearest_xterm256` and
:func:`nearest_basic`).
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from ..constants import TEMPLATE_FILE_MODE, THEMES_DIR_NAME
from ..exceptions import ThemeError


@dataclass(frozen=True)
class Palette:
    # Severity colors
    disaster: str
    high: str
    average: str
    warning: str
    information: str
    not_classified: str
    # Status colors
    ok: str
    unknown: str
    maintenance: str
    # UI colors
    primary: str
    secondary: str
    background: str
    foreground: str
    muted: str
    border: str
    focused_border: str
    highlight: str
    surface: str

    def severity_color(self, severity: int) -> str:
        return [
            self.not_classified,
            self.information,
            self.warning,
            self.average,
            self.high,
            self.disaster,
        ][severity if 0 <= severity <= 5 else 0]


@dataclass(frozen=True)
class Theme:
    name: str
    description: str
    colors: Palette


def _theme(name: str, description: str, **colors: str) -> Theme:
    return Theme(name=name, description=description, colors=Palette(**colors))


BUILTIN_THEMES: dict[str, Theme] = {
    "default": _theme(
        "default",
        "Classic Zabbix-inspired colors",
        disaster="#FF0000",
        high="#FF6600",
        average="#FFAA00",
        warning="#FFCC00",
        information="#6699FF",
        not_classified="#999999",
        ok="#00CC00",
        unknown="#AAAAAA",
        maintenance="#AA66FF",
        primary="#6699FF",
        secondary="#00CC00",
        background="#1A1A1A",
        foreground="#EEEEEE",
        muted="#666666",
        border="#444444",
        focused_border="#6699FF",
        highlight="#333366",
        surface="#2A2A2A",
    ),
    "nord": _theme(
        "nord",
        "Arctic, cool-toned Nord palette",
        disaster="#BF616A",
        high="#D08770",
        average="#EBCB8B",
        warning="#88C0D0",
        information="#81A1C1",
        not_classified="#4C566A",
        ok="#A3BE8C",
        unknown="#4C566A",
        maintenance="#B48EAD",
        primary="#88C0D0",
        secondary="#A3BE8C",
        background="#2E3440",
        foreground="#D8DEE9",
        muted="#4C566A",
        border="#3B4252",
        focused_border="#88C0D0",
        highlight="#3B4252",
        surface="#434C5E",
    ),
    "dracula": _theme(
        "dracula",
        "Dark purple/pink Dracula aesthetic",
        disaster="#FF5555",
        high="#FFB86C",
        average="#F1FA8C",
        warning="#8BE9FD",
        information="#BD93F9",
        not_classified="#6272A4",
        ok="#50FA7B",
        unknown="#6272A4",
        maintenance="#FF79C6",
        primary="#BD93F9",
        secondary="#50FA7B",
        background="#282A36",
        foreground="#F8F8F2",
        muted="#6272A4",
        border="#44475A",
        focused_border="#FF79C6",
        highlight="#44475A",
        surface="#44475A",
    ),
    "gruvbox": _theme(
        "gruvbox",
        "Retro warm-toned Gruvbox palette",
        disaster="#FB4934",
        high="#FE8019",
        average="#FABD2F",
        warning="#83A598",
        information="#D3869B",
        not_classified="#A89984",
        ok="#B8BB26",
        unknown="#A89984",
        maintenance="#D3869B",
        primary="#8EC07C",
        secondary="#B8BB26",
        background="#282828",
        foreground="#EBDBB2",
        muted="#928374",
        border="#3C3836",
        focused_border="#8EC07C",
        highlight="#3C3836",
        surface="#504945",
    ),
    "catppuccin": _theme(
        "catppuccin",
        "Soothing pastel Catppuccin Mocha palette",
        disaster="#F38BA8",
        high="#FAB387",
        average="#F9E2AF",
        warning="#89DCEB",
        information="#89B4FA",
        not_classified="#6C7086",
        ok="#A6E3A1",
        unknown="#6C7086",
        maintenance="#CBA6F7",
        primary="#B4BEFE",
        secondary="#A6E3A1",
        background="#1E1E2E",
        foreground="#CDD6F4",
        muted="#6C7086",
        border="#313244",
        focused_border="#B4BEFE",
        highlight="#45475A",
        surface="#313244",
    ),
    "tokyonight": _theme(
        "tokyonight",
        "Cool blues and purples Tokyo Night palette",
        disaster="#F7768E",
        high="#FF9E64",
        average="#E0AF68",
        warning="#7DCFFF",
        information="#7AA2F7",
        not_classified="#565F89",
        ok="#9ECE6A",
        unknown="#565F89",
        maintenance="#BB9AF7",
        primary="#7AA2F7",
        secondary="#9ECE6A",
        background="#1A1B26",
        foreground="#C0CAF5",
        muted="#565F89",
        border="#292E42",
        focused_border="#BB9AF7",
        highlight="#292E42",
        surface="#24283B",
    ),
    "solarized": _theme(
        "solarized",
        "Precision-balanced Solarized dark palette",
        disaster="#DC322F",
        high="#CB4B16",
        average="#B58900",
        warning="#268BD2",
        information="#6C71C4",
        not_classified="#586E75",
        ok="#859900",
        unknown="#586E75",
        maintenance="#D33682",
        primary="#268BD2",
        secondary="#859900",
        background="#002B36",
        foreground="#839496",
        muted="#586E75",
        border="#073642",
        focused_border="#2AA198",
        highlight="#073642",
        surface="#073642",
    ),
}

BUILTIN_THEME_NAMES = [
    "default",
    "nord",
    "dracula",
    "gruvbox",
    "catppuccin",
    "tokyonight",
    "solarized",
]

PALETTE_KEYS = [f.name for f in fields(Palette)]

THEME_TEMPLATE = """# Custom Chotko Theme
# Copy this file to <name>.yaml and modify the colors to create your own theme.
# Colors are hex values (e.g., "#FF0000" for red). Missing colors use the default theme.

name: "custom"
description: "My custom theme"

colors:
  disaster: "#FF0000"
  high: "#FF6600"
  average: "#FFAA00"
  warning: "#FFCC00"
  information: "#6699FF"
  not_classified: "#999999"
  ok: "#00CC00"
  unknown: "#AAAAAA"
  maintenance: "#AA66FF"
  primary: "#6699FF"
  secondary: "#00CC00"
  background: "#1a1a1a"
  foreground: "#EEEEEE"
  muted: "#666666"
  border: "#444444"
  focused_border: "#6699FF"
  highlight: "#333366"
  surface: "#2a2a2a"
"""


def default_theme() -> Theme:
    return BUILTIN_THEMES["default"]


def parse_hex(value: str) -> tuple[int, int, int]:
    """Parse ``#RGB`` or ``#RRGGBB`` into an RGB tuple.

    Raises:
        ThemeError: If the value is not a hex color
    """
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(c * 2 for c in text)
    if len(text) != 6:
        raise ThemeError(f"invalid color: {value!r}")
    try:
        return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
    except ValueError as e:
        raise ThemeError(f"invalid color: {value!r}") from e


def theme_from_dict(data: dict[str, Any]) -> Theme:
    """Build a theme from parsed YAML; missing colors fall back to the default."""
    base = default_theme().colors
    colors = data.get("colors") or {}
    overrides: dict[str, str] = {}
    for key in PALETTE_KEYS:
        value = colors.get(key)
        if value:
            parse_hex(str(value))
            overrides[key] = str(value)
    return Theme(
        name=str(data.get("name") or "custom"),
        description=str(data.get("description") or ""),
        colors=replace(base, **overrides),
    )


def load_theme_file(path: Path) -> Theme:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ThemeError(f"failed to read theme file: {e}") from e
    except yaml.YAMLError as e:
        raise ThemeError(f"failed to parse theme file: {e}") from e
    if not isinstance(data, dict):
        raise ThemeError(f"failed to parse theme file: {path}")
    return theme_from_dict(data)


def load_theme(name: str, config_dir: Path) -> Theme:
    """Return a built-in theme by name, else ``<config_dir>/themes/<name>.yaml``."""
    if name in BUILTIN_THEMES:
        return BUILTIN_THEMES[name]
    return load_theme_file(config_dir / THEMES_DIR_NAME / f"{name}.yaml")


def save_theme_template(config_dir: Path) -> Path:
    themes_dir = config_dir / THEMES_DIR_NAME
    themes_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    path = themes_dir / "custom.yaml.example"
    path.write_text(THEME_TEMPLATE, encoding="utf-8")
    path.chmod(TEMPLATE_FILE_MODE)
    return path


# xterm-256 color cube levels
_CUBE_LEVELS = [0, 95, 135, 175, 215, 255]

# Standard 8 colors in curses order (black, red, green, yellow, blue, magenta, cyan, white)
_BASIC_RGB = [
    (0, 0, 0),
    (205, 0, 0),
    (0, 205, 0),
    (205, 205, 0),
    (0, 0, 238),
    (205, 0, 205),
    (0, 205, 205),
    (229, 229, 229),
]


def _distance(a: tuple[int, int, int], b: tuple[int, int, int]) -> int:
    return sum((x - y) ** 2 for x, y in zip(a, b, strict=True))


def nearest_xterm256(value: str) -> int:
    """Map a hex color to the closest xterm-256 palette index (16-255)."""
    rgb = parse_hex(value)

    def cube_index(c: int) -> int:
        return min(range(6), key=lambda i: abs(_CUBE_LEVELS[i] - c))

    ri, gi, bi = (cube_index(c) for c in rgb)
    cube_rgb = (_CUBE_LEVELS[ri], _CUBE_LEVELS[gi], _CUBE_LEVELS[bi])
    cube_code = 16 + 36 * ri + 6 * gi + bi

    gray_step = min(range(24), key=lambda i: abs(8 + 10 * i - sum(rgb) // 3))
    gray_level = 8 + 10 * gray_step
    gray_code = 232 + gray_step

    if _distance(rgb, (gray_level,) * 3) < _distance(rgb, cube_rgb):
        return gray_code
    return cube_code


def nearest_basic(value: str) -> int:
    """Map a hex color to the closest of the 8 standard curses colors."""
    rgb = parse_hex(value)
    return min(range(len(_BASIC_RGB)), key=lambda i: _distance(rgb, _BASIC_RGB[i]))
