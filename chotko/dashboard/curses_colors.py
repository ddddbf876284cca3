"""Curses color initialization for dashboard themes."""

from __future__ import annotations

from curses import error as curses_error
from dataclasses import dataclass, field

from .theme import Palette, Theme, default_theme, nearest_basic, nearest_xterm256


@dataclass
class CursesAttrs:
    """Attributes for the fixed parts of the screen.

    Attributes:
        status_attr: Status bar text
        tab_active_attr: Label of the selected tab
        tab_attr: Labels of the other tabs
        border_attr: Unfocused pane borders
        focused_border_attr: Border of the focused pane
        selected_attr: Cursor row inside a list
        popup_attr: Popup body
        popup_title_attr: Popup title line
    """

    status_attr: int = 0
    tab_active_attr: int = 0
    tab_attr: int = 0
    border_attr: int = 0
    focused_border_attr: int = 0
    selected_attr: int = 0
    popup_attr: int = 0
    popup_title_attr: int = 0
    styles: dict[str, int] = field(default_factory=dict)


def _style_specs(c: Palette) -> list[tuple[str, str, str | None]]:
    """(style name, foreground, background) for every named style."""
    specs: list[tuple[str, str, str | None]] = [
        ("value", c.foreground, None),
        ("label", c.secondary, None),
        ("title", c.primary, None),
        ("muted", c.muted, None),
        ("tag", c.secondary, None),
        ("ok", c.ok, None),
        ("problem", c.disaster, None),
        ("unknown", c.unknown, None),
        ("maintenance", c.maintenance, None),
        ("acked", c.ok, None),
        ("border", c.border, None),
        ("focused_border", c.focused_border, None),
        ("chart", c.primary, None),
        ("status", c.foreground, c.surface),
        ("tab_active", c.background, c.primary),
        ("tab", c.muted, None),
        ("selected", c.foreground, c.highlight),
        ("popup", c.foreground, c.surface),
        ("popup_title", c.primary, c.surface),
        ("error", c.disaster, c.surface),
        ("filter", c.warning, c.surface),
    ]
    specs += [(f"sev:{i}", c.severity_color(i), None) for i in range(6)]
    return specs


BOLD_STYLES = {"title", "label", "tab_active", "popup_title", "error", "sev:4", "sev:5"}


class CursesColors:
    """Theme colors mapped onto curses color pairs.

    256-color terminals get the closest xterm-256 entry for each palette
    color; others fall back to the 8 standard colors.
    """

    def __init__(self, stdscr, theme: Theme | None = None) -> None:
        self.stdscr = stdscr
        self.theme = theme or default_theme()
        self.curses_mod = None
        self.color_enabled = False
        self.extended_colors = False
        self.attrs = CursesAttrs()
        self._init_curses()

    def _init_curses(self) -> None:
        """Initialize color pairs for every style of the theme."""
        try:
            import curses

            self.curses_mod = curses
            curses.curs_set(0)
            styles: dict[str, int] = {}
            if curses.has_colors():
                curses.start_color()
                curses.use_default_colors()
                self.extended_colors = curses.COLORS >= 256
                to_color = nearest_xterm256 if self.extended_colors else nearest_basic
                for pair, (name, fg, bg) in enumerate(_style_specs(self.theme.colors), start=1):
                    if pair >= curses.COLOR_PAIRS:
                        break
                    curses.init_pair(pair, to_color(fg), to_color(bg) if bg else -1)
                    styles[name] = curses.color_pair(pair)
                self.color_enabled = True
            else:
                styles.update(
                    muted=curses.A_DIM,
                    selected=curses.A_REVERSE,
                    status=curses.A_REVERSE,
                    tab_active=curses.A_REVERSE,
                    popup=curses.A_REVERSE,
                    popup_title=curses.A_REVERSE,
                    focused_border=curses.A_BOLD,
                )
            for name in BOLD_STYLES:
                styles[name] = styles.get(name, 0) | curses.A_BOLD
            self.attrs = CursesAttrs(
                status_attr=styles.get("status", 0),
                tab_active_attr=styles.get("tab_active", 0),
                tab_attr=styles.get("tab", 0),
                border_attr=styles.get("border", 0),
                focused_border_attr=styles.get("focused_border", 0),
                selected_attr=styles.get("selected", 0),
                popup_attr=styles.get("popup", 0),
                popup_title_attr=styles.get("popup_title", 0),
                styles=styles,
            )
        except curses_error:
            return

    def attr(self, style: str) -> int:
        """Attribute for a named style; unknown names render plain."""
        return self.attrs.styles.get(style, 0)

    def severity_attr(self, severity: int) -> int:
        return self.attr(f"sev:{severity if 0 <= severity <= 5 else 0}")
