"""Centered popup rendering for modals and the editor overlay."""

from __future__ import annotations

from curses import error as curses_error
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .curses_colors import CursesColors
    from .editor import Editor
    from .model import Modal

# (text, style name) for one popup row
PopupLine = tuple[str, str]

MODAL_FOOTER = " OK   (Press Enter or Esc)"
HELP_FOOTER = "Press Esc to close"


def modal_lines(modal: Modal) -> tuple[list[PopupLine], str]:
    """Return the body rows and footer of a help, error or message modal."""
    if modal.kind == "help":
        # section headings are flush left, key rows are indented
        lines = [(text, "popup" if text.startswith(" ") else "popup_title") for text in modal.body]
        return lines, HELP_FOOTER
    style = "error" if modal.kind == "error" else "popup"
    lines = [(text, style) for text in modal.body]
    if modal.details:
        lines.append(("", "popup"))
        lines += [(text, "muted") for text in modal.details.split("\n")]
    return lines, MODAL_FOOTER


def editor_lines(editor: Editor) -> list[PopupLine]:
    lines: list[PopupLine] = []
    for text in editor.lines():
        if text.startswith(">"):
            lines.append((text, "selected"))
        elif text == editor.confirm_text():
            lines.append((text, "filter"))
        else:
            lines.append((text, "popup"))
    return lines


def draw_popup(
    stdscr,
    curses_mod,
    colors: CursesColors,
    *,
    title: str,
    lines: list[PopupLine],
    footer: str = "",
    width: int | None = None,
    height: int | None = None,
) -> None:
    """Draw a bordered popup centered on the screen.

    Args:
        stdscr: The curses screen object
        curses_mod: The curses module (for creating new windows)
        colors: Attributes for the popup styles
        title: Text shown on the first content row
        lines: Body rows with their style names
        footer: Key hint shown on the last content row
        width: Fixed inner width; fits the content when omitted
        height: Fixed inner height; fits the content when omitted
    """
    if not curses_mod:
        return

    screen_h, screen_w = stdscr.getmaxyx()

    # Add padding: 2 chars horizontal, 1 line vertical
    h_pad = 2
    v_pad = 1

    rows: list[PopupLine] = [(title, "popup_title"), ("", "popup"), *lines]
    if footer:
        rows += [("", "popup"), (footer, "muted")]

    content_width = max(len(text) for text, _ in rows)
    popup_width = width if width is not None else content_width + h_pad * 2
    popup_height = height if height is not None else len(rows) + v_pad * 2

    # Clip to screen (leave room for border)
    popup_width = max(min(popup_width, screen_w - 2), 10)
    popup_height = max(min(popup_height, screen_h - 2), 1)
    start_y = max((screen_h - popup_height - 2) // 2, 0)
    start_x = max((screen_w - popup_width - 2) // 2, 0)

    try:
        popup_win = curses_mod.newwin(popup_height + 2, popup_width + 2, start_y, start_x)
    except curses_error:
        return

    popup_attr = colors.attrs.popup_attr
    popup_win.bkgd(" ", popup_attr)
    popup_win.border()

    inner = popup_width - h_pad * 2
    max_content_rows = popup_height - v_pad * 2
    if footer and len(rows) > max_content_rows:
        # keep the footer visible when the body is clipped
        body = rows[: max(max_content_rows - 2, 0)]
        rows = body + rows[-2:]

    for i, (text, style) in enumerate(rows[:max_content_rows]):
        padded = " " * h_pad + text[:inner].ljust(inner) + " " * h_pad
        attr = colors.attr(style) or popup_attr
        try:
            popup_win.addstr(v_pad + 1 + i, 1, padded[:popup_width], attr)
        except curses_error:
            pass

    popup_win.noutrefresh()
