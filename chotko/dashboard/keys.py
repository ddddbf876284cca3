"""Translate curses input codes into dashboard messages."""

from __future__ import annotations

import curses

from .messages import KeyMsg, MouseMsg

ESC = 27
DEL = 127

# Not every curses build defines a fifth button.
BUTTON5_PRESSED = getattr(curses, "BUTTON5_PRESSED", 0x200000)

SPECIAL_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_PPAGE: "pgup",
    curses.KEY_NPAGE: "pgdown",
    curses.KEY_HOME: "home",
    curses.KEY_END: "end",
    curses.KEY_BTAB: "shift+tab",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_DC: "delete",
    curses.KEY_ENTER: "enter",
    curses.KEY_F1: "f1",
    curses.KEY_F2: "f2",
    curses.KEY_F3: "f3",
    curses.KEY_F4: "f4",
}

CONTROL_KEYS = {
    9: "tab",
    10: "enter",
    13: "enter",
    8: "backspace",
    ESC: "esc",
    DEL: "backspace",
    32: "space",
}


def key_name(code: int) -> str | None:
    """Return the normalized name of a ``getch`` code, or None if unknown."""
    if code in SPECIAL_KEYS:
        return SPECIAL_KEYS[code]
    if code in CONTROL_KEYS:
        return CONTROL_KEYS[code]
    if 1 <= code <= 26:
        return "ctrl+" + chr(ord("a") + code - 1)
    if 32 < code < 0x110000 and code < curses.KEY_MIN:
        char = chr(code)
        if char.isprintable():
            return char
    return None


def key_message(code: int) -> KeyMsg | None:
    name = key_name(code)
    return KeyMsg(name) if name is not None else None


def mouse_message(x: int, y: int, bstate: int) -> MouseMsg | None:
    """Build a mouse message from a ``curses.getmouse()`` button state."""
    if bstate & curses.BUTTON4_PRESSED:
        return MouseMsg(x, y, "wheel_up", "press")
    if bstate & BUTTON5_PRESSED:
        return MouseMsg(x, y, "wheel_down", "press")
    # terminals report a click either as release or as a single clicked event
    if bstate & (curses.BUTTON1_RELEASED | curses.BUTTON1_CLICKED):
        return MouseMsg(x, y, "left", "release")
    if bstate & curses.BUTTON1_PRESSED:
        return MouseMsg(x, y, "left", "press")
    return None
