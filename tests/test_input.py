"""Tests for key translation, mouse zones and the command bar line editor."""

from __future__ import annotations

import curses

import pytest
from chotko.dashboard.command_bar import BarMode, CommandBar, TextInput
from chotko.dashboard.keys import key_message, key_name, mouse_message
from chotko.dashboard.messages import KeyMsg
from chotko.dashboard.zones import ZoneMap


class TestKeyName:
    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            (curses.KEY_UP, "up"),
            (curses.KEY_NPAGE, "pgdown"),
            (curses.KEY_BTAB, "shift+tab"),
            (9, "tab"),
            (10, "enter"),
            (27, "esc"),
            (127, "backspace"),
            (32, "space"),
            (1, "ctrl+a"),
            (12, "ctrl+l"),
            (ord("j"), "j"),
            (ord("?"), "?"),
            (ord("é"), "é"),
        ],
    )
    def test_known_keys(self, code: int, expected: str):
        assert key_name(code) == expected

    def test_unknown_code(self):
        assert key_name(0) is None
        assert key_message(0) is None

    def test_key_message(self):
        assert key_message(ord("q")) == KeyMsg("q")


class TestMouseMessage:
    def test_wheel(self):
        assert mouse_message(3, 4, curses.BUTTON4_PRESSED).button == "wheel_up"

    def test_click_is_release(self):
        """A clicked event is reported as a left release."""
        msg = mouse_message(3, 4, curses.BUTTON1_CLICKED)
        assert (msg.x, msg.y, msg.button, msg.action) == (3, 4, "left", "release")

    def test_press(self):
        assert mouse_message(0, 0, curses.BUTTON1_PRESSED).action == "press"

    def test_unhandled(self):
        assert mouse_message(0, 0, 0) is None


class TestZoneMap:
    """Tests for click hit-testing."""

    def test_resolve_index(self):
        zones = ZoneMap()
        zones.register("alert_0", 1, 4, 40)
        zones.register("alert_7", 1, 5, 40)
        assert zones.resolve("alert", 10, 5) == 7
        assert zones.resolve("alert", 10, 6) is None

    def test_prefix_must_match_exactly(self):
        """graph_node_3 does not resolve under the node prefix."""
        zones = ZoneMap()
        zones.register("graph_node_3", 0, 0, 10)
        assert zones.resolve("graph_node", 2, 0) == 3
        assert zones.resolve("node", 2, 0) is None

    def test_bounds_are_half_open(self):
        zones = ZoneMap()
        zones.register("tab_1", 10, 1, 5)
        assert zones.in_bounds("tab_1", 10, 1)
        assert zones.in_bounds("tab_1", 14, 1)
        assert not zones.in_bounds("tab_1", 15, 1)
        assert not zones.in_bounds("tab_2", 10, 1)

    def test_clear_and_empty_zones(self):
        zones = ZoneMap()
        zones.register("tab_0", 0, 0, 0)
        assert zones.get("tab_0") is None
        zones.register("tab_1", 0, 0, 3)
        zones.clear()
        assert zones.get("tab_1") is None


class TestTextInput:
    def test_insert_and_cursor(self):
        text = TextInput()
        for key in ["a", "c", "left", "b", "end", "space", "d"]:
            assert text.handle_key(key)
        assert text.value == "abc d"
        assert text.display() == "abc d█"

    def test_backspace_and_delete(self):
        text = TextInput("hello")
        text.handle_key("backspace")
        text.handle_key("home")
        text.handle_key("delete")
        assert text.value == "ell"
        assert text.pos == 0

    def test_ctrl_u_kills_to_start(self):
        text = TextInput("hello")
        text.handle_key("left")
        text.handle_key("ctrl+u")
        assert text.value == "o"

    def test_unhandled_keys(self):
        assert not TextInput().handle_key("enter")
        assert not TextInput().handle_key("tab")


class TestCommandBar:
    def test_hidden_by_default(self):
        bar = CommandBar()
        assert not bar.is_active()
        assert bar.text() == ""
        assert not bar.handle_key("a")

    def test_placeholder(self):
        bar = CommandBar()
        bar.activate(BarMode.FILTER)
        assert bar.text() == "/ █filter"

    def test_value_is_trimmed(self):
        bar = CommandBar()
        bar.activate(BarMode.COMMAND)
        for key in ["space", "q", "space"]:
            bar.handle_key(key)
        assert bar.value == "q"
        assert bar.text() == ":  q █"

    def test_hide_resets_input(self):
        bar = CommandBar()
        bar.activate(BarMode.ACK_MESSAGE)
        bar.handle_key("x")
        bar.hide()
        bar.activate(BarMode.ACK_MESSAGE)
        assert bar.value == ""
