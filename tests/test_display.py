"""Tests for chotko/dashboard/display.py and help_popup.py - screen rendering."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from chotko.dashboard.display import (
    COMMAND_HINT,
    DashboardDisplay,
    alert_row,
    event_row,
    host_row,
    node_row,
    status_center,
    status_left,
    status_right,
    tab_labels,
)
from chotko.dashboard.editor import Editor
from chotko.dashboard.help_popup import HELP_FOOTER, MODAL_FOOTER, editor_lines, modal_lines
from chotko.dashboard.messages import ProblemsLoadedMsg
from chotko.dashboard.model import DashboardModel, Modal, Tab
from chotko.dashboard.tree import MetricTree
from chotko.dashboard.update import update
from chotko.zabbix.types import Event, HostCounts, Trigger, parse_unix_time
from factories import make_host, make_item, make_problem

NOW = parse_unix_time("1700000125")


def text_of(segments) -> str:
    return "".join(text for text, _ in segments)


def drawn_text(stdscr: MagicMock) -> str:
    """Everything written with addstr, one call per line."""
    return "\n".join(c.args[2] for c in stdscr.addstr.call_args_list)


class TestStatusBar:
    def test_counts_loading(self):
        assert status_left(None) == [("Hosts: Loading...", "status")]

    def test_counts(self):
        segments = status_left(HostCounts(ok=5, problem=2, unknown=1, maintenance=0))
        assert ("▲ 5 OK", "ok") in segments
        assert ("▼ 2 Problem", "problem") in segments
        assert text_of(segments).endswith("⚙ 0 Maint")

    def test_center_prefers_status_message(self, model: DashboardModel):
        model.min_severity = 4
        model.status_message = "Ignored: web-01 / CPU"
        assert status_center(model) == "Ignored: web-01 / CPU"

    def test_center_filter_summary(self, model: DashboardModel):
        assert status_center(model) == ""
        model.min_severity = 2
        model.text_filter = "db"
        assert status_center(model) == '⚡ Filter: Warn+, "db"'

    def test_right(self, model: DashboardModel):
        assert status_right(model) == "✗ Disconnected"
        model.connected = True
        model.version = "7.0.0"
        assert status_right(model) == "✓ Zabbix 7.0.0"
        model.last_update = "12:00:01"
        assert status_right(model) == "✓ Zabbix 7.0.0 │ Updated: 12:00:01"
        model.loading = True
        assert status_right(model) == "⟳ Refreshing..."

    def test_tab_labels(self):
        labels = tab_labels(Tab.HOSTS)
        assert labels[1] == "[Hosts]"
        assert labels[0] == " Alerts "
        assert len(labels) == 4


class TestRows:
    """Tests for the list row builders."""

    def test_alert_row(self):
        segments = alert_row(make_problem("1", severity=3), 52, NOW)
        assert segments[0] == ("◐", "sev:3")
        assert segments[3][0].strip() == "2m"
        assert segments[4] == ("  ", "acked")

    def test_alert_row_acknowledged(self):
        segments = alert_row(make_problem("1", severity=5, acknowledged=True), 52, NOW)
        assert segments[0] == ("●", "sev:5")
        assert segments[4] == (" ✓", "acked")

    @pytest.mark.parametrize(
        ("available", "expected"),
        [("1", ("+", "ok")), ("2", ("!", "problem")), ("0", ("?", "unknown"))],
    )
    def test_host_row_icon(self, available: str, expected):
        host = make_host("1", "alpha", available=available)
        assert host_row(host, 52)[0] == expected

    def test_host_row_maintenance(self):
        host = make_host("1", "alpha", maintenance=True)
        segments = host_row(host, 52)
        assert segments[0] == ("M", "maintenance")
        assert "10.0.0.1" in segments[2][0]
        assert segments[3][0].strip() == "Linux servers"

    def test_event_row_problem(self):
        event = Event.from_dict({"eventid": "7", "clock": "1700000000", "severity": "4"})
        segments = event_row(event, 52, NOW)
        assert segments[0] == ("!!", "sev:4")
        assert segments[-1][0].strip() == "2m"

    def test_event_row_recovery(self):
        """Recovery events show the resolved duration."""
        event = Event.from_dict(
            {
                "eventid": "7",
                "r_eventid": "8",
                "clock": "1700000000",
                "r_clock": "1700003725",
                "hosts": [{"hostid": "1", "name": "db-01"}],
            }
        )
        segments = event_row(event, 52, NOW)
        assert segments[0] == ("OK", "ok")
        assert segments[-1][0].strip() == "1h 2m"
        assert "db-01" in segments[2][0]

    def test_node_rows(self):
        tree = MetricTree.build(
            [make_item("1", "system.cpu.util"), make_item("2", "agent.ping")], ["system.cpu"]
        )
        host = tree.flat[0]
        assert node_row(host, 52) == [("▸ web-01 (2)", "title")]
        assert node_row(host, 52, loading=True)[0][0].endswith(" ⟳")

        tree.toggle_node(host.id)
        category = tree.visible_node(1)
        assert node_row(category, 52) == [("  ▸ CPU (1)", "label")]

        tree.toggle_node(category.id)
        item = node_row(tree.visible_node(2), 52, sparkline="▁█")
        assert item[0][1] == "value"
        assert item[1][0].strip() == "12.5%"
        assert item[2] == ("  ▁█", "chart")


class TestPopupLines:
    def test_help_styles(self):
        modal = Modal("help", "Keyboard Shortcuts", ["Navigation", "  j/k          Move"])
        lines, footer = modal_lines(modal)
        assert lines == [("Navigation", "popup_title"), ("  j/k          Move", "popup")]
        assert footer == HELP_FOOTER

    def test_error_with_details(self):
        modal = Modal("error", "Error", ["Failed to load"], "API error -32500: boom")
        lines, footer = modal_lines(modal)
        assert lines[0] == ("Failed to load", "error")
        assert lines[-1] == ("API error -32500: boom", "muted")
        assert footer == MODAL_FOOTER

    def test_editor_confirm_highlighted(self):
        editor = Editor()
        trigger = Trigger.from_dict({"triggerid": "1", "description": "High CPU", "status": "0"})
        editor.show_triggers(make_host("1", "alpha"), [trigger])
        editor.handle_key("space")
        lines = editor_lines(editor)
        assert lines[0][1] == "selected"
        assert lines[-1] == (editor.confirm_text(), "filter")


class TestDashboardDisplay:
    """Tests for frame drawing against a mocked curses screen."""

    @pytest.fixture
    def stdscr(self) -> MagicMock:
        screen = MagicMock()
        screen.getmaxyx.return_value = (40, 120)
        return screen

    @pytest.fixture
    def display(self, stdscr: MagicMock, model: DashboardModel, mocker) -> DashboardDisplay:
        mocker.patch("chotko.dashboard.display.CursesColors")
        return DashboardDisplay(stdscr, model)

    def test_tab_zones_registered(self, display: DashboardDisplay, model: DashboardModel):
        display.draw_screen(NOW)
        for i in range(4):
            assert model.zones.get(f"tab_{i}") is not None
        assert model.zones.resolve("tab", 2, 1) == 0

    def test_alert_rows_and_zones(
        self, display: DashboardDisplay, model: DashboardModel, stdscr: MagicMock
    ):
        update(model, ProblemsLoadedMsg([make_problem("1"), make_problem("2")]))
        display.draw_screen(NOW)
        assert "ALERTS (2)" in drawn_text(stdscr)
        # header is on row 3, the first alert row on row 4
        assert model.zones.resolve("alert", 5, 4) == 0
        assert model.zones.resolve("alert", 5, 5) == 1
        stdscr.refresh.assert_called_once()

    def test_empty_list(self, display: DashboardDisplay, model: DashboardModel, stdscr):
        display.draw_screen(NOW)
        assert "No alerts" in drawn_text(stdscr)
        stdscr.reset_mock()
        model.loading = True
        display.draw_screen(NOW)
        assert "Loading..." in drawn_text(stdscr)

    def test_command_hint_on_last_row(self, display: DashboardDisplay, stdscr: MagicMock):
        display.draw_screen(NOW)
        rows = {c.args[0]: c.args[2] for c in stdscr.addstr.call_args_list if c.args[0] == 39}
        assert rows[39] == COMMAND_HINT

    def test_graph_nodes(self, display: DashboardDisplay, model: DashboardModel, stdscr):
        model.tab = Tab.GRAPHS
        model.graphs.set_items([make_item("1", "system.cpu.util")])
        display.draw_screen(NOW)
        assert model.zones.resolve("graph_node", 5, 4) == 0
        assert "GRAPHS (1 items, 1 visible)" in drawn_text(stdscr)

    def test_graphs_loading(self, display: DashboardDisplay, model: DashboardModel, stdscr):
        model.tab = Tab.GRAPHS
        model.loading = True
        display.draw_screen(NOW)
        assert "Loading metrics..." in drawn_text(stdscr)

    def test_modal_drawn_as_overlay(
        self, display: DashboardDisplay, model: DashboardModel, stdscr: MagicMock
    ):
        """A modal is composed with noutrefresh and a single doupdate."""
        model.show_message("Info", "Saved")
        display.draw_screen(NOW)
        stdscr.noutrefresh.assert_called_once()
        stdscr.refresh.assert_not_called()
        display.curses_mod.newwin.assert_called_once()
        display.curses_mod.doupdate.assert_called_once()

    def test_detail_title(self, display: DashboardDisplay, stdscr: MagicMock):
        display.draw_screen(NOW)
        text = drawn_text(stdscr)
        assert "ALERT DETAIL" in text
        assert "Select an alert to view details" in text
