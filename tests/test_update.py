"""Tests for chotko/dashboard/update.py - message dispatch and key handling."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from chotko.dashboard.commands import Cmd
from chotko.dashboard.messages import (
    AcknowledgeResultMsg,
    ConnectedMsg,
    ErrorMsg,
    HostMacrosLoadedMsg,
    HostsLoadedMsg,
    HostTriggersLoadedMsg,
    HostUpdateResultMsg,
    IgnoreSavedMsg,
    ItemsLoadedMsg,
    KeyMsg,
    MacroUpdateResultMsg,
    MouseMsg,
    ProblemsLoadedMsg,
    QuitMsg,
    ResizeMsg,
    TickMsg,
    TriggerUpdateResultMsg,
)
from chotko.dashboard.model import DashboardModel, Mode, Pane, Tab
from chotko.dashboard.update import help_modal, update
from chotko.exceptions import APIError, IgnoreListError
from chotko.ignores import IgnoreRule
from chotko.zabbix.types import HostMacro, Trigger
from factories import make_host, make_item, make_problem

FAILURE = APIError(-32500, "Application error.")


def names(cmds: list[Cmd]) -> list[str]:
    return [c.name for c in cmds]


def press(model: DashboardModel, *keys: str) -> list[Cmd]:
    """Send keys one by one and return the commands of the last one."""
    cmds: list[Cmd] = []
    for key in keys:
        model, cmds = update(model, KeyMsg(key))
    return cmds


def type_text(model: DashboardModel, text: str) -> list[Cmd]:
    return press(model, *["space" if c == " " else c for c in text], "enter")


def load_problems(model: DashboardModel, problems) -> None:
    update(model, ProblemsLoadedMsg(problems))


def click(model: DashboardModel, x: int, y: int) -> list[Cmd]:
    _, cmds = update(model, MouseMsg(x, y, "left", "release"))
    return cmds


class TestTick:
    """Tests for the refresh timer."""

    def test_tick_survives_help_overlay(self, connected_model: DashboardModel):
        """A tick under the help modal still reschedules and starts a refresh."""
        connected_model.modal = help_modal()
        model, cmds = update(connected_model, TickMsg())
        assert "tick" in names(cmds)
        assert model.loading is True
        assert set(names(cmds)) == {"load_host_counts", "load_problems", "tick"}
        assert model.show_help

    def test_tick_under_error_modal(self, connected_model: DashboardModel):
        connected_model.show_error_modal("Oops", "failed")
        _, cmds = update(connected_model, TickMsg())
        assert "tick" in names(cmds)

    def test_tick_while_editor_open(self, connected_model: DashboardModel):
        connected_model.editor.show_triggers(make_host("1", "h"), [])
        _, cmds = update(connected_model, TickMsg())
        assert "tick" in names(cmds)

    def test_tick_disconnected_only_reschedules(self, model: DashboardModel):
        _, cmds = update(model, TickMsg())
        assert names(cmds) == ["tick"]
        assert model.loading is False

    def test_tick_while_loading_does_not_stack(self, connected_model: DashboardModel):
        connected_model.loading = True
        _, cmds = update(connected_model, TickMsg())
        assert names(cmds) == ["tick"]

    def test_refresh_tab_loader(self, connected_model: DashboardModel):
        """Refresh loads the active tab's data."""
        connected_model.tab = Tab.EVENTS
        cmds = press(connected_model, "r")
        assert set(names(cmds)) == {"load_host_counts", "load_events"}


class TestConnection:
    def test_connected_loads_alerts(self, model: DashboardModel):
        client = MagicMock()
        model, cmds = update(model, ConnectedMsg("7.0.0", client))
        assert model.connected
        assert model.client is client
        assert model.version == "7.0.0"
        assert set(names(cmds)) == {"load_problems", "load_host_counts"}

    def test_error_message_shows_modal(self, connected_model: DashboardModel):
        connected_model.loading = True
        err = RuntimeError("boom")
        model, _ = update(connected_model, ErrorMsg("Connection Failed", "Failed", err))
        assert model.loading is False
        assert model.show_error
        assert model.modal.title == "Connection Failed"
        assert model.modal.details == "boom"

    def test_load_failure_shows_modal(self, connected_model: DashboardModel):
        update(connected_model, ProblemsLoadedMsg(error=APIError(-1, "nope")))
        assert connected_model.modal.title == "Failed to Load Problems"
        assert connected_model.last_update


class TestModal:
    """Tests for help and error popups."""

    def test_help_key_opens(self, model: DashboardModel):
        press(model, "?")
        assert model.show_help
        assert model.modal.title == "Keyboard Shortcuts"

    @pytest.mark.parametrize("key", ["esc", "enter", "q", "?"])
    def test_dismiss_keys(self, model: DashboardModel, key: str):
        model.show_error_modal("Error", "bad")
        press(model, key)
        assert model.modal is None
        assert not model.quitting

    def test_other_keys_swallowed(self, connected_model: DashboardModel):
        """Keys other than dismiss keys do nothing while a modal is up."""
        load_problems(connected_model, [make_problem("1"), make_problem("2")])
        connected_model.show_error_modal("Error", "bad")
        cmds = press(connected_model, "j", "a")
        assert cmds == []
        assert connected_model.alert_list.cursor == 0
        assert connected_model.show_error

    def test_data_still_flows_under_modal(self, model: DashboardModel):
        model.show_error_modal("Error", "bad")
        load_problems(model, [make_problem("1")])
        assert model.alert_list.filtered_count() == 1

    def test_help_lists_sections(self):
        body = help_modal().body
        assert "Navigation" in body
        assert any("Quit" in line for line in body)


class TestMutations:
    """Each successful mutation schedules one reload; failures one error modal."""

    def test_acknowledge_flow(self, connected_model: DashboardModel):
        load_problems(connected_model, [make_problem("123")])
        cmds = press(connected_model, "a")
        assert names(cmds) == ["acknowledge"]

        result = cmds[0]()
        connected_model.client.acknowledge_problems.assert_called_once_with(["123"], "")
        assert result == AcknowledgeResultMsg(["123"])

        _, reload = update(connected_model, result)
        assert names(reload) == ["load_problems"]
        assert connected_model.modal is None

    def test_acknowledge_with_message(self, connected_model: DashboardModel):
        load_problems(connected_model, [make_problem("7")])
        press(connected_model, "A")
        assert connected_model.mode is Mode.ACK_MESSAGE
        cmds = type_text(connected_model, "on it")
        cmds[0]()
        connected_model.client.acknowledge_problems.assert_called_once_with(["7"], "on it")
        assert connected_model.mode is Mode.NORMAL

    def test_acknowledge_api_error(self, connected_model: DashboardModel):
        """A failing API call becomes a result message carrying the error."""
        connected_model.client.acknowledge_problems.side_effect = APIError(-32500, "denied")
        load_problems(connected_model, [make_problem("1")])
        result = press(connected_model, "a")[0]()
        assert isinstance(result.error, APIError)

    @pytest.mark.parametrize(
        ("msg", "expected"),
        [
            (AcknowledgeResultMsg(["1"]), ["load_problems"]),
            (
                TriggerUpdateResultMsg("t1", "10001", "disable"),
                ["load_hosts", "load_triggers:10001"],
            ),
            (MacroUpdateResultMsg("m1", "10001", "update"), ["load_macros:10001"]),
            (HostUpdateResultMsg("10001", "enable"), ["load_hosts"]),
        ],
    )
    def test_success_reloads(self, connected_model: DashboardModel, msg, expected: list[str]):
        _, cmds = update(connected_model, msg)
        assert names(cmds) == expected
        assert connected_model.modal is None

    @pytest.mark.parametrize(
        ("msg", "title"),
        [
            (AcknowledgeResultMsg(["1"], error=FAILURE), "Acknowledge Failed"),
            (TriggerUpdateResultMsg("t", "h", "enable", error=FAILURE), "Trigger Update Failed"),
            (MacroUpdateResultMsg("m", "h", "delete", error=FAILURE), "Macro Update Failed"),
            (HostUpdateResultMsg("h", "disable", error=FAILURE), "Host Update Failed"),
        ],
    )
    def test_failure_shows_one_modal(self, connected_model: DashboardModel, msg, title: str):
        _, cmds = update(connected_model, msg)
        assert cmds == []
        assert connected_model.modal.kind == "error"
        assert connected_model.modal.title == title

    def test_host_enable_toggle(self, connected_model: DashboardModel):
        host = make_host("5", "db")
        host.status = "1"
        update(connected_model, HostsLoadedMsg([host]))
        connected_model.tab = Tab.HOSTS
        cmds = press(connected_model, "e")
        assert names(cmds) == ["enable_host"]
        cmds[0]()
        connected_model.client.enable_host.assert_called_once_with("5")


class TestIgnoreFlow:
    """Tests for the local ignore list."""

    def test_confirm_adds_and_hides(self, connected_model: DashboardModel):
        load_problems(connected_model, [make_problem("1", trigger_id="99", name="High CPU")])
        press(connected_model, "i")
        assert connected_model.awaiting_ignore_confirm
        assert connected_model.status_message == "Ignore web-01 / High CPU? (y/n)"

        cmds = press(connected_model, "y")
        assert names(cmds) == ["save_ignores"]
        assert connected_model.ignores.is_ignored("10001", "99")
        assert connected_model.alert_list.filtered_count() == 0
        assert connected_model.status_message == "Ignored: web-01 / High CPU"

        saved = cmds[0]()
        assert saved == IgnoreSavedMsg("Ignored", "web-01 / High CPU")
        assert connected_model.ignores.path.exists()

    def test_cancel(self, model: DashboardModel):
        load_problems(model, [make_problem("1")])
        press(model, "i", "n")
        assert model.status_message == "Canceled"
        assert len(model.ignores) == 0

    def test_other_keys_wait_for_answer(self, model: DashboardModel):
        load_problems(model, [make_problem("1"), make_problem("2")])
        press(model, "i", "j")
        assert model.awaiting_ignore_confirm
        assert model.alert_list.cursor == 0

    def test_already_ignored(self, model: DashboardModel):
        model.ignores.add(
            IgnoreRule(host_id="10001", host_name="web-01", trigger_id="t1", trigger_name="x")
        )
        model.alert_list.set_ignore_predicate(None)
        load_problems(model, [make_problem("1")])
        press(model, "i")
        assert model.status_message == "Already ignored"
        assert not model.awaiting_ignore_confirm

    def test_only_on_alerts_tab(self, model: DashboardModel):
        load_problems(model, [make_problem("1")])
        model.tab = Tab.EVENTS
        press(model, "i")
        assert not model.awaiting_ignore_confirm

    def test_save_failure_keeps_rule(self, model: DashboardModel):
        update(model, IgnoreSavedMsg("Ignored", "a / b", error=IgnoreListError("disk full")))
        assert model.status_message == "Ignored (save failed: disk full)"

    def test_unignore_command(self, model: DashboardModel):
        model.ignores.add(
            IgnoreRule(host_id="10001", host_name="web-01", trigger_id="t1", trigger_name="CPU")
        )
        load_problems(model, [make_problem("1")])
        assert model.alert_list.filtered_count() == 0

        press(model, ":")
        cmds = type_text(model, "unignore 1")
        assert names(cmds) == ["save_ignores"]
        assert model.status_message == "Removed: web-01 / CPU"
        assert model.alert_list.filtered_count() == 1

    @pytest.mark.parametrize(
        ("text", "status"),
        [
            ("unignore", "Usage: :unignore N"),
            ("unignore x", "Invalid index: x"),
            ("unignore 0", "Invalid index: 0"),
            ("unignore 3", "Invalid index: 3"),
        ],
    )
    def test_unignore_errors(self, model: DashboardModel, text: str, status: str):
        press(model, ":")
        cmds = type_text(model, text)
        assert cmds == []
        assert model.status_message == status

    def test_list_ignores(self, model: DashboardModel):
        press(model, "I")
        assert model.modal.title == "Ignored Alerts"
        assert model.modal.body[0] == "No ignored alerts."

        model.ignores.add(
            IgnoreRule(host_id="1", host_name="db", trigger_id="2", trigger_name="Disk")
        )
        press(model, "esc", "I")
        assert " 1. db / Disk" in model.modal.body


class TestCommandBar:
    """Tests for ':' commands and the filter bar."""

    @pytest.mark.parametrize("text", ["q", "quit", "exit"])
    def test_quit(self, model: DashboardModel, text: str):
        press(model, ":")
        type_text(model, text)
        assert model.quitting

    def test_help(self, model: DashboardModel):
        press(model, ":")
        type_text(model, "help")
        assert model.show_help

    def test_refresh(self, connected_model: DashboardModel):
        press(connected_model, ":")
        cmds = type_text(connected_model, "refresh")
        assert "load_problems" in names(cmds)

    def test_unknown_command_is_ignored(self, model: DashboardModel):
        press(model, ":")
        assert type_text(model, "frobnicate") == []
        assert model.mode is Mode.NORMAL
        assert not model.command_bar.is_active()

    def test_escape_cancels(self, model: DashboardModel):
        press(model, "/", "x", "esc")
        assert model.mode is Mode.NORMAL
        assert model.text_filter == ""

    def test_filter_applies_to_active_list(self, model: DashboardModel):
        load_problems(
            model,
            [make_problem("1", name="Disk full"), make_problem("2", name="High CPU")],
        )
        press(model, "/")
        assert model.mode is Mode.FILTER
        type_text(model, "cpu")
        assert model.text_filter == "cpu"
        assert [p.eventid for p in model.alert_list.filtered] == ["2"]

    def test_quit_key_inside_bar_is_text(self, model: DashboardModel):
        press(model, "/", "q")
        assert not model.quitting
        assert model.command_bar.value == "q"


class TestKeys:
    """Tests for global, navigation and filter keys."""

    def test_quit(self, model: DashboardModel):
        press(model, "q")
        assert model.quitting

    def test_quit_message(self, model: DashboardModel):
        model, _ = update(model, QuitMsg())
        assert model.quitting

    def test_status_message_cleared_on_key(self, model: DashboardModel):
        model.status_message = "Canceled"
        press(model, "j")
        assert model.status_message == ""

    def test_severity_keys(self, model: DashboardModel):
        load_problems(model, [make_problem(str(i), severity=i) for i in range(6)])
        press(model, "4")
        assert model.min_severity == 4
        assert model.alert_list.filtered_count() == 2
        press(model, "ctrl+l")
        assert model.min_severity == 0
        assert model.alert_list.filtered_count() == 6

    def test_severity_ignored_off_alerts_tab(self, model: DashboardModel):
        model.tab = Tab.HOSTS
        press(model, "3")
        assert model.min_severity == 0

    def test_tab_cycle_wraps(self, model: DashboardModel):
        press(model, "[")
        assert model.tab is Tab.GRAPHS
        press(model, "]")
        assert model.tab is Tab.ALERTS
        press(model, "f3")
        assert model.tab is Tab.EVENTS

    def test_switch_tab_lazy_load(self, connected_model: DashboardModel):
        """An empty tab is loaded on first visit and not reloaded once it has data."""
        cmds = press(connected_model, "]")
        assert names(cmds) == ["load_hosts"]
        assert connected_model.loading

        update(connected_model, HostsLoadedMsg([make_host("1", "a")]))
        press(connected_model, "[")
        assert press(connected_model, "]") == []

    def test_focus_cycle(self, model: DashboardModel):
        press(model, "tab")
        assert model.focused is Pane.DETAIL
        assert model.detail.focused
        assert not model.alert_list.focused
        press(model, "shift+tab")
        assert model.focused is Pane.LIST
        assert model.alert_list.focused

    def test_navigation_updates_detail(self, model: DashboardModel):
        load_problems(model, [make_problem("1"), make_problem("2")])
        press(model, "j")
        assert model.detail.problem.eventid == "2"

    def test_detail_focus_routes_keys(self, model: DashboardModel):
        load_problems(model, [make_problem("1"), make_problem("2")])
        press(model, "tab", "j")
        assert model.alert_list.cursor == 0

    def test_triggers_key_requests_load(self, connected_model: DashboardModel):
        load_problems(connected_model, [make_problem("1", trigger_id="55")])
        cmds = press(connected_model, "t")
        assert names(cmds) == ["load_triggers:10001"]

    def test_macros_key_without_selection(self, connected_model: DashboardModel):
        assert press(connected_model, "m") == []

    def test_resize(self, model: DashboardModel):
        update(model, ResizeMsg(100, 30))
        assert model.layout.width == 100
        assert model.alert_list.height == 30 - 7


class TestEditor:
    """Tests for the trigger and macro editor overlay."""

    def open_triggers(self, model: DashboardModel) -> None:
        load_problems(model, [make_problem("1", trigger_id="t9")])
        trigger = Trigger.from_dict({"triggerid": "t9", "description": "High CPU", "status": "0"})
        update(model, HostTriggersLoadedMsg("10001", [trigger], select_trigger_id="t9"))

    def test_triggers_open_editor(self, connected_model: DashboardModel):
        self.open_triggers(connected_model)
        assert connected_model.editor.visible
        assert connected_model.editor.title == "Triggers: web-01"

    def test_toggle_trigger(self, connected_model: DashboardModel):
        self.open_triggers(connected_model)
        press(connected_model, "space")
        assert connected_model.editor.is_confirming()
        cmds = press(connected_model, "y")
        assert names(cmds) == ["disable_trigger"]
        assert not connected_model.editor.visible
        cmds[0]()
        connected_model.client.disable_trigger.assert_called_once_with("t9")

    def test_editor_captures_keys(self, connected_model: DashboardModel):
        self.open_triggers(connected_model)
        press(connected_model, "q")
        assert not connected_model.quitting
        press(connected_model, "esc")
        assert not connected_model.editor.visible

    def test_data_flows_while_open(self, connected_model: DashboardModel):
        self.open_triggers(connected_model)
        load_problems(connected_model, [make_problem("1"), make_problem("2")])
        assert connected_model.alert_list.filtered_count() == 2
        assert connected_model.editor.visible

    def test_edit_macro(self, connected_model: DashboardModel):
        load_problems(connected_model, [make_problem("1")])
        macro = HostMacro.from_dict({"hostmacroid": "m1", "macro": "{$PORT}", "value": "80"})
        update(connected_model, HostMacrosLoadedMsg("10001", [macro]))
        assert connected_model.editor.visible
        cmds = press(connected_model, "e", "backspace", "backspace", "4", "4", "3", "enter")
        assert names(cmds) == ["update_macro"]
        cmds[0]()
        connected_model.client.update_host_macro.assert_called_once_with("m1", "443")

    def test_delete_macro(self, connected_model: DashboardModel):
        load_problems(connected_model, [make_problem("1")])
        macro = HostMacro.from_dict({"hostmacroid": "m1", "macro": "{$PORT}", "value": "80"})
        update(connected_model, HostMacrosLoadedMsg("10001", [macro]))
        cmds = press(connected_model, "d", "y")
        assert names(cmds) == ["delete_macro"]
        assert not connected_model.editor.visible

    def test_unknown_host_does_not_open(self, connected_model: DashboardModel):
        update(connected_model, HostTriggersLoadedMsg("404", []))
        assert not connected_model.editor.visible


class TestMouse:
    """Tests for mouse routing through registered zones."""

    def test_click_row(self, model: DashboardModel):
        load_problems(model, [make_problem(str(i)) for i in range(5)])
        model.zones.register("alert_3", 1, 7, 40)
        click(model, 5, 7)
        assert model.alert_list.cursor == 3
        assert model.detail.problem.eventid == "3"

    def test_click_tab(self, connected_model: DashboardModel):
        connected_model.zones.register("tab_2", 20, 1, 8)
        cmds = click(connected_model, 22, 1)
        assert connected_model.tab is Tab.EVENTS
        assert names(cmds) == ["load_events"]

    def test_click_detail_focuses_it(self, model: DashboardModel):
        click(model, 80, 10)
        assert model.focused is Pane.DETAIL
        click(model, 5, 10)
        assert model.focused is Pane.LIST

    def test_click_outside_content(self, model: DashboardModel):
        click(model, 5, 39)
        assert model.focused is Pane.LIST

    def test_wheel_scrolls_pane_under_pointer(self, model: DashboardModel):
        load_problems(model, [make_problem(str(i)) for i in range(50)])
        update(model, MouseMsg(5, 10, "wheel_down", "press"))
        assert model.alert_list.offset == 3
        assert model.alert_list.cursor == 0
        update(model, MouseMsg(5, 10, "wheel_up", "press"))
        assert model.alert_list.offset == 0

    def test_click_graph_host_fetches_history(self, connected_model: DashboardModel):
        press(connected_model, "f4")
        update(
            connected_model,
            ItemsLoadedMsg([make_item("1", "system.cpu.util", host_id="h1", host_name="alpha")]),
        )
        connected_model.zones.register("graph_node_0", 1, 4, 40)
        cmds = click(connected_model, 5, 4)
        assert names(cmds) == ["load_history:h1"]
        assert connected_model.graphs.is_host_loading("h1")
