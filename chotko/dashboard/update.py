"""The dashboard's dispatch function.

:func:`update` applies one message to the model and returns the commands
to run next. It never performs I/O itself; everything slow happens in the
commands it returns.

Dispatch order:

1. Refresh ticks, always, so the timer survives any overlay.
2. The trigger/macro editor, while it is open (keys and editor requests).
3. Help and error popups, dismissed by ``esc``, ``enter``, ``q`` or ``?``.
4. The y/n prompt of a pending ignore.
5. The command bar, while it is active.
6. Global, navigation and action keys.
7. Everything else goes to the focused pane.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from ..constants import MOUSE_SCROLL_LINES
from ..exceptions import DuplicateIgnoreError
from ..ignores import IgnoreRule
from ..utils import truncate
from . import commands
from .command_bar import BarMode
from .commands import Cmd, batch
from .messages import (
    AcknowledgeResultMsg,
    ClearErrorMsg,
    ConnectedMsg,
    DisconnectedMsg,
    EditorCloseMsg,
    EditorOpenMsg,
    ErrorMsg,
    EventsLoadedMsg,
    GraphNodeExpandedMsg,
    HostCountsLoadedMsg,
    HostHistoryLoadedMsg,
    HostMacrosLoadedMsg,
    HostsLoadedMsg,
    HostTriggersLoadedMsg,
    HostUpdateResultMsg,
    IgnoreSavedMsg,
    ItemsLoadedMsg,
    KeyMsg,
    MacroDeleteMsg,
    MacroEditedMsg,
    MacroUpdateResultMsg,
    MouseMsg,
    ProblemsLoadedMsg,
    QuitMsg,
    ResizeMsg,
    TickMsg,
    TriggerToggleMsg,
    TriggerUpdateResultMsg,
)
from .model import TAB_COUNT, DashboardModel, Modal, Mode, Pane, Tab

logger = logging.getLogger(__name__)

Result = tuple[DashboardModel, list[Cmd]]

MODAL_DISMISS_KEYS = ("esc", "enter", "q", "?")
QUIT_KEYS = ("q", "ctrl+c")
TAB_KEYS = {"f1": Tab.ALERTS, "f2": Tab.HOSTS, "f3": Tab.EVENTS, "f4": Tab.GRAPHS}
SEVERITY_KEYS = ("0", "1", "2", "3", "4", "5")

NO_IGNORES_TEXT = "No ignored alerts.\n\nPress 'i' on an alert to ignore it."


def update(model: DashboardModel, msg: Any) -> Result:
    """Apply ``msg`` to ``model`` and return it with the commands to run."""
    if isinstance(msg, TickMsg):
        return _on_tick(model)

    if model.editor.visible:
        handled = _editor_update(model, msg)
        if handled is not None:
            return handled

    if model.modal is not None and isinstance(msg, (KeyMsg, MouseMsg)):
        if isinstance(msg, KeyMsg) and msg.key in MODAL_DISMISS_KEYS:
            model.hide_modal()
        return model, []

    if isinstance(msg, KeyMsg):
        return _on_key(model, msg.key)
    if isinstance(msg, MouseMsg):
        return _on_mouse(model, msg)
    if isinstance(msg, ResizeMsg):
        model.set_size(msg.width, msg.height)
        return model, []
    if isinstance(msg, QuitMsg):
        model.quitting = True
        return model, []

    handler = _HANDLERS.get(type(msg))
    if handler is not None:
        return handler(model, msg)
    logger.debug("unhandled message %s", type(msg).__name__)
    return model, []


# -- command helpers -------------------------------------------------------


def _tick(model: DashboardModel) -> Cmd:
    return commands.tick_cmd(model.refresh_interval, model.cancel_event)


def _tab_loader(model: DashboardModel, tab: Tab) -> Cmd | None:
    client = model.client
    if client is None:
        return None
    if tab is Tab.HOSTS:
        return commands.load_hosts_cmd(client)
    if tab is Tab.EVENTS:
        return commands.load_events_cmd(client)
    if tab is Tab.GRAPHS:
        return commands.load_items_cmd(client, model.config.graph_categories())
    return commands.load_problems_cmd(client, model.min_severity)


def _load_current_tab(model: DashboardModel) -> list[Cmd]:
    if model.client is None:
        return []
    return batch(commands.load_host_counts_cmd(model.client), _tab_loader(model, model.tab))


def _refresh(model: DashboardModel) -> list[Cmd]:
    """Start a refresh unless one is already running."""
    if model.loading or not model.connected:
        return []
    model.loading = True
    return _load_current_tab(model)


def _host_history(model: DashboardModel, host_id: str) -> Cmd | None:
    items = model.graphs.get_host_items(host_id)
    if model.client is None or not items:
        model.graphs.set_host_loading(host_id, False)
        return None
    return commands.load_host_history_cmd(
        model.client, host_id, items, model.config.history_hours()
    )


# -- tick & connection -----------------------------------------------------


def _on_tick(model: DashboardModel) -> Result:
    cmds = _refresh(model)
    cmds.append(_tick(model))
    return model, cmds


def _on_connected(model: DashboardModel, msg: ConnectedMsg) -> Result:
    model.connected = True
    model.version = msg.version
    model.client = msg.client
    logger.debug("connected to Zabbix %s", msg.version)
    return model, batch(
        commands.load_problems_cmd(msg.client, model.min_severity),
        commands.load_host_counts_cmd(msg.client),
    )


def _on_disconnected(model: DashboardModel, msg: DisconnectedMsg) -> Result:
    model.connected = False
    if msg.error is not None:
        model.show_error_modal("Connection Lost", "Lost connection to Zabbix server", msg.error)
    return model, []


def _on_error(model: DashboardModel, msg: ErrorMsg) -> Result:
    model.loading = False
    model.show_error_modal(msg.title, msg.message, msg.error)
    return model, []


def _on_clear_error(model: DashboardModel, msg: ClearErrorMsg) -> Result:
    model.hide_modal()
    return model, []


# -- data loaded -----------------------------------------------------------


def _loaded(model: DashboardModel) -> None:
    model.loading = False
    model.last_update = dt.datetime.now().strftime("%H:%M:%S")


def _on_problems(model: DashboardModel, msg: ProblemsLoadedMsg) -> Result:
    _loaded(model)
    if msg.error is not None:
        model.show_error_modal(
            "Failed to Load Problems", "Could not retrieve problems from Zabbix", msg.error
        )
        return model, []
    model.problems = msg.problems
    model.alert_list.set_items(msg.problems)
    if model.tab is Tab.ALERTS:
        model.update_detail()
    return model, []


def _on_hosts(model: DashboardModel, msg: HostsLoadedMsg) -> Result:
    _loaded(model)
    if msg.error is not None:
        model.show_error_modal(
            "Failed to Load Hosts", "Could not retrieve hosts from Zabbix", msg.error
        )
        return model, []
    model.hosts = msg.hosts
    model.host_list.set_items(msg.hosts)
    if model.tab is Tab.HOSTS:
        model.update_detail()
    return model, []


def _on_events(model: DashboardModel, msg: EventsLoadedMsg) -> Result:
    _loaded(model)
    if msg.error is not None:
        model.show_error_modal(
            "Failed to Load Events", "Could not retrieve events from Zabbix", msg.error
        )
        return model, []
    model.events = msg.events
    model.event_list.set_items(msg.events)
    if model.tab is Tab.EVENTS:
        model.update_detail()
    return model, []


def _on_items(model: DashboardModel, msg: ItemsLoadedMsg) -> Result:
    _loaded(model)
    if msg.error is not None:
        model.show_error_modal(
            "Failed to Load Items", "Could not retrieve items from Zabbix", msg.error
        )
        return model, []
    model.items = msg.items
    model.graphs.set_items(msg.items)
    if model.tab is Tab.GRAPHS:
        model.update_detail()
    return model, []


def _on_history(model: DashboardModel, msg: HostHistoryLoadedMsg) -> Result:
    model.graphs.set_host_loading(msg.host_id, False)
    if msg.error is not None:
        return model, []
    model.graphs.merge_history(msg.history)
    if model.tab is Tab.GRAPHS:
        model.update_detail()
    return model, []


def _on_host_counts(model: DashboardModel, msg: HostCountsLoadedMsg) -> Result:
    if msg.error is None:
        model.host_counts = msg.counts
    return model, []


def _on_graph_expanded(model: DashboardModel, msg: GraphNodeExpandedMsg) -> Result:
    return model, batch(_host_history(model, msg.host_id))


# -- editor data & results -------------------------------------------------


def _on_host_triggers(model: DashboardModel, msg: HostTriggersLoadedMsg) -> Result:
    if msg.error is not None:
        model.show_error_modal(
            "Failed to Load Triggers", "Could not retrieve triggers from Zabbix", msg.error
        )
        return model, []
    host = model.find_host(msg.host_id)
    if host is not None:
        model.editor.show_triggers(host, msg.triggers, msg.select_trigger_id)
    return model, []


def _on_host_macros(model: DashboardModel, msg: HostMacrosLoadedMsg) -> Result:
    if msg.error is not None:
        model.show_error_modal(
            "Failed to Load Macros", "Could not retrieve macros from Zabbix", msg.error
        )
        return model, []
    host = model.find_host(msg.host_id)
    if host is not None:
        model.editor.show_macros(host, msg.macros)
    return model, []


def _on_ack_result(model: DashboardModel, msg: AcknowledgeResultMsg) -> Result:
    if msg.error is not None:
        model.show_error_modal("Acknowledge Failed", "Could not acknowledge problem", msg.error)
        return model, []
    if model.client is None:
        return model, []
    return model, [commands.load_problems_cmd(model.client, model.min_severity)]


def _on_trigger_result(model: DashboardModel, msg: TriggerUpdateResultMsg) -> Result:
    if msg.error is not None:
        model.show_error_modal("Trigger Update Failed", "Could not update trigger", msg.error)
        return model, []
    if model.client is None:
        return model, []
    cmds = [commands.load_hosts_cmd(model.client)]
    if msg.host_id:
        cmds.append(commands.load_host_triggers_cmd(model.client, msg.host_id, msg.trigger_id))
    return model, cmds


def _on_macro_result(model: DashboardModel, msg: MacroUpdateResultMsg) -> Result:
    if msg.error is not None:
        model.show_error_modal("Macro Update Failed", "Could not update macro", msg.error)
        return model, []
    if model.client is None or not msg.host_id:
        return model, []
    return model, [commands.load_host_macros_cmd(model.client, msg.host_id)]


def _on_host_result(model: DashboardModel, msg: HostUpdateResultMsg) -> Result:
    if msg.error is not None:
        model.show_error_modal("Host Update Failed", "Could not update host", msg.error)
        return model, []
    if model.client is None:
        return model, []
    return model, [commands.load_hosts_cmd(model.client)]


def _on_ignore_saved(model: DashboardModel, msg: IgnoreSavedMsg) -> Result:
    if msg.error is not None:
        model.status_message = f"{msg.action} (save failed: {msg.error})"
    else:
        model.status_message = f"{msg.action}: {msg.label}"
    return model, []


def _on_editor_open(model: DashboardModel, msg: EditorOpenMsg) -> Result:
    if model.client is None or not msg.host_id:
        return model, []
    if msg.mode == "macros":
        return model, [commands.load_host_macros_cmd(model.client, msg.host_id)]
    return model, [commands.load_host_triggers_cmd(model.client, msg.host_id)]


def _on_editor_close(model: DashboardModel, msg: EditorCloseMsg) -> Result:
    model.editor.hide()
    return model, []


def _on_trigger_toggle(model: DashboardModel, msg: TriggerToggleMsg) -> Result:
    model.editor.hide()
    if model.client is None:
        return model, []
    return model, [
        commands.toggle_trigger_cmd(model.client, msg.trigger_id, msg.host_id, msg.enable)
    ]


def _on_macro_edited(model: DashboardModel, msg: MacroEditedMsg) -> Result:
    if model.client is None:
        return model, []
    return model, [commands.update_macro_cmd(model.client, msg.macro_id, msg.host_id, msg.value)]


def _on_macro_delete(model: DashboardModel, msg: MacroDeleteMsg) -> Result:
    model.editor.hide()
    if model.client is None:
        return model, []
    return model, [commands.delete_macro_cmd(model.client, msg.macro_id, msg.host_id)]


_HANDLERS = {
    ConnectedMsg: _on_connected,
    DisconnectedMsg: _on_disconnected,
    ErrorMsg: _on_error,
    ClearErrorMsg: _on_clear_error,
    ProblemsLoadedMsg: _on_problems,
    HostsLoadedMsg: _on_hosts,
    EventsLoadedMsg: _on_events,
    ItemsLoadedMsg: _on_items,
    HostHistoryLoadedMsg: _on_history,
    HostCountsLoadedMsg: _on_host_counts,
    GraphNodeExpandedMsg: _on_graph_expanded,
    HostTriggersLoadedMsg: _on_host_triggers,
    HostMacrosLoadedMsg: _on_host_macros,
    AcknowledgeResultMsg: _on_ack_result,
    TriggerUpdateResultMsg: _on_trigger_result,
    MacroUpdateResultMsg: _on_macro_result,
    HostUpdateResultMsg: _on_host_result,
    IgnoreSavedMsg: _on_ignore_saved,
    EditorOpenMsg: _on_editor_open,
    EditorCloseMsg: _on_editor_close,
    TriggerToggleMsg: _on_trigger_toggle,
    MacroEditedMsg: _on_macro_edited,
    MacroDeleteMsg: _on_macro_delete,
}

_EDITOR_REQUESTS = {
    TriggerToggleMsg: _on_trigger_toggle,
    MacroEditedMsg: _on_macro_edited,
    MacroDeleteMsg: _on_macro_delete,
}


def _editor_update(model: DashboardModel, msg: Any) -> Result | None:
    """Route input to the open editor.

    Returns None for messages the editor does not own, so data and result
    messages keep flowing through the normal handlers.
    """
    if isinstance(msg, KeyMsg):
        request = model.editor.handle_key(msg.key)
        if request is not None:
            return _EDITOR_REQUESTS[type(request)](model, request)
        return model, []
    if isinstance(msg, MouseMsg):
        return model, []
    if isinstance(msg, ResizeMsg):
        model.set_size(msg.width, msg.height)
        return model, []
    handler = _EDITOR_REQUESTS.get(type(msg))
    if handler is not None:
        return handler(model, msg)
    return None


# -- keys ------------------------------------------------------------------


def _on_key(model: DashboardModel, key: str) -> Result:
    if model.awaiting_ignore_confirm:
        return _ignore_confirm(model, key)
    if model.command_bar.is_active():
        return _command_bar_key(model, key)

    model.status_message = ""
    for handler in (_global_key, _navigation_key, _action_key):
        result = handler(model, key)
        if result is not None:
            return result
    return _forward_to_focused(model, key)


def _global_key(model: DashboardModel, key: str) -> Result | None:
    if key in QUIT_KEYS:
        model.quitting = True
        return model, []
    if key == "?":
        model.modal = help_modal()
        return model, []
    if key == "r":
        return model, _refresh(model)
    return None


def _navigation_key(model: DashboardModel, key: str) -> Result | None:
    if key in ("]", "L"):
        return switch_tab(model, model.tab + 1)
    if key in ("[", "H"):
        return switch_tab(model, model.tab - 1)
    if key in TAB_KEYS:
        return switch_tab(model, TAB_KEYS[key])
    if key == "tab":
        model.cycle_focus(1)
        return model, []
    if key == "shift+tab":
        model.cycle_focus(-1)
        return model, []
    return None


def _action_key(model: DashboardModel, key: str) -> Result | None:
    if key == "a":
        problem = model.alert_list.selected() if model.tab is Tab.ALERTS else None
        if problem is not None and model.client is not None:
            return model, [commands.acknowledge_cmd(model.client, [problem.eventid])]
        return model, []
    if key == "A":
        if model.tab is Tab.ALERTS and model.alert_list.selected() is not None:
            _enter_mode(model, Mode.ACK_MESSAGE, BarMode.ACK_MESSAGE)
        return model, []
    if key == "/":
        _enter_mode(model, Mode.FILTER, BarMode.FILTER)
        return model, []
    if key == ":":
        _enter_mode(model, Mode.COMMAND, BarMode.COMMAND)
        return model, []
    if key in SEVERITY_KEYS:
        if model.tab is Tab.ALERTS:
            model.min_severity = int(key)
            model.alert_list.set_min_severity(model.min_severity)
            model.update_detail()
        return model, []
    if key == "t":
        host_id, trigger_id = model.selected_host_and_trigger()
        if host_id and model.client is not None:
            return model, [commands.load_host_triggers_cmd(model.client, host_id, trigger_id)]
        return model, []
    if key == "m":
        host_id = model.selected_host_id()
        if host_id and model.client is not None:
            return model, [commands.load_host_macros_cmd(model.client, host_id)]
        return model, []
    if key == "e":
        host = model.host_list.selected() if model.tab is Tab.HOSTS else None
        if host is not None and model.client is not None:
            return model, [
                commands.toggle_host_cmd(model.client, host.hostid, not host.is_monitored())
            ]
        return model, []
    if key == "ctrl+l":
        clear_filters(model)
        return model, []
    if key == "i":
        return _start_ignore(model)
    if key == "I":
        show_ignores(model)
        return model, []
    return None


def _enter_mode(model: DashboardModel, mode: Mode, bar_mode: BarMode) -> None:
    model.mode = mode
    model.command_bar.activate(bar_mode)


def _forward_to_focused(model: DashboardModel, key: str) -> Result:
    if model.focused is Pane.DETAIL:
        model.detail.handle_key(key)
        return model, []
    if model.tab is Tab.GRAPHS:
        _, host_id = model.graphs.handle_key(key)
        model.update_detail()
        return model, batch(_host_history(model, host_id) if host_id else None)
    pane = model.active_list()
    if pane is not None and pane.handle_key(key):
        model.update_detail()
    return model, []


def switch_tab(model: DashboardModel, tab: int) -> Result:
    """Activate ``tab`` (wrapping) and lazily load it when it has no data."""
    new_tab = Tab(tab % TAB_COUNT)
    old_tab = model.tab
    model.tab = new_tab
    model.update_list_focus()
    model.update_detail()
    if new_tab is old_tab or not model.connected or model.has_tab_data(new_tab):
        return model, []
    model.loading = True
    return model, batch(_tab_loader(model, new_tab))


def clear_filters(model: DashboardModel) -> None:
    model.min_severity = 0
    model.text_filter = ""
    model.alert_list.min_severity = 0
    for pane in (model.alert_list, model.host_list, model.event_list):
        pane.set_text_filter("")
    model.update_detail()


# -- command bar -----------------------------------------------------------


def _command_bar_key(model: DashboardModel, key: str) -> Result:
    bar = model.command_bar
    if key == "esc":
        model.mode = Mode.NORMAL
        bar.hide()
        return model, []
    if key != "enter":
        bar.handle_key(key)
        return model, []

    value, bar_mode = bar.value, bar.mode
    model.mode = Mode.NORMAL
    bar.hide()
    if bar_mode is BarMode.FILTER:
        model.text_filter = value
        pane = model.active_list()
        if pane is not None:
            pane.set_text_filter(value)
            model.update_detail()
        return model, []
    if bar_mode is BarMode.ACK_MESSAGE:
        problem = model.alert_list.selected() if model.tab is Tab.ALERTS else None
        if problem is not None and model.client is not None:
            return model, [commands.acknowledge_cmd(model.client, [problem.eventid], value)]
        return model, []
    return execute_command(model, value)


def execute_command(model: DashboardModel, text: str) -> Result:
    """Run a ``:`` command."""
    cmd = text.strip()
    if cmd in ("q", "quit", "exit"):
        model.quitting = True
    elif cmd in ("r", "refresh"):
        return model, _refresh(model)
    elif cmd == "help":
        model.modal = help_modal()
    elif cmd == "ignores":
        show_ignores(model)
    elif cmd == "unignore" or cmd.startswith("unignore "):
        return _unignore(model, cmd)
    return model, []


# -- ignores ---------------------------------------------------------------


def _short_label(rule: IgnoreRule) -> str:
    return f"{rule.host_name} / {truncate(rule.trigger_name, 20)}"


def _start_ignore(model: DashboardModel) -> Result:
    if model.tab is not Tab.ALERTS:
        return model, []
    problem = model.alert_list.selected()
    if problem is None:
        return model, []
    host_id, trigger_id = model.selected_host_and_trigger()
    if not host_id or not trigger_id:
        model.status_message = "Cannot ignore: no trigger associated"
        return model, []
    if model.ignores is not None and model.ignores.is_ignored(host_id, trigger_id):
        model.status_message = "Already ignored"
        return model, []
    model.pending_ignore = IgnoreRule(
        host_id=host_id,
        host_name=problem.host_name(),
        trigger_id=trigger_id,
        trigger_name=problem.name,
    )
    model.awaiting_ignore_confirm = True
    model.status_message = f"Ignore {problem.host_name()} / {truncate(problem.name, 30)}? (y/n)"
    return model, []


def _ignore_confirm(model: DashboardModel, key: str) -> Result:
    if key in ("n", "N", "esc"):
        model.status_message = "Canceled"
        model.pending_ignore = None
        model.awaiting_ignore_confirm = False
        return model, []
    if key not in ("y", "Y"):
        return model, []

    rule = model.pending_ignore
    model.pending_ignore = None
    model.awaiting_ignore_confirm = False
    if model.ignores is None or rule is None:
        return model, []
    try:
        model.ignores.add(rule)
    except DuplicateIgnoreError as e:
        model.status_message = str(e)
        return model, []
    label = _short_label(rule)
    model.status_message = f"Ignored: {label}"
    model.alert_list.set_ignore_predicate(model.ignores.is_ignored)
    model.update_detail()
    return model, [commands.save_ignores_cmd(model.ignores, "Ignored", label)]


def _unignore(model: DashboardModel, cmd: str) -> Result:
    parts = cmd.split()
    if len(parts) != 2:
        model.status_message = "Usage: :unignore N"
        return model, []
    try:
        index = int(parts[1])
    except ValueError:
        index = 0
    if index < 1:
        model.status_message = f"Invalid index: {parts[1]}"
        return model, []
    if model.ignores is None:
        model.status_message = "No ignore list loaded"
        return model, []
    removed = model.ignores.remove(index)
    if removed is None:
        model.status_message = f"Invalid index: {index}"
        return model, []
    label = _short_label(removed)
    model.status_message = f"Removed: {label}"
    model.alert_list.set_ignore_predicate(model.ignores.is_ignored)
    model.update_detail()
    return model, [commands.save_ignores_cmd(model.ignores, "Removed", label)]


def show_ignores(model: DashboardModel) -> None:
    if model.ignores is None or len(model.ignores) == 0:
        model.show_message("Ignored Alerts", NO_IGNORES_TEXT)
        return
    lines = ["Ignored host/trigger pairs:", ""]
    for i, rule in enumerate(model.ignores.rules(), start=1):
        lines.append(f"{i:2d}. {rule.host_name} / {truncate(rule.trigger_name, 40)}")
    lines += ["", "Use :unignore N to remove a rule."]
    model.show_message("Ignored Alerts", "\n".join(lines))


# -- mouse -----------------------------------------------------------------


def _on_mouse(model: DashboardModel, msg: MouseMsg) -> Result:
    if msg.button == "wheel_up":
        return _scroll(model, -MOUSE_SCROLL_LINES, msg.x, msg.y)
    if msg.button == "wheel_down":
        return _scroll(model, MOUSE_SCROLL_LINES, msg.x, msg.y)
    if msg.button == "left" and msg.action == "release":
        return _click(model, msg.x, msg.y)
    return model, []


def _scroll(model: DashboardModel, delta: int, x: int, y: int) -> Result:
    """Scroll the pane under the pointer, which need not be the focused one."""
    if not model.layout.in_content(y):
        return model, []
    if x < model.layout.list_pane_width:
        if model.tab is Tab.GRAPHS:
            model.graphs.scroll(delta)
        else:
            pane = model.active_list()
            if pane is not None:
                pane.scroll(delta)
    else:
        model.detail.scroll(delta)
    return model, []


def _click(model: DashboardModel, x: int, y: int) -> Result:
    tab = model.zones.resolve("tab", x, y)
    if tab is not None and 0 <= tab < TAB_COUNT:
        return switch_tab(model, tab)
    if not model.layout.in_content(y):
        return model, []
    if x >= model.layout.list_pane_width:
        if model.focused is not Pane.DETAIL:
            model.set_focus(Pane.DETAIL)
        return model, []
    if model.focused is not Pane.LIST:
        model.set_focus(Pane.LIST)
    return _list_click(model, x, y)


ROW_ZONE_PREFIX = {Tab.ALERTS: "alert", Tab.HOSTS: "host", Tab.EVENTS: "event"}


def _list_click(model: DashboardModel, x: int, y: int) -> Result:
    if model.tab is Tab.GRAPHS:
        index = model.zones.resolve("graph_node", x, y)
        if index is None:
            return model, []
        host_id = model.graphs.click_node(index)
        model.update_detail()
        return model, batch(_host_history(model, host_id) if host_id else None)
    index = model.zones.resolve(ROW_ZONE_PREFIX[model.tab], x, y)
    pane = model.active_list()
    if index is not None and pane is not None:
        pane.set_cursor(index)
        model.update_detail()
    return model, []


# -- help ------------------------------------------------------------------

HELP_SECTIONS = [
    (
        "Navigation",
        [
            ("↑/k", "Move up"),
            ("↓/j", "Move down"),
            ("PgUp/Ctrl+U", "Page up"),
            ("PgDn/Ctrl+D", "Page down"),
            ("Home/g", "Go to top"),
            ("End/G", "Go to bottom"),
        ],
    ),
    (
        "Tabs & Panes",
        [
            ("]/L", "Next tab"),
            ("[/H", "Previous tab"),
            ("F1-F4", "Jump to tab"),
            ("Tab", "Next pane"),
            ("Shift+Tab", "Previous pane"),
        ],
    ),
    (
        "Actions",
        [
            ("a", "Acknowledge problem"),
            ("A", "Acknowledge with message"),
            ("r", "Refresh data"),
            ("Enter", "Select/Confirm"),
        ],
    ),
    (
        "Host Editing",
        [
            ("t", "Edit triggers"),
            ("m", "Edit macros"),
            ("e", "Enable/disable host (Hosts tab)"),
        ],
    ),
    (
        "Alert Ignoring (Alerts tab)",
        [
            ("i", "Ignore alert locally"),
            ("I", "List ignored alerts"),
            (":unignore N", "Remove ignore rule"),
        ],
    ),
    (
        "Graphs",
        [
            ("Enter/Space", "Expand/collapse"),
            ("E", "Expand all"),
            ("C", "Collapse all"),
        ],
    ),
    (
        "Filtering",
        [
            ("/", "Filter mode"),
            ("0-5", "Filter by severity"),
            ("Ctrl+L", "Clear filter"),
        ],
    ),
    (
        "General",
        [
            (":", "Command mode"),
            ("?", "Show this help"),
            ("Esc", "Cancel/Close"),
            ("q", "Quit"),
        ],
    ),
]


def help_modal() -> Modal:
    lines: list[str] = []
    for i, (title, keys) in enumerate(HELP_SECTIONS):
        if i:
            lines.append("")
        lines.append(title)
        lines += [f"  {key:<12} {desc}" for key, desc in keys]
    return Modal("help", "Keyboard Shortcuts", lines)
