"""Dashboard state owned by the event loop."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

from ..constants import LIST_WIDTH_PERCENT
from .command_bar import CommandBar
from .commands import Connection
from .detail import DetailPane
from .editor import Editor
from .lists import AlertList, EventList, HostList, ListModel
from .tree import GraphsModel
from .zones import ZoneMap

if TYPE_CHECKING:
    from ..config import Config
    from ..ignores import IgnoreList, IgnoreRule
    from ..zabbix.client import ZabbixClient
    from ..zabbix.types import Event, Host, HostCounts, Item, Problem
    from .theme import Theme


class Tab(IntEnum):
    ALERTS = 0
    HOSTS = 1
    EVENTS = 2
    GRAPHS = 3


TAB_NAMES = ["Alerts", "Hosts", "Events", "Graphs"]
TAB_COUNT = len(TAB_NAMES)


class Pane(IntEnum):
    LIST = 0
    DETAIL = 1


class Mode(IntEnum):
    NORMAL = 0
    FILTER = 1
    COMMAND = 2
    ACK_MESSAGE = 3


@dataclass
class Modal:
    """Centered popup contents: help, an error, or an informational message."""

    kind: str  # help, error, message
    title: str
    body: list[str] = field(default_factory=list)
    details: str = ""


@dataclass
class Layout:
    """Pane bounds from the last resize, kept for mouse routing."""

    width: int = 0
    height: int = 0
    list_x: int = 0
    list_width: int = 0
    list_pane_width: int = 0
    detail_x: int = 0
    detail_width: int = 0
    content_y: int = 2
    content_height: int = 0
    pane_height: int = 0

    @classmethod
    def compute(cls, width: int, height: int) -> Layout:
        # status bar, tab bar and command bar are one row each; panes have borders
        content_height = height - 3 - 4
        available = width - 4
        list_width = available * LIST_WIDTH_PERCENT // 100
        return cls(
            width=width,
            height=height,
            list_x=0,
            list_width=list_width,
            list_pane_width=list_width + 2,
            detail_x=list_width + 2,
            detail_width=available - list_width,
            content_y=2,
            content_height=content_height + 2,
            pane_height=content_height,
        )

    def in_content(self, y: int) -> bool:
        return self.content_y <= y < self.content_y + self.content_height


class DashboardModel:
    """Everything the update function reads and writes.

    The model is owned by the event loop thread; commands running on the
    worker pool only see the values captured when they were created.
    """

    def __init__(
        self,
        config: Config,
        *,
        ignores: IgnoreList | None = None,
        theme: Theme | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.config = config
        self.theme = theme
        self.ignores = ignores
        self.cancel_event = cancel_event or threading.Event()
        self.connection = Connection(
            url=config.server.url,
            token=config.auth.token,
            username=config.auth.username,
            password=config.auth.password,
            timeout=config.server.timeout,
            verify_tls=not config.server.insecure_skip_verify,
        )
        self.refresh_interval = config.display.refresh_interval

        self.client: ZabbixClient | None = None
        self.version = ""
        self.connected = False
        self.loading = False
        self.last_update = ""
        self.quitting = False

        self.tab = Tab.ALERTS
        self.focused = Pane.LIST
        self.mode = Mode.NORMAL
        self.min_severity = config.display.min_severity
        self.text_filter = ""

        self.problems: list[Problem] = []
        self.hosts: list[Host] = []
        self.events: list[Event] = []
        self.items: list[Item] = []
        self.host_counts: HostCounts | None = None

        self.alert_list = AlertList(ignores.is_ignored if ignores is not None else None)
        self.alert_list.min_severity = self.min_severity
        self.host_list = HostList()
        self.event_list = EventList()
        self.graphs = GraphsModel(
            config.graph_categories(), max_items_per_host=config.graphs.max_items_per_host
        )
        self.detail = DetailPane()
        self.command_bar = CommandBar()
        self.editor = Editor()
        self.zones = ZoneMap()
        self.layout = Layout()

        self.modal: Modal | None = None
        self.awaiting_ignore_confirm = False
        self.pending_ignore: IgnoreRule | None = None
        self.status_message = ""

        self.alert_list.set_focused(True)

    # -- geometry ------------------------------------------------------------

    def set_size(self, width: int, height: int) -> None:
        self.layout = Layout.compute(width, height)
        lw, ph = self.layout.list_width, self.layout.pane_height
        for pane in (self.alert_list, self.host_list, self.event_list):
            pane.set_size(lw, ph)
        self.graphs.set_size(lw, ph)
        self.detail.set_size(self.layout.detail_width, ph)
        self.command_bar.set_width(width)
        self.editor.set_screen_size(width, height)

    # -- modal helpers -------------------------------------------------------

    @property
    def show_help(self) -> bool:
        return self.modal is not None and self.modal.kind == "help"

    @property
    def show_error(self) -> bool:
        return self.modal is not None and self.modal.kind != "help"

    def show_error_modal(self, title: str, message: str, error: Exception | None = None) -> None:
        self.modal = Modal("error", title, message.split("\n"), str(error) if error else "")

    def show_message(self, title: str, message: str) -> None:
        self.modal = Modal("message", title, message.split("\n"))

    def hide_modal(self) -> None:
        self.modal = None

    # -- selection helpers ---------------------------------------------------

    def active_list(self) -> ListModel | None:
        return {
            Tab.ALERTS: self.alert_list,
            Tab.HOSTS: self.host_list,
            Tab.EVENTS: self.event_list,
        }.get(self.tab)

    def selected_host_and_trigger(self) -> tuple[str, str]:
        """Return (host id, trigger id) of the current selection.

        Hosts have no trigger, so the trigger id is empty on the Hosts tab.
        """
        if self.tab is Tab.ALERTS:
            record = self.alert_list.selected()
        elif self.tab is Tab.EVENTS:
            record = self.event_list.selected()
        elif self.tab is Tab.HOSTS:
            host = self.host_list.selected()
            return (host.hostid if host else ""), ""
        else:
            return "", ""
        if record is None or not record.hosts:
            return "", ""
        return record.host_id(), record.trigger_id()

    def selected_host_id(self) -> str:
        return self.selected_host_and_trigger()[0]

    def find_host(self, host_id: str) -> Host | None:
        """Find a host in the host list, then in the selected alert or event."""
        for host in self.hosts:
            if host.hostid == host_id:
                return host
        for record in (self.alert_list.selected(), self.event_list.selected()):
            if record is None:
                continue
            for host in record.hosts:
                if host.hostid == host_id:
                    return host
        return None

    # -- focus & detail ------------------------------------------------------

    def update_list_focus(self) -> None:
        focused = self.focused is Pane.LIST
        for tab, pane in (
            (Tab.ALERTS, self.alert_list),
            (Tab.HOSTS, self.host_list),
            (Tab.EVENTS, self.event_list),
            (Tab.GRAPHS, self.graphs),
        ):
            pane.set_focused(focused and tab is self.tab)

    def set_focus(self, pane: Pane) -> None:
        self.focused = pane
        self.update_list_focus()
        self.detail.set_focused(pane is Pane.DETAIL)

    def cycle_focus(self, direction: int) -> None:
        self.set_focus(Pane((self.focused + direction) % 2))

    def update_detail(self) -> None:
        if self.tab is Tab.ALERTS:
            self.detail.set_problem(self.alert_list.selected())
        elif self.tab is Tab.HOSTS:
            self.detail.set_host(self.host_list.selected())
        elif self.tab is Tab.EVENTS:
            self.detail.set_event(self.event_list.selected())
        else:
            item = self.graphs.selected_item()
            history = self.graphs.get_history(item.itemid) if item else []
            self.detail.set_item(item, history)

    def has_tab_data(self, tab: Tab) -> bool:
        return bool(
            {
                Tab.ALERTS: self.problems,
                Tab.HOSTS: self.hosts,
                Tab.EVENTS: self.events,
                Tab.GRAPHS: self.items,
            }[tab]
        )

    def has_active_filter(self) -> bool:
        return self.min_severity > 0 or bool(self.text_filter)
