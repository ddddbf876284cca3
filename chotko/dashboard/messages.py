"""Messages consumed by the dashboard update function.

Input messages come from the curses loop; everything else is produced by
commands running on the worker pool.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..zabbix.client import ZabbixClient
    from ..zabbix.types import Event, History, Host, HostCounts, HostMacro, Item, Problem, Trigger


# -- input -------------------------------------------------------------------


@dataclass
class KeyMsg:
    """Key press, normalized to a name such as ``q``, ``enter`` or ``ctrl+l``."""

    key: str


@dataclass
class MouseMsg:
    x: int
    y: int
    button: str  # left, right, middle, wheel_up, wheel_down, none
    action: str  # press, release, motion


@dataclass
class ResizeMsg:
    width: int
    height: int


@dataclass
class TickMsg:
    pass


@dataclass
class QuitMsg:
    pass


# -- connection ----------------------------------------------------------------


@dataclass
class ConnectedMsg:
    version: str
    client: ZabbixClient


@dataclass
class DisconnectedMsg:
    error: Exception


# -- data loaded -------------------------------------------------------------


@dataclass
class ProblemsLoadedMsg:
    problems: list[Problem] = field(default_factory=list)
    error: Exception | None = None


@dataclass
class HostsLoadedMsg:
    hosts: list[Host] = field(default_factory=list)
    error: Exception | None = None


@dataclass
class HostCountsLoadedMsg:
    counts: HostCounts | None = None
    error: Exception | None = None


@dataclass
class EventsLoadedMsg:
    events: list[Event] = field(default_factory=list)
    error: Exception | None = None


@dataclass
class ItemsLoadedMsg:
    items: list[Item] = field(default_factory=list)
    error: Exception | None = None


@dataclass
class HostHistoryLoadedMsg:
    host_id: str
    history: dict[str, list[History]] = field(default_factory=dict)
    error: Exception | None = None


@dataclass
class HostTriggersLoadedMsg:
    host_id: str
    triggers: list[Trigger] = field(default_factory=list)
    select_trigger_id: str = ""
    error: Exception | None = None


@dataclass
class HostMacrosLoadedMsg:
    host_id: str
    macros: list[HostMacro] = field(default_factory=list)
    error: Exception | None = None


# -- action results ------------------------------------------------------------


@dataclass
class AcknowledgeResultMsg:
    event_ids: list[str]
    error: Exception | None = None


@dataclass
class TriggerUpdateResultMsg:
    trigger_id: str
    host_id: str
    action: str  # enable, disable
    error: Exception | None = None


@dataclass
class MacroUpdateResultMsg:
    macro_id: str
    host_id: str
    action: str  # create, update, delete
    error: Exception | None = None


@dataclass
class HostUpdateResultMsg:
    host_id: str
    action: str  # enable, disable, update
    error: Exception | None = None


@dataclass
class IgnoreSavedMsg:
    """Ignore list written to disk after an add or remove."""

    action: str  # Ignored, Removed
    label: str
    error: Exception | None = None


# -- UI ------------------------------------------------------------------------


@dataclass
class ErrorMsg:
    title: str
    message: str
    error: Exception | None = None


@dataclass
class ClearErrorMsg:
    pass


@dataclass
class EditorOpenMsg:
    mode: str  # triggers, macros
    host_id: str


@dataclass
class EditorCloseMsg:
    pass


@dataclass
class GraphNodeExpandedMsg:
    host_id: str


@dataclass
class TriggerToggleMsg:
    trigger_id: str
    host_id: str
    enable: bool


@dataclass
class MacroEditedMsg:
    macro_id: str
    macro: str
    value: str
    host_id: str


@dataclass
class MacroDeleteMsg:
    macro_id: str
    macro: str
    host_id: str
