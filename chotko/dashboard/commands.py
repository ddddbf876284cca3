"""Deferred commands run on the worker pool.

A :class:`Cmd` wraps a zero-argument callable that performs blocking I/O and
returns a message (or None). The update function never calls them; the
runner in :mod:`.entry` submits them to its executor and feeds the result
back into the message queue.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..constants import RECENT_EVENTS_HOURS, RECENT_EVENTS_LIMIT
from ..exceptions import IgnoreListError, RequestCancelledError, ZabbixError
from ..zabbix.client import ZabbixClient
from .messages import (
    AcknowledgeResultMsg,
    ConnectedMsg,
    ErrorMsg,
    EventsLoadedMsg,
    HostCountsLoadedMsg,
    HostHistoryLoadedMsg,
    HostMacrosLoadedMsg,
    HostsLoadedMsg,
    HostTriggersLoadedMsg,
    HostUpdateResultMsg,
    IgnoreSavedMsg,
    ItemsLoadedMsg,
    MacroUpdateResultMsg,
    ProblemsLoadedMsg,
    TickMsg,
    TriggerUpdateResultMsg,
)

if TYPE_CHECKING:
    from ..ignores import IgnoreList
    from ..zabbix.types import Item

logger = logging.getLogger(__name__)


@dataclass
class Cmd:
    """A named unit of off-loop work producing at most one message."""

    name: str
    fn: Callable[[], Any]

    def __call__(self) -> Any:
        return self.fn()


def batch(*cmds: Cmd | Iterable[Cmd] | None) -> list[Cmd]:
    """Flatten commands and lists of commands, dropping None."""
    out: list[Cmd] = []
    for cmd in cmds:
        if cmd is None:
            continue
        if isinstance(cmd, Cmd):
            out.append(cmd)
        else:
            out.extend(c for c in cmd if c is not None)
    return out


@dataclass
class Connection:
    """Connection settings handed to the connect command."""

    url: str
    token: str = ""
    username: str = ""
    password: str = ""
    timeout: float = 30
    verify_tls: bool = True

    def use_token(self) -> bool:
        return bool(self.token)


def _guard(name: str, fn: Callable[[], Any], on_error: Callable[[ZabbixError], Any]) -> Cmd:
    """Wrap an API call so failures become messages and cancellation is silent."""

    def run() -> Any:
        try:
            return fn()
        except RequestCancelledError:
            logger.debug("%s cancelled", name)
            return None
        except ZabbixError as e:
            logger.debug("%s failed: %s", name, e)
            return on_error(e)

    return Cmd(name, run)


def tick_cmd(interval: float, stop: threading.Event) -> Cmd:
    """Wait ``interval`` seconds and emit a tick unless shutting down."""

    def run() -> TickMsg | None:
        if stop.wait(interval):
            return None
        return TickMsg()

    return Cmd("tick", run)


def connect_cmd(conn: Connection, cancel_event: threading.Event) -> Cmd:
    """Build a client, authenticate, and probe the API version."""

    def run() -> ConnectedMsg | ErrorMsg | None:
        client = ZabbixClient(
            conn.url,
            timeout=conn.timeout,
            verify_tls=conn.verify_tls,
            cancel_event=cancel_event,
        )
        try:
            if conn.use_token():
                client.set_token(conn.token)
            else:
                client.login(conn.username, conn.password)
        except RequestCancelledError:
            return None
        except ZabbixError as e:
            return ErrorMsg("Authentication Failed", "Failed to connect to Zabbix server", e)
        try:
            version = client.version()
        except RequestCancelledError:
            return None
        except ZabbixError as e:
            return ErrorMsg("Connection Failed", "Failed to get API version", e)
        return ConnectedMsg(version=version, client=client)

    return Cmd("connect", run)


def load_problems_cmd(client: ZabbixClient, min_severity: int) -> Cmd:
    def fetch() -> ProblemsLoadedMsg:
        if min_severity > 0:
            return ProblemsLoadedMsg(client.get_problems_with_min_severity(min_severity))
        return ProblemsLoadedMsg(client.get_active_problems())

    return _guard("load_problems", fetch, lambda e: ProblemsLoadedMsg(error=e))


def load_hosts_cmd(client: ZabbixClient) -> Cmd:
    return _guard(
        "load_hosts",
        lambda: HostsLoadedMsg(client.get_all_hosts()),
        lambda e: HostsLoadedMsg(error=e),
    )


def load_host_counts_cmd(client: ZabbixClient) -> Cmd:
    return _guard(
        "load_host_counts",
        lambda: HostCountsLoadedMsg(client.get_host_counts()),
        lambda e: HostCountsLoadedMsg(error=e),
    )


def load_events_cmd(client: ZabbixClient) -> Cmd:
    return _guard(
        "load_events",
        lambda: EventsLoadedMsg(client.get_recent_events(RECENT_EVENTS_HOURS, RECENT_EVENTS_LIMIT)),
        lambda e: EventsLoadedMsg(error=e),
    )


def load_items_cmd(client: ZabbixClient, categories: list[str]) -> Cmd:
    return _guard(
        "load_items",
        lambda: ItemsLoadedMsg(client.get_all_numeric_items(categories)),
        lambda e: ItemsLoadedMsg(error=e),
    )


def load_host_history_cmd(
    client: ZabbixClient, host_id: str, items: list[Item], hours: int
) -> Cmd:
    return _guard(
        f"load_history:{host_id}",
        lambda: HostHistoryLoadedMsg(host_id, client.get_items_history(items, hours)),
        lambda e: HostHistoryLoadedMsg(host_id, error=e),
    )


def load_host_triggers_cmd(client: ZabbixClient, host_id: str, select_trigger_id: str = "") -> Cmd:
    return _guard(
        f"load_triggers:{host_id}",
        lambda: HostTriggersLoadedMsg(
            host_id, client.get_host_triggers(host_id), select_trigger_id=select_trigger_id
        ),
        lambda e: HostTriggersLoadedMsg(host_id, error=e),
    )


def load_host_macros_cmd(client: ZabbixClient, host_id: str) -> Cmd:
    return _guard(
        f"load_macros:{host_id}",
        lambda: HostMacrosLoadedMsg(host_id, client.get_host_macros(host_id)),
        lambda e: HostMacrosLoadedMsg(host_id, error=e),
    )


def acknowledge_cmd(client: ZabbixClient, event_ids: list[str], message: str = "") -> Cmd:
    def run() -> AcknowledgeResultMsg:
        client.acknowledge_problems(event_ids, message)
        return AcknowledgeResultMsg(event_ids)

    return _guard("acknowledge", run, lambda e: AcknowledgeResultMsg(event_ids, error=e))


def toggle_trigger_cmd(client: ZabbixClient, trigger_id: str, host_id: str, enable: bool) -> Cmd:
    action = "enable" if enable else "disable"

    def run() -> TriggerUpdateResultMsg:
        if enable:
            client.enable_trigger(trigger_id)
        else:
            client.disable_trigger(trigger_id)
        return TriggerUpdateResultMsg(trigger_id, host_id, action)

    return _guard(
        f"{action}_trigger",
        run,
        lambda e: TriggerUpdateResultMsg(trigger_id, host_id, action, error=e),
    )


def update_macro_cmd(client: ZabbixClient, macro_id: str, host_id: str, value: str) -> Cmd:
    def run() -> MacroUpdateResultMsg:
        client.update_host_macro(macro_id, value)
        return MacroUpdateResultMsg(macro_id, host_id, "update")

    return _guard(
        "update_macro", run, lambda e: MacroUpdateResultMsg(macro_id, host_id, "update", error=e)
    )


def delete_macro_cmd(client: ZabbixClient, macro_id: str, host_id: str) -> Cmd:
    def run() -> MacroUpdateResultMsg:
        client.delete_host_macro(macro_id)
        return MacroUpdateResultMsg(macro_id, host_id, "delete")

    return _guard(
        "delete_macro", run, lambda e: MacroUpdateResultMsg(macro_id, host_id, "delete", error=e)
    )


def toggle_host_cmd(client: ZabbixClient, host_id: str, enable: bool) -> Cmd:
    action = "enable" if enable else "disable"

    def run() -> HostUpdateResultMsg:
        if enable:
            client.enable_host(host_id)
        else:
            client.disable_host(host_id)
        return HostUpdateResultMsg(host_id, action)

    return _guard(
        f"{action}_host", run, lambda e: HostUpdateResultMsg(host_id, action, error=e)
    )


def save_ignores_cmd(ignores: IgnoreList, action: str, label: str) -> Cmd:
    """Persist the ignore list after ``action`` was applied to the rule ``label``."""

    def run() -> IgnoreSavedMsg:
        try:
            ignores.save()
        except IgnoreListError as e:
            logger.debug("ignore list save failed: %s", e)
            return IgnoreSavedMsg(action, label, error=e)
        return IgnoreSavedMsg(action, label)

    return Cmd("save_ignores", run)


def logout_cmd(client: ZabbixClient) -> Cmd:
    """Log out, swallowing errors; used during shutdown."""

    def run() -> None:
        try:
            client.logout()
        except ZabbixError as e:
            logger.debug("logout failed: %s", e)

    return Cmd("logout", run)
