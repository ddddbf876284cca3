"""Zabbix JSON-RPC API client."""

from __future__ import annotations

import itertools
import logging
import threading
import time
from typing import Any

import requests

from ..constants import (
    ACK_ACTION_ACKNOWLEDGE,
    ACK_ACTION_CLOSE,
    ACK_ACTION_MESSAGE,
    ACK_ACTION_SUPPRESS,
    ACK_ACTION_UNSUPPRESS,
    API_PATH,
    DEFAULT_TIMEOUT_S,
    JSONRPC_CONTENT_TYPE,
    LOGOUT_TIMEOUT_S,
)
from ..exceptions import (
    APIError,
    AuthError,
    DecodeError,
    RequestCancelledError,
    TransportError,
    ZabbixError,
)
from .types import (
    VALUE_TYPE_FLOAT,
    VALUE_TYPE_UNSIGNED,
    Event,
    History,
    Host,
    HostCounts,
    HostMacro,
    Item,
    Problem,
    Trigger,
)

logger = logging.getLogger(__name__)

EVENT_HOST_FIELDS = ["hostid", "host", "name"]

DEFAULT_HOST_OUTPUT = [
    "hostid",
    "host",
    "name",
    "status",
    "maintenance_status",
    "active_available",
]

DEFAULT_ITEM_OUTPUT = [
    "itemid",
    "hostid",
    "name",
    "key_",
    "value_type",
    "units",
    "lastvalue",
    "lastclock",
    "state",
    "status",
]


class ZabbixClient:
    """Client for the Zabbix JSON-RPC API.

    Every call is a JSON-RPC 2.0 envelope POSTed to ``<base>/api_jsonrpc.php``.
    Authentication is an ``Authorization: Bearer`` header carrying either an
    API token or the session token returned by :meth:`login`.

    A client may be shared between worker threads: the request id counter and
    the token are both guarded by locks. Setting ``cancel_event`` makes every
    call after the event is set fail with :class:`RequestCancelledError`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_S,
        verify_tls: bool = True,
        cancel_event: threading.Event | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.url = base_url.rstrip("/") + API_PATH
        self.timeout = timeout
        self.verify_tls = verify_tls
        self.cancel_event = cancel_event
        self.session = session or requests.Session()
        self._token = ""
        self._token_lock = threading.Lock()
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    # -- session ---------------------------------------------------------

    @property
    def token(self) -> str:
        with self._token_lock:
            return self._token

    def set_token(self, token: str) -> None:
        with self._token_lock:
            self._token = token

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def _check_cancelled(self, method: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise RequestCancelledError(f"{method}: request cancelled")

    def call(
        self,
        method: str,
        params: Any,
        *,
        auth: bool = True,
        timeout: float | None = None,
        cancellable: bool = True,
    ) -> Any:
        """Invoke an API method and return its ``result`` field.

        Args:
            method: API method name, e.g. ``host.get``
            params: JSON-serializable params (dict or list)
            auth: Send the bearer token when one is set
            timeout: Per-call timeout overriding the client default
            cancellable: Honor ``cancel_event``

        Raises:
            TransportError: Send failure or non-200 status
            DecodeError: Body is not a JSON-RPC envelope
            APIError: Server returned an error object
            RequestCancelledError: Client was cancelled before or during the call
        """
        if cancellable:
            self._check_cancelled(method)

        request_id = self._next_id()
        payload = {"jsonrpc": "2.0", "method": method, "params": params, "id": request_id}
        headers = {"Content-Type": JSONRPC_CONTENT_TYPE}
        if auth:
            token = self.token
            if token:
                headers["Authorization"] = f"Bearer {token}"

        logger.debug("rpc %s id=%d", method, request_id)
        try:
            response = self.session.post(
                self.url,
                json=payload,
                headers=headers,
                timeout=timeout if timeout is not None else self.timeout,
                verify=self.verify_tls,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method}: request failed: {e}") from e

        if cancellable:
            self._check_cancelled(method)

        if response.status_code != 200:
            raise TransportError(
                f"{method}: unexpected status code: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError(f"{method}: failed to decode response: {e}") from e
        if not isinstance(body, dict):
            raise DecodeError(f"{method}: response is not a JSON-RPC envelope")

        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                raise DecodeError(f"{method}: malformed error object")
            raise APIError(
                code=int(error.get("code") or 0),
                message=str(error.get("message") or ""),
                data=error.get("data") or "",
            )
        return body.get("result")

    def login(self, username: str, password: str) -> None:
        """Authenticate with username/password and store the session token."""
        try:
            token = self.call("user.login", {"username": username, "password": password})
        except APIError as e:
            raise AuthError(f"login failed: {e}") from e
        if not isinstance(token, str) or not token:
            raise AuthError("login failed: server returned no session token")
        self.set_token(token)

    def logout(self) -> None:
        """End the session; no-op when there is no token.

        Runs with its own short timeout and ignores ``cancel_event`` so it
        still completes during shutdown.
        """
        if not self.token:
            return
        self.call("user.logout", [], timeout=LOGOUT_TIMEOUT_S, cancellable=False)
        self.set_token("")

    def close(self) -> None:
        """Close the HTTP session and its pooled connections."""
        self.session.close()

    def version(self) -> str:
        """Return the API version; never sends credentials."""
        return str(self.call("apiinfo.version", [], auth=False))

    def is_connected(self) -> bool:
        try:
            self.version()
        except ZabbixError:
            return False
        return True

    # -- problems & events -----------------------------------------------

    def get_active_problems(self) -> list[Problem]:
        return self._get_problems({})

    def get_problems_with_min_severity(self, min_severity: int) -> list[Problem]:
        severities = list(range(max(min_severity, 0), 6))
        return self._get_problems({"severities": severities})

    def _get_problems(self, extra: dict[str, Any]) -> list[Problem]:
        """Two-step fetch: problem ids, then event details.

        Problems raised by disabled triggers are dropped, matching what the
        Zabbix frontend shows.
        """
        params: dict[str, Any] = {
            "output": ["eventid"],
            "selectTags": "extend",
            "selectAcknowledges": "extend",
            "sortfield": ["eventid"],
            "sortorder": "DESC",
        }
        params.update(extra)
        rows = self.call("problem.get", params) or []
        event_ids = [str(row.get("eventid")) for row in rows if row.get("eventid") is not None]
        if not event_ids:
            return []

        events = self.call(
            "event.get",
            {
                "output": "extend",
                "eventids": event_ids,
                "selectHosts": EVENT_HOST_FIELDS,
                "selectTags": "extend",
                "selectAcknowledges": "extend",
                "selectRelatedObject": ["triggerid", "status"],
                "sortfield": ["eventid"],
                "sortorder": "DESC",
            },
        )
        problems = [Problem.from_dict(e) for e in events or []]
        return [p for p in problems if not p.related_object.is_disabled()]

    def get_event_history(
        self,
        *,
        time_from: int | None = None,
        time_till: int | None = None,
        host_ids: list[str] | None = None,
        limit: int = 100,
    ) -> list[Event]:
        params: dict[str, Any] = {
            "output": "extend",
            "source": 0,
            "object": 0,
            "selectHosts": EVENT_HOST_FIELDS,
            "selectTags": "extend",
            "selectAcknowledges": "extend",
            "selectRelatedObject": ["triggerid", "status"],
            "sortfield": ["clock", "eventid"],
            "sortorder": "DESC",
            "limit": limit,
        }
        if time_from is not None:
            params["time_from"] = time_from
        if time_till is not None:
            params["time_till"] = time_till
        if host_ids:
            params["hostids"] = host_ids
        return [Event.from_dict(e) for e in self.call("event.get", params) or []]

    def get_recent_events(self, hours: int, limit: int) -> list[Event]:
        return self.get_event_history(time_from=int(time.time()) - hours * 3600, limit=limit)

    # -- hosts -----------------------------------------------------------

    def get_hosts(self, params: dict[str, Any] | None = None) -> list[Host]:
        merged: dict[str, Any] = {
            "output": DEFAULT_HOST_OUTPUT,
            "selectInterfaces": [
                "interfaceid",
                "ip",
                "dns",
                "port",
                "type",
                "main",
                "available",
            ],
            "selectHostGroups": ["groupid", "name"],
            "sortfield": ["name"],
            "sortorder": "ASC",
        }
        merged.update(params or {})
        return [Host.from_dict(h) for h in self.call("host.get", merged) or []]

    def get_all_hosts(self) -> list[Host]:
        """All hosts, monitored or not, so disabled hosts can be re-enabled."""
        return self.get_hosts()

    def get_host(self, host_id: str) -> Host:
        hosts = self.get_hosts({"hostids": [host_id]})
        if not hosts:
            raise ZabbixError(f"host not found: {host_id}")
        return hosts[0]

    def search_hosts(self, text: str) -> list[Host]:
        return self.get_hosts({"search": {"name": text}, "searchWildcardsEnabled": True})

    def get_host_counts(self) -> HostCounts:
        """Count monitored hosts by state.

        Maintenance wins over availability; the rest are bucketed by
        interface availability.
        """
        hosts = self.get_hosts({"monitored_hosts": True})
        counts = HostCounts(total=len(hosts))
        for host in hosts:
            if host.in_maintenance():
                counts.maintenance += 1
                continue
            availability = host.availability()
            if availability == 1:
                counts.ok += 1
            elif availability == 2:
                counts.problem += 1
            else:
                counts.unknown += 1
        return counts

    def update_host(self, host_id: str, fields: dict[str, Any]) -> Any:
        return self.call("host.update", {"hostid": host_id, **fields})

    def enable_host(self, host_id: str) -> Any:
        return self.update_host(host_id, {"status": "0"})

    def disable_host(self, host_id: str) -> Any:
        return self.update_host(host_id, {"status": "1"})

    # -- items & history -------------------------------------------------

    def get_items(self, params: dict[str, Any] | None = None) -> list[Item]:
        merged: dict[str, Any] = {
            "output": DEFAULT_ITEM_OUTPUT,
            "selectHosts": EVENT_HOST_FIELDS,
            "sortfield": ["name"],
            "sortorder": "ASC",
        }
        merged.update(params or {})
        return [Item.from_dict(i) for i in self.call("item.get", merged) or []]

    def get_numeric_items(
        self, host_ids: list[str] | None = None, prefixes: list[str] | None = None
    ) -> list[Item]:
        """Enabled float/unsigned items, optionally limited to key prefixes."""
        params: dict[str, Any] = {
            "filter": {"value_type": [VALUE_TYPE_FLOAT, VALUE_TYPE_UNSIGNED], "status": "0"},
        }
        if host_ids:
            params["hostids"] = host_ids
        items = self.get_items(params)
        if prefixes:
            items = [i for i in items if any(i.key_.startswith(p) for p in prefixes)]
        return items

    def get_all_numeric_items(self, prefixes: list[str] | None = None) -> list[Item]:
        return self.get_numeric_items(prefixes=prefixes)

    def get_history(
        self,
        item_ids: list[str],
        value_type: str,
        *,
        time_from: int,
        time_till: int,
        limit: int | None = None,
    ) -> list[History]:
        params: dict[str, Any] = {
            "output": "extend",
            "history": int(value_type),
            "itemids": item_ids,
            "time_from": time_from,
            "time_till": time_till,
            "sortfield": ["clock"],
            "sortorder": "ASC",
        }
        if limit:
            params["limit"] = limit
        return [History.from_dict(h) for h in self.call("history.get", params) or []]

    def get_item_history(self, item: Item, hours: int) -> list[History]:
        now = int(time.time())
        return self.get_history(
            [item.itemid], item.value_type, time_from=now - hours * 3600, time_till=now
        )

    def get_items_history(self, items: list[Item], hours: int) -> dict[str, list[History]]:
        """Fetch history for many items, one call per value type.

        Returns:
            Samples keyed by item id, oldest first
        """
        now = int(time.time())
        time_from = now - hours * 3600
        partitions: dict[str, list[str]] = {VALUE_TYPE_FLOAT: [], VALUE_TYPE_UNSIGNED: []}
        for item in items:
            if item.value_type in partitions:
                partitions[item.value_type].append(item.itemid)

        result: dict[str, list[History]] = {}
        for value_type, ids in partitions.items():
            if not ids:
                continue
            label = "float" if value_type == VALUE_TYPE_FLOAT else "unsigned"
            try:
                samples = self.get_history(ids, value_type, time_from=time_from, time_till=now)
            except RequestCancelledError:
                raise
            except ZabbixError as e:
                raise ZabbixError(f"failed to get {label} history: {e}") from e
            for sample in samples:
                result.setdefault(sample.itemid, []).append(sample)
        return result

    # -- triggers --------------------------------------------------------

    def get_triggers(self, params: dict[str, Any] | None = None) -> list[Trigger]:
        merged: dict[str, Any] = {
            "output": "extend",
            "selectHosts": EVENT_HOST_FIELDS,
            "selectTags": "extend",
            "sortfield": ["description"],
            "sortorder": "ASC",
        }
        merged.update(params or {})
        return [Trigger.from_dict(t) for t in self.call("trigger.get", merged) or []]

    def get_host_triggers(self, host_id: str) -> list[Trigger]:
        return self.get_triggers({"hostids": [host_id]})

    def get_trigger(self, trigger_id: str) -> Trigger:
        triggers = self.get_triggers({"triggerids": [trigger_id]})
        if not triggers:
            raise ZabbixError(f"trigger not found: {trigger_id}")
        return triggers[0]

    def update_trigger(self, trigger_id: str, fields: dict[str, Any]) -> Any:
        return self.call("trigger.update", {"triggerid": trigger_id, **fields})

    def enable_trigger(self, trigger_id: str) -> Any:
        return self.update_trigger(trigger_id, {"status": "0"})

    def disable_trigger(self, trigger_id: str) -> Any:
        return self.update_trigger(trigger_id, {"status": "1"})

    def enable_triggers(self, trigger_ids: list[str]) -> None:
        for trigger_id in trigger_ids:
            self.enable_trigger(trigger_id)

    def disable_triggers(self, trigger_ids: list[str]) -> None:
        for trigger_id in trigger_ids:
            self.disable_trigger(trigger_id)

    def set_trigger_priority(self, trigger_id: str, priority: int) -> Any:
        if not 0 <= priority <= 5:
            raise ZabbixError(f"invalid trigger priority: {priority}")
        return self.update_trigger(trigger_id, {"priority": str(priority)})

    # -- macros ----------------------------------------------------------

    def get_host_macros(self, host_id: str) -> list[HostMacro]:
        rows = self.call(
            "usermacro.get",
            {"output": "extend", "hostids": [host_id], "sortfield": ["macro"]},
        )
        return [HostMacro.from_dict(m) for m in rows or []]

    def create_host_macro(
        self, host_id: str, macro: str, value: str, *, macro_type: str = "0", description: str = ""
    ) -> Any:
        params = {"hostid": host_id, "macro": macro, "value": value, "type": macro_type}
        if description:
            params["description"] = description
        return self.call("usermacro.create", params)

    def update_host_macro(self, macro_id: str, value: str) -> Any:
        return self.call("usermacro.update", {"hostmacroid": macro_id, "value": value})

    def delete_host_macro(self, macro_id: str) -> Any:
        return self.call("usermacro.delete", [macro_id])

    # -- acknowledgements ------------------------------------------------

    def _acknowledge(self, event_ids: list[str], action: int, **extra: Any) -> Any:
        # The result shape ({"eventids": [...]}, ints or strings) varies by
        # server version; callers only care that no error was raised.
        params: dict[str, Any] = {"eventids": event_ids, "action": action}
        params.update(extra)
        return self.call("event.acknowledge", params)

    def acknowledge_problems(self, event_ids: list[str], message: str = "") -> Any:
        action = ACK_ACTION_ACKNOWLEDGE
        extra: dict[str, Any] = {}
        if message:
            action |= ACK_ACTION_MESSAGE
            extra["message"] = message
        return self._acknowledge(event_ids, action, **extra)

    def acknowledge_problem(self, event_id: str, message: str = "") -> Any:
        return self.acknowledge_problems([event_id], message)

    def close_problem(self, event_id: str, message: str = "") -> Any:
        action = ACK_ACTION_CLOSE
        extra: dict[str, Any] = {}
        if message:
            action |= ACK_ACTION_MESSAGE
            extra["message"] = message
        return self._acknowledge([event_id], action, **extra)

    def suppress_problem(self, event_id: str, until: int = 0) -> Any:
        return self._acknowledge([event_id], ACK_ACTION_SUPPRESS, suppress_until=until)

    def unsuppress_problem(self, event_id: str) -> Any:
        return self._acknowledge([event_id], ACK_ACTION_UNSUPPRESS)
