"""Zabbix API entity types and derivation helpers.

The API returns almost every scalar as a string; the dataclasses here keep
the wire values as-is and expose typed accessors on top. All constructors
tolerate missing keys and integer-vs-string values so that responses from
different server versions decode the same way.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any

SEVERITY_NAMES = [
    "Not classified",
    "Information",
    "Warning",
    "Average",
    "High",
    "Disaster",
]

# Interface type codes as used by host.get
INTERFACE_TYPE_NAMES = {
    "1": "Agent",
    "2": "SNMP",
    "3": "IPMI",
    "4": "JMX",
}

MACRO_TYPE_TEXT = "0"
MACRO_TYPE_SECRET = "1"
MACRO_TYPE_VAULT = "2"
SECRET_PLACEHOLDER = "******"

VALUE_TYPE_FLOAT = "0"
VALUE_TYPE_UNSIGNED = "3"


def _s(value: Any) -> str:
    """Coerce a wire value to str, mapping None to ''."""
    if value is None:
        return ""
    return str(value)


def _int(value: str, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_unix_time(value: str) -> dt.datetime | None:
    """Parse a unix-seconds string into an aware UTC datetime.

    Returns None for empty, non-numeric, or non-positive values.
    """
    seconds = _int(value, 0)
    if seconds <= 0:
        return None
    return dt.datetime.fromtimestamp(seconds, dt.UTC)


def format_duration(seconds: float) -> str:
    """Format a duration as ``Ns``, ``Nm``, ``Nh Nm`` or ``Nd Nh``.

    Zero and negative durations render as ``-``.
    """
    total = int(seconds)
    if total <= 0:
        return "-"
    if total < 60:
        return f"{total}s"
    if total < 3600:
        return f"{total // 60}m"
    if total < 86400:
        return f"{total // 3600}h {(total % 3600) // 60}m"
    return f"{total // 86400}d {(total % 86400) // 3600}h"


def severity_name(severity: int) -> str:
    if 0 <= severity < len(SEVERITY_NAMES):
        return SEVERITY_NAMES[severity]
    return SEVERITY_NAMES[0]


@dataclass
class Tag:
    tag: str = ""
    value: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        return cls(tag=_s(data.get("tag")), value=_s(data.get("value")))


@dataclass
class URL:
    name: str = ""
    url: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> URL:
        return cls(name=_s(data.get("name")), url=_s(data.get("url")))


@dataclass
class Acknowledgement:
    """One entry of a problem's acknowledgement log."""

    acknowledgeid: str = ""
    userid: str = ""
    eventid: str = ""
    clock: str = ""
    message: str = ""
    action: str = ""
    old_severity: str = ""
    new_severity: str = ""
    username: str = ""
    name: str = ""
    surname: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Acknowledgement:
        return cls(
            acknowledgeid=_s(data.get("acknowledgeid")),
            userid=_s(data.get("userid")),
            eventid=_s(data.get("eventid")),
            clock=_s(data.get("clock")),
            message=_s(data.get("message")),
            action=_s(data.get("action")),
            old_severity=_s(data.get("old_severity")),
            new_severity=_s(data.get("new_severity")),
            username=_s(data.get("username")),
            name=_s(data.get("name")),
            surname=_s(data.get("surname")),
        )

    def time(self) -> dt.datetime | None:
        return parse_unix_time(self.clock)

    def author(self) -> str:
        """Return the acknowledging user, or ``system`` for automatic entries."""
        return self.username or "system"


@dataclass
class RelatedObject:
    """Trigger joined onto an event by ``selectRelatedObject``.

    ``status`` is "0" for enabled and "1" for disabled triggers. Servers that
    do not populate the join leave it empty.
    """

    triggerid: str = ""
    status: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RelatedObject:
        # event.get returns [] instead of {} when there is no related object
        if not isinstance(data, dict):
            return cls()
        return cls(triggerid=_s(data.get("triggerid")), status=_s(data.get("status")))

    def is_disabled(self) -> bool:
        return self.status == "1"


@dataclass
class Interface:
    interfaceid: str = ""
    ip: str = ""
    dns: str = ""
    port: str = ""
    type: str = ""
    main: str = ""
    available: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Interface:
        return cls(
            interfaceid=_s(data.get("interfaceid")),
            ip=_s(data.get("ip")),
            dns=_s(data.get("dns")),
            port=_s(data.get("port")),
            type=_s(data.get("type")),
            main=_s(data.get("main")),
            available=_s(data.get("available")),
        )

    @property
    def address(self) -> str:
        return self.ip or self.dns

    @property
    def type_name(self) -> str:
        return INTERFACE_TYPE_NAMES.get(self.type, "Unknown")

    def is_main(self) -> bool:
        return self.main == "1"


@dataclass
class HostGroup:
    groupid: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HostGroup:
        return cls(groupid=_s(data.get("groupid")), name=_s(data.get("name")))


@dataclass
class HostMacro:
    """User macro defined on a host."""

    hostmacroid: str = ""
    hostid: str = ""
    macro: str = ""
    value: str = ""
    type: str = MACRO_TYPE_TEXT
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HostMacro:
        return cls(
            hostmacroid=_s(data.get("hostmacroid")),
            hostid=_s(data.get("hostid")),
            macro=_s(data.get("macro")),
            value=_s(data.get("value")),
            type=_s(data.get("type")) or MACRO_TYPE_TEXT,
            description=_s(data.get("description")),
        )

    def is_secret(self) -> bool:
        return self.type == MACRO_TYPE_SECRET

    def is_vault(self) -> bool:
        return self.type == MACRO_TYPE_VAULT

    def display_value(self) -> str:
        """Value as shown on screen; secret values are write-only."""
        if self.is_secret():
            return SECRET_PLACEHOLDER
        return self.value


@dataclass
class Trigger:
    triggerid: str = ""
    description: str = ""
    expression: str = ""
    priority: str = "0"
    status: str = "0"
    value: str = "0"
    url: str = ""
    comments: str = ""
    hosts: list[Host] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Trigger:
        return cls(
            triggerid=_s(data.get("triggerid")),
            description=_s(data.get("description")),
            expression=_s(data.get("expression")),
            priority=_s(data.get("priority")) or "0",
            status=_s(data.get("status")) or "0",
            value=_s(data.get("value")) or "0",
            url=_s(data.get("url")),
            comments=_s(data.get("comments")),
            hosts=[Host.from_dict(h) for h in data.get("hosts") or []],
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
        )

    def priority_int(self) -> int:
        return _int(self.priority)

    def is_enabled(self) -> bool:
        return self.status == "0"

    def is_disabled(self) -> bool:
        return self.status == "1"

    def is_problem(self) -> bool:
        return self.value == "1"


@dataclass
class Host:
    hostid: str = ""
    host: str = ""
    name: str = ""
    status: str = "0"
    proxyid: str = ""
    maintenance_status: str = ""
    maintenance_type: str = ""
    active_available: str = ""
    description: str = ""
    interfaces: list[Interface] = field(default_factory=list)
    groups: list[HostGroup] = field(default_factory=list)
    macros: list[HostMacro] = field(default_factory=list)
    triggers: list[Trigger] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Host:
        # selectHostGroups returns "hostgroups" on 6.2+, older servers use "groups"
        groups = data.get("hostgroups") or data.get("groups") or []
        return cls(
            hostid=_s(data.get("hostid")),
            host=_s(data.get("host")),
            name=_s(data.get("name")),
            status=_s(data.get("status")) or "0",
            proxyid=_s(data.get("proxyid")),
            maintenance_status=_s(data.get("maintenance_status")),
            maintenance_type=_s(data.get("maintenance_type")),
            active_available=_s(data.get("active_available")),
            description=_s(data.get("description")),
            interfaces=[Interface.from_dict(i) for i in data.get("interfaces") or []],
            groups=[HostGroup.from_dict(g) for g in groups],
            macros=[HostMacro.from_dict(m) for m in data.get("macros") or []],
            triggers=[Trigger.from_dict(t) for t in data.get("triggers") or []],
        )

    @property
    def display_name(self) -> str:
        return self.name or self.host

    def is_monitored(self) -> bool:
        return self.status == "0"

    def in_maintenance(self) -> bool:
        return self.maintenance_status == "1"

    def availability(self) -> int:
        """Return 1 (available), 2 (unavailable) or 0 (unknown).

        Any available interface makes the host available; otherwise any
        unavailable interface makes it unavailable. Hosts without interfaces
        fall back to the active agent availability.
        """
        if not self.interfaces:
            return _int(self.active_available)
        states = {iface.available for iface in self.interfaces}
        if "1" in states:
            return 1
        if "2" in states:
            return 2
        return 0

    def main_interface(self) -> Interface | None:
        for iface in self.interfaces:
            if iface.is_main():
                return iface
        return self.interfaces[0] if self.interfaces else None

    def primary_ip(self) -> str:
        iface = self.main_interface()
        return iface.address if iface else ""


@dataclass
class Problem:
    """Active problem, as assembled from problem.get + event.get."""

    eventid: str = ""
    source: str = ""
    object: str = ""
    objectid: str = ""
    clock: str = ""
    ns: str = ""
    r_eventid: str = ""
    r_clock: str = ""
    name: str = ""
    acknowledged: str = "0"
    severity: str = "0"
    suppressed: str = "0"
    opdata: str = ""
    urls: list[URL] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    acknowledges: list[Acknowledgement] = field(default_factory=list)
    hosts: list[Host] = field(default_factory=list)
    triggers: list[Trigger] = field(default_factory=list)
    related_object: RelatedObject = field(default_factory=RelatedObject)

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        return cls(
            eventid=_s(data.get("eventid")),
            source=_s(data.get("source")),
            object=_s(data.get("object")),
            objectid=_s(data.get("objectid")),
            clock=_s(data.get("clock")),
            ns=_s(data.get("ns")),
            r_eventid=_s(data.get("r_eventid")),
            r_clock=_s(data.get("r_clock")),
            name=_s(data.get("name")),
            acknowledged=_s(data.get("acknowledged")) or "0",
            severity=_s(data.get("severity")) or "0",
            suppressed=_s(data.get("suppressed")) or "0",
            opdata=_s(data.get("opdata")),
            urls=[URL.from_dict(u) for u in data.get("urls") or []],
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
            acknowledges=[Acknowledgement.from_dict(a) for a in data.get("acknowledges") or []],
            hosts=[Host.from_dict(h) for h in data.get("hosts") or []],
            triggers=[Trigger.from_dict(t) for t in data.get("triggers") or []],
            related_object=RelatedObject.from_dict(data.get("relatedObject")),
        )

    def severity_int(self) -> int:
        return _int(self.severity)

    def severity_name(self) -> str:
        return severity_name(self.severity_int())

    def is_acknowledged(self) -> bool:
        return self.acknowledged == "1"

    def is_suppressed(self) -> bool:
        return self.suppressed == "1"

    def is_recovery(self) -> bool:
        return self.r_eventid not in ("", "0")

    def start_time(self) -> dt.datetime | None:
        return parse_unix_time(self.clock)

    def recovery_time(self) -> dt.datetime | None:
        return parse_unix_time(self.r_clock)

    def duration(self, now: dt.datetime | None = None) -> float:
        """Seconds since the problem started; 0 when the start is unknown."""
        start = self.start_time()
        if start is None:
            return 0.0
        now = now or dt.datetime.now(dt.UTC)
        return max((now - start).total_seconds(), 0.0)

    def resolved_duration(self) -> float:
        """Seconds from onset to recovery; 0 unless both times are known."""
        start = self.start_time()
        end = self.recovery_time()
        if start is None or end is None:
            return 0.0
        return (end - start).total_seconds()

    def duration_string(self, now: dt.datetime | None = None) -> str:
        return format_duration(self.duration(now))

    def resolved_duration_string(self) -> str:
        return format_duration(self.resolved_duration())

    def host_name(self) -> str:
        if not self.hosts:
            return "Unknown"
        return self.hosts[0].display_name or "Unknown"

    def host_id(self) -> str:
        return self.hosts[0].hostid if self.hosts else ""

    def host_ip(self) -> str:
        return self.hosts[0].primary_ip() if self.hosts else ""

    def trigger_id(self) -> str:
        """Return the id of the trigger that produced this event.

        Trigger events (object "0") carry it as ``objectid``; everything else
        relies on the related-object join.
        """
        if self.object == "0" and self.objectid:
            return self.objectid
        return self.related_object.triggerid


class Event(Problem):
    """Historical event; structurally identical to a problem."""


@dataclass
class Item:
    itemid: str = ""
    hostid: str = ""
    name: str = ""
    key_: str = ""
    value_type: str = ""
    units: str = ""
    lastvalue: str = ""
    lastclock: str = ""
    state: str = "0"
    status: str = "0"
    hosts: list[Host] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Item:
        return cls(
            itemid=_s(data.get("itemid")),
            hostid=_s(data.get("hostid")),
            name=_s(data.get("name")),
            key_=_s(data.get("key_")),
            value_type=_s(data.get("value_type")),
            units=_s(data.get("units")),
            lastvalue=_s(data.get("lastvalue")),
            lastclock=_s(data.get("lastclock")),
            state=_s(data.get("state")) or "0",
            status=_s(data.get("status")) or "0",
            hosts=[Host.from_dict(h) for h in data.get("hosts") or []],
        )

    def is_numeric(self) -> bool:
        return self.value_type in (VALUE_TYPE_FLOAT, VALUE_TYPE_UNSIGNED)

    def is_enabled(self) -> bool:
        return self.status == "0"

    def is_supported(self) -> bool:
        return self.state == "0"

    def last_value_float(self) -> float:
        try:
            return float(self.lastvalue)
        except ValueError:
            return 0.0

    def last_time(self) -> dt.datetime | None:
        return parse_unix_time(self.lastclock)

    def host_id(self) -> str:
        if self.hostid:
            return self.hostid
        return self.hosts[0].hostid if self.hosts else ""

    def host_name(self) -> str:
        if self.hosts:
            return self.hosts[0].display_name
        return ""


@dataclass
class History:
    itemid: str = ""
    clock: str = ""
    value: str = ""
    ns: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> History:
        return cls(
            itemid=_s(data.get("itemid")),
            clock=_s(data.get("clock")),
            value=_s(data.get("value")),
            ns=_s(data.get("ns")),
        )

    def value_float(self) -> float:
        try:
            return float(self.value)
        except ValueError:
            return 0.0

    def time(self) -> dt.datetime | None:
        return parse_unix_time(self.clock)


@dataclass
class HostCounts:
    ok: int = 0
    problem: int = 0
    unknown: int = 0
    maintenance: int = 0
    total: int = 0
