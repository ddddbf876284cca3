"""Detail pane: the selected alert, host, event or metric as styled lines.

Lines are ``(text, style)`` pairs. Styles are names resolved by
:class:`~chotko.dashboard.curses_colors.CursesColors`; ``sev:N`` selects the
color of severity ``N``.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum

from ..utils import truncate
from ..zabbix.types import Event, History, Host, Item, Problem
from .formatting import calc_stats, format_value, render_chart

Line = tuple[str, str]

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

ALERT_HINT = "[a]ck [A]ck+msg [t]riggers [m]acros [i]gnore [r]efresh"
EVENT_HINT = "[t]riggers [m]acros [r]efresh"
HOST_HINT = "[t]riggers [m]acros [e]nable/disable [r]efresh"


class DetailMode(Enum):
    PROBLEM = "problem"
    EVENT = "event"
    HOST = "host"
    GRAPH = "graph"


def _local(when: dt.datetime | None, fmt: str = TIME_FORMAT) -> str:
    if when is None:
        return "-"
    return when.astimezone().strftime(fmt)


def _field(label: str, value: str, style: str = "value") -> list[Line]:
    return [(f"{label}: ", "label"), (value, style)]


class DetailPane:
    """Holds the current selection and renders it into lines on demand."""

    def __init__(self) -> None:
        self.mode = DetailMode.PROBLEM
        self.problem: Problem | None = None
        self.event: Event | None = None
        self.host: Host | None = None
        self.item: Item | None = None
        self.history: list[History] = []
        self.scroll_offset = 0
        self.width = 0
        self.height = 0
        self.focused = False

    def set_size(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def set_focused(self, focused: bool) -> None:
        self.focused = focused

    def _select(self, mode: DetailMode) -> None:
        if mode is not self.mode:
            self.scroll_offset = 0
        self.mode = mode

    def set_problem(self, problem: Problem | None) -> None:
        if self.problem is not problem:
            self.scroll_offset = 0
        self._select(DetailMode.PROBLEM)
        self.problem = problem

    def set_event(self, event: Event | None) -> None:
        if self.event is not event:
            self.scroll_offset = 0
        self._select(DetailMode.EVENT)
        self.event = event

    def set_host(self, host: Host | None) -> None:
        if self.host is not host:
            self.scroll_offset = 0
        self._select(DetailMode.HOST)
        self.host = host

    def set_item(self, item: Item | None, history: list[History] | None = None) -> None:
        if self.item is not item:
            self.scroll_offset = 0
        self._select(DetailMode.GRAPH)
        self.item = item
        self.history = list(history or [])

    def clear(self) -> None:
        self.problem = self.event = self.host = self.item = None
        self.history = []
        self.scroll_offset = 0

    def scroll(self, delta: int) -> None:
        # upper bound depends on the rendered content; see visible_lines()
        self.scroll_offset = max(self.scroll_offset + delta, 0)

    def handle_key(self, key: str) -> bool:
        if key in ("up", "k"):
            self.scroll(-1)
        elif key in ("down", "j"):
            self.scroll(1)
        elif key in ("pgup", "ctrl+u"):
            self.scroll(-max(self.height - 4, 1))
        elif key in ("pgdown", "ctrl+d"):
            self.scroll(max(self.height - 4, 1))
        elif key in ("home", "g"):
            self.scroll_offset = 0
        else:
            return False
        return True

    # -- composition -------------------------------------------------------

    def title(self) -> str:
        return {
            DetailMode.PROBLEM: "ALERT DETAIL",
            DetailMode.EVENT: "EVENT DETAIL",
            DetailMode.HOST: "HOST DETAIL",
            DetailMode.GRAPH: "GRAPH DETAIL",
        }[self.mode]

    def lines(self, now: dt.datetime | None = None) -> list[list[Line]]:
        """Body lines (below the title and rule) for the current mode."""
        if self.mode is DetailMode.PROBLEM:
            if self.problem is None:
                return [[], [("  Select an alert to view details", "muted")]]
            return problem_lines(self.problem, self.width, now)
        if self.mode is DetailMode.EVENT:
            if self.event is None:
                return [[], [("  Select an event to view details", "muted")]]
            return event_lines(self.event, self.width, now)
        if self.mode is DetailMode.HOST:
            if self.host is None:
                return [[], [("  Select a host to view details", "muted")]]
            return host_lines(self.host, self.width)
        if self.item is None:
            return [[], [("  Select an item to view graph", "muted")]]
        return graph_lines(self.item, self.history, self.width, self.height)

    def visible_lines(self, now: dt.datetime | None = None) -> list[list[Line]]:
        lines = self.lines(now)
        rows = max(self.height - 4, 1)
        if self.scroll_offset >= len(lines):
            self.scroll_offset = max(len(lines) - 1, 0)
        return lines[self.scroll_offset : self.scroll_offset + rows]


def _tags(problem: Problem) -> list[list[Line]]:
    if not problem.tags:
        return []
    out: list[list[Line]] = [[], [("Tags:", "label")]]
    for tag in problem.tags:
        text = f"{tag.tag}={tag.value}" if tag.value else tag.tag
        out.append([("  " + text, "tag")])
    return out


def _acks(problem: Problem, width: int) -> list[list[Line]]:
    if not problem.acknowledges:
        return []
    out: list[list[Line]] = [[], [("History:", "label")]]
    for ack in problem.acknowledges:
        text = f"  {ack.author()}: {ack.message}"
        out.append([(truncate(text, max(width - 6, 10)), "muted")])
    return out


def _hint(text: str, width: int) -> list[list[Line]]:
    return [[], [("─" * max(width - 4, 0), "border")], [(text, "muted")]]


def problem_lines(problem: Problem, width: int, now: dt.datetime | None = None) -> list[list[Line]]:
    severity = problem.severity_int()
    lines = [_field("Host", problem.host_name())]
    if problem.host_ip():
        lines.append(_field("IP", problem.host_ip()))
    lines.append(_field("Trigger", problem.name))
    lines.append(_field("Severity", problem.severity_name(), f"sev:{severity}"))
    lines.append(_field("Duration", problem.duration_string(now)))
    lines.append(_field("Started", _local(problem.start_time())))
    if problem.is_acknowledged():
        lines.append(_field("Status", "Acknowledged", "acked"))
    else:
        lines.append(_field("Status", "Unacknowledged", "sev:4"))
    if problem.is_suppressed():
        lines.append(_field("Suppressed", "Yes"))
    lines.append(_field("Event ID", problem.eventid))
    lines += _tags(problem)
    lines += _acks(problem, width)
    lines += _hint(ALERT_HINT, width)
    return lines


def event_lines(event: Event, width: int, now: dt.datetime | None = None) -> list[list[Line]]:
    if event.is_recovery():
        lines = [_field("Type", "Recovery (OK)", "ok")]
    else:
        lines = [_field("Type", "Problem", "problem")]
    lines.append(_field("Host", event.host_name()))
    if event.host_ip():
        lines.append(_field("IP", event.host_ip()))
    lines.append(_field("Trigger", event.name))
    lines.append(_field("Severity", event.severity_name(), f"sev:{event.severity_int()}"))
    lines.append(_field("Time", _local(event.start_time())))
    if event.is_recovery():
        lines.append(_field("Resolved", _local(event.recovery_time())))
        lines.append(_field("Duration", event.resolved_duration_string()))
    else:
        lines.append(_field("Duration", event.duration_string(now)))
    if event.is_acknowledged():
        lines.append(_field("Ack", "Yes", "acked"))
    else:
        lines.append(_field("Ack", "No", "muted"))
    lines.append(_field("Event ID", event.eventid))
    if event.is_recovery():
        lines.append(_field("Recovery ID", event.r_eventid))
    lines += _tags(event)
    lines += _acks(event, width)
    lines += _hint(EVENT_HINT, width)
    return lines


def host_lines(host: Host, width: int) -> list[list[Line]]:
    lines = [_field("Name", host.display_name)]
    if host.name and host.name != host.host:
        lines.append(_field("Host", host.host))
    lines.append(_field("Host ID", host.hostid))
    if host.in_maintenance():
        lines.append(_field("Status", "In Maintenance", "maintenance"))
    else:
        status = {1: ("Available", "ok"), 2: ("Unavailable", "problem")}
        text, style = status.get(host.availability(), ("Unknown", "unknown"))
        lines.append(_field("Status", text, style))
    if host.is_monitored():
        lines.append(_field("Monitoring", "Enabled", "ok"))
    else:
        lines.append(_field("Monitoring", "Disabled", "unknown"))

    if host.interfaces:
        lines += [[], [("Interfaces:", "label")]]
        for iface in host.interfaces:
            addr = iface.address
            if iface.port and iface.port != "0":
                addr += ":" + iface.port
            main = " (default)" if iface.is_main() else ""
            avail = {"1": (" [OK]", "ok"), "2": (" [FAIL]", "problem")}.get(
                iface.available, (" [?]", "unknown")
            )
            lines.append([(f"  {iface.type_name}: {addr}{main}", "value"), avail])

    if host.groups:
        lines += [[], [("Groups:", "label")]]
        lines += [[("  " + group.name, "tag")] for group in host.groups]

    lines += _hint(HOST_HINT, width)
    return lines


def graph_lines(item: Item, history: list[History], width: int, height: int) -> list[list[Line]]:
    lines = [
        _field("Item", item.name),
        _field("Host", item.host_name()),
        _field("Key", item.key_),
        _field("Value", format_value(item.last_value_float(), item.units)),
    ]
    if item.last_time() is not None:
        lines.append(_field("Updated", _local(item.last_time(), "%H:%M:%S")))
    if item.units:
        lines.append(_field("Units", item.units))
    lines.append(_field("Item ID", item.itemid))

    if not history:
        lines += [[], [("  No history data available", "muted")]]
        return lines

    values = [h.value_float() for h in history]
    lines += [[], [("History Chart:", "label")], []]
    chart_height = min(max(height - len(lines) - 8, 5), 15)
    chart = render_chart(values, width=width - 4, height=chart_height, units=item.units)
    lines += [[(row, "chart")] for row in chart]
    first, last = history[0].time(), history[-1].time()
    if first is not None and last is not None:
        lines.append([(f"{_local(first, '%H:%M')} - {_local(last, '%H:%M')}", "muted")])

    lo, hi, avg = calc_stats(values)
    stats = (
        f"Min: {format_value(lo, item.units)}  "
        f"Max: {format_value(hi, item.units)}  "
        f"Avg: {format_value(avg, item.units)}"
    )
    lines += [[], [("─" * max(width - 4, 0), "border")], [(stats, "muted")]]
    return lines
