"""Curses renderer for the dashboard.

Drawing reads the model and never changes its data. The only state it
writes is the zone map used for mouse hit-testing, which is rebuilt on
every frame.
"""

from __future__ import annotations

import datetime as dt
from curses import error as curses_error
from typing import TYPE_CHECKING

from .curses_colors import CursesColors
from .formatting import clip_cell, format_value
from .help_popup import draw_popup, editor_lines, modal_lines
from .model import TAB_NAMES, DashboardModel, Pane, Tab
from .tree import NodeType, TreeNode

if TYPE_CHECKING:
    from ..zabbix.types import Event, Host, HostCounts, Problem
    from .theme import Theme

# (text, style name) pieces of one screen row
Segment = tuple[str, str]

COMMAND_HINT = "Press : for commands, / to filter, ? for help"
SEVERITY_FILTER_NAMES = ["", "Info+", "Warn+", "Avg+", "High+", "Disaster"]
SEVERITY_ICONS = ["○", "○", "○", "◐", "●", "●"]


def status_left(counts: HostCounts | None) -> list[Segment]:
    if counts is None:
        return [("Hosts: Loading...", "status")]
    return [
        ("Hosts: ", "status"),
        (f"▲ {counts.ok} OK", "ok"),
        (" │ ", "status"),
        (f"▼ {counts.problem} Problem", "problem"),
        (" │ ", "status"),
        (f"? {counts.unknown} Unknown", "unknown"),
        (" │ ", "status"),
        (f"⚙ {counts.maintenance} Maint", "maintenance"),
    ]


def status_center(model: DashboardModel) -> str:
    """Status message if one is pending, else the active filter summary."""
    if model.status_message:
        return model.status_message
    if not model.has_active_filter():
        return ""
    parts = []
    if 0 < model.min_severity <= 5:
        parts.append(SEVERITY_FILTER_NAMES[model.min_severity])
    if model.text_filter:
        parts.append(f'"{model.text_filter}"')
    return "⚡ Filter: " + ", ".join(parts)


def status_right(model: DashboardModel) -> str:
    if model.loading:
        return "⟳ Refreshing..."
    if model.connected:
        text = f"✓ Zabbix {model.version}"
        if model.last_update:
            text += f" │ Updated: {model.last_update}"
        return text
    return "✗ Disconnected"


def tab_labels(active: Tab) -> list[str]:
    return [f"[{name}]" if i == active else f" {name} " for i, name in enumerate(TAB_NAMES)]


def alert_row(problem: Problem, width: int, now: dt.datetime | None = None) -> list[Segment]:
    severity = problem.severity_int()
    name_width = max(width - 15 - 12 - 6, 10)
    return [
        (SEVERITY_ICONS[severity] if 0 <= severity <= 5 else "○", f"sev:{severity}"),
        (" " + clip_cell(problem.host_name(), 15), "value"),
        (" " + clip_cell(problem.name, name_width), "value"),
        (" " + problem.duration_string(now).rjust(10), "muted"),
        (" " + ("✓" if problem.is_acknowledged() else " "), "acked"),
    ]


def host_row(host: Host, width: int) -> list[Segment]:
    if host.in_maintenance():
        icon, style = "M", "maintenance"
    else:
        icons = {1: ("+", "ok"), 2: ("!", "problem")}
        icon, style = icons.get(host.availability(), ("?", "unknown"))
    name_width = max(width - 20 - 18 - 6, 10)
    group = host.groups[0].name if host.groups else ""
    return [
        (icon, style),
        (" " + clip_cell(host.display_name, name_width), "value"),
        (" " + clip_cell(host.primary_ip(), 18), "muted"),
        (" " + clip_cell(group, 15).rstrip().rjust(15), "muted"),
    ]


def event_row(event: Event, width: int, now: dt.datetime | None = None) -> list[Segment]:
    if event.is_recovery():
        icon, style = "OK", "ok"
        duration = event.resolved_duration_string()
    else:
        icon, style = "!!", f"sev:{event.severity_int()}"
        duration = event.duration_string(now)
    start = event.start_time()
    name_width = max(width - 12 - 12 - 8 - 8, 10)
    return [
        (icon, style),
        (" " + (start.astimezone().strftime("%H:%M:%S") if start else "-").ljust(8), "muted"),
        (" " + clip_cell(event.host_name(), 12), "value"),
        (" " + clip_cell(event.name, name_width), "value"),
        (" " + duration[:8].rjust(8), "muted"),
    ]


def node_row(
    node: TreeNode, width: int, *, sparkline: str = "", loading: bool = False
) -> list[Segment]:
    """Indented tree row; hosts and categories show a collapse marker."""
    indent = "  " * node.depth
    if node.type is NodeType.ITEM:
        marker = "  "
    else:
        marker = "▸ " if node.collapsed else "▾ "
    if node.type is NodeType.HOST:
        text = f"{node.name} ({node.leaf_count()})"
        if loading:
            text += " ⟳"
        return [(indent + marker + text, "title")]
    if node.type is NodeType.CATEGORY or node.item is None:
        return [(indent + marker + f"{node.name} ({len(node.children)})", "label")]
    item = node.item
    name_width = max(width - 12 - 10 - 8 - node.depth * 2, 10)
    return [
        (indent + marker + clip_cell(item.name, name_width), "value"),
        (format_value(item.last_value_float(), item.units).rjust(12), "muted"),
        ("  " + sparkline, "chart"),
    ]


class DashboardDisplay:
    """Draws the model onto a curses screen."""

    def __init__(self, stdscr, model: DashboardModel, *, theme: Theme | None = None) -> None:
        self.stdscr = stdscr
        self.model = model
        self.colors = CursesColors(stdscr, theme)
        self.curses_mod = self.colors.curses_mod

    def safe_addstr(self, row: int, col: int, text: str, attr: int = 0) -> None:
        try:
            if attr:
                self.stdscr.addstr(row, col, text, attr)
            else:
                self.stdscr.addstr(row, col, text)
        except curses_error:
            return

    def draw_segments(
        self, row: int, col: int, segments: list[Segment], width: int, *, selected: bool = False
    ) -> None:
        """Write styled segments left to right, clipped to ``width``."""
        x = col
        end = col + width
        for i, (text, style) in enumerate(segments):
            if x >= end:
                break
            text = text[: end - x]
            # the first segment keeps its color on the selected row
            if selected and i > 0:
                attr = self.colors.attrs.selected_attr
            else:
                attr = self.colors.attr(style)
            self.safe_addstr(row, x, text, attr)
            x += len(text)
        if selected and x < end:
            self.safe_addstr(row, x, " " * (end - x), self.colors.attrs.selected_attr)

    def draw_box(self, y: int, x: int, height: int, width: int, *, focused: bool) -> None:
        if height < 2 or width < 2:
            return
        attr = self.colors.attrs.focused_border_attr if focused else self.colors.attrs.border_attr
        self.safe_addstr(y, x, "┌" + "─" * (width - 2) + "┐", attr)
        for row in range(y + 1, y + height - 1):
            self.safe_addstr(row, x, "│", attr)
            self.safe_addstr(row, x + width - 1, "│", attr)
        self.safe_addstr(y + height - 1, x, "└" + "─" * (width - 2) + "┘", attr)

    # -- frame ---------------------------------------------------------------

    def draw_screen(self, now: dt.datetime | None = None) -> None:
        model = self.model
        model.zones.clear()
        self.stdscr.erase()
        height, width = self.stdscr.getmaxyx()

        self.draw_status_bar(width)
        self.draw_tab_bar(width)
        self.draw_list_pane(now)
        self.draw_detail_pane(now)
        self.draw_command_bar(height - 1, width)

        popup = model.editor.visible or model.modal is not None
        if popup and self.curses_mod:
            self.stdscr.noutrefresh()
            self.draw_overlay()
            self.curses_mod.doupdate()
        else:
            self.stdscr.refresh()

    def draw_status_bar(self, width: int) -> None:
        model = self.model
        status_attr = self.colors.attrs.status_attr
        self.safe_addstr(0, 0, " " * max(width - 1, 0), status_attr)

        left = status_left(model.host_counts)
        center = status_center(model)
        right = status_right(model)
        left_len = sum(len(text) for text, _ in left)
        self.draw_segments(0, 1, left, max(width - 2, 0))

        right_x = max(width - len(right) - 2, left_len + 2)
        if center:
            # center between the counts and the connection status
            gap = right_x - (left_len + 1) - len(center)
            center_x = left_len + 1 + max(gap // 2, 1)
            clipped = center[: max(right_x - center_x - 1, 0)]
            self.safe_addstr(0, center_x, clipped, self.colors.attr("filter"))
        self.safe_addstr(0, right_x, right[: max(width - right_x - 1, 0)], status_attr)

    def draw_tab_bar(self, width: int) -> None:
        x = 1
        for i, label in enumerate(tab_labels(self.model.tab)):
            if x + len(label) >= width:
                break
            attrs = self.colors.attrs
            attr = attrs.tab_active_attr if i == self.model.tab else attrs.tab_attr
            self.safe_addstr(1, x, label, attr)
            self.model.zones.register(f"tab_{i}", x, 1, len(label))
            x += len(label) + 1

    def draw_list_pane(self, now: dt.datetime | None) -> None:
        model = self.model
        layout = model.layout
        top = layout.content_y
        self.draw_box(
            top,
            layout.list_x,
            layout.content_height,
            layout.list_pane_width,
            focused=model.focused is Pane.LIST,
        )
        x = layout.list_x + 1
        lw = layout.list_width
        max_rows = layout.pane_height - 1
        first_row = top + 2

        if model.tab is Tab.GRAPHS:
            graphs = model.graphs
            self.safe_addstr(top + 1, x, graphs.header()[:lw], self.colors.attr("title"))
            if not graphs.has_items and model.loading:
                self.safe_addstr(first_row, x, "Loading metrics..."[:lw], self.colors.attr("muted"))
                return
            end = min(graphs.offset + max_rows, graphs.tree.visible_count())
            for row, i in enumerate(range(graphs.offset, end)):
                node = graphs.tree.visible_node(i)
                if node is None:
                    continue
                segments = node_row(
                    node,
                    lw,
                    sparkline=graphs.sparklines.get(node.item.itemid, "") if node.item else "",
                    loading=graphs.is_host_loading(node.host_id),
                )
                self.draw_segments(first_row + row, x, segments, lw, selected=i == graphs.cursor)
                model.zones.register(f"graph_node_{i}", x, first_row + row, lw)
            return

        pane = model.active_list()
        if pane is None:
            return
        self.safe_addstr(top + 1, x, pane.header()[:lw], self.colors.attr("title"))
        prefix = {Tab.ALERTS: "alert", Tab.HOSTS: "host", Tab.EVENTS: "event"}[model.tab]
        if not pane.filtered:
            empty = "Loading..." if model.loading else f"No {prefix}s"
            self.safe_addstr(first_row, x, empty[:lw], self.colors.attr("muted"))
            return
        for row, (i, record) in enumerate(pane.visible_items()[:max_rows]):
            if model.tab is Tab.ALERTS:
                segments = alert_row(record, lw, now)
            elif model.tab is Tab.HOSTS:
                segments = host_row(record, lw)
            else:
                segments = event_row(record, lw, now)
            self.draw_segments(first_row + row, x, segments, lw, selected=i == pane.cursor)
            model.zones.register(f"{prefix}_{i}", x, first_row + row, lw)

    def draw_detail_pane(self, now: dt.datetime | None) -> None:
        model = self.model
        layout = model.layout
        detail = model.detail
        top = layout.content_y
        self.draw_box(
            top,
            layout.detail_x,
            layout.content_height,
            layout.detail_width + 2,
            focused=model.focused is Pane.DETAIL,
        )
        x = layout.detail_x + 1
        dw = layout.detail_width
        self.safe_addstr(top + 1, x, detail.title()[:dw], self.colors.attr("title"))
        self.safe_addstr(top + 2, x, "─" * dw, self.colors.attr("border"))
        for row, line in enumerate(detail.visible_lines(now)):
            y = top + 3 + row
            if y >= top + layout.content_height - 1:
                break
            self.draw_segments(y, x, line, dw)

    def draw_command_bar(self, row: int, width: int) -> None:
        bar = self.model.command_bar
        if bar.is_active():
            self.safe_addstr(row, 0, bar.text()[: max(width - 1, 0)], self.colors.attr("value"))
        else:
            self.safe_addstr(row, 0, COMMAND_HINT[: max(width - 1, 0)], self.colors.attr("muted"))

    def draw_overlay(self) -> None:
        model = self.model
        if model.editor.visible:
            editor = model.editor
            draw_popup(
                self.stdscr,
                self.curses_mod,
                self.colors,
                title=editor.title,
                lines=editor_lines(editor),
                footer=editor.footer(),
                width=editor.width,
                height=editor.height,
            )
        if model.modal is not None:
            lines, footer = modal_lines(model.modal)
            draw_popup(
                self.stdscr,
                self.curses_mod,
                self.colors,
                title=model.modal.title,
                lines=lines,
                footer=footer,
            )
