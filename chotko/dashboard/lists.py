"""Scrollable, filterable list models for the Alerts, Hosts and Events tabs."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from ..zabbix.types import Event, Host, Problem

T = TypeVar("T")

IgnorePredicate = Callable[[str, str], bool]


class ListModel(Generic[T]):
    """Cursor, viewport and text filter over a source list.

    ``height`` is the pane height including its border and header row, so
    the number of visible rows is ``height - 2``.
    """

    title = "ITEMS"

    def __init__(self) -> None:
        self.items: list[T] = []
        self.filtered: list[T] = []
        self.cursor = 0
        self.offset = 0
        self.width = 0
        self.height = 0
        self.focused = False
        self.text_filter = ""

    # -- filtering -----------------------------------------------------------

    def matches_text(self, item: T, needle: str) -> bool:
        raise NotImplementedError

    def accepts(self, item: T) -> bool:
        """Non-text predicates; subclasses extend this."""
        return True

    def apply_filter(self) -> None:
        needle = self.text_filter.lower()
        self.filtered = [
            item
            for item in self.items
            if self.accepts(item) and (not needle or self.matches_text(item, needle))
        ]
        self.cursor = min(max(self.cursor, 0), max(len(self.filtered) - 1, 0))
        self.ensure_visible()

    def set_items(self, items: list[T]) -> None:
        self.items = list(items)
        self.apply_filter()

    def set_text_filter(self, text: str) -> None:
        self.text_filter = text
        self.apply_filter()

    # -- geometry --------------------------------------------------------

    def set_size(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.ensure_visible()

    def set_focused(self, focused: bool) -> None:
        self.focused = focused

    def visible_rows(self) -> int:
        return max(self.height - 2, 1)

    def ensure_visible(self) -> None:
        rows = self.visible_rows()
        if self.cursor < self.offset:
            self.offset = self.cursor
        elif self.cursor >= self.offset + rows:
            self.offset = self.cursor - rows + 1
        self.offset = min(max(self.offset, 0), self.max_offset())

    def max_offset(self) -> int:
        return max(len(self.filtered) - self.visible_rows(), 0)

    # -- navigation ------------------------------------------------------

    def move_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1
            self.ensure_visible()

    def move_down(self) -> None:
        if self.cursor < len(self.filtered) - 1:
            self.cursor += 1
            self.ensure_visible()

    def page_up(self) -> None:
        self.cursor = max(self.cursor - self.visible_rows(), 0)
        self.ensure_visible()

    def page_down(self) -> None:
        self.cursor = max(min(self.cursor + self.visible_rows(), len(self.filtered) - 1), 0)
        self.ensure_visible()

    def go_to_top(self) -> None:
        self.cursor = 0
        self.ensure_visible()

    def go_to_bottom(self) -> None:
        self.cursor = max(len(self.filtered) - 1, 0)
        self.ensure_visible()

    def set_cursor(self, index: int) -> None:
        if 0 <= index < len(self.filtered):
            self.cursor = index
            self.ensure_visible()

    def scroll(self, delta: int) -> None:
        """Move the viewport only; the cursor stays where it is."""
        self.offset = min(max(self.offset + delta, 0), self.max_offset())

    def handle_key(self, key: str) -> bool:
        """Apply a navigation key; returns True when the key was consumed."""
        if key in ("up", "k"):
            self.move_up()
        elif key in ("down", "j"):
            self.move_down()
        elif key in ("pgup", "ctrl+u"):
            self.page_up()
        elif key in ("pgdown", "ctrl+d"):
            self.page_down()
        elif key in ("home", "g"):
            self.go_to_top()
        elif key in ("end", "G"):
            self.go_to_bottom()
        else:
            return False
        return True

    # -- accessors -------------------------------------------------------

    def selected(self) -> T | None:
        if 0 <= self.cursor < len(self.filtered):
            return self.filtered[self.cursor]
        return None

    def visible_items(self) -> list[tuple[int, T]]:
        end = self.offset + self.visible_rows()
        return list(enumerate(self.filtered[self.offset : end], start=self.offset))

    def count(self) -> tuple[int, int]:
        """Return (total, filtered)."""
        return len(self.items), len(self.filtered)

    def filtered_count(self) -> int:
        return len(self.filtered)

    def header(self) -> str:
        total, shown = self.count()
        if shown != total:
            return f"{self.title} ({shown}/{total})"
        return f"{self.title} ({total})"


class AlertList(ListModel[Problem]):
    title = "ALERTS"

    def __init__(self, is_ignored: IgnorePredicate | None = None) -> None:
        super().__init__()
        self.min_severity = 0
        self.is_ignored = is_ignored

    def accepts(self, item: Problem) -> bool:
        if item.severity_int() < self.min_severity:
            return False
        if self.is_ignored is not None and self.is_ignored(item.host_id(), item.trigger_id()):
            return False
        return True

    def matches_text(self, item: Problem, needle: str) -> bool:
        return needle in item.name.lower() or needle in item.host_name().lower()

    def set_min_severity(self, severity: int) -> None:
        self.min_severity = severity
        self.apply_filter()

    def set_ignore_predicate(self, is_ignored: IgnorePredicate | None) -> None:
        self.is_ignored = is_ignored
        self.apply_filter()


class HostList(ListModel[Host]):
    title = "HOSTS"

    def matches_text(self, item: Host, needle: str) -> bool:
        return (
            needle in item.display_name.lower()
            or needle in item.host.lower()
            or needle in item.primary_ip().lower()
        )


class EventList(ListModel[Event]):
    title = "EVENTS"

    def matches_text(self, item: Event, needle: str) -> bool:
        return needle in item.name.lower() or needle in item.host_name().lower()
