"""Host → category → item tree backing the Graphs tab.

History is fetched lazily: expanding a host for the first time asks the
caller to load that host's items, and the results are merged per item so
collapsing and re-expanding does not fetch again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..constants import SPARKLINE_WIDTH
from ..zabbix.types import History, Item
from .formatting import sparkline

CATEGORY_NAMES = {
    "system.cpu": "CPU",
    "system.load": "Load",
    "vm.memory": "Memory",
    "vfs.fs": "Filesystem",
    "net.if": "Network",
    "proc": "Processes",
}

OTHER_CATEGORY = "Other"


class NodeType(Enum):
    HOST = "host"
    CATEGORY = "category"
    ITEM = "item"


@dataclass(eq=False)
class TreeNode:
    id: str
    name: str
    type: NodeType
    depth: int
    host_id: str
    collapsed: bool = False
    children: list[TreeNode] = field(default_factory=list)
    item: Item | None = None
    category: str = ""

    def has_children(self) -> bool:
        return bool(self.children)

    def leaf_count(self) -> int:
        if self.type is NodeType.ITEM:
            return 1
        return sum(child.leaf_count() for child in self.children)


def format_category_name(prefix: str) -> str:
    if prefix in CATEGORY_NAMES:
        return CATEGORY_NAMES[prefix]
    last = prefix.split(".")[-1]
    if last:
        return last[:1].upper() + last[1:]
    return prefix


def extract_category(key: str, prefixes: list[str]) -> str:
    for prefix in prefixes:
        if key.startswith(prefix):
            return format_category_name(prefix)
    return OTHER_CATEGORY


class MetricTree:
    """Ordered forest of host nodes with a flattened visible list."""

    def __init__(self) -> None:
        self.roots: list[TreeNode] = []
        self.flat: list[TreeNode] = []
        self.nodes: dict[str, TreeNode] = {}
        self.items_by_host: dict[str, list[Item]] = {}

    @classmethod
    def build(
        cls, items: list[Item], prefixes: list[str], *, max_items_per_host: int = 0
    ) -> MetricTree:
        """Group items by host and category; every non-leaf starts collapsed."""
        tree = cls()
        host_names: dict[str, str] = {}
        for item in items:
            host_id = item.host_id()
            tree.items_by_host.setdefault(host_id, []).append(item)
            if item.host_name():
                host_names[host_id] = item.host_name()

        if max_items_per_host > 0:
            for host_id, host_items in tree.items_by_host.items():
                host_items.sort(key=lambda i: i.name)
                del host_items[max_items_per_host:]

        for host_id in sorted(
            tree.items_by_host, key=lambda hid: host_names.get(hid, f"Host {hid}")
        ):
            host_node = TreeNode(
                id=f"host:{host_id}",
                name=host_names.get(host_id, f"Host {host_id}"),
                type=NodeType.HOST,
                depth=0,
                host_id=host_id,
                collapsed=True,
            )
            tree.nodes[host_node.id] = host_node

            by_category: dict[str, list[Item]] = {}
            for item in tree.items_by_host[host_id]:
                by_category.setdefault(extract_category(item.key_, prefixes), []).append(item)

            for category in sorted(by_category):
                cat_node = TreeNode(
                    id=f"cat:{host_id}:{category}",
                    name=category,
                    type=NodeType.CATEGORY,
                    depth=1,
                    host_id=host_id,
                    collapsed=True,
                    category=category,
                )
                tree.nodes[cat_node.id] = cat_node
                for item in sorted(by_category[category], key=lambda i: i.name):
                    item_node = TreeNode(
                        id=f"item:{item.itemid}",
                        name=item.name,
                        type=NodeType.ITEM,
                        depth=2,
                        host_id=host_id,
                        item=item,
                        category=category,
                    )
                    tree.nodes[item_node.id] = item_node
                    cat_node.children.append(item_node)
                host_node.children.append(cat_node)
            tree.roots.append(host_node)

        tree.flatten()
        return tree

    def flatten(self) -> None:
        """Rebuild the visible list as a pre-order walk honoring collapse flags."""
        flat: list[TreeNode] = []

        def walk(node: TreeNode) -> None:
            flat.append(node)
            if not node.collapsed:
                for child in node.children:
                    walk(child)

        for root in self.roots:
            walk(root)
        self.flat = flat

    def toggle_node(self, node_id: str) -> None:
        node = self.nodes.get(node_id)
        if node is not None and node.has_children():
            node.collapsed = not node.collapsed
            self.flatten()

    def expand_all(self) -> None:
        for node in self.nodes.values():
            if node.has_children():
                node.collapsed = False
        self.flatten()

    def collapse_all(self) -> None:
        for node in self.nodes.values():
            if node.has_children():
                node.collapsed = True
        self.flatten()

    def get_node(self, node_id: str) -> TreeNode | None:
        return self.nodes.get(node_id)

    def item_count(self) -> int:
        return sum(1 for node in self.nodes.values() if node.type is NodeType.ITEM)

    def visible_count(self) -> int:
        return len(self.flat)

    def visible_node(self, index: int) -> TreeNode | None:
        if 0 <= index < len(self.flat):
            return self.flat[index]
        return None

    def find_node_index(self, node_id: str) -> int:
        for i, node in enumerate(self.flat):
            if node.id == node_id:
                return i
        return -1


class GraphsModel:
    """Pane state for the Graphs tab: tree, cursor, viewport and history."""

    def __init__(self, prefixes: list[str], *, max_items_per_host: int = 0) -> None:
        self.prefixes = list(prefixes)
        self.max_items_per_host = max_items_per_host
        self.tree = MetricTree()
        self.cursor = 0
        self.offset = 0
        self.width = 0
        self.height = 0
        self.focused = False
        self.history: dict[str, list[History]] = {}
        self.sparklines: dict[str, str] = {}
        self.loading_hosts: set[str] = set()
        self.has_items = False

    # -- data ------------------------------------------------------------

    def set_items(self, items: list[Item]) -> None:
        """Rebuild the tree, keeping expanded nodes and the selection."""
        expanded = {nid for nid, node in self.tree.nodes.items() if not node.collapsed}
        selected = self.selected()
        selected_id = selected.id if selected else ""

        self.tree = MetricTree.build(
            items, self.prefixes, max_items_per_host=self.max_items_per_host
        )
        self.has_items = True
        for node_id in expanded:
            node = self.tree.get_node(node_id)
            if node is not None and node.has_children():
                node.collapsed = False
        self.tree.flatten()

        idx = self.tree.find_node_index(selected_id) if selected_id else -1
        if idx >= 0:
            self.cursor = idx
        else:
            self.cursor = min(self.cursor, max(self.tree.visible_count() - 1, 0))
        self.ensure_visible()

    def merge_history(self, history: dict[str, list[History]]) -> None:
        for item_id, samples in history.items():
            self.history[item_id] = samples
        self._regenerate_sparklines()

    def _regenerate_sparklines(self) -> None:
        self.sparklines = {
            item_id: sparkline([s.value_float() for s in samples], SPARKLINE_WIDTH)
            for item_id, samples in self.history.items()
            if samples
        }

    def get_host_items(self, host_id: str) -> list[Item]:
        return self.tree.items_by_host.get(host_id, [])

    def get_history(self, item_id: str) -> list[History]:
        return self.history.get(item_id, [])

    def has_host_history(self, host_id: str) -> bool:
        return any(item.itemid in self.history for item in self.get_host_items(host_id))

    def set_host_loading(self, host_id: str, loading: bool) -> None:
        if loading:
            self.loading_hosts.add(host_id)
        else:
            self.loading_hosts.discard(host_id)

    def is_host_loading(self, host_id: str) -> bool:
        return host_id in self.loading_hosts

    # -- geometry & navigation -------------------------------------------

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
        return max(self.tree.visible_count() - self.visible_rows(), 0)

    def selected(self) -> TreeNode | None:
        return self.tree.visible_node(self.cursor)

    def selected_item(self) -> Item | None:
        node = self.selected()
        if node is not None and node.type is NodeType.ITEM:
            return node.item
        return None

    def count(self) -> tuple[int, int]:
        """Return (item total, visible rows)."""
        return self.tree.item_count(), self.tree.visible_count()

    def move_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1
            self.ensure_visible()

    def move_down(self) -> None:
        if self.cursor < self.tree.visible_count() - 1:
            self.cursor += 1
            self.ensure_visible()

    def page_up(self) -> None:
        self.cursor = max(self.cursor - self.visible_rows(), 0)
        self.ensure_visible()

    def page_down(self) -> None:
        self.cursor = max(min(self.cursor + self.visible_rows(), self.tree.visible_count() - 1), 0)
        self.ensure_visible()

    def go_to_top(self) -> None:
        self.cursor = 0
        self.offset = 0

    def go_to_bottom(self) -> None:
        self.cursor = max(self.tree.visible_count() - 1, 0)
        self.ensure_visible()

    def scroll(self, delta: int) -> None:
        self.offset = min(max(self.offset + delta, 0), self.max_offset())

    def toggle(self) -> str:
        """Toggle the selected node.

        Returns:
            Host id whose history must be fetched, or "" when nothing is needed
        """
        node = self.selected()
        if node is None:
            return ""
        was_collapsed = node.collapsed
        self.tree.toggle_node(node.id)
        self.ensure_visible()
        if node.type is NodeType.HOST and was_collapsed and not self.has_host_history(node.host_id):
            self.set_host_loading(node.host_id, True)
            return node.host_id
        return ""

    def click_node(self, index: int) -> str:
        """Select the visible node at ``index`` and toggle it."""
        if self.tree.visible_node(index) is None:
            return ""
        self.cursor = index
        self.ensure_visible()
        return self.toggle()

    def expand_all(self) -> None:
        self.tree.expand_all()
        self.ensure_visible()

    def collapse_all(self) -> None:
        self.tree.collapse_all()
        self.cursor = 0
        self.offset = 0

    def handle_key(self, key: str) -> tuple[bool, str]:
        """Apply a key.

        Returns:
            (consumed, host id to fetch history for or "")
        """
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
        elif key in ("enter", "space"):
            return True, self.toggle()
        elif key == "E":
            self.expand_all()
        elif key == "C":
            self.collapse_all()
        else:
            return False, ""
        return True, ""

    def header(self) -> str:
        total, visible = self.count()
        text = f"GRAPHS ({total} items"
        if visible != total:
            text += f", {visible} visible"
        return text + ")"
