"""Named screen rectangles recorded while drawing, used for mouse hit-testing."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Zone:
    x: int
    y: int
    width: int
    height: int = 1

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height


class ZoneMap:
    """Zones registered during the last frame.

    The renderer calls :meth:`clear` at the start of each frame so rows that
    scrolled out of view can no longer be clicked.
    """

    def __init__(self) -> None:
        self._zones: dict[str, Zone] = {}

    def clear(self) -> None:
        self._zones.clear()

    def register(self, zone_id: str, x: int, y: int, width: int, height: int = 1) -> None:
        if width > 0 and height > 0:
            self._zones[zone_id] = Zone(x, y, width, height)

    def get(self, zone_id: str) -> Zone | None:
        return self._zones.get(zone_id)

    def in_bounds(self, zone_id: str, x: int, y: int) -> bool:
        zone = self._zones.get(zone_id)
        return zone is not None and zone.contains(x, y)

    def resolve(self, prefix: str, x: int, y: int) -> int | None:
        """Return ``i`` of the zone ``<prefix>_<i>`` under the pointer."""
        for zone_id, zone in self._zones.items():
            if not zone.contains(x, y):
                continue
            head, _, tail = zone_id.rpartition("_")
            if head == prefix and tail.isdigit():
                return int(tail)
        return None
