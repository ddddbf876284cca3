"""Value formatting and text charts for the dashboard."""

from __future__ import annotations

import math

SPARK_BLOCKS = "▁▂▃▄▅▆▇█"


def clip_cell(value: str, width: int) -> str:
    """Clip and pad a cell to width using ASCII ellipsis."""
    if width <= 0:
        return ""
    if len(value) <= width:
        return value.ljust(width)
    if width <= 3:
        return value[:width]
    return f"{value[: width - 3]}..."


def format_bytes(value: float) -> str:
    """Format a byte count with 1024 steps, e.g. ``1.5K``."""
    unit = 1024
    if value < unit:
        return f"{value:.0f}"
    div, exp = float(unit), 0
    n = value / unit
    while n >= unit and exp < 5:
        div *= unit
        exp += 1
        n /= unit
    return f"{value / div:.1f}{'KMGTPE'[exp]}"


def format_value(value: float, units: str) -> str:
    """Format a metric value for display according to its Zabbix units."""
    if units == "%":
        return f"{value:.1f}%"
    if units in ("B", "Bps"):
        return format_bytes(value) + units[1:]
    if units == "s":
        if value < 1:
            return f"{value * 1000:.0f}ms"
        return f"{value:.2f}s"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1000:
        return f"{value / 1000:.1f}K"
    if value == int(value):
        return f"{value:.0f}"
    return f"{value:.2f}"


def format_axis_value(value: float, units: str) -> str:
    """Compact value for chart axis labels."""
    if units in ("B", "Bps"):
        return format_bytes(value)
    if units == "%":
        return f"{value:.0f}%"
    magnitude = abs(value)
    for threshold, suffix in ((1e12, "T"), (1e9, "G"), (1e6, "M"), (1e3, "K")):
        if magnitude >= threshold:
            return f"{value / threshold:.1f}{suffix}"
    if magnitude >= 1:
        return f"{value:.0f}"
    if magnitude >= 0.01:
        return f"{value:.2f}"
    return f"{value:.0f}"


def calc_stats(values: list[float]) -> tuple[float, float, float]:
    """Return (min, max, avg); zeros for an empty series."""
    if not values:
        return 0.0, 0.0, 0.0
    return min(values), max(values), sum(values) / len(values)


def resample(values: list[float], width: int) -> list[float]:
    """Average a series down to at most ``width`` buckets."""
    if width <= 0 or not values:
        return []
    if len(values) <= width:
        return list(values)
    bucket = len(values) / width
    out = []
    for i in range(width):
        chunk = values[int(i * bucket) : max(int((i + 1) * bucket), int(i * bucket) + 1)]
        out.append(sum(chunk) / len(chunk))
    return out


def sparkline(values: list[float], width: int) -> str:
    """One-line block chart of the last samples, scaled to the series range."""
    points = resample(values, width)
    if not points:
        return ""
    lo, hi = min(points), max(points)
    if math.isclose(lo, hi):
        return SPARK_BLOCKS[len(SPARK_BLOCKS) // 2 - 1] * len(points)
    top = len(SPARK_BLOCKS) - 1
    return "".join(SPARK_BLOCKS[round((v - lo) / (hi - lo) * top)] for v in points)


def render_chart(values: list[float], *, width: int, height: int, units: str = "") -> list[str]:
    """Multi-row block chart with a y-axis label column.

    Returns ``height`` lines; the top line carries the max label and the
    bottom line the min label.
    """
    if height <= 0 or not values:
        return []
    lo, hi = min(values), max(values)
    label_hi = format_axis_value(hi, units)
    label_lo = format_axis_value(lo, units)
    label_w = max(len(label_hi), len(label_lo))
    points = resample(values, max(width - label_w - 2, 1))
    span = hi - lo
    levels = height * 8
    heights = [
        levels // 2 if math.isclose(span, 0.0) else max(1, round((v - lo) / span * levels))
        for v in points
    ]
    lines = []
    for row in range(height):
        floor = (height - row - 1) * 8
        cells = []
        for h in heights:
            fill = h - floor
            if fill >= 8:
                cells.append("█")
            elif fill <= 0:
                cells.append(" ")
            else:
                cells.append(SPARK_BLOCKS[fill - 1])
        if row == 0:
            label = label_hi
        elif row == height - 1:
            label = label_lo
        else:
            label = ""
        lines.append(f"{label.rjust(label_w)} ┤{''.join(cells)}")
    return lines
