"""Chotko constants."""

from __future__ import annotations

APP_NAME = "chotko"
PROJECT_URL = "https://github.com/harpchad/chotko"

# Config directory layout
CONFIG_FILE_NAME = "config.yaml"
IGNORES_FILE_NAME = "ignores.yaml"
THEMES_DIR_NAME = "themes"
CONFIG_DIR_MODE = 0o755
IGNORES_DIR_MODE = 0o750
SECRET_FILE_MODE = 0o600
TEMPLATE_FILE_MODE = 0o644

# Display defaults
DEFAULT_REFRESH_INTERVAL = 30
MIN_REFRESH_INTERVAL = 5
DEFAULT_MIN_SEVERITY = 0
DEFAULT_THEME = "nord"

# Graphs defaults
DEFAULT_GRAPH_CATEGORIES = [
    "system.cpu",
    "system.load",
    "vm.memory",
    "vfs.fs",
    "net.if",
    "proc",
]
DEFAULT_HISTORY_HOURS = 3
DEFAULT_MAX_ITEMS_PER_HOST = 50

# API client
API_PATH = "/api_jsonrpc.php"
JSONRPC_CONTENT_TYPE = "application/json-rpc"
DEFAULT_TIMEOUT_S = 30
LOGOUT_TIMEOUT_S = 5

# event.acknowledge action bits
ACK_ACTION_CLOSE = 1
ACK_ACTION_ACKNOWLEDGE = 2
ACK_ACTION_MESSAGE = 4
ACK_ACTION_CHANGE_SEVERITY = 8
ACK_ACTION_UNACKNOWLEDGE = 16
ACK_ACTION_SUPPRESS = 32
ACK_ACTION_UNSUPPRESS = 64

# Dashboard
RECENT_EVENTS_HOURS = 24
RECENT_EVENTS_LIMIT = 500
LIST_WIDTH_PERCENT = 45
MOUSE_SCROLL_LINES = 3
SPARKLINE_WIDTH = 8
DEFAULT_WORKERS = 4
