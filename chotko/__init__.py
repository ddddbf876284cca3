"""
Chotko - terminal dashboard for Zabbix.

Design goals:
- Talks to the Zabbix JSON-RPC API directly; nothing runs server-side.
- Curses UI that never blocks on the network.
- Actions (acknowledge, enable/disable, macro edits) go through the same API.
"""

from __future__ import annotations

from .cli import main
from .constants import APP_NAME
from .exceptions import ChotkoError, UserError

__all__ = [
    "APP_NAME",
    "ChotkoError",
    "UserError",
    "main",
]
