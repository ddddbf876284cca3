"""Zabbix JSON-RPC API client and entity types."""

from __future__ import annotations

from .client import ZabbixClient
from .types import Event, History, Host, HostCounts, HostMacro, Item, Problem, Trigger

__all__ = [
    "Event",
    "History",
    "Host",
    "HostCounts",
    "HostMacro",
    "Item",
    "Problem",
    "Trigger",
    "ZabbixClient",
]
