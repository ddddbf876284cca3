"""Chotko exception classes."""

from __future__ import annotations

from typing import Any


class ChotkoError(RuntimeError):
    """Base exception for Chotko errors."""


class UserError(ChotkoError):
    """Errors that should be shown to user without traceback."""

    def __init__(self, message: str, rc: int = 2):
        super().__init__(message)
        self.rc = rc


class ConfigError(UserError):
    """Configuration file missing, unreadable, or invalid."""

    def __init__(self, message: str, rc: int = 1):
        super().__init__(message, rc=rc)


class ZabbixError(ChotkoError):
    """Base exception for Zabbix API client failures."""


class TransportError(ZabbixError):
    """Request could not be sent, or the server answered with a non-200 status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(ZabbixError):
    """Response body was not a valid JSON-RPC envelope."""


class APIError(ZabbixError):
    """Server returned a JSON-RPC error object."""

    def __init__(self, code: int, message: str, data: Any = ""):
        self.code = code
        self.message = message
        self.data = data
        text = f"API error {code}: {message}"
        if data:
            text += f" ({data})"
        super().__init__(text)


class AuthError(ZabbixError):
    """Login was rejected by the server."""


class RequestCancelledError(ZabbixError):
    """Request was abandoned because the client is shutting down."""


class IgnoreListError(ChotkoError):
    """Ignore list could not be read or written."""


class DuplicateIgnoreError(IgnoreListError):
    """The host/trigger pair is already ignored."""


class ThemeError(ChotkoError):
    """Theme could not be found or parsed."""
