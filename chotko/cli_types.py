"""Type definitions for CLI command arguments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .constants import DEFAULT_WORKERS

if TYPE_CHECKING:
    from .config import Config
    from .dashboard.theme import Theme
    from .ignores import IgnoreList


@dataclass
class DashboardArgs:
    """Arguments for the dashboard, resolved from config file and CLI flags.

    Attributes:
        config: Validated configuration with CLI overrides applied
        theme: Color theme for the screen
        ignores: Persisted ignore rules; None disables ignoring
        workers: Size of the worker pool running API commands
    """

    config: Config
    theme: Theme
    ignores: IgnoreList | None = None
    workers: int = DEFAULT_WORKERS
