"""Chotko interactive dashboard.

This package keeps state, behavior and drawing apart:

- messages.py / commands.py: What happened, and the off-loop work to do next
- model.py: Dashboard state and pane geometry
- update.py: The dispatch function (message + model -> model + commands)
- lists.py / tree.py / detail.py / editor.py / command_bar.py: Pane models (no curses)
- display.py / help_popup.py / curses_colors.py / keys.py: Curses rendering and input
- entry.py: Event loop and worker pool
"""

from __future__ import annotations

from .entry import Runner, run_dashboard
from .model import DashboardModel
from .update import update

__all__ = ["DashboardModel", "Runner", "run_dashboard", "update"]
