"""Chotko CLI using Click."""

from __future__ import annotations

import logging
import logging.handlers
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from importlib.metadata import version
from pathlib import Path

import click

from .cli_types import DashboardArgs
from .config import (
    Config,
    config_dir,
    config_exists,
    load_config,
    prompt_for_config,
    run_wizard,
)
from .dashboard.theme import BUILTIN_THEME_NAMES, default_theme, load_theme
from .exceptions import (
    ChotkoError,
    ConfigError,
    IgnoreListError,
    ThemeError,
    UserError,
)
from .ignores import IgnoreList

# Module logger
logger = logging.getLogger("chotko")

LOG_FORMAT = "%(levelname)s: %(message)s"

# Newest records kept for stderr while the dashboard owns the terminal
HELD_LOG_RECORDS = 10000

EPILOG = f"""\b
Examples:
  # Run with config file (or setup wizard if none exists)
  chotko

\b
  # Connect with API token
  chotko -s https://zabbix.example.com -t YOUR_API_TOKEN

\b
  # Connect with username/password
  chotko -s https://zabbix.example.com -u Admin -p password

\b
  # Use specific theme
  chotko --theme dracula

\b
  # Show only high severity alerts
  chotko --min-severity 4

\b
Available themes:
  {", ".join(BUILTIN_THEME_NAMES)}

\b
Key bindings (press ? in the dashboard for the full list):
  j/k, Up/Down  Navigate
  Tab           Switch panes
  a             Acknowledge alert
  r             Refresh
  /             Filter
  :             Command mode
  q             Quit

\b
Configuration:
  Config file:   ~/.config/chotko/config.yaml
  Custom themes: ~/.config/chotko/themes/
"""


def setup_logging(debug: bool = False, log_file: str | None = None) -> None:
    """Configure logging for the CLI.

    The dashboard owns the terminal while it runs, so stderr output is held
    back until it exits (see ``hold_stderr_logs``); pass ``log_file`` to
    watch it live.
    """
    level = logging.DEBUG if debug else logging.WARNING
    logger.setLevel(level)
    if logger.handlers:
        return
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


class HeldLogHandler(logging.handlers.MemoryHandler):
    """Buffers records until flushed by hand, keeping only the newest ``capacity``."""

    def shouldFlush(self, record: logging.LogRecord) -> bool:
        if len(self.buffer) > self.capacity:
            del self.buffer[0]
        return False


@contextmanager
def hold_stderr_logs() -> Iterator[None]:
    """Hold back stderr log output until the block exits.

    curses draws on the same terminal, so records written to stderr while it
    is active corrupt the screen. File handlers are left alone.
    """
    swapped = [
        (h, HeldLogHandler(HELD_LOG_RECORDS, flushLevel=logging.CRITICAL + 1))
        for h in logger.handlers
        if type(h) is logging.StreamHandler and h.stream is sys.stderr
    ]
    for handler, held in swapped:
        logger.removeHandler(handler)
        logger.addHandler(held)
    try:
        yield
    finally:
        for handler, held in swapped:
            logger.removeHandler(held)
            logger.addHandler(handler)
            held.setTarget(handler)
            held.flush()
            held.close()


def resolve_config(config_path: str | None) -> Config:
    """Load the config file, offering the setup wizard when it does not exist."""
    path = Path(config_path) if config_path else None
    if config_exists(path):
        return load_config(path)
    if not prompt_for_config():
        raise ConfigError("configuration required. Run with --help for options")
    return run_wizard(path)


def apply_overrides(
    config: Config,
    *,
    server: str | None,
    token: str | None,
    user: str | None,
    password: str | None,
    theme: str | None,
    refresh: int | None,
    min_severity: int | None,
) -> None:
    """Apply command line flags on top of the loaded config.

    A token replaces username/password; a username replaces the token.
    """
    if server:
        config.server.url = server
    if token:
        config.auth.token = token
        config.auth.username = ""
        config.auth.password = ""
    if user:
        config.auth.username = user
        config.auth.token = ""
    if password:
        config.auth.password = password
    if theme:
        config.display.theme = theme
    if refresh is not None and refresh > 0:
        config.display.refresh_interval = refresh
    if min_severity is not None:
        config.display.min_severity = min_severity


def load_ignores() -> IgnoreList | None:
    try:
        return IgnoreList.load(config_dir())
    except IgnoreListError as e:
        # leave the broken file alone rather than overwrite it on the next save
        logger.warning("Ignore list disabled: %s", e)
        return None


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EPILOG,
)
@click.version_option(version("chotko"), "--version", "-v", prog_name="chotko")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Path to config file (default: ~/.config/chotko/config.yaml).",
)
@click.option("--server", "-s", help="Zabbix server URL (overrides config).")
@click.option("--token", "-t", help="API token (overrides config).")
@click.option("--user", "-u", help="Username for auth (overrides config).")
@click.option("--password", "-p", help="Password for auth (overrides config).")
@click.option("--theme", help='Theme name (default: "nord").')
@click.option("--refresh", "-r", type=int, help="Refresh interval in seconds (default: 30).")
@click.option(
    "--min-severity",
    type=click.IntRange(0, 5),
    help="Minimum severity to display (0-5).",
)
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    help="Enable debug logging.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    help="Write log messages to this file instead of stderr.",
)
def cli(
    config_path: str | None,
    server: str | None,
    token: str | None,
    user: str | None,
    password: str | None,
    theme: str | None,
    refresh: int | None,
    min_severity: int | None,
    debug: bool,
    log_file: str | None,
):
    """Chotko: terminal dashboard for Zabbix."""
    setup_logging(debug=debug, log_file=log_file)

    config = resolve_config(config_path)
    apply_overrides(
        config,
        server=server,
        token=token,
        user=user,
        password=password,
        theme=theme,
        refresh=refresh,
        min_severity=min_severity,
    )
    try:
        config.validate()
    except ConfigError as e:
        raise ConfigError(f"Configuration error: {e}") from e

    try:
        color_theme = load_theme(config.display.theme, config_dir())
    except ThemeError as e:
        click.echo(
            f"Warning: Could not load theme '{config.display.theme}', using default: {e}",
            err=True,
        )
        color_theme = default_theme()

    from .dashboard import run_dashboard

    args = DashboardArgs(config=config, theme=color_theme, ignores=load_ignores())
    with hold_stderr_logs():
        run_dashboard(args)


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except UserError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(e.rc)
    except ChotkoError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)
    except KeyboardInterrupt:
        click.echo("ERROR: Interrupted", err=True)
        sys.exit(130)
