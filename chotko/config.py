"""Configuration file handling and first-run setup wizard."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import click
import yaml

from .constants import (
    APP_NAME,
    CONFIG_DIR_MODE,
    CONFIG_FILE_NAME,
    DEFAULT_GRAPH_CATEGORIES,
    DEFAULT_HISTORY_HOURS,
    DEFAULT_MAX_ITEMS_PER_HOST,
    DEFAULT_MIN_SEVERITY,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_THEME,
    DEFAULT_TIMEOUT_S,
    MIN_REFRESH_INTERVAL,
    PROJECT_URL,
    SECRET_FILE_MODE,
)
from .exceptions import ConfigError
from .utils import write_private_file

logger = logging.getLogger(__name__)

CONFIG_HEADER = f"# Chotko Configuration\n# {PROJECT_URL}\n\n"


@dataclass
class ServerConfig:
    url: str = ""
    insecure_skip_verify: bool = False
    timeout: int = DEFAULT_TIMEOUT_S


@dataclass
class AuthConfig:
    token: str = ""
    username: str = ""
    password: str = ""


@dataclass
class DisplayConfig:
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    min_severity: int = DEFAULT_MIN_SEVERITY
    theme: str = DEFAULT_THEME


@dataclass
class GraphsConfig:
    categories: list[str] = field(default_factory=lambda: list(DEFAULT_GRAPH_CATEGORIES))
    history_hours: int = DEFAULT_HISTORY_HOURS
    max_items_per_host: int = DEFAULT_MAX_ITEMS_PER_HOST


@dataclass
class Config:
    """Top-level configuration, mirroring the sections of config.yaml."""

    server: ServerConfig = field(default_factory=ServerConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    graphs: GraphsConfig = field(default_factory=GraphsConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create Config from a parsed YAML mapping, defaulting missing keys."""
        config = cls()

        server = data.get("server") or {}
        config.server = ServerConfig(
            url=str(server.get("url", "") or ""),
            insecure_skip_verify=bool(server.get("insecure_skip_verify", False)),
            timeout=int(server.get("timeout", DEFAULT_TIMEOUT_S) or DEFAULT_TIMEOUT_S),
        )

        auth = data.get("auth") or {}
        config.auth = AuthConfig(
            token=str(auth.get("token", "") or ""),
            username=str(auth.get("username", "") or ""),
            password=str(auth.get("password", "") or ""),
        )

        display = data.get("display") or {}
        config.display = DisplayConfig(
            refresh_interval=int(display.get("refresh_interval", DEFAULT_REFRESH_INTERVAL)),
            min_severity=int(display.get("min_severity", DEFAULT_MIN_SEVERITY)),
            theme=str(display.get("theme", DEFAULT_THEME) or DEFAULT_THEME),
        )

        graphs = data.get("graphs") or {}
        config.graphs = GraphsConfig(
            categories=[str(c) for c in graphs.get("categories") or []],
            history_hours=int(graphs.get("history_hours", 0) or 0),
            max_items_per_host=int(
                graphs.get("max_items_per_host", DEFAULT_MAX_ITEMS_PER_HOST)
                or DEFAULT_MAX_ITEMS_PER_HOST
            ),
        )
        return config

    def validate(self) -> None:
        """Check required settings and normalize out-of-range values.

        Raises:
            ConfigError: If the server URL or credentials are missing
        """
        if not self.server.url:
            raise ConfigError("server URL is required")
        if not self.auth.token and not (self.auth.username and self.auth.password):
            raise ConfigError(
                "authentication required: provide either API token or username/password"
            )
        if self.display.refresh_interval < MIN_REFRESH_INTERVAL:
            self.display.refresh_interval = MIN_REFRESH_INTERVAL
        if not 0 <= self.display.min_severity <= 5:
            self.display.min_severity = 0

    def use_token(self) -> bool:
        return bool(self.auth.token)

    def graph_categories(self) -> list[str]:
        return list(self.graphs.categories) or list(DEFAULT_GRAPH_CATEGORIES)

    def history_hours(self) -> int:
        return self.graphs.history_hours if self.graphs.history_hours > 0 else DEFAULT_HISTORY_HOURS


def config_dir() -> Path:
    """Return the Chotko config directory.

    ``$XDG_CONFIG_HOME`` wins, then ``%APPDATA%`` on Windows, then ``~/.config``.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def config_path() -> Path:
    return config_dir() / CONFIG_FILE_NAME


def config_exists(path: Path | None = None) -> bool:
    return (path or config_path()).exists()


def load_config(path: str | Path | None = None) -> Config:
    """Load configuration from YAML.

    Raises:
        ConfigError: If the file is missing or cannot be parsed
    """
    path = Path(path) if path else config_path()
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"failed to read config file: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse config file: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"failed to parse config file: {path}")
    try:
        return Config.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"failed to parse config file: {e}") from e


def save_config(config: Config, path: str | Path | None = None) -> Path:
    """Write configuration with owner-only permissions and return its path."""
    path = Path(path) if path else config_path()
    body = yaml.safe_dump(asdict(config), sort_keys=False, allow_unicode=True)
    try:
        write_private_file(
            path, CONFIG_HEADER + body, mode=SECRET_FILE_MODE, dir_mode=CONFIG_DIR_MODE
        )
    except OSError as e:
        raise ConfigError(f"failed to write config file: {e}") from e
    logger.debug("Saved configuration to %s", path)
    return path


def prompt_for_config() -> bool:
    """Ask whether to run the setup wizard when no config exists."""
    click.echo()
    click.echo("No configuration file found.")
    click.echo()
    return click.confirm("Would you like to run the setup wizard?", default=True)


def run_wizard(path: Path | None = None) -> Config:
    """Interactively build and save a configuration.

    Raises:
        ConfigError: If a required answer is left empty or saving fails
    """
    from .dashboard.theme import BUILTIN_THEME_NAMES, save_theme_template

    path = path or config_path()
    config = Config()

    click.echo()
    click.secho("Welcome to Chotko setup", bold=True)
    click.echo("Let's configure your Zabbix connection.")
    click.echo()

    url = click.prompt(
        "Zabbix Server URL (e.g., https://zabbix.example.com)", default="", show_default=False
    ).strip()
    if not url:
        raise ConfigError("server URL is required")
    config.server.url = url.rstrip("/")

    click.echo()
    click.echo("Authentication method:")
    click.echo("  1. API Token (recommended for Zabbix 5.4+)")
    click.echo("  2. Username/Password")
    choice = click.prompt("Select", type=click.Choice(["1", "2"]), default="1")

    if choice == "1":
        click.echo()
        click.echo("To create an API token:")
        click.echo("  1. Log in to Zabbix web interface")
        click.echo("  2. Go to User settings > API tokens")
        click.echo("  3. Create a new token")
        click.echo()
        token = click.prompt("API Token", default="", show_default=False, hide_input=True).strip()
        if not token:
            raise ConfigError("API token is required")
        config.auth.token = token
    else:
        username = click.prompt("Username", default="", show_default=False).strip()
        if not username:
            raise ConfigError("username is required")
        password = click.prompt("Password", default="", show_default=False, hide_input=True)
        if not password:
            raise ConfigError("password is required")
        config.auth.username = username
        config.auth.password = password

    click.echo()
    click.echo("Available themes:")
    for i, name in enumerate(BUILTIN_THEME_NAMES, start=1):
        click.echo(f"  {i}. {name}")
    theme_idx = click.prompt(
        "Select theme",
        type=click.IntRange(1, len(BUILTIN_THEME_NAMES)),
        default=BUILTIN_THEME_NAMES.index(DEFAULT_THEME) + 1,
    )
    config.display.theme = BUILTIN_THEME_NAMES[theme_idx - 1]

    refresh = click.prompt(
        "Refresh interval in seconds",
        type=click.IntRange(min=MIN_REFRESH_INTERVAL),
        default=DEFAULT_REFRESH_INTERVAL,
    )
    config.display.refresh_interval = refresh

    click.echo()
    click.echo(f"Saving configuration to: {path}")
    save_config(config, path)

    try:
        save_theme_template(path.parent)
    except OSError as e:
        click.echo(f"Warning: Could not save theme template: {e}")

    click.echo()
    click.secho("Configuration saved.", fg="green")
    click.echo(f"Edit it any time at {path}")
    click.echo(f"Custom themes can be added to {path.parent / 'themes'}/")
    click.echo()
    return config
