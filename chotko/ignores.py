"""Locally persisted ignore rules for alerts.

An ignore rule hides every alert raised by one trigger on one host. Rules
live in ``<config-dir>/ignores.yaml`` and never leave the local machine.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml

from .constants import IGNORES_DIR_MODE, IGNORES_FILE_NAME, PROJECT_URL, SECRET_FILE_MODE
from .exceptions import DuplicateIgnoreError, IgnoreListError
from .utils import utc_now_iso, write_private_file

logger = logging.getLogger(__name__)

IGNORES_HEADER = (
    "# Chotko ignored alerts\n"
    f"# {PROJECT_URL}\n"
    "# Each entry hides alerts for one trigger on one host.\n\n"
)


@dataclass
class IgnoreRule:
    host_id: str
    host_name: str
    trigger_id: str
    trigger_name: str
    created: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IgnoreRule:
        created = data.get("created", "")
        # PyYAML turns unquoted timestamps into datetime objects
        if hasattr(created, "isoformat"):
            created = created.isoformat()
        return cls(
            host_id=str(data.get("host_id", "")),
            host_name=str(data.get("host_name", "")),
            trigger_id=str(data.get("trigger_id", "")),
            trigger_name=str(data.get("trigger_name", "")),
            created=str(created or ""),
        )

    def label(self) -> str:
        return f"{self.host_name} / {self.trigger_name}"


class IgnoreList:
    """Ordered, de-duplicated set of ignore rules backed by a YAML file.

    All access goes through a single lock so the list can be read by the
    alert filter while a save runs on a worker thread.
    """

    def __init__(self, path: Path, rules: list[IgnoreRule] | None = None) -> None:
        self._path = path
        self._rules: list[IgnoreRule] = list(rules or [])
        self._lock = threading.Lock()
        self._save_lock = threading.Lock()

    @classmethod
    def load(cls, config_dir: Path) -> IgnoreList:
        """Load rules from ``config_dir``; a missing file yields an empty list.

        Raises:
            IgnoreListError: If the file exists but cannot be read or parsed
        """
        path = config_dir / IGNORES_FILE_NAME
        if not path.exists():
            logger.debug("No ignore list at %s", path)
            return cls(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise IgnoreListError(f"failed to read ignores file: {e}") from e
        except yaml.YAMLError as e:
            raise IgnoreListError(f"failed to parse ignores file: {e}") from e
        if not isinstance(data, dict):
            raise IgnoreListError(f"failed to parse ignores file: {path}")
        rules = [IgnoreRule.from_dict(r) for r in data.get("ignores") or [] if isinstance(r, dict)]
        logger.debug("Loaded %d ignore rules from %s", len(rules), path)
        return cls(path, rules)

    def save(self) -> None:
        """Write the rules to disk with owner-only permissions.

        Saves are serialized so the most recent snapshot is the one left on disk.
        """
        with self._save_lock:
            with self._lock:
                payload = {"ignores": [asdict(r) for r in self._rules]}
            body = yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
            try:
                write_private_file(
                    self._path,
                    IGNORES_HEADER + body,
                    mode=SECRET_FILE_MODE,
                    dir_mode=IGNORES_DIR_MODE,
                )
            except OSError as e:
                raise IgnoreListError(f"failed to write ignores file: {e}") from e
        logger.debug("Saved %d ignore rules to %s", len(payload["ignores"]), self._path)

    def add(self, rule: IgnoreRule) -> None:
        """Append a rule, stamping its creation time when unset.

        Raises:
            DuplicateIgnoreError: If the host/trigger pair is already present
        """
        with self._lock:
            for existing in self._rules:
                if existing.host_id == rule.host_id and existing.trigger_id == rule.trigger_id:
                    raise DuplicateIgnoreError("already ignored")
            if not rule.created:
                rule.created = utc_now_iso()
            self._rules.append(rule)

    def remove(self, index: int) -> IgnoreRule | None:
        """Remove the rule at 1-based ``index``; None when out of range."""
        with self._lock:
            idx = index - 1
            if idx < 0 or idx >= len(self._rules):
                return None
            return self._rules.pop(idx)

    def is_ignored(self, host_id: str, trigger_id: str) -> bool:
        with self._lock:
            return any(
                r.host_id == host_id and r.trigger_id == trigger_id for r in self._rules
            )

    def rules(self) -> list[IgnoreRule]:
        with self._lock:
            return list(self._rules)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    @property
    def path(self) -> Path:
        return self._path
