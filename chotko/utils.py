"""Chotko utility functions."""

from __future__ import annotations

import datetime as dt
import os
import tempfile
from pathlib import Path


def utc_now_iso() -> str:
    """Return current UTC time in ISO format without microseconds."""
    return dt.datetime.now(dt.UTC).replace(microsecond=0).isoformat()


def truncate(text: str, width: int) -> str:
    """Clip text to width using an ellipsis character."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return text[:1]
    return text[: width - 1] + "…"


def write_private_file(path: Path, content: str, *, mode: int, dir_mode: int) -> None:
    """Write content through a unique temp sibling and rename it into place.

    The parent directory is created with ``dir_mode`` and the file ends up
    with ``mode`` regardless of the process umask. Concurrent writers each
    get their own temp file, so the last rename wins.
    """
    path.parent.mkdir(mode=dir_mode, parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", text=True)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except BaseException:
        Path(temp_path).unlink(missing_ok=True)
        raise
