"""JSON files: shared-lock reads and atomic, canonical writes.

Written JSON is sorted, indented by two spaces and newline terminated so
cache markers diff cleanly.
"""
from __future__ import annotations

import fcntl
import json
from pathlib import Path
from typing import Any

from .core import atomic_write

_MISSING = object()


def read_json(path: Path | str, *, default: Any = _MISSING) -> Any:
    """Load JSON from ``path``.

    Returns ``default`` for a missing file when one is given; otherwise a
    missing file raises ``FileNotFoundError``.
    """
    path = Path(path)
    if not path.exists() and default is not _MISSING:
        return default
    with open(path, "r", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            return json.load(f)
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)


def write_json_atomic(path: Path | str, data: Any, *, indent: int = 2, sort_keys: bool = True) -> None:
    """Atomically replace ``path`` with ``data`` encoded as JSON."""
    text = json.dumps(data, indent=indent, sort_keys=sort_keys, ensure_ascii=False) + "\n"
    atomic_write(Path(path), lambda f: f.write(text))


__all__ = ["read_json", "write_json_atomic"]
