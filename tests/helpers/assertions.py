"""Filesystem assertion helpers."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict


def snapshot_mtimes(root: Path) -> Dict[str, int]:
    """Return ``{relative path: mtime_ns}`` for every entry below ``root`` (links not followed)."""
    result: Dict[str, int] = {}
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        for name in dirnames + filenames:
            p = Path(dirpath) / name
            result[str(p.relative_to(root))] = p.lstat().st_mtime_ns
    return result


def assert_symlink_to(link: Path, target: Path) -> None:
    assert link.is_symlink(), f"{link} is not a symlink"
    assert link.resolve() == Path(target).resolve(), f"{link} -> {link.resolve()}, expected {target}"
