"""Filesystem primitives shared by the package cache and fixture writers.

- ``ensure_directory``: create-or-verify a directory
- ``remove_path``: delete files, trees and symlinks without following links
- ``atomic_write`` / ``write_text``: temp file + fsync + ``os.replace``
"""
from __future__ import annotations

import fcntl
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional, TextIO


def ensure_directory(path: Path, create: bool = True) -> Path:
    """Return ``path`` after making sure it is a directory.

    Raises:
        NotADirectoryError: If something other than a directory is in the way
        FileNotFoundError: If ``create`` is False and the directory is missing
    """
    path = Path(path)
    if path.is_dir():
        return path
    if path.exists():
        raise NotADirectoryError(f"Not a directory: {path}")
    if not create:
        raise FileNotFoundError(f"Directory does not exist: {path}")
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_path(path: Path) -> bool:
    """Delete ``path`` whatever it is. Symlinks are unlinked, never traversed.

    Returns:
        True when something was removed, False when nothing was there
    """
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if path.is_dir():
        shutil.rmtree(path)
        return True
    return False


def atomic_write(path: Path, write_fn: Callable[[TextIO], None], *, encoding: str = "utf-8") -> None:
    """Write ``path`` so readers see either the old or the complete new file.

    ``write_fn`` receives a text file in the target's directory; the file is
    flushed, fsync'd and renamed over ``path``. The temp file never survives
    a failure.
    """
    path = Path(path)
    ensure_directory(path.parent)
    tmp: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile("w", encoding=encoding, dir=path.parent, delete=False) as f:
            tmp = Path(f.name)
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(tmp, path)
        tmp = None
    finally:
        if tmp is not None:
            tmp.unlink(missing_ok=True)


def write_text(path: Path, content: str) -> None:
    """Atomically write UTF-8 ``content`` to ``path``."""
    atomic_write(Path(path), lambda f: f.write(content))


__all__ = ["ensure_directory", "remove_path", "atomic_write", "write_text"]
