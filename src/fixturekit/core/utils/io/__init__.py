"""I/O utilities for fixturekit.

- core: directories, symlink-safe removal, atomic text writes
- json: canonical JSON read/write
- yaml: configuration file reading
- locking: per-key exclusive file locks
"""
from __future__ import annotations

from .core import atomic_write, ensure_directory, remove_path, write_text
from .json import read_json, write_json_atomic
from .locking import LockTimeoutError, acquire_file_lock
from .yaml import iter_yaml_files, read_yaml

__all__ = [
    "atomic_write",
    "ensure_directory",
    "remove_path",
    "write_text",
    "read_json",
    "write_json_atomic",
    "acquire_file_lock",
    "LockTimeoutError",
    "read_yaml",
    "iter_yaml_files",
]
