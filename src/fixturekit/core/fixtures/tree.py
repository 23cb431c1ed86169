"""Content trees: in-memory file hierarchies and their on-disk form.

A content tree maps file or directory names to either file contents
(``str`` or ``bytes``) or a nested content tree. Keys never contain ``/``;
slash-separated paths are split into nested levels.
"""
from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Dict, Iterator, List, Tuple, Union

from fixturekit.core.utils.io import ensure_directory, remove_path

logger = logging.getLogger(__name__)

ContentTree = Dict[str, Union[str, bytes, "ContentTree"]]


def split_path(path: str) -> List[str]:
    """Split a slash-separated tree path, ignoring leading, trailing and doubled slashes."""
    parts = [p for p in str(path).replace(os.sep, "/").split("/") if p]
    if not parts:
        raise ValueError(f"Empty content tree path: {path!r}")
    for part in parts:
        if part in {".", ".."}:
            raise ValueError(f"Relative segments are not allowed in content tree paths: {path!r}")
    return parts


def copy_tree(tree: ContentTree) -> ContentTree:
    """Return a deep copy of ``tree``."""
    return copy.deepcopy(tree)


def set_path(tree: ContentTree, path: str, contents: Union[str, bytes, ContentTree]) -> None:
    """Set ``path`` in ``tree`` to ``contents``, creating intermediate levels.

    A file found where a directory level is needed is replaced by a
    directory. Directory contents are merged into an existing directory.
    """
    parts = split_path(path)
    level = tree
    for part in parts[:-1]:
        child = level.get(part)
        if not isinstance(child, dict):
            child = {}
            level[part] = child
        level = child

    leaf = parts[-1]
    if isinstance(contents, dict) and isinstance(level.get(leaf), dict):
        merge_trees(level[leaf], contents)  # type: ignore[arg-type]
    else:
        level[leaf] = copy.deepcopy(contents)


def merge_trees(base: ContentTree, overlay: ContentTree) -> ContentTree:
    """Merge ``overlay`` into ``base`` in place; overlay leaves win."""
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merge_trees(base[key], value)  # type: ignore[arg-type]
        else:
            base[key] = copy.deepcopy(value)
    return base


def get_path(tree: ContentTree, path: str) -> Union[str, bytes, ContentTree, None]:
    """Return the entry at ``path`` or None when absent."""
    level: Union[str, bytes, ContentTree] = tree
    for part in split_path(path):
        if not isinstance(level, dict) or part not in level:
            return None
        level = level[part]
    return level


def delete_path(tree: ContentTree, path: str) -> bool:
    """Delete the entry at ``path``. Returns True when something was removed."""
    parts = split_path(path)
    level = tree
    for part in parts[:-1]:
        child = level.get(part)
        if not isinstance(child, dict):
            return False
        level = child
    return level.pop(parts[-1], None) is not None


def iter_files(tree: ContentTree, prefix: str = "") -> Iterator[Tuple[str, Union[str, bytes]]]:
    """Yield ``(path, contents)`` for every file in ``tree``, sorted by path."""
    for name in sorted(tree):
        value = tree[name]
        path = f"{prefix}{name}"
        if isinstance(value, dict):
            yield from iter_files(value, f"{path}/")
        else:
            yield path, value


def write_tree(root: Path, tree: ContentTree) -> None:
    """Write ``tree`` below ``root``, creating directories as needed.

    Empty sub-trees become empty directories. Existing files are overwritten.
    """
    root = ensure_directory(Path(root))
    for name, value in tree.items():
        target = root / name
        if isinstance(value, dict):
            if target.is_symlink() or (target.exists() and not target.is_dir()):
                remove_path(target)
            write_tree(target, value)
        elif isinstance(value, bytes):
            if target.is_symlink() or target.is_dir():
                remove_path(target)
            target.write_bytes(value)
        else:
            if target.is_symlink() or target.is_dir():
                remove_path(target)
            target.write_text(value, encoding="utf-8")


def read_tree(root: Path) -> ContentTree:
    """Read the directory at ``root`` back into a content tree.

    Files that decode as UTF-8 become ``str``, anything else ``bytes``.
    Symlinks are skipped.
    """
    root = Path(root)
    tree: ContentTree = {}
    for entry in sorted(root.iterdir()):
        if entry.is_symlink():
            logger.debug("Skipping symlink while reading tree: %s", entry)
            continue
        if entry.is_dir():
            tree[entry.name] = read_tree(entry)
            continue
        data = entry.read_bytes()
        try:
            tree[entry.name] = data.decode("utf-8")
        except UnicodeDecodeError:
            tree[entry.name] = data
    return tree


def empty_directory(root: Path) -> None:
    """Remove everything inside ``root`` (creating it when missing).

    Symlinks inside ``root`` are unlinked; their targets are left alone.
    """
    root = ensure_directory(Path(root))
    for entry in root.iterdir():
        remove_path(entry)


__all__ = [
    "ContentTree",
    "split_path",
    "copy_tree",
    "set_path",
    "merge_trees",
    "get_path",
    "delete_path",
    "iter_files",
    "write_tree",
    "read_tree",
    "empty_directory",
]
