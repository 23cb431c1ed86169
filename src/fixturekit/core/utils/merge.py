"""Merging of configuration layers.

Later layers win. Mappings merge key by key; lists are replaced unless the
overriding list starts with a marker:

- ``["+", ...]`` appends to the lower layer's list
- ``["=", ...]`` replaces it (explicit form of the default)
"""
from __future__ import annotations

from typing import Any, Dict, List

APPEND_MARKER = "+"
REPLACE_MARKER = "="


def merge_arrays(base: List[Any], override: List[Any]) -> List[Any]:
    """Combine two list layers.

    Example:
        >>> merge_arrays(["yarn", "install"], ["+", "--offline"])
        ['yarn', 'install', '--offline']
    """
    if not override:
        return base
    head, rest = override[0], list(override[1:])
    if head == APPEND_MARKER:
        return [*base, *rest]
    if head == REPLACE_MARKER:
        return rest
    return list(override)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``override`` layered over ``base``; neither input is modified.

    Example:
        >>> deep_merge({"linker": {"mode": "symlink"}}, {"linker": {"mode": "copy"}})
        {'linker': {'mode': 'copy'}}
    """
    merged: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = merge_arrays(current, value)
        else:
            merged[key] = value
    return merged


__all__ = ["deep_merge", "merge_arrays"]
