"""Process-wide cache of merged configuration.

Entries are keyed by the resolved repository root, the ``FIXTUREKIT_*``
environment and the size/mtime of every project config file, so edits
and new overrides are picked up without an explicit reset.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from fixturekit.core.utils.io import iter_yaml_files

_config_cache: Dict[str, Dict[str, Any]] = {}


def _root(repo_root: Optional[Path]) -> Path:
    return (Path(repo_root).expanduser() if repo_root is not None else Path.cwd()).resolve()


def _fingerprint_parts(root: Path) -> Iterator[str]:
    from .manager import ENV_PREFIX, PROJECT_CONFIG_DIRNAME

    for name in sorted(os.environ):
        if name.startswith(ENV_PREFIX):
            yield f"env:{name}={os.environ[name]}"
    for layer in ("config", "config.local"):
        for path in iter_yaml_files(root / PROJECT_CONFIG_DIRNAME / layer):
            st = path.stat()
            yield f"{layer}:{path.name}:{st.st_mtime_ns}:{st.st_size}"


def _cache_key(repo_root: Optional[Path]) -> str:
    root = _root(repo_root)
    digest = hashlib.sha256("\n".join(_fingerprint_parts(root)).encode("utf-8")).hexdigest()
    return f"{root}#{digest[:16]}"


def get_cached_config(repo_root: Optional[Path] = None, validate: bool = False) -> Dict[str, Any]:
    """Return the merged config for ``repo_root``, loading it on first use.

    The same dict instance is handed to every caller; do not mutate it.
    """
    from .manager import ConfigManager

    key = _cache_key(repo_root)
    config = _config_cache.get(key)
    if config is None:
        config = ConfigManager(repo_root=_root(repo_root))._load_config_uncached(validate=validate)
        _config_cache[key] = config
    return config


def clear_all_caches() -> None:
    _config_cache.clear()


def is_cached(repo_root: Optional[Path] = None) -> bool:
    return _cache_key(repo_root) in _config_cache


__all__ = ["get_cached_config", "clear_all_caches", "is_cached"]
