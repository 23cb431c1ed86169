"""Shared plumbing for the typed configuration sections."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional

from .cache import get_cached_config


class BaseDomainConfig:
    """Read-only view over one top-level section of the merged config.

    Subclasses set ``section_key`` and expose typed ``cached_property``
    accessors. Passing ``config=`` uses that dict as-is instead of loading
    (and caching) the project's layered configuration.
    """

    section_key: ClassVar[str] = ""

    def __init__(self, repo_root: Optional[Path] = None, *, config: Optional[Dict[str, Any]] = None) -> None:
        self._repo_root = Path(repo_root) if repo_root else None
        if config is None:
            config = get_cached_config(repo_root=repo_root)
        self._config = config

    @property
    def repo_root(self) -> Path:
        return self._repo_root or Path.cwd()

    @cached_property
    def section(self) -> Dict[str, Any]:
        if not self.section_key:
            raise NotImplementedError(f"{type(self).__name__} must define section_key")
        return self._config.get(self.section_key) or {}

    def _resolve_path(self, raw: str) -> Path:
        """Expand ``~``; relative paths are taken from the repository root."""
        path = Path(raw).expanduser()
        if path.is_absolute():
            return path
        return self.repo_root / path


__all__ = ["BaseDomainConfig"]
