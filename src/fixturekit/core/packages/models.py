"""Package cache data models.

Provides immutable dataclasses shared by the package cache and its callers.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class LinkRequest:
    """A package to link into an install instead of fetching it.

    Attributes:
        name: Package name as it appears in the manifest
        path: Directory holding the package
    """

    name: str
    path: Path

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"name": self.name, "path": str(self.path)}


@dataclass(frozen=True, slots=True)
class ManagerSpec:
    """A package manager and the files it owns inside a fixture.

    Attributes:
        manager: Package manager identifier (e.g. ``yarn``)
        manifest: Manifest filename at the fixture root (e.g. ``package.json``)
        dependency_dir: Installed dependency directory name (e.g. ``node_modules``)
    """

    manager: str
    manifest: str
    dependency_dir: str


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Result of a package cache resolution.

    Attributes:
        namespace: Cache namespace the entry lives in
        key: Content hash of the resolution inputs
        path: Install directory
        installed: True when this call ran the installer, False on a cache hit
    """

    namespace: str
    key: str
    path: Path
    installed: bool = False


__all__ = ["LinkRequest", "ManagerSpec", "CacheEntry"]
