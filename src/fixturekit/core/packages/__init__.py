"""fixturekit package subsystem.

Provides the content-addressed install cache that lets many fixtures share
already installed dependency sets.

Key components:
- PackageCache: resolve (namespace, manager, manifest, links) to an install directory
- Installer: protocol run on cache misses (CommandInstaller, NullInstaller)
"""
from __future__ import annotations

from fixturekit.core.packages.cache import MARKER_FILENAME, PackageCache
from fixturekit.core.packages.exceptions import (
    CacheResolutionFailure,
    InstallError,
    PackageError,
)
from fixturekit.core.packages.installer import (
    CommandInstaller,
    Installer,
    NullInstaller,
    installer_from_config,
)
from fixturekit.core.packages.models import CacheEntry, LinkRequest, ManagerSpec

__all__ = [
    # Cache
    "PackageCache",
    "MARKER_FILENAME",
    # Installers
    "Installer",
    "CommandInstaller",
    "NullInstaller",
    "installer_from_config",
    # Models
    "CacheEntry",
    "LinkRequest",
    "ManagerSpec",
    # Exceptions
    "PackageError",
    "InstallError",
    "CacheResolutionFailure",
]
