"""Package subsystem exceptions."""
from __future__ import annotations

from fixturekit.core.exceptions import FixtureKitError


class PackageError(FixtureKitError):
    """Base exception for package cache and installer errors."""


class InstallError(PackageError):
    """Raised when a package manager install run fails."""


class CacheResolutionFailure(PackageError):
    """Raised when the package cache cannot produce an install directory."""


__all__ = ["PackageError", "InstallError", "CacheResolutionFailure"]
