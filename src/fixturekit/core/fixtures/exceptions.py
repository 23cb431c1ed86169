"""Fixture subsystem exceptions.

Each error also derives from the builtin a caller would naturally catch
(``TypeError`` for a wrong child kind, ``OSError`` for filesystem trouble)
so generic handlers keep working.
"""
from __future__ import annotations

from fixturekit.core.exceptions import FixtureKitError


class FixtureError(FixtureKitError):
    """Base exception for fixture composition and materialization errors."""


class InvalidChildKind(FixtureError, TypeError):
    """Raised when a node of an unsupported kind is installed or uninstalled."""


class UnlinkableChild(FixtureError, TypeError):
    """Raised when an installed child has a kind the serializer cannot link."""


class FixtureCycleError(FixtureError, ValueError):
    """Raised when installing a child would make a node its own descendant."""


class DuplicateChildError(FixtureError, ValueError):
    """Raised when a node already has an installed child with the same name."""


class MissingManifestError(FixtureError, KeyError):
    """Raised when a node's content tree has no primary manifest."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class FilesystemFailure(FixtureError, OSError):
    """Raised when writing, linking or removing fixture files fails."""


class BlueprintError(FixtureError):
    """Raised when a blueprint generator cannot produce a content tree."""


__all__ = [
    "FixtureError",
    "InvalidChildKind",
    "UnlinkableChild",
    "FixtureCycleError",
    "DuplicateChildError",
    "MissingManifestError",
    "FilesystemFailure",
    "BlueprintError",
]
