"""Fixture data models."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class FixtureKind(str, Enum):
    """Kinds of generated project a fixture node can represent."""

    ROOT_APP = "root-app"
    EXTERNAL_ADDON = "external-addon"
    IN_REPO_ADDON = "in-repo-addon"

    @classmethod
    def coerce(cls, value: Any) -> FixtureKind:
        """Return ``value`` as a FixtureKind, accepting the string values."""
        if isinstance(value, cls):
            return value
        return cls(str(value))


@dataclass(frozen=True, slots=True)
class ChildInstall:
    """Undo record for one ``install_child`` manifest edit.

    Attributes:
        section: Manifest key edited (``dependencies`` or the addon-paths key)
        entry: Dependency name or addon path written
        previous: Dependency value replaced, None when there was none
        created_section: True when the install created the containing map
        created_paths: True when the install created the ``paths`` list
    """

    section: str
    entry: str
    previous: Optional[str] = None
    created_section: bool = False
    created_paths: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "section": self.section,
            "entry": self.entry,
            "previous": self.previous,
            "created_section": self.created_section,
            "created_paths": self.created_paths,
        }


__all__ = ["FixtureKind", "ChildInstall"]
