"""Domain-specific configuration for fixture materialization."""
from __future__ import annotations

import tempfile
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Dict, List, Optional

from ..base import BaseDomainConfig


@dataclass(frozen=True, slots=True)
class SelfLink:
    """Package linked into every top-level fixture install.

    Attributes:
        name: Package name the fixtures depend on
        path: Directory holding that package (usually the checkout under test)
    """

    name: str
    path: Path


class FixturesConfig(BaseDomainConfig):
    """Accessor for the ``fixtures`` section."""

    section_key = "fixtures"

    @cached_property
    def temp_root(self) -> Path:
        """Parent directory for materialized fixture directories."""
        raw = self.section.get("temp_root")
        if not raw:
            return Path(tempfile.gettempdir()) / "fixturekit"
        return self._resolve_path(str(raw))

    @cached_property
    def addon_paths_key(self) -> str:
        return str(self.section.get("addon_paths_key") or "ember-addon")

    @cached_property
    def self_link(self) -> Optional[SelfLink]:
        """The configured self link, or None when name or path is unset."""
        raw = self.section.get("self_link") or {}
        name = raw.get("name")
        path = raw.get("path")
        if not name or not path:
            return None
        return SelfLink(name=str(name), path=self._resolve_path(str(path)))

    @cached_property
    def blueprint_type(self) -> str:
        blueprint = self.section.get("blueprint") or {}
        return str(blueprint.get("type", "default"))

    @cached_property
    def blueprint_timeout_seconds(self) -> float:
        blueprint = self.section.get("blueprint") or {}
        return float(blueprint.get("timeout_seconds", 300))

    @cached_property
    def blueprint_commands(self) -> Dict[str, List[str]]:
        blueprint = self.section.get("blueprint") or {}
        commands = blueprint.get("commands") or {}
        return {str(kind): [str(a) for a in argv] for kind, argv in commands.items()}


__all__ = ["FixturesConfig", "SelfLink"]
