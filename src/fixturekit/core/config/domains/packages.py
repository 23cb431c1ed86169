"""Domain-specific configuration for the package cache and installers.

Provides typed, cached access to the ``packages`` section.
"""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Dict, List

from fixturekit.core.exceptions import ConfigError
from fixturekit.core.packages.models import ManagerSpec

from ..base import BaseDomainConfig

_REQUIRED_MANAGER_KEYS = ("manager", "manifest", "dependency_dir")


class PackagesConfig(BaseDomainConfig):
    """Accessor for the ``packages`` section."""

    section_key = "packages"

    def _manager_spec(self, slot: str) -> ManagerSpec:
        raw = self.section.get(slot)
        if not isinstance(raw, dict):
            raise ConfigError(f"packages.{slot} missing from configuration")
        for key in _REQUIRED_MANAGER_KEYS:
            if not raw.get(key):
                raise ConfigError(f"packages.{slot}.{key} missing from configuration")
        return ManagerSpec(
            manager=str(raw["manager"]),
            manifest=str(raw["manifest"]),
            dependency_dir=str(raw["dependency_dir"]),
        )

    @cached_property
    def cache_dir(self) -> Path:
        return self._resolve_path(str(self.section.get("cache_dir", "~/.cache/fixturekit/packages")))

    @cached_property
    def primary(self) -> ManagerSpec:
        return self._manager_spec("primary")

    @cached_property
    def secondary(self) -> ManagerSpec:
        return self._manager_spec("secondary")

    @cached_property
    def installer(self) -> str:
        return str(self.section.get("installer", "command"))

    @cached_property
    def commands(self) -> Dict[str, List[str]]:
        raw = self.section.get("commands") or {}
        return {str(k): [str(a) for a in v] for k, v in raw.items()}

    @cached_property
    def production_args(self) -> Dict[str, List[str]]:
        raw = self.section.get("production_args") or {}
        return {str(k): [str(a) for a in v] for k, v in raw.items()}

    @cached_property
    def production_env(self) -> Dict[str, str]:
        raw = self.section.get("production_env") or {}
        return {str(k): str(v) for k, v in raw.items()}

    @cached_property
    def lock_timeout_seconds(self) -> float:
        return float(self.section.get("lock_timeout_seconds", 600))

    @cached_property
    def poll_interval_seconds(self) -> float:
        return float(self.section.get("poll_interval_seconds", 0.1))

    @cached_property
    def install_timeout_seconds(self) -> float:
        return float(self.section.get("install_timeout_seconds", 600))


__all__ = ["PackagesConfig"]
