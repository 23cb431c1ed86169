"""Domain-specific configuration for fixture linking."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class LinkerConfig(BaseDomainConfig):
    section_key = "linker"

    @cached_property
    def mode(self) -> str:
        """Either ``symlink`` or ``copy``."""
        return str(self.section.get("mode", "symlink"))


__all__ = ["LinkerConfig"]
