"""Domain-specific configuration accessors."""
from __future__ import annotations

from .fixtures import FixturesConfig, SelfLink
from .linker import LinkerConfig
from .logging import LoggingConfig
from .packages import PackagesConfig

__all__ = [
    "FixturesConfig",
    "SelfLink",
    "LinkerConfig",
    "LoggingConfig",
    "PackagesConfig",
]
