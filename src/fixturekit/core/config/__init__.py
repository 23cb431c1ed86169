"""fixturekit configuration system.

Usage:
    from fixturekit.core.config import ConfigManager
    from fixturekit.core.config.domains import PackagesConfig

    manager = ConfigManager(repo_root=Path("/path/to/project"))
    config = manager.load_config()

    packages = PackagesConfig(repo_root=Path("/path/to/project"))
    cache_dir = packages.cache_dir
"""
from __future__ import annotations

from .base import BaseDomainConfig
from .cache import clear_all_caches, get_cached_config, is_cached
from .manager import ConfigManager

__all__ = [
    "ConfigManager",
    "BaseDomainConfig",
    "get_cached_config",
    "clear_all_caches",
    "is_cached",
]
