"""Fixture engine: wires configuration into nodes and their serializer."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fixturekit.core.fixtures.blueprint import BlueprintGenerator, blueprint_from_config
from fixturekit.core.fixtures.linker import Linker
from fixturekit.core.fixtures.models import FixtureKind
from fixturekit.core.fixtures.node import DEFAULT_ADDON_PATHS_KEY, FixtureNode
from fixturekit.core.fixtures.serializer import FixtureSerializer
from fixturekit.core.fixtures.workspace import FixtureWorkspace
from fixturekit.core.packages.cache import PackageCache
from fixturekit.core.packages.models import LinkRequest, ManagerSpec

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY = ManagerSpec(manager="yarn", manifest="package.json", dependency_dir="node_modules")
DEFAULT_SECONDARY = ManagerSpec(manager="bower", manifest="bower.json", dependency_dir="bower_components")


class FixtureEngine:
    """Creates fixture nodes bound to one workspace, blueprint and serializer.

    Usage::

        engine = FixtureEngine.from_config()
        root = engine.app("root")
        root.install_child(engine.addon("left-pad"))
        root.serialize()
        ...
        engine.cleanup()
    """

    def __init__(
        self,
        workspace: FixtureWorkspace,
        blueprint: BlueprintGenerator,
        package_cache: PackageCache,
        *,
        linker: Optional[Linker] = None,
        primary: ManagerSpec = DEFAULT_PRIMARY,
        secondary: Optional[ManagerSpec] = DEFAULT_SECONDARY,
        self_link: Optional[LinkRequest] = None,
        addon_paths_key: str = DEFAULT_ADDON_PATHS_KEY,
    ) -> None:
        self.workspace = workspace
        self.blueprint = blueprint
        self.package_cache = package_cache
        self.linker = linker or Linker()
        self.primary = primary
        self.secondary = secondary
        self.addon_paths_key = addon_paths_key
        self.serializer = FixtureSerializer(
            package_cache,
            self.linker,
            primary=primary,
            secondary=secondary,
            self_link=self_link,
        )

    @classmethod
    def from_config(
        cls,
        repo_root: Optional[Path] = None,
        *,
        config: Optional[Dict[str, Any]] = None,
    ) -> FixtureEngine:
        """Build an engine from the layered fixturekit configuration.

        Installs the fixturekit log file handler when ``logging.path`` is set.
        """
        from fixturekit.core.config import ConfigManager
        from fixturekit.core.config.domains import FixturesConfig, LoggingConfig, PackagesConfig
        from fixturekit.core.logging import configure_logging

        if config is None:
            config = ConfigManager(repo_root).load_config(validate=True)

        logging_cfg = LoggingConfig(repo_root=repo_root, config=config)
        if logging_cfg.path is not None:
            configure_logging(log_path=logging_cfg.path, level=logging_cfg.level)

        fixtures = FixturesConfig(repo_root=repo_root, config=config)
        packages = PackagesConfig(repo_root=repo_root, config=config)
        self_link = fixtures.self_link
        return cls(
            FixtureWorkspace.from_config(repo_root, config=config),
            blueprint_from_config(repo_root, config=config),
            PackageCache.from_config(repo_root, config=config),
            linker=Linker.from_config(repo_root, config=config),
            primary=packages.primary,
            secondary=packages.secondary,
            self_link=LinkRequest(name=self_link.name, path=self_link.path) if self_link else None,
            addon_paths_key=fixtures.addon_paths_key,
        )

    def create(self, kind: FixtureKind | str, name: str) -> FixtureNode:
        """Allocate a directory and build a node of ``kind`` named ``name``."""
        kind = FixtureKind.coerce(kind)
        directory = self.workspace.allocate(kind, name)
        node = FixtureNode(
            kind,
            name,
            directory,
            self.blueprint,
            serializer=self.serializer,
            manifest_name=self.primary.manifest,
            addon_paths_key=self.addon_paths_key,
        )
        logger.debug("Created %s '%s' at %s", kind.value, name, directory)
        return node

    def app(self, name: str) -> FixtureNode:
        return self.create(FixtureKind.ROOT_APP, name)

    def addon(self, name: str) -> FixtureNode:
        return self.create(FixtureKind.EXTERNAL_ADDON, name)

    def in_repo_addon(self, name: str) -> FixtureNode:
        return self.create(FixtureKind.IN_REPO_ADDON, name)

    def serialize(self, node: FixtureNode) -> FixtureNode:
        self.serializer.serialize(node)
        return node

    def cleanup(self) -> int:
        """Remove every fixture directory this engine allocated."""
        return self.workspace.cleanup()


__all__ = ["FixtureEngine", "DEFAULT_PRIMARY", "DEFAULT_SECONDARY"]
