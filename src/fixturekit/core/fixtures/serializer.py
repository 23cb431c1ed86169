"""Depth-first materialization of fixture hierarchies.

Children are written before their parents so every link target exists by
the time a parent links to it. Clean nodes are skipped without touching
the filesystem or the package cache, which makes repeated serialization
of an unchanged hierarchy free.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from fixturekit.core.fixtures.exceptions import FilesystemFailure, UnlinkableChild
from fixturekit.core.fixtures.linker import Linker
from fixturekit.core.fixtures.models import FixtureKind
from fixturekit.core.fixtures.node import ADDON_KINDS, FixtureNode
from fixturekit.core.fixtures.tree import empty_directory, write_tree
from fixturekit.core.packages.cache import PackageCache
from fixturekit.core.packages.models import LinkRequest, ManagerSpec
from fixturekit.core.utils.io import ensure_directory

logger = logging.getLogger(__name__)


class FixtureSerializer:
    """Writes fixture nodes to disk and wires their dependencies together."""

    def __init__(
        self,
        package_cache: PackageCache,
        linker: Linker,
        *,
        primary: ManagerSpec,
        secondary: Optional[ManagerSpec] = None,
        self_link: Optional[LinkRequest] = None,
    ) -> None:
        """Initialize serializer.

        Args:
            package_cache: Cache resolving manifests to install directories
            linker: Linker used for dependency and in-repo addon links
            primary: Package manager for the primary manifest (nested-aware)
            secondary: Package manager installed only for top-level nodes
            self_link: Package linked into every top-level install
        """
        self.package_cache = package_cache
        self.linker = linker
        self.primary = primary
        self.secondary = secondary
        self.self_link = self_link

    def serialize(self, node: FixtureNode, nested: bool = False) -> None:
        """Materialize ``node`` and its installed descendants.

        ``nested`` is True when ``node`` is serialized as part of a parent:
        its install then skips development-only dependencies, the self link
        and the secondary manager.

        Raises:
            UnlinkableChild: If an installed child cannot be linked
            FilesystemFailure: If writing or linking fails
            CacheResolutionFailure: If a dependency install fails
        """
        if not node.dirty:
            logger.debug("Skipping clean %s '%s'", node.kind.value, node.name)
            return

        children = node.installed_children
        for child in children:
            if child.kind not in ADDON_KINDS:
                raise UnlinkableChild(
                    f"Cannot link {child.kind.value} '{child.name}' into '{node.name}'",
                    context={"parent": node.name, "child": child.name, "child_kind": child.kind.value},
                )

        for child in children:
            self.serialize(child, nested=True)

        logger.debug("Serializing %s '%s' into %s", node.kind.value, node.name, node.dir)
        self._write_files(node)

        links = self._link_requests(node, children, nested)
        if node.has_manifest(self.primary.manifest) or links:
            self._install(node, self.primary, links, production=nested)

        if self.secondary is not None and not nested and node.has_manifest(self.secondary.manifest):
            self._install(node, self.secondary, [], production=False)

        for child in children:
            if child.kind is FixtureKind.IN_REPO_ADDON:
                self.linker.link(child.dir, node.dir / "lib" / child.name)

        node.mark_clean()

    def _write_files(self, node: FixtureNode) -> None:
        try:
            empty_directory(node.dir)
            write_tree(node.dir, node.content_tree)
        except OSError as e:
            raise FilesystemFailure(
                f"Cannot write {node.kind.value} '{node.name}' to {node.dir}: {e}",
                context={"name": node.name, "kind": node.kind.value, "dir": str(node.dir)},
            ) from e

    def _link_requests(self, node: FixtureNode, children: tuple, nested: bool) -> List[LinkRequest]:
        links = [
            LinkRequest(name=child.name, path=child.dir)
            for child in children
            if child.kind is FixtureKind.EXTERNAL_ADDON
        ]
        if not nested and self.self_link is not None:
            links.insert(0, self.self_link)
        return links

    @staticmethod
    def namespace(node: FixtureNode, manager: ManagerSpec, *, production: bool) -> str:
        if production:
            return f"{node.kind.value}-production-{manager.manager}"
        return f"{node.kind.value}-{manager.manager}"

    def _install(
        self,
        node: FixtureNode,
        manager: ManagerSpec,
        links: List[LinkRequest],
        *,
        production: bool,
    ) -> None:
        raw = node.content_tree.get(manager.manifest)
        manifest = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        if not isinstance(manifest, str):
            manifest = None

        install_dir = self.package_cache.resolve(
            self.namespace(node, manager, production=production),
            manager,
            manifest,
            links,
            production=production,
        )
        source = Path(install_dir) / manager.dependency_dir
        try:
            ensure_directory(source)
        except OSError as e:
            raise FilesystemFailure(
                f"Cannot create {source}: {e}",
                context={"name": node.name, "path": str(source)},
            ) from e
        self.linker.link(source, node.dir / manager.dependency_dir)


__all__ = ["FixtureSerializer"]
