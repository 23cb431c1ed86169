"""Fixture nodes: in-memory project trees composed into a hierarchy.

A node owns a content tree (its files), a fixed materialization directory
and an ordered list of installed child addons. Every mutation goes through
the methods below and marks the node dirty; the serializer only rewrites
dirty nodes.

Usage::

    root = engine.app("root")
    child = engine.in_repo_addon("child")
    root.install_child(child)
    root.serialize()

    child.generate_script("index.js")
    child.serialize()  # a clean ``root`` would not descend; it links to ``child``
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Set, Tuple, Union

from fixturekit.core.fixtures.exceptions import (
    DuplicateChildError,
    FilesystemFailure,
    FixtureCycleError,
    FixtureError,
    InvalidChildKind,
    MissingManifestError,
)
from fixturekit.core.fixtures.models import ChildInstall, FixtureKind
from fixturekit.core.fixtures.tree import ContentTree, copy_tree, delete_path, get_path, set_path
from fixturekit.core.utils.io import remove_path

if TYPE_CHECKING:
    from fixturekit.core.fixtures.blueprint import BlueprintGenerator
    from fixturekit.core.fixtures.serializer import FixtureSerializer

logger = logging.getLogger(__name__)

ADDON_KINDS = (FixtureKind.EXTERNAL_ADDON, FixtureKind.IN_REPO_ADDON)

DEFAULT_MANIFEST = "package.json"
DEFAULT_ADDON_PATHS_KEY = "ember-addon"


class FixtureNode:
    """One generated project (app or addon) in a fixture hierarchy."""

    def __init__(
        self,
        kind: Union[FixtureKind, str],
        name: str,
        directory: Path,
        blueprint: BlueprintGenerator,
        *,
        serializer: Optional[FixtureSerializer] = None,
        manifest_name: str = DEFAULT_MANIFEST,
        addon_paths_key: str = DEFAULT_ADDON_PATHS_KEY,
    ) -> None:
        """Create a node and load its initial files from ``blueprint``.

        Args:
            kind: Fixture kind
            name: Project name (directory naming, cache keys, manifest entries)
            directory: Directory the node materializes into; never changes
            blueprint: Generator invoked once, here, for the initial tree
            serializer: Serializer used by :meth:`serialize`
            manifest_name: Primary manifest filename
            addon_paths_key: Manifest key holding in-repo addon paths
        """
        if not name or "/" in name or name in {".", ".."}:
            raise ValueError(f"Invalid fixture name: {name!r}")
        self._kind = FixtureKind.coerce(kind)
        self._name = name
        self._dir = Path(directory)
        self._serializer = serializer
        self.manifest_name = manifest_name
        self.addon_paths_key = addon_paths_key

        self._children: List[FixtureNode] = []
        self._installs: Dict[int, ChildInstall] = {}
        # Manifest containers created by child installs, pruned once empty.
        self._created_containers: Set[Tuple[str, ...]] = set()
        self._dirty = True

        self._tree: ContentTree = copy_tree(blueprint.generate(self._kind, name, self._dir))

    def __repr__(self) -> str:
        return f"FixtureNode(kind={self._kind.value!r}, name={self._name!r}, dir={str(self._dir)!r})"

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def kind(self) -> FixtureKind:
        return self._kind

    @property
    def name(self) -> str:
        return self._name

    @property
    def dir(self) -> Path:
        return self._dir

    @property
    def dirty(self) -> bool:
        """True when the files on disk may differ from the content tree."""
        return self._dirty

    @property
    def content_tree(self) -> ContentTree:
        """A copy of the node's files; edit through the mutator methods."""
        return copy_tree(self._tree)

    @property
    def installed_children(self) -> Tuple[FixtureNode, ...]:
        return tuple(self._children)

    def iter_descendants(self) -> Iterator[FixtureNode]:
        """Yield every installed descendant depth-first, children before parents."""
        for child in self._children:
            yield from child.iter_descendants()
            yield child

    def mark_dirty(self) -> None:
        self._dirty = True

    def mark_clean(self) -> None:
        """Record a successful write of this node's own files."""
        self._dirty = False

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def set_file(self, path: str, contents: Union[str, bytes, ContentTree]) -> FixtureNode:
        """Write ``contents`` at the slash-separated ``path`` of the content tree."""
        set_path(self._tree, path, contents)
        self._dirty = True
        return self

    generate_file = set_file

    def remove_file(self, path: str) -> FixtureNode:
        """Delete a file or directory from the content tree."""
        if delete_path(self._tree, path):
            self._dirty = True
        return self

    def set_content_tree(self, tree: ContentTree) -> FixtureNode:
        """Replace the whole content tree."""
        self._tree = copy_tree(tree)
        self._created_containers.clear()
        self._dirty = True
        return self

    def has_file(self, path: str) -> bool:
        return get_path(self._tree, path) is not None

    def generate_stylesheet(self, path: str) -> FixtureNode:
        return self.set_file(path, f'.{self._name} {{ content: "{path}"; }}')

    def generate_script(self, path: str) -> FixtureNode:
        return self.set_file(path, f"// {self._name}/{path}\nlet a = true;")

    def generate_markup_stub(self, path: str) -> FixtureNode:
        return self.set_file(path, f"{{{{{self._name}}}}}")

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    def has_manifest(self, filename: Optional[str] = None) -> bool:
        return isinstance(self._tree.get(filename or self.manifest_name), (str, bytes))

    def get_manifest(self) -> Dict[str, Any]:
        """Parse and return the primary manifest.

        Raises:
            MissingManifestError: If the content tree has no manifest file
        """
        raw = self._tree.get(self.manifest_name)
        if not isinstance(raw, (str, bytes)):
            raise MissingManifestError(
                f"{self._kind.value} '{self._name}' has no {self.manifest_name}",
                context={"name": self._name, "kind": self._kind.value, "manifest": self.manifest_name},
            )
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise FixtureError(
                f"{self.manifest_name} of '{self._name}' is not valid JSON: {e}",
                context={"name": self._name, "manifest": self.manifest_name},
            ) from e
        if not isinstance(data, dict):
            raise FixtureError(
                f"{self.manifest_name} of '{self._name}' must be a JSON object",
                context={"name": self._name, "manifest": self.manifest_name},
            )
        return data

    def set_manifest(self, value: Dict[str, Any]) -> FixtureNode:
        self._tree[self.manifest_name] = json.dumps(value, indent=2) + "\n"
        self._dirty = True
        return self

    def install_node_module(self, key: str, name: str, version: str = "*") -> FixtureNode:
        """Add ``name`` at ``version`` to the ``key`` map (e.g. ``dependencies``)."""
        manifest = self.get_manifest()
        section = manifest.get(key)
        if not isinstance(section, dict):
            section = manifest[key] = {}
        section[name] = version
        return self.set_manifest(manifest)

    def uninstall_node_module(self, key: str, name: str) -> FixtureNode:
        manifest = self.get_manifest()
        section = manifest.get(key)
        if isinstance(section, dict) and name in section:
            del section[name]
            self.set_manifest(manifest)
        return self

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    def _require_addon(self, child: Any, action: str) -> FixtureNode:
        if not isinstance(child, FixtureNode) or child.kind not in ADDON_KINDS:
            kind = child.kind.value if isinstance(child, FixtureNode) else type(child).__name__
            raise InvalidChildKind(
                f"Cannot {action} {kind} into '{self._name}': only addons can be installed",
                context={"parent": self._name, "child_kind": kind},
            )
        return child

    def install_child(self, child: FixtureNode) -> FixtureNode:
        """Install an addon node and record it in the manifest.

        External addons become ``dependencies[<name>] = "*"``; in-repo addons
        are appended to ``<addon_paths_key>.paths`` as ``lib/<name>``.

        Raises:
            InvalidChildKind: If ``child`` is not an addon
            FixtureCycleError: If ``child`` is this node or one of its ancestors
            DuplicateChildError: If ``child`` or a same-named sibling is installed
            MissingManifestError: If this node has no manifest
        """
        self._require_addon(child, "install")
        if child is self or any(node is self for node in child.iter_descendants()):
            raise FixtureCycleError(
                f"Installing '{child.name}' into '{self._name}' would create a cycle",
                context={"parent": self._name, "child": child.name},
            )
        for existing in self._children:
            if existing is child or existing.name == child.name:
                raise DuplicateChildError(
                    f"'{self._name}' already has an installed child named '{child.name}'",
                    context={"parent": self._name, "child": child.name},
                )

        manifest = self.get_manifest()
        if child.kind is FixtureKind.EXTERNAL_ADDON:
            record = self._add_dependency(manifest, child.name)
        else:
            record = self._add_addon_path(manifest, f"lib/{child.name}")
        if record.created_section:
            self._created_containers.add((record.section,))
        if record.created_paths:
            self._created_containers.add((record.section, "paths"))

        self._children.append(child)
        self._installs[id(child)] = record
        self.set_manifest(manifest)
        logger.debug("Installed %s '%s' into '%s'", child.kind.value, child.name, self._name)
        return self

    def uninstall_child(self, child: FixtureNode) -> FixtureNode:
        """Remove an installed child and undo its manifest edit.

        Containers created by child installs are dropped once the last
        entry in them is gone, whatever the uninstall order. Does nothing
        when ``child`` is not installed here.

        Raises:
            FixtureError: If the manifest cannot be parsed; the child then
                stays installed
        """
        self._require_addon(child, "uninstall")
        if not any(existing is child for existing in self._children):
            return self

        manifest = self.get_manifest() if self.has_manifest() else None

        self._children = [existing for existing in self._children if existing is not child]
        record = self._installs.pop(id(child))
        self._dirty = True

        if manifest is None:
            logger.debug("'%s' has no manifest; nothing to undo for '%s'", self._name, child.name)
            return self

        if record.section == "dependencies":
            self._remove_dependency(manifest, record)
        else:
            self._remove_addon_path(manifest, record)
        self._prune_created_containers(manifest)
        self.set_manifest(manifest)
        logger.debug("Uninstalled %s '%s' from '%s'", child.kind.value, child.name, self._name)
        return self

    @staticmethod
    def _add_dependency(manifest: Dict[str, Any], name: str) -> ChildInstall:
        deps = manifest.get("dependencies")
        created = not isinstance(deps, dict)
        if created:
            deps = manifest["dependencies"] = {}
        previous = deps.get(name)
        deps[name] = "*"
        return ChildInstall(
            section="dependencies",
            entry=name,
            previous=None if previous is None else str(previous),
            created_section=created,
        )

    def _add_addon_path(self, manifest: Dict[str, Any], entry: str) -> ChildInstall:
        addon = manifest.get(self.addon_paths_key)
        created_section = not isinstance(addon, dict)
        if created_section:
            addon = manifest[self.addon_paths_key] = {}
        paths = addon.get("paths")
        created_paths = not isinstance(paths, list)
        if created_paths:
            paths = addon["paths"] = []
        previous = entry if entry in paths else None
        if previous is None:
            paths.append(entry)
        return ChildInstall(
            section=self.addon_paths_key,
            entry=entry,
            previous=previous,
            created_section=created_section,
            created_paths=created_paths,
        )

    @staticmethod
    def _remove_dependency(manifest: Dict[str, Any], record: ChildInstall) -> None:
        deps = manifest.get("dependencies")
        if not isinstance(deps, dict):
            return
        if record.previous is None:
            deps.pop(record.entry, None)
        else:
            deps[record.entry] = record.previous

    @staticmethod
    def _remove_addon_path(manifest: Dict[str, Any], record: ChildInstall) -> None:
        addon = manifest.get(record.section)
        paths = addon.get("paths") if isinstance(addon, dict) else None
        if isinstance(paths, list) and record.previous is None and record.entry in paths:
            # Remove the entry this install appended.
            del paths[len(paths) - 1 - paths[::-1].index(record.entry)]

    def _prune_created_containers(self, manifest: Dict[str, Any]) -> None:
        # Deepest first so an emptied ``paths`` list also frees its section.
        for path in sorted(self._created_containers, key=len, reverse=True):
            parent: Any = manifest
            for key in path[:-1]:
                parent = parent.get(key) if isinstance(parent, dict) else None
            if not isinstance(parent, dict) or path[-1] not in parent:
                self._created_containers.discard(path)
                continue
            value = parent[path[-1]]
            if isinstance(value, (dict, list)) and not value:
                del parent[path[-1]]
                self._created_containers.discard(path)

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    def serialize(self) -> FixtureNode:
        """Materialize this node and its descendants (see FixtureSerializer)."""
        if self._serializer is None:
            raise FixtureError(
                f"'{self._name}' is not bound to a serializer",
                context={"name": self._name, "kind": self._kind.value},
            )
        self._serializer.serialize(self)
        return self

    def clean(self) -> FixtureNode:
        """Delete the materialized directories of this node and its descendants.

        The node becomes dirty, so the next :meth:`serialize` writes it again.
        """
        for child in self._children:
            child.clean()
        try:
            remove_path(self._dir)
        except OSError as e:
            raise FilesystemFailure(
                f"Cannot remove fixture directory {self._dir}: {e}",
                context={"name": self._name, "dir": str(self._dir)},
            ) from e
        self._dirty = True
        logger.debug("Cleaned %s '%s'", self._kind.value, self._name)
        return self


__all__ = ["FixtureNode", "ADDON_KINDS"]
