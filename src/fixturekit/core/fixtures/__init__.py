"""fixturekit fixture subsystem.

Compose generated projects (an app plus nested addons) in memory and
materialize them to disk as a linked directory hierarchy.

Key components:
- FixtureNode: one project with its content tree, dirty flag and children
- FixtureSerializer: depth-first materialization with package caching
- Linker: symlink (or explicit copy) composition
- FixtureEngine: factory wiring configuration, workspace and blueprint
"""
from __future__ import annotations

from fixturekit.core.fixtures.blueprint import (
    BlueprintGenerator,
    CommandBlueprint,
    DefaultBlueprint,
    blueprint_from_config,
)
from fixturekit.core.fixtures.engine import FixtureEngine
from fixturekit.core.fixtures.exceptions import (
    BlueprintError,
    DuplicateChildError,
    FilesystemFailure,
    FixtureCycleError,
    FixtureError,
    InvalidChildKind,
    MissingManifestError,
    UnlinkableChild,
)
from fixturekit.core.fixtures.linker import Linker, LinkMode
from fixturekit.core.fixtures.models import ChildInstall, FixtureKind
from fixturekit.core.fixtures.node import FixtureNode
from fixturekit.core.fixtures.serializer import FixtureSerializer
from fixturekit.core.fixtures.tree import ContentTree, empty_directory, read_tree, write_tree
from fixturekit.core.fixtures.workspace import FixtureWorkspace

__all__ = [
    # Engine
    "FixtureEngine",
    "FixtureNode",
    "FixtureSerializer",
    "FixtureWorkspace",
    # Models
    "FixtureKind",
    "ChildInstall",
    "ContentTree",
    # Composition
    "Linker",
    "LinkMode",
    "read_tree",
    "write_tree",
    "empty_directory",
    # Blueprints
    "BlueprintGenerator",
    "DefaultBlueprint",
    "CommandBlueprint",
    "blueprint_from_config",
    # Exceptions
    "FixtureError",
    "InvalidChildKind",
    "UnlinkableChild",
    "FixtureCycleError",
    "DuplicateChildError",
    "MissingManifestError",
    "FilesystemFailure",
    "BlueprintError",
]
