"""Allocation of fixture directories."""
from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from fixturekit.core.fixtures.exceptions import FilesystemFailure
from fixturekit.core.fixtures.models import FixtureKind
from fixturekit.core.utils.io import ensure_directory, remove_path

logger = logging.getLogger(__name__)


class FixtureWorkspace:
    """Hands out one fresh directory per fixture node below ``root``.

    Directory names are ``<name>-<kind>-fixture-<random>`` so two nodes with
    the same name and kind never share a directory.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self._allocated: List[Path] = []

    @classmethod
    def from_config(cls, repo_root: Optional[Path] = None, *, config: Optional[dict] = None) -> FixtureWorkspace:
        from fixturekit.core.config.domains import FixturesConfig

        return cls(FixturesConfig(repo_root=repo_root, config=config).temp_root)

    @property
    def allocated(self) -> List[Path]:
        """Directories handed out so far, in allocation order."""
        return list(self._allocated)

    def allocate(self, kind: FixtureKind, name: str) -> Path:
        """Create and return a new empty directory for a fixture."""
        kind = FixtureKind.coerce(kind)
        try:
            ensure_directory(self.root)
            path = Path(tempfile.mkdtemp(prefix=f"{name}-{kind.value}-fixture-", dir=self.root))
        except OSError as e:
            raise FilesystemFailure(
                f"Cannot allocate fixture directory for {kind.value} '{name}': {e}",
                context={"root": str(self.root), "name": name, "kind": kind.value},
            ) from e
        self._allocated.append(path)
        logger.debug("Allocated fixture directory %s", path)
        return path

    def cleanup(self) -> int:
        """Remove every allocated directory. Returns the number removed."""
        removed = 0
        for path in self._allocated:
            if remove_path(path):
                removed += 1
        self._allocated.clear()
        return removed


__all__ = ["FixtureWorkspace"]
