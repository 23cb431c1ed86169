"""Directory linking for fixture composition.

Children are composed into their parents by linking, never by copying,
unless copy mode is configured explicitly (for filesystems without
symlink support).
"""
from __future__ import annotations

import logging
import shutil
from enum import Enum
from pathlib import Path
from typing import Optional

from fixturekit.core.fixtures.exceptions import FilesystemFailure
from fixturekit.core.utils.io import remove_path

logger = logging.getLogger(__name__)


class LinkMode(str, Enum):
    """How a link target is materialized."""

    SYMLINK = "symlink"
    COPY = "copy"


class Linker:
    """Creates directory links (or copies) at fixed locations."""

    def __init__(self, mode: LinkMode | str = LinkMode.SYMLINK) -> None:
        try:
            self.mode = LinkMode(mode)
        except ValueError as e:
            raise FilesystemFailure(
                f"Unknown link mode: {mode}",
                context={"mode": str(mode)},
            ) from e

    @classmethod
    def from_config(cls, repo_root: Optional[Path] = None, *, config: Optional[dict] = None) -> Linker:
        from fixturekit.core.config.domains import LinkerConfig

        return cls(LinkerConfig(repo_root=repo_root, config=config).mode)

    def link(self, target: Path, link_name: Path) -> None:
        """Make ``link_name`` point at ``target``.

        Parents of both paths are created. Whatever exists at ``link_name``
        is replaced; a symlink there is unlinked without touching its target.

        Raises:
            FilesystemFailure: On any OS error
        """
        target = Path(target)
        link_name = Path(link_name)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            link_name.parent.mkdir(parents=True, exist_ok=True)
            if link_name.is_symlink() or link_name.exists():
                logger.debug("Replacing existing %s", link_name)
                remove_path(link_name)

            if self.mode is LinkMode.SYMLINK:
                link_name.symlink_to(target, target_is_directory=True)
            elif target.is_dir():
                shutil.copytree(target, link_name, symlinks=True)
            else:
                shutil.copy2(target, link_name, follow_symlinks=False)
        except OSError as e:
            raise FilesystemFailure(
                f"Failed to {self.mode.value} {link_name} -> {target}: {e}",
                context={"target": str(target), "link": str(link_name), "mode": self.mode.value},
            ) from e


__all__ = ["Linker", "LinkMode"]
