"""YAML configuration file helpers."""
from __future__ import annotations

from pathlib import Path
from typing import Any, List

import yaml

YAML_SUFFIXES = (".yaml", ".yml")


def read_yaml(path: Path, default: Any = None, raise_on_error: bool = False) -> Any:
    """Parse the YAML document at ``path``.

    Missing, empty or unparsable files yield ``default`` unless
    ``raise_on_error`` is set, in which case the error propagates
    (``FileNotFoundError`` for a missing file).
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default
    return default if data is None else data


def iter_yaml_files(directory: Path) -> List[Path]:
    """List ``*.yaml`` / ``*.yml`` files in ``directory`` sorted by stem.

    A ``.yaml`` file shadows a ``.yml`` file with the same stem.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []
    by_stem: dict[str, Path] = {}
    for suffix in reversed(YAML_SUFFIXES):
        for p in directory.glob(f"*{suffix}"):
            by_stem[p.stem] = p
    return [by_stem[stem] for stem in sorted(by_stem)]


__all__ = ["read_yaml", "iter_yaml_files"]
