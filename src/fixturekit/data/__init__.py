"""Bundled fixturekit data: default configuration and JSON schemas."""
from __future__ import annotations

from importlib import resources
from pathlib import Path


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """Locate a bundled data directory, or a file inside it.

    >>> get_data_path("schemas", "config/config.schema.yaml").name
    'config.schema.yaml'
    """
    root = Path(str(resources.files(__name__)))
    path = root / subpackage
    if filename:
        path = path / filename
    return path


__all__ = ["get_data_path"]
