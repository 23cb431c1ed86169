"""Layered fixturekit configuration.

Layers, lowest to highest priority:

1. bundled defaults (``fixturekit/data/config/*.yaml``)
2. project config (``<repo>/.fixturekit/config/*.yaml``)
3. uncommitted local config (``<repo>/.fixturekit/config.local/*.yaml``)
4. environment variables ``FIXTUREKIT_<section>__<key>``

Files within a layer merge in filename order.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import yaml

from fixturekit.core.exceptions import ConfigError
from fixturekit.core.utils.io import iter_yaml_files, read_yaml
from fixturekit.core.utils.merge import deep_merge
from fixturekit.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "FIXTUREKIT_"
ENV_SEPARATOR = "__"
PROJECT_CONFIG_DIRNAME = ".fixturekit"
CONFIG_SCHEMA = "config/config.schema.yaml"


def coerce_env_value(raw: str) -> Any:
    """Interpret an environment value as a YAML scalar or flow collection.

    ``"42"`` becomes ``42``, ``"null"`` becomes ``None`` and ``'{"a": 1}'``
    becomes a dict; anything that does not parse stays a stripped string.
    """
    text = raw.strip()
    if not text:
        return ""
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError:
        return text


class ConfigManager:
    """Loads and validates the merged configuration of one project."""

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else Path.cwd()
        self.core_config_dir = get_data_path("config")
        self.project_config_dir = self.repo_root / PROJECT_CONFIG_DIRNAME / "config"
        self.project_local_config_dir = self.repo_root / PROJECT_CONFIG_DIRNAME / "config.local"

    @property
    def layers(self) -> List[Path]:
        return [self.core_config_dir, self.project_config_dir, self.project_local_config_dir]

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        """Read one config file. Broken YAML and non-mapping documents are errors."""
        data = read_yaml(path, default={}, raise_on_error=True)
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping", context={"path": str(path)})
        return data

    def validate_schema(self, config: Dict[str, Any]) -> None:
        from fixturekit.core.schemas import validate_payload

        validate_payload(config, CONFIG_SCHEMA)

    def _env_overrides(self, *, strict: bool) -> Iterator[Tuple[List[str], Any]]:
        for name in sorted(os.environ):
            if not name.startswith(ENV_PREFIX) or name == ENV_PREFIX:
                continue
            parts = name[len(ENV_PREFIX):].lower().split(ENV_SEPARATOR)
            if "" in parts:
                if strict:
                    raise ConfigError(f"Malformed override {name}: empty path segment", context={"key": name})
                logger.warning("Ignoring malformed override %s", name)
                continue
            yield parts, coerce_env_value(os.environ[name])

    @staticmethod
    def _assign(cfg: Dict[str, Any], path: List[str], value: Any) -> None:
        # Env names are upper case; reuse an existing key that matches case-insensitively.
        node = cfg
        for i, part in enumerate(path):
            key = next((k for k in node if isinstance(k, str) and k.lower() == part), part)
            if i == len(path) - 1:
                node[key] = value
                return
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]

    def apply_env_overrides(self, cfg: Dict[str, Any], *, strict: bool) -> None:
        for path, value in self._env_overrides(strict=strict):
            self._assign(cfg, path, value)

    def _load_config_uncached(self, validate: bool = True) -> Dict[str, Any]:
        cfg: Dict[str, Any] = {}
        for directory in self.layers:
            for path in iter_yaml_files(directory):
                cfg = deep_merge(cfg, self.load_yaml(path))
        self.apply_env_overrides(cfg, strict=validate)
        if validate:
            self.validate_schema(cfg)
        return cfg

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Return the cached merged config, validating it when asked.

        The returned dict is shared; treat it as read-only.
        """
        from .cache import get_cached_config

        cfg = get_cached_config(repo_root=self.repo_root, validate=False)
        if validate:
            for _ in self._env_overrides(strict=True):
                pass
            self.validate_schema(cfg)
        return cfg

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``"linker.mode"``."""
        value: Any = self.load_config(validate=False)
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value


__all__ = ["ConfigManager", "ENV_PREFIX", "PROJECT_CONFIG_DIRNAME", "coerce_env_value"]
