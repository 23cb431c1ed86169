"""Reusable test doubles for fixture engine tests."""
from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from fixturekit.core.fixtures import FixtureEngine, FixtureKind, FixtureWorkspace, Linker, LinkMode
from fixturekit.core.packages import InstallError, LinkRequest, PackageCache


@dataclass
class InstallCall:
    install_dir: Path
    manager: str
    production: bool
    manifest: Optional[Dict[str, Any]]


class RecordingInstaller:
    """Installer that records calls and fakes one package per dependency.

    Each dependency named in the staged manifest's ``dependencies`` (and
    ``devDependencies`` unless production) becomes
    ``<install_dir>/node_modules/<name>/package.json``.
    """

    manifest_names = {"yarn": "package.json", "npm": "package.json", "bower": "bower.json"}
    dependency_dirs = {"yarn": "node_modules", "npm": "node_modules", "bower": "bower_components"}

    def __init__(self, *, fail: bool = False) -> None:
        self.calls: List[InstallCall] = []
        self.fail = fail

    def install(self, install_dir: Path, manager: str, *, production: bool) -> None:
        manifest_path = install_dir / self.manifest_names.get(manager, "package.json")
        manifest = json.loads(manifest_path.read_text(encoding="utf-8")) if manifest_path.exists() else None
        self.calls.append(InstallCall(install_dir, manager, production, manifest))
        if self.fail:
            raise InstallError(f"{manager} install failed", context={"manager": manager})

        deps: Dict[str, Any] = dict((manifest or {}).get("dependencies") or {})
        if not production:
            deps.update((manifest or {}).get("devDependencies") or {})
        for name in deps:
            pkg = install_dir / self.dependency_dirs.get(manager, "node_modules") / name
            pkg.mkdir(parents=True, exist_ok=True)
            (pkg / "package.json").write_text(json.dumps({"name": name}), encoding="utf-8")


def manifest_text(data: Dict[str, Any]) -> str:
    return json.dumps(data, indent=2) + "\n"


DEFAULT_TREES: Dict[FixtureKind, Dict[str, Any]] = {
    FixtureKind.ROOT_APP: {
        "package.json": manifest_text({"name": "{name}", "dependencies": {}, "devDependencies": {"ember-cli": "*"}}),
        "app": {"app.js": "// app\n"},
    },
    FixtureKind.EXTERNAL_ADDON: {
        "package.json": manifest_text({"name": "{name}", "keywords": ["ember-addon"], "dependencies": {}}),
        "index.js": "module.exports = {};\n",
    },
    FixtureKind.IN_REPO_ADDON: {
        "package.json": manifest_text({"name": "{name}", "keywords": ["ember-addon"]}),
        "index.js": "module.exports = {};\n",
    },
}


def _render(tree: Dict[str, Any], name: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in tree.items():
        if isinstance(value, dict):
            out[key] = _render(value, name)
        else:
            out[key] = value.replace("{name}", name)
    return out


class StaticBlueprint:
    """Blueprint returning fixed trees per kind and recording every call."""

    def __init__(self, trees: Optional[Dict[FixtureKind, Dict[str, Any]]] = None) -> None:
        self.trees = copy.deepcopy(trees if trees is not None else DEFAULT_TREES)
        self.calls: List[tuple] = []

    def generate(self, kind: FixtureKind, name: str, target_dir: Path) -> Dict[str, Any]:
        self.calls.append((kind, name, target_dir))
        return _render(self.trees.get(kind, {}), name)


def make_engine(
    tmp_path: Path,
    *,
    installer: Optional[RecordingInstaller] = None,
    blueprint: Optional[StaticBlueprint] = None,
    mode: LinkMode = LinkMode.SYMLINK,
    self_link: Optional[LinkRequest] = None,
) -> FixtureEngine:
    """Engine rooted at ``tmp_path`` (fixtures/ and cache/ subdirectories)."""
    cache = PackageCache(tmp_path / "cache", installer or RecordingInstaller(), lock_timeout=5.0)
    return FixtureEngine(
        FixtureWorkspace(tmp_path / "fixtures"),
        blueprint or StaticBlueprint(),
        cache,
        linker=Linker(mode),
        self_link=self_link,
    )
