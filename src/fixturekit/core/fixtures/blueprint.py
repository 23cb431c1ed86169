"""Blueprint generators: produce the initial content tree of a fixture.

A generator is called once per fixture node, at construction, with the
node's kind, name and the directory reserved for it. It returns the tree
and must leave that directory empty.
"""
from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from fixturekit.core.fixtures.exceptions import BlueprintError
from fixturekit.core.fixtures.models import FixtureKind
from fixturekit.core.fixtures.tree import ContentTree, empty_directory, read_tree
from fixturekit.core.utils.io import ensure_directory, write_text
from fixturekit.core.utils.subprocess import run_with_timeout

logger = logging.getLogger(__name__)


@runtime_checkable
class BlueprintGenerator(Protocol):
    """Produces the starting content tree for a fixture."""

    def generate(self, kind: FixtureKind, name: str, target_dir: Path) -> ContentTree:
        ...


class DefaultBlueprint:
    """Built-in minimal project trees, identical on every call."""

    def generate(self, kind: FixtureKind, name: str, target_dir: Path) -> ContentTree:
        kind = FixtureKind.coerce(kind)
        if kind is FixtureKind.ROOT_APP:
            return self._app(name)
        if kind is FixtureKind.EXTERNAL_ADDON:
            return self._addon(name)
        return self._in_repo_addon(name)

    @staticmethod
    def _manifest(data: dict) -> str:
        return json.dumps(data, indent=2) + "\n"

    def _app(self, name: str) -> ContentTree:
        return {
            "package.json": self._manifest({
                "name": name,
                "version": "0.0.0",
                "private": True,
                "dependencies": {},
                "devDependencies": {},
            }),
            "app": {
                "app.js": f"// {name}/app.js\n",
                "index.html": f"<!DOCTYPE html>\n<title>{name}</title>\n",
                "styles": {"app.css": ""},
                "templates": {"application.hbs": "{{outlet}}\n"},
            },
            "config": {"environment.js": f"module.exports = {{ modulePrefix: '{name}' }};\n"},
            "public": {},
            "tests": {"index.html": "", "unit": {}, "integration": {}},
            "vendor": {},
        }

    def _addon(self, name: str) -> ContentTree:
        return {
            "package.json": self._manifest({
                "name": name,
                "version": "0.0.0",
                "keywords": ["ember-addon"],
                "dependencies": {},
                "devDependencies": {},
            }),
            "index.js": f"module.exports = {{ name: '{name}' }};\n",
            "addon": {},
            "app": {},
            "tests": {"dummy": {"app": {}, "config": {}}},
        }

    def _in_repo_addon(self, name: str) -> ContentTree:
        return {
            "package.json": self._manifest({"name": name, "keywords": ["ember-addon"]}),
            "index.js": f"module.exports = {{ name: '{name}', isDevelopingAddon() {{ return true; }} }};\n",
        }


class CommandBlueprint:
    """Runs an external project generator and reads its output back.

    Commands are argv lists per kind with ``{name}`` and ``{target}``
    placeholders. Root apps and external addons are generated into the
    target directory; in-repo addons are generated inside a stub project in
    the target directory and only ``lib/<name>`` is kept.
    """

    def __init__(self, commands: Mapping[str, Sequence[str]], *, timeout: float = 300.0) -> None:
        self.commands: Dict[str, List[str]] = {str(k): list(v) for k, v in commands.items()}
        self.timeout = timeout

    @classmethod
    def from_config(cls, repo_root: Optional[Path] = None, *, config: Optional[dict] = None) -> CommandBlueprint:
        from fixturekit.core.config.domains import FixturesConfig

        fixtures = FixturesConfig(repo_root=repo_root, config=config)
        return cls(fixtures.blueprint_commands, timeout=fixtures.blueprint_timeout_seconds)

    def build_command(self, kind: FixtureKind, name: str, target_dir: Path) -> List[str]:
        kind = FixtureKind.coerce(kind)
        template = self.commands.get(kind.value)
        if not template:
            raise BlueprintError(
                f"No generator command configured for '{kind.value}'",
                context={"kind": kind.value, "name": name},
            )
        return [arg.format(name=name, target=str(target_dir)) for arg in template]

    def generate(self, kind: FixtureKind, name: str, target_dir: Path) -> ContentTree:
        kind = FixtureKind.coerce(kind)
        target_dir = Path(target_dir)
        argv = self.build_command(kind, name, target_dir)
        empty_directory(target_dir)

        if kind is FixtureKind.IN_REPO_ADDON:
            # The generator only runs inside a project.
            write_text(target_dir / "package.json", "{}")
            ensure_directory(target_dir / "node_modules")
            source = target_dir / "lib" / name
        else:
            source = target_dir

        logger.debug("Generating %s '%s' in %s", kind.value, name, target_dir)
        try:
            run_with_timeout(argv, timeout=self.timeout, cwd=target_dir)
            if not source.is_dir():
                raise BlueprintError(
                    f"Generator produced no output at {source}",
                    context={"kind": kind.value, "name": name, "argv": argv},
                )
            tree = read_tree(source)
        except subprocess.CalledProcessError as e:
            output = (e.stderr or e.stdout or "").strip()
            raise BlueprintError(
                f"Generator for {kind.value} '{name}' failed with exit code {e.returncode}\n{output}",
                context={"kind": kind.value, "name": name, "argv": argv},
            ) from e
        except subprocess.TimeoutExpired as e:
            raise BlueprintError(
                f"Generator for {kind.value} '{name}' timed out after {self.timeout}s",
                context={"kind": kind.value, "name": name, "argv": argv},
            ) from e
        except OSError as e:
            raise BlueprintError(
                f"Generator for {kind.value} '{name}' could not run: {e}",
                context={"kind": kind.value, "name": name, "argv": argv},
            ) from e
        finally:
            empty_directory(target_dir)

        return tree


def blueprint_from_config(repo_root: Optional[Path] = None, *, config: Optional[dict] = None) -> BlueprintGenerator:
    """Build the generator selected by ``fixtures.blueprint.type``."""
    from fixturekit.core.config.domains import FixturesConfig

    fixtures = FixturesConfig(repo_root=repo_root, config=config)
    if fixtures.blueprint_type == "command":
        return CommandBlueprint(fixtures.blueprint_commands, timeout=fixtures.blueprint_timeout_seconds)
    return DefaultBlueprint()


__all__ = ["BlueprintGenerator", "DefaultBlueprint", "CommandBlueprint", "blueprint_from_config"]
