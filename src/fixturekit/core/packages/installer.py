"""Package manager installers used to populate package cache entries.

The cache owns directory layout, keys and linking; an installer only runs
the package manager inside a prepared directory that already holds the
manifest.
"""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from fixturekit.core.packages.exceptions import InstallError
from fixturekit.core.utils.subprocess import run_with_timeout

if TYPE_CHECKING:
    from fixturekit.core.config.domains.packages import PackagesConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class Installer(Protocol):
    """Protocol for package installers."""

    def install(self, install_dir: Path, manager: str, *, production: bool) -> None:
        """Install the manifest found in ``install_dir`` with ``manager``.

        Args:
            install_dir: Directory holding the manifest; dependencies land here
            manager: Package manager identifier (e.g. ``yarn``)
            production: Skip development-only dependencies
        """
        ...


class NullInstaller:
    """Installer that installs nothing.

    Useful when fixtures only need linked packages, or in test suites that
    must not reach a registry.
    """

    def install(self, install_dir: Path, manager: str, *, production: bool) -> None:
        logger.debug("Skipping %s install in %s (null installer)", manager, install_dir)


class CommandInstaller:
    """Runs a configured package manager command in the install directory."""

    def __init__(
        self,
        commands: Mapping[str, Sequence[str]],
        *,
        production_args: Optional[Mapping[str, Sequence[str]]] = None,
        production_env: Optional[Mapping[str, str]] = None,
        timeout: float = 600.0,
    ) -> None:
        self.commands: Dict[str, List[str]] = {k: list(v) for k, v in commands.items()}
        self.production_args: Dict[str, List[str]] = {
            k: list(v) for k, v in (production_args or {}).items()
        }
        self.production_env: Dict[str, str] = dict(production_env or {})
        self.timeout = timeout

    def build_command(self, manager: str, *, production: bool) -> List[str]:
        """Return the argv used to install with ``manager``.

        Raises:
            InstallError: If no command is configured for ``manager``
        """
        base = self.commands.get(manager)
        if not base:
            raise InstallError(
                f"No install command configured for package manager '{manager}'",
                context={"manager": manager},
            )
        argv = list(base)
        if production:
            argv.extend(self.production_args.get(manager, []))
        return argv

    def install(self, install_dir: Path, manager: str, *, production: bool) -> None:
        argv = self.build_command(manager, production=production)
        env = self.production_env if production else None
        logger.info("Installing %s dependencies in %s", manager, install_dir)
        try:
            run_with_timeout(argv, timeout=self.timeout, cwd=install_dir, env=env)
        except subprocess.CalledProcessError as e:
            output = (e.stderr or e.stdout or "").strip()
            raise InstallError(
                f"{manager} install failed with exit code {e.returncode}\n{output}",
                context={"manager": manager, "install_dir": str(install_dir), "argv": argv},
            ) from e
        except subprocess.TimeoutExpired as e:
            raise InstallError(
                f"{manager} install timed out after {self.timeout}s",
                context={"manager": manager, "install_dir": str(install_dir), "argv": argv},
            ) from e
        except FileNotFoundError as e:
            raise InstallError(
                f"Package manager executable not found: {argv[0]}",
                context={"manager": manager, "argv": argv},
            ) from e


def installer_from_config(config: PackagesConfig) -> Installer:
    """Build the installer selected by ``packages.installer``."""
    if config.installer == "none":
        return NullInstaller()
    return CommandInstaller(
        config.commands,
        production_args=config.production_args,
        production_env=config.production_env,
        timeout=config.install_timeout_seconds,
    )


__all__ = ["Installer", "NullInstaller", "CommandInstaller", "installer_from_config"]
