"""Content-addressed package install cache.

Fixtures with identical manifests and identical link requests share one
install directory, so a package manager runs at most once per distinct
input set no matter how many fixtures (or threads, or processes) ask for it.
"""
from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from fixturekit.core.packages.exceptions import CacheResolutionFailure, InstallError
from fixturekit.core.packages.installer import Installer
from fixturekit.core.packages.models import CacheEntry, LinkRequest, ManagerSpec
from fixturekit.core.utils.io import (
    acquire_file_lock,
    ensure_directory,
    read_json,
    remove_path,
    write_json_atomic,
    write_text,
)
from fixturekit.core.utils.time import utc_timestamp

logger = logging.getLogger(__name__)

MARKER_FILENAME = ".fixturekit-cache.json"

# Manifest maps that must not fetch a package which is provided through a link.
_DEPENDENCY_KEYS = ("dependencies", "devDependencies", "optionalDependencies", "peerDependencies")


class PackageCache:
    """Resolves manifests to shared, reusable install directories.

    Layout::

        <cache_dir>/<namespace>/<key>/              install directory
        <cache_dir>/<namespace>/<key>/<manifest>    manifest as installed
        <cache_dir>/<namespace>/<key>/<deps dir>/   installed + linked packages
        <cache_dir>/<namespace>/<key>.lock          per-key install lock
    """

    def __init__(
        self,
        cache_dir: Path,
        installer: Installer,
        *,
        lock_timeout: float = 600.0,
        poll_interval: float = 0.1,
    ) -> None:
        """Initialize package cache.

        Args:
            cache_dir: Root directory for all namespaces
            installer: Installer run once per cache miss
            lock_timeout: Seconds to wait for a concurrent install of the same key
            poll_interval: Seconds between lock attempts
        """
        self.cache_dir = Path(cache_dir)
        self.installer = installer
        self.lock_timeout = lock_timeout
        self.poll_interval = poll_interval

    @classmethod
    def from_config(cls, repo_root: Optional[Path] = None, *, config: Optional[Dict[str, Any]] = None) -> PackageCache:
        """Build a cache from the ``packages`` configuration section."""
        from fixturekit.core.config.domains import PackagesConfig
        from fixturekit.core.packages.installer import installer_from_config

        packages = PackagesConfig(repo_root=repo_root, config=config)
        return cls(
            packages.cache_dir,
            installer_from_config(packages),
            lock_timeout=packages.lock_timeout_seconds,
            poll_interval=packages.poll_interval_seconds,
        )

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    @staticmethod
    def cache_key(
        manager: ManagerSpec,
        manifest: Optional[str],
        link_requests: Sequence[LinkRequest],
        *,
        production: bool = False,
    ) -> str:
        """Return the content hash identifying an install.

        Link requests are order-insensitive: the same set in any order
        yields the same key.
        """
        links = sorted((r.to_dict() for r in link_requests), key=lambda d: (d["name"], d["path"]))
        payload = {
            "manager": manager.manager,
            "manifest": manifest,
            "links": links,
            "production": production,
        }
        encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()[:16]

    def _namespace_dir(self, namespace: str) -> Path:
        if not namespace or "/" in namespace or os.sep in namespace or namespace in {".", ".."}:
            raise CacheResolutionFailure(
                f"Invalid package cache namespace: {namespace!r}",
                context={"namespace": namespace},
            )
        return self.cache_dir / namespace

    def install_path(
        self,
        namespace: str,
        manager: ManagerSpec,
        manifest: Optional[str],
        link_requests: Sequence[LinkRequest],
        *,
        production: bool = False,
    ) -> Path:
        """Return where an install for these inputs lives (whether or not it exists)."""
        key = self.cache_key(manager, manifest, link_requests, production=production)
        return self._namespace_dir(namespace) / key

    @staticmethod
    def is_complete(install_dir: Path) -> bool:
        """True when ``install_dir`` holds a finished install."""
        return (install_dir / MARKER_FILENAME).is_file()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        namespace: str,
        manager: ManagerSpec,
        manifest: Optional[str],
        link_requests: Sequence[LinkRequest] = (),
        *,
        production: bool = False,
    ) -> Path:
        """Return the install directory for these inputs, installing on a miss.

        Raises:
            CacheResolutionFailure: If the install or its filesystem work fails
        """
        return self.resolve_entry(
            namespace, manager, manifest, link_requests, production=production
        ).path

    def resolve_entry(
        self,
        namespace: str,
        manager: ManagerSpec,
        manifest: Optional[str],
        link_requests: Sequence[LinkRequest] = (),
        *,
        production: bool = False,
    ) -> CacheEntry:
        """Like :meth:`resolve` but reports whether the installer ran."""
        links = list(link_requests)
        key = self.cache_key(manager, manifest, links, production=production)
        ns_dir = self._namespace_dir(namespace)
        install_dir = ns_dir / key

        if self.is_complete(install_dir):
            logger.debug("Package cache hit %s/%s", namespace, key)
            return CacheEntry(namespace=namespace, key=key, path=install_dir)

        try:
            ensure_directory(ns_dir)
            with acquire_file_lock(
                ns_dir / f"{key}.lock",
                timeout=self.lock_timeout,
                poll_interval=self.poll_interval,
            ):
                # Another thread or process may have finished while we waited.
                if self.is_complete(install_dir):
                    logger.debug("Package cache hit %s/%s after lock wait", namespace, key)
                    return CacheEntry(namespace=namespace, key=key, path=install_dir)
                self._install(ns_dir, install_dir, namespace, key, manager, manifest, links, production)
        except InstallError as e:
            raise CacheResolutionFailure(
                f"Package install failed for {namespace}/{key}: {e}",
                context={"namespace": namespace, "key": key, "manager": manager.manager, **e.context},
            ) from e
        except (OSError, ValueError) as e:
            raise CacheResolutionFailure(
                f"Package cache error for {namespace}/{key}: {e}",
                context={"namespace": namespace, "key": key, "manager": manager.manager},
            ) from e

        return CacheEntry(namespace=namespace, key=key, path=install_dir, installed=True)

    def _install(
        self,
        ns_dir: Path,
        install_dir: Path,
        namespace: str,
        key: str,
        manager: ManagerSpec,
        manifest: Optional[str],
        links: List[LinkRequest],
        production: bool,
    ) -> None:
        """Stage an install next to ``install_dir`` and rename it into place."""
        staging = Path(tempfile.mkdtemp(prefix=f"{key}.", suffix=".partial", dir=ns_dir))
        try:
            manifest_text = self._installable_manifest(manifest, links)
            if manifest_text is not None:
                write_text(staging / manager.manifest, manifest_text)

            logger.info(
                "Installing %s package cache entry %s/%s%s",
                manager.manager,
                namespace,
                key,
                " (production)" if production else "",
            )
            self.installer.install(staging, manager.manager, production=production)

            deps_dir = ensure_directory(staging / manager.dependency_dir)
            for link in links:
                self._link_package(deps_dir, link)

            write_json_atomic(
                staging / MARKER_FILENAME,
                {
                    "namespace": namespace,
                    "key": key,
                    "manager": manager.manager,
                    "production": production,
                    "links": [r.to_dict() for r in links],
                    "created_at": utc_timestamp(),
                },
            )

            # An unfinished directory can only be left behind by a crashed run.
            remove_path(install_dir)
            os.replace(staging, install_dir)
        finally:
            remove_path(staging)

    @staticmethod
    def _installable_manifest(manifest: Optional[str], links: List[LinkRequest]) -> Optional[str]:
        """Return the manifest to install: linked packages are removed from it."""
        if not links:
            return manifest
        data = json.loads(manifest) if manifest else {}
        if not isinstance(data, dict):
            raise ValueError("Manifest must be a JSON object")
        linked = {r.name for r in links}
        for section in _DEPENDENCY_KEYS:
            deps = data.get(section)
            if isinstance(deps, dict):
                for name in linked & set(deps):
                    del deps[name]
        return json.dumps(data, indent=2) + "\n"

    @staticmethod
    def _link_package(deps_dir: Path, link: LinkRequest) -> None:
        # Scoped packages (@scope/name) live one directory deeper.
        dest = deps_dir.joinpath(*link.name.split("/"))
        ensure_directory(dest.parent)
        remove_path(dest)
        dest.symlink_to(Path(link.path), target_is_directory=True)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def entries(self, namespace: str) -> List[Dict[str, Any]]:
        """Return the completion records of every finished install in ``namespace``."""
        ns_dir = self._namespace_dir(namespace)
        if not ns_dir.is_dir():
            return []
        records: List[Dict[str, Any]] = []
        for path in sorted(ns_dir.iterdir()):
            if path.is_dir() and self.is_complete(path):
                records.append(read_json(path / MARKER_FILENAME))
        return records

    def remove(self, namespace: Optional[str] = None) -> bool:
        """Delete one namespace, or the whole cache when ``namespace`` is None.

        Returns:
            True when something was removed
        """
        target = self.cache_dir if namespace is None else self._namespace_dir(namespace)
        removed = remove_path(target)
        if removed:
            logger.info("Removed package cache %s", target)
        return removed


__all__ = ["PackageCache", "MARKER_FILENAME"]
