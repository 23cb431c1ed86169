"""Tests for the content-addressed package cache."""
from __future__ import annotations

import json
import threading
import time
from pathlib import Path

import pytest

from helpers.fixtures import RecordingInstaller


@pytest.fixture
def yarn():
    from fixturekit.core.packages import ManagerSpec

    return ManagerSpec(manager="yarn", manifest="package.json", dependency_dir="node_modules")


@pytest.fixture
def cache(tmp_path: Path, installer: RecordingInstaller):
    from fixturekit.core.packages import PackageCache

    return PackageCache(tmp_path / "cache", installer, lock_timeout=5.0, poll_interval=0.01)


MANIFEST = json.dumps({"name": "app", "dependencies": {"left-pad": "*"}, "devDependencies": {"qunit": "*"}})


class TestCacheKeys:
    def test_key_is_stable(self, yarn) -> None:
        from fixturekit.core.packages import PackageCache

        assert PackageCache.cache_key(yarn, MANIFEST, []) == PackageCache.cache_key(yarn, MANIFEST, [])

    def test_link_order_does_not_matter(self, tmp_path: Path, yarn) -> None:
        from fixturekit.core.packages import LinkRequest, PackageCache

        a = LinkRequest(name="a", path=tmp_path / "a")
        b = LinkRequest(name="b", path=tmp_path / "b")

        assert PackageCache.cache_key(yarn, MANIFEST, [a, b]) == PackageCache.cache_key(yarn, MANIFEST, [b, a])

    @pytest.mark.parametrize(
        "change",
        ["manifest", "manager", "production", "link_path"],
    )
    def test_any_input_change_changes_key(self, tmp_path: Path, yarn, change: str) -> None:
        from fixturekit.core.packages import LinkRequest, ManagerSpec, PackageCache

        base = dict(manager=yarn, manifest=MANIFEST, links=[LinkRequest("a", tmp_path / "a")], production=False)
        other = dict(base)
        if change == "manifest":
            other["manifest"] = MANIFEST + " "
        elif change == "manager":
            other["manager"] = ManagerSpec("npm", "package.json", "node_modules")
        elif change == "production":
            other["production"] = True
        else:
            other["links"] = [LinkRequest("a", tmp_path / "elsewhere")]

        def key(d):
            return PackageCache.cache_key(d["manager"], d["manifest"], d["links"], production=d["production"])

        assert key(base) != key(other)


class TestResolve:
    def test_first_resolve_installs_and_marks_complete(self, cache, installer, yarn) -> None:
        from fixturekit.core.packages import MARKER_FILENAME

        entry = cache.resolve_entry("root-app-yarn", yarn, MANIFEST)

        assert entry.installed is True
        assert entry.path.parent == cache.cache_dir / "root-app-yarn"
        assert (entry.path / MARKER_FILENAME).is_file()
        assert (entry.path / "node_modules" / "left-pad").is_dir()
        assert json.loads((entry.path / "package.json").read_text(encoding="utf-8"))["name"] == "app"
        assert len(installer.calls) == 1

    def test_second_resolve_is_a_hit(self, cache, installer, yarn) -> None:
        first = cache.resolve("root-app-yarn", yarn, MANIFEST)
        entry = cache.resolve_entry("root-app-yarn", yarn, MANIFEST)

        assert entry.installed is False
        assert entry.path == first
        assert len(installer.calls) == 1

    def test_namespaces_are_isolated(self, cache, installer, yarn) -> None:
        a = cache.resolve("root-app-yarn", yarn, MANIFEST)
        b = cache.resolve("external-addon-yarn", yarn, MANIFEST)

        assert a != b
        assert len(installer.calls) == 2

    def test_production_passed_to_installer(self, cache, installer, yarn) -> None:
        path = cache.resolve("addon-production-yarn", yarn, MANIFEST, production=True)

        assert installer.calls[0].production is True
        assert not (path / "node_modules" / "qunit").exists()

    def test_missing_manifest_still_creates_dependency_dir(self, cache, installer, yarn) -> None:
        path = cache.resolve("root-app-yarn", yarn, None)

        assert (path / "node_modules").is_dir()
        assert not (path / "package.json").exists()
        assert installer.calls[0].manifest is None

    def test_links_are_stripped_and_symlinked(self, tmp_path: Path, cache, installer, yarn) -> None:
        from fixturekit.core.packages import LinkRequest

        pad_dir = tmp_path / "left-pad"
        pad_dir.mkdir()
        scoped_dir = tmp_path / "scoped"
        scoped_dir.mkdir()

        path = cache.resolve(
            "root-app-yarn",
            yarn,
            MANIFEST,
            [LinkRequest("left-pad", pad_dir), LinkRequest("@scope/pkg", scoped_dir)],
        )

        assert "left-pad" not in installer.calls[0].manifest["dependencies"]
        assert (path / "node_modules" / "left-pad").is_symlink()
        assert (path / "node_modules" / "left-pad").resolve() == pad_dir.resolve()
        assert (path / "node_modules" / "@scope" / "pkg").resolve() == scoped_dir.resolve()

    def test_links_without_manifest(self, tmp_path: Path, cache, yarn) -> None:
        from fixturekit.core.packages import LinkRequest

        target = tmp_path / "self"
        target.mkdir()

        path = cache.resolve("root-app-yarn", yarn, None, [LinkRequest("ember-cli", target)])

        assert json.loads((path / "package.json").read_text(encoding="utf-8")) == {}
        assert (path / "node_modules" / "ember-cli").resolve() == target.resolve()

    def test_invalid_namespace_is_rejected(self, cache, yarn) -> None:
        from fixturekit.core.packages import CacheResolutionFailure

        with pytest.raises(CacheResolutionFailure):
            cache.resolve("../escape", yarn, MANIFEST)


class TestFailures:
    def test_installer_failure_wrapped_and_staging_removed(self, tmp_path: Path, yarn) -> None:
        from fixturekit.core.packages import CacheResolutionFailure, InstallError, PackageCache

        cache = PackageCache(tmp_path / "cache", RecordingInstaller(fail=True), lock_timeout=5.0)

        with pytest.raises(CacheResolutionFailure) as exc:
            cache.resolve("root-app-yarn", yarn, MANIFEST)

        assert isinstance(exc.value.__cause__, InstallError)
        assert exc.value.context["namespace"] == "root-app-yarn"
        leftovers = [p for p in (tmp_path / "cache" / "root-app-yarn").iterdir() if p.suffix != ".lock"]
        assert leftovers == []

    def test_invalid_manifest_with_links_is_wrapped(self, tmp_path: Path, cache, yarn) -> None:
        from fixturekit.core.packages import CacheResolutionFailure, LinkRequest

        with pytest.raises(CacheResolutionFailure):
            cache.resolve("root-app-yarn", yarn, "not json", [LinkRequest("x", tmp_path)])

    def test_retry_after_failure_installs(self, tmp_path: Path, yarn) -> None:
        from fixturekit.core.packages import CacheResolutionFailure, PackageCache

        installer = RecordingInstaller(fail=True)
        cache = PackageCache(tmp_path / "cache", installer, lock_timeout=5.0)
        with pytest.raises(CacheResolutionFailure):
            cache.resolve("ns", yarn, MANIFEST)

        installer.fail = False
        entry = cache.resolve_entry("ns", yarn, MANIFEST)

        assert entry.installed is True


class SlowInstaller(RecordingInstaller):
    def install(self, install_dir: Path, manager: str, *, production: bool) -> None:
        time.sleep(0.2)
        super().install(install_dir, manager, production=production)


class TestConcurrency:
    def test_concurrent_resolves_install_once(self, tmp_path: Path, yarn) -> None:
        from fixturekit.core.packages import PackageCache

        installer = SlowInstaller()
        cache = PackageCache(tmp_path / "cache", installer, lock_timeout=10.0, poll_interval=0.01)
        results: list = []
        errors: list = []

        def worker() -> None:
            try:
                results.append(cache.resolve("root-app-yarn", yarn, MANIFEST))
            except Exception as e:  # pragma: no cover - surfaced by the assertion below
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(set(results)) == 1
        assert len(installer.calls) == 1


class TestMaintenance:
    def test_entries_lists_completed_installs(self, cache, yarn) -> None:
        cache.resolve("ns", yarn, MANIFEST)
        cache.resolve("ns", yarn, MANIFEST, production=True)

        records = cache.entries("ns")

        assert sorted(r["production"] for r in records) == [False, True]
        assert cache.entries("missing") == []

    def test_remove_namespace(self, cache, yarn) -> None:
        cache.resolve("a", yarn, MANIFEST)
        cache.resolve("b", yarn, MANIFEST)

        assert cache.remove("a") is True
        assert not (cache.cache_dir / "a").exists()
        assert (cache.cache_dir / "b").exists()

    def test_remove_everything(self, cache, yarn) -> None:
        cache.resolve("a", yarn, MANIFEST)

        assert cache.remove() is True
        assert not cache.cache_dir.exists()
        assert cache.remove() is False

    def test_from_config(self, tmp_path: Path) -> None:
        from fixturekit.core.packages import CommandInstaller, PackageCache

        cache = PackageCache.from_config(
            tmp_path,
            config={"packages": {"cache_dir": "cache", "installer": "command", "commands": {"yarn": ["yarn"]}, "lock_timeout_seconds": 3}},
        )

        assert cache.cache_dir == tmp_path / "cache"
        assert isinstance(cache.installer, CommandInstaller)
        assert cache.lock_timeout == 3.0
