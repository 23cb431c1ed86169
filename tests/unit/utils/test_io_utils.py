"""Tests for I/O helpers."""
from __future__ import annotations

from pathlib import Path

import pytest


class TestAtomicWrites:
    def test_write_text_creates_parents(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import write_text

        target = tmp_path / "a" / "b" / "file.txt"
        write_text(target, "hello")

        assert target.read_text(encoding="utf-8") == "hello"
        assert [p.name for p in target.parent.iterdir()] == ["file.txt"]

    def test_write_json_atomic_is_sorted_with_trailing_newline(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import read_json, write_json_atomic

        target = tmp_path / "data.json"
        write_json_atomic(target, {"b": 1, "a": [1, 2]})

        assert target.read_text(encoding="utf-8") == '{\n  "a": [\n    1,\n    2\n  ],\n  "b": 1\n}\n'
        assert read_json(target) == {"a": [1, 2], "b": 1}

    def test_read_json_default_and_missing(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import read_json

        assert read_json(tmp_path / "missing.json", default={}) == {}
        with pytest.raises(FileNotFoundError):
            read_json(tmp_path / "missing.json")


class TestRemovePath:
    def test_removes_directory_tree(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import remove_path

        (tmp_path / "d" / "e").mkdir(parents=True)

        assert remove_path(tmp_path / "d") is True
        assert not (tmp_path / "d").exists()

    def test_unlinks_symlink_without_following(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import remove_path

        target = tmp_path / "target"
        target.mkdir()
        (target / "keep").write_text("k", encoding="utf-8")
        link = tmp_path / "link"
        link.symlink_to(target, target_is_directory=True)

        assert remove_path(link) is True
        assert (target / "keep").exists()

    def test_dangling_symlink_is_removed(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import remove_path

        link = tmp_path / "dangling"
        link.symlink_to(tmp_path / "nowhere")

        assert remove_path(link) is True
        assert not link.is_symlink()

    def test_missing_path_returns_false(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import remove_path

        assert remove_path(tmp_path / "missing") is False


class TestEnsureDirectory:
    def test_rejects_file(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import ensure_directory

        (tmp_path / "f").write_text("x", encoding="utf-8")

        with pytest.raises(NotADirectoryError):
            ensure_directory(tmp_path / "f")

    def test_create_false_raises_when_missing(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import ensure_directory

        with pytest.raises(FileNotFoundError):
            ensure_directory(tmp_path / "missing", create=False)


class TestYaml:
    def test_read_yaml_default_on_invalid(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import read_yaml

        bad = tmp_path / "bad.yaml"
        bad.write_text("a: [unclosed", encoding="utf-8")

        assert read_yaml(bad, default={"x": 1}) == {"x": 1}

    def test_read_yaml_raises_when_asked(self, tmp_path: Path) -> None:
        import yaml

        from fixturekit.core.utils.io import read_yaml

        bad = tmp_path / "bad.yaml"
        bad.write_text("a: [unclosed", encoding="utf-8")

        with pytest.raises(yaml.YAMLError):
            read_yaml(bad, raise_on_error=True)

    def test_iter_yaml_files_prefers_yaml_extension(self, tmp_path: Path) -> None:
        from fixturekit.core.utils.io import iter_yaml_files

        for name in ("b.yml", "a.yaml", "a.yml", "c.txt"):
            (tmp_path / name).write_text("x: 1", encoding="utf-8")

        assert [p.name for p in iter_yaml_files(tmp_path)] == ["a.yaml", "b.yml"]
