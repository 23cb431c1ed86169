"""Tests for configuration merge helpers."""
from __future__ import annotations


class TestDeepMerge:
    def test_nested_dicts_merge(self) -> None:
        from fixturekit.core.utils import deep_merge

        base = {"packages": {"primary": {"manager": "yarn"}, "installer": "command"}}
        override = {"packages": {"primary": {"manager": "npm"}}}

        merged = deep_merge(base, override)

        assert merged == {"packages": {"primary": {"manager": "npm"}, "installer": "command"}}
        assert base["packages"]["primary"]["manager"] == "yarn"

    def test_lists_replace_by_default(self) -> None:
        from fixturekit.core.utils import deep_merge

        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_plus_prefix_appends(self) -> None:
        from fixturekit.core.utils import merge_arrays

        assert merge_arrays(["yarn", "install"], ["+", "--frozen-lockfile"]) == ["yarn", "install", "--frozen-lockfile"]

    def test_equals_prefix_replaces(self) -> None:
        from fixturekit.core.utils import merge_arrays

        assert merge_arrays([1, 2], ["=", 3]) == [3]

    def test_empty_override_keeps_base(self) -> None:
        from fixturekit.core.utils import merge_arrays

        assert merge_arrays([1], []) == [1]
