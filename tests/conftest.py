from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'fixturekit' and tests/ importable as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from helpers.cache_utils import reset_fixturekit_caches  # noqa: E402
from helpers.fixtures import RecordingInstaller, StaticBlueprint, make_engine  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_fixturekit(monkeypatch: pytest.MonkeyPatch):
    """Drop FIXTUREKIT_* overrides and module caches around every test."""
    for key in list(os.environ):
        if key.startswith("FIXTUREKIT_"):
            monkeypatch.delenv(key, raising=False)
    reset_fixturekit_caches()
    yield
    reset_fixturekit_caches()


@pytest.fixture
def installer() -> RecordingInstaller:
    return RecordingInstaller()


@pytest.fixture
def blueprint() -> StaticBlueprint:
    return StaticBlueprint()


@pytest.fixture
def engine(tmp_path: Path, installer: RecordingInstaller, blueprint: StaticBlueprint):
    """Engine writing fixtures and package cache entries below ``tmp_path``."""
    eng = make_engine(tmp_path, installer=installer, blueprint=blueprint)
    yield eng
    eng.cleanup()
