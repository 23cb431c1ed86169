"""Cache utilities for test isolation."""
from __future__ import annotations


def reset_fixturekit_caches() -> None:
    """Drop cached configs and the file log handler between tests."""
    from fixturekit.core.config.cache import clear_all_caches
    from fixturekit.core.logging import reset_logging_for_tests

    clear_all_caches()
    reset_logging_for_tests()
