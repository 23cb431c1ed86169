"""Test helper modules for the fixturekit test suite.

- cache_utils: reset module-level caches between tests
- fixtures: recording installer, static blueprint and engine factory
- assertions: filesystem assertion helpers
"""
