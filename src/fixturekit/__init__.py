"""
fixturekit - composable, cached project fixtures for test suites

fixturekit builds in-memory trees of application and addon fixtures,
materializes them to disk depth-first, and shares installed dependency
sets between fixtures through a content-addressed package cache.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
