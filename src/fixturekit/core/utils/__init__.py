"""Utility helpers for fixturekit core.

This package provides consolidated utilities:
- io/: File I/O operations (atomic writes, JSON, YAML, locking)
- merge: Deep merge for layered configuration
- subprocess: Subprocess execution with timeouts
- time: Time utilities
"""
from __future__ import annotations

from .merge import deep_merge, merge_arrays

__all__ = ["deep_merge", "merge_arrays"]
