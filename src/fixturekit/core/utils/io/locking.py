"""Exclusive lock files shared by threads and processes.

``fcntl.flock`` locks belong to an open file description, so two threads
of one process opening the same path would both "win". A per-path mutex
is taken first to cover that case.
"""
from __future__ import annotations

import fcntl
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Union

from .core import ensure_directory

_mutexes: Dict[Path, threading.Lock] = {}
_mutexes_guard = threading.Lock()


class LockTimeoutError(TimeoutError):
    """The lock was still held by someone else when the timeout ran out."""


def _mutex_for(path: Path) -> threading.Lock:
    with _mutexes_guard:
        return _mutexes.setdefault(path.resolve(), threading.Lock())


@contextmanager
def acquire_file_lock(
    lock_path: Union[Path, str],
    *,
    timeout: float = 300.0,
    poll_interval: float = 0.1,
) -> Iterator[Path]:
    """Hold ``lock_path`` exclusively inside the ``with`` block.

    The lock file stays on disk after release; deleting it would let a
    waiter and a newcomer lock two different inodes at once.

    Raises:
        ValueError: ``timeout`` or ``poll_interval`` is not positive
        LockTimeoutError: The lock was not acquired within ``timeout`` seconds
    """
    if timeout <= 0 or poll_interval <= 0:
        raise ValueError(f"timeout and poll_interval must be positive (got {timeout}, {poll_interval})")

    path = Path(lock_path)
    ensure_directory(path.parent)
    deadline = time.monotonic() + timeout

    mutex = _mutex_for(path)
    if not mutex.acquire(timeout=timeout):
        raise LockTimeoutError(f"Timed out after {timeout}s waiting for {path}")
    try:
        with open(path, "a+") as handle:
            while True:
                try:
                    fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except BlockingIOError:
                    if time.monotonic() >= deadline:
                        raise LockTimeoutError(f"Timed out after {timeout}s waiting for {path}") from None
                    time.sleep(poll_interval)
            try:
                yield path
            finally:
                fcntl.flock(handle, fcntl.LOCK_UN)
    finally:
        mutex.release()


__all__ = ["acquire_file_lock", "LockTimeoutError"]
