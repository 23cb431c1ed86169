"""Running installers and generators under a deadline.

Each command gets its own session, so a timeout kills the whole process
group: a package manager's helper processes die with it.
"""
from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)

Command = Union[str, Sequence[Any]]


def to_argv(cmd: Command) -> List[str]:
    """Normalize ``cmd`` to an argv list; strings are split shell-style."""
    if isinstance(cmd, str):
        return shlex.split(cmd)
    return [str(part) for part in cmd]


def _kill_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_with_timeout(
    cmd: Command,
    *,
    timeout: float,
    cwd: Optional[Union[Path, str]] = None,
    env: Optional[Mapping[str, str]] = None,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run ``cmd`` and capture its text output.

    ``env`` entries are added to the current environment rather than
    replacing it.

    Raises:
        subprocess.TimeoutExpired: The command ran longer than ``timeout`` seconds
        subprocess.CalledProcessError: ``check`` is set and the exit code is non-zero
    """
    argv = to_argv(cmd)
    child_env = {**os.environ, **(env or {})}
    logger.debug("Running %s in %s (timeout %ss)", shlex.join(argv), cwd or os.getcwd(), timeout)

    with subprocess.Popen(
        argv,
        cwd=cwd,
        env=child_env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        start_new_session=True,
    ) as proc:
        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_group(proc)
            stdout, stderr = proc.communicate()
            raise subprocess.TimeoutExpired(argv, timeout, output=stdout, stderr=stderr) from None

    if check and proc.returncode:
        raise subprocess.CalledProcessError(proc.returncode, argv, output=stdout, stderr=stderr)
    return subprocess.CompletedProcess(argv, proc.returncode, stdout, stderr)


__all__ = ["run_with_timeout", "to_argv"]
