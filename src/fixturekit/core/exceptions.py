"""Exception root shared by every fixturekit subsystem."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class FixtureKitError(Exception):
    """Base class for fixturekit errors.

    ``context`` holds structured details (names, paths, namespaces) that
    callers can log or serialize without parsing the message.
    """

    def __init__(self, message: str = "", *, context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.context: Dict[str, Any] = dict(context or {})

    def to_json_error(self) -> Dict[str, Any]:
        return {
            "code": type(self).__name__,
            "message": str(self),
            "context": dict(self.context),
        }


class ConfigError(FixtureKitError):
    """Configuration could not be loaded or did not validate."""


__all__ = ["FixtureKitError", "ConfigError"]
