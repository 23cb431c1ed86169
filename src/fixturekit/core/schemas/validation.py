"""Validation of fixturekit payloads against bundled JSON schemas.

Schemas live as YAML under ``fixturekit/data/schemas/`` and are checked
with the Draft 2020-12 validator.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator

from fixturekit.core.exceptions import ConfigError
from fixturekit.core.utils.io import read_yaml
from fixturekit.data import get_data_path


class SchemaValidationError(ConfigError, ValueError):
    """A payload did not match its schema. ``errors`` lists each violation."""

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(message, context={"errors": list(errors or [])})
        self.errors = list(errors or [])


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> Dict[str, Any]:
    """Return the bundled schema ``schema_name`` (``.yaml`` is implied)."""
    if PurePosixPath(schema_name).suffix.lower() not in (".yaml", ".yml"):
        schema_name += ".yaml"
    path = get_data_path("schemas", schema_name)
    if not path.is_file():
        raise FileNotFoundError(f"No bundled schema {schema_name!r} under {path.parent}")
    schema = read_yaml(path, raise_on_error=True)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema {schema_name!r} is not a mapping")
    return schema


def _describe(error: Any) -> str:
    if not error.path:
        return error.message
    return ".".join(str(part) for part in error.path) + ": " + error.message


def validate_payload_safe(payload: Dict[str, Any], schema_name: str) -> List[str]:
    """Collect every violation of ``schema_name`` in ``payload`` as ``dotted.path: message``."""
    validator = Draft202012Validator(load_schema(schema_name))
    found = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.path])
    return [_describe(e) for e in found]


def validate_payload(payload: Dict[str, Any], schema_name: str) -> None:
    errors = validate_payload_safe(payload, schema_name)
    if errors:
        raise SchemaValidationError(f"{schema_name}: " + "; ".join(errors), errors)


__all__ = ["SchemaValidationError", "load_schema", "validate_payload", "validate_payload_safe"]
