"""JSON schema validation for persisted package records.

The lock file writer stores one record per package; ``validate_package``
checks a ``ResolvedPackage.to_dict()`` result against that shape before it
is handed over.
"""

from __future__ import annotations

from typing import Any, Dict

from jsonschema import Draft7Validator

LOCK_PACKAGE_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["resolved", "version"],
    "additionalProperties": False,
    "properties": {
        "last_modified": {
            "type": "string",
            "pattern": r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(Z|[+-]\d{2}:\d{2})$",
        },
        "resolved": {"type": "string", "minLength": 1},
        "source": {"type": "string"},
        "version": {"type": "string", "minLength": 1},
        "systems": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "store_path": {"type": "string", "pattern": "^/"},
                },
            },
        },
    },
}

_validator = Draft7Validator(LOCK_PACKAGE_SCHEMA)


class SchemaError(ValueError):
    """Raised when data fails to validate against the lock record schema."""


def validate_package(data: Dict[str, Any]) -> None:
    """Strictly validate a lock record; raise SchemaError on the first problem."""
    errs = sorted(_validator.iter_errors(data), key=lambda e: list(e.path))
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        msg = f"Invalid package record at '{path}': {first.message}"
        raise SchemaError(msg)
