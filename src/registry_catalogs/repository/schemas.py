"""JSON Schemas of the repository descriptor documents, with validation helpers.

Wraps jsonschema Draft7 validation and raises on the first error, ordered
by document path so the reported problem is stable across runs.
"""

from __future__ import annotations

from typing import Any, Dict

from jsonschema import Draft7Validator

_VERSION_LIST = {
    "type": "array",
    "items": {"type": ["string", "number"]},
}

_VERSION = {"type": ["string", "number"], "minLength": 1}

_IDENTITY = {
    "group-id": {"type": "string", "minLength": 1},
    "artifact-id": {"type": "string", "minLength": 1},
    "version": _VERSION,
}

PLATFORM_RELEASE_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Platform release",
    "type": "object",
    "required": ["group-id", "artifact-id", "version"],
    "properties": {
        **_IDENTITY,
        "core-version": _VERSION,
        "quarkus-core": _VERSION,
        "compatible-core-versions": _VERSION_LIST,
        "compatible-quarkus-core": _VERSION_LIST,
    },
}

EXTENSION_RELEASE_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Extension release",
    "type": "object",
    "required": ["group-id", "artifact-id", "version"],
    "anyOf": [
        {"required": ["core-version"]},
        {"required": ["quarkus-core"]},
    ],
    "properties": {
        **_IDENTITY,
        "core-version": _VERSION,
        "quarkus-core": _VERSION,
        "compatible-core-versions": _VERSION_LIST,
        "compatible-quarkus-core": _VERSION_LIST,
        "name": {"type": "string"},
        "description": {"type": "string"},
        "metadata": {"type": "object"},
    },
}

CATEGORY_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Category",
    "type": "object",
    "required": ["id"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "description": {"type": "string"},
        "metadata": {"type": "object"},
    },
}

CATEGORIES_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Categories",
    "type": "array",
    "items": CATEGORY_SCHEMA,
}


class SchemaError(ValueError):
    """Raised when a document fails to validate against its schema."""


def validate(schema: Dict[str, Any], data: Any) -> None:
    """Validate strictly and raise on the first error.

    Args:
        schema: Draft-07 JSON Schema dict.
        data:   Parsed document.
    """
    validator = Draft7Validator(schema)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        msg = f"Invalid document at '{path}': {first.message}"
        raise SchemaError(msg)
