"""Catalog serializer: JSON rendering with kebab-case names and empty-field elision.

Dataclass fields are rendered in kebab-case and omitted when their value is
None, an empty sequence or an empty mapping. Plain mappings are data (core
versions, extension metadata) and keep their keys and values verbatim.
"""
from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Mapping

from registry_catalogs.errors import OutputError, SerializeError

logger = logging.getLogger(__name__)


def kebab_case(name: str) -> str:
    """``compatible_core_versions`` -> ``compatible-core-versions``."""
    return name.strip("_").replace("_", "-")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes)):
        return False
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def _data(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_document(value)
    if isinstance(value, Mapping):
        return {str(k): _data(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_data(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return [_data(v) for v in sorted(value)]
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    raise SerializeError(f"Cannot serialize value of type {type(value).__name__}: {value!r}")


def to_document(obj: Any) -> Any:
    """Convert a document (dataclass, mapping or sequence) to JSON-ready structures."""
    if not (dataclasses.is_dataclass(obj) and not isinstance(obj, type)):
        return _data(obj)
    document = {}
    for f in dataclasses.fields(obj):
        value = getattr(obj, f.name)
        if _is_empty(value):
            continue
        rendered = _data(value)
        if _is_empty(rendered):
            continue
        document[kebab_case(f.name)] = rendered
    return document


def dumps(obj: Any) -> str:
    """Render a document as indented JSON text with a trailing newline."""
    document = to_document(obj)
    try:
        return json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False) + "\n"
    except (TypeError, ValueError) as exc:
        raise SerializeError(f"Failed to render {type(obj).__name__} as JSON: {exc}") from exc


def write_json(obj: Any, path) -> Path:
    """Serialize ``obj`` into ``path``, creating parent directories.

    Raises:
        SerializeError: when the document cannot be rendered.
        OutputError: when the file cannot be written.
    """
    path = Path(path)
    text = dumps(obj)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(text)
    except OSError as exc:
        raise OutputError(f"Failed to write {path}: {exc}") from exc
    logger.debug("Wrote %s", path)
    return path
