"""Repository reader: walks the on-disk catalog and collects raw releases."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import yaml

from registry_catalogs.constants import Constants
from registry_catalogs.errors import ReadError
from registry_catalogs.common.logging_utils import extra_context, is_debug_enabled
from registry_catalogs.registry.models import Category, Coordinate
from registry_catalogs.repository.schemas import (
    CATEGORIES_SCHEMA,
    EXTENSION_RELEASE_SCHEMA,
    PLATFORM_RELEASE_SCHEMA,
    SchemaError,
    validate,
)

logger = logging.getLogger(__name__)

_NUMBER_TAGS = ("tag:yaml.org,2002:int", "tag:yaml.org,2002:float")
_STR_TAG = "tag:yaml.org,2002:str"

# Fields that hold versions, read as written so ``2.10`` is not taken for ``2.1``
VERSION_KEYS = (
    "version",
    "core-version",
    "quarkus-core",
    "compatible-core-versions",
    "compatible-quarkus-core",
)


def _as_text(node: yaml.Node) -> None:
    if isinstance(node, yaml.ScalarNode) and node.tag in _NUMBER_TAGS:
        node.tag = _STR_TAG
    elif isinstance(node, yaml.SequenceNode):
        for item in node.value:
            _as_text(item)


def _retag(node: yaml.Node, dotted_key: str) -> None:
    head, _, rest = dotted_key.partition(".")
    if not isinstance(node, yaml.MappingNode):
        return
    for key_node, value_node in node.value:
        if key_node.value != head:
            continue
        if rest:
            _retag(value_node, rest)
        else:
            _as_text(value_node)


def load_yaml(stream, verbatim_keys: Sequence[str] = ()) -> Any:
    """Parse one YAML document with safe typing.

    Numbers found at the dotted ``verbatim_keys`` of the document are kept as
    the text they were written as; everything else is typed as
    ``yaml.safe_load`` types it.
    """
    loader = yaml.SafeLoader(stream)
    try:
        node = loader.get_single_node()
        if node is None:
            return None
        for key in verbatim_keys:
            _retag(node, key)
        return loader.construct_document(node)
    finally:
        loader.dispose()


@dataclass(frozen=True)
class RawPlatformRelease:
    """A platform release as declared in the repository."""
    coordinate: Coordinate
    version: str
    core_version: Optional[str]
    compatible_core_versions: Tuple[str, ...]
    path: Path


@dataclass(frozen=True)
class RawExtensionRelease:
    """A non-platform extension release as declared in the repository."""
    coordinate: Coordinate
    version: str
    core_version: str
    compatible_core_versions: Tuple[str, ...]
    name: Optional[str]
    description: Optional[str]
    metadata: Dict[str, Any]
    path: Path


@dataclass
class RepositoryInventory:
    """Everything read from a repository, before indexing."""
    platforms: List[RawPlatformRelease] = field(default_factory=list)
    extensions: List[RawExtensionRelease] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def load_document(path: Path) -> Any:
    """Parse a YAML or JSON document, raising ReadError on malformed content."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.suffix.lower() == ".json":
                return json.load(fh)
            return load_yaml(fh, VERSION_KEYS)
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ReadError(path, f"malformed document: {exc}") from exc
    except OSError as exc:
        raise ReadError(path, f"cannot read document: {exc}") from exc


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


def _versions(doc: Dict[str, Any], key: str, alias: str) -> Tuple[str, ...]:
    values = doc.get(key)
    if values is None:
        values = doc.get(alias) or []
    result: List[str] = []
    for value in values:
        text = _text(value)
        if text and text not in result:
            result.append(text)
    return tuple(result)


def _core_version(doc: Dict[str, Any]) -> Optional[str]:
    value = doc.get("core-version")
    if value is None:
        value = doc.get("quarkus-core")
    return _text(value)


class RepositoryReader:
    """Reads platform, extension and category descriptors from a repository directory.

    The repository holds a ``platforms/`` and an ``extensions/`` subtree of
    descriptor documents, one release per document, plus an optional
    categories file at its root.
    """

    def __init__(self, repository_dir):
        self.repository_dir = Path(repository_dir)

    def read(self) -> RepositoryInventory:
        """Read the whole repository.

        Returns:
            RepositoryInventory: raw releases in path order, with duplicate warnings.

        Raises:
            ReadError: when the repository is missing or a document is malformed.
        """
        if not self.repository_dir.is_dir():
            raise ReadError(self.repository_dir, "repository directory does not exist or is not a directory")

        inventory = RepositoryInventory()
        platforms: Dict[Tuple[Coordinate, str], RawPlatformRelease] = {}
        for path in self._descriptors(Constants.PLATFORMS_DIR):
            release = self._read_platform(path)
            self._collect(platforms, (release.coordinate, release.version), release, inventory)

        extensions: Dict[Tuple[Coordinate, str], RawExtensionRelease] = {}
        for path in self._descriptors(Constants.EXTENSIONS_DIR):
            release = self._read_extension(path)
            self._collect(extensions, (release.coordinate, release.version), release, inventory)

        inventory.platforms = list(platforms.values())
        inventory.extensions = list(extensions.values())
        inventory.categories = self._read_categories(inventory)

        logger.info(
            "Read %d platform release(s), %d extension release(s) and %d categories from %s",
            len(inventory.platforms),
            len(inventory.extensions),
            len(inventory.categories),
            self.repository_dir,
        )
        return inventory

    def _descriptors(self, subtree: str) -> Iterator[Path]:
        root = self.repository_dir / subtree
        if not root.is_dir():
            logger.info("No %s directory under %s", subtree, self.repository_dir)
            return
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if path.suffix.lower() in Constants.DESCRIPTOR_SUFFIXES:
                    yield path

    @staticmethod
    def _collect(releases: Dict, key, release, inventory: RepositoryInventory) -> None:
        previous = releases.pop(key, None)
        if previous is not None:
            message = (
                f"Duplicate descriptor for {key[0]}:{key[1]}: {release.path} replaces {previous.path}"
            )
            logger.warning(message)
            inventory.warnings.append(message)
        releases[key] = release

    @staticmethod
    def _validated(path: Path, schema: Dict[str, Any]) -> Dict[str, Any]:
        doc = load_document(path)
        try:
            validate(schema, doc)
        except SchemaError as exc:
            raise ReadError(path, str(exc)) from exc
        if is_debug_enabled(logger):
            logger.debug(
                "Descriptor parsed",
                extra=extra_context(event="parse", component="reader", outcome="success", path=str(path)),
            )
        return doc

    def _read_platform(self, path: Path) -> RawPlatformRelease:
        doc = self._validated(path, PLATFORM_RELEASE_SCHEMA)
        return RawPlatformRelease(
            coordinate=Coordinate(doc["group-id"].strip(), doc["artifact-id"].strip()),
            version=_text(doc["version"]),
            core_version=_core_version(doc),
            compatible_core_versions=_versions(doc, "compatible-core-versions", "compatible-quarkus-core"),
            path=path,
        )

    def _read_extension(self, path: Path) -> RawExtensionRelease:
        doc = self._validated(path, EXTENSION_RELEASE_SCHEMA)
        return RawExtensionRelease(
            coordinate=Coordinate(doc["group-id"].strip(), doc["artifact-id"].strip()),
            version=_text(doc["version"]),
            core_version=_core_version(doc),
            compatible_core_versions=_versions(doc, "compatible-core-versions", "compatible-quarkus-core"),
            name=doc.get("name"),
            description=doc.get("description"),
            metadata=dict(doc.get("metadata") or {}),
            path=path,
        )

    def _read_categories(self, inventory: RepositoryInventory) -> List[Category]:
        path = next(
            (self.repository_dir / name for name in Constants.CATEGORIES_FILES
             if (self.repository_dir / name).is_file()),
            None,
        )
        if path is None:
            return []
        docs = load_document(path) or []
        try:
            validate(CATEGORIES_SCHEMA, docs)
        except SchemaError as exc:
            raise ReadError(path, str(exc)) from exc

        categories: Dict[str, Category] = {}
        for doc in docs:
            category = Category(
                id=doc["id"],
                name=doc.get("name"),
                description=doc.get("description"),
                metadata=dict(doc.get("metadata") or {}),
            )
            if category.id in categories:
                message = f"Duplicate category {category.id} in {path}"
                logger.warning(message)
                inventory.warnings.append(message)
            categories[category.id] = category
        return list(categories.values())
