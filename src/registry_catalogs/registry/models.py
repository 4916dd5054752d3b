"""Data models of the extension registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from registry_catalogs.versioning import ComparableVersion, sort_versions


@dataclass(frozen=True, order=True)
class Coordinate:
    """The (groupId, artifactId) identity of a platform or extension."""
    group_id: str
    artifact_id: str

    @classmethod
    def parse(cls, text: str) -> "Coordinate":
        """Parse ``groupId:artifactId``."""
        group_id, sep, artifact_id = text.strip().partition(":")
        if not sep or not group_id or not artifact_id or ":" in artifact_id:
            raise ValueError(f"Expected groupId:artifactId, got {text!r}")
        return cls(group_id, artifact_id)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"


@dataclass(frozen=True)
class Release:
    """A released version built against a core version."""
    version: str
    core_version: str
    compatible_core_versions: Tuple[str, ...] = ()

    def is_compatible_with(self, core_version: str) -> bool:
        """True when this release targets, or declares compatibility with, ``core_version``."""
        return self.core_version == core_version or core_version in self.compatible_core_versions


# Platform releases carry the same shape as any other release.
PlatformRelease = Release


@dataclass(frozen=True)
class Platform:
    """A curated BOM and its releases (no intrinsic order)."""
    id: Coordinate
    releases: Tuple[PlatformRelease, ...] = ()

    def releases_for(self, core_version: str) -> List[PlatformRelease]:
        """Releases whose declared core version is exactly ``core_version``."""
        return [r for r in self.releases if r.core_version == core_version]


@dataclass(frozen=True)
class ExtensionRelease:
    """An extension release and the platforms whose BOMs include it."""
    release: Release
    platforms: Tuple[Coordinate, ...] = ()

    @property
    def is_platform_release(self) -> bool:
        return bool(self.platforms)


@dataclass(frozen=True)
class Extension:
    """An extension with its descriptive data and releases in indexing order."""
    id: Coordinate
    name: Optional[str] = None
    description: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    releases: Tuple[ExtensionRelease, ...] = ()

    def categories(self) -> List[str]:
        """Category ids listed under ``metadata["categories"]``."""
        value = self.metadata.get("categories") if self.metadata else None
        if not value:
            return []
        if isinstance(value, str):
            return [value]
        return [str(c) for c in value]


@dataclass(frozen=True)
class Category:
    """An extension category."""
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Registry:
    """The indexed registry.

    ``core_versions`` is ordered by core version, newest first. Platforms,
    extensions and categories are kept sorted by their natural key so
    documents render identically across runs.
    """
    core_versions: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    platforms: Tuple[Platform, ...] = ()
    extensions: Tuple[Extension, ...] = ()
    categories: Tuple[Category, ...] = ()

    @classmethod
    def create(
        cls,
        core_versions: Mapping[str, Mapping[str, str]],
        platforms: Iterable[Platform] = (),
        extensions: Iterable[Extension] = (),
        categories: Iterable[Category] = (),
    ) -> "Registry":
        """Build a registry, enforcing key uniqueness and canonical ordering."""
        return cls(
            core_versions=order_core_versions(core_versions),
            platforms=tuple(sorted(_unique(platforms, "platform"), key=lambda p: p.id)),
            extensions=tuple(sorted(_unique(extensions, "extension"), key=lambda e: e.id)),
            categories=tuple(sorted(_unique(categories, "category"), key=lambda c: c.id)),
        )

    def platform(self, coordinate: Coordinate) -> Optional[Platform]:
        return next((p for p in self.platforms if p.id == coordinate), None)

    def extension(self, coordinate: Coordinate) -> Optional[Extension]:
        return next((e for e in self.extensions if e.id == coordinate), None)


def order_core_versions(core_versions: Mapping[str, Mapping[str, str]]) -> Dict[str, Dict[str, str]]:
    """Return core versions keyed newest first."""
    return {v: dict(core_versions[v]) for v in sort_versions(core_versions, reverse=True)}


def newest(versions: Iterable[str]) -> Optional[str]:
    """The greatest version under version ordering; first one wins on ties."""
    best = None
    for version in versions:
        if best is None or ComparableVersion(version) > ComparableVersion(best):
            best = version
    return best


def _unique(items, kind: str):
    seen = set()
    result = []
    for item in items:
        if item.id in seen:
            raise ValueError(f"Duplicate {kind} {item.id}")
        seen.add(item.id)
        result.append(item)
    return result
