"""Version projector: core-version scoped views of a Registry."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from registry_catalogs.constants import Constants
from registry_catalogs.registry.models import Extension, Platform, Registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogExtension:
    """An extension entry of a platform descriptor document."""
    group_id: str
    artifact_id: str
    version: str
    classifier: Optional[str] = None
    type: str = Constants.EXTENSION_TYPE
    name: Optional[str] = None
    description: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PlatformDescriptor:
    """The catalog document of one core version: a canonical BOM and its extensions."""
    bom_group_id: str
    bom_artifact_id: str
    bom_version: str
    quarkus_version: str
    managed_dependencies: Tuple[Any, ...] = ()
    extensions: Tuple[CatalogExtension, ...] = ()
    categories: Tuple[Any, ...] = ()


class VersionProjector:
    """Projects a registry onto each of its core versions.

    Projections never modify the source registry; every scoped registry is
    a new value.
    """

    def __init__(self, registry: Registry):
        self.registry = registry

    def core_versions_index(self) -> Dict[str, Dict[str, str]]:
        """Core version -> inner mapping, newest first."""
        return {v: dict(inner) for v, inner in self.registry.core_versions.items()}

    def project(self, core_version: str) -> Registry:
        """The registry as seen from one core version."""
        extensions = [
            e for e in (self._project_extension(e, core_version) for e in self.registry.extensions)
            if e is not None
        ]

        category_ids = {c for e in extensions for c in e.categories()}
        categories = [c for c in self.registry.categories if c.id in category_ids]

        platforms = [
            p for p in (self._project_platform(p, core_version) for p in self.registry.platforms)
            if p is not None
        ]

        inner = self.registry.core_versions.get(core_version, {})
        return Registry.create(
            core_versions={core_version: inner},
            platforms=platforms,
            extensions=extensions,
            categories=categories,
        )

    @staticmethod
    def _project_extension(extension: Extension, core_version: str) -> Optional[Extension]:
        # Platform releases are published through the platform catalogs, not here.
        releases = tuple(
            r for r in extension.releases if not r.is_platform_release and r.release.is_compatible_with(core_version)
        )
        if not releases:
            return None
        return replace(extension, releases=releases)

    @staticmethod
    def _project_platform(platform: Platform, core_version: str) -> Optional[Platform]:
        if not platform.releases_for(core_version):
            return None
        releases = tuple(r for r in platform.releases if r.is_compatible_with(core_version))
        return replace(platform, releases=releases)

    def platform_descriptor(self, core_version: str, scoped: Optional[Registry] = None) -> PlatformDescriptor:
        """The catalog document for a core version.

        Each projected extension contributes its first projected release.
        """
        scoped = scoped if scoped is not None else self.project(core_version)
        extensions: List[CatalogExtension] = []
        for extension in scoped.extensions:
            first = extension.releases[0]
            extensions.append(CatalogExtension(
                group_id=extension.id.group_id,
                artifact_id=extension.id.artifact_id,
                version=first.release.version,
                name=extension.name,
                description=extension.description,
                metadata=dict(extension.metadata),
            ))
        return PlatformDescriptor(
            bom_group_id=Constants.DEFAULT_PLATFORM_GROUP_ID,
            bom_artifact_id=Constants.DEFAULT_PLATFORM_ARTIFACT_ID,
            bom_version=core_version,
            quarkus_version=core_version,
            extensions=tuple(extensions),
        )

    def projections(self) -> Iterator[Tuple[str, Registry, PlatformDescriptor]]:
        """(core version, scoped registry, catalog document), newest core first."""
        for core_version in self.registry.core_versions:
            scoped = self.project(core_version)
            logger.debug(
                "Projected core %s: %d platform(s), %d extension(s), %d categories",
                core_version,
                len(scoped.platforms),
                len(scoped.extensions),
                len(scoped.categories),
            )
            yield core_version, scoped, self.platform_descriptor(core_version, scoped)
