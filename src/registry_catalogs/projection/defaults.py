"""Default platform selection, per core version and across the registry."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from registry_catalogs.constants import Constants
from registry_catalogs.errors import InconsistentDefaultError
from registry_catalogs.registry.models import Coordinate, Registry, newest
from registry_catalogs.versioning import ComparableVersion

logger = logging.getLogger(__name__)

FALLBACK_DEFAULT_PLATFORM = Coordinate(Constants.DEFAULT_PLATFORM_GROUP_ID, Constants.DEFAULT_PLATFORM_ARTIFACT_ID)


@dataclass(frozen=True)
class DefaultPlatform:
    group_id: str
    artifact_id: str


@dataclass(frozen=True)
class PlatformVersion:
    group_id: str
    artifact_id: str
    version: str


@dataclass(frozen=True)
class DefaultPlatforms:
    """The platforms a tool should offer, and the one it picks by default."""
    default_platform: DefaultPlatform
    platforms: Tuple[PlatformVersion, ...] = ()


class DefaultPlatformsBuilder:
    """Collects platforms and checks the default is one of them on build."""

    def __init__(self):
        self._default: Optional[DefaultPlatform] = None
        self._platforms: List[PlatformVersion] = []

    def default_platform(self, group_id: str, artifact_id: str) -> "DefaultPlatformsBuilder":
        self._default = DefaultPlatform(group_id, artifact_id)
        return self

    def add_platform(self, group_id: str, artifact_id: str, version: str) -> "DefaultPlatformsBuilder":
        self._platforms.append(PlatformVersion(group_id, artifact_id, version))
        return self

    def build(self) -> DefaultPlatforms:
        """Finalize the document.

        Raises:
            InconsistentDefaultError: when the default platform is not listed.
        """
        if self._default is None:
            raise InconsistentDefaultError("No default platform was set")
        if not any(
            p.group_id == self._default.group_id and p.artifact_id == self._default.artifact_id
            for p in self._platforms
        ):
            raise InconsistentDefaultError(
                f"The default platform {self._default.group_id}:{self._default.artifact_id}"
                " is not present in the list of platforms"
            )
        return DefaultPlatforms(self._default, tuple(self._platforms))


@dataclass(frozen=True)
class PinnedPlatform:
    """The configured default platform coordinate and, optionally, its pinned version."""
    coordinate: Coordinate = FALLBACK_DEFAULT_PLATFORM
    version: Optional[str] = None


class DefaultPlatformSelector:
    """Selects the platform versions to recommend for each core version.

    The newest release wins, except that once the pinned version of the
    pinned platform has been chosen, higher versions no longer replace it.
    Releases are visited in ascending version order, so a pinned version
    that exists is always the one chosen.
    """

    def __init__(self, registry: Registry, pinned: Optional[PinnedPlatform] = None,
                 fallback: Coordinate = FALLBACK_DEFAULT_PLATFORM):
        self.registry = registry
        self.pinned = pinned or PinnedPlatform()
        self.fallback = fallback

    def core_versions(self) -> List[str]:
        """Core versions that have at least one platform release, newest first."""
        declared = {r.core_version for p in self.registry.platforms for r in p.releases}
        return [v for v in self.registry.core_versions if v in declared]

    def chosen_versions(self, core_version: str) -> Dict[Coordinate, str]:
        """Chosen release version per platform coordinate for one core version."""
        chosen: Dict[Coordinate, str] = {}
        for platform in self.registry.platforms:
            candidates = sorted(
                (r.version for r in platform.releases_for(core_version)), key=ComparableVersion
            )
            last: Optional[str] = None
            for candidate in candidates:
                if last is None or (
                    ComparableVersion(candidate) > ComparableVersion(last)
                    and not (platform.id == self.pinned.coordinate and last == self.pinned.version)
                ):
                    last = candidate
            if last is not None:
                chosen[platform.id] = last
        return chosen

    def for_core(self, core_version: str) -> DefaultPlatforms:
        """The default-platforms document of one core version."""
        return self._document(self.chosen_versions(core_version))

    def per_core(self) -> Dict[str, DefaultPlatforms]:
        """Documents for every core version that has platforms."""
        return {v: self.for_core(v) for v in self.core_versions()}

    def latest(self) -> Optional[DefaultPlatforms]:
        """Newest release of every platform regardless of core version.

        Returns None when the registry has no platform releases.

        Raises:
            InconsistentDefaultError: when the configured default platform has
                no release, or a pinned version is not one of its releases.
        """
        chosen: Dict[Coordinate, str] = {}
        for platform in self.registry.platforms:
            versions = [r.version for r in platform.releases]
            if not versions:
                continue
            if platform.id == self.pinned.coordinate and self.pinned.version is not None:
                if self.pinned.version not in versions:
                    raise InconsistentDefaultError(
                        f"Failed to locate the specified default version {self.pinned.version}"
                        f" for platform {platform.id}"
                    )
                chosen[platform.id] = self.pinned.version
                continue
            chosen[platform.id] = newest(versions)

        if not chosen:
            logger.info("No platform releases indexed, skipping the default platforms document")
            return None
        if self.pinned.version is not None and self.pinned.coordinate not in chosen:
            raise InconsistentDefaultError(
                f"Failed to locate the specified default version {self.pinned.version}"
                f" for platform {self.pinned.coordinate}: the platform has no release"
            )
        return self._document(chosen, self.pinned.coordinate)

    def _document(self, chosen: Dict[Coordinate, str], marker: Optional[Coordinate] = None) -> DefaultPlatforms:
        if marker is None:
            marker = self.pinned.coordinate if self.pinned.coordinate in chosen else self.fallback
        builder = DefaultPlatformsBuilder().default_platform(marker.group_id, marker.artifact_id)
        for coordinate in sorted(chosen):
            builder.add_platform(coordinate.group_id, coordinate.artifact_id, chosen[coordinate])
        return builder.build()
