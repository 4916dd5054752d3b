"""Registry indexer: folds raw repository releases into a Registry."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from registry_catalogs.errors import IndexingError
from registry_catalogs.common.logging_utils import extra_context, is_debug_enabled, Timer
from registry_catalogs.maven.artifacts import BomContents, PinnedArtifact
from registry_catalogs.maven.resolver import ArtifactResolutionError, ArtifactResolver
from registry_catalogs.registry.models import (
    Coordinate,
    Extension,
    ExtensionRelease,
    Platform,
    Registry,
    Release,
    newest,
)
from registry_catalogs.repository.reader import RawExtensionRelease, RawPlatformRelease, RepositoryInventory
from registry_catalogs.versioning import sort_versions

logger = logging.getLogger(__name__)

BomKey = Tuple[Coordinate, str]


class BomCache:
    """Keyed single-flight cache of resolved BOMs.

    Concurrent callers asking for the same key wait for the first caller's
    resolution instead of resolving again. Failures are cached as well, so
    a broken BOM is reported once per run.
    """

    def __init__(self, resolver: ArtifactResolver):
        self._resolver = resolver
        self._futures: Dict[BomKey, Future] = {}
        self._lock = threading.Lock()

    def get(self, coordinate: Coordinate, version: str) -> BomContents:
        key = (coordinate, version)
        with self._lock:
            future = self._futures.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._futures[key] = future
        if owner:
            try:
                future.set_result(self._resolver.resolve_bom(coordinate, version))
            except Exception as exc:  # pylint: disable=broad-exception-caught
                future.set_exception(exc)
        return future.result()

    def __len__(self) -> int:
        return len(self._futures)


def make_release(version: str, core_version: str, compatible: Iterable[str] = ()) -> Release:
    """A release with its compatible cores de-duplicated and in version order.

    The declared core is implicitly compatible, so it is not repeated.
    """
    others = {v for v in compatible if v and v != core_version}
    return Release(version, core_version, tuple(sort_versions(others)))


class _ExtensionBuilder:
    """Accumulates the releases of one extension in first-seen order."""

    def __init__(self, coordinate: Coordinate):
        self.coordinate = coordinate
        self._releases: Dict[Tuple[str, str], Tuple[Release, Set[Coordinate]]] = {}
        self.pinned: List[PinnedArtifact] = []
        self.descriptors: List[RawExtensionRelease] = []

    def add(self, release: Release, platform: Optional[Coordinate] = None) -> None:
        key = (release.version, release.core_version)
        entry = self._releases.get(key)
        if entry is None:
            entry = (release, set())
        else:
            merged = make_release(
                release.version,
                release.core_version,
                entry[0].compatible_core_versions + release.compatible_core_versions,
            )
            entry = (merged, entry[1])
        if platform is not None:
            entry[1].add(platform)
        self._releases[key] = entry

    def build(self) -> Extension:
        name, description, metadata = self._descriptive_data()
        return Extension(
            id=self.coordinate,
            name=name,
            description=description,
            metadata=metadata,
            releases=tuple(
                ExtensionRelease(release, tuple(sorted(platforms)))
                for release, platforms in self._releases.values()
            ),
        )

    def _descriptive_data(self):
        if self.descriptors:
            latest = newest(d.version for d in self.descriptors)
            descriptor = next(d for d in self.descriptors if d.version == latest)
            if descriptor.name or descriptor.description or descriptor.metadata:
                return (
                    descriptor.name or self.coordinate.artifact_id,
                    descriptor.description,
                    dict(descriptor.metadata),
                )
        for pinned in self.pinned:
            if pinned.name or pinned.description or pinned.metadata:
                return pinned.name or self.coordinate.artifact_id, pinned.description, dict(pinned.metadata)
        return self.coordinate.artifact_id, None, {}


class RegistryIndexer:
    """Builds a Registry from a repository inventory.

    Platform BOMs are resolved through the given resolver, once per
    (coordinate, version). With ``jobs > 1`` resolution runs on a thread
    pool; folding the results is always sequential and ordered.
    """

    def __init__(self, resolver: ArtifactResolver, jobs: int = 1):
        self.cache = BomCache(resolver)
        self.jobs = max(1, int(jobs))

    def index(self, inventory: RepositoryInventory) -> Registry:
        """Index the inventory.

        Raises:
            IndexingError: when a BOM cannot be resolved or a platform
                release has no known core version.
        """
        with Timer() as timer:
            boms = self._resolve_boms(inventory.platforms)

            platforms: Dict[Coordinate, List[Release]] = {}
            extensions: Dict[Coordinate, _ExtensionBuilder] = {}
            core_versions: Set[str] = set()

            def builder(coordinate: Coordinate) -> _ExtensionBuilder:
                if coordinate not in extensions:
                    extensions[coordinate] = _ExtensionBuilder(coordinate)
                return extensions[coordinate]

            for raw in inventory.platforms:
                bom = boms[(raw.coordinate, raw.version)]
                core_version = raw.core_version or bom.core_version
                if not core_version:
                    raise IndexingError(
                        f"Failed to determine the core version of platform {raw.coordinate}:{raw.version}"
                        f" ({raw.path})"
                    )
                platforms.setdefault(raw.coordinate, []).append(
                    make_release(raw.version, core_version, raw.compatible_core_versions)
                )
                core_versions.add(core_version)
                for pinned in bom.extensions:
                    ext = builder(pinned.coordinate)
                    ext.pinned.append(pinned)
                    ext.add(make_release(pinned.version, core_version), platform=raw.coordinate)

            for raw in inventory.extensions:
                ext = builder(raw.coordinate)
                ext.descriptors.append(raw)
                ext.add(make_release(raw.version, raw.core_version, raw.compatible_core_versions))
                core_versions.add(raw.core_version)

            registry = Registry.create(
                core_versions={v: {} for v in core_versions},
                platforms=[Platform(c, tuple(r)) for c, r in platforms.items()],
                extensions=[b.build() for b in extensions.values()],
                categories=inventory.categories,
            )

        logger.info(
            "Indexed %d platform(s), %d extension(s), %d core version(s)",
            len(registry.platforms),
            len(registry.extensions),
            len(registry.core_versions),
        )
        if is_debug_enabled(logger):
            logger.debug(
                "Indexing finished",
                extra=extra_context(
                    event="function_exit",
                    component="indexer",
                    action="index",
                    outcome="success",
                    duration_ms=timer.duration_ms(),
                ),
            )
        return registry

    def _resolve_boms(self, releases: Sequence[RawPlatformRelease]) -> Dict[BomKey, BomContents]:
        keys: List[BomKey] = list(dict.fromkeys((r.coordinate, r.version) for r in releases))
        if self.jobs > 1 and len(keys) > 1:
            with ThreadPoolExecutor(max_workers=self.jobs, thread_name_prefix="bom") as pool:
                futures = {key: pool.submit(self._resolve, key) for key in keys}
                return {key: futures[key].result() for key in keys}
        return {key: self._resolve(key) for key in keys}

    def _resolve(self, key: BomKey) -> BomContents:
        coordinate, version = key
        try:
            return self.cache.get(coordinate, version)
        except (ArtifactResolutionError, OSError) as exc:
            raise IndexingError(f"Failed to resolve platform BOM {coordinate}:{version}: {exc}") from exc
