"""Tests for the registry indexer and its BOM cache."""

import threading
import time

import pytest

from registry_catalogs.errors import IndexingError
from registry_catalogs.maven.artifacts import BomContents
from registry_catalogs.maven.resolver import ArtifactResolutionError, ArtifactResolver
from registry_catalogs.registry.indexer import BomCache, RegistryIndexer, make_release
from registry_catalogs.registry.models import Coordinate
from registry_catalogs.repository import RepositoryReader

from conftest import FakeResolver, extension_doc, platform_doc, write_descriptor

QBOM = Coordinate("io.q", "qbom")
EXT_A = Coordinate("io.q", "ext-a")


def index(repository, resolver, jobs=1):
    return RegistryIndexer(resolver, jobs=jobs).index(RepositoryReader(repository).read())


class TestRegistryIndexer:
    """Folding raw releases into a registry."""

    def test_platform_release_pins_extensions(self, repository, resolver):
        write_descriptor(repository, "platforms", "qbom.yaml", platform_doc("io.q:qbom", "1.0", "2.0"))
        resolver.add("io.q:qbom", "1.0", "2.0", [("io.q:ext-a", "1.0")])

        registry = index(repository, resolver)

        assert list(registry.core_versions) == ["2.0"]
        assert registry.platform(QBOM).releases[0].core_version == "2.0"
        ext = registry.extension(EXT_A)
        assert ext.name == "ext-a"
        assert len(ext.releases) == 1
        assert ext.releases[0].platforms == (QBOM,)
        assert ext.releases[0].release.version == "1.0"

    def test_core_version_comes_from_bom_when_not_declared(self, repository, resolver):
        write_descriptor(repository, "platforms", "qbom.yaml", platform_doc("io.q:qbom", "1.0"))
        resolver.add("io.q:qbom", "1.0", "2.5")

        registry = index(repository, resolver)

        assert registry.platform(QBOM).releases[0].core_version == "2.5"

    def test_unknown_core_version_is_indexing_error(self, repository, resolver):
        write_descriptor(repository, "platforms", "qbom.yaml", platform_doc("io.q:qbom", "1.0"))
        resolver.add("io.q:qbom", "1.0", None)

        with pytest.raises(IndexingError):
            index(repository, resolver)

    def test_unresolvable_bom_is_indexing_error(self, repository, resolver):
        write_descriptor(repository, "platforms", "qbom.yaml", platform_doc("io.q:qbom", "1.0", "2.0"))

        with pytest.raises(IndexingError) as excinfo:
            index(repository, resolver)
        assert "io.q:qbom:1.0" in str(excinfo.value)

    def test_platform_and_repository_release_of_same_version_merge(self, repository, resolver):
        write_descriptor(repository, "platforms", "qbom.yaml", platform_doc("io.q:qbom", "1.0", "2.0"))
        write_descriptor(
            repository, "extensions", "ext-a.yaml",
            extension_doc("io.q:ext-a", "1.0", "2.0", ["2.1"], name="Ext A"),
        )
        resolver.add("io.q:qbom", "1.0", "2.0", [("io.q:ext-a", "1.0")])

        ext = index(repository, resolver).extension(EXT_A)

        assert len(ext.releases) == 1
        assert ext.releases[0].platforms == (QBOM,)
        assert ext.releases[0].release.compatible_core_versions == ("2.1",)
        assert ext.name == "Ext A"

    def test_descriptive_data_from_newest_descriptor(self, repository, resolver):
        write_descriptor(repository, "extensions", "a-1.yaml",
                         extension_doc("io.q:ext-a", "1.9", "2.0", name="Old", description="old"))
        write_descriptor(repository, "extensions", "a-2.yaml",
                         extension_doc("io.q:ext-a", "1.10", "2.0", name="New", description="new"))

        ext = index(repository, resolver).extension(EXT_A)

        assert (ext.name, ext.description) == ("New", "new")
        assert [r.release.version for r in ext.releases] == ["1.9", "1.10"]

    def test_extension_only_core_versions_are_indexed(self, repository, resolver):
        write_descriptor(repository, "extensions", "a.yaml", extension_doc("io.q:ext-a", "1.0", "3.0"))

        registry = index(repository, resolver)

        assert list(registry.core_versions) == ["3.0"]
        assert registry.platforms == ()

    def test_core_versions_newest_first(self, repository, resolver):
        for core in ("2.9", "2.10", "999-SNAPSHOT"):
            write_descriptor(repository, "extensions", f"a-{core}.yaml", extension_doc("io.q:ext-a", core, core))

        assert list(index(repository, resolver).core_versions) == ["999-SNAPSHOT", "2.10", "2.9"]

    def test_parallel_resolution_gives_same_registry(self, repository):
        resolver = FakeResolver()
        for version, core in (("1.0", "2.0"), ("1.1", "2.1"), ("1.2", "2.2")):
            write_descriptor(repository, "platforms", f"qbom-{version}.yaml", platform_doc("io.q:qbom", version, core))
            resolver.add("io.q:qbom", version, core, [("io.q:ext-a", version)])

        sequential = index(repository, resolver)
        parallel = index(repository, FakeResolver(resolver.boms), jobs=4)

        assert sequential == parallel


def test_make_release_drops_declared_core_and_sorts():
    release = make_release("1.0", "2.0", ["2.10", "2.0", "2.9", "2.9"])

    assert release.compatible_core_versions == ("2.9", "2.10")


class SlowResolver(ArtifactResolver):
    def __init__(self):
        self.calls = 0
        self.lock = threading.Lock()

    def resolve_bom(self, coordinate, version):
        with self.lock:
            self.calls += 1
        time.sleep(0.05)
        return BomContents("2.0")


def test_bom_cache_resolves_each_key_once():
    resolver = SlowResolver()
    cache = BomCache(resolver)
    results = []

    threads = [
        threading.Thread(target=lambda: results.append(cache.get(QBOM, "1.0")))
        for _ in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert resolver.calls == 1
    assert len(results) == 8
    assert len(cache) == 1


def test_bom_cache_remembers_failures(resolver):
    cache = BomCache(resolver)

    for _ in range(2):
        with pytest.raises(ArtifactResolutionError):
            cache.get(QBOM, "9.9")
    assert resolver.calls == [("io.q:qbom", "9.9")]
