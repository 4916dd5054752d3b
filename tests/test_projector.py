"""Tests for core version projections."""

from registry_catalogs.projection import VersionProjector
from registry_catalogs.registry.models import (
    Category,
    Coordinate,
    Extension,
    ExtensionRelease,
    Platform,
    Registry,
    Release,
)

QBOM = Coordinate("io.q", "qbom")


def extension(artifact_id, *releases, categories=None):
    metadata = {"categories": categories} if categories else {}
    return Extension(Coordinate("io.q", artifact_id), name=artifact_id, metadata=metadata, releases=tuple(releases))


def standalone(version, core, *compatible):
    return ExtensionRelease(Release(version, core, tuple(compatible)))


def pinned(version, core):
    return ExtensionRelease(Release(version, core), (QBOM,))


def sample_registry():
    return Registry.create(
        core_versions={"2.0": {}, "2.1": {}, "3.0": {}},
        platforms=[Platform(QBOM, (Release("1.0", "2.0"), Release("1.1", "2.1", ("3.0",))))],
        extensions=[
            extension("compat", standalone("1.0", "2.0", "2.1"), categories=["web"]),
            extension("pinned-only", pinned("1.0", "2.0")),
            extension("mixed", pinned("1.0", "2.0"), standalone("1.1", "2.0"), standalone("2.0", "3.0")),
            extension("other", standalone("5.0", "3.0"), categories=["data"]),
        ],
        categories=[Category("web", "Web"), Category("data", "Data"), Category("unused", "Unused")],
    )


class TestVersionProjector:
    """Scoping a registry to one core version."""

    def test_compatible_release_appears_in_both_cores(self):
        projector = VersionProjector(sample_registry())

        assert projector.project("2.0").extension(Coordinate("io.q", "compat")) is not None
        assert projector.project("2.1").extension(Coordinate("io.q", "compat")) is not None
        assert projector.project("3.0").extension(Coordinate("io.q", "compat")) is None

    def test_platform_only_extensions_are_left_out(self):
        scoped = VersionProjector(sample_registry()).project("2.0")

        assert scoped.extension(Coordinate("io.q", "pinned-only")) is None

    def test_included_releases_satisfy_the_compatibility_rule(self):
        projector = VersionProjector(sample_registry())
        for core in ("2.0", "2.1", "3.0"):
            for ext in projector.project(core).extensions:
                for release in ext.releases:
                    assert release.release.core_version == core or (
                        core in release.release.compatible_core_versions and not release.is_platform_release
                    )

    def test_mixed_extension_keeps_compatible_standalone_releases_only(self):
        scoped = VersionProjector(sample_registry()).project("2.0")

        mixed = scoped.extension(Coordinate("io.q", "mixed"))
        assert [r.release.version for r in mixed.releases] == ["1.1"]

    def test_categories_are_referenced_by_included_extensions(self):
        projector = VersionProjector(sample_registry())

        assert [c.id for c in projector.project("2.0").categories] == ["web"]
        assert [c.id for c in projector.project("3.0").categories] == ["data"]
        for core in ("2.0", "2.1", "3.0"):
            scoped = projector.project(core)
            referenced = {c for e in scoped.extensions for c in e.categories()}
            assert {c.id for c in scoped.categories} <= referenced

    def test_platforms_scoped_by_declared_core(self):
        projector = VersionProjector(sample_registry())

        assert [r.version for r in projector.project("2.1").platform(QBOM).releases] == ["1.1"]
        # Declared compatibility does not make a platform show up under another core.
        assert projector.project("3.0").platforms == ()

    def test_projection_does_not_modify_source(self):
        registry = sample_registry()
        before = registry

        VersionProjector(registry).project("2.0")

        assert registry == before
        assert len(registry.extensions) == 4

    def test_scoped_core_versions(self):
        scoped = VersionProjector(sample_registry()).project("2.1")

        assert dict(scoped.core_versions) == {"2.1": {}}

    def test_platform_descriptor(self):
        descriptor = VersionProjector(sample_registry()).platform_descriptor("2.0")

        assert descriptor.quarkus_version == "2.0"
        assert descriptor.bom_version == "2.0"
        assert (descriptor.bom_group_id, descriptor.bom_artifact_id) == ("io.quarkus", "quarkus-bom")
        assert [(e.artifact_id, e.version) for e in descriptor.extensions] == [("compat", "1.0"), ("mixed", "1.1")]

    def test_projections_newest_first(self):
        cores = [core for core, _, _ in VersionProjector(sample_registry()).projections()]

        assert cores == ["3.0", "2.1", "2.0"]

    def test_core_versions_index(self):
        index = VersionProjector(sample_registry()).core_versions_index()

        assert list(index) == ["3.0", "2.1", "2.0"]
