"""End-to-end catalog generation over a repository on disk."""

import json
import logging

import pytest

from registry_catalogs.catalogs import CatalogSettings, generate_catalogs, index_repository, run
from registry_catalogs.constants import Actions, Goal
from registry_catalogs.errors import InconsistentDefaultError, InstallError, ProjectError
from registry_catalogs.maven.session import Session
from registry_catalogs.maven.artifacts import RemoteRepository
from registry_catalogs.projection import PinnedPlatform
from registry_catalogs.publisher import Publisher
from registry_catalogs.registry.models import Coordinate

from conftest import RecordingDeployer, RecordingInstaller, extension_doc, platform_doc, write_descriptor

QBOM = Coordinate("io.q", "qbom")


def read(path):
    return json.loads(path.read_text(encoding="utf-8"))


def settings(output, pinned=PinnedPlatform(QBOM), split=True):
    return CatalogSettings(output=output, split=split, pinned=pinned)


def file_names(root):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*") if p.is_file())


@pytest.fixture
def output(tmp_path):
    return tmp_path / "json"


def test_empty_catalog(repository, resolver, output, events, caplog):
    publisher = Publisher(Goal.INSTALL, installer=RecordingInstaller(events))

    with caplog.at_level(logging.WARNING):
        published = run(repository, settings(output), resolver, publisher)

    assert read(output / "registry.json") == {}
    assert read(output / "versions.json") == {}
    assert [p for p in output.iterdir() if p.is_dir()] == []
    assert file_names(output) == ["registry.json", "versions.json"]
    assert published == []
    assert events == []
    assert "Nothing to publish" in caplog.text


def test_single_platform_single_core(repository, resolver, output, events):
    write_descriptor(repository, "platforms", "qbom-1.0.yaml", platform_doc("io.q:qbom", "1.0", "2.0"))
    write_descriptor(repository, "extensions", "ext-b.yaml", extension_doc("io.q:ext-b", "0.1", "2.0", name="B"))
    resolver.add("io.q:qbom", "1.0", "2.0", [("io.q:ext-a", "1.0")])
    publisher = Publisher(Goal.INSTALL, installer=RecordingInstaller(events))

    run(repository, settings(output), resolver, publisher)

    scoped = read(output / "2.0" / "registry.json")
    assert scoped["platforms"] == [{
        "id": {"group-id": "io.q", "artifact-id": "qbom"},
        "releases": [{"version": "1.0", "core-version": "2.0"}],
    }]
    assert [e["id"]["artifact-id"] for e in scoped["extensions"]] == ["ext-b"]
    full = read(output / "registry.json")
    assert {e["id"]["artifact-id"] for e in full["extensions"]} == {"ext-a", "ext-b"}

    catalog = read(output / "2.0" / "catalog.json")
    assert catalog["quarkus-version"] == "2.0"
    assert [e["artifact-id"] for e in catalog["extensions"]] == ["ext-b"]

    assert read(output / "default-platforms.json") == {
        "default-platform": {"group-id": "io.q", "artifact-id": "qbom"},
        "platforms": [{"group-id": "io.q", "artifact-id": "qbom", "version": "1.0"}],
    }
    assert file_names(output / "2.0") == [
        "catalog.json",
        "quarkus-non-platform-extensions-2.0-1.0-SNAPSHOT.json",
        "quarkus-non-platform-extensions-2.0-1.0-SNAPSHOT.pom",
        "quarkus-platforms-2.0-1.0-SNAPSHOT.json",
        "quarkus-platforms-2.0-1.0-SNAPSHOT.pom",
        "registry.json",
    ]
    assert [e[1] for e in events] == [
        "io.quarkus.registry:quarkus-non-platform-extensions-2.0:json:1.0-SNAPSHOT",
        "io.quarkus.registry:quarkus-platforms:json:1.0-SNAPSHOT",
        "io.quarkus.registry:quarkus-platforms-2.0:json:1.0-SNAPSHOT",
    ]


def test_snapshot_rewriting(repository, resolver, output):
    write_descriptor(repository, "platforms", "qbom.yaml", platform_doc("io.q:qbom", "999-SNAPSHOT", "999-SNAPSHOT"))
    write_descriptor(repository, "extensions", "ext.yaml", extension_doc("io.q:ext", "1.0", "999-SNAPSHOT"))
    resolver.add("io.q:qbom", "999-SNAPSHOT", "999-SNAPSHOT")

    registry = index_repository(repository, resolver)
    units = generate_catalogs(registry, settings(output))

    assert (output / "999-DEV").is_dir()
    assert not (output / "999-SNAPSHOT").exists()
    for unit in units:
        assert "SNAPSHOT" not in unit.primary.artifact_id
    assert {u.primary.artifact_id for u in units if u.core_version} == {
        "quarkus-non-platform-extensions-999-DEV",
        "quarkus-platforms-999-DEV",
    }
    # Versions inside the documents keep the real core version.
    assert read(output / "999-DEV" / "catalog.json")["quarkus-version"] == "999-SNAPSHOT"


def test_compatible_cores(repository, resolver, output):
    write_descriptor(repository, "extensions", "compat.yaml", extension_doc("io.q:compat", "1.0", "2.0", ["2.1"]))
    write_descriptor(repository, "extensions", "other-21.yaml", extension_doc("io.q:other", "1.0", "2.1"))
    write_descriptor(repository, "extensions", "other-30.yaml", extension_doc("io.q:other", "2.0", "3.0"))

    generate_catalogs(index_repository(repository, resolver), settings(output), Actions.NON_PLATFORM)

    def artifact_ids(core):
        return [e["id"]["artifact-id"] for e in read(output / core / "registry.json").get("extensions", [])]

    assert artifact_ids("2.0") == ["compat"]
    assert artifact_ids("2.1") == ["compat", "other"]
    assert artifact_ids("3.0") == ["other"]
    assert list(read(output / "versions.json")) == ["3.0", "2.1", "2.0"]
    assert not (output / "default-platforms.json").exists()


def test_pinned_default(repository, resolver, output):
    for version in ("1.4", "1.5", "1.6"):
        write_descriptor(repository, "platforms", f"qbom-{version}.yaml", platform_doc("io.q:qbom", version, "2.0"))
        resolver.add("io.q:qbom", version, "2.0")
    registry = index_repository(repository, resolver)

    generate_catalogs(registry, settings(output, PinnedPlatform(QBOM, "1.5")), Actions.PLATFORM)

    assert read(output / "default-platforms.json")["platforms"] == [
        {"group-id": "io.q", "artifact-id": "qbom", "version": "1.5"}
    ]
    per_core = read(output / "2.0" / "quarkus-platforms-2.0-1.0-SNAPSHOT.json")
    assert per_core["platforms"][0]["version"] == "1.5"

    with pytest.raises(InconsistentDefaultError):
        generate_catalogs(registry, settings(output, PinnedPlatform(QBOM, "1.7")), Actions.PLATFORM)


def test_deploy_ordering_and_install_failure(repository, resolver, output, events):
    for core in ("2.0", "2.1"):
        write_descriptor(repository, "extensions", f"ext-{core}.yaml", extension_doc("io.q:ext", core, core))
    deployer = RecordingDeployer(events)
    publisher = Publisher(
        Goal.DEPLOY,
        installer=RecordingInstaller(events, fail_on=2),
        deployer=deployer,
        session=Session(RemoteRepository("releases", "https://repo.example.org/releases")),
    )

    with pytest.raises(InstallError):
        run(repository, settings(output), resolver, publisher, action=Actions.NON_PLATFORM)

    assert events == [
        ("install", "io.quarkus.registry:quarkus-non-platform-extensions-2.1:json:1.0-SNAPSHOT"),
        ("deploy", "io.quarkus.registry:quarkus-non-platform-extensions-2.1:json:1.0-SNAPSHOT"),
    ]


def test_no_split_writes_single_registry(repository, resolver, tmp_path, events):
    write_descriptor(repository, "extensions", "ext.yaml", extension_doc("io.q:ext", "1.0", "2.0"))
    target = tmp_path / "registry.json"
    publisher = Publisher(Goal.INSTALL, installer=RecordingInstaller(events))

    published = run(repository, settings(target, split=False), resolver, publisher)

    assert read(target)["core-versions"] == {"2.0": {}}
    assert published == []
    assert events == []
    assert [p for p in file_names(tmp_path) if not p.startswith("repository")] == ["registry.json"]


def test_runs_are_byte_identical(repository, resolver, tmp_path):
    write_descriptor(repository, "platforms", "qbom.yaml", platform_doc("io.q:qbom", "1.0", "2.0"))
    write_descriptor(repository, "extensions", "ext.yaml",
                     extension_doc("io.q:ext", "1.0", "2.0", ["2.1"], metadata={"categories": ["web"]}))
    (repository / "categories.yaml").write_text("- id: web\n  name: Web\n", encoding="utf-8")
    resolver.add("io.q:qbom", "1.0", "2.0", [("io.q:ext-a", "1.0")])

    first, second = tmp_path / "first", tmp_path / "second"
    generate_catalogs(index_repository(repository, resolver), settings(first))
    generate_catalogs(index_repository(repository, resolver), settings(second))

    assert file_names(first) == file_names(second)
    for name in file_names(first):
        assert (first / name).read_bytes() == (second / name).read_bytes()


def test_colliding_core_version_directories_fail(repository, resolver, output):
    write_descriptor(repository, "extensions", "snapshot.yaml", extension_doc("io.q:ext", "1.0", "999-SNAPSHOT"))
    write_descriptor(repository, "extensions", "dev.yaml", extension_doc("io.q:ext", "2.0", "999-DEV"))
    registry = index_repository(repository, resolver)

    with pytest.raises(ProjectError) as excinfo:
        generate_catalogs(registry, settings(output))

    assert "999-DEV" in str(excinfo.value)
    assert not output.exists()
