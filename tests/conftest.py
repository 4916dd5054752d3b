"""Shared fixtures: repository descriptors on disk and in-memory Maven collaborators."""

import threading
from pathlib import Path

import pytest
import yaml

from registry_catalogs.maven.artifacts import BomContents, PinnedArtifact
from registry_catalogs.maven.deployer import ArtifactDeployer, ArtifactDeploymentError
from registry_catalogs.maven.installer import ArtifactInstallationError, ArtifactInstaller
from registry_catalogs.maven.resolver import ArtifactResolutionError, ArtifactResolver
from registry_catalogs.registry.models import Coordinate


class FakeResolver(ArtifactResolver):
    """Resolver answering from a dict keyed by ("g:a", version)."""

    def __init__(self, boms=None):
        self.boms = dict(boms or {})
        self.calls = []
        self._lock = threading.Lock()

    def add(self, bom, version, core_version, extensions=()):
        pinned = [PinnedArtifact(Coordinate.parse(c), v) for c, v in extensions]
        self.boms[(bom, version)] = BomContents.of(core_version, pinned)
        return self

    def resolve_bom(self, coordinate, version):
        with self._lock:
            self.calls.append((str(coordinate), version))
        try:
            return self.boms[(str(coordinate), version)]
        except KeyError as exc:
            raise ArtifactResolutionError(f"No BOM {coordinate}:{version}") from exc


class RecordingInstaller(ArtifactInstaller):
    """Records install requests; fails on the request number given."""

    def __init__(self, events, fail_on=None):
        self.events = events
        self.fail_on = fail_on
        self.requests = 0

    def install(self, artifacts):
        self.requests += 1
        if self.fail_on == self.requests:
            raise ArtifactInstallationError("simulated install failure")
        self.events.append(("install", str(artifacts[-1])))
        return [a.with_file(Path("/installed") / a.file_name) for a in artifacts]


class RecordingDeployer(ArtifactDeployer):
    """Records deploy requests; fails on the request number given."""

    def __init__(self, events, fail_on=None):
        self.events = events
        self.fail_on = fail_on
        self.requests = 0
        self.repositories = []

    def deploy(self, artifacts, repository):
        self.requests += 1
        if self.fail_on == self.requests:
            raise ArtifactDeploymentError("simulated deploy failure")
        self.repositories.append(repository)
        self.events.append(("deploy", str(artifacts[-1])))


def write_descriptor(root, subtree, name, doc):
    """Write a YAML descriptor under ``root/subtree`` and return its path."""
    path = Path(root) / subtree / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(doc, sort_keys=False), encoding="utf-8")
    return path


def platform_doc(coordinate, version, core_version=None, compatible=None):
    group_id, artifact_id = coordinate.split(":")
    doc = {"group-id": group_id, "artifact-id": artifact_id, "version": version}
    if core_version is not None:
        doc["core-version"] = core_version
    if compatible:
        doc["compatible-core-versions"] = list(compatible)
    return doc


def extension_doc(coordinate, version, core_version, compatible=None, **extra):
    group_id, artifact_id = coordinate.split(":")
    doc = {
        "group-id": group_id,
        "artifact-id": artifact_id,
        "version": version,
        "core-version": core_version,
    }
    if compatible:
        doc["compatible-core-versions"] = list(compatible)
    doc.update(extra)
    return doc


@pytest.fixture
def repository(tmp_path):
    """An empty repository directory with both subtrees."""
    root = tmp_path / "repository"
    (root / "platforms").mkdir(parents=True)
    (root / "extensions").mkdir(parents=True)
    return root


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def events():
    return []
