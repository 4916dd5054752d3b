"""Artifact packager: turns emitted JSON files into publishable artifact pairs."""
from __future__ import annotations

import logging
import shutil
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from registry_catalogs.constants import Constants
from registry_catalogs.errors import OutputError
from registry_catalogs.maven.artifacts import Artifact

logger = logging.getLogger(__name__)


def rewrite_core_version(core_version: str) -> str:
    """Replace a trailing ``-SNAPSHOT`` with ``-DEV``.

    Catalog artifact ids embed the core version while the artifact version
    is itself a snapshot, so the core's snapshot marker must not survive.
    """
    if core_version.endswith(Constants.DASH_SNAPSHOT):
        return core_version[: -len(Constants.DASH_SNAPSHOT)] + Constants.DASH_DEV
    return core_version


def catalog_artifact_id(prefix: str, core_version: str) -> str:
    """``{prefix}-{rewritten core version}``."""
    return f"{prefix}-{rewrite_core_version(core_version)}"


@dataclass(frozen=True)
class PublishUnit:
    """A JSON artifact and its companion POM, installed and deployed together.

    ``core_version`` is None for registry-wide roll-ups.
    """
    primary: Artifact
    companion: Artifact
    core_version: Optional[str] = None

    @property
    def artifacts(self) -> List[Artifact]:
        return [self.companion, self.primary]

    def __str__(self) -> str:
        return str(self.primary)


def write_pom(path: Path, group_id: str, artifact_id: str, version: str, packaging: str = Constants.POM) -> Path:
    """Write a minimal POM describing a catalog artifact."""
    ET.register_namespace("", Constants.POM_NAMESPACE)
    ns = f"{{{Constants.POM_NAMESPACE}}}"
    project = ET.Element(f"{ns}project")
    for tag, text in (
        ("modelVersion", Constants.POM_MODEL_VERSION),
        ("groupId", group_id),
        ("artifactId", artifact_id),
        ("version", version),
        ("packaging", packaging),
    ):
        ET.SubElement(project, f"{ns}{tag}").text = text
    tree = ET.ElementTree(project)
    ET.indent(tree)
    tree.write(path, encoding="UTF-8", xml_declaration=True)
    return path


class ArtifactPackager:
    """Materializes publish units next to the JSON documents they carry."""

    def __init__(self, version: str = Constants.CATALOG_ARTIFACT_VERSION):
        self.version = version

    def package(self, json_file, group_id: str, artifact_id: str, target_dir=None,
                core_version: Optional[str] = None) -> PublishUnit:
        """Create ``{artifactId}-{version}.json`` and ``{artifactId}-{version}.pom``.

        Args:
            json_file: The JSON document to publish.
            group_id: Artifact group id.
            artifact_id: Artifact id, core version already embedded and rewritten.
            target_dir: Where to write both files; defaults to the JSON's directory.
            core_version: The core version the unit belongs to, if any.

        Raises:
            OutputError: when the files cannot be written.
        """
        json_file = Path(json_file)
        target_dir = Path(target_dir) if target_dir is not None else json_file.parent
        primary = Artifact(group_id, artifact_id, self.version, Constants.JSON)
        companion = Artifact(group_id, artifact_id, self.version, Constants.POM)
        primary_file = target_dir / primary.file_name
        companion_file = target_dir / companion.file_name
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            if primary_file.resolve() != json_file.resolve():
                shutil.copyfile(json_file, primary_file)
            write_pom(companion_file, group_id, artifact_id, self.version)
        except OSError as exc:
            raise OutputError(f"Failed to package {primary} in {target_dir}: {exc}") from exc
        logger.debug("Packaged %s as %s and %s", json_file, primary_file.name, companion_file.name)
        return PublishUnit(primary.with_file(primary_file), companion.with_file(companion_file), core_version)
