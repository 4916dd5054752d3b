"""Repository metadata documents (``maven-metadata*.xml``)."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from registry_catalogs.maven.artifacts import Artifact

SNAPSHOT_SUFFIX = "-SNAPSHOT"


def timestamp() -> str:
    """``lastUpdated`` value for the current time."""
    return datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")


def is_snapshot(version: str) -> bool:
    return version.endswith(SNAPSHOT_SUFFIX)


def read_versions(content: bytes) -> List[str]:
    """Versions listed by an artifact-level metadata document.

    Raises:
        ET.ParseError: when the document is not well-formed XML.
    """
    root = ET.fromstring(content)
    return [v.text.strip() for v in root.findall("versioning/versions/version") if v.text]


def _render(metadata: ET.Element) -> bytes:
    ET.indent(metadata)
    return ET.tostring(metadata, encoding="UTF-8", xml_declaration=True) + b"\n"


def artifact_metadata(group_id: str, artifact_id: str, versions: Sequence[str],
                      updated: Optional[str] = None, remote: bool = False) -> bytes:
    """Artifact-level metadata listing ``versions`` in the given order.

    Remote metadata also carries ``latest`` and, when a release version is
    listed, ``release``.
    """
    metadata = ET.Element("metadata")
    ET.SubElement(metadata, "groupId").text = group_id
    ET.SubElement(metadata, "artifactId").text = artifact_id
    versioning = ET.SubElement(metadata, "versioning")
    if remote and versions:
        ET.SubElement(versioning, "latest").text = versions[-1]
        releases = [v for v in versions if not is_snapshot(v)]
        if releases:
            ET.SubElement(versioning, "release").text = releases[-1]
    versions_elem = ET.SubElement(versioning, "versions")
    for version in versions:
        ET.SubElement(versions_elem, "version").text = version
    ET.SubElement(versioning, "lastUpdated").text = updated or timestamp()
    return _render(metadata)


def snapshot_metadata(artifacts: Sequence[Artifact], updated: Optional[str] = None) -> bytes:
    """Version-level metadata of a snapshot deployed with non-unique file names.

    Every artifact maps to a ``snapshotVersion`` whose value is the base
    version, which is how the files are named in the repository.
    """
    first = artifacts[0]
    updated = updated or timestamp()
    metadata = ET.Element("metadata", modelVersion="1.1.0")
    ET.SubElement(metadata, "groupId").text = first.group_id
    ET.SubElement(metadata, "artifactId").text = first.artifact_id
    ET.SubElement(metadata, "version").text = first.version
    versioning = ET.SubElement(metadata, "versioning")
    snapshot = ET.SubElement(versioning, "snapshot")
    ET.SubElement(snapshot, "localCopy").text = "true"
    ET.SubElement(versioning, "lastUpdated").text = updated
    snapshot_versions = ET.SubElement(versioning, "snapshotVersions")
    for artifact in artifacts:
        entry = ET.SubElement(snapshot_versions, "snapshotVersion")
        if artifact.classifier:
            ET.SubElement(entry, "classifier").text = artifact.classifier
        ET.SubElement(entry, "extension").text = artifact.extension
        ET.SubElement(entry, "value").text = artifact.version
        ET.SubElement(entry, "updated").text = updated
    return _render(metadata)
