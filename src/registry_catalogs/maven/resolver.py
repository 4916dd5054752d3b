"""BOM resolution: turning a platform BOM coordinate into the extensions it pins."""
from __future__ import annotations

import abc
import logging
import re
import threading
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from registry_catalogs.constants import Constants
from registry_catalogs.common import http_client
from registry_catalogs.common.logging_utils import extra_context, is_debug_enabled, safe_url
from registry_catalogs.maven.artifacts import Artifact, BomContents, PinnedArtifact
from registry_catalogs.registry.models import Coordinate

logger = logging.getLogger(__name__)

_PROPERTY = re.compile(r"\$\{([^}]+)\}")
_MAX_INTERPOLATION_PASSES = 10


class ArtifactResolutionError(Exception):
    """Raised when an artifact cannot be located or understood."""


class ArtifactResolver(abc.ABC):
    """Resolves platform BOMs to their pinned extensions."""

    @abc.abstractmethod
    def resolve_bom(self, coordinate: Coordinate, version: str) -> BomContents:
        """Return the core version and the extensions pinned by a BOM.

        Raises:
            ArtifactResolutionError: when the BOM cannot be resolved.
        """


class _Pom:
    """The parts of a parsed POM the resolver needs."""

    def __init__(self, root: ET.Element):
        self.root = root
        match = re.match(r"\{(.*)\}", root.tag)
        self.ns = f"{{{match.group(1)}}}" if match else ""

    def text(self, path: str, element: Optional[ET.Element] = None) -> Optional[str]:
        node = (element if element is not None else self.root).find(
            "/".join(f"{self.ns}{part}" for part in path.split("/"))
        )
        if node is None or node.text is None:
            return None
        return node.text.strip()

    def parent(self) -> Optional[Tuple[str, str, str]]:
        group = self.text("parent/groupId")
        artifact = self.text("parent/artifactId")
        version = self.text("parent/version")
        if group and artifact and version:
            return group, artifact, version
        return None

    def properties(self) -> Dict[str, str]:
        props: Dict[str, str] = {}
        node = self.root.find(f"{self.ns}properties")
        if node is not None:
            for child in node:
                name = child.tag[len(self.ns):] if child.tag.startswith(self.ns) else child.tag
                props[name] = (child.text or "").strip()
        return props

    def managed_dependencies(self) -> List[Dict[str, Optional[str]]]:
        deps = []
        path = f"{self.ns}dependencyManagement/{self.ns}dependencies/{self.ns}dependency"
        for dependency in self.root.findall(path):
            deps.append({
                "groupId": self.text("groupId", dependency),
                "artifactId": self.text("artifactId", dependency),
                "version": self.text("version", dependency),
                "type": self.text("type", dependency),
                "scope": self.text("scope", dependency),
                "classifier": self.text("classifier", dependency),
            })
        return deps


def _interpolate(value: Optional[str], props: Dict[str, str]) -> Optional[str]:
    if value is None:
        return None
    for _ in range(_MAX_INTERPOLATION_PASSES):
        replaced = _PROPERTY.sub(lambda m: props.get(m.group(1), m.group(0)), value)
        if replaced == value:
            break
        value = replaced
    return value


class MavenBomResolver(ArtifactResolver):
    """Resolves BOM POMs from a local Maven repository, then from remote repositories.

    A managed artifact ``X`` is an extension when the BOM also manages
    ``X-deployment`` in the same group. The core version is the managed
    version of ``io.quarkus:quarkus-core``. Parent POMs contribute
    properties and import-scoped BOMs contribute managed dependencies.
    """

    def __init__(self, local_repository=None, remote_repositories: Sequence[str] = ()):
        self.local_repository = Path(local_repository).expanduser() if local_repository else None
        self.remote_repositories = [url.rstrip("/") for url in remote_repositories]
        # Parsed POMs keyed by g:a:v; guarded because indexing may resolve BOMs on a thread pool.
        self._pom_cache: Dict[str, _Pom] = {}
        self._pom_cache_lock = threading.Lock()

    def resolve_bom(self, coordinate: Coordinate, version: str) -> BomContents:
        managed = self._managed(coordinate.group_id, coordinate.artifact_id, version, set())

        by_key: Dict[Tuple[str, str], str] = {}
        for dep in managed:
            if dep["groupId"] and dep["artifactId"] and dep["version"] and not dep["classifier"]:
                by_key.setdefault((dep["groupId"], dep["artifactId"]), dep["version"])

        core_version = by_key.get((Constants.CORE_GROUP_ID, Constants.CORE_ARTIFACT_ID))
        extensions = []
        for (group_id, artifact_id), dep_version in by_key.items():
            if artifact_id.endswith(Constants.DEPLOYMENT_SUFFIX):
                continue
            if (group_id, artifact_id + Constants.DEPLOYMENT_SUFFIX) in by_key:
                extensions.append(PinnedArtifact(Coordinate(group_id, artifact_id), dep_version))

        logger.debug("Resolved BOM %s:%s with %d extension(s)", coordinate, version, len(extensions))
        return BomContents.of(core_version, extensions)

    def _managed(self, group_id: str, artifact_id: str, version: str, visiting: set) -> List[Dict]:
        key = f"{group_id}:{artifact_id}:{version}"
        if key in visiting:
            raise ArtifactResolutionError(f"Cycle while importing BOM {key}")
        visiting = visiting | {key}

        pom = self._load_pom(group_id, artifact_id, version)
        props = self._effective_properties(pom, group_id, artifact_id, version, set())

        result: List[Dict] = []
        for dep in pom.managed_dependencies():
            dep = {name: _interpolate(value, props) for name, value in dep.items()}
            if dep["scope"] == "import" and dep["type"] == "pom":
                if not (dep["groupId"] and dep["artifactId"] and dep["version"]):
                    raise ArtifactResolutionError(f"Incomplete import-scoped BOM in {key}")
                result.extend(self._managed(dep["groupId"], dep["artifactId"], dep["version"], visiting))
                continue
            result.append(dep)
        return result

    def _effective_properties(self, pom: _Pom, group_id: str, artifact_id: str, version: str, visiting: set) -> Dict[str, str]:
        props: Dict[str, str] = {}
        parent = pom.parent()
        if parent is not None and parent not in visiting:
            parent_pom = self._load_pom(*parent)
            props.update(self._effective_properties(parent_pom, *parent, visiting | {parent}))
        props.update(pom.properties())
        props.update({
            "project.groupId": group_id,
            "project.artifactId": artifact_id,
            "project.version": version,
            "pom.version": version,
        })
        return props

    def _load_pom(self, group_id: str, artifact_id: str, version: str) -> _Pom:
        cache_key = f"{group_id}:{artifact_id}:{version}"
        with self._pom_cache_lock:
            if cache_key in self._pom_cache:
                return self._pom_cache[cache_key]

        text = self._pom_text(Artifact(group_id, artifact_id, version, Constants.POM))
        try:
            pom = _Pom(ET.fromstring(text))
        except ET.ParseError as exc:
            raise ArtifactResolutionError(f"Malformed POM for {cache_key}: {exc}") from exc

        with self._pom_cache_lock:
            self._pom_cache[cache_key] = pom
        return pom

    def _pom_text(self, artifact: Artifact) -> str:
        if self.local_repository is not None:
            local = self.local_repository / artifact.repository_path()
            if local.is_file():
                with open(local, "r", encoding="utf-8") as fh:
                    return fh.read()

        for base in self.remote_repositories:
            url = f"{base}/{artifact.repository_path()}"
            status_code, _, text = http_client.robust_get(url)
            if status_code == 200 and text:
                return text
            if is_debug_enabled(logger):
                logger.debug(
                    "POM not found in remote repository",
                    extra=extra_context(
                        event="function_exit",
                        component="resolver",
                        action="fetch_pom",
                        outcome="not_found",
                        status_code=status_code,
                        target=safe_url(url),
                    ),
                )

        raise ArtifactResolutionError(f"Failed to resolve {artifact}")
