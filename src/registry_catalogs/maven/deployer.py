"""Deployment of installed artifacts to a remote Maven repository over HTTP."""
from __future__ import annotations

import abc
import hashlib
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

import requests

from registry_catalogs.constants import Constants
from registry_catalogs.common.http_client import robust_get, safe_put
from registry_catalogs.common.logging_utils import safe_url
from registry_catalogs.maven.artifacts import Artifact, RemoteRepository
from registry_catalogs.maven.metadata import artifact_metadata, is_snapshot, read_versions, snapshot_metadata

logger = logging.getLogger(__name__)


class ArtifactDeploymentError(Exception):
    """Raised when a deploy request cannot be completed."""


class ArtifactDeployer(abc.ABC):
    """Deploys artifact sets to a remote repository."""

    @abc.abstractmethod
    def deploy(self, artifacts: Sequence[Artifact], repository: RemoteRepository) -> None:
        """Upload every artifact to ``repository``.

        Raises:
            ArtifactDeploymentError: on the first failed upload.
        """


class HttpDeployer(ArtifactDeployer):
    """Uploads artifacts, their checksums and the repository metadata with HTTP PUT.

    Snapshots keep their base version in file names. The version-level
    ``maven-metadata.xml`` maps every file of the request to that name, and
    the artifact-level document is merged with the one already deployed.
    """

    def __init__(self, checksums: Sequence[str] = tuple(Constants.CHECKSUM_ALGORITHMS)):
        self.checksums = list(checksums)

    def deploy(self, artifacts: Sequence[Artifact], repository: RemoteRepository) -> None:
        options = self._request_options(repository)
        for artifact in artifacts:
            if artifact.file is None:
                raise ArtifactDeploymentError(f"{artifact} has no file to deploy")
            try:
                content = Path(artifact.file).read_bytes()
            except OSError as exc:
                raise ArtifactDeploymentError(f"Cannot read {artifact.file}: {exc}") from exc

            url = repository.artifact_url(artifact)
            self._put_with_checksums(url, content, options)
            logger.info("Deployed %s to %s (%s)", artifact, repository.id, safe_url(url))

        for (group_id, artifact_id, version), members in self._by_version(artifacts).items():
            base = f"{repository.url.rstrip('/')}/{group_id.replace('.', '/')}/{artifact_id}"
            if is_snapshot(version):
                self._put_with_checksums(
                    f"{base}/{version}/{Constants.REMOTE_METADATA_FILE}", snapshot_metadata(members), options
                )
            url = f"{base}/{Constants.REMOTE_METADATA_FILE}"
            versions = self._deployed_versions(url, options)
            if version not in versions:
                versions.append(version)
            self._put_with_checksums(url, artifact_metadata(group_id, artifact_id, versions, remote=True), options)
            logger.debug("Updated repository metadata of %s:%s:%s", group_id, artifact_id, version)

    @staticmethod
    def _by_version(artifacts: Sequence[Artifact]) -> Dict[Tuple[str, str, str], List[Artifact]]:
        groups: Dict[Tuple[str, str, str], List[Artifact]] = {}
        for artifact in artifacts:
            groups.setdefault((artifact.group_id, artifact.artifact_id, artifact.version), []).append(artifact)
        return groups

    @staticmethod
    def _deployed_versions(url: str, options: Dict[str, Any]) -> List[str]:
        status, _, text = robust_get(url, **options)
        if status == 404:
            return []
        if status != 200:
            detail = text if status == 0 else f"HTTP {status}"
            raise ArtifactDeploymentError(f"Failed to read {safe_url(url)}: {detail}")
        try:
            return read_versions(text.encode("utf-8"))
        except ET.ParseError:
            logger.warning("Replacing unreadable %s", safe_url(url))
            return []

    @staticmethod
    def _request_options(repository: RemoteRepository) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if repository.authentication is not None:
            options["auth"] = repository.authentication.as_tuple()
        if repository.proxy is not None:
            options["proxies"] = repository.proxy.as_requests_proxies()
        return options

    def _put_with_checksums(self, url: str, content: bytes, options: Dict[str, Any]) -> None:
        self._put(url, content, options)
        for algorithm in self.checksums:
            digest = hashlib.new(algorithm, content).hexdigest()
            self._put(f"{url}.{algorithm}", digest.encode("ascii"), options)

    @staticmethod
    def _put(url: str, data: bytes, options: Dict[str, Any]) -> None:
        try:
            res = safe_put(url, context="deploy", data=data, **options)
        except requests.RequestException as exc:
            raise ArtifactDeploymentError(f"Failed to upload {safe_url(url)}: {exc}") from exc
        if not res.ok:
            raise ArtifactDeploymentError(
                f"Failed to upload {safe_url(url)}: HTTP {res.status_code} {res.reason}"
            )
