"""Installation of catalog artifacts into a local Maven repository."""
from __future__ import annotations

import abc
import logging
import os
import shutil
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from registry_catalogs.constants import Constants
from registry_catalogs.maven.artifacts import Artifact
from registry_catalogs.maven.metadata import artifact_metadata, read_versions

logger = logging.getLogger(__name__)


class ArtifactInstallationError(Exception):
    """Raised when an install request cannot be completed."""


class ArtifactInstaller(abc.ABC):
    """Installs artifact sets into a local artifact cache."""

    @abc.abstractmethod
    def install(self, artifacts: Sequence[Artifact]) -> List[Artifact]:
        """Install every artifact of the request or none of them.

        Returns:
            The installed artifacts, pointing at their installed files.

        Raises:
            ArtifactInstallationError: when any artifact cannot be installed.
        """


class LocalRepositoryInstaller(ArtifactInstaller):
    """Copies artifacts into the standard Maven repository layout.

    Files are staged next to their destination and only moved into place
    once every artifact of the request has been staged. Files replaced while
    moving into place are kept aside until the request completes and are
    restored if a later move or metadata update fails, so a failing request
    leaves the repository as it was.
    """

    def __init__(self, local_repository=Constants.LOCAL_REPOSITORY):
        self.root = Path(local_repository).expanduser()

    def install(self, artifacts: Sequence[Artifact]) -> List[Artifact]:
        staged: List[Tuple[Path, Path, Artifact]] = []
        try:
            for artifact in artifacts:
                if artifact.file is None or not Path(artifact.file).is_file():
                    raise ArtifactInstallationError(f"{artifact} has no file to install")
                target = self.root / artifact.repository_path()
                target.parent.mkdir(parents=True, exist_ok=True)
                temp = target.with_name(f".{target.name}.part")
                shutil.copyfile(artifact.file, temp)
                staged.append((temp, target, artifact))
        except (OSError, ArtifactInstallationError) as exc:
            for temp, _, _ in staged:
                try:
                    temp.unlink()
                except OSError:
                    logger.debug("Failed to remove staged file %s", temp)
            if isinstance(exc, ArtifactInstallationError):
                raise
            raise ArtifactInstallationError(str(exc)) from exc

        installed = []
        committed: List[Tuple[Path, Optional[Path]]] = []
        metadata_backups: Dict[Path, Optional[bytes]] = {}
        try:
            for temp, target, artifact in staged:
                backup = None
                if target.is_file():
                    backup = target.with_name(f".{target.name}.bak")
                    os.replace(target, backup)
                    committed.append((target, backup))
                os.replace(temp, target)
                if backup is None:
                    committed.append((target, None))
                installed.append(artifact.with_file(target))
                logger.info("Installed %s to %s", artifact.file, target)
            for group_id, artifact_id, version in sorted({(a.group_id, a.artifact_id, a.version) for a in installed}):
                path = self._metadata_path(group_id, artifact_id)
                metadata_backups[path] = path.read_bytes() if path.is_file() else None
                self._update_metadata(path, group_id, artifact_id, version)
        except OSError as exc:
            self._rollback(staged, committed, metadata_backups)
            raise ArtifactInstallationError(str(exc)) from exc

        for _, backup in committed:
            if backup is not None:
                self._discard(backup)
        return installed

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to remove %s", path)

    def _rollback(self, staged, committed, metadata_backups) -> None:
        """Put back every file the failed request replaced and drop what it staged."""
        for target, backup in reversed(committed):
            try:
                if backup is None:
                    target.unlink(missing_ok=True)
                else:
                    os.replace(backup, target)
            except OSError as exc:
                logger.warning("Failed to restore %s: %s", target, exc)
        for path, content in metadata_backups.items():
            try:
                if content is None:
                    path.unlink(missing_ok=True)
                else:
                    path.write_bytes(content)
            except OSError as exc:
                logger.warning("Failed to restore %s: %s", path, exc)
        for temp, _, _ in staged:
            self._discard(temp)

    def _metadata_path(self, group_id: str, artifact_id: str) -> Path:
        return self.root / group_id.replace(".", "/") / artifact_id / Constants.LOCAL_METADATA_FILE

    def _update_metadata(self, path: Path, group_id: str, artifact_id: str, version: str) -> None:
        versions: List[str] = []
        if path.is_file():
            try:
                versions = read_versions(path.read_bytes())
            except ET.ParseError:
                logger.warning("Replacing unreadable %s", path)
        if version not in versions:
            versions.append(version)
        path.write_bytes(artifact_metadata(group_id, artifact_id, versions))
