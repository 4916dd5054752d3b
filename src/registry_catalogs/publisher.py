"""Publisher: installs packaged catalogs locally and deploys them remotely."""
from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from registry_catalogs.constants import Goal
from registry_catalogs.errors import DeployError, InstallError
from registry_catalogs.common.logging_utils import extra_context, is_debug_enabled
from registry_catalogs.maven.artifacts import Artifact, RemoteRepository
from registry_catalogs.maven.deployer import ArtifactDeployer, ArtifactDeploymentError
from registry_catalogs.maven.installer import ArtifactInstallationError, ArtifactInstaller
from registry_catalogs.maven.session import Session
from registry_catalogs.packager import PublishUnit

logger = logging.getLogger(__name__)


class Publisher:
    """Publishes units one at a time: install, then (in deploy mode) deploy.

    The first failure aborts publishing; units already published stay
    published.
    """

    def __init__(
        self,
        goal: Goal,
        installer: Optional[ArtifactInstaller] = None,
        deployer: Optional[ArtifactDeployer] = None,
        session: Optional[Session] = None,
    ):
        if goal.installs and installer is None:
            raise ValueError(f"Goal {goal.value} requires an installer")
        if goal.deploys and deployer is None:
            raise ValueError(f"Goal {goal.value} requires a deployer")
        self.goal = goal
        self.installer = installer
        self.deployer = deployer
        self.session = session or Session()
        self._repository: Optional[RemoteRepository] = None

    def publish(self, units: Sequence[PublishUnit], output_root) -> List[PublishUnit]:
        """Publish every unit found under ``output_root``.

        Returns:
            The units that were published.
        """
        if not self.goal.installs:
            logger.info("JSON catalogs are not going to be published")
            return []

        output_root = Path(output_root)
        if not output_root.is_dir():
            logger.warning("%s does not exist or is not a directory, nothing to publish", output_root)
            return []

        if not any(unit.core_version is not None for unit in units):
            logger.warning("Nothing to publish: no core version specific JSON catalogs under %s", output_root)

        published = []
        for unit in units:
            self.publish_unit(unit)
            published.append(unit)
        return published

    def publish_unit(self, unit: PublishUnit) -> List[Artifact]:
        """Install a unit and, in deploy mode, deploy what was installed.

        Raises:
            InstallError: when the local install fails.
            DeployError: when the remote deploy fails.
        """
        try:
            installed = self.installer.install(unit.artifacts)
        except (ArtifactInstallationError, OSError) as exc:
            raise InstallError(f"Failed to install {unit}: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "Unit installed",
                extra=extra_context(
                    event="install", component="publisher", outcome="success", coordinate=str(unit)
                ),
            )

        if self.goal.deploys:
            repository = self.effective_repository()
            try:
                self.deployer.deploy(installed, repository)
            except (ArtifactDeploymentError, OSError) as exc:
                raise DeployError(f"Failed to deploy {unit} to {repository.id}: {exc}") from exc
        return installed

    def effective_repository(self) -> RemoteRepository:
        """The distribution repository, completed with session credentials and proxy.

        Authentication and proxy configured on the repository itself are kept.
        """
        if self._repository is not None:
            return self._repository

        repository = self.session.distribution_repository
        if repository is None:
            raise DeployError("No distribution repository configured for deployment")

        if repository.authentication is None or repository.proxy is None:
            changes = {}
            if repository.authentication is None:
                changes["authentication"] = self.session.authentication_for(repository)
            if repository.proxy is None:
                changes["proxy"] = self.session.proxy_for(repository)
            repository = dataclasses.replace(repository, **changes)

        self._repository = repository
        return repository
