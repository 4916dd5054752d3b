"""Maven collaborators: BOM resolution, local installation, remote deployment.

- artifacts.py: artifact, repository, credential and proxy value types
- resolver.py: ArtifactResolver and the POM-reading MavenBomResolver
- installer.py: ArtifactInstaller and LocalRepositoryInstaller
- deployer.py: ArtifactDeployer and the HTTP PUT based HttpDeployer
- session.py: credentials/proxy selectors and the distribution repository
"""

from .artifacts import (  # noqa: F401
    Artifact,
    Authentication,
    BomContents,
    PinnedArtifact,
    Proxy,
    RemoteRepository,
)
from .deployer import ArtifactDeployer, ArtifactDeploymentError, HttpDeployer  # noqa: F401
from .installer import ArtifactInstallationError, ArtifactInstaller, LocalRepositoryInstaller  # noqa: F401
from .resolver import ArtifactResolutionError, ArtifactResolver, MavenBomResolver  # noqa: F401
from .session import Session  # noqa: F401

__all__ = [
    "Artifact",
    "Authentication",
    "BomContents",
    "PinnedArtifact",
    "Proxy",
    "RemoteRepository",
    "ArtifactDeployer",
    "ArtifactDeploymentError",
    "HttpDeployer",
    "ArtifactInstallationError",
    "ArtifactInstaller",
    "LocalRepositoryInstaller",
    "ArtifactResolutionError",
    "ArtifactResolver",
    "MavenBomResolver",
    "Session",
]
