"""Artifact and repository value types shared by the Maven collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from registry_catalogs.registry.models import Coordinate


@dataclass(frozen=True)
class Artifact:
    """A Maven artifact, optionally backed by a file on disk."""
    group_id: str
    artifact_id: str
    version: str
    extension: str
    classifier: Optional[str] = None
    file: Optional[Path] = None

    @property
    def file_name(self) -> str:
        """``{artifactId}-{version}[-{classifier}].{extension}``."""
        classifier = f"-{self.classifier}" if self.classifier else ""
        return f"{self.artifact_id}-{self.version}{classifier}.{self.extension}"

    def repository_path(self) -> str:
        """Path of the artifact relative to a Maven repository root."""
        group_path = self.group_id.replace(".", "/")
        return f"{group_path}/{self.artifact_id}/{self.version}/{self.file_name}"

    def with_file(self, file: Path) -> "Artifact":
        return replace(self, file=Path(file))

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.extension]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)


@dataclass(frozen=True)
class Authentication:
    """Username/password credentials for a remote repository."""
    username: str
    password: str = field(default="", repr=False)

    def as_tuple(self) -> Tuple[str, str]:
        return self.username, self.password


@dataclass(frozen=True)
class Proxy:
    """An HTTP(S) proxy used to reach a remote repository."""
    protocol: str
    host: str
    port: int
    authentication: Optional[Authentication] = None
    non_proxy_hosts: Tuple[str, ...] = ()

    def url(self) -> str:
        credentials = ""
        if self.authentication is not None:
            username, password = self.authentication.as_tuple()
            credentials = f"{username}:{password}@"
        return f"{self.protocol}://{credentials}{self.host}:{self.port}"

    def as_requests_proxies(self) -> Dict[str, str]:
        """Proxy mapping in the form accepted by ``requests``."""
        url = self.url()
        return {"http": url, "https": url}


@dataclass(frozen=True)
class RemoteRepository:
    """A remote Maven repository, with optional authentication and proxy."""
    id: str
    url: str
    authentication: Optional[Authentication] = None
    proxy: Optional[Proxy] = None

    def artifact_url(self, artifact: Artifact) -> str:
        return f"{self.url.rstrip('/')}/{artifact.repository_path()}"


@dataclass(frozen=True)
class PinnedArtifact:
    """A managed dependency pinned by a BOM.

    Name, description and metadata are optional extension data a resolver
    may know about; the indexer falls back to repository descriptors.
    """
    coordinate: Coordinate
    version: str
    name: Optional[str] = None
    description: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BomContents:
    """What a platform BOM pins: its core version and its extensions."""
    core_version: Optional[str] = None
    extensions: Tuple[PinnedArtifact, ...] = ()

    @classmethod
    def of(cls, core_version: Optional[str], extensions: List[PinnedArtifact]) -> "BomContents":
        return cls(core_version=core_version, extensions=tuple(extensions))
