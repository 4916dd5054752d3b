"""Error kinds raised while generating and publishing catalogs.

Every error is fatal for the run. The CLI logs the message and exits with
``ExitCodes.CATALOG_ERROR``.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for all catalog generation and publishing failures."""

    kind = "catalog-error"

    def __str__(self) -> str:
        return f"{self.kind}: {super().__str__()}"


class ReadError(CatalogError):
    """A repository descriptor could not be parsed or failed validation."""

    kind = "read-error"

    def __init__(self, path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class IndexingError(CatalogError):
    """A platform BOM could not be resolved while indexing."""

    kind = "index-error"


class ProjectError(CatalogError):
    """An invariant of a projected document was violated."""

    kind = "project-error"


class InconsistentDefaultError(ProjectError):
    """The default platform is not among the listed platforms."""


class SerializeError(CatalogError):
    """A document could not be rendered as JSON."""

    kind = "serialize-error"


class OutputError(CatalogError):
    """Writing to the output tree failed."""

    kind = "io-error"


class InstallError(CatalogError):
    """Installing artifacts into the local repository failed."""

    kind = "install-error"


class DeployError(CatalogError):
    """Deploying artifacts to the remote repository failed."""

    kind = "deploy-error"
