"""registry-catalogs - generate and publish per core version registry catalogs

Indexes a repository of platform and extension descriptors, emits the
registry and its core version projections as JSON, packages every emitted
document as a Maven artifact and installs (or deploys) it.
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from registry_catalogs.args import parse_args
from registry_catalogs.cli_config import apply_config, load_config
from registry_catalogs.common.logging_utils import Timer, configure_logging, extra_context, is_debug_enabled
from registry_catalogs.constants import Actions, Constants, ExitCodes, Goal
from registry_catalogs.errors import CatalogError, ProjectError
from registry_catalogs.maven.deployer import HttpDeployer
from registry_catalogs.maven.installer import LocalRepositoryInstaller
from registry_catalogs.maven.resolver import ArtifactResolver, MavenBomResolver
from registry_catalogs.maven.session import Session
from registry_catalogs.packager import ArtifactPackager, PublishUnit, catalog_artifact_id, rewrite_core_version
from registry_catalogs.projection import DefaultPlatformSelector, PinnedPlatform, VersionProjector
from registry_catalogs.publisher import Publisher
from registry_catalogs.registry.indexer import RegistryIndexer
from registry_catalogs.registry.models import Coordinate, Registry
from registry_catalogs.repository.reader import RepositoryReader
from registry_catalogs.serializer import write_json

logger = logging.getLogger(__name__)


@dataclass
class CatalogSettings:
    """Everything the generators need besides the registry itself."""
    output: Path
    split: bool = True
    pinned: PinnedPlatform = field(default_factory=PinnedPlatform)
    json_group_id: str = Constants.JSON_GROUP_ID
    json_artifact_id: str = Constants.JSON_ARTIFACT_ID
    non_platform_group_id: str = Constants.NON_PLATFORM_CATALOG_GROUP_ID
    non_platform_artifact_id: str = Constants.NON_PLATFORM_CATALOG_ARTIFACT_ID


def index_repository(repository_dir, resolver: ArtifactResolver, jobs: int = 1) -> Registry:
    """Read and index a repository directory."""
    with Timer() as timer:
        inventory = RepositoryReader(repository_dir).read()
        registry = RegistryIndexer(resolver, jobs=jobs).index(inventory)
    logger.info(
        "Indexed %d core version(s), %d platform(s), %d extension(s) from %s",
        len(registry.core_versions),
        len(registry.platforms),
        len(registry.extensions),
        repository_dir,
    )
    if is_debug_enabled(logger):
        logger.debug(
            "Repository indexed",
            extra=extra_context(
                event="index", component="catalogs", outcome="success",
                path=str(repository_dir), duration_ms=timer.duration_ms(),
            ),
        )
    return registry


def version_directories(core_versions) -> Dict[str, str]:
    """Output directory name of every core version.

    Raises:
        ProjectError: when two core versions map to the same directory, as
            ``999-SNAPSHOT`` and ``999-DEV`` do.
    """
    directories: Dict[str, str] = {}
    owners: Dict[str, str] = {}
    for core_version in core_versions:
        name = rewrite_core_version(core_version)
        if name in owners:
            raise ProjectError(
                f"Core versions {owners[name]} and {core_version} would both be written to {name}"
            )
        owners[name] = core_version
        directories[core_version] = name
    return directories


def generate_non_platform_catalogs(
registry: Registry, settings: CatalogSettings,
                                   packager: Optional[ArtifactPackager] = None) -> List[PublishUnit]:
    """Emit the registry, the core versions index and the per core catalogs.

    Returns:
        The per core non-platform catalog units, newest core first.
    """
    packager = packager or ArtifactPackager()
    output = Path(settings.output)
    if not settings.split:
        write_json(registry, output)
        logger.info("Registry written to %s", output)
        return []

    directories = version_directories(registry.core_versions)
    projector = VersionProjector(registry)
    write_json(registry, output / Constants.REGISTRY_JSON)
    write_json(projector.core_versions_index(), output / Constants.VERSIONS_JSON)

    units = []
    for core_version, scoped, descriptor in projector.projections():
        version_dir = output / directories[core_version]
        write_json(scoped, version_dir / Constants.REGISTRY_JSON)
        catalog = write_json(descriptor, version_dir / Constants.CATALOG_JSON)
        units.append(packager.package(
            catalog,
            settings.non_platform_group_id,
            catalog_artifact_id(settings.non_platform_artifact_id, core_version),
            core_version=core_version,
        ))
    logger.info("Generated non-platform catalogs for %d core version(s) in %s", len(units), output)
    return units


def generate_platform_catalogs(registry: Registry, settings: CatalogSettings,
                               packager: Optional[ArtifactPackager] = None) -> List[PublishUnit]:
    """Emit the default platforms documents, overall and per core version.

    Returns:
        The roll-up unit (when there are platforms) followed by the per core
        units, newest core first.
    """
    if not settings.split:
        logger.info("Platform catalogs are only generated when splitting per core version")
        return []

    packager = packager or ArtifactPackager()
    output = Path(settings.output)
    directories = version_directories(registry.core_versions)
    selector = DefaultPlatformSelector(registry, settings.pinned)

    units = []
    latest = selector.latest()
    if latest is not None:
        document = write_json(latest, output / Constants.DEFAULT_PLATFORMS_JSON)
        units.append(packager.package(document, settings.json_group_id, settings.json_artifact_id))

    for core_version, platforms in selector.per_core().items():
        artifact_id = catalog_artifact_id(settings.json_artifact_id, core_version)
        version_dir = output / directories[core_version]
        document = write_json(platforms, version_dir / f"{artifact_id}-{packager.version}.{Constants.JSON}")
        units.append(packager.package(document, settings.json_group_id, artifact_id, core_version=core_version))
    logger.info("Generated platform catalogs for %d core version(s) in %s", len(units) - (latest is not None), output)
    return units


def generate_catalogs(registry: Registry, settings: CatalogSettings, action: Actions = Actions.ALL) -> List[PublishUnit]:
    """Run the generators selected by ``action``."""
    packager = ArtifactPackager()
    units: List[PublishUnit] = []
    if action in (Actions.ALL, Actions.NON_PLATFORM):
        units.extend(generate_non_platform_catalogs(registry, settings, packager))
    if action in (Actions.ALL, Actions.PLATFORM):
        units.extend(generate_platform_catalogs(registry, settings, packager))
    return units


def run(repository_dir, settings: CatalogSettings, resolver: ArtifactResolver, publisher: Publisher,
        action: Actions = Actions.ALL, jobs: int = 1) -> List[PublishUnit]:
    """Index, generate and publish.

    Returns:
        The published units.

    Raises:
        CatalogError: on the first failure of any stage.
    """
    registry = index_repository(repository_dir, resolver, jobs=jobs)
    units = generate_catalogs(registry, settings, action)
    if not settings.split:
        return []
    return publisher.publish(units, settings.output)


def build_settings(args) -> CatalogSettings:
    """CatalogSettings from merged CLI arguments."""
    return CatalogSettings(
        output=Path(os.path.expanduser(args.OUTPUT)),
        split=bool(args.SPLIT),
        pinned=PinnedPlatform(
            Coordinate(args.DEFAULT_PLATFORM_GROUP_ID, args.DEFAULT_PLATFORM_ARTIFACT_ID),
            args.DEFAULT_PLATFORM_VERSION,
        ),
        json_group_id=args.JSON_GROUP_ID,
        json_artifact_id=args.JSON_ARTIFACT_ID,
    )


def build_publisher(args, config) -> Publisher:
    """Publisher wired with the collaborators the goal needs."""
    goal = Goal(args.GOAL)
    installer = deployer = session = None
    if goal.installs:
        installer = LocalRepositoryInstaller(args.LOCAL_REPOSITORY)
    if goal.deploys:
        deployer = HttpDeployer()
        session = Session.from_config(config, args.DEPLOY_REPOSITORY_ID, args.DEPLOY_REPOSITORY_URL)
    return Publisher(goal, installer=installer, deployer=deployer, session=session)


def main(argv=None):
    """Main entry point of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE, args.QUIET)

    try:
        config = load_config(args.CONFIG)
    except CatalogError as e:
        logging.error("%s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    apply_config(args, config)
    if args.LOG_LEVEL:
        logging.getLogger().setLevel(getattr(logging, str(args.LOG_LEVEL).upper(), logging.INFO))

    if not args.REPOSITORY_DIR:
        logging.error("No repository directory given (--repository-dir or 'repository-dir' in the configuration)")
        sys.exit(ExitCodes.FILE_ERROR.value)

    try:
        with Timer() as timer:
            settings = build_settings(args)
            resolver = MavenBomResolver(args.LOCAL_REPOSITORY, args.REMOTE_REPOSITORIES)
            publisher = build_publisher(args, config)
            published = run(
                os.path.expanduser(args.REPOSITORY_DIR),
                settings,
                resolver,
                publisher,
                action=Actions(args.action),
                jobs=int(args.JOBS),
            )
    except CatalogError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.CATALOG_ERROR.value)

    logger.info("Done in %d ms, %d unit(s) published", timer.duration_ms(), len(published))
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
