"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    CATALOG_ERROR = 3


class Goal(Enum):
    """Publishing goal derived from the invocation.

    Args:
        Enum (string): none (emit only), install (emit + local install),
            deploy (emit + local install + remote deploy).
    """

    NONE = "none"
    INSTALL = "install"
    DEPLOY = "deploy"

    @property
    def installs(self) -> bool:
        """True when artifacts go to the local repository."""
        return self in (Goal.INSTALL, Goal.DEPLOY)

    @property
    def deploys(self) -> bool:
        """True when artifacts go to the remote repository."""
        return self is Goal.DEPLOY


class Actions(Enum):
    """Catalog generators that can be invoked from the CLI.

    Args:
        Enum (string): Generator names.
    """

    ALL = "all"
    NON_PLATFORM = "non-platform-catalogs"
    PLATFORM = "platform-catalogs"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    ENV_LOG_LEVEL = "REGISTRY_CATALOGS_LOG_LEVEL"
    ENV_DEPLOY_USERNAME = "REGISTRY_CATALOGS_DEPLOY_USERNAME"
    ENV_DEPLOY_PASSWORD = "REGISTRY_CATALOGS_DEPLOY_PASSWORD"

    # Repository layout
    PLATFORMS_DIR = "platforms"
    EXTENSIONS_DIR = "extensions"
    CATEGORIES_FILES = ["categories.yaml", "categories.yml", "categories.json"]
    DESCRIPTOR_SUFFIXES = [".yaml", ".yml", ".json"]

    # Output layout
    DEFAULT_OUTPUT = "target/json"
    REGISTRY_JSON = "registry.json"
    VERSIONS_JSON = "versions.json"
    CATALOG_JSON = "catalog.json"
    DEFAULT_PLATFORMS_JSON = "default-platforms.json"

    # Catalog artifact coordinates
    JSON = "json"
    POM = "pom"
    DASH_SNAPSHOT = "-SNAPSHOT"
    DASH_DEV = "-DEV"
    CATALOG_ARTIFACT_VERSION = "1.0-SNAPSHOT"
    JSON_GROUP_ID = "io.quarkus.registry"
    JSON_ARTIFACT_ID = "quarkus-platforms"
    NON_PLATFORM_CATALOG_GROUP_ID = "io.quarkus.registry"
    NON_PLATFORM_CATALOG_ARTIFACT_ID = "quarkus-non-platform-extensions"
    POM_MODEL_VERSION = "4.0.0"
    POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"

    # Platforms
    DEFAULT_PLATFORM_GROUP_ID = "io.quarkus"
    DEFAULT_PLATFORM_ARTIFACT_ID = "quarkus-bom"
    CORE_GROUP_ID = "io.quarkus"
    CORE_ARTIFACT_ID = "quarkus-core"
    DEPLOYMENT_SUFFIX = "-deployment"
    EXTENSION_TYPE = "jar"

    # Maven repositories
    LOCAL_REPOSITORY = "~/.m2/repository"
    REMOTE_REPOSITORY_URL = "https://repo1.maven.org/maven2"
    LOCAL_METADATA_FILE = "maven-metadata-local.xml"
    REMOTE_METADATA_FILE = "maven-metadata.xml"
    CHECKSUM_ALGORITHMS = ["sha1", "md5"]

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300
