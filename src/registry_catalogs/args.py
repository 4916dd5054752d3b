"""Argument parsing functionality for registry-catalogs."""

import argparse

from registry_catalogs.constants import Actions, Goal


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Options left unset default to None so configuration file values can
    fill them in; built-in defaults are applied afterwards by cli_config.
    """
    parser = argparse.ArgumentParser(
        prog="registry-catalogs",
        description=(
            "Generate per core version JSON catalogs of an extension registry "
            "and publish them as Maven artifacts"
        ),
        add_help=True,
    )

    parser.add_argument("action",
                        help="Catalogs to generate (default: all)",
                        nargs="?",
                        default=Actions.ALL.value,
                        choices=[a.value for a in Actions])

    parser.add_argument("-r", "--repository-dir",
                        dest="REPOSITORY_DIR",
                        help="The repository path to index",
                        action="store", type=str)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="The output file/directory. A directory if --split is set, a file otherwise "
                             "(default: target/json)",
                        action="store", type=str)
    parser.add_argument("--split",
                        dest="SPLIT",
                        help="Split into core version directories (default: true)",
                        action=argparse.BooleanOptionalAction)

    parser.add_argument("--default-platform-group-id",
                        dest="DEFAULT_PLATFORM_GROUP_ID",
                        help="Group id of the default platform (default: io.quarkus)",
                        action="store", type=str)
    parser.add_argument("--default-platform-artifact-id",
                        dest="DEFAULT_PLATFORM_ARTIFACT_ID",
                        help="Artifact id of the default platform (default: quarkus-bom)",
                        action="store", type=str)
    parser.add_argument("--default-platform-version",
                        dest="DEFAULT_PLATFORM_VERSION",
                        help="Pin the default platform to this version",
                        action="store", type=str)
    parser.add_argument("--json-group-id",
                        dest="JSON_GROUP_ID",
                        help="Group id of the platform catalog artifacts (default: io.quarkus.registry)",
                        action="store", type=str)
    parser.add_argument("--json-artifact-id",
                        dest="JSON_ARTIFACT_ID",
                        help="Artifact id prefix of the platform catalog artifacts (default: quarkus-platforms)",
                        action="store", type=str)

    parser.add_argument("-g", "--goal",
                        dest="GOAL",
                        help="none (emit only), install (emit + install locally), "
                             "deploy (emit + install + deploy) (default: none)",
                        action="store", type=str.lower,
                        choices=[g.value for g in Goal])
    parser.add_argument("--local-repository",
                        dest="LOCAL_REPOSITORY",
                        help="Local Maven repository (default: ~/.m2/repository)",
                        action="store", type=str)
    parser.add_argument("--remote-repository",
                        dest="REMOTE_REPOSITORIES",
                        help="Remote Maven repository URL used to resolve platform BOMs "
                             "(repeatable, default: Maven Central)",
                        action="append", type=str)
    parser.add_argument("--deploy-repository-id",
                        dest="DEPLOY_REPOSITORY_ID",
                        help="Id of the repository catalogs are deployed to (selects credentials)",
                        action="store", type=str)
    parser.add_argument("--deploy-repository-url",
                        dest="DEPLOY_REPOSITORY_URL",
                        help="URL of the repository catalogs are deployed to",
                        action="store", type=str)
    parser.add_argument("-j", "--jobs",
                        dest="JOBS",
                        help="Resolve platform BOMs with this many threads (default: 1)",
                        action="store", type=int)

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store", type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
