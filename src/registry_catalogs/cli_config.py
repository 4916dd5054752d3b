"""Configuration file loading and merging with CLI arguments.

Precedence: CLI options, then the configuration file, then built-in
defaults from Constants.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml

from registry_catalogs.constants import Constants, Goal
from registry_catalogs.errors import ReadError
from registry_catalogs.repository.reader import load_yaml

logger = logging.getLogger(__name__)

# CLI dest -> dotted key in the configuration file
OPTION_KEYS = {
    "REPOSITORY_DIR": "repository-dir",
    "OUTPUT": "output",
    "SPLIT": "split",
    "DEFAULT_PLATFORM_GROUP_ID": "default-platform.group-id",
    "DEFAULT_PLATFORM_ARTIFACT_ID": "default-platform.artifact-id",
    "DEFAULT_PLATFORM_VERSION": "default-platform.version",
    "JSON_GROUP_ID": "json.group-id",
    "JSON_ARTIFACT_ID": "json.artifact-id",
    "GOAL": "goal",
    "LOCAL_REPOSITORY": "local-repository",
    "REMOTE_REPOSITORIES": "remote-repositories",
    "DEPLOY_REPOSITORY_ID": "distribution.id",
    "DEPLOY_REPOSITORY_URL": "distribution.url",
    "JOBS": "jobs",
    "LOG_LEVEL": "log-level",
}

# Read as written, so a YAML ``1.10`` pins 1.10 and not 1.1
VERBATIM_KEYS = (OPTION_KEYS["DEFAULT_PLATFORM_VERSION"],)

DEFAULTS = {
    "OUTPUT": Constants.DEFAULT_OUTPUT,
    "SPLIT": True,
    "DEFAULT_PLATFORM_GROUP_ID": Constants.DEFAULT_PLATFORM_GROUP_ID,
    "DEFAULT_PLATFORM_ARTIFACT_ID": Constants.DEFAULT_PLATFORM_ARTIFACT_ID,
    "JSON_GROUP_ID": Constants.JSON_GROUP_ID,
    "JSON_ARTIFACT_ID": Constants.JSON_ARTIFACT_ID,
    "GOAL": Goal.NONE.value,
    "LOCAL_REPOSITORY": Constants.LOCAL_REPOSITORY,
    "REMOTE_REPOSITORIES": [Constants.REMOTE_REPOSITORY_URL],
    "JOBS": 1,
}


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load the configuration file.

    Args:
        config_path: Path to YAML/JSON config file, or None.

    Returns:
        Configuration dict (empty when no path is given).

    Raises:
        ReadError: when the file is missing or malformed, is not a mapping, or
            pins a default platform version that is not a string.
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        raise ReadError(config_path, "configuration file not found")

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            if config_path.lower().endswith(".json"):
                data = json.load(fh)
            else:
                data = load_yaml(fh, VERBATIM_KEYS)
    except (json.JSONDecodeError, yaml.YAMLError, OSError) as exc:
        raise ReadError(config_path, f"failed to load configuration: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ReadError(config_path, "configuration must be a mapping")
    pinned = lookup(data, OPTION_KEYS["DEFAULT_PLATFORM_VERSION"])
    if pinned is not None and not isinstance(pinned, str):
        raise ReadError(config_path, f"default-platform.version must be a version string, got {pinned!r}")
    logger.debug("Loaded configuration from %s", config_path)
    return data


def lookup(config: Mapping[str, Any], dotted_key: str) -> Any:
    """Value at ``a.b.c`` in nested mappings, or None."""
    current: Any = config
    for part in dotted_key.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


def apply_config(args, config: Mapping[str, Any]):
    """Fill unset CLI options from the configuration, then from defaults.

    Returns:
        The same namespace, updated in place.
    """
    for dest, key in OPTION_KEYS.items():
        if getattr(args, dest, None) is not None:
            continue
        value = lookup(config, key)
        if value is None:
            value = DEFAULTS.get(dest)
        if dest == "REMOTE_REPOSITORIES" and isinstance(value, str):
            value = [value]
        setattr(args, dest, value)
    if isinstance(args.GOAL, str):
        args.GOAL = args.GOAL.lower()
    return args
