"""Core-version projections and default platform selection."""

from .defaults import (  # noqa: F401
    DefaultPlatform,
    DefaultPlatforms,
    DefaultPlatformsBuilder,
    DefaultPlatformSelector,
    PinnedPlatform,
    PlatformVersion,
)
from .projector import CatalogExtension, PlatformDescriptor, VersionProjector  # noqa: F401

__all__ = [
    "DefaultPlatform",
    "DefaultPlatforms",
    "DefaultPlatformsBuilder",
    "DefaultPlatformSelector",
    "PinnedPlatform",
    "PlatformVersion",
    "CatalogExtension",
    "PlatformDescriptor",
    "VersionProjector",
]
