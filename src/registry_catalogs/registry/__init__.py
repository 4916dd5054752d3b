"""Registry model and indexing."""

from .models import (  # noqa: F401
    Category,
    Coordinate,
    Extension,
    ExtensionRelease,
    Platform,
    PlatformRelease,
    Registry,
    Release,
)

__all__ = [
    "Category",
    "Coordinate",
    "Extension",
    "ExtensionRelease",
    "Platform",
    "PlatformRelease",
    "Registry",
    "Release",
]
