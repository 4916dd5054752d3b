"""On-disk repository reading."""

from .reader import (  # noqa: F401
    RawExtensionRelease,
    RawPlatformRelease,
    RepositoryInventory,
    RepositoryReader,
)

__all__ = [
    "RawExtensionRelease",
    "RawPlatformRelease",
    "RepositoryInventory",
    "RepositoryReader",
]
