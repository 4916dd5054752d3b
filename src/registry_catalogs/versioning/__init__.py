"""Version ordering for core and platform versions."""

from .comparable import ComparableVersion, compare_versions, sort_versions

__all__ = ["ComparableVersion", "compare_versions", "sort_versions"]
