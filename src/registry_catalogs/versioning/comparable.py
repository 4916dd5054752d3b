"""Ordering of Maven-style version strings (core and platform versions).

Versions are split into segments on ``.`` and ``-`` and wherever digits
and letters meet, so ``2.3.1.Final`` becomes ``[2, 3, 1, "final"]`` and
``1.0-rc1`` becomes ``[1, 0, "rc", 1]``. Segments compare pairwise:

* numbers compare numerically and rank above any qualifier;
* qualifiers compare case-insensitively by precedence
  ``alpha < beta < milestone < rc < snapshot < "" < ga < final < sp``,
  unknown qualifiers rank after ``sp`` and compare lexicographically;
* a missing segment is ``0`` next to a number and ``""`` next to a
  qualifier, so ``1.0-alpha < 1.0 < 1.0.Final < 1.0.1``.

Trailing zero segments are ignored for ordering (``1.0 == 1.0.0`` under
comparison) but equality of :class:`ComparableVersion` stays string
identity, the way core versions are used as mapping keys.
"""

from __future__ import annotations

from typing import List, Optional, Union

Segment = Union[int, str]

QUALIFIER_ORDER = ["alpha", "beta", "milestone", "rc", "snapshot", "", "ga", "final", "sp"]
_QUALIFIER_RANK = {name: rank for rank, name in enumerate(QUALIFIER_ORDER)}
_QUALIFIER_RANK["cr"] = _QUALIFIER_RANK["rc"]

# Single-letter shorthands only count when a number follows, e.g. "1.0-b2".
_SHORTHANDS = {"a": "alpha", "b": "beta", "m": "milestone"}

_SEPARATORS = ".-"


def _tokenize(raw: str) -> List[Segment]:
    tokens: List[str] = []
    current = ""
    for char in raw.strip().lower():
        if char in _SEPARATORS:
            tokens.append(current)
            current = ""
            continue
        if current and current[-1].isdigit() != char.isdigit():
            tokens.append(current)
            current = ""
        current += char
    tokens.append(current)

    segments: List[Segment] = []
    for index, token in enumerate(tokens):
        if token.isdigit():
            segments.append(int(token))
        elif token == "":
            segments.append(0)
        else:
            following = tokens[index + 1] if index + 1 < len(tokens) else ""
            if token in _SHORTHANDS and following.isdigit():
                token = _SHORTHANDS[token]
            segments.append(token)

    while segments and segments[-1] in (0, ""):
        segments.pop()
    return segments


def _qualifier_key(qualifier: str):
    rank = _QUALIFIER_RANK.get(qualifier)
    if rank is None:
        return (len(QUALIFIER_ORDER), qualifier)
    return (rank, "")


def _compare_segments(left: Optional[Segment], right: Optional[Segment]) -> int:
    if left is None and right is None:
        return 0
    if left is None:
        left = 0 if isinstance(right, int) else ""
    if right is None:
        right = 0 if isinstance(left, int) else ""

    if isinstance(left, int) and isinstance(right, int):
        return (left > right) - (left < right)
    if isinstance(left, int):
        return 1
    if isinstance(right, int):
        return -1
    left_key, right_key = _qualifier_key(left), _qualifier_key(right)
    return (left_key > right_key) - (left_key < right_key)


class ComparableVersion:
    """A version string with numeric-aware, qualifier-aware ordering."""

    __slots__ = ("raw", "_segments")

    def __init__(self, raw: str):
        self.raw = str(raw)
        self._segments = _tokenize(self.raw)

    @property
    def segments(self) -> List[Segment]:
        """Normalized segments used for ordering."""
        return list(self._segments)

    def compare(self, other: Union["ComparableVersion", str]) -> int:
        """Return -1, 0 or 1 as this version orders before, with or after ``other``."""
        if not isinstance(other, ComparableVersion):
            other = ComparableVersion(other)
        for index in range(max(len(self._segments), len(other._segments))):
            left = self._segments[index] if index < len(self._segments) else None
            right = other._segments[index] if index < len(other._segments) else None
            result = _compare_segments(left, right)
            if result:
                return result
        return 0

    def __lt__(self, other) -> bool:
        return self.compare(other) < 0

    def __le__(self, other) -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other) -> bool:
        return self.compare(other) > 0

    def __ge__(self, other) -> bool:
        return self.compare(other) >= 0

    def __eq__(self, other) -> bool:
        if isinstance(other, ComparableVersion):
            return self.raw == other.raw
        if isinstance(other, str):
            return self.raw == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.raw)

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"ComparableVersion({self.raw!r})"


def compare_versions(left: str, right: str) -> int:
    """Compare two version strings, returning -1, 0 or 1."""
    return ComparableVersion(left).compare(right)


def sort_versions(versions, reverse: bool = False) -> List[str]:
    """Sort version strings by version order; ties keep their input order."""
    return sorted(versions, key=ComparableVersion, reverse=reverse)
