"""Tests for core and platform version ordering."""

import pytest

from registry_catalogs.versioning import ComparableVersion, compare_versions, sort_versions


class TestComparableVersion:
    """Ordering of Maven-style versions."""

    @pytest.mark.parametrize(
        "lower,higher",
        [
            ("1.0", "1.1"),
            ("2.9.1", "2.10.0"),
            ("1.0-alpha1", "1.0-beta1"),
            ("1.0-beta2", "1.0-rc1"),
            ("1.0-rc1", "1.0-SNAPSHOT"),
            ("1.0-SNAPSHOT", "1.0"),
            ("1.0", "1.0.Final"),
            ("1.0.Final", "1.0.1"),
            ("2.16.0.Final", "999-SNAPSHOT"),
            ("1.0-b2", "1.0-m1"),
            ("1.0.Final", "1.0.sp1"),
        ],
    )
    def test_orders(self, lower, higher):
        assert ComparableVersion(lower) < ComparableVersion(higher)
        assert compare_versions(higher, lower) == 1

    def test_trailing_zeros_compare_equal_but_are_distinct_keys(self):
        assert compare_versions("1.0", "1.0.0") == 0
        assert ComparableVersion("1.0") != ComparableVersion("1.0.0")
        assert len({ComparableVersion("1.0"), ComparableVersion("1.0.0")}) == 2

    def test_cr_is_rc(self):
        assert compare_versions("1.0.CR1", "1.0-rc1") == 0

    def test_qualifiers_are_case_insensitive(self):
        assert compare_versions("1.0.FINAL", "1.0.final") == 0

    def test_single_letter_without_number_is_plain_qualifier(self):
        # "a" alone is an unknown qualifier, ranked after the known ones
        assert ComparableVersion("1.0-a") > ComparableVersion("1.0.Final")

    def test_segments(self):
        assert ComparableVersion("2.3.1.Final").segments == [2, 3, 1, "final"]
        assert ComparableVersion("1.0-rc1").segments == [1, 0, "rc", 1]

    def test_equals_string(self):
        assert ComparableVersion("2.0") == "2.0"


def test_sort_versions():
    versions = ["1.10", "1.9", "1.0-SNAPSHOT", "1.0", "2.0.0.CR1"]
    assert sort_versions(versions) == ["1.0-SNAPSHOT", "1.0", "1.9", "1.10", "2.0.0.CR1"]
    assert sort_versions(versions, reverse=True)[0] == "2.0.0.CR1"
