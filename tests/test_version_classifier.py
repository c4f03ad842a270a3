"""Tests for version classification and ordering."""

from functools import cmp_to_key

import pytest

from modserve.errors import InvalidVersion
from modserve.versioning import (
    Latest,
    VersionRecord,
    VersionType,
    classify,
    compare,
    for_sorting,
    is_supported_version,
    latest_of,
)

PSEUDO = "v0.0.0-20190101123456-abcdef123456"


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize("version,expected", [
        ("v1.2.3", VersionType.RELEASE),
        ("v1.2.3+incompatible", VersionType.RELEASE),
        ("v1.2.3-rc.1", VersionType.PRERELEASE),
        ("v2.0.0-beta", VersionType.PRERELEASE),
        (PSEUDO, VersionType.PSEUDO),
        ("v1.2.4-0.20190101123456-abcdef123456", VersionType.PSEUDO),
        ("v1.2.3-pre.0.20190101123456-abcdef123456", VersionType.PSEUDO),
    ])
    def test_classify_versions(self, version, expected):
        """Test each concrete version kind is recognized."""
        assert classify(version) is expected

    def test_latest_sentinel(self):
        """Test the latest sentinel is not a concrete version type."""
        assert classify("latest") is Latest.LATEST

    @pytest.mark.parametrize("version", ["", "1.2.3", "v1.2", "master", "v1.2.3.4", "vx.y.z"])
    def test_invalid_versions(self, version):
        """Test malformed versions raise InvalidVersion."""
        with pytest.raises(InvalidVersion):
            classify(version)

    def test_is_supported_version_never_raises(self):
        """Test is_supported_version reports instead of raising."""
        assert is_supported_version("latest")
        assert is_supported_version("v1.0.0")
        assert not is_supported_version("master")
        assert not is_supported_version("")


class TestCompare:
    """Tests for compare() and for_sorting()."""

    def test_release_beats_prerelease_and_pseudo(self):
        """Test type rank dominates numeric precedence."""
        assert compare("v1.0.0", "v2.0.0-rc.1") == 1
        assert compare("v0.0.1-alpha", "v9.0.0-20190101123456-abcdef123456") == 1
        assert compare("v9.0.0-20190101123456-abcdef123456", "v0.0.1") == -1

    def test_semver_precedence_within_type(self):
        """Test standard precedence among versions of the same type."""
        assert compare("v1.10.0", "v1.9.0") == 1
        assert compare("v1.0.0-alpha", "v1.0.0-alpha.1") == -1
        assert compare("v1.0.0-alpha.1", "v1.0.0-alpha.beta") == -1
        assert compare("v1.0.0-beta.2", "v1.0.0-beta.11") == -1
        assert compare("v1.0.0-11", "v1.0.0-alpha") == -1

    def test_build_metadata_ignored(self):
        """Test +incompatible does not affect precedence."""
        assert compare("v2.0.0+incompatible", "v2.0.0") == 0

    def test_latest_is_not_comparable(self):
        """Test the sentinel cannot be ordered."""
        with pytest.raises(InvalidVersion):
            compare("latest", "v1.0.0")

    def test_for_sorting_agrees_with_compare(self):
        """Test lexicographic order of sort keys matches compare()."""
        versions = [
            "v1.0.0", "v1.0.0-alpha", "v1.0.0-alpha.1", "v1.0.0-alpha.beta",
            "v1.0.0-beta.2", "v1.0.0-beta.11", "v1.0.0-rc.1", "v1.9.0",
            "v1.10.0", "v2.0.0-rc.1", "v10.0.0", PSEUDO,
            "v1.2.4-0.20190101123456-abcdef123456",
        ]
        by_compare = sorted(versions, key=cmp_to_key(compare))
        by_key = sorted(versions, key=for_sorting)
        assert by_key == by_compare


class TestLatestOf:
    """Tests for latest_of() and VersionRecord."""

    def _record(self, version):
        return VersionRecord("example.com/mod", version, classify(version))

    def test_prefers_release(self):
        """Test a release wins over higher prereleases and pseudo-versions."""
        records = [self._record(v) for v in ("v1.0.0", "v2.0.0-rc.1", "v3.0.0-20190101123456-abcdef123456")]
        assert latest_of(records).version == "v1.0.0"

    def test_falls_back_to_prerelease_then_pseudo(self):
        """Test fallback order when no release exists."""
        records = [self._record(v) for v in ("v2.0.0-rc.1", PSEUDO)]
        assert latest_of(records).version == "v2.0.0-rc.1"
        assert latest_of([self._record(PSEUDO)]).version == PSEUDO

    def test_empty(self):
        """Test no records yields None."""
        assert latest_of([]) is None

    def test_record_sort_key_computed(self):
        """Test VersionRecord fills in its sort key."""
        record = self._record("v1.2.3")
        assert record.sort_key == for_sorting("v1.2.3")
