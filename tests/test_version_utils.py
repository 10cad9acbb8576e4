"""
Tests for version helpers: conventional commit increments, formatting and tags
"""

import pytest

from kapeta_registry.constants import VersionIncrement
from kapeta_registry.utils.version_utils import (
    VersionFormatter,
    calculate_version_increment,
    compare_versions,
    generate_version_tag,
    highest_version,
    is_valid_version,
    max_increment,
)


class TestCalculateVersionIncrement:
    """Minimum increment from a commit log"""

    def test_empty_log_needs_no_increment(self):
        assert calculate_version_increment([]) == VersionIncrement.NONE

    def test_feat_is_minor(self):
        assert calculate_version_increment(["feat: add login"]) == VersionIncrement.MINOR

    def test_fix_is_patch(self):
        assert calculate_version_increment(["fix: handle empty input"]) == VersionIncrement.PATCH

    def test_scoped_feat_is_minor(self):
        assert calculate_version_increment(["feat(api): add endpoint"]) == VersionIncrement.MINOR

    def test_bang_header_is_major(self):
        assert calculate_version_increment(["feat!: drop old api"]) == VersionIncrement.MAJOR
        assert calculate_version_increment(["refactor(core)!: rename"]) == VersionIncrement.MAJOR

    def test_breaking_change_note_is_major(self):
        message = "fix: rename field\n\nBREAKING CHANGE: field x is now y"
        assert calculate_version_increment([message]) == VersionIncrement.MAJOR

    def test_breaking_change_with_hyphen_is_major(self):
        message = "chore: cleanup\n\nBREAKING-CHANGE: removed flag"
        assert calculate_version_increment([message]) == VersionIncrement.MAJOR

    def test_highest_increment_wins(self):
        log = ["fix: a", "feat: b", "docs: c"]
        assert calculate_version_increment(log) == VersionIncrement.MINOR

    def test_non_conventional_log_is_patch(self):
        log = ["Merge branch 'main'", "docs: update readme", "WIP"]
        assert calculate_version_increment(log) == VersionIncrement.PATCH

    def test_major_stops_scanning(self):
        log = ["feat!: breaking", "fix: small"]
        assert calculate_version_increment(log) == VersionIncrement.MAJOR


class TestMaxIncrement:

    def test_ordering(self):
        assert max_increment(VersionIncrement.PATCH, VersionIncrement.MINOR) == VersionIncrement.MINOR
        assert max_increment(VersionIncrement.MAJOR, VersionIncrement.NONE) == VersionIncrement.MAJOR
        assert max_increment() == VersionIncrement.NONE


class TestVersionFormatter:

    def test_renderings(self):
        formatter = VersionFormatter("1.2.3")
        assert formatter.to_major() == "1"
        assert formatter.to_minor() == "1.2"
        assert formatter.to_full() == "1.2.3"
        assert str(formatter) == "1.2.3"

    def test_prerelease_suffix_is_kept(self):
        formatter = VersionFormatter("1.2.3-beta.1")
        assert formatter.to_major() == "1-beta.1"
        assert formatter.to_minor() == "1.2-beta.1"
        assert formatter.to_full() == "1.2.3-beta.1"

    def test_invalid_version_raises(self):
        with pytest.raises(ValueError):
            VersionFormatter("latest")


class TestVersionTags:

    def test_single_asset_tag(self):
        assert generate_version_tag("1.2.0") == "v1.2.0"

    def test_named_tag(self):
        assert generate_version_tag("1.0.0", "x") == "v1.0.0-x"


class TestCompareVersions:

    def test_semantic_ordering(self):
        assert compare_versions("1.10.0", "1.9.0") == 1
        assert compare_versions("1.0.0", "1.0.0") == 0
        assert compare_versions("0.9.9", "1.0.0") == -1

    def test_highest_version(self):
        assert highest_version(["1.2.0", "1.10.0", "1.9.3"]) == "1.10.0"
        assert highest_version([]) is None

    def test_is_valid_version(self):
        assert is_valid_version("1.2.3")
        assert is_valid_version("1.2.3-rc.1")
        assert not is_valid_version("local")
        assert not is_valid_version("")
