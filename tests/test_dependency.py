"""Tests for capability formatting and dependency records."""

import pytest

from gleaner.dependency import (
    UNKNOWN_LOCATION,
    Dependency,
    ResolutionState,
    describe_location,
    format_capability,
)
from gleaner.model import Coordinate, Location


# ============================================================================
# format_capability
# ============================================================================


class TestFormatCapability:
    def test_plain_jar_system_version(self):
        assert format_capability("x", "y", "jar", "", "SYSTEM") == "mvn(x:y)"

    def test_custom_extension_keeps_trailing_colon(self):
        assert format_capability("x", "y", "pom", "", "SYSTEM") == "mvn(x:y:pom:)"

    def test_classifier_with_default_extension(self):
        assert format_capability("x", "y", "jar", "tests", "1.0") == "mvn(x:y::tests:1.0)"

    def test_custom_version_only(self):
        assert format_capability("x", "y", "jar", "", "1.2") == "mvn(x:y:1.2)"

    def test_extension_classifier_and_version(self):
        assert format_capability("x", "y", "zip", "dist", "3") == "mvn(x:y:zip:dist:3)"

    def test_extension_and_classifier_system_version(self):
        assert format_capability("x", "y", "zip", "dist", "SYSTEM") == "mvn(x:y:zip:dist:)"

    def test_package_version_suffix(self):
        assert format_capability("x", "y", "jar", "", "SYSTEM", "1.0-2") == "mvn(x:y) = 1.0-2"

    def test_namespace_prefix(self):
        result = format_capability("x", "y", "jar", "", "SYSTEM", None, "maven4")
        assert result == "maven4-mvn(x:y)"

    @pytest.mark.parametrize("namespace", [None, "", "   "])
    def test_blank_namespace_ignored(self, namespace):
        assert format_capability("x", "y", "jar", "", "SYSTEM", None, namespace) == "mvn(x:y)"

    def test_empty_package_version_still_appended(self):
        assert format_capability("x", "y", "jar", "", "SYSTEM", "") == "mvn(x:y) = "


# ============================================================================
# Locations
# ============================================================================


class TestDescribeLocation:
    def test_missing_location(self):
        assert describe_location(None) == UNKNOWN_LOCATION

    def test_missing_source(self):
        assert describe_location(Location(source=None, line=7)) == "UNKNOWN line 7"

    def test_file_scheme_stripped(self):
        location = Location(source="file:///src/app/pom.xml", line=12)
        assert describe_location(location) == "/src/app/pom.xml line 12"

    def test_other_scheme_kept(self):
        location = Location(source="jar:file:/x.jar!/pom.xml", line=3)
        assert describe_location(location) == "jar:file:/x.jar!/pom.xml line 3"


# ============================================================================
# Dependency
# ============================================================================


class TestDependency:
    def test_identity_from_coordinate(self):
        dep = Dependency(Coordinate("g", "a", "pom", "", "1"))
        assert dep.id == "g:a:pom:1"
        assert dep.state is ResolutionState.unknown
        assert dep.resolved_version == "SYSTEM"

    def test_weak_until_found(self):
        dep = Dependency(Coordinate("g", "a"))
        assert not dep.is_strong
        dep.found_at(Location("pom.xml", 4))
        assert dep.is_strong

    def test_locations_sorted_and_deduplicated(self):
        dep = Dependency(Coordinate("g", "a"))
        dep.found_at(Location("b.xml", 1))
        dep.found_at(Location("a.xml", 2))
        dep.found_at(Location("b.xml", 1))
        assert dep.locations == ["a.xml line 2", "b.xml line 1"]

    def test_mark_only_once(self):
        dep = Dependency(Coordinate("g", "a"))
        dep.mark(False)
        dep.mark(True)
        assert dep.is_unresolved

    def test_capability_uses_resolved_version(self):
        dep = Dependency(Coordinate("g", "a", "jar", "", "1.0"))
        assert dep.capability() == "mvn(g:a)"
        dep.resolved_version = "5"
        assert dep.capability("ns") == "ns-mvn(g:a:5)"

    def test_capability_keeps_classifier(self):
        dep = Dependency(Coordinate("g", "a", "jar", "tests", "1.0"))
        assert dep.capability() == "mvn(g:a::tests:)"
