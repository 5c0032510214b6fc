"""Tests for coordinates and artifact types."""

from gleaner.model import Coordinate, DependencyDecl, Parent, Plugin, artifact_type


class TestArtifactType:
    def test_known_types(self):
        assert artifact_type("test-jar") == ("jar", "tests")
        assert artifact_type("maven-plugin") == ("jar", "")
        assert artifact_type("pom") == ("pom", "")

    def test_missing_type_is_jar(self):
        assert artifact_type(None) == ("jar", "")

    def test_unknown_type_is_its_own_extension(self):
        assert artifact_type("nbm") == ("nbm", "")


class TestCoordinate:
    def test_canonical_id_excludes_classifier(self):
        assert Coordinate("g", "a", "jar", "tests", "1").canonical_id == "g:a:jar:1"

    def test_str_includes_classifier(self):
        assert str(Coordinate("g", "a", "jar", "tests", "1")) == "g:a:jar:tests:1"
        assert str(Coordinate("g", "a", "pom", "", "1")) == "g:a:pom:1"

    def test_version_range_detection(self):
        assert Coordinate("g", "a", version="[1.0,2.0)").is_version_range
        assert Coordinate("g", "a", version="(,1.0]").is_version_range
        assert not Coordinate("g", "a", version="1.0").is_version_range

    def test_of_explicit_classifier_wins(self):
        coordinate = Coordinate.of("g", "a", "1", "test-jar", "extra")
        assert coordinate.classifier == "extra"
        assert coordinate.extension == "jar"

    def test_of_missing_version(self):
        assert Coordinate.of("g", "a", None).version == ""


class TestDeclarations:
    def test_parent_is_pom(self):
        assert Parent("g", "p", "3").coordinate() == Coordinate("g", "p", "pom", "", "3")

    def test_plugin_is_jar(self):
        assert Plugin("g", "maven-x-plugin", "1").coordinate().canonical_id == "g:maven-x-plugin:jar:1"

    def test_dependency_type(self):
        decl = DependencyDecl("g", "a", "2", type="test-jar")
        assert decl.coordinate() == Coordinate("g", "a", "jar", "tests", "2")
