"""Tests for settings and property loading."""

import pytest

from gleaner.settings import GleanerSettings, load_properties
from gleaner.utils import ConfigurationError, parse_assignments


class TestGleanerSettings:
    def test_defaults(self):
        settings = GleanerSettings()
        assert settings.output_file is None
        assert settings.goals == ["verify"]
        assert settings.log_level == "INFO"

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GLEANER_OUTPUT_FILE", str(tmp_path / "out.txt"))
        monkeypatch.setenv("GLEANER_NAMESPACE", "ns")
        monkeypatch.setenv("GLEANER_LOG_LEVEL", "debug")
        settings = GleanerSettings()
        assert settings.output_file == tmp_path / "out.txt"
        assert settings.namespace == "ns"
        assert settings.log_level == "DEBUG"


class TestLoadProperties:
    def test_file_and_overrides(self, tmp_path):
        path = tmp_path / "props.yaml"
        path.write_text("gleaner.filter.1: a\ngleaner.filter.2: b\n")
        properties = load_properties(path, {"gleaner.filter.2": "c"})
        assert properties == {"gleaner.filter.1": "a", "gleaner.filter.2": "c"}

    def test_no_file(self):
        assert load_properties(None, {"k": "v"}) == {"k": "v"}

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "props.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            load_properties(path)

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "props.yaml"
        path.write_text("gleaner.filter.1: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Cannot read property file"):
            load_properties(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read property file"):
            load_properties(tmp_path / "absent.yaml")


class TestParseAssignments:
    def test_first_equals_splits(self):
        assert parse_assignments(["gleaner.version.1=a:b=2"]) == {"gleaner.version.1": "a:b=2"}

    def test_bare_key(self):
        assert parse_assignments(["flag"]) == {"flag": ""}

    def test_empty_key(self):
        with pytest.raises(ConfigurationError):
            parse_assignments(["=value"])
