"""Tests for the model/plugin loading shim."""

from gleaner.model import DependencyDecl, MojoDescriptor, Parent, Plugin
from gleaner.shim import FileModelSource, ModelLoadingShim, StubModelSource, placeholder_descriptor
from tests.fakes import FakeRepository


class RecordingPluginLoader:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def get_mojo_descriptor(self, plugin, goal):
        self.calls.append((plugin.artifact_id, goal))
        if self.fail:
            raise RuntimeError("plugin descriptor unavailable")
        return MojoDescriptor(goal, plugin.group_id, plugin.artifact_id, plugin.version,
                              phase="compile", dependency_resolution_required="compile")


def _shim(registry, repository, loader=None):
    return ModelLoadingShim(registry, repository, loader or RecordingPluginLoader())


class TestParentModel:
    def test_resolved_parent_returns_file_source(self, registry):
        repository = FakeRepository({"g:parent:pom:1"})
        source = _shim(registry, repository).resolve_parent_model(Parent("g", "parent", "1"))
        assert isinstance(source, FileModelSource)
        dep = registry.get("g:parent:pom:1")
        assert dep.is_resolved
        assert not dep.is_strong

    def test_missing_parent_is_stubbed(self, registry, repository):
        source = _shim(registry, repository).resolve_parent_model(Parent("g", "parent", "1"))
        assert isinstance(source, StubModelSource)
        assert source.location == "gleaner stub"
        text = source.read_text()
        assert "<artifactId>parent</artifactId>" in text
        assert "<packaging>pom</packaging>" in text
        assert "<modelVersion>4.0.0</modelVersion>" in text
        assert registry.get("g:parent:pom:1").is_unresolved

    def test_version_range_never_reaches_repository(self, registry, repository):
        source = _shim(registry, repository).resolve_parent_model(Parent("g", "parent", "[1,2)"))
        assert source.stub
        assert repository.calls == []

    def test_unresolved_record_not_retried(self, registry, repository):
        shim = _shim(registry, repository)
        shim.resolve_parent_model(Parent("g", "parent", "1"))
        shim.resolve_parent_model(Parent("g", "parent", "1"))
        assert len(repository.calls_for("g:parent:pom:1")) == 1


class TestDependencyModel:
    def test_missing_bom_is_stubbed_with_type(self, registry, repository, caplog):
        decl = DependencyDecl("g", "bom", "2", type="pom", scope="import")
        with caplog.at_level("WARNING", logger="gleaner.shim"):
            source = _shim(registry, repository).resolve_dependency_model(decl)
        assert "<packaging>pom</packaging>" in source.read_text()
        assert "Stubbed dependency POM bom" in caplog.text
        assert registry.get("g:bom:pom:2").is_unresolved

    def test_resolved_bom(self, registry):
        repository = FakeRepository({"g:bom:pom:2"})
        decl = DependencyDecl("g", "bom", "2", type="pom", scope="import")
        source = _shim(registry, repository).resolve_dependency_model(decl)
        assert not source.stub
        assert registry.get("g:bom:pom:2").is_resolved


class TestMojoDescriptor:
    def test_delegate_descriptor_returned(self, registry, repository):
        loader = RecordingPluginLoader()
        plugin = Plugin("org.apache.maven.plugins", "maven-compiler-plugin", "3.11")
        descriptor = _shim(registry, repository, loader).get_mojo_descriptor(plugin, "compile")
        assert not descriptor.placeholder
        assert descriptor.dependency_resolution_required == "compile"
        assert registry.get("org.apache.maven.plugins:maven-compiler-plugin:jar:3.11").is_resolved

    def test_failure_yields_placeholder(self, registry, repository):
        loader = RecordingPluginLoader(fail=True)
        plugin = Plugin("g", "broken-plugin", "1")
        descriptor = _shim(registry, repository, loader).get_mojo_descriptor(plugin, "run")
        assert descriptor.placeholder
        assert descriptor.phase == "validate"
        assert descriptor.dependency_resolution_required is None
        assert registry.get("g:broken-plugin:jar:1").is_unresolved

    def test_failed_plugin_not_reloaded(self, registry, repository):
        loader = RecordingPluginLoader(fail=True)
        shim = _shim(registry, repository, loader)
        plugin = Plugin("g", "broken-plugin", "1")
        shim.get_mojo_descriptor(plugin, "run")
        shim.get_mojo_descriptor(plugin, "other")
        assert loader.calls == [("broken-plugin", "run")]

    def test_placeholder_descriptor_fields(self):
        descriptor = placeholder_descriptor(Plugin("g", "p", "1"), "go")
        assert (descriptor.goal, descriptor.group_id, descriptor.artifact_id, descriptor.version) == (
            "go", "g", "p", "1",
        )
