"""Interception of the host engine's own model and plugin loading.

While computing plans the host loads parent POMs, imported POMs and plugin
descriptors on its own. The shim sits in front of that machinery: every
coordinate it sees goes into the registry without provenance (a weak
dependency), and anything that cannot be resolved is replaced by a minimal
placeholder so the host can keep going.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from gleaner.dependency import Dependency
from gleaner.host import PluginDescriptorLoader, RepositoryResolver, try_resolve
from gleaner.model import Coordinate, DependencyDecl, MojoDescriptor, Parent, Plugin
from gleaner.registry import CoordinateRegistry

logger = logging.getLogger(__name__)

POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
STUB_LOCATION = "gleaner stub"


class FileModelSource:
    """A model backed by a resolved POM file."""

    stub = False

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def location(self) -> str:
        return self.path.as_uri()

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8")


class StubModelSource:
    """A generated POM carrying only the identity of a missing artifact."""

    stub = True
    path = None
    location = STUB_LOCATION

    def __init__(self, group_id: str, artifact_id: str, version: str | None, packaging: str) -> None:
        self.group_id = group_id
        self.artifact_id = artifact_id
        self.version = version
        self.packaging = packaging
        self._text = self._render()

    def _render(self) -> str:
        project = ET.Element("project", xmlns=POM_NAMESPACE)
        for tag, value in (
            ("modelVersion", "4.0.0"),
            ("groupId", self.group_id),
            ("artifactId", self.artifact_id),
            ("version", self.version),
            ("packaging", self.packaging),
        ):
            ET.SubElement(project, tag).text = value
        return ET.tostring(project, encoding="unicode")

    def read_text(self) -> str:
        return self._text


ModelSource = FileModelSource | StubModelSource


def placeholder_descriptor(plugin: Plugin, goal: str) -> MojoDescriptor:
    """Descriptor for a plugin that could not be loaded.

    Bound to ``validate`` and requiring no dependency resolution, so the
    execution contributes nothing but the plugin coordinate itself.
    """
    return MojoDescriptor(
        goal=goal,
        group_id=plugin.group_id,
        artifact_id=plugin.artifact_id,
        version=plugin.version,
        phase="validate",
        dependency_resolution_required=None,
        placeholder=True,
    )


class ModelLoadingShim:
    """Registry-aware front for the host's model resolver and plugin manager."""

    def __init__(
        self,
        registry: CoordinateRegistry,
        repository: RepositoryResolver,
        plugin_loader: PluginDescriptorLoader,
    ) -> None:
        self.registry = registry
        self.repository = repository
        self.plugin_loader = plugin_loader

    def _resolve(self, dep: Dependency, coordinate: Coordinate) -> Path | None:
        if dep.is_unresolved:
            return None
        path = try_resolve(self.repository, coordinate)
        self.registry.mark(dep, path is not None)
        return path

    def resolve_parent_model(self, parent: Parent) -> ModelSource:
        coordinate = parent.coordinate()
        dep = self.registry.lookup(coordinate)
        path = self._resolve(dep, coordinate)
        if path is not None:
            logger.debug("Parent POM found at %s", path)
            return FileModelSource(path)
        logger.debug("Stubbed parent POM %s", parent.artifact_id)
        return StubModelSource(parent.group_id, parent.artifact_id, parent.version, "pom")

    def resolve_dependency_model(self, dependency: DependencyDecl) -> ModelSource:
        coordinate = dependency.coordinate()
        dep = self.registry.lookup(coordinate)
        path = self._resolve(dep, coordinate)
        if path is not None:
            logger.debug("Dependency POM found at %s", path)
            return FileModelSource(path)
        logger.warning("Stubbed dependency POM %s", dependency.artifact_id)
        return StubModelSource(
            dependency.group_id, dependency.artifact_id, dependency.version, dependency.type
        )

    def get_mojo_descriptor(self, plugin: Plugin, goal: str) -> MojoDescriptor:
        dep = self.registry.lookup(plugin.coordinate())
        if not dep.is_unresolved:
            try:
                descriptor = self.plugin_loader.get_mojo_descriptor(plugin, goal)
            except Exception as exc:
                logger.debug("Loading plugin %s failed: %s", plugin.artifact_id, exc)
                self.registry.mark(dep, False)
            else:
                self.registry.mark(dep, True)
                return descriptor
        logger.debug("Stubbed plugin %s goal %s", plugin.artifact_id, goal)
        return placeholder_descriptor(plugin, goal)
