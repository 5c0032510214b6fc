"""Build descriptions: a YAML rendition of a multi-module build.

A build description lists the modules of a build together with the plugin
descriptors the build uses. :class:`DescriptorBuildHost` turns it into the
host-engine interface the driver expects. Like a real engine it loads
parent models, imported BOMs and plugin descriptors on its own while it
computes plans, and it does so through the :class:`ModelLoadingShim`.

Example::

    goals: [verify]
    modules:
      - groupId: org.example
        artifactId: app
        version: "1.0"
        parent: {groupId: org.example, artifactId: oss-parent, version: "7"}
        dependencies:
          - {groupId: junit, artifactId: junit, version: "4.13.2", scope: test}
        plugins:
          - groupId: org.apache.maven.plugins
            artifactId: maven-surefire-plugin
            version: "3.2.5"
            executions:
              - {id: default-test, goals: [test]}
    pluginDescriptors:
      - groupId: org.apache.maven.plugins
        artifactId: maven-surefire-plugin
        mojos:
          - {goal: test, phase: test, requiresDependencyResolution: test}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from gleaner.host import ReactorIndex, RepositoryResolver
from gleaner.model import (
    DependencyDecl,
    ExecutionPlan,
    Location,
    MojoDescriptor,
    MojoExecution,
    Module,
    Parent,
    Plugin,
)
from gleaner.shim import ModelLoadingShim
from gleaner.utils import BuildDescriptionError

logger = logging.getLogger(__name__)

CLEAN_LIFECYCLE = ("pre-clean", "clean", "post-clean")
DEFAULT_LIFECYCLE = (
    "validate",
    "initialize",
    "generate-sources",
    "process-sources",
    "generate-resources",
    "process-resources",
    "compile",
    "process-classes",
    "generate-test-sources",
    "process-test-sources",
    "generate-test-resources",
    "process-test-resources",
    "test-compile",
    "process-test-classes",
    "test",
    "prepare-package",
    "package",
    "pre-integration-test",
    "integration-test",
    "post-integration-test",
    "verify",
    "install",
    "deploy",
)
LIFECYCLES = (CLEAN_LIFECYCLE, DEFAULT_LIFECYCLE)


def phases_for_goals(goals: list[str]) -> list[str]:
    """Ordered lifecycle phases run by invoking *goals*."""
    phases: list[str] = []
    for goal in goals:
        for lifecycle in LIFECYCLES:
            if goal in lifecycle:
                for phase in lifecycle[: lifecycle.index(goal) + 1]:
                    if phase not in phases:
                        phases.append(phase)
                break
        else:
            raise BuildDescriptionError(f"Unknown lifecycle phase: {goal}")
    return phases


# ═══════════════════════════════════════════════════════════════════
# SCHEMA
# ═══════════════════════════════════════════════════════════════════

class _LineLoader(yaml.SafeLoader):
    """SafeLoader that records the line of every mapping under ``__line__``.

    Numbers are kept as written, so an unquoted ``version: 1.10`` stays
    ``"1.10"`` instead of becoming the float 1.1.
    """

    def construct_mapping(self, node, deep=False):
        mapping = super().construct_mapping(node, deep=deep)
        mapping["__line__"] = node.start_mark.line + 1
        return mapping

    def construct_number_text(self, node):
        return self.construct_scalar(node)


_LineLoader.add_constructor("tag:yaml.org,2002:int", _LineLoader.construct_number_text)
_LineLoader.add_constructor("tag:yaml.org,2002:float", _LineLoader.construct_number_text)


class _Spec(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    line: int | None = Field(default=None, alias="__line__")


def _as_version(value: Any) -> Any:
    if isinstance(value, float):
        raise ValueError(f"version {value!r} must be quoted")
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


Version = Annotated[str, BeforeValidator(_as_version)]


class DependencySpec(_Spec):
    group_id: str = Field(..., alias="groupId")
    artifact_id: str = Field(..., alias="artifactId")
    version: Version | None = None
    type: str = "jar"
    classifier: str = ""
    scope: str = "compile"


class ParentSpec(_Spec):
    group_id: str = Field(..., alias="groupId")
    artifact_id: str = Field(..., alias="artifactId")
    version: Version


class ExecutionSpec(_Spec):
    id: str = "default"
    phase: str | None = None
    goals: list[str] = Field(default_factory=list)


class PluginSpec(_Spec):
    group_id: str = Field(default="org.apache.maven.plugins", alias="groupId")
    artifact_id: str = Field(..., alias="artifactId")
    version: Version | None = None
    dependencies: list[DependencySpec] = Field(default_factory=list)
    executions: list[ExecutionSpec] = Field(default_factory=list)


class MojoSpec(_Spec):
    goal: str
    phase: str | None = None
    requires_dependency_resolution: str | None = Field(
        default=None, alias="requiresDependencyResolution"
    )


class PluginDescriptorSpec(_Spec):
    group_id: str = Field(default="org.apache.maven.plugins", alias="groupId")
    artifact_id: str = Field(..., alias="artifactId")
    mojos: list[MojoSpec] = Field(default_factory=list)


class ModuleSpec(_Spec):
    group_id: str | None = Field(default=None, alias="groupId")
    artifact_id: str = Field(..., alias="artifactId")
    version: Version | None = None
    packaging: str = "jar"
    parent: ParentSpec | None = None
    dependency_management: list[DependencySpec] = Field(
        default_factory=list, alias="dependencyManagement"
    )
    dependencies: list[DependencySpec] = Field(default_factory=list)
    plugins: list[PluginSpec] = Field(default_factory=list)


class BuildDescription(_Spec):
    """Root of a build description file."""

    goals: list[str] = Field(default_factory=list)
    modules: list[ModuleSpec] = Field(..., min_length=1)
    plugin_descriptors: list[PluginDescriptorSpec] = Field(
        default_factory=list, alias="pluginDescriptors"
    )


def load_build_description(path: Path | str) -> tuple[BuildDescription, str]:
    """Parse and validate a build description file.

    Returns the description and the source URI used for declaration sites.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.load(f, Loader=_LineLoader)
        return BuildDescription.model_validate(data or {}), path.resolve().as_uri()
    except (yaml.YAMLError, ValidationError) as exc:
        raise BuildDescriptionError(f"Invalid build description {path}: {exc}") from exc


# ═══════════════════════════════════════════════════════════════════
# CONVERSION
# ═══════════════════════════════════════════════════════════════════

def _location(spec: _Spec, source: str | None) -> Location | None:
    if spec.line is None:
        return None
    return Location(source=source, line=spec.line)


def _dependency(spec: DependencySpec, source: str | None) -> DependencyDecl:
    return DependencyDecl(
        group_id=spec.group_id,
        artifact_id=spec.artifact_id,
        version=spec.version,
        type=spec.type,
        classifier=spec.classifier,
        scope=spec.scope,
        location=_location(spec, source),
    )


def build_modules(description: BuildDescription, source: str | None = None) -> list[Module]:
    """Convert module specs into build modules.

    Group and version fall back to the parent's, and dependencies without a
    version take it from the module's managed dependencies, then from those
    of parents that are modules of the same build.
    """
    modules: list[Module] = []
    managed_by_module: dict[tuple[str, str, str], dict[tuple[str, str], str]] = {}
    for spec in description.modules:
        parent = None
        if spec.parent is not None:
            parent = Parent(
                group_id=spec.parent.group_id,
                artifact_id=spec.parent.artifact_id,
                version=spec.parent.version,
                location=_location(spec.parent, source),
            )
        group_id = spec.group_id or (parent.group_id if parent else None)
        version = spec.version or (parent.version if parent else None)
        if group_id is None or version is None:
            raise BuildDescriptionError(
                f"Module {spec.artifact_id} needs a groupId and version or a parent"
            )

        managed: dict[tuple[str, str], str] = {}
        if parent is not None:
            managed.update(
                managed_by_module.get((parent.group_id, parent.artifact_id, parent.version), {})
            )
        for dm in spec.dependency_management:
            if dm.scope != "import" and dm.version:
                managed[(dm.group_id, dm.artifact_id)] = dm.version
        managed_by_module[(group_id, spec.artifact_id, version)] = managed

        dependencies = []
        for dep_spec in spec.dependencies:
            dependency = _dependency(dep_spec, source)
            if dependency.version is None:
                dependency.version = managed.get((dependency.group_id, dependency.artifact_id))
            dependencies.append(dependency)

        plugins = [
            Plugin(
                group_id=plugin_spec.group_id,
                artifact_id=plugin_spec.artifact_id,
                version=plugin_spec.version,
                dependencies=[_dependency(d, source) for d in plugin_spec.dependencies],
                location=_location(plugin_spec, source),
            )
            for plugin_spec in spec.plugins
        ]

        modules.append(
            Module(
                group_id=group_id,
                artifact_id=spec.artifact_id,
                version=version,
                packaging=spec.packaging,
                parent=parent,
                dependencies=dependencies,
                managed_imports=[
                    _dependency(dm, source)
                    for dm in spec.dependency_management
                    if dm.scope == "import"
                ],
                plugins=plugins,
                location=_location(spec, source),
            )
        )
    return modules


# ═══════════════════════════════════════════════════════════════════
# HOST
# ═══════════════════════════════════════════════════════════════════

class DescriptorPluginLoader:
    """Loads mojo descriptors from the description's plugin catalog.

    The plugin artifact itself must be resolvable, as it would be for a real
    plugin manager.
    """

    def __init__(self, description: BuildDescription, repository: RepositoryResolver) -> None:
        self.repository = repository
        self._mojos: dict[tuple[str, str, str], MojoSpec] = {}
        for descriptor in description.plugin_descriptors:
            for mojo in descriptor.mojos:
                self._mojos[(descriptor.group_id, descriptor.artifact_id, mojo.goal)] = mojo

    def get_mojo_descriptor(self, plugin: Plugin, goal: str) -> MojoDescriptor:
        self.repository.resolve(plugin.coordinate())
        mojo = self._mojos.get((plugin.group_id, plugin.artifact_id, goal))
        if mojo is None:
            raise BuildDescriptionError(
                f"Could not find goal '{goal}' in plugin {plugin.group_id}:{plugin.artifact_id}"
            )
        return MojoDescriptor(
            goal=goal,
            group_id=plugin.group_id,
            artifact_id=plugin.artifact_id,
            version=plugin.version,
            phase=mojo.phase,
            dependency_resolution_required=mojo.requires_dependency_resolution,
        )


class DescriptorBuildHost:
    """Host engine over a build description.

    Plan computation loads parents and imported BOMs that are not part of
    the build, then looks up the descriptor of every declared goal, all
    through the shim.
    """

    def __init__(
        self,
        modules: list[Module],
        shim: ModelLoadingShim,
        reactor: ReactorIndex | None = None,
    ) -> None:
        self._modules = modules
        self.shim = shim
        self.reactor = reactor or ReactorIndex(modules)
        self._specs: dict[tuple[str, str, str], dict[tuple[str, str], list[ExecutionSpec]]] = {}

    @classmethod
    def from_description(
        cls,
        description: BuildDescription,
        source: str | None,
        shim: ModelLoadingShim,
    ) -> DescriptorBuildHost:
        host = cls(build_modules(description, source), shim)
        for module, spec in zip(host._modules, description.modules):
            host._specs[(module.group_id, module.artifact_id, module.version)] = {
                (p.group_id, p.artifact_id): p.executions for p in spec.plugins
            }
        return host

    def modules(self) -> list[Module]:
        return list(self._modules)

    def _load_models(self, module: Module) -> None:
        parent = module.parent
        if parent is not None and self.reactor.find(parent.coordinate()) is None:
            source = self.shim.resolve_parent_model(parent)
            logger.debug("Parent model of %s from %s", module.artifact_id, source.location)
        for imported in module.managed_imports:
            if self.reactor.find(imported.coordinate()) is None:
                self.shim.resolve_dependency_model(imported)

    def calculate_plan(self, module: Module, goals: list[str], full: bool) -> ExecutionPlan:
        phases = phases_for_goals(goals)
        self._load_models(module)
        executions_by_plugin = self._specs.get(
            (module.group_id, module.artifact_id, module.version), {}
        )
        bound: list[MojoExecution] = []
        for plugin in module.plugins:
            for execution_spec in executions_by_plugin.get((plugin.group_id, plugin.artifact_id), []):
                for goal in execution_spec.goals:
                    descriptor = self.shim.get_mojo_descriptor(plugin, goal)
                    phase = execution_spec.phase or descriptor.phase
                    if phase not in phases:
                        logger.debug("Goal %s of %s not bound to a requested phase", goal, plugin.artifact_id)
                        continue
                    bound.append(
                        MojoExecution(
                            plugin=plugin,
                            goal=goal,
                            execution_id=execution_spec.id,
                            lifecycle_phase=phase,
                            mojo_descriptor=descriptor,
                        )
                    )
        bound.sort(key=lambda execution: phases.index(execution.lifecycle_phase))
        logger.debug(
            "%s plan for %s: %d execution(s)",
            "Full" if full else "Setup",
            module.artifact_id,
            len(bound),
        )
        return ExecutionPlan(executions=bound)
