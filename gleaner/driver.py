"""Resolution driver: the three-pass walk over the build graph.

Pass 1 (model)
    Register every module's parent.
Pass 2 (plan)
    Compute a setup-only plan per module. The host loads models and plugin
    descriptors on its own and the shim records what it touches.
Pass 3 (exec)
    Compute the full plan per module and register plugins, plugin
    dependencies and module dependencies in the scopes the plan needs.

Each pass ends with a resolution sweep. A failed sweep stops the walk, but
the build requirements gathered so far are still emitted so the missing
pieces show up in the output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from gleaner.dependency import Dependency, ResolutionState
from gleaner.host import BuildHost, ModuleIndex, RepositoryResolver, try_resolve
from gleaner.model import SYSTEM_VERSION, Coordinate, DependencyDecl, Location, Module, Parent, Plugin
from gleaner.registry import CoordinateRegistry
from gleaner.rules import CompatVersionResolver, DependencyFilter
from gleaner.utils import PlanComputationError

logger = logging.getLogger(__name__)

BEGIN_MARKER = "BEGIN MAVEN BUILD DEPENDENCIES"
END_MARKER = "END MAVEN BUILD DEPENDENCIES"
OUTPUT_PREFIX = "BuildRequires:  "

SCOPE_COMPILE = "compile"
SCOPE_PROVIDED = "provided"
SCOPE_RUNTIME = "runtime"
SCOPE_SYSTEM = "system"
SCOPE_TEST = "test"
SCOPE_COMPILE_PLUS_RUNTIME = "compile+runtime"
SCOPE_RUNTIME_PLUS_SYSTEM = "runtime+system"

SCOPE_EXPANSION: dict[str, frozenset[str]] = {
    SCOPE_COMPILE: frozenset({SCOPE_SYSTEM, SCOPE_PROVIDED, SCOPE_COMPILE}),
    SCOPE_RUNTIME: frozenset({SCOPE_COMPILE, SCOPE_RUNTIME}),
    SCOPE_COMPILE_PLUS_RUNTIME: frozenset(
        {SCOPE_SYSTEM, SCOPE_PROVIDED, SCOPE_COMPILE, SCOPE_RUNTIME}
    ),
    SCOPE_RUNTIME_PLUS_SYSTEM: frozenset({SCOPE_SYSTEM, SCOPE_COMPILE, SCOPE_RUNTIME}),
    SCOPE_TEST: frozenset(
        {SCOPE_SYSTEM, SCOPE_PROVIDED, SCOPE_COMPILE, SCOPE_RUNTIME, SCOPE_TEST}
    ),
}


def expand_scope(required: str | None) -> frozenset[str]:
    """Dependency scopes a plugin goal sees for its resolution requirement."""
    if required is None:
        return frozenset()
    return SCOPE_EXPANSION.get(required, frozenset())


@dataclass
class GleanerResult:
    """Outcome of a driver run."""

    success: bool
    build_requires: list[str] = field(default_factory=list)
    failed_stage: str | None = None


class Gleaner:
    """Walks the build, classifies what it finds and emits build requirements."""

    def __init__(
        self,
        host: BuildHost,
        registry: CoordinateRegistry,
        repository: RepositoryResolver,
        module_index: ModuleIndex,
        dependency_filter: DependencyFilter | None = None,
        compat_versions: CompatVersionResolver | None = None,
        goals: list[str] | None = None,
        namespace: str = "",
        output_file: Path | str | None = None,
    ) -> None:
        self.host = host
        self.registry = registry
        self.repository = repository
        self.module_index = module_index
        self.filter = dependency_filter or DependencyFilter()
        self.compat_versions = compat_versions or CompatVersionResolver()
        self.goals = list(goals or [])
        self.namespace = namespace
        self.output_file = Path(output_file) if output_file else None
        self.brs: set[str] = set()

    # -- Registration ---------------------------------------------------------

    def _register(self, coordinate: Coordinate, location: Location | None) -> Dependency | None:
        reactor_module = self.module_index.find(coordinate)
        if reactor_module is not None:
            logger.debug("    --> reactor: %s", reactor_module.artifact_id)
            return None
        dep = self.registry.lookup(coordinate)
        self.registry.record_location(dep, location)
        return dep

    def process_parent(self, parent: Parent) -> Dependency | None:
        return self._register(parent.coordinate(), parent.location)

    def process_dependency(self, dependency: DependencyDecl) -> Dependency | None:
        return self._register(dependency.coordinate(), dependency.location)

    def process_plugin(self, plugin: Plugin) -> Dependency | None:
        return self._register(plugin.coordinate(), plugin.location)

    # -- Resolution sweep -----------------------------------------------------

    def add_dep(self, dep: Dependency) -> None:
        if self.filter.is_filtered(dep):
            logger.warning("Dependency %s is filtered", dep.id)
            return
        version = self.compat_versions.resolve_version_for(dep)
        if version != SYSTEM_VERSION:
            logger.info("Using compat version %s for %s", version, dep.id)
        dep.resolved_version = version
        self.brs.add(dep.capability(self.namespace))

    def resolve_deps(self) -> bool:
        """Resolve pending records and rebuild the output set.

        Returns True only when every known record is resolved.
        """
        self.brs.clear()
        records = self.registry.records()
        unresolved: list[Dependency] = []
        for dep in records:
            if dep.state is ResolutionState.unknown:
                coordinate = dep.coordinate
                logger.debug("Resolving dep %s", coordinate)
                path = try_resolve(self.repository, coordinate)
                self.registry.mark(dep, path is not None)
                if path is not None:
                    logger.debug("Dependency %s found at %s", coordinate, path)
                else:
                    logger.debug("Dependency %s ABSENT", coordinate)
            if dep.is_unresolved:
                unresolved.append(dep)

        unresolved_strong = False
        for dep in records:
            if not dep.is_strong:
                continue
            if dep.is_resolved:
                logger.info("Strong dependency: %s", dep.id)
            else:
                unresolved_strong = True
                logger.error("Unresolved strong dependency: %s", dep.id)
            for location in dep.locations:
                logger.info("  declared at %s", location)
            self.add_dep(dep)

        if not unresolved:
            return True
        if unresolved_strong:
            return False
        for dep in unresolved:
            logger.error("Unresolved weak dependency: %s", dep.id)
            self.add_dep(dep)
        return False

    # -- Passes ---------------------------------------------------------------

    def collect_model_dependencies(self, modules: list[Module]) -> None:
        for module in modules:
            if module.parent is not None:
                self.process_parent(module.parent)

    def collect_plan_dependencies(self, modules: list[Module]) -> None:
        try:
            for module in modules:
                self.host.calculate_plan(module, self.goals, False)
        except Exception as exc:
            raise PlanComputationError(f"Setup plan computation failed: {exc}") from exc

    def collect_execution_dependencies(self, modules: list[Module]) -> None:
        try:
            for module in modules:
                self._collect_module_executions(module)
            self.registry.summarize()
        except Exception as exc:
            raise PlanComputationError(f"Execution plan computation failed: {exc}") from exc

    def _collect_module_executions(self, module: Module) -> None:
        if module.parent is not None:
            self.process_parent(module.parent)
        plan = self.host.calculate_plan(module, self.goals, True)
        logger.info("Build plan for project %s", module.artifact_id)
        phase = ""
        scopes: set[str] = set()
        for execution in plan.executions:
            if execution.lifecycle_phase and execution.lifecycle_phase != phase:
                phase = execution.lifecycle_phase
                logger.info("  Phase %s", phase)
            plugin = execution.plugin
            self.process_plugin(plugin)
            required = execution.mojo_descriptor.dependency_resolution_required
            these_scopes = expand_scope(required)
            scopes |= these_scopes
            logger.info(
                "    Execution: plugin %s goal %s id %s scope %s%s",
                execution.artifact_id,
                execution.goal,
                execution.execution_id,
                required,
                sorted(these_scopes),
            )
            for dependency in plugin.dependencies:
                if dependency.scope in these_scopes:
                    self.process_dependency(dependency)
                else:
                    logger.debug("Plugin dependency scope %s excluded", dependency.scope)
        logger.info("  Required dependency scopes: %s", sorted(scopes))
        for dependency in module.dependencies:
            if dependency.scope in scopes:
                self.process_dependency(dependency)
            else:
                logger.debug("Dependency scope %s excluded", dependency.scope)

    # -- Output ---------------------------------------------------------------

    def output(self) -> list[str]:
        lines = sorted(self.brs)
        logger.info(BEGIN_MARKER + "".join("\n" + OUTPUT_PREFIX + br for br in lines))
        logger.info(END_MARKER)
        if self.output_file is not None:
            try:
                with open(self.output_file, "w", encoding="utf-8") as w:
                    for br in lines:
                        w.write(br)
                        w.write("\n")
            except OSError:
                logger.exception("I/O exception when writing output file %s", self.output_file)
        return lines

    def _finish(self, stage: str | None) -> GleanerResult:
        if stage is not None:
            logger.error("Missing %s dependencies", stage)
        else:
            logger.info("BUILD DEPS READY")
        return GleanerResult(success=stage is None, build_requires=self.output(), failed_stage=stage)

    def execute(self) -> GleanerResult:
        modules = self.host.modules()
        logger.info("Collecting build dependencies of %d module(s)", len(modules))

        self.collect_model_dependencies(modules)
        if not self.resolve_deps():
            return self._finish("model")

        self.collect_plan_dependencies(modules)
        if not self.resolve_deps():
            return self._finish("plan")

        self.collect_execution_dependencies(modules)
        if not self.resolve_deps():
            return self._finish("exec")

        return self._finish(None)
