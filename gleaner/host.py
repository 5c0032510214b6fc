"""Interfaces to the host build engine and the artifact repository.

The driver only talks to these protocols. ``ReactorIndex`` and
``LocalRepository`` are the stand-alone implementations used by the CLI.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Protocol

from gleaner.model import Coordinate, ExecutionPlan, MojoDescriptor, Module, Plugin
from gleaner.utils import ArtifactNotFound, ResolutionFailure, VersionRangeUnsupported

logger = logging.getLogger(__name__)


class RepositoryResolver(Protocol):
    """Locates artifact files. Raises ``ResolutionFailure`` when it cannot."""

    def resolve(self, coordinate: Coordinate) -> Path:
        ...


class ModuleIndex(Protocol):
    """Lookup of modules that are part of the in-progress build."""

    def find(self, coordinate: Coordinate) -> Module | None:
        ...


class BuildHost(Protocol):
    """The host engine's view of the build."""

    def modules(self) -> list[Module]:
        ...

    def calculate_plan(self, module: Module, goals: list[str], full: bool) -> ExecutionPlan:
        """Compute the execution plan of *module* without running anything.

        A non-full plan only performs setup, which is enough for the host to
        load parent models, imported models and plugin descriptors.
        """
        ...


class PluginDescriptorLoader(Protocol):
    def get_mojo_descriptor(self, plugin: Plugin, goal: str) -> MojoDescriptor:
        ...


class ReactorIndex:
    """Finds build modules by group, artifact and version."""

    def __init__(self, modules: Iterable[Module] = ()) -> None:
        self._modules: dict[tuple[str, str, str], Module] = {}
        for module in modules:
            self.add(module)

    def add(self, module: Module) -> None:
        self._modules[(module.group_id, module.artifact_id, module.version)] = module

    def find(self, coordinate: Coordinate) -> Module | None:
        return self._modules.get(
            (coordinate.group_id, coordinate.artifact_id, coordinate.version)
        )

    def __len__(self) -> int:
        return len(self._modules)


class LocalRepository:
    """Resolves coordinates against a Maven-layout directory tree."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def path_for(self, coordinate: Coordinate) -> Path:
        file_name = f"{coordinate.artifact_id}-{coordinate.version}"
        if coordinate.classifier:
            file_name += f"-{coordinate.classifier}"
        file_name += f".{coordinate.extension}"
        return (
            self.root.joinpath(*coordinate.group_id.split("."))
            / coordinate.artifact_id
            / coordinate.version
            / file_name
        )

    def resolve(self, coordinate: Coordinate) -> Path:
        if not coordinate.version:
            raise ArtifactNotFound(f"No version given for {coordinate}")
        path = self.path_for(coordinate)
        if not path.is_file():
            raise ArtifactNotFound(f"{coordinate} not found at {path}")
        logger.debug("Artifact %s found at %s", coordinate, path)
        return path


def try_resolve(repository: RepositoryResolver, coordinate: Coordinate) -> Path | None:
    """Resolve *coordinate*, returning None on any resolution failure.

    Version ranges fail without consulting the repository.
    """
    try:
        if coordinate.is_version_range:
            raise VersionRangeUnsupported(coordinate)
        return repository.resolve(coordinate)
    except ResolutionFailure as exc:
        logger.debug("Resolution of %s failed: %s", coordinate, exc)
        return None
